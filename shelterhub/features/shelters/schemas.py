"""
Pydantic schemas for shelter-related requests and responses.
"""
from datetime import datetime
from pydantic import BaseModel, Field, EmailStr, field_validator

from shelterhub.features.shelters.models import MembershipRole


class ShelterBase(BaseModel):
    """Base shelter schema."""
    name: str = Field(..., min_length=1, max_length=255)
    handle: str = Field(
        ..., min_length=1, max_length=50, pattern="^[a-zA-Z0-9_.]+$",
        description="Unique handle: letters, digits, underscores and dots"
    )
    bio: str = Field(default="", max_length=2000)
    image_url: str = Field(default="", max_length=500)
    location: str = Field(default="", max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=20)
    website: str | None = Field(None, max_length=255)
    facebook: str | None = Field(None, max_length=255)
    instagram: str | None = Field(None, max_length=255)
    twitter: str | None = Field(None, max_length=255)


class ShelterCreate(ShelterBase):
    """Schema for creating a shelter. The creator becomes its first admin."""
    pass


class ShelterUpdate(BaseModel):
    """Schema for updating shelter information (admins only)."""
    name: str | None = Field(None, min_length=1, max_length=255)
    bio: str | None = Field(None, max_length=2000)
    image_url: str | None = Field(None, max_length=500)
    location: str | None = Field(None, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=20)
    website: str | None = Field(None, max_length=255)
    facebook: str | None = Field(None, max_length=255)
    instagram: str | None = Field(None, max_length=255)
    twitter: str | None = Field(None, max_length=255)

    @field_validator("name", "bio", "image_url", "location")
    @classmethod
    def not_null(cls, v):
        """These columns can be changed but not cleared."""
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class ShelterResponse(ShelterBase):
    """Schema for shelter responses."""
    id: str
    created_at: datetime
    updated_at: datetime
    admins: list[str] = Field(default_factory=list, description="Ids of admin users")
    members: list[str] = Field(default_factory=list, description="Ids of member users")
    animals: list[str] = Field(default_factory=list, description="Ids of the shelter's animals")
    tasks: list[str] = Field(default_factory=list, description="Ids of the shelter's tasks")

    model_config = {"from_attributes": True}


class ShelterPublic(BaseModel):
    """Public shelter information (limited fields)."""
    id: str
    name: str
    handle: str
    location: str
    image_url: str

    model_config = {"from_attributes": True}


class ShelterMember(BaseModel):
    user_id: str
    username: str
    name: str
    role: MembershipRole
    joined_at: datetime


class PromoteAdminRequest(BaseModel):
    """Schema for granting the admin role."""
    user_id: str = Field(..., description="ID of the user to promote")


class MembershipResponse(BaseModel):
    message: str
    shelter_id: str
    user_id: str
    role: MembershipRole | None = None
