"""
Pydantic schemas for user-related requests and responses.
"""
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field

HANDLE_PATTERN = "^[a-zA-Z0-9_.]+$"


class UserBase(BaseModel):
    """Base user schema with common fields."""
    username: str = Field(..., min_length=1, max_length=15, pattern=HANDLE_PATTERN)
    email: EmailStr
    name: str = Field(default="", max_length=15)


class UserCreate(UserBase):
    """Schema for registering the profile of the authenticated account."""
    profile_image: str | None = Field(None, max_length=500)
    bio: str | None = Field(None, max_length=250)


class UserUpdate(BaseModel):
    """Schema for updating user information."""
    name: str | None = Field(None, max_length=15)
    profile_image: str | None = Field(None, max_length=500)
    bio: str | None = Field(None, max_length=250)


class UserResponse(UserBase):
    """Schema for the current user's own profile."""
    id: str
    profile_image: str | None = None
    bio: str | None = None
    created_at: datetime
    updated_at: datetime

    administered_shelters: list[str] = Field(default_factory=list, description="Shelters where the user is admin")
    joined_shelters: list[str] = Field(default_factory=list, description="Shelters where the user is a member")

    model_config = {"from_attributes": True}


class UserPublic(BaseModel):
    """Public user information (limited fields)."""
    id: str
    username: str
    name: str
    profile_image: str | None = None
    bio: str | None = None

    model_config = {"from_attributes": True}


class ShelterSummary(BaseModel):
    id: str
    name: str
    handle: str

    model_config = {"from_attributes": True}


class UserDeletionRequest(BaseModel):
    """
    Body for deleting the current account.

    transfers maps shelter id -> id of the member who becomes its admin.
    Shelters where the user is the only admin and that have no valid
    transfer entry are deleted along with their animals and tasks.
    """
    confirm: bool = Field(default=False, description="Confirm deletion of shelters left without an admin")
    transfers: dict[str, str] | None = Field(None, description="Replacement admin per shelter")


class UserDeletionResponse(BaseModel):
    message: str
    preserved_shelters: list[str]
    deleted_shelters: list[str]
