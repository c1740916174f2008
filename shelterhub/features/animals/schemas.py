"""
Pydantic schemas for animal-related requests and responses.
"""
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from shelterhub.features.animals.models import AdoptionStatus, Gender, Size, Species


class AnimalBase(BaseModel):
    """Base animal schema."""
    name: str = Field(..., min_length=1, max_length=100)
    species: Species = Species.DOG
    breed: str = Field(default="Mixed/Unknown", max_length=100)
    description: str | None = None
    age: int | None = Field(None, ge=0)
    gender: Gender
    size: Size = Size.MEDIUM
    color: str | None = Field(None, max_length=50)
    status: AdoptionStatus = AdoptionStatus.AVAILABLE
    sterilized: bool = False
    vaccinated: bool = False
    microchipped: bool = False
    image_url: str | None = Field(None, max_length=500)
    notes: str | None = None


class AnimalCreate(AnimalBase):
    """Schema for registering an animal in a shelter (shelter admins only)."""
    shelter_id: str = Field(..., description="Shelter that will own the animal")
    arrival_date: datetime | None = None


class AnimalUpdate(BaseModel):
    """Schema for updating an animal. The owning shelter can't be changed."""
    name: str | None = Field(None, min_length=1, max_length=100)
    species: Species | None = None
    breed: str | None = Field(None, max_length=100)
    description: str | None = None
    age: int | None = Field(None, ge=0)
    gender: Gender | None = None
    size: Size | None = None
    color: str | None = Field(None, max_length=50)
    status: AdoptionStatus | None = None
    sterilized: bool | None = None
    vaccinated: bool | None = None
    microchipped: bool | None = None
    image_url: str | None = Field(None, max_length=500)
    notes: str | None = None

    @field_validator(
        "name", "species", "breed", "gender", "size", "status",
        "sterilized", "vaccinated", "microchipped",
    )
    @classmethod
    def not_null(cls, v):
        """Required on the animal record; send the field only to change it."""
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class AnimalResponse(AnimalBase):
    """Schema for animal responses."""
    id: str
    shelter_id: str
    created_by_id: str | None = None
    arrival_date: datetime
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
