"""Travel-related Pydantic schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from .common import PageInfo, PageRequest, reject_null

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class CreateTravelRequest(BaseModel):
    """Request schema for registering a travel agency."""

    name: str = Field(..., min_length=2, max_length=255, description="Agency name")
    slug: Optional[str] = Field(
        None, min_length=2, max_length=255, pattern=SLUG_PATTERN,
        description="Storefront slug; derived from the name when omitted"
    )
    description: Optional[str] = Field(None, max_length=5000)
    logo_url: Optional[str] = Field(None, max_length=1024)
    address: Optional[str] = Field(None, max_length=1000)
    phone: Optional[str] = Field(None, max_length=32)
    whatsapp: Optional[str] = Field(None, max_length=32)
    email: Optional[EmailStr] = None


class UpdateTravelRequest(BaseModel):
    """Partial update of the owner-editable travel fields."""

    travel_id: UUID = Field(..., description="Travel to update")
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    logo_url: Optional[str] = Field(None, max_length=1024)
    address: Optional[str] = Field(None, max_length=1000)
    phone: Optional[str] = Field(None, max_length=32)
    whatsapp: Optional[str] = Field(None, max_length=32)
    email: Optional[EmailStr] = None

    @field_validator("name")
    @classmethod
    def fields_not_null(cls, value):
        return reject_null(value)


class TravelIdRequest(BaseModel):
    travel_id: UUID = Field(..., description="Travel ID")


class GetTravelBySlugRequest(BaseModel):
    slug: str = Field(..., min_length=1, max_length=255, description="Storefront slug")


class VerifyTravelRequest(BaseModel):
    travel_id: UUID = Field(..., description="Travel to verify")
    verified: bool = Field(True, description="New verified flag")


class ListTravelsRequest(PageRequest):
    """Request schema for listing travels."""

    verified_only: bool = Field(False, description="Only verified travels")
    search: Optional[str] = Field(None, max_length=100, description="Name substring")
    include_inactive: bool = Field(False, description="Include deactivated travels (admin only)")


class Travel(BaseModel):
    """Travel response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    owner_id: str
    name: str
    slug: str
    description: Optional[str] = None
    logo_url: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    email: Optional[str] = None
    rating: float = Field(..., ge=0, le=5)
    review_count: int
    verified: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime


class TravelList(PageInfo):
    items: list[Travel]
