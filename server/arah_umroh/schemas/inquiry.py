"""Package inquiry Pydantic schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from ..models.inquiry import InquiryStatus
from .common import PageInfo, PageRequest


class CreateInquiryRequest(BaseModel):
    """Request schema for asking a travel to get in touch about a package."""

    package_id: UUID
    departure_id: Optional[UUID] = None
    full_name: str = Field(..., min_length=2, max_length=100)
    phone: str = Field(..., pattern=r"^[0-9+\-\s]{10,15}$", description="10-15 digits, +, - or spaces")
    email: Optional[EmailStr] = None
    message: Optional[str] = Field(None, max_length=500)
    number_of_people: int = Field(1, ge=1, le=50)


class ListTravelInquiriesRequest(PageRequest):
    travel_id: UUID
    status: Optional[InquiryStatus] = None


class UpdateInquiryStatusRequest(BaseModel):
    inquiry_id: UUID
    status: InquiryStatus
    agent_notes: Optional[str] = Field(None, max_length=2000)


class TravelIdRequest(BaseModel):
    travel_id: UUID


class PackageInquiry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    package_id: UUID
    departure_id: Optional[UUID] = None
    travel_id: UUID
    user_id: Optional[str] = None
    full_name: str
    phone: str
    email: Optional[str] = None
    message: Optional[str] = None
    number_of_people: int
    status: InquiryStatus
    agent_notes: Optional[str] = None
    contacted_at: Optional[datetime] = None
    created_at: datetime


class PackageInquiryList(PageInfo):
    items: list[PackageInquiry]


class InquiryStats(BaseModel):
    travel_id: UUID
    total: int
    by_status: dict[str, int]
    conversion_rate: float = Field(..., description="Converted inquiries as a percentage of all inquiries")
