"""Featured placement Pydantic schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..models.featured import FeaturedDuration, FeaturedPosition, FeaturedStatus
from .package import TravelSummary


class FeaturedQuoteRequest(BaseModel):
    position: FeaturedPosition
    duration: FeaturedDuration


class FeaturedQuote(BaseModel):
    """Credit cost of a placement before purchase."""

    position: FeaturedPosition
    duration: FeaturedDuration
    duration_days: int
    base_credits: int
    multiplier: float
    credits: int = Field(..., description="ceil(base_credits * multiplier)")


class PurchaseFeaturedRequest(BaseModel):
    """Request schema for buying a featured placement with credits."""

    travel_id: UUID
    package_id: UUID
    position: FeaturedPosition
    duration: FeaturedDuration


class FeaturedIdRequest(BaseModel):
    featured_id: UUID


class ListDisplayRequest(BaseModel):
    position: FeaturedPosition = FeaturedPosition.HOME
    limit: int = Field(10, ge=1, le=50)


class ListTravelFeaturedRequest(BaseModel):
    travel_id: UUID
    status: Optional[FeaturedStatus] = None


class FeaturedPackage(BaseModel):
    """Featured placement response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    package_id: UUID
    travel_id: UUID
    position: FeaturedPosition
    priority: int
    credits_used: int
    start_date: datetime
    end_date: datetime
    status: FeaturedStatus
    created_at: datetime


class FeaturedDisplayItem(FeaturedPackage):
    """Placement joined with what the storefront card shows."""

    package_name: str
    package_type: str
    duration_days: int
    hotel_star: int
    lowest_price: Optional[int] = None
    travel: TravelSummary


class FeaturedList(BaseModel):
    items: list[FeaturedPackage]


class FeaturedDisplayList(BaseModel):
    position: FeaturedPosition
    items: list[FeaturedDisplayItem]


class FeaturedStats(BaseModel):
    total: int
    active: int
    active_by_position: dict[str, int]
    total_credits_used: int
