"""Agent membership Pydantic schemas."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..models.membership import MembershipStatus
from .common import PageInfo, PageRequest


class PlanId(str, Enum):
    FREE = "free"
    PRO = "pro"
    PREMIUM = "premium"


class MembershipPlan(BaseModel):
    """A static agent plan and the limits it grants."""

    id: PlanId
    name: str
    price: int = Field(..., ge=0, description="Price in rupiah")
    max_packages: int = Field(..., ge=0, description="Active packages allowed")
    monthly_credits: int = Field(..., ge=0, description="Credits granted on approval")
    features: list[str]


class MembershipPlanList(BaseModel):
    items: list[MembershipPlan]


class RequestMembershipRequest(BaseModel):
    travel_id: UUID
    plan: PlanId
    payment_proof_url: Optional[str] = Field(None, max_length=1024)
    notes: Optional[str] = Field(None, max_length=500)


class ReviewMembershipRequest(BaseModel):
    membership_id: UUID
    approve: bool
    notes: Optional[str] = Field(None, max_length=500)
    duration_days: int = Field(30, ge=1, le=366)


class TravelIdRequest(BaseModel):
    travel_id: UUID


class ListMembershipsRequest(PageRequest):
    status: Optional[MembershipStatus] = None


class Membership(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    travel_id: UUID
    plan_type: PlanId
    status: MembershipStatus
    amount: int
    payment_proof_url: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    notes: Optional[str] = None
    reviewed_by: Optional[str] = None
    created_at: datetime


class MembershipList(PageInfo):
    items: list[Membership]


class CurrentMembership(BaseModel):
    """Effective plan of a travel plus its most recent membership record."""

    travel_id: UUID
    plan: MembershipPlan
    latest: Optional[Membership] = Field(None, description="Most recent membership row of any status")
    is_pro: bool
    is_premium: bool
    days_remaining: int = Field(..., ge=0)
    active_packages: int = Field(..., ge=0)
