"""Pilgrim premium subscription Pydantic schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.subscription import SubscriptionStatus
from .common import PageInfo, PageRequest, reject_null


class CreateSubscriptionPlanRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    price_yearly: int = Field(..., ge=0)
    features: list[str] = Field(default_factory=list)
    is_active: bool = True


class UpdateSubscriptionPlanRequest(BaseModel):
    plan_id: UUID
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    price_yearly: Optional[int] = Field(None, ge=0)
    features: Optional[list[str]] = None
    is_active: Optional[bool] = None

    @field_validator("name", "price_yearly", "features", "is_active")
    @classmethod
    def fields_not_null(cls, value):
        return reject_null(value)


class RequestSubscriptionRequest(BaseModel):
    plan_id: UUID
    payment_proof_url: Optional[str] = Field(None, max_length=1024)
    payment_amount: Optional[int] = Field(None, ge=0, description="Defaults to the plan's yearly price")


class VerifySubscriptionRequest(BaseModel):
    subscription_id: UUID
    approve: bool
    admin_notes: Optional[str] = Field(None, max_length=1000)


class ListSubscriptionsRequest(PageRequest):
    status: Optional[SubscriptionStatus] = None


class SubscriptionPlan(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: Optional[str] = None
    price_yearly: int
    features: list[str]
    is_active: bool


class SubscriptionPlanList(BaseModel):
    items: list[SubscriptionPlan]


class UserSubscription(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: str
    plan_id: UUID
    status: SubscriptionStatus
    payment_proof_url: Optional[str] = None
    payment_amount: Optional[int] = None
    payment_date: Optional[datetime] = None
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    admin_notes: Optional[str] = None
    plan: Optional[SubscriptionPlan] = None


class SubscriptionStatusResponse(BaseModel):
    """Caller's subscription (if any) and whether premium is in effect."""

    is_premium: bool
    subscription: Optional[UserSubscription] = None


class UserSubscriptionList(PageInfo):
    items: list[UserSubscription]
