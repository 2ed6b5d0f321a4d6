"""Pilgrim premium subscription model definitions."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from sqlalchemy import JSON, BigInteger, Boolean, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base
from .mixins import TimestampMixin, UUIDPrimaryKeyMixin


class SubscriptionStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    REJECTED = "rejected"
    EXPIRED = "expired"


class SubscriptionPlan(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A yearly premium plan sold to pilgrims."""

    __tablename__ = "subscription_plans"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price_yearly: Mapped[int] = mapped_column(BigInteger, nullable=False)
    features: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<SubscriptionPlan(id={self.id}, name='{self.name}', price={self.price_yearly})>"


class UserSubscription(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """The single subscription record of a pilgrim."""

    __tablename__ = "user_subscriptions"

    user_id: Mapped[str] = mapped_column(String(128), nullable=False, unique=True, index=True)
    plan_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("subscription_plans.id", ondelete="RESTRICT"), nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=SubscriptionStatus.PENDING.value, index=True
    )
    payment_proof_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    payment_amount: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    payment_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    verified_by: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    verified_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    start_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    end_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True, index=True)
    admin_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    plan: Mapped["SubscriptionPlan"] = relationship("SubscriptionPlan")

    def __repr__(self) -> str:
        return f"<UserSubscription(user_id='{self.user_id}', status={self.status}, end={self.end_date})>"
