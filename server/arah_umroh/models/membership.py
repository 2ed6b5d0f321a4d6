"""Agent membership model definition."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from sqlalchemy import BigInteger, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base
from .mixins import TimestampMixin, UUIDPrimaryKeyMixin


class MembershipStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    REJECTED = "rejected"
    EXPIRED = "expired"


class Membership(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A travel's request for, or grant of, a paid membership plan."""

    __tablename__ = "memberships"

    travel_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("travels.id", ondelete="CASCADE"), nullable=False, index=True
    )
    plan_type: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=MembershipStatus.PENDING.value, index=True
    )
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    payment_proof_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    start_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    end_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True, index=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reviewed_by: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)

    def __repr__(self) -> str:
        return f"<Membership(id={self.id}, travel_id={self.travel_id}, plan={self.plan_type}, status={self.status})>"
