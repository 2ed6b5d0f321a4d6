"""Featured package placement model definition."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base
from .mixins import TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from .package import Package
    from .travel import Travel


class FeaturedPosition(str, Enum):
    HOME = "home"
    CATEGORY = "category"
    SEARCH = "search"


class FeaturedDuration(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class FeaturedStatus(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class FeaturedPackage(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A paid, time-bound promotion slot for a package."""

    __tablename__ = "featured_packages"

    package_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("packages.id", ondelete="CASCADE"), nullable=False, index=True
    )
    travel_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("travels.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    credits_used: Mapped[int] = mapped_column(Integer, nullable=False)
    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=FeaturedStatus.ACTIVE.value, index=True
    )

    __table_args__ = (
        CheckConstraint("credits_used >= 0", name="ck_featured_credits_non_negative"),
        CheckConstraint("end_date > start_date", name="ck_featured_end_after_start"),
    )

    package: Mapped["Package"] = relationship("Package")
    travel: Mapped["Travel"] = relationship("Travel")

    def __repr__(self) -> str:
        return (
            f"<FeaturedPackage(id={self.id}, package_id={self.package_id}, "
            f"position={self.position}, status={self.status}, end={self.end_date})>"
        )
