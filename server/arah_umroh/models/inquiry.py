"""Package inquiry (lead) model definition."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base
from .mixins import TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from .package import Package


class InquiryStatus(str, Enum):
    PENDING = "pending"
    CONTACTED = "contacted"
    CONVERTED = "converted"
    CANCELLED = "cancelled"


class PackageInquiry(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A prospective pilgrim's request to be contacted about a package."""

    __tablename__ = "package_inquiries"

    package_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("packages.id", ondelete="CASCADE"), nullable=False, index=True
    )
    departure_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid, ForeignKey("departures.id", ondelete="SET NULL"), nullable=True
    )
    travel_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("travels.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True, index=True)

    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str] = mapped_column(String(15), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    message: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    number_of_people: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=InquiryStatus.PENDING.value, index=True
    )
    agent_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    contacted_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    __table_args__ = (
        CheckConstraint("number_of_people >= 1 AND number_of_people <= 50", name="ck_inquiry_people_range"),
    )

    package: Mapped["Package"] = relationship("Package")

    def __repr__(self) -> str:
        return f"<PackageInquiry(id={self.id}, package_id={self.package_id}, status={self.status})>"
