"""Package and Departure model definitions."""

from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base
from .mixins import TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from .travel import Travel


class PackageType(str, Enum):
    UMROH = "umroh"
    HAJI_REGULER = "haji_reguler"
    HAJI_PLUS = "haji_plus"
    HAJI_FURODA = "haji_furoda"


class FlightType(str, Enum):
    DIRECT = "direct"
    TRANSIT = "transit"


class MealType(str, Enum):
    FULLBOARD = "fullboard"
    HALFBOARD = "halfboard"
    BREAKFAST = "breakfast"


class DepartureStatus(str, Enum):
    """Departure availability status."""
    AVAILABLE = "available"
    LIMITED = "limited"
    FULL = "full"
    WAITLIST = "waitlist"
    CANCELLED = "cancelled"


class Package(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """An umroh or haji itinerary offered by a travel."""

    __tablename__ = "packages"

    travel_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("travels.id", ondelete="CASCADE"), nullable=False, index=True
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    package_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PackageType.UMROH.value, index=True
    )
    duration_days: Mapped[int] = mapped_column(Integer, nullable=False)

    hotel_makkah: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    hotel_madinah: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    hotel_star: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    airline: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    flight_type: Mapped[str] = mapped_column(String(20), nullable=False, default=FlightType.DIRECT.value)
    meal_type: Mapped[str] = mapped_column(String(20), nullable=False, default=MealType.FULLBOARD.value)

    facilities: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    images: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)

    __table_args__ = (
        CheckConstraint("duration_days >= 1", name="ck_package_duration_positive"),
        CheckConstraint("hotel_star >= 1 AND hotel_star <= 5", name="ck_package_hotel_star_range"),
    )

    travel: Mapped["Travel"] = relationship("Travel", back_populates="packages")
    departures: Mapped[list["Departure"]] = relationship(
        "Departure",
        back_populates="package",
        cascade="all, delete-orphan",
        order_by="Departure.departure_date",
    )

    def __repr__(self) -> str:
        return f"<Package(id={self.id}, name='{self.name}', type={self.package_type})>"


class Departure(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A dated departure of a package with its own price and seat stock."""

    __tablename__ = "departures"

    package_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("packages.id", ondelete="CASCADE"), nullable=False, index=True
    )

    departure_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    return_date: Mapped[date] = mapped_column(Date, nullable=False)

    # Prices in rupiah
    price: Mapped[int] = mapped_column(BigInteger, nullable=False)
    original_price: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)

    total_seats: Mapped[int] = mapped_column(Integer, nullable=False)
    available_seats: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=DepartureStatus.AVAILABLE.value, index=True
    )

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_departure_price_non_negative"),
        CheckConstraint("total_seats >= 0", name="ck_departure_total_seats_non_negative"),
        CheckConstraint("available_seats >= 0", name="ck_departure_available_non_negative"),
        CheckConstraint("available_seats <= total_seats", name="ck_departure_available_lte_total"),
        CheckConstraint("return_date > departure_date", name="ck_departure_return_after_departure"),
    )

    package: Mapped["Package"] = relationship("Package", back_populates="departures")

    def __repr__(self) -> str:
        return (
            f"<Departure(id={self.id}, package_id={self.package_id}, "
            f"date={self.departure_date}, available={self.available_seats}/{self.total_seats})>"
        )
