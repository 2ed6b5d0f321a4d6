"""Booking, payment schedule and payment notification model definitions."""

from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
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
    from .package import Departure, Package
    from .travel import Travel


class BookingStatus(str, Enum):
    """Booking lifecycle status."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PAID = "paid"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class PaymentType(str, Enum):
    DP = "dp"
    INSTALLMENT = "installment"
    FINAL = "final"


class ReminderType(str, Enum):
    """Payment reminder kinds, named after days before the due date."""
    H7 = "h7"
    H3 = "h3"
    H1 = "h1"
    OVERDUE = "overdue"


class Booking(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A pilgrim's booking of a package departure."""

    __tablename__ = "bookings"

    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    package_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("packages.id", ondelete="CASCADE"), nullable=False, index=True
    )
    departure_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid, ForeignKey("departures.id", ondelete="SET NULL"), nullable=True, index=True
    )
    # Denormalized from the package for agent dashboards
    travel_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("travels.id", ondelete="CASCADE"), nullable=False, index=True
    )

    booking_code: Mapped[str] = mapped_column(String(16), nullable=False, unique=True, index=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=BookingStatus.PENDING.value, index=True
    )
    number_of_pilgrims: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    total_price: Mapped[int] = mapped_column(BigInteger, nullable=False)
    paid_amount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    remaining_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)

    contact_name: Mapped[str] = mapped_column(String(255), nullable=False)
    contact_phone: Mapped[str] = mapped_column(String(32), nullable=False)
    contact_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    agent_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("number_of_pilgrims >= 1 AND number_of_pilgrims <= 50", name="ck_booking_pilgrims_range"),
        CheckConstraint("total_price >= 0", name="ck_booking_total_non_negative"),
        CheckConstraint("paid_amount >= 0", name="ck_booking_paid_non_negative"),
        CheckConstraint("length(booking_code) > 0", name="ck_booking_code_not_empty"),
    )

    package: Mapped["Package"] = relationship("Package")
    departure: Mapped[Optional["Departure"]] = relationship("Departure")
    travel: Mapped["Travel"] = relationship("Travel")
    payment_schedules: Mapped[list["PaymentSchedule"]] = relationship(
        "PaymentSchedule",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="PaymentSchedule.due_date",
    )

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, code='{self.booking_code}', status={self.status}, "
            f"paid={self.paid_amount}/{self.total_price})>"
        )


class PaymentSchedule(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """One scheduled payment (down payment, installment or final) of a booking."""

    __tablename__ = "payment_schedules"

    booking_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    payment_type: Mapped[str] = mapped_column(String(20), nullable=False)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    paid_amount: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    payment_proof_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Reminder bookkeeping so each reminder is sent once
    reminder_sent_h7: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    reminder_sent_h3: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    reminder_sent_h1: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    reminder_sent_overdue: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_payment_schedule_amount_positive"),
    )

    booking: Mapped["Booking"] = relationship("Booking", back_populates="payment_schedules")

    def __repr__(self) -> str:
        return (
            f"<PaymentSchedule(id={self.id}, booking_id={self.booking_id}, type={self.payment_type}, "
            f"amount={self.amount}, due={self.due_date}, paid={self.is_paid})>"
        )


class PaymentNotification(UUIDPrimaryKeyMixin, Base):
    """In-app notification produced by the payment reminder sweep."""

    __tablename__ = "payment_notifications"

    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    booking_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    payment_schedule_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid, ForeignKey("payment_schedules.id", ondelete="CASCADE"), nullable=True
    )
    notification_type: Mapped[str] = mapped_column(String(20), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)

    sent_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    read_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<PaymentNotification(id={self.id}, type={self.notification_type}, read={self.is_read})>"
