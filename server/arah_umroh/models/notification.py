"""Departure countdown and travel agent notification model definitions."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base
from .mixins import UUIDPrimaryKeyMixin


class DepartureReminderType(str, Enum):
    """Departure countdown reminders, named after days before departure."""
    H30 = "h30"
    H14 = "h14"
    H7 = "h7"
    H3 = "h3"
    H1 = "h1"
    H0 = "h0"


class AgentNotificationType(str, Enum):
    NEW_INQUIRY = "new_inquiry"
    NEW_BOOKING = "new_booking"
    OVERDUE_PAYMENT = "overdue_payment"


class DepartureNotification(UUIDPrimaryKeyMixin, Base):
    """Countdown reminder sent to a pilgrim ahead of a booked departure."""

    __tablename__ = "departure_notifications"

    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    booking_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    notification_type: Mapped[str] = mapped_column(String(10), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)

    sent_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    read_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    __table_args__ = (
        # Each countdown step is sent once per booking
        UniqueConstraint("booking_id", "notification_type", name="uq_departure_notification_booking_type"),
    )

    def __repr__(self) -> str:
        return f"<DepartureNotification(id={self.id}, booking_id={self.booking_id}, type={self.notification_type})>"


class AgentNotification(UUIDPrimaryKeyMixin, Base):
    """Inbox entry for a travel agency about activity that needs attention."""

    __tablename__ = "agent_notifications"

    travel_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("travels.id", ondelete="CASCADE"), nullable=False, index=True
    )
    notification_type: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)

    # The inquiry or booking the notification is about
    reference_id: Mapped[Optional[UUID]] = mapped_column(Uuid, nullable=True, index=True)
    reference_type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    read_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<AgentNotification(id={self.id}, travel_id={self.travel_id}, type={self.notification_type})>"
