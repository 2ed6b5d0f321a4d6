"""Payment reminder sweep over unpaid booking schedules."""

import logging
from datetime import date, timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.observability import metrics_collector
from ..models.booking import Booking, BookingStatus, PaymentNotification, PaymentSchedule, ReminderType

logger = logging.getLogger(__name__)

# Days before the due date for each advance reminder
REMINDER_OFFSETS = {
    ReminderType.H7: 7,
    ReminderType.H3: 3,
    ReminderType.H1: 1,
}

REMINDER_FLAGS = {
    ReminderType.H7: "reminder_sent_h7",
    ReminderType.H3: "reminder_sent_h3",
    ReminderType.H1: "reminder_sent_h1",
    ReminderType.OVERDUE: "reminder_sent_overdue",
}


def format_rupiah(amount: int) -> str:
    """Format an amount the Indonesian way, e.g. ``Rp 2.500.000``."""
    return "Rp " + f"{amount:,}".replace(",", ".")


def reminder_due(schedule: PaymentSchedule, today: date) -> Optional[ReminderType]:
    """The reminder a schedule should get today, or None if none is due or it was already sent."""
    if schedule.is_paid:
        return None

    if schedule.due_date < today:
        reminder = ReminderType.OVERDUE
    else:
        days_left = (schedule.due_date - today).days
        reminder = next((r for r, offset in REMINDER_OFFSETS.items() if offset == days_left), None)
        if reminder is None:
            return None

    if getattr(schedule, REMINDER_FLAGS[reminder]):
        return None
    return reminder


def reminder_message(reminder: ReminderType, booking_code: str, schedule: PaymentSchedule) -> tuple[str, str]:
    amount = format_rupiah(schedule.amount)
    due = schedule.due_date.strftime("%d-%m-%Y")
    if reminder == ReminderType.OVERDUE:
        return (
            "Pembayaran terlambat",
            f"Pembayaran {amount} untuk booking {booking_code} telah melewati jatuh tempo {due}.",
        )
    days = REMINDER_OFFSETS[reminder]
    return (
        f"Pengingat pembayaran H-{days}",
        f"Pembayaran {amount} untuk booking {booking_code} jatuh tempo dalam {days} hari ({due}).",
    )


class PaymentReminderService:
    """Writes reminder notifications for schedules that are coming due or overdue."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def send_payment_reminders(self, today: Optional[date] = None) -> dict:
        """
        Send each due reminder once and return counts per reminder type.

        Only the candidate window is loaded: schedules due in the next week or
        already overdue on bookings that are not cancelled.
        """
        today = today or date.today()
        stmt = (
            select(PaymentSchedule, Booking.user_id, Booking.booking_code)
            .join(Booking, PaymentSchedule.booking_id == Booking.id)
            .where(
                PaymentSchedule.is_paid.is_(False),
                Booking.status != BookingStatus.CANCELLED.value,
                PaymentSchedule.due_date <= today + timedelta(days=max(REMINDER_OFFSETS.values())),
            )
            .order_by(PaymentSchedule.due_date)
        )
        result = await self.db.execute(stmt)

        counts = {reminder.value: 0 for reminder in ReminderType}
        for schedule, user_id, booking_code in result.all():
            reminder = reminder_due(schedule, today)
            if reminder is None:
                continue

            title, body = reminder_message(reminder, booking_code, schedule)
            self.db.add(
                PaymentNotification(
                    user_id=user_id,
                    booking_id=schedule.booking_id,
                    payment_schedule_id=schedule.id,
                    notification_type=reminder.value,
                    title=title,
                    body=body,
                )
            )
            setattr(schedule, REMINDER_FLAGS[reminder], True)
            counts[reminder.value] += 1
            metrics_collector.record_payment_reminder(reminder.value)

        await self.db.commit()

        if any(counts.values()):
            logger.info("Payment reminders sent", extra={"run_date": today.isoformat(), **counts})
        return {"run_date": today, **counts}
