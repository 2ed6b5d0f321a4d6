"""Departure countdown reminders for confirmed and paid bookings."""

import logging
from datetime import date, datetime, timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import CurrentUser
from ..core.exceptions import NotFoundError
from ..core.observability import metrics_collector
from ..models.booking import Booking, BookingStatus
from ..models.notification import DepartureNotification, DepartureReminderType
from ..models.package import Departure, Package

logger = logging.getLogger(__name__)

# Days before departure for each countdown step
DEPARTURE_REMINDER_OFFSETS = {
    DepartureReminderType.H30: 30,
    DepartureReminderType.H14: 14,
    DepartureReminderType.H7: 7,
    DepartureReminderType.H3: 3,
    DepartureReminderType.H1: 1,
    DepartureReminderType.H0: 0,
}

REMINDED_STATUSES = (BookingStatus.CONFIRMED.value, BookingStatus.PAID.value)

DEFAULT_PACKAGE_NAME = "Paket Umroh"

NOTIFICATION_LIST_LIMIT = 50

DAY_NAMES = ["Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu", "Minggu"]
MONTH_NAMES = [
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
]


def format_long_date(value: date) -> str:
    """Indonesian long date, e.g. ``Senin, 2 Maret 2026``."""
    return f"{DAY_NAMES[value.weekday()]}, {value.day} {MONTH_NAMES[value.month - 1]} {value.year}"


def departure_reminder_due(departure_date: date, today: date) -> Optional[DepartureReminderType]:
    """The countdown step that falls on ``today``, if any."""
    days_left = (departure_date - today).days
    return next((r for r, offset in DEPARTURE_REMINDER_OFFSETS.items() if offset == days_left), None)


def departure_reminder_message(
    reminder: DepartureReminderType, package_name: str, departure_date: date
) -> tuple[str, str]:
    when = format_long_date(departure_date)
    templates = {
        DepartureReminderType.H30: (
            "30 Hari Menuju Keberangkatan",
            f"{package_name}: Waktunya mempersiapkan dokumen dan perlengkapan! Keberangkatan: {when}",
        ),
        DepartureReminderType.H14: (
            "2 Minggu Lagi Menuju Tanah Suci!",
            f"{package_name}: Pastikan paspor, visa, dan tiket sudah siap. Keberangkatan: {when}",
        ),
        DepartureReminderType.H7: (
            "Seminggu Menuju Tanah Suci",
            f"{package_name}: Periksa kembali checklist perlengkapan Anda. Keberangkatan: {when}",
        ),
        DepartureReminderType.H3: (
            "3 Hari Lagi!",
            f"{package_name}: Siapkan pakaian ihram dan perlengkapan sholat. Keberangkatan: {when}",
        ),
        DepartureReminderType.H1: (
            "Besok Berangkat!",
            f"{package_name}: Istirahat yang cukup, baca doa safar, dan pastikan semua sudah siap. "
            f"Keberangkatan: {when}",
        ),
        DepartureReminderType.H0: (
            "Hari Keberangkatan!",
            f"{package_name}: Bismillah, semoga perjalanan umroh Anda berkah dan lancar. "
            "Selamat menunaikan ibadah!",
        ),
    }
    return templates[reminder]


class DepartureReminderService:
    """Writes countdown reminders to pilgrims with upcoming departures."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def send_departure_reminders(self, today: Optional[date] = None) -> dict:
        """
        Send the countdown step due today for every active booking, once per step.

        Active means confirmed or paid with a departure between today and
        thirty days out. Returns counts per reminder type.
        """
        today = today or date.today()
        stmt = (
            select(Booking.id, Booking.user_id, Departure.departure_date, Package.name)
            .join(Departure, Booking.departure_id == Departure.id)
            .outerjoin(Package, Booking.package_id == Package.id)
            .where(
                Booking.status.in_(REMINDED_STATUSES),
                Departure.departure_date >= today,
                Departure.departure_date <= today + timedelta(days=max(DEPARTURE_REMINDER_OFFSETS.values())),
            )
            .order_by(Departure.departure_date)
        )
        candidates = (await self.db.execute(stmt)).all()

        sent = set()
        if candidates:
            result = await self.db.execute(
                select(DepartureNotification.booking_id, DepartureNotification.notification_type)
                .where(DepartureNotification.booking_id.in_([row[0] for row in candidates]))
            )
            sent = {(booking_id, kind) for booking_id, kind in result.all()}

        counts = {reminder.value: 0 for reminder in DepartureReminderType}
        for booking_id, user_id, departure_date, package_name in candidates:
            reminder = departure_reminder_due(departure_date, today)
            if reminder is None or (booking_id, reminder.value) in sent:
                continue

            title, body = departure_reminder_message(reminder, package_name or DEFAULT_PACKAGE_NAME, departure_date)
            self.db.add(
                DepartureNotification(
                    user_id=user_id,
                    booking_id=booking_id,
                    notification_type=reminder.value,
                    title=title,
                    body=body,
                )
            )
            counts[reminder.value] += 1
            metrics_collector.record_departure_reminder(reminder.value)

        await self.db.commit()

        if any(counts.values()):
            logger.info("Departure reminders sent", extra={"run_date": today.isoformat(), **counts})
        return {"run_date": today, **counts}

    async def list_notifications(self, user: CurrentUser) -> list[DepartureNotification]:
        stmt = (
            select(DepartureNotification)
            .where(DepartureNotification.user_id == user.user_id)
            .order_by(DepartureNotification.sent_at.desc())
            .limit(NOTIFICATION_LIST_LIMIT)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def mark_read(self, user: CurrentUser, notification_id: UUID) -> DepartureNotification:
        notification = await self.db.get(DepartureNotification, notification_id)
        if notification is None or notification.user_id != user.user_id:
            raise NotFoundError(resource_type="departure_notification", resource_id=str(notification_id))

        if not notification.is_read:
            notification.is_read = True
            notification.read_at = datetime.utcnow()
            await self.db.commit()
        return notification
