"""Background worker for departure countdown reminders."""

import logging

from ..core.database import async_session_factory
from ..services.departure_reminder_service import DepartureReminderService
from .base import BaseWorker

logger = logging.getLogger(__name__)


class DepartureReminderWorker(BaseWorker):
    """
    Sends the H-30 to H-0 countdown to pilgrims with confirmed or paid bookings.

    A step already written for a booking is skipped, so hourly runs send
    each step once.
    """

    def __init__(self, interval_seconds: int = 3600):
        super().__init__(name="DepartureReminder", interval_seconds=interval_seconds)

    async def process(self) -> int:
        async with async_session_factory() as db:
            try:
                result = await DepartureReminderService(db).send_departure_reminders()
            except Exception:
                await db.rollback()
                raise

        sent = sum(count for key, count in result.items() if key != "run_date")
        if sent > 0:
            logger.info(
                f"Sent {sent} departure reminders",
                extra={"worker": self.name, **result}
            )
        return sent
