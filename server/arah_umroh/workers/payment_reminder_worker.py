"""Background worker for booking payment reminders."""

import logging

from ..core.database import async_session_factory
from ..services.payment_reminder_service import PaymentReminderService
from .base import BaseWorker

logger = logging.getLogger(__name__)


class PaymentReminderWorker(BaseWorker):
    """
    Sends H-7, H-3, H-1 and overdue reminders for unpaid installments.

    Every reminder is flagged on its schedule when written, so running the
    sweep more than once a day sends nothing new.
    """

    def __init__(self, interval_seconds: int = 3600):
        super().__init__(name="PaymentReminder", interval_seconds=interval_seconds)

    async def process(self) -> int:
        async with async_session_factory() as db:
            try:
                result = await PaymentReminderService(db).send_payment_reminders()
            except Exception:
                await db.rollback()
                raise

        sent = result["h7"] + result["h3"] + result["h1"] + result["overdue"]
        if sent > 0:
            logger.info(
                f"Sent {sent} payment reminders",
                extra={"worker": self.name, **result}
            )
        return sent
