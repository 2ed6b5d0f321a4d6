"""Background worker for the travel agent inbox."""

import logging

from ..core.database import async_session_factory
from ..services.agent_notification_service import AgentNotificationService
from .base import BaseWorker

logger = logging.getLogger(__name__)


class AgentNotificationWorker(BaseWorker):
    """Notifies agencies of new inquiries, new bookings and overdue payments."""

    def __init__(self, interval_seconds: int = 600):
        super().__init__(name="AgentNotification", interval_seconds=interval_seconds)

    async def process(self) -> int:
        async with async_session_factory() as db:
            try:
                result = await AgentNotificationService(db).check_notifications()
            except Exception:
                await db.rollback()
                raise

        created = sum(result.values())
        if created > 0:
            logger.info(
                f"Created {created} agent notifications",
                extra={"worker": self.name, **result}
            )
        return created
