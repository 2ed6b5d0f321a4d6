"""Background worker for expiring featured placements."""

import logging
from datetime import datetime

from ..core.database import async_session_factory
from ..services.featured_service import FeaturedService
from .base import BaseWorker

logger = logging.getLogger(__name__)


class FeaturedExpiryWorker(BaseWorker):
    """
    Marks active featured placements whose end date has passed as expired.

    Also refreshes the active-placement gauges per position.
    """

    def __init__(self, interval_seconds: int = 300):
        super().__init__(name="FeaturedExpiry", interval_seconds=interval_seconds)

    async def process(self) -> int:
        async with async_session_factory() as db:
            try:
                now = datetime.utcnow()
                expired_count = await FeaturedService(db).expire_due(now)

                if expired_count > 0:
                    logger.info(
                        f"Expired {expired_count} featured placements",
                        extra={
                            "expired_count": expired_count,
                            "timestamp": now.isoformat(),
                            "worker": self.name,
                        }
                    )
                return expired_count

            except Exception:
                await db.rollback()
                raise
