"""Background worker for expiring agent memberships and pilgrim subscriptions."""

import logging
from datetime import datetime

from ..core.database import async_session_factory
from ..services.membership_service import MembershipService
from ..services.subscription_service import SubscriptionService
from .base import BaseWorker

logger = logging.getLogger(__name__)


class SubscriptionExpiryWorker(BaseWorker):
    def __init__(self, interval_seconds: int = 3600):
        super().__init__(name="SubscriptionExpiry", interval_seconds=interval_seconds)

    async def process(self) -> int:
        """Expire memberships and subscriptions whose end date has passed."""
        async with async_session_factory() as db:
            try:
                now = datetime.utcnow()
                memberships = await MembershipService(db).expire_due(now)
                subscriptions = await SubscriptionService(db).expire_due(now)
            except Exception:
                await db.rollback()
                raise

        if memberships or subscriptions:
            logger.info(
                "Expired memberships and subscriptions",
                extra={
                    "memberships_expired": memberships,
                    "subscriptions_expired": subscriptions,
                    "worker": self.name,
                }
            )
        return memberships + subscriptions
