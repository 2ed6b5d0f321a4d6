"""Worker manager for coordinating background tasks."""

import asyncio
import logging
from typing import Dict

from ..core.config import settings
from .agent_notification_worker import AgentNotificationWorker
from .base import BaseWorker
from .departure_reminder_worker import DepartureReminderWorker
from .featured_expiry_worker import FeaturedExpiryWorker
from .idempotency_cleanup_worker import IdempotencyCleanupWorker
from .payment_reminder_worker import PaymentReminderWorker
from .subscription_expiry_worker import SubscriptionExpiryWorker

logger = logging.getLogger(__name__)


class WorkerManager:
    """
    Manages background workers for the application.

    Coordinates starting, stopping, and monitoring of all background workers.
    """

    def __init__(self):
        self.workers: Dict[str, BaseWorker] = {}
        self._setup_workers()

    def _setup_workers(self) -> None:
        """Initialize all workers with the configured intervals."""
        self.workers["featured_expiry"] = FeaturedExpiryWorker(
            interval_seconds=settings.featured_expiry_interval_seconds
        )
        self.workers["payment_reminder"] = PaymentReminderWorker(
            interval_seconds=settings.payment_reminder_interval_seconds
        )
        self.workers["subscription_expiry"] = SubscriptionExpiryWorker(
            interval_seconds=settings.subscription_expiry_interval_seconds
        )
        self.workers["departure_reminder"] = DepartureReminderWorker(
            interval_seconds=settings.departure_reminder_interval_seconds
        )
        self.workers["agent_notification"] = AgentNotificationWorker(
            interval_seconds=settings.agent_notification_interval_seconds
        )
        # Records live for idempotency_ttl_seconds, so hourly is plenty
        self.workers["idempotency_cleanup"] = IdempotencyCleanupWorker(interval_seconds=3600)

        logger.info(f"Initialized {len(self.workers)} workers")

    async def start_all(self) -> None:
        """Start all workers."""
        for name, worker in self.workers.items():
            await worker.start()
            logger.info(f"Started worker: {name}")

        logger.info(f"Started {len(self.workers)} workers")

    async def stop_all(self) -> None:
        """Stop all workers gracefully."""
        logger.info("Stopping all workers")

        names = list(self.workers)
        results = await asyncio.gather(
            *(worker.stop() for worker in self.workers.values()),
            return_exceptions=True
        )

        for name, result in zip(names, results):
            if isinstance(result, Exception):
                logger.error(f"Error stopping worker {name}: {result!s}", exc_info=result)

        logger.info("All workers stopped")

    def get_worker(self, name: str) -> BaseWorker:
        """
        Get a specific worker by name.

        Raises:
            KeyError: If worker not found
        """
        return self.workers[name]

    def get_worker_status(self) -> Dict[str, dict]:
        """Running flag and last completed run per worker."""
        return {
            name: {
                "running": worker.is_running,
                "interval_seconds": worker.interval_seconds,
                "last_run_at": worker.last_run_at.isoformat() if worker.last_run_at else None,
            }
            for name, worker in self.workers.items()
        }


# Global worker manager instance
worker_manager = WorkerManager()
