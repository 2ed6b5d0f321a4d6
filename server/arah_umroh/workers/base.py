"""Base worker class for periodic background tasks."""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

logger = logging.getLogger(__name__)


class BaseWorker(ABC):
    """
    Abstract base class for background workers.

    Runs ``process`` every ``interval_seconds`` on the event loop. A failed
    iteration is logged and retried after a full interval.
    """

    def __init__(self, name: str, interval_seconds: int = 60):
        """
        Initialize the worker.

        Args:
            name: Worker name for logging
            interval_seconds: How often to run the task
        """
        self.name = name
        self.interval_seconds = interval_seconds
        self.last_run_at: Optional[datetime] = None
        self._running = False
        self._task: Optional[asyncio.Task] = None

    @abstractmethod
    async def process(self) -> int:
        """Process one iteration and return how many records it touched."""

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the worker."""
        if self._running:
            logger.warning(f"{self.name} worker is already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._run())
        logger.info(f"{self.name} worker started with {self.interval_seconds}s interval")

    async def stop(self) -> None:
        """Stop the worker and wait for the current iteration to be cancelled."""
        if not self._running:
            return

        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                logger.debug(f"{self.name} worker task cancelled")
            self._task = None

        logger.info(f"{self.name} worker stopped")

    async def run_once(self) -> int:
        """Run a single iteration, timing it."""
        start_time = datetime.utcnow()
        touched = await self.process()
        self.last_run_at = datetime.utcnow()

        duration = (self.last_run_at - start_time).total_seconds()
        logger.info(
            f"{self.name} worker iteration completed",
            extra={"duration_seconds": duration, "worker": self.name, "touched": touched}
        )
        return touched

    async def _run(self) -> None:
        """Main worker loop."""
        while self._running:
            start_time = datetime.utcnow()
            try:
                await self.run_once()
            except asyncio.CancelledError:
                logger.info(f"{self.name} worker loop cancelled")
                raise
            except Exception as e:
                logger.error(
                    f"{self.name} worker error: {e!s}",
                    exc_info=True,
                    extra={"worker": self.name}
                )
                await asyncio.sleep(self.interval_seconds)
                continue

            elapsed = (datetime.utcnow() - start_time).total_seconds()
            await asyncio.sleep(max(0.0, self.interval_seconds - elapsed))
