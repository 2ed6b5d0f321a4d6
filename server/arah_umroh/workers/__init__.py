"""Background workers for the marketplace."""

from .agent_notification_worker import AgentNotificationWorker
from .departure_reminder_worker import DepartureReminderWorker
from .featured_expiry_worker import FeaturedExpiryWorker
from .idempotency_cleanup_worker import IdempotencyCleanupWorker
from .payment_reminder_worker import PaymentReminderWorker
from .subscription_expiry_worker import SubscriptionExpiryWorker

__all__ = [
    "AgentNotificationWorker",
    "DepartureReminderWorker",
    "FeaturedExpiryWorker",
    "IdempotencyCleanupWorker",
    "PaymentReminderWorker",
    "SubscriptionExpiryWorker",
]
