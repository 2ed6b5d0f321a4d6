"""Service layer package."""

from .admin_service import AdminService
from .booking_service import BookingService
from .checklist_service import ChecklistService
from .credit_service import CreditService
from .featured_service import FeaturedService
from .feedback_service import FeedbackService
from .idempotency_service import IdempotencyService
from .inquiry_service import InquiryService
from .manasik_service import ManasikService
from .membership_service import MembershipService
from .package_service import PackageService
from .payment_reminder_service import PaymentReminderService
from .prayer_service import PrayerService
from .recommendation_service import RecommendationService
from .settings_service import SettingsService
from .shop_order_service import ShopOrderService
from .shop_service import ShopService
from .subscription_service import SubscriptionService
from .travel_service import TravelService

__all__ = [
    "AdminService",
    "BookingService",
    "ChecklistService",
    "CreditService",
    "FeaturedService",
    "FeedbackService",
    "IdempotencyService",
    "InquiryService",
    "ManasikService",
    "MembershipService",
    "PackageService",
    "PaymentReminderService",
    "PrayerService",
    "RecommendationService",
    "SettingsService",
    "ShopOrderService",
    "ShopService",
    "SubscriptionService",
    "TravelService",
]
