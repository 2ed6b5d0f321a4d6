"""Models module exporting all database models."""

from .booking import Booking, BookingStatus, PaymentNotification, PaymentSchedule, PaymentType, ReminderType
from .content import (
    Checklist,
    ChecklistCategory,
    ManasikCategory,
    ManasikGuide,
    Prayer,
    PrayerCategory,
    UserChecklist,
)
from .credit import CreditTransaction, CreditTransactionStatus, CreditTransactionType, PackageCredits
from .featured import FeaturedDuration, FeaturedPackage, FeaturedPosition, FeaturedStatus
from .feedback import ContentRating, Feedback, FeedbackStatus, FeedbackType
from .idempotency import IdempotencyRecord
from .inquiry import InquiryStatus, PackageInquiry
from .membership import Membership, MembershipStatus
from .notification import (
    AgentNotification,
    AgentNotificationType,
    DepartureNotification,
    DepartureReminderType,
)
from .package import Departure, DepartureStatus, FlightType, MealType, Package, PackageType
from .setting import PlatformSetting
from .shop import (
    SellerStatus,
    ShopCategory,
    ShopOrder,
    ShopOrderItem,
    ShopOrderStatus,
    ShopProduct,
    ShopSeller,
)
from .subscription import SubscriptionPlan, SubscriptionStatus, UserSubscription
from .travel import Travel

__all__ = [
    # Tenants and catalogue
    "Travel",
    "Package",
    "PackageType",
    "FlightType",
    "MealType",
    "Departure",
    "DepartureStatus",

    # Bookings
    "Booking",
    "BookingStatus",
    "PaymentSchedule",
    "PaymentType",
    "PaymentNotification",
    "ReminderType",
    "DepartureNotification",
    "DepartureReminderType",
    "AgentNotification",
    "AgentNotificationType",

    # Monetization
    "PackageCredits",
    "CreditTransaction",
    "CreditTransactionType",
    "CreditTransactionStatus",
    "FeaturedPackage",
    "FeaturedPosition",
    "FeaturedDuration",
    "FeaturedStatus",
    "PlatformSetting",
    "Membership",
    "MembershipStatus",
    "SubscriptionPlan",
    "UserSubscription",
    "SubscriptionStatus",

    # Engagement
    "Feedback",
    "FeedbackType",
    "FeedbackStatus",
    "ContentRating",
    "PackageInquiry",
    "InquiryStatus",

    # Shop
    "ShopSeller",
    "SellerStatus",
    "ShopCategory",
    "ShopProduct",
    "ShopOrder",
    "ShopOrderItem",
    "ShopOrderStatus",

    # Content
    "PrayerCategory",
    "Prayer",
    "Checklist",
    "ChecklistCategory",
    "UserChecklist",
    "ManasikGuide",
    "ManasikCategory",

    # Idempotency
    "IdempotencyRecord",
]
