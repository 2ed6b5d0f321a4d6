"""FastAPI routers package."""

from .admin import router as admin_router
from .booking import router as booking_router
from .content import router as content_router
from .credit import router as credit_router
from .featured import router as featured_router
from .feedback import router as feedback_router
from .health import router as health_router
from .inquiry import router as inquiry_router
from .membership import router as membership_router
from .metrics import router as metrics_router
from .notification import router as notification_router
from .package import router as package_router
from .recommendation import router as recommendation_router
from .settings import router as settings_router
from .shop import router as shop_router
from .subscription import router as subscription_router
from .travel import router as travel_router

__all__ = [
    "admin_router",
    "booking_router",
    "content_router",
    "credit_router",
    "featured_router",
    "feedback_router",
    "health_router",
    "inquiry_router",
    "membership_router",
    "metrics_router",
    "notification_router",
    "package_router",
    "recommendation_router",
    "settings_router",
    "shop_router",
    "subscription_router",
    "travel_router",
]
