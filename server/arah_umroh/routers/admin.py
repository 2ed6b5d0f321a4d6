"""Admin router for the platform dashboard and manual maintenance runs."""

import logging
from datetime import datetime

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import AdminAuth, CurrentUser, DatabaseSession
from ..schemas.admin import MaintenanceRunResult, PlatformStats
from ..schemas.booking import ReminderRunResult
from ..schemas.notification import AgentNotificationRunResult, DepartureReminderRunResult
from ..services.admin_service import AdminService
from ..services.agent_notification_service import AgentNotificationService
from ..services.departure_reminder_service import DepartureReminderService
from ..services.featured_service import FeaturedService
from ..services.membership_service import MembershipService
from ..services.payment_reminder_service import PaymentReminderService
from ..services.subscription_service import SubscriptionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/admin", tags=["admin"])


@router.post("/stats", response_model=PlatformStats)
async def platform_stats(
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    stats = await AdminService(db).platform_stats()
    return JSONResponse(status_code=200, content=PlatformStats.model_validate(stats).model_dump(mode="json"))


@router.post("/run-payment-reminders", response_model=ReminderRunResult)
async def run_payment_reminders(
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Run the reminder sweep now; reminders already sent are never repeated."""
    result = await PaymentReminderService(db).send_payment_reminders()
    logger.info("Payment reminders run manually", extra={"admin_id": user.user_id, **result})
    return JSONResponse(status_code=200, content=ReminderRunResult.model_validate(result).model_dump(mode="json"))


@router.post("/run-expiry", response_model=MaintenanceRunResult)
async def run_expiry(
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Expire lapsed featured placements, memberships and subscriptions now."""
    now = datetime.utcnow()
    response_data = MaintenanceRunResult(
        featured_expired=await FeaturedService(db).expire_due(now),
        memberships_expired=await MembershipService(db).expire_due(now),
        subscriptions_expired=await SubscriptionService(db).expire_due(now),
    )
    logger.info(
        "Expiry run manually",
        extra={"admin_id": user.user_id, **response_data.model_dump()}
    )
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))


@router.post("/run-departure-reminders", response_model=DepartureReminderRunResult)
async def run_departure_reminders(
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Send today's departure countdown reminders; each step goes out once per booking."""
    result = await DepartureReminderService(db).send_departure_reminders()
    logger.info("Departure reminders run manually", extra={"admin_id": user.user_id, **result})
    return JSONResponse(
        status_code=200,
        content=DepartureReminderRunResult.model_validate(result).model_dump(mode="json")
    )


@router.post("/run-agent-notifications", response_model=AgentNotificationRunResult)
async def run_agent_notifications(
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    result = await AgentNotificationService(db).check_notifications()
    logger.info("Agent notifications run manually", extra={"admin_id": user.user_id, **result})
    return JSONResponse(
        status_code=200,
        content=AgentNotificationRunResult.model_validate(result).model_dump(mode="json")
    )
