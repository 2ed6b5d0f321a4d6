"""Notification router for departure countdowns and the travel agent inbox."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import AgentAuth, CurrentUser, DatabaseSession, RequiredAuth
from ..schemas.notification import (
    AgentNotification,
    AgentNotificationList,
    DepartureNotification,
    ListAgentNotificationsRequest,
    MarkAllAgentNotificationsRequest,
    MarkAllReadResult,
    NotificationIdRequest,
)
from ..services.agent_notification_service import AgentNotificationService
from ..services.departure_reminder_service import DepartureReminderService

router = APIRouter(prefix="/v1/notification", tags=["notification"])


@router.post("/departure/list", response_model=list[DepartureNotification])
async def list_departure_notifications(
    user: CurrentUser = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """The caller's latest departure countdown reminders, newest first."""
    notifications = await DepartureReminderService(db).list_notifications(user)
    return JSONResponse(
        status_code=200,
        content=[DepartureNotification.model_validate(n).model_dump(mode="json") for n in notifications]
    )


@router.post("/departure/mark-read", response_model=DepartureNotification)
async def mark_departure_notification_read(
    request: NotificationIdRequest,
    user: CurrentUser = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    notification = await DepartureReminderService(db).mark_read(user, request.notification_id)
    return JSONResponse(
        status_code=200,
        content=DepartureNotification.model_validate(notification).model_dump(mode="json")
    )


@router.post("/agent/list", response_model=AgentNotificationList)
async def list_agent_notifications(
    request: ListAgentNotificationsRequest,
    user: CurrentUser = AgentAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    notifications, total, unread = await AgentNotificationService(db).list_notifications(user, request)
    response_data = AgentNotificationList(
        items=[AgentNotification.model_validate(n) for n in notifications],
        total=total,
        limit=request.limit,
        offset=request.offset,
        unread_count=unread,
    )
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))


@router.post("/agent/mark-read", response_model=AgentNotification)
async def mark_agent_notification_read(
    request: NotificationIdRequest,
    user: CurrentUser = AgentAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    notification = await AgentNotificationService(db).mark_read(user, request.notification_id)
    return JSONResponse(
        status_code=200,
        content=AgentNotification.model_validate(notification).model_dump(mode="json")
    )


@router.post("/agent/mark-all-read", response_model=MarkAllReadResult)
async def mark_all_agent_notifications_read(
    request: MarkAllAgentNotificationsRequest,
    user: CurrentUser = AgentAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    marked = await AgentNotificationService(db).mark_all_read(user, request.travel_id)
    return JSONResponse(status_code=200, content=MarkAllReadResult(marked=marked).model_dump(mode="json"))
