"""Departure reminder and travel agent notification schemas."""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..models.notification import AgentNotificationType, DepartureReminderType
from .common import PageInfo, PageRequest


class NotificationIdRequest(BaseModel):
    notification_id: UUID


class ListAgentNotificationsRequest(PageRequest):
    travel_id: UUID
    unread_only: bool = False
    notification_type: Optional[AgentNotificationType] = None


class MarkAllAgentNotificationsRequest(BaseModel):
    travel_id: UUID


class DepartureNotification(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_id: UUID
    notification_type: DepartureReminderType
    title: str
    body: str
    sent_at: datetime
    is_read: bool
    read_at: Optional[datetime] = None


class AgentNotification(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    travel_id: UUID
    notification_type: AgentNotificationType
    title: str
    body: str
    reference_id: Optional[UUID] = None
    reference_type: Optional[str] = None
    created_at: datetime
    is_read: bool
    read_at: Optional[datetime] = None


class AgentNotificationList(PageInfo):
    items: list[AgentNotification]
    unread_count: int = Field(..., ge=0)


class MarkAllReadResult(BaseModel):
    marked: int = Field(..., ge=0)


class DepartureReminderRunResult(BaseModel):
    """Counts of countdown reminders written by one sweep, per step."""

    run_date: date
    h30: int = 0
    h14: int = 0
    h7: int = 0
    h3: int = 0
    h1: int = 0
    h0: int = 0


class AgentNotificationRunResult(BaseModel):
    new_inquiry: int = 0
    new_booking: int = 0
    overdue_payment: int = 0
