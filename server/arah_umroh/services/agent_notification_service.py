"""Travel agent inbox: new inquiries, new bookings and overdue payments."""

import logging
from datetime import date, datetime, timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import CurrentUser
from ..core.exceptions import NotFoundError
from ..core.observability import metrics_collector
from ..models.booking import Booking, BookingStatus, PaymentSchedule
from ..models.inquiry import InquiryStatus, PackageInquiry
from ..models.notification import AgentNotification, AgentNotificationType
from ..schemas.notification import ListAgentNotificationsRequest
from .travel_service import TravelService

logger = logging.getLogger(__name__)

# Inquiries and bookings newer than this are announced to the agent
NEW_ACTIVITY_WINDOW = timedelta(hours=1)

# An overdue booking is announced again after this long
OVERDUE_REPEAT_INTERVAL = timedelta(hours=24)


class AgentNotificationService:
    """Builds and serves the notification inbox of each travel agency."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.travel_service = TravelService(db)

    async def _already_notified(
        self, notification_type: AgentNotificationType, reference_ids: list[UUID], since: Optional[datetime] = None
    ) -> set[UUID]:
        if not reference_ids:
            return set()
        conditions = [
            AgentNotification.notification_type == notification_type.value,
            AgentNotification.reference_id.in_(reference_ids),
        ]
        if since is not None:
            conditions.append(AgentNotification.created_at >= since)
        result = await self.db.execute(select(AgentNotification.reference_id).where(*conditions))
        return set(result.scalars().all())

    def _notify(
        self,
        travel_id: UUID,
        notification_type: AgentNotificationType,
        title: str,
        body: str,
        reference_id: UUID,
        reference_type: str,
    ) -> None:
        self.db.add(
            AgentNotification(
                travel_id=travel_id,
                notification_type=notification_type.value,
                title=title,
                body=body,
                reference_id=reference_id,
                reference_type=reference_type,
            )
        )
        metrics_collector.record_agent_notification(notification_type.value)

    async def _new_inquiries(self, since: datetime) -> int:
        result = await self.db.execute(
            select(PackageInquiry.id, PackageInquiry.travel_id, PackageInquiry.full_name)
            .where(PackageInquiry.created_at >= since, PackageInquiry.status == InquiryStatus.PENDING.value)
        )
        inquiries = result.all()
        notified = await self._already_notified(AgentNotificationType.NEW_INQUIRY, [row[0] for row in inquiries])

        created = 0
        for inquiry_id, travel_id, full_name in inquiries:
            if inquiry_id in notified:
                continue
            self._notify(
                travel_id, AgentNotificationType.NEW_INQUIRY,
                "Inquiry Baru", f"{full_name} tertarik dengan paket Anda",
                inquiry_id, "inquiry",
            )
            created += 1
        return created

    async def _new_bookings(self, since: datetime) -> int:
        result = await self.db.execute(
            select(Booking.id, Booking.travel_id, Booking.booking_code, Booking.contact_name)
            .where(Booking.created_at >= since)
        )
        bookings = result.all()
        notified = await self._already_notified(AgentNotificationType.NEW_BOOKING, [row[0] for row in bookings])

        created = 0
        for booking_id, travel_id, booking_code, contact_name in bookings:
            if booking_id in notified:
                continue
            self._notify(
                travel_id, AgentNotificationType.NEW_BOOKING,
                "Booking Baru!", f"{contact_name} melakukan booking ({booking_code})",
                booking_id, "booking",
            )
            created += 1
        return created

    async def _overdue_payments(self, now: datetime, today: date) -> int:
        """One notification per booking with overdue installments, repeated daily."""
        result = await self.db.execute(
            select(
                Booking.id,
                Booking.travel_id,
                Booking.booking_code,
                Booking.contact_name,
                func.min(PaymentSchedule.due_date),
            )
            .join(PaymentSchedule, PaymentSchedule.booking_id == Booking.id)
            .where(
                PaymentSchedule.is_paid.is_(False),
                PaymentSchedule.due_date < today,
                Booking.status != BookingStatus.CANCELLED.value,
            )
            .group_by(Booking.id, Booking.travel_id, Booking.booking_code, Booking.contact_name)
        )
        overdue = result.all()
        notified = await self._already_notified(
            AgentNotificationType.OVERDUE_PAYMENT,
            [row[0] for row in overdue],
            since=now - OVERDUE_REPEAT_INTERVAL,
        )

        created = 0
        for booking_id, travel_id, booking_code, contact_name, earliest_due in overdue:
            if booking_id in notified:
                continue
            days_overdue = (today - earliest_due).days
            self._notify(
                travel_id, AgentNotificationType.OVERDUE_PAYMENT,
                "Pembayaran Terlambat", f"Booking {booking_code} ({contact_name}) telat {days_overdue} hari",
                booking_id, "booking",
            )
            created += 1
        return created

    async def check_notifications(self, now: Optional[datetime] = None) -> dict:
        """
        Write agent notifications for recent inquiries and bookings and for overdue payments.

        Inquiries and bookings are announced once. A booking with overdue
        installments is announced at most once a day. Returns counts per type.
        """
        now = now or datetime.utcnow()
        since = now - NEW_ACTIVITY_WINDOW

        counts = {
            AgentNotificationType.NEW_INQUIRY.value: await self._new_inquiries(since),
            AgentNotificationType.NEW_BOOKING.value: await self._new_bookings(since),
            AgentNotificationType.OVERDUE_PAYMENT.value: await self._overdue_payments(now, now.date()),
        }
        await self.db.commit()

        if any(counts.values()):
            logger.info("Agent notifications created", extra=counts)
        return counts

    async def list_notifications(
        self, user: CurrentUser, request: ListAgentNotificationsRequest
    ) -> tuple[list[AgentNotification], int, int]:
        """Newest first, with the matching total and the unread count."""
        await self.travel_service.get_managed_travel(user, request.travel_id)

        conditions = [AgentNotification.travel_id == request.travel_id]
        unread = await self.db.scalar(
            select(func.count()).select_from(AgentNotification)
            .where(*conditions, AgentNotification.is_read.is_(False))
        )
        if request.unread_only:
            conditions.append(AgentNotification.is_read.is_(False))
        if request.notification_type is not None:
            conditions.append(AgentNotification.notification_type == request.notification_type.value)

        total = await self.db.scalar(select(func.count()).select_from(AgentNotification).where(*conditions))
        stmt = (
            select(AgentNotification)
            .where(*conditions)
            .order_by(AgentNotification.created_at.desc())
            .limit(request.limit)
            .offset(request.offset)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total or 0, unread or 0

    async def mark_read(self, user: CurrentUser, notification_id: UUID) -> AgentNotification:
        notification = await self.db.get(AgentNotification, notification_id)
        if notification is None:
            raise NotFoundError(resource_type="agent_notification", resource_id=str(notification_id))
        await self.travel_service.get_managed_travel(user, notification.travel_id)

        if not notification.is_read:
            notification.is_read = True
            notification.read_at = datetime.utcnow()
            await self.db.commit()
        return notification

    async def mark_all_read(self, user: CurrentUser, travel_id: UUID) -> int:
        await self.travel_service.get_managed_travel(user, travel_id)

        result = await self.db.execute(
            update(AgentNotification)
            .where(AgentNotification.travel_id == travel_id, AgentNotification.is_read.is_(False))
            .values(is_read=True, read_at=datetime.utcnow())
        )
        await self.db.commit()

        logger.info("Agent notifications marked read", extra={"travel_id": str(travel_id), "count": result.rowcount})
        return result.rowcount or 0
