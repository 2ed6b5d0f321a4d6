"""Booking service for business logic operations."""

import logging
import secrets
import string
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.database import acquire_advisory_lock
from ..core.dependencies import CurrentUser
from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidStatusTransitionError,
    NotFoundError,
    SeatsUnavailableError,
    ValidationError,
)
from ..core.observability import metrics_collector
from ..models.booking import Booking, BookingStatus, PaymentNotification, PaymentSchedule
from ..models.package import Departure, DepartureStatus, Package
from ..models.travel import Travel
from ..schemas.booking import (
    CreateBookingRequest,
    ListTravelBookingsRequest,
    ListUserBookingsRequest,
    RecordPaymentRequest,
    UpdateBookingStatusRequest,
)
from .package_service import PackageService, is_bookable, refresh_departure_status
from .travel_service import TravelService

logger = logging.getLogger(__name__)

BOOKING_CODE_ALPHABET = string.ascii_uppercase + string.digits
BOOKING_CODE_LENGTH = 8

ALLOWED_TRANSITIONS: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.PAID, BookingStatus.CANCELLED},
    BookingStatus.PAID: {BookingStatus.COMPLETED, BookingStatus.CANCELLED},
    BookingStatus.CANCELLED: set(),
    BookingStatus.COMPLETED: set(),
}

NOTIFICATION_LIST_LIMIT = 50


def generate_booking_code(length: int = BOOKING_CODE_LENGTH) -> str:
    """Generate a random booking confirmation code."""
    return "".join(secrets.choice(BOOKING_CODE_ALPHABET) for _ in range(length))


def calculate_payment_progress(paid_amount: int, total_price: int) -> int:
    """Percentage of the total paid, rounded and clamped to 0..100."""
    if total_price <= 0:
        return 0
    return max(0, min(100, round(paid_amount / total_price * 100)))


def allowed_transitions(current: str) -> list[str]:
    return sorted(s.value for s in ALLOWED_TRANSITIONS.get(BookingStatus(current), set()))


class BookingService:
    """Service for booking-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.package_service = PackageService(db)
        self.travel_service = TravelService(db)

    async def get_booking_by_id(self, booking_id: UUID, for_update: bool = False) -> Optional[Booking]:
        stmt = (
            select(Booking)
            .where(Booking.id == booking_id)
            .options(selectinload(Booking.payment_schedules))
            .execution_options(populate_existing=True)
        )
        if for_update:
            await acquire_advisory_lock(self.db, f"{Booking.__tablename__}:{booking_id}")
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_booking_by_id_or_raise(self, booking_id: UUID, for_update: bool = False) -> Booking:
        """
        Get booking by ID or raise NotFoundError.

        Raises:
            NotFoundError: If booking not found
        """
        booking = await self.get_booking_by_id(booking_id, for_update=for_update)
        if not booking:
            raise NotFoundError(resource_type="booking", resource_id=str(booking_id))
        return booking

    async def _is_travel_owner(self, user: CurrentUser, travel_id: UUID) -> bool:
        travel = await self.travel_service.get_travel_by_id(travel_id)
        return travel is not None and travel.owner_id == user.user_id

    async def _ensure_can_manage(self, user: CurrentUser, booking: Booking) -> None:
        if user.is_admin or await self._is_travel_owner(user, booking.travel_id):
            return
        logger.warning(
            "Booking management denied",
            extra={"booking_id": str(booking.id), "user_id": user.user_id}
        )
        raise AuthorizationError(detail="Only the travel that owns this booking can manage it")

    async def _lock_departure(self, departure_id: UUID) -> Departure:
        return await self.package_service.get_departure_or_raise(departure_id, for_update=True)

    async def _new_booking_code(self) -> str:
        while True:
            code = generate_booking_code()
            exists = await self.db.scalar(
                select(func.count()).select_from(Booking).where(Booking.booking_code == code)
            )
            if not exists:
                return code

    async def create_booking(self, user: CurrentUser, request: CreateBookingRequest) -> Booking:
        """
        Book a package for ``user`` and reserve seats on the chosen departure.

        The departure row is locked while seats are checked and decremented.

        Raises:
            NotFoundError: If the package or departure does not exist
            ValidationError: If the departure belongs to another package, has
                already left or the payment plan exceeds the total price
            SeatsUnavailableError: If the departure is not open for booking or
                cannot seat everyone
        """
        package = await self.package_service.get_public_package(request.package_id)

        departure = None
        if request.departure_id is not None:
            departure = await self._lock_departure(request.departure_id)
            if departure.package_id != package.id:
                raise ValidationError(
                    detail="Departure does not belong to the package",
                    errors={"departure_id": "Must be a departure of the booked package"},
                )
            if departure.status == DepartureStatus.CANCELLED.value:
                raise ValidationError(detail="Departure has been cancelled")
            if departure.departure_date < date.today():
                raise ValidationError(
                    detail="Departure has already left",
                    errors={"departure_id": "Must be a departure dated today or later"},
                )
            if not is_bookable(departure) or departure.available_seats < request.number_of_pilgrims:
                logger.warning(
                    "Booking rejected - departure not bookable",
                    extra={
                        "departure_id": str(departure.id),
                        "departure_status": departure.status,
                        "requested_seats": request.number_of_pilgrims,
                        "available_seats": departure.available_seats,
                    }
                )
                raise SeatsUnavailableError(
                    departure_id=str(departure.id),
                    requested_seats=request.number_of_pilgrims,
                    available_seats=departure.available_seats,
                )

        if request.total_price is not None:
            total_price = request.total_price
        elif departure is not None:
            total_price = departure.price * request.number_of_pilgrims
        else:
            raise ValidationError(
                detail="total_price is required when no departure is chosen",
                errors={"total_price": "Field required without departure_id"},
            )

        scheduled = sum(item.amount for item in request.payment_schedules)
        if scheduled > total_price:
            raise ValidationError(
                detail=f"Payment schedules total {scheduled} exceeds booking total {total_price}",
                errors={"payment_schedules": "Sum of amounts must not exceed total_price"},
            )

        if departure is not None:
            departure.available_seats -= request.number_of_pilgrims
            refresh_departure_status(departure)

        booking = Booking(
            user_id=user.user_id,
            package_id=package.id,
            departure_id=departure.id if departure else None,
            travel_id=package.travel_id,
            booking_code=await self._new_booking_code(),
            status=BookingStatus.PENDING.value,
            number_of_pilgrims=request.number_of_pilgrims,
            total_price=total_price,
            paid_amount=0,
            remaining_amount=total_price,
            contact_name=request.contact_name,
            contact_phone=request.contact_phone,
            contact_email=request.contact_email,
            notes=request.notes,
            payment_schedules=[
                PaymentSchedule(
                    payment_type=item.payment_type.value,
                    amount=item.amount,
                    due_date=item.due_date,
                    notes=item.notes,
                )
                for item in request.payment_schedules
            ],
        )
        self.db.add(booking)
        await self.db.commit()

        metrics_collector.record_booking_created(package.package_type)
        logger.info(
            "Booking created successfully",
            extra={
                "booking_id": str(booking.id),
                "booking_code": booking.booking_code,
                "package_id": str(package.id),
                "departure_id": str(departure.id) if departure else None,
                "pilgrims": booking.number_of_pilgrims,
                "total_price": total_price,
                "remaining_seats": departure.available_seats if departure else None,
            }
        )
        return await self.get_booking_by_id_or_raise(booking.id)

    async def _restore_seats(self, booking: Booking) -> None:
        if booking.departure_id is None:
            return
        departure = await self._lock_departure(booking.departure_id)
        departure.available_seats = min(
            departure.total_seats, departure.available_seats + booking.number_of_pilgrims
        )
        refresh_departure_status(departure)

    async def update_booking_status(self, user: CurrentUser, request: UpdateBookingStatusRequest) -> Booking:
        """
        Move a booking along its lifecycle.

        Raises:
            InvalidStatusTransitionError: If the transition is not allowed
        """
        booking = await self.get_booking_by_id_or_raise(request.booking_id, for_update=True)
        await self._ensure_can_manage(user, booking)

        current = BookingStatus(booking.status)
        if request.status not in ALLOWED_TRANSITIONS[current]:
            raise InvalidStatusTransitionError(
                resource_type="booking",
                current_status=current.value,
                requested_status=request.status.value,
                allowed=allowed_transitions(current.value),
            )

        if request.status == BookingStatus.CANCELLED:
            await self._restore_seats(booking)

        booking.status = request.status.value
        if request.agent_notes is not None:
            booking.agent_notes = request.agent_notes

        await self.db.commit()

        logger.info(
            "Booking status updated",
            extra={
                "booking_id": str(booking.id),
                "from_status": current.value,
                "to_status": booking.status,
                "updated_by": user.user_id,
            }
        )
        return await self.get_booking_by_id_or_raise(booking.id)

    async def cancel_own_booking(self, user: CurrentUser, booking_id: UUID) -> Booking:
        """Let a pilgrim cancel their own booking while it is still pending."""
        booking = await self.get_booking_by_id_or_raise(booking_id, for_update=True)
        if booking.user_id != user.user_id:
            raise AuthorizationError(detail="You can only cancel your own bookings")

        if booking.status != BookingStatus.PENDING.value:
            raise InvalidStatusTransitionError(
                resource_type="booking",
                current_status=booking.status,
                requested_status=BookingStatus.CANCELLED.value,
                allowed=[],
            )

        await self._restore_seats(booking)
        booking.status = BookingStatus.CANCELLED.value
        await self.db.commit()

        logger.info("Booking cancelled by pilgrim", extra={"booking_id": str(booking.id)})
        return await self.get_booking_by_id_or_raise(booking.id)

    async def record_payment(self, user: CurrentUser, request: RecordPaymentRequest) -> Booking:
        """
        Mark a scheduled payment as paid and recompute the booking totals.

        A confirmed booking with nothing left to pay becomes ``paid``.

        Raises:
            ConflictError: If the schedule was already paid
            ValidationError: If the booking is cancelled
        """
        booking_id = await self.db.scalar(
            select(PaymentSchedule.booking_id).where(PaymentSchedule.id == request.payment_schedule_id)
        )
        if booking_id is None:
            raise NotFoundError(resource_type="payment_schedule", resource_id=str(request.payment_schedule_id))

        # The booking lock covers its schedules; read them again under it
        booking = await self.get_booking_by_id_or_raise(booking_id, for_update=True)
        await self._ensure_can_manage(user, booking)
        schedule = next(s for s in booking.payment_schedules if s.id == request.payment_schedule_id)

        if booking.status == BookingStatus.CANCELLED.value:
            raise ValidationError(detail="Payments cannot be recorded on a cancelled booking")
        if schedule.is_paid:
            raise ConflictError(
                detail="Payment has already been recorded",
                conflicting_resource={"payment_schedule_id": str(schedule.id)},
            )

        paid_amount = request.paid_amount if request.paid_amount is not None else schedule.amount
        schedule.is_paid = True
        schedule.paid_at = datetime.utcnow()
        schedule.paid_amount = paid_amount
        if request.payment_proof_url is not None:
            schedule.payment_proof_url = request.payment_proof_url
        if request.notes is not None:
            schedule.notes = request.notes

        booking.paid_amount = sum(
            s.paid_amount if s.paid_amount is not None else s.amount
            for s in booking.payment_schedules
            if s.is_paid
        )
        booking.remaining_amount = max(0, booking.total_price - booking.paid_amount)
        if booking.status == BookingStatus.CONFIRMED.value and booking.remaining_amount == 0:
            booking.status = BookingStatus.PAID.value

        await self.db.commit()

        metrics_collector.record_payment_recorded(schedule.payment_type)
        logger.info(
            "Booking payment recorded",
            extra={
                "booking_id": str(booking.id),
                "payment_schedule_id": str(schedule.id),
                "paid_amount": paid_amount,
                "remaining_amount": booking.remaining_amount,
                "status": booking.status,
            }
        )
        return await self.get_booking_by_id_or_raise(booking.id)

    async def get_booking(self, user: CurrentUser, booking_id: UUID) -> Booking:
        booking = await self.get_booking_by_id_or_raise(booking_id)
        if booking.user_id != user.user_id:
            await self._ensure_can_manage(user, booking)
        return booking

    async def _list(self, conditions: list, limit: int, offset: int) -> tuple[list[Booking], int]:
        total = await self.db.scalar(select(func.count()).select_from(Booking).where(*conditions))
        stmt = (
            select(Booking)
            .where(*conditions)
            .options(selectinload(Booking.payment_schedules))
            .order_by(Booking.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total or 0

    async def list_user_bookings(
        self, user: CurrentUser, request: ListUserBookingsRequest
    ) -> tuple[list[Booking], int]:
        conditions = [Booking.user_id == user.user_id]
        if request.status:
            conditions.append(Booking.status == request.status.value)
        return await self._list(conditions, request.limit, request.offset)

    async def list_travel_bookings(
        self, user: CurrentUser, request: ListTravelBookingsRequest
    ) -> tuple[list[Booking], int]:
        await self.travel_service.get_managed_travel(user, request.travel_id)

        conditions = [Booking.travel_id == request.travel_id]
        if request.status:
            conditions.append(Booking.status == request.status.value)
        if request.search:
            pattern = f"%{request.search}%"
            conditions.append(
                or_(
                    Booking.booking_code.ilike(pattern),
                    Booking.contact_name.ilike(pattern),
                    Booking.contact_phone.ilike(pattern),
                )
            )
        return await self._list(conditions, request.limit, request.offset)

    async def upcoming_payments(self, user: CurrentUser, today: Optional[date] = None) -> list[dict]:
        """Unpaid schedules across the user's active bookings, soonest first."""
        today = today or date.today()
        stmt = (
            select(PaymentSchedule, Booking.booking_code, Package.name, Travel.name)
            .join(Booking, PaymentSchedule.booking_id == Booking.id)
            .join(Package, Booking.package_id == Package.id)
            .join(Travel, Booking.travel_id == Travel.id)
            .where(
                Booking.user_id == user.user_id,
                Booking.status != BookingStatus.CANCELLED.value,
                PaymentSchedule.is_paid.is_(False),
            )
            .order_by(PaymentSchedule.due_date)
        )
        result = await self.db.execute(stmt)

        return [
            {
                "payment_schedule_id": schedule.id,
                "booking_id": schedule.booking_id,
                "booking_code": booking_code,
                "package_name": package_name,
                "travel_name": travel_name,
                "payment_type": schedule.payment_type,
                "amount": schedule.amount,
                "due_date": schedule.due_date,
                "is_overdue": schedule.due_date < today,
                "days_until_due": (schedule.due_date - today).days,
            }
            for schedule, booking_code, package_name, travel_name in result.all()
        ]

    async def payment_stats(self, user: CurrentUser, travel_id: UUID, today: Optional[date] = None) -> dict:
        """Booking and payment totals for a travel's dashboard."""
        await self.travel_service.get_managed_travel(user, travel_id)
        today = today or date.today()

        active = [Booking.travel_id == travel_id, Booking.status != BookingStatus.CANCELLED.value]

        total_bookings = await self.db.scalar(
            select(func.count()).select_from(Booking).where(Booking.travel_id == travel_id)
        )
        totals = (
            await self.db.execute(
                select(
                    func.coalesce(func.sum(Booking.paid_amount), 0),
                    func.coalesce(func.sum(Booking.remaining_amount), 0),
                ).where(*active)
            )
        ).one()

        unpaid = (
            select(func.count())
            .select_from(PaymentSchedule)
            .join(Booking, PaymentSchedule.booking_id == Booking.id)
            .where(*active, PaymentSchedule.is_paid.is_(False))
        )
        pending = await self.db.scalar(unpaid.where(PaymentSchedule.due_date >= today))
        overdue = await self.db.scalar(unpaid.where(PaymentSchedule.due_date < today))

        return {
            "travel_id": travel_id,
            "total_bookings": total_bookings or 0,
            "pending_payments": pending or 0,
            "overdue_payments": overdue or 0,
            "total_paid": int(totals[0]),
            "total_remaining": int(totals[1]),
        }

    async def list_notifications(self, user: CurrentUser) -> list[PaymentNotification]:
        stmt = (
            select(PaymentNotification)
            .where(PaymentNotification.user_id == user.user_id)
            .order_by(PaymentNotification.sent_at.desc())
            .limit(NOTIFICATION_LIST_LIMIT)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def mark_notification_read(self, user: CurrentUser, notification_id: UUID) -> PaymentNotification:
        notification = await self.db.get(PaymentNotification, notification_id)
        if notification is None or notification.user_id != user.user_id:
            raise NotFoundError(resource_type="notification", resource_id=str(notification_id))

        if not notification.is_read:
            notification.is_read = True
            notification.read_at = datetime.utcnow()
            await self.db.commit()

        return notification
