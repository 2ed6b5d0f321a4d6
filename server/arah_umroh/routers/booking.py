"""Booking router for pilgrim bookings, payment schedules and reminders."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import AgentAuth, CurrentUser, DatabaseSession, IdempotencyKey, RequiredAuth
from ..core.exceptions import InternalServerError, ProblemDetailsException
from ..schemas.booking import (
    Booking,
    BookingDetail,
    BookingIdRequest,
    BookingList,
    CreateBookingRequest,
    ListTravelBookingsRequest,
    ListUserBookingsRequest,
    NotificationIdRequest,
    PaymentNotification,
    PaymentSchedule,
    PaymentStats,
    RecordPaymentRequest,
    TravelIdRequest,
    UpcomingPayment,
    UpdateBookingStatusRequest,
)
from ..services.booking_service import BookingService, calculate_payment_progress
from ..services.idempotency_service import IdempotencyService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/booking", tags=["booking"])


def _convert_booking_to_schema(booking_model) -> BookingDetail:
    """Convert booking model, with its loaded schedules, to the detail schema."""
    return BookingDetail(
        **Booking.model_validate(booking_model).model_dump(),
        payment_schedules=[PaymentSchedule.model_validate(s) for s in booking_model.payment_schedules],
        payment_progress=calculate_payment_progress(booking_model.paid_amount, booking_model.total_price),
    )


def _booking_response(booking_model) -> JSONResponse:
    return JSONResponse(
        status_code=200,
        content=_convert_booking_to_schema(booking_model).model_dump(mode="json")
    )


@router.post("/create", response_model=BookingDetail)
async def create_booking(
    request: CreateBookingRequest,
    idempotency_key: str = IdempotencyKey,
    user: CurrentUser = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """
    Book seats on a package departure.

    This operation is idempotent based on the Idempotency-Key header.
    Seats are taken from the departure immediately.
    """
    booking_service = BookingService(db)

    async def create_operation():
        booking = await booking_service.create_booking(user, request)
        return _convert_booking_to_schema(booking).model_dump(mode="json")

    try:
        return await IdempotencyService(db).execute(
            "booking/create",
            idempotency_key,
            request.model_dump(mode="json"),
            create_operation,
            user_id=user.user_id,
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in booking creation",
            extra={
                "package_id": str(request.package_id),
                "departure_id": str(request.departure_id) if request.departure_id else None,
                "user_id": user.user_id,
                "error": str(e),
            },
            exc_info=True
        )
        raise InternalServerError() from e


@router.post("/update-status", response_model=BookingDetail)
async def update_booking_status(
    request: UpdateBookingStatusRequest,
    user: CurrentUser = AgentAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """
    Move a booking through its lifecycle.

    Cancelling gives the booked seats back to the departure.
    """
    booking = await BookingService(db).update_booking_status(user, request)
    return _booking_response(booking)


@router.post("/cancel", response_model=BookingDetail)
async def cancel_booking(
    request: BookingIdRequest,
    user: CurrentUser = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Cancel one of the caller's own bookings while it is still pending."""
    booking = await BookingService(db).cancel_own_booking(user, request.booking_id)
    return _booking_response(booking)


@router.post("/record-payment", response_model=BookingDetail)
async def record_payment(
    request: RecordPaymentRequest,
    user: CurrentUser = AgentAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Mark a scheduled payment as paid and recompute the booking totals."""
    try:
        booking = await BookingService(db).record_payment(user, request)
        return _booking_response(booking)

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error recording payment",
            extra={"payment_schedule_id": str(request.payment_schedule_id), "error": str(e)},
            exc_info=True
        )
        raise InternalServerError() from e


@router.post("/get", response_model=BookingDetail)
async def get_booking(
    request: BookingIdRequest,
    user: CurrentUser = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    booking = await BookingService(db).get_booking(user, request.booking_id)
    return _booking_response(booking)


@router.post("/list-mine", response_model=BookingList)
async def list_my_bookings(
    request: ListUserBookingsRequest,
    user: CurrentUser = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    bookings, total = await BookingService(db).list_user_bookings(user, request)
    response_data = BookingList(
        items=[_convert_booking_to_schema(b) for b in bookings],
        total=total,
        limit=request.limit,
        offset=request.offset,
    )
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))


@router.post("/list-travel", response_model=BookingList)
async def list_travel_bookings(
    request: ListTravelBookingsRequest,
    user: CurrentUser = AgentAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    bookings, total = await BookingService(db).list_travel_bookings(user, request)
    response_data = BookingList(
        items=[_convert_booking_to_schema(b) for b in bookings],
        total=total,
        limit=request.limit,
        offset=request.offset,
    )
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))


@router.post("/upcoming-payments", response_model=list[UpcomingPayment])
async def upcoming_payments(
    user: CurrentUser = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Unpaid installments across the caller's bookings, soonest first."""
    payments = await BookingService(db).upcoming_payments(user)
    return JSONResponse(
        status_code=200,
        content=[UpcomingPayment.model_validate(p).model_dump(mode="json") for p in payments]
    )


@router.post("/payment-stats", response_model=PaymentStats)
async def payment_stats(
    request: TravelIdRequest,
    user: CurrentUser = AgentAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    stats = await BookingService(db).payment_stats(user, request.travel_id)
    return JSONResponse(
        status_code=200,
        content=PaymentStats.model_validate(stats).model_dump(mode="json")
    )


@router.post("/notifications", response_model=list[PaymentNotification])
async def list_notifications(
    user: CurrentUser = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    notifications = await BookingService(db).list_notifications(user)
    return JSONResponse(
        status_code=200,
        content=[PaymentNotification.model_validate(n).model_dump(mode="json") for n in notifications]
    )


@router.post("/notifications/mark-read", response_model=PaymentNotification)
async def mark_notification_read(
    request: NotificationIdRequest,
    user: CurrentUser = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    notification = await BookingService(db).mark_notification_read(user, request.notification_id)
    return JSONResponse(
        status_code=200,
        content=PaymentNotification.model_validate(notification).model_dump(mode="json")
    )
