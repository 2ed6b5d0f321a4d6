"""Unit tests for the travel, package, booking, credit and notification services."""

from datetime import date, datetime, timedelta

import pytest

from arah_umroh.core.exceptions import (
    AuthorizationError,
    ConflictError,
    InsufficientCreditsError,
    InvalidStatusTransitionError,
    NotFoundError,
    PlanLimitError,
    SeatsUnavailableError,
    ValidationError,
)
from arah_umroh.models.booking import BookingStatus, PaymentNotification
from arah_umroh.models.package import DepartureStatus
from arah_umroh.schemas.booking import CreateBookingRequest, RecordPaymentRequest, UpdateBookingStatusRequest
from arah_umroh.schemas.inquiry import CreateInquiryRequest
from arah_umroh.schemas.membership import PlanId
from arah_umroh.schemas.notification import ListAgentNotificationsRequest
from arah_umroh.schemas.package import AddDepartureRequest, CreatePackageRequest, UpdateDepartureRequest
from arah_umroh.schemas.travel import CreateTravelRequest
from arah_umroh.services.agent_notification_service import AgentNotificationService
from arah_umroh.services.booking_service import BookingService
from arah_umroh.services.credit_service import CreditService
from arah_umroh.services.departure_reminder_service import DepartureReminderService
from arah_umroh.services.inquiry_service import InquiryService
from arah_umroh.services.membership_service import MembershipService
from arah_umroh.services.package_service import PackageService
from arah_umroh.services.payment_reminder_service import PaymentReminderService
from arah_umroh.services.settings_service import FREE_CREDITS_ON_REGISTER, SettingsService
from arah_umroh.services.travel_service import TravelService


async def create_travel(session, owner, name="Al Hijrah Tour"):
    return await TravelService(session).create_travel(owner, CreateTravelRequest(name=name))


async def create_package_with_departure(session, owner, travel, seats=10, price=30_000_000):
    service = PackageService(session)
    package = await service.create_package(
        owner,
        CreatePackageRequest(travel_id=travel.id, name="Umroh Reguler 9 Hari", duration_days=9),
    )
    departure_date = date.today() + timedelta(days=60)
    departure = await service.add_departure(
        owner,
        AddDepartureRequest(
            package_id=package.id,
            departure_date=departure_date,
            return_date=departure_date + timedelta(days=9),
            price=price,
            total_seats=seats,
        ),
    )
    return package, departure


def booking_request(package, departure=None, pilgrims=2, **extra):
    return CreateBookingRequest(
        package_id=package.id,
        departure_id=departure.id if departure else None,
        number_of_pilgrims=pilgrims,
        contact_name="Siti Aminah",
        contact_phone="081234567890",
        **extra,
    )


class TestTravelService:
    @pytest.mark.asyncio
    async def test_create_travel_grants_free_credits(self, test_session, agent):
        travel = await create_travel(test_session, agent)

        assert travel.slug == "al-hijrah-tour"
        assert travel.owner_id == agent.user_id
        balance = await CreditService(test_session).get_balance(travel.id)
        assert balance["credits_remaining"] == 3

    @pytest.mark.asyncio
    async def test_free_credits_can_be_disabled(self, test_session, agent):
        await SettingsService(test_session).set(FREE_CREDITS_ON_REGISTER, {"enabled": False, "amount": 3})
        travel = await create_travel(test_session, agent)

        balance = await CreditService(test_session).get_balance(travel.id)
        assert balance["credits_remaining"] == 0

    @pytest.mark.asyncio
    async def test_one_travel_per_agent(self, test_session, agent):
        await create_travel(test_session, agent)
        with pytest.raises(ConflictError):
            await create_travel(test_session, agent, name="Second Travel")

    @pytest.mark.asyncio
    async def test_duplicate_names_get_unique_slugs(self, test_session, agent, other_agent):
        first = await create_travel(test_session, agent)
        second = await create_travel(test_session, other_agent)
        assert first.slug != second.slug
        assert second.slug.startswith("al-hijrah-tour-")

    @pytest.mark.asyncio
    async def test_only_owner_manages(self, test_session, agent, other_agent, admin):
        travel = await create_travel(test_session, agent)
        service = TravelService(test_session)

        with pytest.raises(AuthorizationError):
            await service.get_managed_travel(other_agent, travel.id)
        assert (await service.get_managed_travel(admin, travel.id)).id == travel.id


class TestPackageService:
    @pytest.mark.asyncio
    async def test_free_plan_package_limit(self, test_session, agent):
        travel = await create_travel(test_session, agent)
        service = PackageService(test_session)
        for index in range(3):
            await service.create_package(
                agent, CreatePackageRequest(travel_id=travel.id, name=f"Paket {index}", duration_days=9)
            )

        with pytest.raises(PlanLimitError):
            await service.create_package(
                agent, CreatePackageRequest(travel_id=travel.id, name="Paket 4", duration_days=9)
            )

    @pytest.mark.asyncio
    async def test_departure_status_follows_seats(self, test_session, agent):
        travel = await create_travel(test_session, agent)
        package, departure = await create_package_with_departure(test_session, agent, travel, seats=10)
        assert departure.status == DepartureStatus.AVAILABLE.value

        updated = await PackageService(test_session).update_departure(
            agent, UpdateDepartureRequest(departure_id=departure.id, available_seats=2)
        )
        assert updated.status == DepartureStatus.LIMITED.value

    @pytest.mark.asyncio
    async def test_available_seats_cannot_exceed_total(self, test_session, agent):
        travel = await create_travel(test_session, agent)
        package, departure = await create_package_with_departure(test_session, agent, travel, seats=10)

        with pytest.raises(ValidationError):
            await PackageService(test_session).update_departure(
                agent, UpdateDepartureRequest(departure_id=departure.id, available_seats=11)
            )


class TestBookingService:
    @pytest.mark.asyncio
    async def test_booking_reserves_seats(self, test_session, agent, jamaah):
        travel = await create_travel(test_session, agent)
        package, departure = await create_package_with_departure(test_session, agent, travel, seats=10)

        booking = await BookingService(test_session).create_booking(jamaah, booking_request(package, departure))

        assert booking.status == BookingStatus.PENDING.value
        assert booking.total_price == 60_000_000
        assert booking.remaining_amount == 60_000_000
        assert len(booking.booking_code) == 8
        refreshed = await PackageService(test_session).get_departure_or_raise(departure.id)
        assert refreshed.available_seats == 8

    @pytest.mark.asyncio
    async def test_booking_rejected_without_seats(self, test_session, agent, jamaah):
        travel = await create_travel(test_session, agent)
        package, departure = await create_package_with_departure(test_session, agent, travel, seats=3)

        with pytest.raises(SeatsUnavailableError):
            await BookingService(test_session).create_booking(jamaah, booking_request(package, departure, pilgrims=4))

    @pytest.mark.asyncio
    async def test_schedule_total_cannot_exceed_price(self, test_session, agent, jamaah):
        travel = await create_travel(test_session, agent)
        package, departure = await create_package_with_departure(test_session, agent, travel)
        due = (date.today() + timedelta(days=10)).isoformat()

        request = booking_request(
            package, departure, pilgrims=1,
            payment_schedules=[
                {"payment_type": "dp", "amount": 20_000_000, "due_date": due},
                {"payment_type": "final", "amount": 20_000_000, "due_date": due},
            ],
        )
        with pytest.raises(ValidationError):
            await BookingService(test_session).create_booking(jamaah, request)

    @pytest.mark.asyncio
    async def test_cancel_restores_seats(self, test_session, agent, jamaah):
        travel = await create_travel(test_session, agent)
        package, departure = await create_package_with_departure(test_session, agent, travel, seats=2)
        service = BookingService(test_session)

        booking = await service.create_booking(jamaah, booking_request(package, departure, pilgrims=2))
        full = await PackageService(test_session).get_departure_or_raise(departure.id)
        assert full.status == DepartureStatus.FULL.value

        await service.cancel_own_booking(jamaah, booking.id)
        restored = await PackageService(test_session).get_departure_or_raise(departure.id)
        assert restored.available_seats == 2
        assert restored.status == DepartureStatus.AVAILABLE.value

    @pytest.mark.asyncio
    async def test_invalid_transition(self, test_session, agent, jamaah):
        travel = await create_travel(test_session, agent)
        package, departure = await create_package_with_departure(test_session, agent, travel)
        service = BookingService(test_session)
        booking = await service.create_booking(jamaah, booking_request(package, departure))

        with pytest.raises(InvalidStatusTransitionError):
            await service.update_booking_status(
                agent, UpdateBookingStatusRequest(booking_id=booking.id, status=BookingStatus.COMPLETED)
            )

    @pytest.mark.asyncio
    async def test_full_payment_marks_confirmed_booking_paid(self, test_session, agent, jamaah):
        travel = await create_travel(test_session, agent)
        package, departure = await create_package_with_departure(test_session, agent, travel)
        service = BookingService(test_session)
        due = date.today() + timedelta(days=20)

        booking = await service.create_booking(
            jamaah,
            booking_request(
                package, departure, pilgrims=1,
                payment_schedules=[
                    {"payment_type": "dp", "amount": 10_000_000, "due_date": due.isoformat()},
                    {"payment_type": "final", "amount": 20_000_000, "due_date": due.isoformat()},
                ],
            ),
        )
        await service.update_booking_status(
            agent, UpdateBookingStatusRequest(booking_id=booking.id, status=BookingStatus.CONFIRMED)
        )

        dp, final = sorted(booking.payment_schedules, key=lambda s: s.amount)
        booking = await service.record_payment(agent, RecordPaymentRequest(payment_schedule_id=dp.id))
        assert booking.paid_amount == 10_000_000
        assert booking.status == BookingStatus.CONFIRMED.value

        booking = await service.record_payment(agent, RecordPaymentRequest(payment_schedule_id=final.id))
        assert booking.remaining_amount == 0
        assert booking.status == BookingStatus.PAID.value

        with pytest.raises(ConflictError):
            await service.record_payment(agent, RecordPaymentRequest(payment_schedule_id=final.id))

    @pytest.mark.asyncio
    async def test_other_agent_cannot_manage_booking(self, test_session, agent, other_agent, jamaah):
        travel = await create_travel(test_session, agent)
        package, departure = await create_package_with_departure(test_session, agent, travel)
        service = BookingService(test_session)
        booking = await service.create_booking(jamaah, booking_request(package, departure))

        with pytest.raises(AuthorizationError):
            await service.update_booking_status(
                other_agent, UpdateBookingStatusRequest(booking_id=booking.id, status=BookingStatus.CONFIRMED)
            )


class TestPaymentReminders:
    @pytest.mark.asyncio
    async def test_reminders_are_sent_once(self, test_session, agent, jamaah):
        travel = await create_travel(test_session, agent)
        package, departure = await create_package_with_departure(test_session, agent, travel)
        today = date.today()

        await BookingService(test_session).create_booking(
            jamaah,
            booking_request(
                package, departure, pilgrims=1,
                payment_schedules=[
                    {"payment_type": "dp", "amount": 5_000_000, "due_date": (today + timedelta(days=3)).isoformat()},
                    {"payment_type": "installment", "amount": 5_000_000,
                     "due_date": (today - timedelta(days=1)).isoformat()},
                ],
            ),
        )

        service = PaymentReminderService(test_session)
        first = await service.send_payment_reminders(today)
        assert first["h3"] == 1
        assert first["overdue"] == 1

        second = await service.send_payment_reminders(today)
        assert second["h3"] == 0 and second["overdue"] == 0

        notifications = (await test_session.execute(
            PaymentNotification.__table__.select()
        )).all()
        assert len(notifications) == 2


class TestDepartureReminders:
    @pytest.mark.asyncio
    async def test_countdown_steps_are_sent_once(self, test_session, agent, jamaah):
        travel = await create_travel(test_session, agent)
        package, departure = await create_package_with_departure(test_session, agent, travel)
        bookings = BookingService(test_session)
        booking = await bookings.create_booking(jamaah, booking_request(package, departure, pilgrims=1))
        await bookings.update_booking_status(
            agent, UpdateBookingStatusRequest(booking_id=booking.id, status=BookingStatus.CONFIRMED)
        )

        service = DepartureReminderService(test_session)
        first = await service.send_departure_reminders(departure.departure_date - timedelta(days=30))
        assert first["h30"] == 1
        assert sum(v for k, v in first.items() if k != "run_date") == 1

        again = await service.send_departure_reminders(departure.departure_date - timedelta(days=30))
        assert again["h30"] == 0

        between = await service.send_departure_reminders(departure.departure_date - timedelta(days=20))
        assert sum(v for k, v in between.items() if k != "run_date") == 0

        week = await service.send_departure_reminders(departure.departure_date - timedelta(days=7))
        assert week["h7"] == 1

        notifications = await service.list_notifications(jamaah)
        assert sorted(n.notification_type for n in notifications) == ["h30", "h7"]
        assert all(n.booking_id == booking.id for n in notifications)
        assert "Umroh Reguler 9 Hari" in notifications[0].body

    @pytest.mark.asyncio
    async def test_pending_and_cancelled_bookings_are_skipped(self, test_session, agent, jamaah):
        travel = await create_travel(test_session, agent)
        package, departure = await create_package_with_departure(test_session, agent, travel)
        bookings = BookingService(test_session)
        await bookings.create_booking(jamaah, booking_request(package, departure, pilgrims=1))
        cancelled = await bookings.create_booking(jamaah, booking_request(package, departure, pilgrims=1))
        await bookings.cancel_own_booking(jamaah, cancelled.id)

        result = await DepartureReminderService(test_session).send_departure_reminders(
            departure.departure_date - timedelta(days=14)
        )

        assert result["h14"] == 0

    @pytest.mark.asyncio
    async def test_only_owner_marks_read(self, test_session, agent, jamaah, other_agent):
        travel = await create_travel(test_session, agent)
        package, departure = await create_package_with_departure(test_session, agent, travel)
        bookings = BookingService(test_session)
        booking = await bookings.create_booking(jamaah, booking_request(package, departure, pilgrims=1))
        await bookings.update_booking_status(
            agent, UpdateBookingStatusRequest(booking_id=booking.id, status=BookingStatus.CONFIRMED)
        )
        service = DepartureReminderService(test_session)
        await service.send_departure_reminders(departure.departure_date - timedelta(days=3))
        notification = (await service.list_notifications(jamaah))[0]

        with pytest.raises(NotFoundError):
            await service.mark_read(other_agent, notification.id)

        read = await service.mark_read(jamaah, notification.id)
        assert read.is_read is True
        assert read.read_at is not None


class TestAgentNotifications:
    @pytest.mark.asyncio
    async def test_new_activity_and_overdue_payments(self, test_session, agent, jamaah):
        travel = await create_travel(test_session, agent)
        package, departure = await create_package_with_departure(test_session, agent, travel)
        await InquiryService(test_session).create_inquiry(
            CreateInquiryRequest(package_id=package.id, full_name="Ahmad Fauzi", phone="081234567890")
        )
        overdue = (date.today() - timedelta(days=3)).isoformat()
        booking = await BookingService(test_session).create_booking(
            jamaah,
            booking_request(
                package, departure, pilgrims=1,
                payment_schedules=[{"payment_type": "dp", "amount": 5_000_000, "due_date": overdue}],
            ),
        )

        service = AgentNotificationService(test_session)
        now = datetime.utcnow()
        assert await service.check_notifications(now) == {
            "new_inquiry": 1,
            "new_booking": 1,
            "overdue_payment": 1,
        }
        assert await service.check_notifications(now) == {
            "new_inquiry": 0,
            "new_booking": 0,
            "overdue_payment": 0,
        }

        # A day later only the overdue payment is raised again
        later = await service.check_notifications(now + timedelta(hours=25))
        assert later == {"new_inquiry": 0, "new_booking": 0, "overdue_payment": 1}

        notifications, total, unread = await service.list_notifications(
            agent, ListAgentNotificationsRequest(travel_id=travel.id, notification_type="overdue_payment")
        )
        assert total == 2
        assert unread == 4
        assert all(n.reference_id == booking.id for n in notifications)
        assert f"Booking {booking.booking_code} (Siti Aminah) telat" in notifications[0].body

    @pytest.mark.asyncio
    async def test_cancelled_booking_is_not_overdue(self, test_session, agent, jamaah):
        travel = await create_travel(test_session, agent)
        package, departure = await create_package_with_departure(test_session, agent, travel)
        overdue = (date.today() - timedelta(days=3)).isoformat()
        bookings = BookingService(test_session)
        booking = await bookings.create_booking(
            jamaah,
            booking_request(
                package, departure, pilgrims=1,
                payment_schedules=[{"payment_type": "dp", "amount": 5_000_000, "due_date": overdue}],
            ),
        )
        await bookings.cancel_own_booking(jamaah, booking.id)

        counts = await AgentNotificationService(test_session).check_notifications()

        assert counts["overdue_payment"] == 0
        assert counts["new_booking"] == 1

    @pytest.mark.asyncio
    async def test_inbox_belongs_to_the_travel(self, test_session, agent, other_agent, jamaah):
        travel = await create_travel(test_session, agent)
        package, departure = await create_package_with_departure(test_session, agent, travel)
        await BookingService(test_session).create_booking(jamaah, booking_request(package, departure))
        service = AgentNotificationService(test_session)
        await service.check_notifications()

        with pytest.raises(AuthorizationError):
            await service.list_notifications(other_agent, ListAgentNotificationsRequest(travel_id=travel.id))

        assert await service.mark_all_read(agent, travel.id) == 1
        _, total, unread = await service.list_notifications(
            agent, ListAgentNotificationsRequest(travel_id=travel.id, unread_only=True)
        )
        assert total == 0
        assert unread == 0


class TestCreditService:
    @pytest.mark.asyncio
    async def test_spend_deducts_and_rejects_overdraw(self, test_session, agent):
        travel = await create_travel(test_session, agent)
        service = CreditService(test_session)

        await service.spend(travel.id, 2)
        balance = await service.get_balance(travel.id)
        assert balance["credits_remaining"] == 1
        assert balance["credits_used"] == 2

        with pytest.raises(InsufficientCreditsError):
            await service.spend(travel.id, 2)

    @pytest.mark.asyncio
    async def test_purchase_review_adds_credits_once(self, test_session, agent, admin):
        travel = await create_travel(test_session, agent)
        service = CreditService(test_session)

        transaction = await service.request_purchase(travel.id, 10)
        assert transaction.price == 350000
        assert (await service.get_balance(travel.id))["credits_remaining"] == 3

        await service.review_purchase(transaction.id, approve=True, reviewer_id=admin.user_id)
        assert (await service.get_balance(travel.id))["credits_remaining"] == 13

        with pytest.raises(InvalidStatusTransitionError):
            await service.review_purchase(transaction.id, approve=True, reviewer_id=admin.user_id)

    @pytest.mark.asyncio
    async def test_unknown_pack_rejected(self, test_session, agent):
        travel = await create_travel(test_session, agent)
        with pytest.raises(ValidationError):
            await CreditService(test_session).request_purchase(travel.id, 7)


class TestMembershipService:
    @pytest.mark.asyncio
    async def test_approval_activates_plan_and_grants_credits(self, test_session, agent, admin):
        travel = await create_travel(test_session, agent)
        service = MembershipService(test_session)

        membership = await service.request_membership(travel.id, PlanId.PRO)
        with pytest.raises(ConflictError):
            await service.request_membership(travel.id, PlanId.PREMIUM)

        membership = await service.review_membership(membership.id, approve=True, reviewer_id=admin.user_id)
        assert membership.end_date > datetime.utcnow() + timedelta(days=29)

        plan = await service.get_effective_plan(travel.id)
        assert plan.id == PlanId.PRO
        balance = await CreditService(test_session).get_balance(travel.id)
        assert balance["credits_remaining"] == 3 + 4

    @pytest.mark.asyncio
    async def test_free_plan_cannot_be_requested(self, test_session, agent):
        travel = await create_travel(test_session, agent)
        with pytest.raises(ValidationError):
            await MembershipService(test_session).request_membership(travel.id, PlanId.FREE)

    @pytest.mark.asyncio
    async def test_expire_due(self, test_session, agent, admin):
        travel = await create_travel(test_session, agent)
        service = MembershipService(test_session)
        membership = await service.request_membership(travel.id, PlanId.PRO)
        await service.review_membership(membership.id, approve=True, reviewer_id=admin.user_id)

        expired = await service.expire_due(now=datetime.utcnow() + timedelta(days=31))
        assert expired == 1
