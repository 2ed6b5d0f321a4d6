"""Unit tests for the pure business rules shared by the services."""

from datetime import date, datetime, timedelta

import pytest

from arah_umroh.models.booking import PaymentSchedule, ReminderType
from arah_umroh.models.featured import FeaturedDuration, FeaturedPosition
from arah_umroh.models.notification import DepartureReminderType
from arah_umroh.models.package import Departure, DepartureStatus, Package
from arah_umroh.models.subscription import SubscriptionStatus, UserSubscription
from arah_umroh.models.travel import Travel
from arah_umroh.schemas.membership import PlanId
from arah_umroh.schemas.recommendation import RecommendationRequest
from arah_umroh.schemas.setting import FeaturedLimits, FeaturedPricing
from arah_umroh.services.booking_service import allowed_transitions, calculate_payment_progress, generate_booking_code
from arah_umroh.services.checklist_service import percent_complete
from arah_umroh.services.departure_reminder_service import (
    departure_reminder_due,
    departure_reminder_message,
    format_long_date,
)
from arah_umroh.services.featured_service import calculate_featured_cost, position_limit
from arah_umroh.services.inquiry_service import conversion_rate
from arah_umroh.services.membership_service import days_remaining, get_plan
from arah_umroh.services.package_service import (
    derive_departure_status,
    is_bookable,
    lowest_bookable_price,
    month_bounds,
    refresh_departure_status,
)
from arah_umroh.services.payment_reminder_service import format_rupiah, reminder_due, reminder_message
from arah_umroh.services.recommendation_service import score_package
from arah_umroh.services.settings_service import parse_credit_prices
from arah_umroh.services.shop_order_service import generate_order_code
from arah_umroh.services.subscription_service import is_subscription_active
from arah_umroh.services.travel_service import slugify

TODAY = date(2025, 3, 1)


def make_departure(price=30_000_000, available=10, total=10, status="available", days_out=30):
    return Departure(
        price=price,
        available_seats=available,
        total_seats=total,
        status=status,
        departure_date=TODAY + timedelta(days=days_out),
        return_date=TODAY + timedelta(days=days_out + 9),
    )


def make_schedule(due_in_days: int, **flags) -> PaymentSchedule:
    schedule = PaymentSchedule(
        payment_type="dp",
        amount=5_000_000,
        due_date=TODAY + timedelta(days=due_in_days),
        is_paid=flags.pop("is_paid", False),
        reminder_sent_h7=False,
        reminder_sent_h3=False,
        reminder_sent_h1=False,
        reminder_sent_overdue=False,
    )
    for name, value in flags.items():
        setattr(schedule, name, value)
    return schedule


class TestSlugify:
    def test_lowercases_and_dashes(self):
        assert slugify("Al Hijrah Tour & Travel") == "al-hijrah-tour-travel"

    def test_trims_separators(self):
        assert slugify("  --Barokah!!  ") == "barokah"

    def test_empty_falls_back(self):
        assert slugify("!!!") == "travel"


class TestDepartureStatus:
    def test_full_when_no_seats(self):
        assert derive_departure_status(0, 40) == DepartureStatus.FULL

    def test_limited_at_twenty_percent(self):
        assert derive_departure_status(8, 40) == DepartureStatus.LIMITED
        assert derive_departure_status(9, 40) == DepartureStatus.AVAILABLE

    def test_manual_status_survives_refresh(self):
        departure = make_departure(available=0, status=DepartureStatus.WAITLIST.value)
        refresh_departure_status(departure)
        assert departure.status == DepartureStatus.WAITLIST.value

    def test_refresh_rederives_status(self):
        departure = make_departure(available=1, total=10)
        refresh_departure_status(departure)
        assert departure.status == DepartureStatus.LIMITED.value


class TestBookable:
    def test_available_future_departure(self):
        assert is_bookable(make_departure(), TODAY)

    def test_past_departure_is_not_bookable(self):
        assert not is_bookable(make_departure(days_out=-1), TODAY)

    def test_full_or_cancelled_is_not_bookable(self):
        assert not is_bookable(make_departure(available=0, status="full"), TODAY)
        assert not is_bookable(make_departure(status="cancelled"), TODAY)

    def test_lowest_price_ignores_unbookable(self):
        departures = [
            make_departure(price=25_000_000, status="cancelled"),
            make_departure(price=28_000_000),
            make_departure(price=31_000_000, status="limited", available=1),
        ]
        assert lowest_bookable_price(departures, TODAY) == 28_000_000

    def test_lowest_price_none_without_bookable(self):
        assert lowest_bookable_price([make_departure(status="full", available=0)], TODAY) is None


def test_month_bounds_wraps_december():
    assert month_bounds("2025-12") == (date(2025, 12, 1), date(2026, 1, 1))
    assert month_bounds("2025-02") == (date(2025, 2, 1), date(2025, 3, 1))


class TestPaymentProgress:
    @pytest.mark.parametrize(
        "paid,total,expected",
        [(0, 30_000_000, 0), (10_000_000, 30_000_000, 33), (20_000_000, 30_000_000, 67),
         (30_000_000, 30_000_000, 100), (40_000_000, 30_000_000, 100), (5, 0, 0)],
    )
    def test_rounded_and_clamped(self, paid, total, expected):
        assert calculate_payment_progress(paid, total) == expected


def test_allowed_booking_transitions():
    assert allowed_transitions("pending") == ["cancelled", "confirmed"]
    assert allowed_transitions("paid") == ["cancelled", "completed"]
    assert allowed_transitions("completed") == []


def test_codes_use_expected_shape():
    code = generate_booking_code()
    assert len(code) == 8 and code.isalnum() and code.upper() == code
    order_code = generate_order_code()
    assert order_code.startswith("ORD-") and len(order_code) == 12


class TestFeaturedCost:
    def test_default_prices(self):
        pricing = FeaturedPricing()
        assert calculate_featured_cost(pricing, FeaturedPosition.HOME, FeaturedDuration.DAILY) == 8
        assert calculate_featured_cost(pricing, FeaturedPosition.SEARCH, FeaturedDuration.WEEKLY) == 30
        assert calculate_featured_cost(pricing, FeaturedPosition.CATEGORY, FeaturedDuration.MONTHLY) == 80
        assert calculate_featured_cost(pricing, FeaturedPosition.HOME, FeaturedDuration.MONTHLY) == 120

    def test_position_limits(self):
        limits = FeaturedLimits(max_home_total=2, max_category_total=4)
        assert position_limit(limits, FeaturedPosition.HOME) == 2
        assert position_limit(limits, FeaturedPosition.CATEGORY) == 4
        assert position_limit(limits, FeaturedPosition.SEARCH) is None


class TestReminders:
    @pytest.mark.parametrize(
        "due_in,expected",
        [(7, ReminderType.H7), (3, ReminderType.H3), (1, ReminderType.H1),
         (-2, ReminderType.OVERDUE), (5, None), (0, None)],
    )
    def test_reminder_due(self, due_in, expected):
        assert reminder_due(make_schedule(due_in), TODAY) == expected

    def test_reminder_sent_once(self):
        assert reminder_due(make_schedule(3, reminder_sent_h3=True), TODAY) is None
        assert reminder_due(make_schedule(-1, reminder_sent_overdue=True), TODAY) is None

    def test_paid_schedule_gets_nothing(self):
        assert reminder_due(make_schedule(-5, is_paid=True), TODAY) is None

    def test_message_mentions_amount_and_code(self):
        title, body = reminder_message(ReminderType.H3, "AB12CD34", make_schedule(3))
        assert title == "Pengingat pembayaran H-3"
        assert "Rp 5.000.000" in body and "AB12CD34" in body

    def test_format_rupiah(self):
        assert format_rupiah(2_500_000) == "Rp 2.500.000"
        assert format_rupiah(0) == "Rp 0"


class TestDepartureReminders:
    @pytest.mark.parametrize(
        "days_out,expected",
        [(30, DepartureReminderType.H30), (14, DepartureReminderType.H14), (7, DepartureReminderType.H7),
         (3, DepartureReminderType.H3), (1, DepartureReminderType.H1), (0, DepartureReminderType.H0),
         (31, None), (10, None), (2, None), (-1, None)],
    )
    def test_reminder_due(self, days_out, expected):
        assert departure_reminder_due(TODAY + timedelta(days=days_out), TODAY) == expected

    def test_format_long_date(self):
        assert format_long_date(TODAY) == "Sabtu, 1 Maret 2025"
        assert format_long_date(date(2025, 12, 29)) == "Senin, 29 Desember 2025"

    def test_message_names_package_and_date(self):
        title, body = departure_reminder_message(DepartureReminderType.H7, "Umroh Plus Turki", TODAY)
        assert title == "Seminggu Menuju Tanah Suci"
        assert body.startswith("Umroh Plus Turki: ")
        assert body.endswith("Keberangkatan: Sabtu, 1 Maret 2025")

    def test_departure_day_message(self):
        title, body = departure_reminder_message(DepartureReminderType.H0, "Umroh Reguler", TODAY)
        assert title == "Hari Keberangkatan!"
        assert "Selamat menunaikan ibadah" in body


class TestCreditPrices:
    def test_parses_and_sorts(self):
        assert parse_credit_prices({"10": 350000, "1": "50000"}) == {1: 50000, 10: 350000}

    @pytest.mark.parametrize("value", [{}, [], {"0": 1000}, {"5": -1}, {"x": 100}])
    def test_rejects_invalid(self, value):
        with pytest.raises(ValueError):
            parse_credit_prices(value)


class TestMembershipPlans:
    def test_unknown_plan_is_free(self):
        assert get_plan(None).id == PlanId.FREE
        assert get_plan("platinum").id == PlanId.FREE

    def test_plan_limits(self):
        assert get_plan("pro").max_packages == 5
        assert get_plan("premium").max_packages == 10

    def test_days_remaining_rounds_up(self):
        now = datetime(2025, 3, 1, 12, 0)
        assert days_remaining(now + timedelta(days=2, hours=1), now) == 3
        assert days_remaining(now - timedelta(days=1), now) == 0
        assert days_remaining(None, now) == 0


def test_subscription_active_requires_status_and_future_end():
    now = datetime(2025, 3, 1)
    active = UserSubscription(status=SubscriptionStatus.ACTIVE.value, end_date=now + timedelta(days=1))
    expired = UserSubscription(status=SubscriptionStatus.ACTIVE.value, end_date=now - timedelta(days=1))
    pending = UserSubscription(status=SubscriptionStatus.PENDING.value, end_date=None)

    assert is_subscription_active(active, now)
    assert not is_subscription_active(expired, now)
    assert not is_subscription_active(pending, now)
    assert not is_subscription_active(None, now)


def test_percentages():
    assert percent_complete(1, 3) == 33
    assert percent_complete(0, 0) == 0
    assert conversion_rate(1, 3) == 33.3
    assert conversion_rate(5, 0) == 0.0


class TestRecommendationScore:
    def preferences(self, **overrides):
        data = {"budget": {"min": 0, "max": 40_000_000}, "hotel_star": 4, "flight_type": "direct"}
        data.update(overrides)
        return RecommendationRequest.model_validate(data)

    def test_full_match_is_capped(self):
        package = Package(hotel_star=5, flight_type="direct")
        travel = Travel(rating=5.0, verified=True)
        # 50 + 20 + 15 + 15 + 10 = 110, capped at 100
        assert score_package(package, travel, self.preferences()) == 100

    def test_missing_stars_penalised(self):
        package = Package(hotel_star=3, flight_type="transit")
        travel = Travel(rating=0.0, verified=False)
        assert score_package(package, travel, self.preferences(hotel_star=5)) == 30

    def test_any_flight_gets_no_flight_bonus(self):
        package = Package(hotel_star=4, flight_type="direct")
        travel = Travel(rating=0.0, verified=False)
        assert score_package(package, travel, self.preferences(flight_type="any")) == 70
