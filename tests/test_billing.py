from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal

import pytest

from frontdesk.domain.errors import (
    DuplicateBillError,
    DuplicateError,
    NotFoundError,
    ValidationError,
)
from frontdesk.repository.data_repository import DataRepository
from frontdesk.services.billing_service import BillingService, month_bounds
from frontdesk.services.booking_service import BookingLedgerService
from frontdesk.services.room_service import RoomInventoryService
from frontdesk.utils.config import get_settings


class _Clock:
    """Settable clock so tests can move time between calls."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def _build_services(tmp_path, filename: str, clock: _Clock | None = None):
    clock = clock or _Clock(datetime(2024, 5, 20, 9, 0))
    settings = replace(get_settings(), database_path=tmp_path / filename, seed_demo_rooms=False)
    repository = DataRepository(settings)
    repository.initialize_database()
    room_service = RoomInventoryService(repository=repository, settings=settings)
    booking_service = BookingLedgerService(
        repository=repository,
        settings=settings,
        room_service=room_service,
        clock=clock,
    )
    billing_service = BillingService(repository=repository, settings=settings, clock=clock)
    room_service.add_room("101", "Single", "100.00")
    room_service.add_room("201", "Double", "150.00")
    room_service.add_room("301", "Suite", "99.99")
    return booking_service, billing_service


def test_bill_total_is_nights_times_price(tmp_path):
    bookings, billing = _build_services(tmp_path, "total.db")
    booking = bookings.create_booking("Alice", "201", date(2024, 6, 1), date(2024, 6, 3))

    bill = billing.generate_bill(booking.booking_id)

    assert bill.bill_id.startswith("BILL-")
    assert bill.total_amount == Decimal("300.00")
    assert bill.is_paid is False
    assert bill.paid_at is None
    assert billing.get_bill_for_booking(booking.booking_id) == bill


def test_bill_total_keeps_exact_cents(tmp_path):
    bookings, billing = _build_services(tmp_path, "cents.db")
    booking = bookings.create_booking("Alice", "301", date(2024, 6, 1), date(2024, 6, 4))

    assert billing.generate_bill(booking.booking_id).total_amount == Decimal("299.97")


def test_second_bill_for_booking_is_rejected(tmp_path):
    bookings, billing = _build_services(tmp_path, "duplicate.db")
    booking = bookings.create_booking("Alice", "101", date(2024, 6, 1), date(2024, 6, 2))
    billing.generate_bill(booking.booking_id)

    with pytest.raises(DuplicateBillError):
        billing.generate_bill(booking.booking_id)
    assert billing.count_bills() == 1


def test_duplicate_bill_is_a_conflict(tmp_path):
    bookings, billing = _build_services(tmp_path, "duplicate_kind.db")
    booking = bookings.create_booking("Alice", "101", date(2024, 6, 1), date(2024, 6, 2))
    billing.generate_bill(booking.booking_id)

    with pytest.raises(DuplicateError):
        billing.generate_bill(booking.booking_id)


def test_bill_for_unknown_booking_raises(tmp_path):
    _, billing = _build_services(tmp_path, "unknown.db")

    with pytest.raises(NotFoundError):
        billing.generate_bill("BK-MISSING")
    assert billing.count_bills() == 0


def test_cancelled_booking_can_still_be_billed(tmp_path):
    bookings, billing = _build_services(tmp_path, "cancelled.db")
    booking = bookings.create_booking("Alice", "101", date(2024, 6, 1), date(2024, 6, 3))
    bookings.cancel_booking(booking.booking_id)

    assert billing.generate_bill(booking.booking_id).total_amount == Decimal("200.00")


def test_mark_paid_is_idempotent_and_keeps_first_payment_time(tmp_path):
    clock = _Clock(datetime(2024, 5, 20, 9, 0))
    bookings, billing = _build_services(tmp_path, "paid.db", clock)
    booking = bookings.create_booking("Alice", "101", date(2024, 6, 1), date(2024, 6, 3))
    bill = billing.generate_bill(booking.booking_id)

    clock.now = datetime(2024, 5, 20, 10, 30)
    paid = billing.mark_paid(bill.bill_id)
    clock.now = datetime(2024, 5, 21, 8, 0)
    again = billing.mark_paid(bill.bill_id)

    assert paid.is_paid is True
    assert paid.paid_at == datetime(2024, 5, 20, 10, 30)
    assert again == paid
    assert billing.get_bill(bill.bill_id) == paid


def test_mark_paid_unknown_bill_raises(tmp_path):
    _, billing = _build_services(tmp_path, "paid_missing.db")

    with pytest.raises(NotFoundError):
        billing.mark_paid("BILL-MISSING")


def test_empty_aggregates_are_zero(tmp_path):
    _, billing = _build_services(tmp_path, "empty.db")

    assert billing.total_revenue() == Decimal("0.00")
    assert billing.total_unpaid() == Decimal("0.00")
    assert billing.monthly_revenue(2024, 5) == Decimal("0.00")
    assert billing.collection_rate() == 0.0
    assert billing.list_unpaid_bills() == []
    assert billing.list_todays_bills() == []


def test_revenue_counts_paid_bills_only(tmp_path):
    bookings, billing = _build_services(tmp_path, "revenue.db")
    first = bookings.create_booking("Alice", "101", date(2024, 6, 1), date(2024, 6, 3))
    second = bookings.create_booking("Bob", "201", date(2024, 6, 1), date(2024, 6, 3))
    paid = billing.generate_bill(first.booking_id)
    unpaid = billing.generate_bill(second.booking_id)
    billing.mark_paid(paid.bill_id)

    assert billing.total_revenue() == Decimal("200.00")
    assert billing.total_unpaid() == Decimal("300.00")
    assert billing.collection_rate() == 40.0
    assert billing.count_paid_bills() == 1
    assert [bill.bill_id for bill in billing.list_unpaid_bills()] == [unpaid.bill_id]


def test_monthly_revenue_groups_by_generation_month(tmp_path):
    clock = _Clock(datetime(2024, 5, 20, 9, 0))
    bookings, billing = _build_services(tmp_path, "monthly.db", clock)
    may = bookings.create_booking("Alice", "101", date(2024, 6, 1), date(2024, 6, 3))
    june = bookings.create_booking("Bob", "201", date(2024, 6, 1), date(2024, 6, 3))

    billing.mark_paid(billing.generate_bill(may.booking_id).bill_id)
    clock.now = datetime(2024, 6, 2, 12, 0)
    billing.mark_paid(billing.generate_bill(june.booking_id).bill_id)

    assert billing.monthly_revenue(2024, 5) == Decimal("200.00")
    assert billing.monthly_revenue(2024, 6) == Decimal("300.00")
    assert billing.monthly_revenue(2024, 7) == Decimal("0.00")
    assert billing.total_revenue() == Decimal("500.00")


def test_bills_by_date_range_include_the_end_day(tmp_path):
    clock = _Clock(datetime(2024, 5, 20, 23, 59))
    bookings, billing = _build_services(tmp_path, "bill_range.db", clock)
    booking = bookings.create_booking("Alice", "101", date(2024, 6, 1), date(2024, 6, 3))
    bill = billing.generate_bill(booking.booking_id)

    assert billing.list_bills_by_date_range(date(2024, 5, 20), date(2024, 5, 20)) == [bill]
    assert billing.list_bills_by_date_range(date(2024, 5, 21), date(2024, 5, 31)) == []
    assert billing.list_todays_bills() == [bill]


def test_month_bounds_wrap_december():
    assert month_bounds(2024, 12) == (date(2024, 12, 1), date(2025, 1, 1))
    assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 3, 1))


def test_bill_total_beyond_money_precision_is_a_validation_error(tmp_path):
    bookings, billing = _build_services(tmp_path, "overflow.db")
    DataRepository(
        replace(get_settings(), database_path=tmp_path / "overflow.db", seed_demo_rooms=False)
    ).insert(
        "rooms",
        {
            "room_number": "999",
            "room_type": "Deluxe",
            "price_per_night": "99999999999999999999999999.00",
            "is_available": 1,
        },
    )
    booking = bookings.create_booking("Alice", "999", date(2024, 6, 1), date(2024, 6, 4))

    with pytest.raises(ValidationError):
        billing.generate_bill(booking.booking_id)
    assert billing.count_bills() == 0


def test_monthly_revenue_rejects_unrepresentable_year(tmp_path):
    _, billing = _build_services(tmp_path, "far_year.db")

    with pytest.raises(ValidationError):
        billing.monthly_revenue(9999, 12)
    with pytest.raises(ValidationError):
        billing.monthly_revenue(10000, 1)
