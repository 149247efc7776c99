"""Bill generation, payment status, and revenue aggregation."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional

from frontdesk.domain.constraints import validate_month, validate_query_range
from frontdesk.domain.errors import (
    DuplicateBillError,
    NotFoundError,
    StorageConflictError,
    ValidationError,
)
from frontdesk.domain.models import ZERO, Bill, Booking, Room, generate_id, to_money
from frontdesk.repository.data_repository import DataRepository
from frontdesk.utils.config import Settings, get_settings
from frontdesk.utils.logger import get_logger


logger = get_logger(__name__)


def _sum_amounts(bills: list[Bill]) -> Decimal:
    return to_money(sum((bill.total_amount for bill in bills), ZERO))


def month_bounds(year: int, month: int) -> tuple[date, date]:
    start = date(year, month, 1)
    if month == 12:
        return start, date(year + 1, 1, 1)
    return start, date(year, month + 1, 1)


class BillingService:
    """Derives one immutable bill per booking and tracks whether it is paid."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._clock = clock or datetime.now

    def generate_bill(self, booking_id: str) -> Bill:
        if self._repository.count_where("bills", {"booking_id": booking_id}):
            raise DuplicateBillError(f"A bill already exists for booking {booking_id}")

        booking_row = self._repository.find_by_id("bookings", booking_id)
        if booking_row is None:
            raise NotFoundError(f"Booking not found: {booking_id}")
        booking = Booking.from_row(booking_row)

        room_row = self._repository.find_by_id("rooms", booking.room_number)
        if room_row is None:
            raise NotFoundError(f"Room not found: {booking.room_number}")
        room = Room.from_row(room_row)
        try:
            total = to_money(booking.nights * room.price_per_night)
        except InvalidOperation as exc:
            raise ValidationError(
                f"bill total for booking {booking_id} exceeds the supported amount"
            ) from exc

        bill = Bill(
            bill_id=generate_id(self._settings.bill_id_prefix),
            booking_id=booking.booking_id,
            total_amount=total,
            generated_at=self._clock(),
            is_paid=False,
        )
        try:
            self._repository.insert("bills", bill.to_record())
        except StorageConflictError as exc:
            raise DuplicateBillError(f"A bill already exists for booking {booking_id}") from exc

        logger.info(
            "Bill %s generated for booking %s: %s nights x %s = %s",
            bill.bill_id,
            booking_id,
            booking.nights,
            room.price_per_night,
            bill.total_amount,
        )
        return bill

    def mark_paid(self, bill_id: str) -> Bill:
        """Flip a bill to paid; paying twice keeps the first payment time."""
        bill = self.get_bill(bill_id)
        if bill.is_paid:
            return bill
        paid_at = self._clock()
        updated = self._repository.update(
            "bills",
            bill_id,
            {"is_paid": 1, "paid_at": paid_at.isoformat()},
            expected={"is_paid": 0},
        )
        if not updated:
            return self.get_bill(bill_id)
        logger.info("Bill %s marked as paid", bill_id)
        return replace(bill, is_paid=True, paid_at=paid_at)

    def get_bill(self, bill_id: str) -> Bill:
        row = self._repository.find_by_id("bills", bill_id)
        if row is None:
            raise NotFoundError(f"Bill not found: {bill_id}")
        return Bill.from_row(row)

    def get_bill_for_booking(self, booking_id: str) -> Bill:
        rows = self._repository.find_where("bills", {"booking_id": booking_id}, limit=1)
        if not rows:
            raise NotFoundError(f"No bill for booking {booking_id}")
        return Bill.from_row(rows[0])

    def _bills(self, criteria: Optional[dict[str, Any]], order_by: str) -> list[Bill]:
        return [
            Bill.from_row(row)
            for row in self._repository.find_where("bills", criteria, order_by=order_by)
        ]

    def list_bills(self) -> list[Bill]:
        return self._bills(None, "generated_at DESC, bill_id ASC")

    def list_unpaid_bills(self) -> list[Bill]:
        return self._bills({"is_paid": 0}, "generated_at ASC, bill_id ASC")

    def list_bills_by_date_range(self, start: date, end: date) -> list[Bill]:
        """Bills generated on any calendar day from ``start`` to ``end`` inclusive."""
        validate_query_range(start, end)
        return self._bills(
            {
                "generated_at__gte": start.isoformat(),
                "generated_at__lt": (end + timedelta(days=1)).isoformat(),
            },
            "generated_at ASC, bill_id ASC",
        )

    def list_todays_bills(self) -> list[Bill]:
        today = self._clock().date()
        return self.list_bills_by_date_range(today, today)

    def count_bills(self) -> int:
        return self._repository.count_where("bills")

    def count_paid_bills(self) -> int:
        return self._repository.count_where("bills", {"is_paid": 1})

    def total_revenue(self) -> Decimal:
        return _sum_amounts(self._bills({"is_paid": 1}, "bill_id ASC"))

    def total_unpaid(self) -> Decimal:
        return _sum_amounts(self._bills({"is_paid": 0}, "bill_id ASC"))

    def monthly_revenue(self, year: int, month: int) -> Decimal:
        """Paid amounts of bills generated in the given calendar month."""
        validate_month(year, month)
        start, end = month_bounds(year, month)
        return _sum_amounts(
            self._bills(
                {
                    "is_paid": 1,
                    "generated_at__gte": start.isoformat(),
                    "generated_at__lt": end.isoformat(),
                },
                "bill_id ASC",
            )
        )

    def collection_rate(self) -> float:
        """Percentage of the billed amount already paid, one decimal place."""
        paid = self.total_revenue()
        billed = paid + self.total_unpaid()
        if billed == ZERO:
            return 0.0
        return round(float(paid * 100 / billed), 1)
