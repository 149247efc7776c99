"""Domain records for rooms, bookings, bills, and desk users."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Mapping
from uuid import uuid4

from frontdesk.domain.roles import Role


CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Decimal | int | float | str) -> Decimal:
    """Coerce a numeric value to a cent-quantized Decimal."""
    if isinstance(value, float):
        value = repr(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def generate_id(prefix: str) -> str:
    return f"{prefix}-{uuid4().hex.upper()}"


def calculate_nights(check_in: date, check_out: date) -> int:
    """Whole nights between two dates, check-out day excluded."""
    return (check_out - check_in).days


def _as_date(value: Any) -> date:
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    return date.fromisoformat(str(value))


def _as_datetime(value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


@dataclass(frozen=True)
class Room:
    room_number: str
    room_type: str
    price_per_night: Decimal
    is_available: bool = True

    def to_record(self) -> dict[str, Any]:
        return {
            "room_number": self.room_number,
            "room_type": self.room_type,
            "price_per_night": str(self.price_per_night),
            "is_available": int(self.is_available),
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any] | sqlite3.Row) -> Room:
        return cls(
            room_number=str(row["room_number"]),
            room_type=str(row["room_type"]),
            price_per_night=to_money(row["price_per_night"]),
            is_available=bool(row["is_available"]),
        )


@dataclass(frozen=True)
class Booking:
    booking_id: str
    customer_name: str
    room_number: str
    check_in_date: date
    check_out_date: date
    is_active: bool = True
    created_at: datetime | None = None

    @property
    def nights(self) -> int:
        return calculate_nights(self.check_in_date, self.check_out_date)

    def to_record(self) -> dict[str, Any]:
        return {
            "booking_id": self.booking_id,
            "customer_name": self.customer_name,
            "room_number": self.room_number,
            "check_in_date": self.check_in_date.isoformat(),
            "check_out_date": self.check_out_date.isoformat(),
            "is_active": int(self.is_active),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any] | sqlite3.Row) -> Booking:
        return cls(
            booking_id=str(row["booking_id"]),
            customer_name=str(row["customer_name"]),
            room_number=str(row["room_number"]),
            check_in_date=_as_date(row["check_in_date"]),
            check_out_date=_as_date(row["check_out_date"]),
            is_active=bool(row["is_active"]),
            created_at=_as_datetime(row["created_at"]),
        )


@dataclass(frozen=True)
class Bill:
    bill_id: str
    booking_id: str
    total_amount: Decimal
    generated_at: datetime
    is_paid: bool = False
    paid_at: datetime | None = None

    def to_record(self) -> dict[str, Any]:
        return {
            "bill_id": self.bill_id,
            "booking_id": self.booking_id,
            "total_amount": str(self.total_amount),
            "generated_at": self.generated_at.isoformat(),
            "is_paid": int(self.is_paid),
            "paid_at": self.paid_at.isoformat() if self.paid_at else None,
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any] | sqlite3.Row) -> Bill:
        generated_at = _as_datetime(row["generated_at"])
        if generated_at is None:
            raise ValueError(f"bill {row['bill_id']} has no generation timestamp")
        return cls(
            bill_id=str(row["bill_id"]),
            booking_id=str(row["booking_id"]),
            total_amount=to_money(row["total_amount"]),
            generated_at=generated_at,
            is_paid=bool(row["is_paid"]),
            paid_at=_as_datetime(row["paid_at"]),
        )


@dataclass(frozen=True)
class User:
    """Authenticated desk operator; the role alone decides permissions."""

    user_id: str
    role: Role

    @classmethod
    def from_row(cls, row: Mapping[str, Any] | sqlite3.Row) -> User:
        return cls(user_id=str(row["user_id"]), role=Role(str(row["role"])))
