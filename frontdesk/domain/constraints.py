"""Domain-level validation rules for rooms and stays."""

from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation

from frontdesk.domain.errors import InvalidDateRangeError, ValidationError
from frontdesk.domain.models import to_money


MAX_PRICE_PER_NIGHT = Decimal("99999999.99")
MAX_REPORT_YEAR = 9998


def validate_stay_dates(check_in: date, check_out: date, today: date) -> None:
    if check_out <= check_in:
        raise InvalidDateRangeError(
            f"check-out date {check_out.isoformat()} must be after check-in date {check_in.isoformat()}"
        )
    if check_in < today:
        raise InvalidDateRangeError(
            f"check-in date {check_in.isoformat()} cannot be in the past"
        )


def validate_query_range(start: date, end: date) -> None:
    if end < start:
        raise InvalidDateRangeError(
            f"range end {end.isoformat()} is before range start {start.isoformat()}"
        )


def validate_price(price: Decimal | int | float | str) -> Decimal:
    try:
        amount = to_money(price)
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ValidationError(f"price {price!r} is not a number") from exc
    if not amount.is_finite() or amount <= 0:
        raise ValidationError("price per night must be greater than 0")
    if amount > MAX_PRICE_PER_NIGHT:
        raise ValidationError(f"price per night cannot exceed {MAX_PRICE_PER_NIGHT}")
    return amount


def validate_required_text(value: str | None, field_name: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(f"{field_name} cannot be empty")
    return cleaned


def validate_room_type(room_type: str | None, allowed: tuple[str, ...]) -> str:
    cleaned = validate_required_text(room_type, "room type")
    for candidate in allowed:
        if candidate.lower() == cleaned.lower():
            return candidate
    raise ValidationError(
        f"unknown room type '{cleaned}'; expected one of {', '.join(allowed)}"
    )


def validate_month(year: int, month: int) -> None:
    if not 1 <= month <= 12:
        raise ValidationError("month must be between 1 and 12")
    if not 1 <= year <= MAX_REPORT_YEAR:
        raise ValidationError(f"year must be between 1 and {MAX_REPORT_YEAR}")
