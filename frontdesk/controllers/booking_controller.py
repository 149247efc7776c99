"""HTTP controller layer for the booking ledger."""

from __future__ import annotations

from datetime import date, datetime

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field, field_validator

from frontdesk.controllers.dependencies import (
    get_booking_service,
    require,
    to_http_exception,
    unexpected_failure,
)
from frontdesk.domain.errors import HotelDeskError
from frontdesk.domain.models import Booking
from frontdesk.domain.roles import Capability
from frontdesk.services.booking_service import BookingLedgerService
from frontdesk.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])


class BookingCreateRequest(BaseModel):
    customer_name: str = Field(min_length=1, max_length=200)
    room_number: str = Field(min_length=1)
    check_in_date: date
    check_out_date: date

    @field_validator("customer_name")
    @classmethod
    def strip_customer_name(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("customer_name cannot be blank")
        return cleaned


class BookingResponse(BaseModel):
    booking_id: str
    customer_name: str
    room_number: str
    check_in_date: date
    check_out_date: date
    nights: int = Field(ge=0)
    is_active: bool
    created_at: datetime | None = None

    @classmethod
    def from_booking(cls, booking: Booking) -> BookingResponse:
        return cls(
            booking_id=booking.booking_id,
            customer_name=booking.customer_name,
            room_number=booking.room_number,
            check_in_date=booking.check_in_date,
            check_out_date=booking.check_out_date,
            nights=booking.nights,
            is_active=booking.is_active,
            created_at=booking.created_at,
        )


@router.get(
    "",
    response_model=list[BookingResponse],
    dependencies=[Depends(require(Capability.VIEW_BOOKINGS))],
)
async def list_bookings(
    booking_service: BookingLedgerService = Depends(get_booking_service),
) -> list[BookingResponse]:
    try:
        return [BookingResponse.from_booking(item) for item in booking_service.list_all_bookings()]
    except HotelDeskError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure(logger, "list bookings") from exc


@router.get(
    "/active",
    response_model=list[BookingResponse],
    dependencies=[Depends(require(Capability.VIEW_BOOKINGS))],
)
async def list_active_bookings(
    booking_service: BookingLedgerService = Depends(get_booking_service),
) -> list[BookingResponse]:
    try:
        return [BookingResponse.from_booking(item) for item in booking_service.list_active_bookings()]
    except HotelDeskError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure(logger, "list active bookings") from exc


@router.get(
    "/range",
    response_model=list[BookingResponse],
    dependencies=[Depends(require(Capability.VIEW_BOOKINGS))],
)
async def list_bookings_in_range(
    start: date,
    end: date,
    booking_service: BookingLedgerService = Depends(get_booking_service),
) -> list[BookingResponse]:
    try:
        bookings = booking_service.list_bookings_by_date_range(start, end)
        return [BookingResponse.from_booking(item) for item in bookings]
    except HotelDeskError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure(logger, "list bookings by date range") from exc


@router.get(
    "/upcoming",
    response_model=list[BookingResponse],
    dependencies=[Depends(require(Capability.VIEW_BOOKINGS))],
)
async def list_upcoming_check_ins(
    days_ahead: int | None = None,
    booking_service: BookingLedgerService = Depends(get_booking_service),
) -> list[BookingResponse]:
    try:
        bookings = booking_service.list_upcoming_check_ins(days_ahead)
        return [BookingResponse.from_booking(item) for item in bookings]
    except HotelDeskError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure(logger, "list upcoming check-ins") from exc


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require(Capability.MANAGE_BOOKINGS))],
)
async def create_booking(
    payload: BookingCreateRequest,
    booking_service: BookingLedgerService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = booking_service.create_booking(
            customer_name=payload.customer_name,
            room_number=payload.room_number,
            check_in=payload.check_in_date,
            check_out=payload.check_out_date,
        )
        return BookingResponse.from_booking(booking)
    except HotelDeskError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure(logger, "create booking") from exc


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    dependencies=[Depends(require(Capability.VIEW_BOOKINGS))],
)
async def get_booking(
    booking_id: str,
    booking_service: BookingLedgerService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        return BookingResponse.from_booking(booking_service.get_booking(booking_id))
    except HotelDeskError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure(logger, "load booking") from exc


@router.post(
    "/{booking_id}/cancel",
    response_model=BookingResponse,
    dependencies=[Depends(require(Capability.MANAGE_BOOKINGS))],
)
async def cancel_booking(
    booking_id: str,
    booking_service: BookingLedgerService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        return BookingResponse.from_booking(booking_service.cancel_booking(booking_id))
    except HotelDeskError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure(logger, "cancel booking") from exc
