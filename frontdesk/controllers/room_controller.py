"""HTTP controller layer for the room inventory."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from frontdesk.controllers.dependencies import (
    get_room_service,
    require,
    to_http_exception,
    unexpected_failure,
)
from frontdesk.domain.errors import HotelDeskError
from frontdesk.domain.models import Room
from frontdesk.domain.roles import Capability
from frontdesk.services.room_service import RoomInventoryService
from frontdesk.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(prefix="/rooms", tags=["rooms"])


class RoomCreateRequest(BaseModel):
    room_number: str = Field(min_length=1, max_length=16)
    room_type: str = Field(min_length=1)
    price_per_night: Decimal = Field(gt=0, max_digits=10, decimal_places=2)


class RoomPriceRequest(BaseModel):
    price_per_night: Decimal = Field(gt=0, max_digits=10, decimal_places=2)


class RoomAvailabilityRequest(BaseModel):
    available: bool


class RoomResponse(BaseModel):
    room_number: str
    room_type: str
    price_per_night: Decimal
    is_available: bool

    @classmethod
    def from_room(cls, room: Room) -> RoomResponse:
        return cls(
            room_number=room.room_number,
            room_type=room.room_type,
            price_per_night=room.price_per_night,
            is_available=room.is_available,
        )


@router.get(
    "",
    response_model=list[RoomResponse],
    dependencies=[Depends(require(Capability.VIEW_ROOMS))],
)
async def list_rooms(
    room_type: Optional[str] = None,
    room_service: RoomInventoryService = Depends(get_room_service),
) -> list[RoomResponse]:
    try:
        rooms = room_service.list_rooms_by_type(room_type) if room_type else room_service.list_rooms()
        return [RoomResponse.from_room(room) for room in rooms]
    except HotelDeskError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure(logger, "list rooms") from exc


@router.get(
    "/available",
    response_model=list[RoomResponse],
    dependencies=[Depends(require(Capability.VIEW_ROOMS))],
)
async def list_available_rooms(
    room_type: Optional[str] = None,
    room_service: RoomInventoryService = Depends(get_room_service),
) -> list[RoomResponse]:
    """All available rooms, or the first available room of ``room_type``."""
    try:
        if room_type:
            room = room_service.find_first_available_of_type(room_type)
            return [RoomResponse.from_room(room)] if room is not None else []
        return [RoomResponse.from_room(room) for room in room_service.list_available_rooms()]
    except HotelDeskError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure(logger, "list available rooms") from exc


@router.post(
    "",
    response_model=RoomResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require(Capability.MANAGE_ROOMS))],
)
async def add_room(
    payload: RoomCreateRequest,
    room_service: RoomInventoryService = Depends(get_room_service),
) -> RoomResponse:
    try:
        room = room_service.add_room(
            room_number=payload.room_number,
            room_type=payload.room_type,
            price_per_night=payload.price_per_night,
        )
        return RoomResponse.from_room(room)
    except HotelDeskError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure(logger, "add room") from exc


@router.get(
    "/{room_number}",
    response_model=RoomResponse,
    dependencies=[Depends(require(Capability.VIEW_ROOMS))],
)
async def get_room(
    room_number: str,
    room_service: RoomInventoryService = Depends(get_room_service),
) -> RoomResponse:
    try:
        return RoomResponse.from_room(room_service.find_by_number(room_number))
    except HotelDeskError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure(logger, "load room") from exc


@router.delete(
    "/{room_number}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require(Capability.MANAGE_ROOMS))],
)
async def remove_room(
    room_number: str,
    room_service: RoomInventoryService = Depends(get_room_service),
) -> None:
    try:
        room_service.remove_room(room_number)
    except HotelDeskError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure(logger, "remove room") from exc


@router.put(
    "/{room_number}/availability",
    response_model=RoomResponse,
    dependencies=[Depends(require(Capability.MANAGE_ROOMS))],
)
async def set_room_availability(
    room_number: str,
    payload: RoomAvailabilityRequest,
    room_service: RoomInventoryService = Depends(get_room_service),
) -> RoomResponse:
    try:
        return RoomResponse.from_room(room_service.set_availability(room_number, payload.available))
    except HotelDeskError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure(logger, "update room availability") from exc


@router.put(
    "/{room_number}/price",
    response_model=RoomResponse,
    dependencies=[Depends(require(Capability.MANAGE_ROOMS))],
)
async def update_room_price(
    room_number: str,
    payload: RoomPriceRequest,
    room_service: RoomInventoryService = Depends(get_room_service),
) -> RoomResponse:
    try:
        return RoomResponse.from_room(room_service.update_price(room_number, payload.price_per_night))
    except HotelDeskError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure(logger, "update room price") from exc
