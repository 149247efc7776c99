"""Room inventory: records, prices, and the availability flag."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from frontdesk.domain.constraints import (
    validate_price,
    validate_required_text,
    validate_room_type,
)
from frontdesk.domain.errors import (
    DuplicateError,
    NotFoundError,
    RoomUnavailableError,
    StorageConflictError,
    ValidationError,
)
from frontdesk.domain.models import ZERO, Room, to_money
from frontdesk.repository.data_repository import DataRepository, RepositorySession
from frontdesk.utils.config import Settings, get_settings
from frontdesk.utils.logger import get_logger


logger = get_logger(__name__)


class RoomInventoryService:
    """Owns the rooms table.

    Availability is toggled by the booking ledger through ``reserve_room`` and
    ``release_room`` inside the ledger's transaction, or administratively
    through ``set_availability``.
    """

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)

    @property
    def room_types(self) -> tuple[str, ...]:
        return self._settings.room_types

    def add_room(
        self,
        room_number: str,
        room_type: str,
        price_per_night: Decimal | int | float | str,
    ) -> Room:
        number = validate_required_text(room_number, "room number")
        resolved_type = validate_room_type(room_type, self._settings.room_types)
        price = validate_price(price_per_night)

        room = Room(
            room_number=number,
            room_type=resolved_type,
            price_per_night=price,
            is_available=True,
        )
        if self._repository.find_by_id("rooms", number) is not None:
            raise DuplicateError(f"Room {number} already exists")
        try:
            self._repository.insert("rooms", room.to_record())
        except StorageConflictError as exc:
            raise DuplicateError(f"Room {number} already exists") from exc
        logger.info("Room %s added (%s at %s)", number, resolved_type, price)
        return room

    def remove_room(self, room_number: str) -> None:
        with self._repository.transaction() as session:
            if session.find_by_id("rooms", room_number) is None:
                raise NotFoundError(f"Room not found: {room_number}")
            if session.count_where("bookings", {"room_number": room_number, "is_active": 1}):
                raise RoomUnavailableError(
                    f"Room {room_number} has an active booking and cannot be removed"
                )
            session.delete("rooms", room_number)
        logger.info("Room %s removed", room_number)

    def set_availability(self, room_number: str, available: bool) -> Room:
        """Administrative override; the last write wins."""
        updated = self._repository.update(
            "rooms",
            room_number,
            {"is_available": int(bool(available))},
        )
        if not updated:
            raise NotFoundError(f"Room not found: {room_number}")
        return self.find_by_number(room_number)

    def update_price(self, room_number: str, price_per_night: Decimal | int | float | str) -> Room:
        price = validate_price(price_per_night)
        if not self._repository.update("rooms", room_number, {"price_per_night": str(price)}):
            raise NotFoundError(f"Room not found: {room_number}")
        logger.info("Room %s repriced to %s", room_number, price)
        return self.find_by_number(room_number)

    def find_by_number(self, room_number: str) -> Room:
        row = self._repository.find_by_id("rooms", room_number)
        if row is None:
            raise NotFoundError(f"Room not found: {room_number}")
        return Room.from_row(row)

    def _resolve_type(self, room_type: str) -> Optional[str]:
        """Configured spelling of ``room_type``; ``None`` when it is not a known type."""
        try:
            return validate_room_type(room_type, self._settings.room_types)
        except ValidationError:
            return None

    def find_first_available_of_type(self, room_type: str) -> Optional[Room]:
        resolved_type = self._resolve_type(room_type)
        if resolved_type is None:
            return None
        rows = self._repository.find_where(
            "rooms",
            {"room_type": resolved_type, "is_available": 1},
            order_by="room_number ASC",
            limit=1,
        )
        return Room.from_row(rows[0]) if rows else None

    def list_rooms(self) -> list[Room]:
        return [Room.from_row(row) for row in self._repository.find_all("rooms", "room_number ASC")]

    def list_available_rooms(self) -> list[Room]:
        rows = self._repository.find_where("rooms", {"is_available": 1}, order_by="room_number ASC")
        return [Room.from_row(row) for row in rows]

    def list_rooms_by_type(self, room_type: str) -> list[Room]:
        resolved_type = self._resolve_type(room_type)
        if resolved_type is None:
            return []
        rows = self._repository.find_where(
            "rooms",
            {"room_type": resolved_type},
            order_by="room_number ASC",
        )
        return [Room.from_row(row) for row in rows]

    def count_rooms(self) -> int:
        return self._repository.count_where("rooms")

    def count_available_rooms(self) -> int:
        return self._repository.count_where("rooms", {"is_available": 1})

    def count_occupied_rooms(self) -> int:
        return self.count_rooms() - self.count_available_rooms()

    def average_price(self) -> Decimal:
        rooms = self.list_rooms()
        if not rooms:
            return ZERO
        total = sum((room.price_per_night for room in rooms), ZERO)
        return to_money(total / len(rooms))

    # Lifecycle transitions, always inside the caller's transaction.

    def reserve_room(self, session: RepositorySession, room_number: str) -> Room:
        row = session.find_by_id("rooms", room_number)
        if row is None:
            raise NotFoundError(f"Room not found: {room_number}")
        room = Room.from_row(row)
        if not room.is_available:
            raise RoomUnavailableError(f"Room {room_number} is not available")
        flipped = session.update(
            "rooms",
            room_number,
            {"is_available": 0},
            expected={"is_available": 1},
        )
        if not flipped:
            raise RoomUnavailableError(f"Room {room_number} is not available")
        return room

    def release_room(self, session: RepositorySession, room_number: str) -> bool:
        """Mark the room available again; ``False`` when the room is gone."""
        return session.update("rooms", room_number, {"is_available": 1})
