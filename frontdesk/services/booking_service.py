"""Booking ledger: stay validation, creation, cancellation, and queries."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from frontdesk.domain.constraints import (
    validate_query_range,
    validate_required_text,
    validate_stay_dates,
)
from frontdesk.domain.errors import (
    NotFoundError,
    StorageConflictError,
    StorageError,
    ValidationError,
)
from frontdesk.domain.models import Booking, calculate_nights, generate_id
from frontdesk.repository.data_repository import DataRepository
from frontdesk.services.room_service import RoomInventoryService
from frontdesk.utils.config import Settings, get_settings
from frontdesk.utils.logger import get_logger


logger = get_logger(__name__)


class BookingLedgerService:
    """Creates and cancels bookings and keeps room availability in step.

    Inserting a booking and reserving its room happen in one transaction, as
    do deactivating a booking and releasing its room, so neither half can be
    persisted without the other.
    """

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
        room_service: Optional[RoomInventoryService] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._room_service = room_service or RoomInventoryService(
            repository=self._repository,
            settings=self._settings,
        )
        self._clock = clock or datetime.now

    def today(self) -> date:
        return self._clock().date()

    @staticmethod
    def nights(booking: Booking) -> int:
        return calculate_nights(booking.check_in_date, booking.check_out_date)

    def create_booking(
        self,
        customer_name: str,
        room_number: str,
        check_in: date,
        check_out: date,
    ) -> Booking:
        name = validate_required_text(customer_name, "customer name")
        number = validate_required_text(room_number, "room number")
        validate_stay_dates(check_in, check_out, self.today())

        booking = Booking(
            booking_id=generate_id(self._settings.booking_id_prefix),
            customer_name=name,
            room_number=number,
            check_in_date=check_in,
            check_out_date=check_out,
            is_active=True,
            created_at=self._clock(),
        )
        try:
            with self._repository.transaction() as session:
                self._room_service.reserve_room(session, number)
                session.insert("bookings", booking.to_record())
        except StorageConflictError as exc:
            # uuid4 collisions are not expected; surface rather than retry.
            raise StorageError(f"Booking id {booking.booking_id} already in use") from exc

        logger.info(
            "Booking %s created for room %s (%s -> %s, %s nights)",
            booking.booking_id,
            number,
            check_in.isoformat(),
            check_out.isoformat(),
            booking.nights,
        )
        return booking

    def cancel_booking(self, booking_id: str) -> Booking:
        """Deactivate a booking and free its room.

        Cancelling an already-cancelled booking succeeds without side effects;
        the room is not touched again because it may have been rebooked.
        """
        with self._repository.transaction() as session:
            row = session.find_by_id("bookings", booking_id)
            if row is None:
                raise NotFoundError(f"Booking not found: {booking_id}")
            booking = Booking.from_row(row)
            if not booking.is_active:
                logger.info("Booking %s already cancelled", booking_id)
                return booking
            session.update("bookings", booking_id, {"is_active": 0})
            if not self._room_service.release_room(session, booking.room_number):
                logger.warning(
                    "Booking %s references missing room %s",
                    booking_id,
                    booking.room_number,
                )

        logger.info("Booking %s cancelled; room %s released", booking_id, booking.room_number)
        return replace(booking, is_active=False)

    def get_booking(self, booking_id: str) -> Booking:
        row = self._repository.find_by_id("bookings", booking_id)
        if row is None:
            raise NotFoundError(f"Booking not found: {booking_id}")
        return Booking.from_row(row)

    def list_all_bookings(self) -> list[Booking]:
        """Every booking, most recent check-in first."""
        rows = self._repository.find_all("bookings", order_by="check_in_date DESC, booking_id ASC")
        return [Booking.from_row(row) for row in rows]

    def list_active_bookings(self) -> list[Booking]:
        """Active bookings, earliest check-in first."""
        rows = self._repository.find_where(
            "bookings",
            {"is_active": 1},
            order_by="check_in_date ASC, booking_id ASC",
        )
        return [Booking.from_row(row) for row in rows]

    def list_bookings_by_date_range(self, start: date, end: date) -> list[Booking]:
        """Bookings whose whole stay falls inside ``[start, end]``."""
        validate_query_range(start, end)
        rows = self._repository.find_where(
            "bookings",
            {
                "check_in_date__gte": start.isoformat(),
                "check_out_date__lte": end.isoformat(),
            },
            order_by="check_in_date ASC, booking_id ASC",
        )
        return [Booking.from_row(row) for row in rows]

    def list_today_check_ins(self) -> list[Booking]:
        rows = self._repository.find_where(
            "bookings",
            {"check_in_date": self.today().isoformat(), "is_active": 1},
            order_by="booking_id ASC",
        )
        return [Booking.from_row(row) for row in rows]

    def list_today_check_outs(self) -> list[Booking]:
        rows = self._repository.find_where(
            "bookings",
            {"check_out_date": self.today().isoformat(), "is_active": 1},
            order_by="booking_id ASC",
        )
        return [Booking.from_row(row) for row in rows]

    def list_upcoming_check_ins(self, days_ahead: Optional[int] = None) -> list[Booking]:
        horizon = self._settings.upcoming_check_in_days if days_ahead is None else days_ahead
        if horizon < 0:
            raise ValidationError("days_ahead must be >= 0")
        today = self.today()
        rows = self._repository.find_where(
            "bookings",
            {
                "check_in_date__gte": today.isoformat(),
                "check_in_date__lte": (today + timedelta(days=horizon)).isoformat(),
                "is_active": 1,
            },
            order_by="check_in_date ASC, booking_id ASC",
        )
        return [Booking.from_row(row) for row in rows]

    def count_bookings(self) -> int:
        return self._repository.count_where("bookings")

    def count_active_bookings(self) -> int:
        return self._repository.count_where("bookings", {"is_active": 1})

    def total_active_nights(self) -> int:
        return sum(booking.nights for booking in self.list_active_bookings())
