"""Read-only rollups over rooms, bookings, and bills."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from frontdesk.domain.constraints import validate_month
from frontdesk.domain.models import Booking
from frontdesk.repository.data_repository import DataRepository
from frontdesk.services.billing_service import BillingService, month_bounds
from frontdesk.services.booking_service import BookingLedgerService
from frontdesk.services.room_service import RoomInventoryService
from frontdesk.utils.config import Settings, get_settings


def occupancy_rate(total_rooms: int, available_rooms: int) -> float:
    """Share of rooms currently unavailable, as a percentage to one decimal."""
    if total_rooms <= 0:
        return 0.0
    return round((total_rooms - available_rooms) * 100.0 / total_rooms, 1)


@dataclass(frozen=True)
class DashboardStatistics:
    total_rooms: int
    available_rooms: int
    active_bookings: int
    total_revenue: Decimal
    total_unpaid: Decimal
    today_check_ins: int
    today_check_outs: int
    occupancy_rate: float
    collection_rate: float

    def to_api_dict(self) -> dict[str, int | float | Decimal]:
        return {
            "total_rooms": self.total_rooms,
            "available_rooms": self.available_rooms,
            "active_bookings": self.active_bookings,
            "total_revenue": self.total_revenue,
            "total_unpaid": self.total_unpaid,
            "today_check_ins": self.today_check_ins,
            "today_check_outs": self.today_check_outs,
            "occupancy_rate": self.occupancy_rate,
            "collection_rate": self.collection_rate,
        }


@dataclass(frozen=True)
class MonthlyReport:
    year: int
    month: int
    monthly_revenue: Decimal
    total_rooms: int
    available_rooms: int
    new_bookings: int
    cancelled_bookings: int

    def to_api_dict(self) -> dict[str, int | Decimal]:
        return {
            "year": self.year,
            "month": self.month,
            "monthly_revenue": self.monthly_revenue,
            "total_rooms": self.total_rooms,
            "available_rooms": self.available_rooms,
            "new_bookings": self.new_bookings,
            "cancelled_bookings": self.cancelled_bookings,
        }


class StatisticsService:
    """Composes the other services; never writes."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
        room_service: Optional[RoomInventoryService] = None,
        booking_service: Optional[BookingLedgerService] = None,
        billing_service: Optional[BillingService] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._room_service = room_service or RoomInventoryService(
            repository=self._repository,
            settings=self._settings,
        )
        self._booking_service = booking_service or BookingLedgerService(
            repository=self._repository,
            settings=self._settings,
            room_service=self._room_service,
            clock=clock,
        )
        self._billing_service = billing_service or BillingService(
            repository=self._repository,
            settings=self._settings,
            clock=clock,
        )

    def dashboard(self) -> DashboardStatistics:
        total_rooms = self._room_service.count_rooms()
        available_rooms = self._room_service.count_available_rooms()
        return DashboardStatistics(
            total_rooms=total_rooms,
            available_rooms=available_rooms,
            active_bookings=self._booking_service.count_active_bookings(),
            total_revenue=self._billing_service.total_revenue(),
            total_unpaid=self._billing_service.total_unpaid(),
            today_check_ins=len(self._booking_service.list_today_check_ins()),
            today_check_outs=len(self._booking_service.list_today_check_outs()),
            occupancy_rate=occupancy_rate(total_rooms, available_rooms),
            collection_rate=self._billing_service.collection_rate(),
        )

    def monthly_report(self, year: int, month: int) -> MonthlyReport:
        validate_month(year, month)
        start, end = month_bounds(year, month)
        created = [
            Booking.from_row(row)
            for row in self._repository.find_where(
                "bookings",
                {
                    "created_at__gte": start.isoformat(),
                    "created_at__lt": end.isoformat(),
                },
            )
        ]
        return MonthlyReport(
            year=year,
            month=month,
            monthly_revenue=self._billing_service.monthly_revenue(year, month),
            total_rooms=self._room_service.count_rooms(),
            available_rooms=self._room_service.count_available_rooms(),
            new_bookings=len(created),
            cancelled_bookings=sum(1 for booking in created if not booking.is_active),
        )
