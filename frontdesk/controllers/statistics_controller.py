"""Controller layer for front-desk dashboard statistics."""

from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from frontdesk.controllers.dependencies import (
    get_statistics_service,
    require,
    to_http_exception,
    unexpected_failure,
)
from frontdesk.domain.constraints import MAX_REPORT_YEAR
from frontdesk.domain.errors import HotelDeskError
from frontdesk.domain.roles import Capability
from frontdesk.services.statistics_service import StatisticsService
from frontdesk.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(prefix="/statistics", tags=["statistics"])


class DashboardResponse(BaseModel):
    total_rooms: int = Field(ge=0)
    available_rooms: int = Field(ge=0)
    active_bookings: int = Field(ge=0)
    total_revenue: Decimal
    total_unpaid: Decimal
    today_check_ins: int = Field(ge=0)
    today_check_outs: int = Field(ge=0)
    occupancy_rate: float = Field(ge=0.0, le=100.0)
    collection_rate: float = Field(ge=0.0, le=100.0)


class MonthlyReportResponse(BaseModel):
    year: int
    month: int = Field(ge=1, le=12)
    monthly_revenue: Decimal
    total_rooms: int = Field(ge=0)
    available_rooms: int = Field(ge=0)
    new_bookings: int = Field(ge=0)
    cancelled_bookings: int = Field(ge=0)


@router.get(
    "",
    response_model=DashboardResponse,
    dependencies=[Depends(require(Capability.VIEW_STATISTICS))],
)
async def dashboard_statistics(
    statistics_service: StatisticsService = Depends(get_statistics_service),
) -> DashboardResponse:
    try:
        return DashboardResponse(**statistics_service.dashboard().to_api_dict())
    except HotelDeskError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure(logger, "compute dashboard statistics") from exc


@router.get(
    "/monthly",
    response_model=MonthlyReportResponse,
    dependencies=[Depends(require(Capability.VIEW_STATISTICS))],
)
async def monthly_report(
    year: int = Query(ge=1, le=MAX_REPORT_YEAR),
    month: int = Query(ge=1, le=12),
    statistics_service: StatisticsService = Depends(get_statistics_service),
) -> MonthlyReportResponse:
    try:
        return MonthlyReportResponse(**statistics_service.monthly_report(year, month).to_api_dict())
    except HotelDeskError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure(logger, "build monthly report") from exc
