"""HTTP controller layer for bills and revenue."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from frontdesk.controllers.dependencies import (
    get_billing_service,
    require,
    to_http_exception,
    unexpected_failure,
)
from frontdesk.domain.constraints import MAX_REPORT_YEAR
from frontdesk.domain.errors import HotelDeskError
from frontdesk.domain.models import Bill
from frontdesk.domain.roles import Capability
from frontdesk.services.billing_service import BillingService
from frontdesk.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(prefix="/bills", tags=["billing"])


class BillCreateRequest(BaseModel):
    booking_id: str = Field(min_length=1)


class BillResponse(BaseModel):
    bill_id: str
    booking_id: str
    total_amount: Decimal
    generated_at: datetime
    is_paid: bool
    paid_at: datetime | None = None

    @classmethod
    def from_bill(cls, bill: Bill) -> BillResponse:
        return cls(
            bill_id=bill.bill_id,
            booking_id=bill.booking_id,
            total_amount=bill.total_amount,
            generated_at=bill.generated_at,
            is_paid=bill.is_paid,
            paid_at=bill.paid_at,
        )


class RevenueSummaryResponse(BaseModel):
    total_revenue: Decimal
    total_unpaid: Decimal
    collection_rate: float = Field(ge=0.0, le=100.0)
    bill_count: int = Field(ge=0)
    paid_bill_count: int = Field(ge=0)


class MonthlyRevenueResponse(BaseModel):
    year: int
    month: int = Field(ge=1, le=12)
    revenue: Decimal


@router.get(
    "",
    response_model=list[BillResponse],
    dependencies=[Depends(require(Capability.VIEW_BILLS))],
)
async def list_bills(
    billing_service: BillingService = Depends(get_billing_service),
) -> list[BillResponse]:
    try:
        return [BillResponse.from_bill(bill) for bill in billing_service.list_bills()]
    except HotelDeskError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure(logger, "list bills") from exc


@router.get(
    "/unpaid",
    response_model=list[BillResponse],
    dependencies=[Depends(require(Capability.VIEW_BILLS))],
)
async def list_unpaid_bills(
    billing_service: BillingService = Depends(get_billing_service),
) -> list[BillResponse]:
    try:
        return [BillResponse.from_bill(bill) for bill in billing_service.list_unpaid_bills()]
    except HotelDeskError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure(logger, "list unpaid bills") from exc


@router.get(
    "/revenue",
    response_model=RevenueSummaryResponse,
    dependencies=[Depends(require(Capability.VIEW_BILLS))],
)
async def revenue_summary(
    billing_service: BillingService = Depends(get_billing_service),
) -> RevenueSummaryResponse:
    try:
        return RevenueSummaryResponse(
            total_revenue=billing_service.total_revenue(),
            total_unpaid=billing_service.total_unpaid(),
            collection_rate=billing_service.collection_rate(),
            bill_count=billing_service.count_bills(),
            paid_bill_count=billing_service.count_paid_bills(),
        )
    except HotelDeskError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure(logger, "summarize revenue") from exc


@router.get(
    "/revenue/monthly",
    response_model=MonthlyRevenueResponse,
    dependencies=[Depends(require(Capability.VIEW_BILLS))],
)
async def monthly_revenue(
    year: int = Query(ge=1, le=MAX_REPORT_YEAR),
    month: int = Query(ge=1, le=12),
    billing_service: BillingService = Depends(get_billing_service),
) -> MonthlyRevenueResponse:
    try:
        return MonthlyRevenueResponse(
            year=year,
            month=month,
            revenue=billing_service.monthly_revenue(year, month),
        )
    except HotelDeskError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure(logger, "compute monthly revenue") from exc


@router.post(
    "",
    response_model=BillResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require(Capability.MANAGE_BILLS))],
)
async def generate_bill(
    payload: BillCreateRequest,
    billing_service: BillingService = Depends(get_billing_service),
) -> BillResponse:
    try:
        return BillResponse.from_bill(billing_service.generate_bill(payload.booking_id))
    except HotelDeskError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure(logger, "generate bill") from exc


@router.get(
    "/{bill_id}",
    response_model=BillResponse,
    dependencies=[Depends(require(Capability.VIEW_BILLS))],
)
async def get_bill(
    bill_id: str,
    billing_service: BillingService = Depends(get_billing_service),
) -> BillResponse:
    try:
        return BillResponse.from_bill(billing_service.get_bill(bill_id))
    except HotelDeskError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure(logger, "load bill") from exc


@router.post(
    "/{bill_id}/pay",
    response_model=BillResponse,
    dependencies=[Depends(require(Capability.MANAGE_BILLS))],
)
async def mark_bill_paid(
    bill_id: str,
    billing_service: BillingService = Depends(get_billing_service),
) -> BillResponse:
    try:
        return BillResponse.from_bill(billing_service.mark_paid(bill_id))
    except HotelDeskError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure(logger, "mark bill as paid") from exc
