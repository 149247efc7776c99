"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

import logging
from typing import Any, Callable

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from frontdesk.domain.errors import (
    AuthenticationError,
    DuplicateError,
    HotelDeskError,
    NotFoundError,
    PermissionDeniedError,
    RoomUnavailableError,
    StorageError,
    ValidationError,
)
from frontdesk.domain.models import User
from frontdesk.domain.roles import Capability
from frontdesk.services.auth_service import AuthService
from frontdesk.services.billing_service import BillingService
from frontdesk.services.booking_service import BookingLedgerService
from frontdesk.services.room_service import RoomInventoryService
from frontdesk.services.statistics_service import StatisticsService


bearer_scheme = HTTPBearer(auto_error=False)

_STATUS_BY_ERROR: list[tuple[type[HotelDeskError], int]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (DuplicateError, status.HTTP_409_CONFLICT),
    (RoomUnavailableError, status.HTTP_409_CONFLICT),
    (StorageError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def to_http_exception(exc: HotelDeskError) -> HTTPException:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=str(exc),
    )


def _state_service(request: Request, name: str) -> Any:
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{name} is not initialized",
        )
    return service


def get_auth_service(request: Request) -> AuthService:
    return _state_service(request, "auth_service")


def get_room_service(request: Request) -> RoomInventoryService:
    return _state_service(request, "room_service")


def get_booking_service(request: Request) -> BookingLedgerService:
    return _state_service(request, "booking_service")


def get_billing_service(request: Request) -> BillingService:
    return _state_service(request, "billing_service")


def get_statistics_service(request: Request) -> StatisticsService:
    return _state_service(request, "statistics_service")


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> User:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header with Bearer token is required",
        )
    try:
        return auth_service.resolve_session(credentials.credentials)
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc


def require(capability: Capability) -> Callable[..., Any]:
    """Build a dependency that admits only users whose role holds ``capability``."""

    async def _check(
        credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
        auth_service: AuthService = Depends(get_auth_service),
    ) -> User:
        if credentials is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Authorization header with Bearer token is required",
            )
        try:
            return auth_service.authorize(credentials.credentials, capability)
        except HotelDeskError as exc:
            raise to_http_exception(exc) from exc

    return _check


def unexpected_failure(logger: logging.Logger, action: str) -> HTTPException:
    logger.exception("Unexpected failure while trying to %s", action)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}",
    )
