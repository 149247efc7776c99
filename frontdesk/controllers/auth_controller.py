"""Controller layer for login sessions and desk user administration."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials
from pydantic import BaseModel, Field

from frontdesk.controllers.dependencies import (
    bearer_scheme,
    get_auth_service,
    get_current_user,
    require,
    to_http_exception,
    unexpected_failure,
)
from frontdesk.domain.errors import AuthenticationError, HotelDeskError
from frontdesk.domain.models import User
from frontdesk.domain.roles import ROLE_CAPABILITIES, Capability, Role
from frontdesk.services.auth_service import AuthService
from frontdesk.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["auth"])


class LoginRequest(BaseModel):
    user_id: str = Field(min_length=1)
    password: str = Field(min_length=1)


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: Role


class UserResponse(BaseModel):
    user_id: str
    role: Role
    capabilities: list[Capability]

    @classmethod
    def from_user(cls, user: User) -> UserResponse:
        return cls(
            user_id=user.user_id,
            role=user.role,
            capabilities=sorted(ROLE_CAPABILITIES[user.role], key=lambda item: item.value),
        )


class UserCreateRequest(BaseModel):
    user_id: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=6)
    role: Role


class PasswordChangeRequest(BaseModel):
    new_password: str = Field(min_length=6)


@router.post("/login", response_model=LoginResponse, status_code=status.HTTP_200_OK)
async def login(
    payload: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    try:
        token = auth_service.login(payload.user_id, payload.password)
        return LoginResponse(access_token=token, role=auth_service.resolve_session(token).role)
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc
    except HotelDeskError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure(logger, "login") from exc


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> None:
    if credentials is not None:
        auth_service.logout(credentials.credentials)


@router.get("/me", response_model=UserResponse)
async def current_user(user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.from_user(user)


@router.get(
    "/users",
    response_model=list[UserResponse],
    dependencies=[Depends(require(Capability.MANAGE_USERS))],
)
async def list_users(
    auth_service: AuthService = Depends(get_auth_service),
) -> list[UserResponse]:
    try:
        return [UserResponse.from_user(user) for user in auth_service.list_users()]
    except HotelDeskError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure(logger, "list users") from exc


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require(Capability.MANAGE_USERS))],
)
async def add_user(
    payload: UserCreateRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    try:
        return UserResponse.from_user(
            auth_service.add_user(payload.user_id, payload.password, payload.role)
        )
    except HotelDeskError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure(logger, "add user") from exc


@router.put(
    "/users/{user_id}/password",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require(Capability.MANAGE_USERS))],
)
async def change_password(
    user_id: str,
    payload: PasswordChangeRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> None:
    try:
        auth_service.change_password(user_id, payload.new_password)
    except HotelDeskError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure(logger, "change password") from exc


@router.delete(
    "/users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require(Capability.MANAGE_USERS))],
)
async def remove_user(
    user_id: str,
    auth_service: AuthService = Depends(get_auth_service),
) -> None:
    try:
        auth_service.remove_user(user_id)
    except HotelDeskError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure(logger, "remove user") from exc
