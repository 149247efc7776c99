"""Typed failures raised by the front-desk core."""

from __future__ import annotations


class HotelDeskError(Exception):
    """Base class for every domain and storage failure."""


class ValidationError(HotelDeskError):
    """Raised when input has the wrong shape or range."""


class InvalidDateRangeError(ValidationError):
    """Raised when stay dates are inverted, empty, or in the past."""


class NotFoundError(HotelDeskError):
    """Raised when a referenced room, booking, bill, or user does not exist."""


class DuplicateError(HotelDeskError):
    """Raised when an entity with the same identifier already exists."""


class DuplicateBillError(DuplicateError):
    """Raised when a booking already has a bill."""


class RoomUnavailableError(HotelDeskError):
    """Raised when a room is held by an active booking."""


class StorageError(HotelDeskError):
    """Raised when the database call itself fails."""


class StorageConflictError(StorageError):
    """Raised when a write violates a uniqueness constraint."""


class AuthenticationError(HotelDeskError):
    """Base authentication failure."""


class InvalidCredentialsError(AuthenticationError):
    """Raised when a user id or password does not match."""


class InvalidSessionError(AuthenticationError):
    """Raised when a bearer token does not belong to a live session."""


class PermissionDeniedError(HotelDeskError):
    """Raised when a role lacks the capability an operation requires."""
