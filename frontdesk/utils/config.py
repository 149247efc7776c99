"""Environment-driven application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


DEFAULT_ROOM_TYPES = ("Single", "Double", "Suite", "Deluxe")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_tuple(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    values = tuple(item.strip() for item in raw.split(",") if item.strip())
    return values or default


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    database_path: Path
    log_level: str
    room_types: tuple[str, ...]
    booking_id_prefix: str
    bill_id_prefix: str
    upcoming_check_in_days: int
    session_token_bytes: int
    password_hash_iterations: int
    default_manager_id: str
    default_manager_password: str
    default_receptionist_id: str
    default_receptionist_password: str
    seed_demo_rooms: bool


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once per process; tests clear the cache or use replace()."""
    return Settings(
        app_name=os.getenv("HOTEL_APP_NAME", "Hotel Front Desk"),
        app_version=os.getenv("HOTEL_APP_VERSION", "1.0.0"),
        database_path=Path(os.getenv("HOTEL_DB_PATH", "data/frontdesk.db")),
        log_level=os.getenv("HOTEL_LOG_LEVEL", "INFO"),
        room_types=_env_tuple("HOTEL_ROOM_TYPES", DEFAULT_ROOM_TYPES),
        booking_id_prefix=os.getenv("HOTEL_BOOKING_ID_PREFIX", "BK"),
        bill_id_prefix=os.getenv("HOTEL_BILL_ID_PREFIX", "BILL"),
        upcoming_check_in_days=_env_int("HOTEL_UPCOMING_DAYS", 7),
        session_token_bytes=_env_int("HOTEL_SESSION_TOKEN_BYTES", 32),
        password_hash_iterations=_env_int("HOTEL_PASSWORD_HASH_ITERATIONS", 120_000),
        default_manager_id=os.getenv("HOTEL_MANAGER_ID", "manager"),
        default_manager_password=os.getenv("HOTEL_MANAGER_PASSWORD", "manager123"),
        default_receptionist_id=os.getenv("HOTEL_RECEPTIONIST_ID", "reception"),
        default_receptionist_password=os.getenv("HOTEL_RECEPTIONIST_PASSWORD", "reception123"),
        seed_demo_rooms=_env_bool("HOTEL_SEED_DEMO_ROOMS", True),
    )
