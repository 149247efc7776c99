"""
app.py: FastAPI application factory and startup lifecycle.

This is the ASGI application object imported by uvicorn.
It wires all services, registers routers, and runs startup initialization.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Callable, Optional

from fastapi import FastAPI

from frontdesk.controllers.auth_controller import router as auth_router
from frontdesk.controllers.billing_controller import router as billing_router
from frontdesk.controllers.booking_controller import router as booking_router
from frontdesk.controllers.room_controller import router as room_router
from frontdesk.controllers.statistics_controller import router as statistics_router
from frontdesk.repository.data_repository import DataRepository
from frontdesk.services.auth_service import AuthService
from frontdesk.services.billing_service import BillingService
from frontdesk.services.booking_service import BookingLedgerService
from frontdesk.services.room_service import RoomInventoryService
from frontdesk.services.statistics_service import StatisticsService
from frontdesk.utils.config import Settings, get_settings
from frontdesk.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> FastAPI:
    """
    Build and wire the FastAPI application.

    Every service receives the same repository instance; nothing is looked up
    from module globals after this function returns.
    """
    settings = settings or get_settings()

    # --- Repository (one SQLite connection per call) ---
    repository = DataRepository(settings)

    # --- Services (business rules, no SQL) ---
    room_service = RoomInventoryService(repository=repository, settings=settings)
    booking_service = BookingLedgerService(
        repository=repository,
        settings=settings,
        room_service=room_service,
        clock=clock,
    )
    billing_service = BillingService(
        repository=repository,
        settings=settings,
        clock=clock,
    )
    statistics_service = StatisticsService(
        repository=repository,
        settings=settings,
        room_service=room_service,
        booking_service=booking_service,
        billing_service=billing_service,
        clock=clock,
    )
    auth_service = AuthService(repository=repository, settings=settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Run startup initialization before accepting requests."""
        _startup(app)
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # --- Routers ---
    app.include_router(auth_router)
    app.include_router(room_router)
    app.include_router(booking_router)
    app.include_router(billing_router)
    app.include_router(statistics_router)

    # --- Inject services into app.state for dependency resolution ---
    app.state.settings = settings
    app.state.repository = repository
    app.state.room_service = room_service
    app.state.booking_service = booking_service
    app.state.billing_service = billing_service
    app.state.statistics_service = statistics_service
    app.state.auth_service = auth_service

    return app


def _startup(app: FastAPI) -> None:
    """
    Idempotent startup sequence. Safe to re-run on server restarts.

    Order matters:
      1. Schema must exist before seeding.
      2. Demo rooms are seeded only into an empty inventory.
      3. Default desk users are seeded only into an empty users table.
    """
    settings: Settings = app.state.settings
    repository: DataRepository = app.state.repository
    auth_service: AuthService = app.state.auth_service

    logger.info("Startup: initializing database schema")
    repository.initialize_database()

    if settings.seed_demo_rooms:
        logger.info("Startup: seeding demo rooms (skipped if inventory not empty)")
        repository.seed_demo_rooms()

    seeded = auth_service.ensure_default_users()
    if seeded:
        logger.info("Startup: created %s default desk users", seeded)

    logger.info("Startup complete, front desk ready")


# Module-level app object for uvicorn
app = create_app()
