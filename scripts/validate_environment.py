#!/usr/bin/env python3
"""Validate local front-desk environment readiness."""

from __future__ import annotations

import importlib
import shutil
import sys
import tempfile
from dataclasses import replace
from datetime import date, datetime, timedelta
from decimal import Decimal
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from frontdesk.repository.data_repository import DEMO_ROOMS, DataRepository
from frontdesk.services.billing_service import BillingService
from frontdesk.services.booking_service import BookingLedgerService
from frontdesk.services.room_service import RoomInventoryService
from frontdesk.utils.config import get_settings

SEPARATOR_LINE = "=" * 44


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True
    temp_dir = tempfile.mkdtemp(prefix="frontdesk-env-")

    # CHECK 1: Python version >= 3.10
    if sys.version_info >= (3, 10):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.10",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2: Required packages importable
    package_specs = [
        ("fastapi", "fastapi"),
        ("uvicorn", "uvicorn"),
        ("pydantic", "pydantic"),
        ("httpx", "httpx"),
        ("pytest", "pytest"),
    ]
    import_errors: list[str] = []
    from importlib.metadata import version

    for module_name, dist_name in package_specs:
        try:
            importlib.import_module(module_name)
            _ = version(dist_name)
        except Exception as exc:  # pragma: no cover - runtime guard
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    try:
        validation_settings = replace(
            get_settings(),
            database_path=Path(temp_dir) / "frontdesk_validation.db",
        )
        repository = DataRepository(validation_settings)

        # CHECK 3: Database initialization
        try:
            repository.initialize_database()
            ok, line = _print_result("Database initialization", True)
        except Exception as exc:
            ok, line = _print_result("Database initialization", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 4: Demo inventory seeding
        try:
            seeded = repository.seed_demo_rooms()
            if seeded != len(DEMO_ROOMS):
                raise RuntimeError(f"expected {len(DEMO_ROOMS)} rooms, got {seeded}")
            ok, line = _print_result("Demo inventory", True, f": {seeded} rooms")
        except Exception as exc:
            ok, line = _print_result("Demo inventory", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 5: Booking and billing round trip
        room_service = RoomInventoryService(repository=repository, settings=validation_settings)
        booking_service = BookingLedgerService(
            repository=repository,
            settings=validation_settings,
            room_service=room_service,
        )
        billing_service = BillingService(repository=repository, settings=validation_settings)
        try:
            today = date.today()
            booking = booking_service.create_booking(
                "Validation Guest",
                "101",
                today,
                today + timedelta(days=2),
            )
            bill = billing_service.generate_bill(booking.booking_id)
            if bill.total_amount != Decimal("200.00"):
                raise RuntimeError(f"expected bill 200.00, got {bill.total_amount}")
            booking_service.cancel_booking(booking.booking_id)
            if not room_service.find_by_number("101").is_available:
                raise RuntimeError("room 101 still unavailable after cancellation")
            ok, line = _print_result(
                "Booking and billing",
                True,
                f": {bill.total_amount} at {datetime.now():%H:%M:%S}",
            )
        except Exception as exc:
            ok, line = _print_result("Booking and billing", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    print(SEPARATOR_LINE)
    print(" Front Desk Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
