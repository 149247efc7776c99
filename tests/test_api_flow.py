from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from fastapi import FastAPI
from fastapi.testclient import TestClient

from app import create_app
from frontdesk.controllers.auth_controller import router as auth_router
from frontdesk.controllers.billing_controller import router as billing_router
from frontdesk.controllers.booking_controller import router as booking_router
from frontdesk.controllers.room_controller import router as room_router
from frontdesk.controllers.statistics_controller import router as statistics_router
from frontdesk.domain.roles import Role
from frontdesk.repository.data_repository import DEMO_ROOMS, DataRepository
from frontdesk.services.auth_service import AuthService
from frontdesk.services.billing_service import BillingService
from frontdesk.services.booking_service import BookingLedgerService
from frontdesk.services.room_service import RoomInventoryService
from frontdesk.services.statistics_service import StatisticsService
from frontdesk.utils.config import get_settings


def _fixed_clock() -> datetime:
    return datetime(2024, 5, 20, 9, 0)


def _build_test_settings(tmp_path, filename: str, seed_demo_rooms: bool = False):
    get_settings.cache_clear()
    base = get_settings()
    return replace(
        base,
        database_path=tmp_path / filename,
        seed_demo_rooms=seed_demo_rooms,
        password_hash_iterations=1000,
    )


def _build_test_app(tmp_path) -> FastAPI:
    settings = _build_test_settings(tmp_path, "api_flow.db")
    repository = DataRepository(settings)
    repository.initialize_database()

    room_service = RoomInventoryService(repository=repository, settings=settings)
    booking_service = BookingLedgerService(
        repository=repository,
        settings=settings,
        room_service=room_service,
        clock=_fixed_clock,
    )
    billing_service = BillingService(repository=repository, settings=settings, clock=_fixed_clock)
    statistics_service = StatisticsService(
        repository=repository,
        settings=settings,
        room_service=room_service,
        booking_service=booking_service,
        billing_service=billing_service,
        clock=_fixed_clock,
    )
    auth_service = AuthService(repository=repository, settings=settings)
    auth_service.add_user("boss", "manager-pass", Role.MANAGER)
    auth_service.add_user("desk", "desk-pass", Role.RECEPTIONIST)

    app = FastAPI()
    app.include_router(auth_router)
    app.include_router(room_router)
    app.include_router(booking_router)
    app.include_router(billing_router)
    app.include_router(statistics_router)
    app.state.room_service = room_service
    app.state.booking_service = booking_service
    app.state.billing_service = billing_service
    app.state.statistics_service = statistics_service
    app.state.auth_service = auth_service
    return app


def _login(client: TestClient, user_id: str, password: str) -> dict[str, str]:
    response = client.post("/login", json={"user_id": user_id, "password": password})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def test_front_desk_end_to_end_flow(tmp_path):
    client = TestClient(_build_test_app(tmp_path))

    assert client.get("/rooms").status_code == 401

    manager = _login(client, "boss", "manager-pass")
    desk = _login(client, "desk", "desk-pass")

    create_room = client.post(
        "/rooms",
        json={"room_number": "101", "room_type": "Single", "price_per_night": "100.00"},
        headers=manager,
    )
    assert create_room.status_code == 201
    assert create_room.json()["is_available"] is True

    # Book 101 for three nights; the room flips to unavailable.
    create_booking = client.post(
        "/bookings",
        json={
            "customer_name": "Alice",
            "room_number": "101",
            "check_in_date": "2024-06-01",
            "check_out_date": "2024-06-04",
        },
        headers=desk,
    )
    assert create_booking.status_code == 201
    booking = create_booking.json()
    assert booking["nights"] == 3
    assert booking["is_active"] is True
    assert client.get("/rooms/101", headers=desk).json()["is_available"] is False

    # The same room cannot be booked again while the first booking is active.
    rebook = client.post(
        "/bookings",
        json={
            "customer_name": "Bob",
            "room_number": "101",
            "check_in_date": "2024-06-02",
            "check_out_date": "2024-06-03",
        },
        headers=desk,
    )
    assert rebook.status_code == 409
    assert len(client.get("/bookings", headers=desk).json()) == 1

    bill_response = client.post("/bills", json={"booking_id": booking["booking_id"]}, headers=desk)
    assert bill_response.status_code == 201
    bill = bill_response.json()
    assert bill["total_amount"] == "300.00"
    assert bill["is_paid"] is False

    duplicate = client.post("/bills", json={"booking_id": booking["booking_id"]}, headers=desk)
    assert duplicate.status_code == 409

    before = client.get("/bills/revenue", headers=desk).json()
    assert before["total_revenue"] == "0.00"
    assert before["total_unpaid"] == "300.00"

    paid = client.post(f"/bills/{bill['bill_id']}/pay", headers=desk)
    assert paid.status_code == 200
    assert paid.json()["is_paid"] is True

    after = client.get("/bills/revenue", headers=desk).json()
    assert after["total_revenue"] == "300.00"
    assert after["total_unpaid"] == "0.00"
    assert after["collection_rate"] == 100.0

    cancel = client.post(f"/bookings/{booking['booking_id']}/cancel", headers=desk)
    assert cancel.status_code == 200
    assert cancel.json()["is_active"] is False
    assert client.get("/rooms/101", headers=desk).json()["is_available"] is True

    stats = client.get("/statistics", headers=manager)
    assert stats.status_code == 200
    payload = stats.json()
    assert payload["total_rooms"] == 1
    assert payload["available_rooms"] == 1
    assert payload["active_bookings"] == 0
    assert payload["total_revenue"] == "300.00"
    assert payload["occupancy_rate"] == 0.0


def test_roles_are_enforced_per_route(tmp_path):
    client = TestClient(_build_test_app(tmp_path))
    manager = _login(client, "boss", "manager-pass")
    desk = _login(client, "desk", "desk-pass")

    receptionist_adds_room = client.post(
        "/rooms",
        json={"room_number": "101", "room_type": "Single", "price_per_night": "100.00"},
        headers=desk,
    )
    assert receptionist_adds_room.status_code == 403

    client.post(
        "/rooms",
        json={"room_number": "101", "room_type": "Single", "price_per_night": "100.00"},
        headers=manager,
    )
    manager_books = client.post(
        "/bookings",
        json={
            "customer_name": "Alice",
            "room_number": "101",
            "check_in_date": "2024-06-01",
            "check_out_date": "2024-06-04",
        },
        headers=manager,
    )
    assert manager_books.status_code == 403

    assert client.get("/users", headers=desk).status_code == 403
    assert client.get("/users", headers=manager).status_code == 200
    assert client.get("/rooms", headers={"Authorization": "Bearer not-a-token"}).status_code == 401


def test_validation_errors_map_to_client_errors(tmp_path):
    client = TestClient(_build_test_app(tmp_path))
    manager = _login(client, "boss", "manager-pass")
    desk = _login(client, "desk", "desk-pass")
    client.post(
        "/rooms",
        json={"room_number": "101", "room_type": "Single", "price_per_night": "100.00"},
        headers=manager,
    )

    reversed_dates = client.post(
        "/bookings",
        json={
            "customer_name": "Alice",
            "room_number": "101",
            "check_in_date": "2024-06-04",
            "check_out_date": "2024-06-01",
        },
        headers=desk,
    )
    assert reversed_dates.status_code == 400

    unknown_room_type = client.post(
        "/rooms",
        json={"room_number": "102", "room_type": "Castle", "price_per_night": "100.00"},
        headers=manager,
    )
    assert unknown_room_type.status_code == 400

    missing_booking = client.get("/bookings/BK-MISSING", headers=desk)
    assert missing_booking.status_code == 404

    far_year = client.get(
        "/bills/revenue/monthly", params={"year": 10000, "month": 1}, headers=desk
    )
    assert far_year.status_code == 422
    far_report = client.get("/statistics/monthly", params={"year": 9999, "month": 12}, headers=desk)
    assert far_report.status_code == 422

    lowercase = client.get("/rooms/available", params={"room_type": "single"}, headers=desk)
    assert [room["room_number"] for room in lowercase.json()] == ["101"]

    assert client.get("/rooms/101", headers=desk).json()["is_available"] is True
    assert client.get("/bookings", headers=desk).json() == []


def test_session_lifecycle(tmp_path):
    client = TestClient(_build_test_app(tmp_path))

    assert client.post("/login", json={"user_id": "desk", "password": "wrong"}).status_code == 401

    desk = _login(client, "desk", "desk-pass")
    me = client.get("/me", headers=desk).json()
    assert me["role"] == "Receptionist"
    assert "manage_bookings" in me["capabilities"]

    assert client.post("/logout", headers=desk).status_code == 204
    assert client.get("/me", headers=desk).status_code == 401


def test_create_app_startup_seeds_rooms_and_users(tmp_path):
    settings = _build_test_settings(tmp_path, "startup.db", seed_demo_rooms=True)
    app = create_app(settings=settings, clock=_fixed_clock)

    with TestClient(app) as client:
        manager = _login(client, settings.default_manager_id, settings.default_manager_password)
        rooms = client.get("/rooms", headers=manager)
        assert rooms.status_code == 200
        assert len(rooms.json()) == len(DEMO_ROOMS)

        suite = client.get("/rooms/available", params={"room_type": "Suite"}, headers=manager)
        assert [room["room_number"] for room in suite.json()] == ["301"]
