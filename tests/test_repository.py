from __future__ import annotations

from dataclasses import replace

import pytest

from frontdesk.domain.errors import StorageConflictError, StorageError
from frontdesk.repository.data_repository import DEMO_ROOMS, DataRepository
from frontdesk.utils.config import get_settings


def _build_test_settings(tmp_path, filename: str):
    base = get_settings()
    return replace(base, database_path=tmp_path / filename, seed_demo_rooms=False)


def _room(number: str, room_type: str = "Single", price: str = "100.00") -> dict:
    return {
        "room_number": number,
        "room_type": room_type,
        "price_per_night": price,
        "is_available": 1,
    }


def _repository(tmp_path, filename: str) -> DataRepository:
    repository = DataRepository(_build_test_settings(tmp_path, filename))
    repository.initialize_database()
    return repository


def test_initialize_database_is_idempotent(tmp_path):
    repository = _repository(tmp_path, "init.db")
    repository.initialize_database()
    assert repository.count_where("rooms") == 0


def test_seed_demo_rooms_only_fills_empty_inventory(tmp_path):
    repository = _repository(tmp_path, "seed.db")

    assert repository.seed_demo_rooms() == len(DEMO_ROOMS)
    assert repository.seed_demo_rooms() == 0
    assert repository.count_where("rooms") == len(DEMO_ROOMS)


def test_insert_and_find_by_id(tmp_path):
    repository = _repository(tmp_path, "crud.db")
    repository.insert("rooms", _room("101"))

    row = repository.find_by_id("rooms", "101")
    assert row is not None
    assert row["room_type"] == "Single"
    assert row["price_per_night"] == "100.00"
    assert repository.find_by_id("rooms", "999") is None


def test_duplicate_primary_key_raises_conflict(tmp_path):
    repository = _repository(tmp_path, "dup.db")
    repository.insert("rooms", _room("101"))

    with pytest.raises(StorageConflictError):
        repository.insert("rooms", _room("101"))


def test_find_where_supports_lookups_order_and_limit(tmp_path):
    repository = _repository(tmp_path, "lookups.db")
    repository.insert("rooms", _room("101", price="100.00"))
    repository.insert("rooms", _room("102", price="120.00"))
    repository.insert("rooms", _room("201", "Double", "150.00"))

    singles = repository.find_where("rooms", {"room_type": "Single"}, order_by="room_number DESC")
    assert [row["room_number"] for row in singles] == ["102", "101"]

    above = repository.find_where("rooms", {"room_number__gt": "101"}, order_by="room_number")
    assert [row["room_number"] for row in above] == ["102", "201"]

    first = repository.find_where("rooms", None, order_by="room_number ASC", limit=1)
    assert [row["room_number"] for row in first] == ["101"]


def test_conditional_update_respects_expected_values(tmp_path):
    repository = _repository(tmp_path, "conditional.db")
    repository.insert("rooms", _room("101"))

    assert repository.update("rooms", "101", {"is_available": 0}, expected={"is_available": 1})
    assert not repository.update("rooms", "101", {"is_available": 0}, expected={"is_available": 1})
    assert not repository.update("rooms", "404", {"is_available": 0})


def test_delete_reports_whether_a_row_was_removed(tmp_path):
    repository = _repository(tmp_path, "delete.db")
    repository.insert("rooms", _room("101"))

    assert repository.delete("rooms", "101") is True
    assert repository.delete("rooms", "101") is False


def test_transaction_rolls_back_on_error(tmp_path):
    repository = _repository(tmp_path, "rollback.db")

    with pytest.raises(RuntimeError):
        with repository.transaction() as session:
            session.insert("rooms", _room("101"))
            raise RuntimeError("abort")

    assert repository.count_where("rooms") == 0


def test_unknown_column_is_rejected(tmp_path):
    repository = _repository(tmp_path, "columns.db")

    with pytest.raises(ValueError):
        repository.find_where("rooms", {"room_number; DROP TABLE rooms": "x"})
    with pytest.raises(ValueError):
        repository.find_all("rooms", order_by="price_per_night SIDEWAYS")


def test_check_constraint_failure_is_not_a_conflict(tmp_path):
    repository = _repository(tmp_path, "check.db")

    with pytest.raises(StorageError) as excinfo:
        repository.insert(
            "bookings",
            {
                "booking_id": "BK-1",
                "customer_name": "Alice",
                "room_number": "101",
                "check_in_date": "2024-06-03",
                "check_out_date": "2024-06-01",
                "is_active": 1,
            },
        )

    assert not isinstance(excinfo.value, StorageConflictError)
    assert repository.count_where("bookings") == 0
