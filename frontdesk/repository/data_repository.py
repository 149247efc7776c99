"""Repository layer responsible for all database access."""

from __future__ import annotations

import sqlite3
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Any, Iterator, Mapping, Optional

from frontdesk.domain.errors import StorageConflictError, StorageError
from frontdesk.utils.config import Settings, get_settings
from frontdesk.utils.logger import get_logger


logger = get_logger(__name__)


TABLE_KEYS: dict[str, str] = {
    "rooms": "room_number",
    "bookings": "booking_id",
    "bills": "bill_id",
    "users": "user_id",
}

TABLE_COLUMNS: dict[str, frozenset[str]] = {
    "rooms": frozenset(
        {"room_number", "room_type", "price_per_night", "is_available", "created_at"}
    ),
    "bookings": frozenset(
        {
            "booking_id",
            "customer_name",
            "room_number",
            "check_in_date",
            "check_out_date",
            "is_active",
            "created_at",
        }
    ),
    "bills": frozenset(
        {"bill_id", "booking_id", "total_amount", "generated_at", "is_paid", "paid_at"}
    ),
    "users": frozenset(
        {"user_id", "role", "password_hash", "password_salt", "created_at"}
    ),
}

_LOOKUP_OPERATORS = {
    "eq": "=",
    "ne": "!=",
    "gt": ">",
    "gte": ">=",
    "lt": "<",
    "lte": "<=",
}

DEMO_ROOMS = [
    ("101", "Single", "100.00"),
    ("102", "Single", "100.00"),
    ("103", "Single", "110.00"),
    ("201", "Double", "150.00"),
    ("202", "Double", "150.00"),
    ("203", "Double", "165.00"),
    ("301", "Suite", "250.00"),
    ("302", "Suite", "275.00"),
    ("401", "Deluxe", "400.00"),
]


def _check_table(table: str) -> str:
    if table not in TABLE_KEYS:
        raise ValueError(f"Unknown table '{table}'")
    return table


def _check_column(table: str, column: str) -> str:
    if column not in TABLE_COLUMNS[table]:
        raise ValueError(f"Unknown column '{column}' for table '{table}'")
    return column


def _build_where(table: str, criteria: Optional[Mapping[str, Any]]) -> tuple[str, tuple[Any, ...]]:
    """Translate ``{"column__op": value}`` lookups into a parameterized clause."""
    if not criteria:
        return "", ()
    clauses: list[str] = []
    params: list[Any] = []
    for lookup, value in criteria.items():
        column, _, op = lookup.partition("__")
        operator = _LOOKUP_OPERATORS.get(op or "eq")
        if operator is None:
            raise ValueError(f"Unsupported lookup '{lookup}'")
        _check_column(table, column)
        if value is None and operator in ("=", "!="):
            clauses.append(f"{column} IS {'NOT ' if operator == '!=' else ''}NULL")
            continue
        clauses.append(f"{column} {operator} ?")
        params.append(value)
    return " WHERE " + " AND ".join(clauses), tuple(params)


def _build_order(table: str, order_by: Optional[str]) -> str:
    if not order_by:
        return ""
    parts: list[str] = []
    for item in order_by.split(","):
        tokens = item.split()
        if not tokens or len(tokens) > 2:
            raise ValueError(f"Invalid order clause '{order_by}'")
        column = _check_column(table, tokens[0])
        direction = tokens[1].upper() if len(tokens) == 2 else "ASC"
        if direction not in ("ASC", "DESC"):
            raise ValueError(f"Invalid order direction '{tokens[1]}'")
        parts.append(f"{column} {direction}")
    return " ORDER BY " + ", ".join(parts)


_UNIQUENESS_ERROR_NAMES = ("SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY")


def _is_uniqueness_violation(exc: sqlite3.IntegrityError) -> bool:
    error_name = getattr(exc, "sqlite_errorname", None)
    if error_name is not None:
        return error_name in _UNIQUENESS_ERROR_NAMES
    return str(exc).startswith("UNIQUE constraint failed")


@contextmanager
def _translate_errors(action: str) -> Iterator[None]:
    try:
        yield
    except sqlite3.IntegrityError as exc:
        if _is_uniqueness_violation(exc):
            raise StorageConflictError(f"{action} violated a uniqueness constraint: {exc}") from exc
        logger.error("Integrity failure during %s: %s", action, exc)
        raise StorageError(f"{action} violated a table constraint: {exc}") from exc
    except sqlite3.Error as exc:
        logger.error("Storage failure during %s: %s", action, exc)
        raise StorageError(f"{action} failed: {exc}") from exc


class RepositorySession:
    """CRUD operations bound to one open connection.

    Returned rows are plain dicts. A missing row is ``None`` (or ``False`` for
    writes); a failing database call raises ``StorageError``.
    """

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._conn = connection

    def insert(self, table: str, record: Mapping[str, Any]) -> None:
        _check_table(table)
        columns = [_check_column(table, column) for column in record]
        placeholders = ", ".join("?" for _ in columns)
        with _translate_errors(f"insert into {table}"):
            self._conn.execute(
                f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders});",
                tuple(record.values()),
            )

    def update(
        self,
        table: str,
        key: str,
        changes: Mapping[str, Any],
        expected: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        """Apply ``changes`` to one row; ``expected`` adds guard conditions."""
        _check_table(table)
        if not changes:
            return self.find_by_id(table, key) is not None
        set_clause = ", ".join(f"{_check_column(table, column)} = ?" for column in changes)
        where, where_params = _build_where(table, {TABLE_KEYS[table]: key, **(expected or {})})
        with _translate_errors(f"update {table}"):
            cursor = self._conn.execute(
                f"UPDATE {table} SET {set_clause}{where};",
                tuple(changes.values()) + where_params,
            )
            return cursor.rowcount > 0

    def find_by_id(self, table: str, key: str) -> Optional[dict[str, Any]]:
        _check_table(table)
        with _translate_errors(f"select from {table}"):
            row = self._conn.execute(
                f"SELECT * FROM {table} WHERE {TABLE_KEYS[table]} = ?;",
                (key,),
            ).fetchone()
        return dict(row) if row is not None else None

    def find_all(self, table: str, order_by: Optional[str] = None) -> list[dict[str, Any]]:
        return self.find_where(table, None, order_by=order_by)

    def find_where(
        self,
        table: str,
        criteria: Optional[Mapping[str, Any]],
        order_by: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        _check_table(table)
        where, params = _build_where(table, criteria)
        query = f"SELECT * FROM {table}{where}{_build_order(table, order_by)}"
        if limit is not None:
            query += " LIMIT ?"
            params = params + (int(limit),)
        with _translate_errors(f"select from {table}"):
            rows = self._conn.execute(query + ";", params).fetchall()
        return [dict(row) for row in rows]

    def count_where(self, table: str, criteria: Optional[Mapping[str, Any]] = None) -> int:
        _check_table(table)
        where, params = _build_where(table, criteria)
        with _translate_errors(f"count {table}"):
            row = self._conn.execute(
                f"SELECT COUNT(*) AS count FROM {table}{where};",
                params,
            ).fetchone()
        return int(row["count"])

    def delete(self, table: str, key: str) -> bool:
        _check_table(table)
        with _translate_errors(f"delete from {table}"):
            cursor = self._conn.execute(
                f"DELETE FROM {table} WHERE {TABLE_KEYS[table]} = ?;",
                (key,),
            )
            return cursor.rowcount > 0


class DataRepository:
    """Encapsulates SQLite access so business logic stays storage-agnostic.

    Every call opens its own connection and closes it before returning.
    ``transaction()`` groups several calls into one ``BEGIN IMMEDIATE``
    transaction that commits on success and rolls back on any exception.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._db_path = Path(self._settings.database_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        try:
            connection = sqlite3.connect(self._db_path, isolation_level=None)
        except sqlite3.Error as exc:
            raise StorageError(f"Could not open database {self._db_path}: {exc}") from exc
        connection.row_factory = sqlite3.Row
        return connection

    @contextmanager
    def transaction(self) -> Iterator[RepositorySession]:
        with closing(self._connect()) as conn:
            with _translate_errors("begin transaction"):
                conn.execute("BEGIN IMMEDIATE;")
            try:
                yield RepositorySession(conn)
            except BaseException:
                conn.execute("ROLLBACK;")
                raise
            with _translate_errors("commit transaction"):
                conn.execute("COMMIT;")

    @contextmanager
    def _session(self) -> Iterator[RepositorySession]:
        with closing(self._connect()) as conn:
            yield RepositorySession(conn)

    def initialize_database(self) -> None:
        """Create all persistence artifacts before API startup."""
        with closing(self._connect()) as conn:
            with _translate_errors("schema initialization"):
                conn.executescript(
                    """
                    CREATE TABLE IF NOT EXISTS rooms (
                        room_number TEXT PRIMARY KEY,
                        room_type TEXT NOT NULL,
                        price_per_night TEXT NOT NULL,
                        is_available INTEGER NOT NULL DEFAULT 1 CHECK (is_available IN (0, 1)),
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                    );

                    CREATE TABLE IF NOT EXISTS bookings (
                        booking_id TEXT PRIMARY KEY,
                        customer_name TEXT NOT NULL,
                        room_number TEXT NOT NULL,
                        check_in_date TEXT NOT NULL,
                        check_out_date TEXT NOT NULL,
                        is_active INTEGER NOT NULL DEFAULT 1 CHECK (is_active IN (0, 1)),
                        created_at TEXT,
                        CHECK (check_out_date > check_in_date)
                    );

                    CREATE TABLE IF NOT EXISTS bills (
                        bill_id TEXT PRIMARY KEY,
                        booking_id TEXT NOT NULL UNIQUE,
                        total_amount TEXT NOT NULL,
                        generated_at TEXT NOT NULL,
                        is_paid INTEGER NOT NULL DEFAULT 0 CHECK (is_paid IN (0, 1)),
                        paid_at TEXT
                    );

                    CREATE TABLE IF NOT EXISTS users (
                        user_id TEXT PRIMARY KEY,
                        role TEXT NOT NULL CHECK (role IN ('Manager', 'Receptionist')),
                        password_hash TEXT NOT NULL,
                        password_salt TEXT NOT NULL,
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                    );

                    CREATE INDEX IF NOT EXISTS idx_bookings_room_active
                    ON bookings(room_number, is_active);

                    CREATE INDEX IF NOT EXISTS idx_bookings_check_in
                    ON bookings(check_in_date);

                    CREATE INDEX IF NOT EXISTS idx_bills_generated_paid
                    ON bills(generated_at, is_paid);
                    """
                )
        logger.info("Database initialized at %s", self._db_path)

    def seed_demo_rooms(self) -> int:
        """Insert the demo inventory only when the rooms table is empty."""
        with self.transaction() as session:
            if session.count_where("rooms") > 0:
                logger.info("Room inventory already present; skipping seed")
                return 0
            for room_number, room_type, price in DEMO_ROOMS:
                session.insert(
                    "rooms",
                    {
                        "room_number": room_number,
                        "room_type": room_type,
                        "price_per_night": price,
                        "is_available": 1,
                    },
                )
        logger.info("Seeded %s demo rooms", len(DEMO_ROOMS))
        return len(DEMO_ROOMS)

    def insert(self, table: str, record: Mapping[str, Any]) -> None:
        with self._session() as session:
            session.insert(table, record)

    def update(
        self,
        table: str,
        key: str,
        changes: Mapping[str, Any],
        expected: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        with self._session() as session:
            return session.update(table, key, changes, expected=expected)

    def find_by_id(self, table: str, key: str) -> Optional[dict[str, Any]]:
        with self._session() as session:
            return session.find_by_id(table, key)

    def find_all(self, table: str, order_by: Optional[str] = None) -> list[dict[str, Any]]:
        with self._session() as session:
            return session.find_all(table, order_by=order_by)

    def find_where(
        self,
        table: str,
        criteria: Optional[Mapping[str, Any]],
        order_by: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        with self._session() as session:
            return session.find_where(table, criteria, order_by=order_by, limit=limit)

    def count_where(self, table: str, criteria: Optional[Mapping[str, Any]] = None) -> int:
        with self._session() as session:
            return session.count_where(table, criteria)

    def delete(self, table: str, key: str) -> bool:
        with self._session() as session:
            return session.delete(table, key)
