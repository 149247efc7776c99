"""Desk user login, session tokens, and user administration."""

from __future__ import annotations

import hashlib
import secrets
from threading import RLock
from typing import Optional

from frontdesk.domain.constraints import validate_required_text
from frontdesk.domain.errors import (
    DuplicateError,
    InvalidCredentialsError,
    InvalidSessionError,
    NotFoundError,
    StorageConflictError,
    ValidationError,
)
from frontdesk.domain.models import User
from frontdesk.domain.roles import Capability, Role, require_capability
from frontdesk.repository.data_repository import DataRepository
from frontdesk.utils.config import Settings, get_settings
from frontdesk.utils.logger import get_logger


logger = get_logger(__name__)


class AuthService:
    """Validates credentials and maps bearer tokens to users."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._sessions: dict[str, User] = {}
        self._lock = RLock()

    def _hash_password(self, password: str, salt: str) -> str:
        digest = hashlib.pbkdf2_hmac(
            "sha256",
            password.encode("utf-8"),
            bytes.fromhex(salt),
            self._settings.password_hash_iterations,
        )
        return digest.hex()

    def login(self, user_id: str, password: str) -> str:
        row = self._repository.find_by_id("users", user_id)
        if row is None:
            raise InvalidCredentialsError("Invalid user id or password")
        candidate = self._hash_password(password, str(row["password_salt"]))
        if not secrets.compare_digest(candidate, str(row["password_hash"])):
            raise InvalidCredentialsError("Invalid user id or password")
        user = User.from_row(row)
        token = secrets.token_urlsafe(self._settings.session_token_bytes)
        with self._lock:
            self._sessions[token] = user
        logger.info("%s '%s' logged in", user.role.value, user.user_id)
        return token

    def resolve_session(self, token: str) -> User:
        with self._lock:
            for known_token, user in self._sessions.items():
                if secrets.compare_digest(known_token, token):
                    return user
        raise InvalidSessionError("No active session for this token. Login first.")

    def logout(self, token: str) -> None:
        with self._lock:
            self._sessions.pop(token, None)

    def authorize(self, token: str, capability: Capability) -> User:
        user = self.resolve_session(token)
        require_capability(user, capability)
        return user

    def add_user(self, user_id: str, password: str, role: Role | str) -> User:
        uid = validate_required_text(user_id, "user id")
        if not password:
            raise ValidationError("password cannot be empty")
        try:
            resolved_role = Role(role)
        except ValueError as exc:
            raise ValidationError("Invalid role. Must be 'Manager' or 'Receptionist'") from exc

        salt = secrets.token_hex(16)
        try:
            self._repository.insert(
                "users",
                {
                    "user_id": uid,
                    "role": resolved_role.value,
                    "password_hash": self._hash_password(password, salt),
                    "password_salt": salt,
                },
            )
        except StorageConflictError as exc:
            raise DuplicateError(f"User '{uid}' already exists") from exc
        logger.info("User '%s' added as %s", uid, resolved_role.value)
        return User(user_id=uid, role=resolved_role)

    def get_user(self, user_id: str) -> User:
        row = self._repository.find_by_id("users", user_id)
        if row is None:
            raise NotFoundError(f"User not found: {user_id}")
        return User.from_row(row)

    def list_users(self) -> list[User]:
        return [User.from_row(row) for row in self._repository.find_all("users", "user_id ASC")]

    def change_password(self, user_id: str, new_password: str) -> None:
        if not new_password:
            raise ValidationError("password cannot be empty")
        salt = secrets.token_hex(16)
        updated = self._repository.update(
            "users",
            user_id,
            {"password_hash": self._hash_password(new_password, salt), "password_salt": salt},
        )
        if not updated:
            raise NotFoundError(f"User not found: {user_id}")

    def remove_user(self, user_id: str) -> None:
        if not self._repository.delete("users", user_id):
            raise NotFoundError(f"User not found: {user_id}")
        with self._lock:
            stale = [token for token, user in self._sessions.items() if user.user_id == user_id]
            for token in stale:
                del self._sessions[token]
        logger.info("User '%s' removed", user_id)

    def ensure_default_users(self) -> int:
        """Seed one manager and one receptionist into an empty users table."""
        if self._repository.count_where("users") > 0:
            return 0
        self.add_user(
            self._settings.default_manager_id,
            self._settings.default_manager_password,
            Role.MANAGER,
        )
        self.add_user(
            self._settings.default_receptionist_id,
            self._settings.default_receptionist_password,
            Role.RECEPTIONIST,
        )
        return 2
