"""
Authentication and identity related use cases.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

from vilanow.core.config import Settings
from vilanow.core.security import hash_password, needs_rehash, verify_password
from vilanow.core.utils import new_id, utc_now_iso
from vilanow.models.users import ROLE_AGENT, ROLE_SEEKER
from vilanow.registry import ModelRegistry
from vilanow.repositories.base import Record
from vilanow.services.session_service import delete_session, issue_session, resolve_session

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")
MIN_PASSWORD_LENGTH = 8
SELF_SERVICE_ROLES = {ROLE_SEEKER, ROLE_AGENT}
PRIVATE_FIELDS = {"passwordHash"}


class AuthError(Exception):
    """Base class for authentication-related exceptions."""


class RegistrationError(AuthError):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AccountExistsError(AuthError):
    pass


class InvalidCredentialsError(AuthError):
    pass


@dataclass
class LoginSuccess:
    user: Record
    session_token: str
    expires_at: str


def public_user(user: Record) -> Record:
    """User record without secrets, safe to return to clients."""
    return {key: value for key, value in user.items() if key not in PRIVATE_FIELDS}


@dataclass
class AuthService:
    """Handles registration, login, logout and session lookup."""

    registry: ModelRegistry
    settings: Settings

    # -------------------------------------- helpers --------------------------------------
    def _start_session(self, user: Record) -> LoginSuccess:
        session = issue_session(self.registry.sessions, user["id"], self.settings.session_ttl_seconds)
        return LoginSuccess(user=public_user(user), session_token=session["token"], expires_at=session["expiresAt"])

    # -------------------------------------- registration --------------------------------------
    def register(
        self,
        name: str,
        email: str,
        password: str,
        phone: str = "",
        role: str = ROLE_SEEKER,
    ) -> LoginSuccess:
        raw_email = (email or "").strip().lower()
        if not EMAIL_PATTERN.fullmatch(raw_email):
            raise RegistrationError("A valid email is required")
        if not (name or "").strip():
            raise RegistrationError("Name is required")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise RegistrationError(f"Password too short. Use at least {MIN_PASSWORD_LENGTH} characters")
        if role not in SELF_SERVICE_ROLES:
            raise RegistrationError("Role must be 'seeker' or 'agent'")
        if self.registry.users.find_by_email(raw_email):
            raise AccountExistsError("Account already exists")

        now = utc_now_iso()
        user: Record = {
            "id": new_id(),
            "name": name.strip(),
            "email": raw_email,
            "phone": (phone or "").strip(),
            "role": role,
            "passwordHash": hash_password(password),
            "active": True,
            "verified": False,
            "createdAt": now,
            "updatedAt": now,
        }
        if role == ROLE_AGENT:
            user.update({"credits": self.settings.signup_bonus_credits, "totalListings": 0, "totalInterests": 0})
        created = self.registry.users.create(user)
        logger.info("Registered %s account %s", role, created["id"])
        return self._start_session(created)

    # -------------------------------------- login --------------------------------------
    def login(self, email: str, password: str) -> LoginSuccess:
        user = self.registry.users.find_by_email(email)
        if not user or not verify_password(password, user.get("passwordHash")):
            raise InvalidCredentialsError("Invalid credentials")
        if not user.get("active", True):
            raise InvalidCredentialsError("Account disabled")
        if needs_rehash(user.get("passwordHash")):
            self.registry.users.touch(user["id"], {"passwordHash": hash_password(password)})
        self.registry.users.touch(user["id"], {"lastLoginAt": utc_now_iso()})
        return self._start_session(user)

    def logout(self, session_token: Optional[str]) -> bool:
        return delete_session(self.registry.sessions, session_token)

    def logout_everywhere(self, user_id: str) -> int:
        return self.registry.sessions.delete_by_user(user_id)

    def current_user(self, session_token: Optional[str]) -> Optional[Record]:
        session = resolve_session(self.registry.sessions, session_token)
        if not session:
            return None
        user = self.registry.users.find_by_id(session["userId"])
        if not user or not user.get("active", True):
            return None
        return user

    def change_password(self, user_id: str, current_password: str, new_password: str) -> None:
        user = self.registry.users.find_by_id(user_id)
        if not user or not verify_password(current_password, user.get("passwordHash")):
            raise InvalidCredentialsError("Invalid credentials")
        if len(new_password or "") < MIN_PASSWORD_LENGTH:
            raise RegistrationError(f"Password too short. Use at least {MIN_PASSWORD_LENGTH} characters")
        self.registry.users.touch(user_id, {"passwordHash": hash_password(new_password)})
