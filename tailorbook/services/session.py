from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..data import settings_repository
from .errors import AuthorizationError, ValidationError


_PBKDF2_ITERATIONS = 200_000

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    user_email: str
    signed_in_at: datetime


class SessionManager:
    """Holds the signed-in owner, if any.

    Callers read the session through ``current_session()`` and hand it to the
    services that write data.
    """

    def __init__(self) -> None:
        self._session: Optional[Session] = None

    def current_session(self) -> Optional[Session]:
        return self._session

    def has_owner(self) -> bool:
        return bool(settings_repository.get_setting("owner_password_hash"))

    def register_owner(self, email: str, password: str) -> Session:
        email_clean = _normalize_email(email)
        if not email_clean:
            raise ValidationError("Email is required.")
        if len(password) < 6:
            raise ValidationError("Password must be at least 6 characters.")
        if self.has_owner():
            raise AuthorizationError("An owner account already exists.")

        salt = secrets.token_hex(16)
        settings_repository.set_setting("owner_email", email_clean)
        settings_repository.set_setting("owner_password_salt", salt)
        settings_repository.set_setting("owner_password_hash", _hash_password(password, salt))
        logger.info("Owner account registered for %s", email_clean)
        return self._start_session(email_clean)

    def sign_in(self, email: str, password: str) -> Session:
        email_clean = _normalize_email(email)
        stored_email = settings_repository.get_setting("owner_email")
        stored_hash = settings_repository.get_setting("owner_password_hash")
        salt = settings_repository.get_setting("owner_password_salt")

        if not stored_hash:
            raise AuthorizationError("No owner account has been set up yet.")

        candidate = _hash_password(password, salt)
        if email_clean != stored_email or not hmac.compare_digest(candidate, stored_hash):
            logger.warning("Rejected sign-in attempt for %s", email_clean or "<blank>")
            raise AuthorizationError("Invalid email or password.")

        return self._start_session(email_clean)

    def sign_out(self) -> None:
        if self._session is not None:
            logger.info("Signed out %s", self._session.user_email)
        self._session = None

    def _start_session(self, email: str) -> Session:
        self._session = Session(user_email=email, signed_in_at=datetime.now())
        logger.info("Signed in %s", email)
        return self._session


def require_session(session: Optional[Session]) -> Session:
    if session is None:
        raise AuthorizationError("Sign in before changing records.")
    return session


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _hash_password(password: str, salt: str) -> str:
    digest = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt.encode("utf-8"),
        _PBKDF2_ITERATIONS,
    )
    return digest.hex()
