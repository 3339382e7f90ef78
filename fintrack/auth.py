"""Email/password accounts stored alongside the expense data.

Passwords are kept as salted PBKDF2-SHA256 hashes in the ``users`` table.
An :class:`AuthService` tracks one signed-in user and notifies session
observers whenever that changes.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import re
import secrets
import sqlite3
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, List, Optional

from . import store
from .errors import AuthError

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
PBKDF2_ITERATIONS = 200_000

_EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


@dataclass(frozen=True)
class User:
    uid: str
    email: str


SessionObserver = Callable[[Optional[User]], Any]


def normalize_email(email: Optional[str]) -> str:
    return (email or '').strip().lower()


def hash_password(password: str, salt: str, iterations: int = PBKDF2_ITERATIONS) -> str:
    digest = hashlib.pbkdf2_hmac('sha256', password.encode('utf-8'), bytes.fromhex(salt), iterations)
    return digest.hex()


class AuthService:
    """Sign-up, sign-in and sign-out against the local user table."""

    def __init__(self, db_path: Optional[Path] = None, iterations: int = PBKDF2_ITERATIONS):
        self.db_path = db_path
        self.iterations = iterations
        self._current_user: Optional[User] = None
        self._observers: List[SessionObserver] = []
        self._lock = threading.Lock()

    @property
    def current_user(self) -> Optional[User]:
        return self._current_user

    def sign_up(self, email: str, password: str) -> User:
        """Create an account and sign it in."""
        email = normalize_email(email)
        self._check_credentials(email, password)
        if len(password) < MIN_PASSWORD_LENGTH:
            raise AuthError(f"Password should be at least {MIN_PASSWORD_LENGTH} characters")

        salt = secrets.token_hex(16)
        user = User(uid=store.new_id(), email=email)
        try:
            with store.connect(self.db_path) as conn:
                conn.execute(
                    "INSERT INTO users (uid, email, password_hash, salt, created_at) VALUES (?, ?, ?, ?, ?)",
                    (user.uid, email, hash_password(password, salt, self.iterations), salt, store.utc_timestamp()),
                )
                conn.commit()
        except sqlite3.IntegrityError as exc:
            logger.warning("Sign-up rejected for %s: email already registered", email)
            raise AuthError("Email already in use") from exc
        except sqlite3.Error as exc:
            logger.error("Failed to create account for %s: %s", email, exc)
            raise AuthError(f"Failed to create account: {exc}") from exc

        logger.info("Created account %s", user.uid)
        self._set_user(user)
        return user

    def sign_in(self, email: str, password: str) -> User:
        email = normalize_email(email)
        self._check_credentials(email, password)
        try:
            with store.connect(self.db_path) as conn:
                row = conn.execute(
                    "SELECT uid, email, password_hash, salt FROM users WHERE email = ?", (email,)
                ).fetchone()
        except sqlite3.Error as exc:
            logger.error("Failed to sign in %s: %s", email, exc)
            raise AuthError(f"Failed to sign in: {exc}") from exc

        if row is None or not hmac.compare_digest(
            row['password_hash'], hash_password(password, row['salt'], self.iterations)
        ):
            logger.warning("Rejected sign-in for %s", email)
            raise AuthError("Invalid email or password")

        user = User(uid=row['uid'], email=row['email'])
        self._set_user(user)
        return user

    def find_user(self, email: str) -> Optional[User]:
        """Look up an account by email without signing in."""
        email = normalize_email(email)
        try:
            with store.connect(self.db_path) as conn:
                row = conn.execute("SELECT uid, email FROM users WHERE email = ?", (email,)).fetchone()
        except sqlite3.Error as exc:
            raise AuthError(f"Failed to look up account: {exc}") from exc
        return User(uid=row['uid'], email=row['email']) if row else None

    def sign_out(self) -> None:
        self._set_user(None)

    def observe_session(self, observer: SessionObserver) -> Callable[[], None]:
        """Call ``observer`` with the current user now and on every change.

        Returns a function that stops the notifications; calling it again
        does nothing.
        """
        with self._lock:
            self._observers.append(observer)
        observer(self._current_user)

        def unsubscribe() -> None:
            with self._lock:
                if observer in self._observers:
                    self._observers.remove(observer)

        return unsubscribe

    def _check_credentials(self, email: str, password: Optional[str]) -> None:
        if not email or not password:
            raise AuthError("Email and password are required")
        if not _EMAIL_PATTERN.match(email):
            raise AuthError("Please enter a valid email address")

    def _set_user(self, user: Optional[User]) -> None:
        with self._lock:
            changed = user != self._current_user
            self._current_user = user
            observers = list(self._observers)
        if not changed:
            return
        for observer in observers:
            observer(user)
