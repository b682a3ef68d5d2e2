"""Account registration and credential verification against a CredentialStore."""

import logging
import secrets
from functools import lru_cache
from typing import TYPE_CHECKING

from app.core.security import generate_salt, hash_password, verify_password
from app.core.store import CredentialStore
from app.models.user import UserRecord
from app.schemas.auth import LoginRequest, SignupRequest

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

USERNAME_TAKEN = "Username is already taken"
EMAIL_TAKEN = "Email is already registered"
# Same message for unknown user and wrong password.
INVALID_CREDENTIALS = "Invalid username or password"


class AccountError(Exception):
    """Base class for account errors scoped to a single request."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConflictError(AccountError):
    """Raised when the username or email is already registered."""


class AuthenticationError(AccountError):
    """Raised when login credentials do not match a stored account."""

    def __init__(self) -> None:
        super().__init__(INVALID_CREDENTIALS)


def _ensure_available(store: CredentialStore, body: SignupRequest) -> None:
    if store.find_by_username(body.username) is not None:
        logger.info("Registration rejected: username taken", extra={"username": body.username})
        raise ConflictError(USERNAME_TAKEN)
    if store.find_by_email(body.email) is not None:
        logger.info("Registration rejected: email taken", extra={"username": body.username})
        raise ConflictError(EMAIL_TAKEN)


def register_user(
    store: CredentialStore, body: SignupRequest, settings: "Settings"
) -> UserRecord:
    """
    Create an account from a validated signup request.

    The uniqueness checks run once up front so a conflict costs no hashing, then
    again under store.guard() together with the insert, so two concurrent signups
    for the same username or email cannot both succeed. Hashing runs outside the
    lock. Raises ConflictError without touching the store if either is taken.
    """
    _ensure_available(store, body)

    salt = generate_salt(settings.BCRYPT_ROUNDS)
    record = UserRecord(
        username=body.username,
        email=body.email,
        role=body.role,
        password_salt=salt,
        password_hash=hash_password(body.password, salt),
    )

    with store.guard():
        _ensure_available(store, body)
        store.insert(record)

    logger.info(
        "User registered",
        extra={"username": record.username, "role": record.role.value},
    )
    return record


@lru_cache
def _dummy_hash(rounds: int) -> str:
    """Hash checked for unknown usernames so they cost the same bcrypt work."""
    return hash_password(secrets.token_urlsafe(12), generate_salt(rounds))


def authenticate_user(
    store: CredentialStore, body: LoginRequest, settings: "Settings"
) -> UserRecord:
    """Return the stored record if the password matches; raise AuthenticationError otherwise."""
    record = store.find_by_username(body.username)
    if record is None:
        verify_password(body.password, _dummy_hash(settings.BCRYPT_ROUNDS))
        logger.info("Login failed", extra={"username": body.username})
        raise AuthenticationError()
    if not verify_password(body.password, record.password_hash):
        logger.info("Login failed", extra={"username": body.username})
        raise AuthenticationError()
    logger.info("Login succeeded", extra={"username": record.username})
    return record
