"""Stored user account record."""

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    """Account classification; carries no authorization behavior."""

    USER = "user"
    ADMIN = "admin"


@dataclass(frozen=True)
class UserRecord:
    """
    One registered account, keyed by username in the credential store.

    Holds the salt and salted hash only; the plain password is never kept.
    """

    username: str
    email: str
    role: Role
    password_salt: str
    password_hash: str

    def __post_init__(self) -> None:
        if not self.password_salt or not self.password_hash:
            raise ValueError("UserRecord requires a non-empty salt and hash")
