"""In-memory credential store and the dependency that provides it."""

import threading
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from typing import Protocol

from app.models.user import UserRecord


class DuplicateUserError(Exception):
    """Raised when inserting a username that is already stored."""

    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(f"User '{username}' already exists")


class CredentialStore(Protocol):
    """Lookup/insert contract the account service depends on."""

    def find_by_username(self, username: str) -> UserRecord | None: ...

    def find_by_email(self, email: str) -> UserRecord | None: ...

    def insert(self, record: UserRecord) -> None: ...

    def count(self) -> int: ...

    def guard(self) -> AbstractContextManager[None]: ...


class InMemoryCredentialStore:
    """
    Username-keyed dict of UserRecord; lives as long as the process.

    All access goes through a re-entrant lock so that a caller holding guard()
    can still call the lookups and insert.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._users: dict[str, UserRecord] = {}

    @contextmanager
    def guard(self) -> Iterator[None]:
        """Hold the store lock for a check-then-insert sequence."""
        with self._lock:
            yield

    def find_by_username(self, username: str) -> UserRecord | None:
        with self._lock:
            return self._users.get(username)

    def find_by_email(self, email: str) -> UserRecord | None:
        with self._lock:
            for record in self._users.values():
                if record.email == email:
                    return record
            return None

    def insert(self, record: UserRecord) -> None:
        with self._lock:
            if record.username in self._users:
                raise DuplicateUserError(record.username)
            self._users[record.username] = record

    def count(self) -> int:
        with self._lock:
            return len(self._users)


_store = InMemoryCredentialStore()


def get_store() -> CredentialStore:
    """Dependency that returns the process-wide credential store."""
    return _store
