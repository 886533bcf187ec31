"""Credential store — user records looked up by username or id.

The two lookups are deliberately asymmetric:

* ``find_by_username`` answers "no such user" with ``None``. An unknown
  name at login is an ordinary outcome.
* ``find_by_id`` raises ``UserNotFound``. It backs session resolution,
  where a missing user must invalidate the session.

Implementations may be sync or async; perch calls them through
``invoke()``.
"""

from collections.abc import Awaitable, Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Protocol, runtime_checkable

from perch.errors import ConfigurationError, UserNotFound


@dataclass(frozen=True, slots=True)
class User:
    """A user record. ``password`` holds an argon2 hash, never plaintext."""

    id: int
    username: str
    password: str
    email: str

    @property
    def is_authenticated(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"User(id={self.id}, username={self.username!r})"


@dataclass(frozen=True, slots=True)
class AnonymousUser:
    """Sentinel for unauthenticated requests.

    Returned by ``get_user()`` when no principal is resolved, so callers
    check ``is_authenticated`` instead of testing for ``None``.
    """

    id: None = None
    username: str = ""
    email: str = ""
    is_authenticated: bool = False


ANONYMOUS = AnonymousUser()


@runtime_checkable
class CredentialStore(Protocol):
    """Anything that can look users up by username and by id."""

    def find_by_username(self, username: str) -> User | None | Awaitable[User | None]: ...

    def find_by_id(self, user_id: int) -> User | Awaitable[User]: ...


class MemoryCredentialStore:
    """Read-only in-memory credential store.

    Built once at startup and shared by reference; with no mutation after
    construction it is safe for concurrent readers.

    Usage::

        store = MemoryCredentialStore([
            User(1, "bob", hash_password("pass"), "bob@example.com"),
        ])
    """

    __slots__ = ("_by_id", "_by_username")

    def __init__(self, users: Iterable[User]) -> None:
        by_id: dict[int, User] = {}
        by_username: dict[str, User] = {}
        for user in users:
            if user.id in by_id:
                msg = f"Duplicate user id {user.id} in credential store."
                raise ConfigurationError(msg)
            if user.username in by_username:
                msg = f"Duplicate username {user.username!r} in credential store."
                raise ConfigurationError(msg)
            by_id[user.id] = user
            by_username[user.username] = user
        self._by_id: Mapping[int, User] = MappingProxyType(by_id)
        self._by_username: Mapping[str, User] = MappingProxyType(by_username)

    def __len__(self) -> int:
        return len(self._by_id)

    def find_by_username(self, username: str) -> User | None:
        """Return the user called *username*, or ``None``."""
        return self._by_username.get(username)

    def find_by_id(self, user_id: int | str) -> User:
        """Return the user with *user_id*. Raises ``UserNotFound``."""
        try:
            return self._by_id[int(user_id)]
        except (KeyError, TypeError, ValueError):
            raise UserNotFound(user_id) from None
