"""Perch exception hierarchy.

Shared across the router, the auth gate, the app and the ASGI handler so
every module raises and catches the same types.

Authentication failures (unknown username, wrong password) are deliberately
absent: they are ``AuthResult`` values, not exceptions.
"""

from dataclasses import dataclass


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when app configuration is invalid.

    Typically raised while compiling the route table in ``App._freeze()``,
    so a bad table stops the app at startup rather than per request.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(PerchError):
    """An error that maps directly to an HTTP status code.

    Raised by steps or middleware. The ASGI handler catches these and
    dispatches to the matching ``@app.error()`` handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — raised by a step that cannot find what the path names."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class UserNotFound(PerchError, LookupError):  # noqa: N818
    """No user has the requested id.

    Raised by ``CredentialStore.find_by_id``. The principal middleware
    catches it and treats the request as anonymous.
    """

    def __init__(self, user_id: object) -> None:
        super().__init__(f"User {user_id} does not exist")
        self.user_id = user_id


class ChainExhausted(PerchError):  # noqa: N818
    """A handler chain finished without any step producing a response.

    This is a programming defect in a step (returned ``None``), never a
    client error. The ASGI handler logs it and answers with a 500.
    """

    def __init__(self, pattern: str, step_name: str) -> None:
        super().__init__(
            f"Chain for route {pattern!r} produced no response "
            f"(step {step_name!r} returned None)"
        )
        self.pattern = pattern
        self.step_name = step_name
