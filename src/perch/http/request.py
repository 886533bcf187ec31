"""Immutable HTTP request.

Frozen metadata with async body access. Path parameters are attached by
the router once a route entry matches, via ``with_path_params()``.
"""

import json as json_module
from collections.abc import AsyncGenerator, Mapping
from dataclasses import dataclass, field, replace
from typing import Any
from urllib.parse import parse_qsl

from perch._internal.asgi import Receive, Scope
from perch.errors import HTTPError
from perch.http.cookies import parse_cookies
from perch.http.headers import Headers

_FORM_TYPES = ("application/x-www-form-urlencoded", "")


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata (method, path, headers, etc.) is frozen at creation.
    Body is accessed asynchronously via ``.body()``, ``.form()``, ``.json()``.
    """

    method: str
    path: str
    headers: Headers
    query: Mapping[str, str]
    query_string: str
    cookies: Mapping[str, str]
    path_params: Mapping[str, str] = field(default_factory=dict)
    client: tuple[str, int] | None = None

    # Private: ASGI receive callable for body streaming
    _receive: Receive | None = field(default=None, repr=False, compare=False)

    # Private: body/form cache shared by every copy made with with_path_params()
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def content_type(self) -> str:
        """The media type of the body, without parameters."""
        value = self.headers.get("content-type", "")
        return value.split(";", 1)[0].strip().lower()

    @property
    def url(self) -> str:
        """Path plus query string, as the client sent it."""
        if self.query_string:
            return f"{self.path}?{self.query_string}"
        return self.path

    def with_path_params(self, path_params: Mapping[str, str]) -> Request:
        """Return a copy carrying the values captured by the matched route."""
        return replace(self, path_params=dict(path_params))

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body. Cached after the first read."""
        if "_body" not in self._cache:
            self._cache["_body"] = b"".join([chunk async for chunk in self.stream()])
        return self._cache["_body"]

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        if self._receive is None:
            return
        while True:
            message = await self._receive()
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def form(self) -> dict[str, str]:
        """Parse a url-encoded body into a dict (first value wins).

        Raises ``HTTPError(415)`` for any other content type.
        """
        if "_form" in self._cache:
            return self._cache["_form"]
        if self.content_type not in _FORM_TYPES:
            raise HTTPError(415, f"Expected a form body, got {self.content_type!r}")
        data: dict[str, str] = {}
        raw = await self.body()
        for key, value in parse_qsl(raw.decode("utf-8"), keep_blank_values=True):
            data.setdefault(key, value)
        self._cache["_form"] = data
        return data

    async def json(self) -> Any:
        """Parse the body as JSON. Malformed JSON is a 400."""
        raw = await self.body()
        try:
            return json_module.loads(raw or b"null")
        except ValueError as exc:
            raise HTTPError(400, f"Malformed JSON body: {exc}") from exc

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        headers = Headers(tuple(scope.get("headers", ())))
        query_string = scope.get("query_string", b"").decode("latin-1")
        client = scope.get("client")
        return cls(
            method=scope["method"].upper(),
            path=scope["path"],
            headers=headers,
            query=dict(parse_qsl(query_string, keep_blank_values=True)),
            query_string=query_string,
            cookies=parse_cookies("; ".join(headers.get_list("cookie"))),
            client=tuple(client) if client else None,
            _receive=receive,
        )
