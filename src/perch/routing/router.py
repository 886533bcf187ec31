"""Ordered router compiled from a declarative route table.

Routes are added during setup and frozen by ``compile()``. Matching walks
the entries in declaration order and returns the first one whose pattern
matches and that has a chain for the request verb. The ``"*"`` entry is
kept apart and tried last, whatever its position in the table.
"""

import logging
from collections.abc import Mapping
from typing import Any

from perch.errors import ConfigurationError
from perch.routing.pattern import WILDCARD, compile_pattern
from perch.routing.route import ByVerb, RouteEntry, RouteMatch, compile_target

logger = logging.getLogger("perch.routing")


class Router:
    """Ordered router with a mandatory ``"*"`` fallback.

    Usage::

        router = Router()
        router.add("/", [gate.require_login, render("home")])
        router.add("*", redirect_to("/error/404/"))
        router.compile()
        match = router.match("GET", "/")
    """

    __slots__ = ("_case_sensitive", "_compiled", "_entries", "_fallback")

    def __init__(self, *, case_sensitive: bool = False) -> None:
        self._case_sensitive = case_sensitive
        self._entries: list[RouteEntry] = []
        self._fallback: RouteEntry | None = None
        self._compiled = False

    def add(self, pattern: str, value: Any) -> RouteEntry:
        """Compile and register one table entry. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        entry = RouteEntry(
            pattern=compile_pattern(pattern, case_sensitive=self._case_sensitive),
            target=compile_target(value, pattern),
        )
        if entry.pattern.is_wildcard:
            if self._fallback is not None:
                msg = "Route table declares the '*' fallback twice."
                raise ConfigurationError(msg)
            if isinstance(entry.target, ByVerb):
                msg = (
                    "The '*' fallback must be a plain chain, not a verb map, "
                    "so that every unmatched request gets a response."
                )
                raise ConfigurationError(msg)
            self._fallback = entry
        else:
            if any(e.pattern.source == pattern for e in self._entries):
                msg = f"Route table declares {pattern!r} twice."
                raise ConfigurationError(msg)
            self._entries.append(entry)
        return entry

    def compile(self) -> None:
        """Freeze the router. Fails if the table has no ``"*"`` fallback."""
        if self._fallback is None:
            msg = (
                "Route table has no '*' fallback entry. Add one, e.g. "
                "'*': redirect_to('/error/404/')."
            )
            raise ConfigurationError(msg)
        self._compiled = True

    @property
    def entries(self) -> list[RouteEntry]:
        """All entries in match order, the fallback last."""
        entries = list(self._entries)
        if self._fallback is not None:
            entries.append(self._fallback)
        return entries

    def match(self, method: str, path: str) -> RouteMatch:
        """Select the entry and chain for a request.

        Never raises for a compiled router: anything unmatched, including a
        verb map without the request verb, falls through to ``"*"``.
        """
        if not self._compiled or self._fallback is None:
            msg = "Router.match() called before compile()."
            raise RuntimeError(msg)

        method = method.upper()
        for entry in self._entries:
            params = entry.pattern.match(path)
            if params is None:
                continue
            chain = entry.target.chain_for(method)
            if chain is None:
                logger.debug(
                    "%s %s matched %r but it has no %s chain; trying later routes",
                    method,
                    path,
                    entry.pattern.source,
                    method,
                )
                continue
            return RouteMatch(entry=entry, chain=chain, path_params=params)

        fallback = self._fallback
        return RouteMatch(
            entry=fallback,
            chain=fallback.target.chain_for(method),
            path_params={},
        )


def compile_routes(table: Mapping[str, Any], *, case_sensitive: bool = False) -> Router:
    """Compile a whole route table into a frozen ``Router``."""
    router = Router(case_sensitive=case_sensitive)
    for pattern, value in table.items():
        router.add(pattern, value)
    router.compile()
    return router
