"""Route pattern compilation.

Patterns use the Express-style syntax of the route table::

    "/profile/"               literal, matched exactly
    "/users/:id/"             ":id" captures one path segment
    "/error/(:err_no)?/?"     optional group, optional trailing slash
    "*"                       wildcard, matches any path

Each pattern becomes a ``PathPattern`` holding an anchored regex. Routing
is strict: ``/profile`` and ``/profile/`` are different paths.
"""

import re
from dataclasses import dataclass

from perch.errors import ConfigurationError

WILDCARD = "*"

_PARAM_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_SEGMENT = r"[^/]+?"


@dataclass(frozen=True, slots=True)
class PathPattern:
    """A compiled route pattern.

    ``match()`` never raises: it returns the captured parameters, or
    ``None`` when the path does not match. Optional captures that were
    absent are left out of the result.
    """

    source: str
    regex: re.Pattern[str] | None
    param_names: tuple[str, ...] = ()

    @property
    def is_wildcard(self) -> bool:
        return self.regex is None

    def match(self, path: str) -> dict[str, str] | None:
        if self.regex is None:
            return {}
        found = self.regex.fullmatch(path)
        if found is None:
            return None
        return {name: value for name, value in found.groupdict().items() if value is not None}


def compile_pattern(source: str, *, case_sensitive: bool = False) -> PathPattern:
    """Compile a route pattern string into a ``PathPattern``.

    Raises ``ConfigurationError`` for malformed patterns: empty strings,
    unbalanced parentheses, a dangling ``?``, an unnamed ``:``, duplicate
    parameter names, or ``*`` used anywhere but as the whole pattern.
    """
    if source == WILDCARD:
        return PathPattern(source=source, regex=None)
    if not source.startswith("/"):
        msg = f"Route pattern {source!r} must start with '/' (or be '*')."
        raise ConfigurationError(msg)

    parts: list[str] = []
    names: list[str] = []
    depth = 0
    # True when the previous token is something "?" may quantify
    quantifiable = False
    i = 0
    while i < len(source):
        char = source[i]
        if char == ":":
            name_match = _PARAM_NAME.match(source, i + 1)
            if name_match is None:
                msg = f"Route pattern {source!r} has ':' without a parameter name at {i}."
                raise ConfigurationError(msg)
            name = name_match.group()
            if name in names:
                msg = f"Route pattern {source!r} captures {name!r} twice."
                raise ConfigurationError(msg)
            names.append(name)
            parts.append(f"(?P<{name}>{_SEGMENT})")
            i = name_match.end()
            quantifiable = True
            continue
        if char == "(":
            depth += 1
            parts.append("(?:")
            quantifiable = False
        elif char == ")":
            if depth == 0:
                msg = f"Route pattern {source!r} has an unmatched ')' at {i}."
                raise ConfigurationError(msg)
            depth -= 1
            parts.append(")")
            quantifiable = True
        elif char == "?":
            if not quantifiable:
                msg = f"Route pattern {source!r} has a '?' with nothing to make optional at {i}."
                raise ConfigurationError(msg)
            parts.append("?")
            quantifiable = False
        elif char == WILDCARD:
            msg = f"Route pattern {source!r} uses '*' inside a path; '*' must stand alone."
            raise ConfigurationError(msg)
        else:
            parts.append(re.escape(char))
            quantifiable = True
        i += 1

    if depth:
        msg = f"Route pattern {source!r} has an unclosed '('."
        raise ConfigurationError(msg)

    flags = 0 if case_sensitive else re.IGNORECASE
    return PathPattern(
        source=source,
        regex=re.compile("".join(parts), flags),
        param_names=tuple(names),
    )
