"""Chain steps — the two kinds of function a route chain is made of.

A chain is an ordered list of steps. Each step is one of:

``MiddlewareStep``
    ``func(request, next)`` — may answer (ending the chain) or hand off
    with ``await next(request)``.

``TerminalStep``
    ``func(request)`` — always answers; it is never given ``next``.

Wrapping plain functions makes the short-circuit rule structural: a
terminal step has no way to continue, and the compiler rejects chains
that do not end in one. Both kinds may be ``def`` or ``async def``::

    @middleware
    async def require_admin(request: Request, next: StepNext) -> Response:
        if not get_user().is_admin:
            return Redirect("/")
        return await next(request)

    @terminal
    def about(request: Request) -> Template:
        return Template("about")
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from perch.http.request import Request
from perch.http.response import Response

# What a step function may hand back: Response, Redirect, Template or str
type StepResult = Any

# The continuation given to a middleware step
type StepNext = Callable[[Request], Awaitable[Response]]

type MiddlewareFunc = Callable[[Request, StepNext], StepResult]
type TerminalFunc = Callable[[Request], StepResult]


@dataclass(frozen=True, slots=True)
class MiddlewareStep:
    """A step that may end the chain or proceed to the next step."""

    func: MiddlewareFunc
    name: str

    def __repr__(self) -> str:
        return f"MiddlewareStep({self.name})"


@dataclass(frozen=True, slots=True)
class TerminalStep:
    """A step that always produces the response."""

    func: TerminalFunc
    name: str

    def __repr__(self) -> str:
        return f"TerminalStep({self.name})"


type Step = MiddlewareStep | TerminalStep


def _name_of(func: Callable[..., Any]) -> str:
    return getattr(func, "__name__", None) or repr(func)


def middleware(func: MiddlewareFunc, *, name: str | None = None) -> MiddlewareStep:
    """Wrap ``func(request, next)`` as a middleware step."""
    return MiddlewareStep(func=func, name=name or _name_of(func))


def terminal(func: TerminalFunc, *, name: str | None = None) -> TerminalStep:
    """Wrap ``func(request)`` as a terminal step."""
    return TerminalStep(func=func, name=name or _name_of(func))
