"""Routing — declarative route tables compiled into ordered matchers.

A route table maps URL patterns to handler chains::

    ROUTES = {
        "/": authenticated_render(gate, "home"),
        "/login/": {
            "get": [gate.redirect_if_authenticated, render("login")],
            "post": [gate.login, redirect_to("/")],
        },
        "*": redirect_to("/error/404/"),
    }

The table is compiled once when the app freezes. Matching walks the
entries in declaration order; the ``"*"`` entry is always tried last.
"""

from perch.routing.pattern import PathPattern, compile_pattern
from perch.routing.route import ByVerb, Chain, RouteEntry, RouteMatch, RouteTarget
from perch.routing.router import Router, compile_routes
from perch.routing.steps import MiddlewareStep, Step, StepNext, TerminalStep, middleware, terminal

__all__ = [
    "ByVerb",
    "Chain",
    "MiddlewareStep",
    "PathPattern",
    "RouteEntry",
    "RouteMatch",
    "RouteTarget",
    "Router",
    "Step",
    "StepNext",
    "TerminalStep",
    "compile_pattern",
    "compile_routes",
    "middleware",
    "terminal",
]
