"""Route targets, entries and matches.

``RouteTarget`` is a tagged union over the two shapes a route table value
can take: one chain for every verb (``Chain``) or a chain per verb
(``ByVerb``). ``compile_target`` turns a raw table value into one of them
and validates the chains it contains.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from perch.errors import ConfigurationError
from perch.routing.pattern import PathPattern
from perch.routing.steps import MiddlewareStep, Step, TerminalStep


@dataclass(frozen=True, slots=True)
class Chain:
    """An ordered, validated sequence of steps ending in a terminal step."""

    steps: tuple[Step, ...]

    def chain_for(self, method: str) -> Chain:
        return self

    @property
    def methods(self) -> frozenset[str]:
        return frozenset({"*"})


@dataclass(frozen=True, slots=True)
class ByVerb:
    """A chain per HTTP verb. Verbs are stored upper-cased."""

    chains: Mapping[str, Chain]

    def chain_for(self, method: str) -> Chain | None:
        chain = self.chains.get(method)
        if chain is None and method == "HEAD":
            return self.chains.get("GET")
        return chain

    @property
    def methods(self) -> frozenset[str]:
        return frozenset(self.chains)


type RouteTarget = Chain | ByVerb


@dataclass(frozen=True, slots=True)
class RouteEntry:
    """One compiled line of the route table."""

    pattern: PathPattern
    target: RouteTarget


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of matching a request: the entry, its chain and the captures."""

    entry: RouteEntry
    chain: Chain
    path_params: dict[str, str]


# -- Compilation --


def _flatten(value: Any, pattern: str) -> list[Step]:
    steps: list[Step] = []
    for item in value:
        if isinstance(item, MiddlewareStep | TerminalStep):
            steps.append(item)
        elif isinstance(item, Sequence) and not isinstance(item, str | bytes):
            steps.extend(_flatten(item, pattern))
        else:
            msg = (
                f"Route {pattern!r}: {item!r} is not a chain step. Wrap functions "
                "with perch.routing.middleware() or perch.routing.terminal()."
            )
            raise ConfigurationError(msg)
    return steps


def compile_chain(value: Any, pattern: str) -> Chain:
    """Validate a step or list of steps and freeze it into a ``Chain``.

    Nested lists are flattened, so ``[gate.logout, *authenticated_render(...)]``
    and ``[extra, authenticated_render(...)]`` both compose.
    """
    if isinstance(value, MiddlewareStep | TerminalStep):
        steps = [value]
    elif isinstance(value, Sequence) and not isinstance(value, str | bytes):
        steps = _flatten(value, pattern)
    else:
        return compile_chain([value], pattern)

    if not steps:
        msg = f"Route {pattern!r} has an empty handler chain."
        raise ConfigurationError(msg)
    if not isinstance(steps[-1], TerminalStep):
        msg = (
            f"Route {pattern!r} chain ends with {steps[-1].name!r}, which may "
            "proceed past the end of the chain. The last step must be terminal."
        )
        raise ConfigurationError(msg)
    for step in steps[:-1]:
        if isinstance(step, TerminalStep):
            msg = (
                f"Route {pattern!r}: terminal step {step.name!r} is followed by "
                "more steps that could never run."
            )
            raise ConfigurationError(msg)
    return Chain(tuple(steps))


def compile_target(value: Any, pattern: str) -> RouteTarget:
    """Turn a route table value into a ``Chain`` or a ``ByVerb``."""
    if isinstance(value, Mapping):
        if not value:
            msg = f"Route {pattern!r} has an empty verb map."
            raise ConfigurationError(msg)
        chains: dict[str, Chain] = {}
        for verb, chain_value in value.items():
            key = str(verb).upper()
            if key in chains:
                msg = f"Route {pattern!r} declares verb {key} twice."
                raise ConfigurationError(msg)
            chains[key] = compile_chain(chain_value, f"{pattern} [{key}]")
        return ByVerb(chains)
    return compile_chain(value, pattern)
