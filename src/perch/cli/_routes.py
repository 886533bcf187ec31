"""``perch routes`` — list compiled routes in match order.

Prints one row per entry: the pattern, the verbs it answers and the
step names of its chain (one row per verb for verb maps).
"""

import argparse
import sys

from perch.cli._resolve import load_app
from perch.errors import ConfigurationError
from perch.routing.route import ByVerb, Chain


def _describe(chain: Chain) -> str:
    return " -> ".join(step.name for step in chain.steps)


def run_routes(args: argparse.Namespace) -> None:
    """List routes for a perch app, ``"*"`` last."""
    app = load_app(args.app)
    try:
        router = app.router
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    # Build rows: (pattern, methods_str, steps)
    rows: list[tuple[str, str, str]] = []
    for entry in router.entries:
        target = entry.target
        if isinstance(target, ByVerb):
            for verb, chain in target.chains.items():
                rows.append((entry.pattern.source, verb, _describe(chain)))
        else:
            rows.append((entry.pattern.source, "*", _describe(target)))

    max_path = max(max(len(r[0]) for r in rows), 7)  # "PATTERN" header
    max_methods = max(max(len(r[1]) for r in rows), 6)  # "METHOD" header

    fmt = f"{{:<{max_path}}}  {{:<{max_methods}}}  {{}}"
    print(fmt.format("PATTERN", "METHOD", "STEPS"))
    sep_len = max_path + max_methods + 4 + max(len(r[2]) for r in rows)
    print("-" * min(sep_len, 80))
    for pattern, methods_str, steps in rows:
        print(fmt.format(pattern, methods_str, steps))
