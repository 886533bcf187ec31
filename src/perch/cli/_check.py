"""``perch check`` — route table validation command.

Compiles the app's route table and middleware pipeline without serving.
Exits with code 1 and the configuration error when the table is invalid.
"""

import argparse
import sys

from perch.cli._resolve import load_app
from perch.errors import ConfigurationError


def run_check(args: argparse.Namespace) -> None:
    """Validate the route table of a perch app."""
    app = load_app(args.app)
    try:
        app.check()
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    entries = app.router.entries
    print(f"OK: {len(entries)} routes compiled.")
