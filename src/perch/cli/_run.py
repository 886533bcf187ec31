"""``perch run`` — serve an app with pounce."""

import argparse
import sys

from perch.cli._resolve import load_app
from perch.errors import ConfigurationError


def run_server(args: argparse.Namespace) -> None:
    """Start the server for ``args.app``.

    CLI flags override the app's configured host and port.
    """
    app = load_app(args.app)
    try:
        app.run(args.host, args.port, app_path=args.app)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
