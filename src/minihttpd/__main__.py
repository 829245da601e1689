"""
=============================================================================
COMMAND LINE ENTRY POINT
=============================================================================

    python -m minihttpd                       # serve files from the cwd
    python -m minihttpd --directory /tmp/data # serve files from /tmp/data
    minihttpd --directory /tmp/data           # same, via the console script

Listens on 127.0.0.1:4221 until interrupted (Ctrl+C or SIGTERM).

=============================================================================
"""

import argparse
import os
import sys
from typing import List, Optional

from .config import ServerConfig
from .server import HTTPServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="minihttpd",
        description="Minimal HTTP/1.1 server on raw sockets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m minihttpd                        # Files from the current directory
  python -m minihttpd --directory /tmp/data  # Files from /tmp/data
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # FILE ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--directory",
        default=os.getcwd(),
        help="Base directory for /files/<name> (default: current directory)"
    )

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse and check command-line arguments.

    A --directory that does not exist is a usage error: argparse prints the
    message and exits with status 2.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if not os.path.isdir(args.directory):
        parser.error(f"--directory {args.directory!r} is not an existing directory")

    return args


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    args = parse_args(argv)

    # =========================================================================
    # CREATE CONFIGURATION AND SERVER
    # =========================================================================
    config = ServerConfig(directory=args.directory)
    server = HTTPServer(config)

    # =========================================================================
    # RUN SERVER (blocks until SIGINT/SIGTERM)
    # =========================================================================
    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


# This allows running: python -m minihttpd
if __name__ == "__main__":
    main()
