"""
=============================================================================
COMMAND LINE INTERFACE
=============================================================================

    python -m tinyhttpd [--directory PATH] [--host HOST] [--port PORT]
                        [--log-level LEVEL]

With no arguments the server listens on 0.0.0.0:4221 and serves /files/
from the working directory. The process exits with status 1 only when the
port cannot be bound; otherwise it runs until interrupted.

=============================================================================
"""

import argparse
import logging
import sys

from . import __version__
from .config import LOG_LEVELS, ServerConfig
from .server import HTTPServer


logger = logging.getLogger("tinyhttpd")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tinyhttpd",
        description="Minimal HTTP/1.1 server with echo, user-agent and file routes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m tinyhttpd                          # 0.0.0.0:4221
  python -m tinyhttpd --directory /tmp/files   # serve and store /files/ here
  python -m tinyhttpd --port 8080 -l DEBUG
        """,
    )

    parser.add_argument(
        "--directory",
        default="",
        help="Directory for /files/ reads and writes (default: working directory)",
    )

    parser.add_argument(
        "--host", "-H",
        default="0.0.0.0",
        help="Host to bind to (default: 0.0.0.0)",
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=4221,
        help="Port to listen on (default: 4221)",
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=LOG_LEVELS,
        default="INFO",
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"tinyhttpd {__version__}",
    )

    return parser


def main(argv=None) -> int:
    """
    Main CLI entry point.

    Returns:
        Process exit status.
    """
    args = build_parser().parse_args(argv)

    config = ServerConfig(
        host=args.host,
        port=args.port,
        directory=args.directory,
        log_level=args.log_level,
    )

    try:
        server = HTTPServer(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    try:
        server.run()
    except OSError as e:
        logger.error(f"Failed to bind to port {config.port}: {e}")
        return 1

    return 0


# This allows running: python -m tinyhttpd
if __name__ == "__main__":
    sys.exit(main())
