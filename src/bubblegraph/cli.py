"""Command-line interface for BubbleGraph."""

import argparse
import sys

import uvicorn

from bubblegraph.auth.session import credential_hash
from bubblegraph.logging_config import configure_logging


def _serve(parsed: argparse.Namespace) -> int:
    configure_logging()
    print(f"Starting BubbleGraph server at http://{parsed.host}:{parsed.port}")
    print("Press Ctrl+C to stop")

    uvicorn.run(
        "bubblegraph.server.app:app",
        host=parsed.host,
        port=parsed.port,
        reload=parsed.reload,
    )
    return 0


def _hash(parsed: argparse.Namespace) -> int:
    print(credential_hash(parsed.username, parsed.password))
    return 0


def main(args: list[str] | None = None) -> int:
    """Run a BubbleGraph command.

    Args:
        args: Command-line arguments. If None, uses sys.argv[1:].

    Returns:
        Exit code (0 for success).
    """
    parser = argparse.ArgumentParser(
        prog="bubblegraph",
        description="BubbleGraph - interactive force-directed layouts",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )
    subparsers = parser.add_subparsers(dest="command")

    serve = subparsers.add_parser("serve", help="Run the layout server")
    serve.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)",
    )
    serve.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to bind to (default: 8000)",
    )
    serve.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )
    serve.set_defaults(handler=_serve)

    hash_cmd = subparsers.add_parser(
        "hash", help="Print the AUTH_CREDENTIAL_HASH value for a username and password"
    )
    hash_cmd.add_argument("username")
    hash_cmd.add_argument("password")
    hash_cmd.set_defaults(handler=_hash)

    parsed = parser.parse_args(args)
    if parsed.command is None:
        parser.print_help()
        return 2
    return parsed.handler(parsed)


if __name__ == "__main__":
    sys.exit(main())
