"""
=============================================================================
COMMAND-LINE INTERFACES
=============================================================================

    minihttp-client [-p PORT] [-o FILE | -d DIR] [-l LEVEL] URL
    minihttp-server [-p PORT] [-i INDEX] [-l LEVEL] DOC_ROOT

=============================================================================
EXIT CODES
=============================================================================

    client   0  body delivered
             1  usage error, or any other failure
             2  response status line is not HTTP/1.1 <integer>
             3  server answered with a status other than 200
                (its status text is printed to stderr)

    server   0  clean shutdown (SIGINT / SIGTERM)
             1  usage error, or a fatal setup/runtime error

argparse normally exits with 2 on bad arguments. That code already means
"protocol error" for the client, so both parsers report usage problems
through UsageError and exit 1 instead.

=============================================================================
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

from . import __version__
from .client import HTTPClient
from .config import LOG_LEVELS, ClientConfig, ServerConfig, parse_port
from .errors import MalformedURL, MiniHTTPError, ServerStatusError, UsageError
from .http import resolve_url
from .server import HTTPServer


logger = logging.getLogger(__name__)


class UsageArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises UsageError instead of exiting with 2."""

    def error(self, message):
        raise UsageError(message)


def _port(value: str) -> int:
    try:
        return parse_port(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def setup_logging(level: str):
    """Configure stderr logging for the minihttp loggers."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("minihttp").setLevel(numeric_level)


def _usage_error(parser: argparse.ArgumentParser, error: Exception) -> int:
    print(f"Usage Error! {parser.format_usage().strip()}", file=sys.stderr)
    print(str(error), file=sys.stderr)
    return UsageError.exit_code


# =============================================================================
# CLIENT
# =============================================================================


def build_client_parser() -> argparse.ArgumentParser:
    parser = UsageArgumentParser(
        prog="minihttp-client",
        description="Fetch a single resource over HTTP/1.1",
    )

    parser.add_argument(
        "-p", "--port",
        type=_port,
        default=80,
        help="Port to connect to (default: 80)",
    )

    output = parser.add_mutually_exclusive_group()
    output.add_argument(
        "-o", "--output",
        metavar="FILE",
        help="Write the body to FILE",
    )
    output.add_argument(
        "-d", "--directory",
        metavar="DIR",
        help="Write the body into DIR, named after the URL (index.html for '/')",
    )

    parser.add_argument(
        "-l", "--log-level",
        choices=LOG_LEVELS,
        default=None,
        help="Logging verbosity on stderr (default: WARNING)",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"minihttp {__version__}",
    )

    parser.add_argument("url", metavar="URL", help="http:// URL to fetch")
    return parser


def client_main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for minihttp-client. Returns the process exit code."""
    parser = build_client_parser()

    try:
        args = parser.parse_args(argv)

        config = ClientConfig.from_env()
        config.port = args.port
        config.output_file = args.output
        config.output_dir = args.directory
        if args.log_level:
            config.log_level = args.log_level

        try:
            config.validate()
        except ValueError as e:
            raise UsageError(str(e)) from e

        resolve_url(args.url)
    except (UsageError, MalformedURL) as e:
        return _usage_error(parser, e)

    setup_logging(config.log_level)

    try:
        HTTPClient(config).fetch(args.url)
    except ServerStatusError as e:
        print(str(e), file=sys.stderr)
        return e.exit_code
    except MiniHTTPError as e:
        print(f"{parser.prog}: {e}", file=sys.stderr)
        return e.exit_code

    return 0


# =============================================================================
# SERVER
# =============================================================================


def build_server_parser() -> argparse.ArgumentParser:
    parser = UsageArgumentParser(
        prog="minihttp-server",
        description="Serve static files over HTTP/1.1, one connection at a time",
    )

    parser.add_argument(
        "-p", "--port",
        type=_port,
        default=None,
        help="Port to listen on (default: 8080)",
    )

    parser.add_argument(
        "-i", "--index",
        metavar="INDEX",
        default=None,
        help="File served for paths ending in '/' (default: index.html)",
    )

    parser.add_argument(
        "-l", "--log-level",
        choices=LOG_LEVELS,
        default=None,
        help="Logging verbosity on stderr (default: INFO)",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"minihttp {__version__}",
    )

    parser.add_argument("doc_root", metavar="DOC_ROOT", help="Directory to serve")
    return parser


def server_main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for minihttp-server. Returns the process exit code."""
    parser = build_server_parser()

    try:
        args = parser.parse_args(argv)

        config = ServerConfig.from_env()
        config.doc_root = args.doc_root
        if args.port is not None:
            config.port = args.port
        if args.index is not None:
            config.index_file = args.index
        if args.log_level:
            config.log_level = args.log_level

        try:
            config.validate()
        except ValueError as e:
            raise UsageError(str(e)) from e
    except UsageError as e:
        return _usage_error(parser, e)

    setup_logging(config.log_level)

    try:
        HTTPServer(config).run()
    except MiniHTTPError as e:
        logger.error(f"Fatal: {e}")
        print(f"{parser.prog}: {e}", file=sys.stderr)
        return e.exit_code

    return 0
