from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from ._logging import setup_colored_logging
from .constants import DEFAULT_LANGUAGE, HIGHLIGHT_SENTINELS, NO_HIGHLIGHT

logger = logging.getLogger(__name__)

_DESCRIPTION = """\
eldoc-lsp: Language Server Protocol implementation of echo-area documentation for C-family code

Shows the declaration of the symbol or call under the cursor with:
• Result types and argument lists of functions, variables and macros
• The argument at the cursor highlighted inside the enclosing call
• Brief descriptions taken from doc comments
• Cached answers that survive edits elsewhere in the buffer"""

_ANSI_BOLD = ("\033[1m", "\033[0m")

_SUFFIX_LANGUAGES = {
    ".c": "c",
    ".h": "c++",
    ".m": "objective-c",
    ".mm": "objective-c++",
}


def main():
    """Main entry point for the language server."""
    parser = argparse.ArgumentParser(
        description=_DESCRIPTION,
        prog="eldoc-lsp",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging level (default: %(default)s)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Server subcommand
    server_parser = subparsers.add_parser(
        "server",
        help="Start the LSP server",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    server_parser.add_argument("--tcp", action="store_true", help="Use TCP instead of stdio")
    server_parser.add_argument(
        "--port", type=int, default=8080, help="TCP port to listen on (default: %(default)s)"
    )
    server_parser.add_argument("--stdio", action="store_true", help="Use stdio (default)")

    # Describe subcommand
    describe_parser = subparsers.add_parser(
        "describe",
        help="Print the documentation for a position in a file",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    describe_parser.add_argument("file", type=str, help="Source file to read")
    describe_parser.add_argument(
        "position", type=str, help="One-based LINE:COLUMN of the cursor (e.g. 12:8)"
    )
    describe_parser.add_argument(
        "--call", action="store_true", help="Describe the enclosing call, not the symbol"
    )
    describe_parser.add_argument(
        "--unicode", action="store_true", help="Render operators with unicode symbols"
    )
    describe_parser.add_argument(
        "--keep-underscores", action="store_true", help="Keep leading underscores of names"
    )

    args = parser.parse_args()

    # Require explicit subcommand
    if args.command is None:
        parser.error(
            "A subcommand is required. Use 'eldoc-lsp server' to start the LSP server.\n"
            "See 'eldoc-lsp --help' for available commands."
        )

    # Configure colored logging
    log_level = getattr(logging, args.log_level)
    setup_colored_logging(level=log_level)

    if args.command == "describe":
        position = _parse_position(parser, args.position)
        _run_describe(args, *position)

    elif args.command == "server":
        # Check for mutually exclusive options
        if args.tcp and args.stdio:
            parser.error("--tcp and --stdio are mutually exclusive")

        # Import server only when actually needed
        from ._server import create_server

        server = create_server()

        if args.tcp:
            logger.info(f"Starting eldoc LSP server ({__version__}) on TCP port {args.port}")
            server.start_tcp("localhost", args.port)
        else:
            logger.info(f"Starting eldoc LSP server ({__version__}) on stdio")
            server.start_io()


def _parse_position(parser: argparse.ArgumentParser, value: str) -> tuple[int, int]:
    """Parse a one-based ``LINE:COLUMN`` pair into zero-based numbers."""
    line, sep, column = value.partition(":")
    if not sep or not line.isdigit() or not column.isdigit():
        parser.error(f"Invalid position {value!r}, expected LINE:COLUMN")
    if int(line) < 1 or int(column) < 1:
        parser.error(f"Invalid position {value!r}, LINE and COLUMN start at 1")
    return int(line) - 1, int(column) - 1


def guess_language(path: Path) -> str:
    """Guess the buffer language from a file suffix."""
    return _SUFFIX_LANGUAGES.get(path.suffix.lower(), DEFAULT_LANGUAGE)


def _run_describe(args: argparse.Namespace, line: int, column: int) -> None:
    """Run describe command on the provided file position."""
    from ._server.utils import position_to_offset
    from .eldoc import DocumentEldoc
    from .formatting import swap_highlight
    from .settings import EldocSettings

    path = Path(args.file)
    try:
        content = path.read_text()
    except OSError as e:
        print(f"Error reading {path}: {e}", file=sys.stderr)
        sys.exit(1)

    offset = position_to_offset(content, line, column, utf16=False)
    if offset is None:
        print(f"Error: Line {line + 1} is past the end of {path}", file=sys.stderr)
        sys.exit(1)

    settings = EldocSettings.from_environment()
    if args.unicode:
        settings.use_unicode = True
    if args.keep_underscores:
        settings.strip_underscores = False

    document = DocumentEldoc(content, language=guess_language(path), settings=settings)
    markers = HIGHLIGHT_SENTINELS if sys.stdout.isatty() else NO_HIGHLIGHT
    result = document.describe(offset, force_call=args.call, markers=markers)
    if result is None:
        print(f"No documentation at {path}:{line + 1}:{column + 1}", file=sys.stderr)
        sys.exit(1)

    print(swap_highlight(result.text, _ANSI_BOLD))


if __name__ == "__main__":
    main()
