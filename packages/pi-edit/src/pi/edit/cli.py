"""CLI entry point for pi-edit."""

from __future__ import annotations

import argparse
import logging
import os
import sys

from pi.edit.session import HELP_MESSAGE, EditorSession
from pi.edit.settings import load_settings
from pi.edit.terminal import ProcessTerminal, Terminal, TerminalError

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="pi-edit",
        description="Minimal terminal text editor",
    )
    parser.add_argument("file", nargs="?", help="File to open")
    parser.add_argument("--tab-stop", type=int, help="Tab stop width (default: 8)")
    parser.add_argument(
        "--log-file",
        default=os.environ.get("PI_EDIT_LOG") or None,
        help="Write debug logs to this file (or set PI_EDIT_LOG)",
    )
    parser.add_argument(
        "--log-level", default="info", choices=["debug", "info", "warning", "error"]
    )
    return parser.parse_args(argv)


def _setup_logging(args: argparse.Namespace) -> None:
    # The screen belongs to the editor; logs only ever go to a file.
    if not args.log_file:
        return
    logging.basicConfig(
        filename=args.log_file,
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def run(args: argparse.Namespace, terminal: Terminal) -> int:
    """Run the editor on *terminal* and return the process exit status."""
    settings = load_settings()
    if args.tab_stop is not None and args.tab_stop > 0:
        settings.tab_stop = args.tab_stop

    try:
        terminal.start()
        try:
            session = EditorSession(terminal, settings=settings)
            if args.file:
                try:
                    session.open(args.file)
                except FileNotFoundError:
                    logger.info("%s does not exist yet, starting empty", args.file)
            session.set_status_message(HELP_MESSAGE)
            session.run()
        finally:
            terminal.stop()
    except TerminalError as e:
        logger.error("Fatal terminal error: %s", e)
        _clear_screen(terminal)
        print(e, file=sys.stderr)
        return 1
    except OSError as e:
        logger.error("Cannot open %s: %s", args.file, e)
        _clear_screen(terminal)
        print(f"{args.file}: {e.strerror or e}", file=sys.stderr)
        return 1
    return 0


def _clear_screen(terminal: Terminal) -> None:
    try:
        terminal.clear_screen()
    except TerminalError:
        logger.debug("Could not clear the screen", exc_info=True)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    _setup_logging(args)
    sys.exit(run(args, ProcessTerminal()))


if __name__ == "__main__":
    main()
