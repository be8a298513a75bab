"""
Command-line entry point for the yorihime trainer.

There is a single interactive run mode: take over the terminal, let the
user pick a running game and a cheat, and write the typed value into the
game's memory.
"""

from __future__ import annotations

import argparse
import logging
import sys
import threading

from pydantic import ValidationError

from .app import AppState
from .config import DEFAULT_CONFIG_PATH, AppConfig
from .debug.trace import setup_logging
from .input.events import CursesKeySource, Events, KeySource
from .memory.process import ProcessMemory
from .runtime.loop import run_app
from .ui.screen import Screen, terminal_session

log = logging.getLogger(__name__)


def get_arg_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="yorihime",
        description="Terminal trainer for Touhou Project games",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log at DEBUG level",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=str(DEFAULT_CONFIG_PATH),
        help="Path to settings file (default: yorihime.toml, optional)",
    )
    return parser


def make_key_source(config: AppConfig, window, lock: threading.Lock | None = None) -> KeySource:
    """
    Build the key source selected by ``events.backend``.

    ``lock`` guards the curses window shared with the renderer.
    """
    if config.events.backend == "global":
        from .input.pynput_source import PynputKeySource

        source = PynputKeySource()
        source.start()
        return source
    return CursesKeySource(window, lock)


def run(config: AppConfig) -> None:
    """Run the interactive session until Quit."""
    database = config.load_database()
    log.info("Loaded %d games from the address database", len(database))
    state = AppState(database, ProcessMemory())

    with terminal_session() as stdscr:
        lock = threading.Lock()
        screen = Screen(stdscr, lock=lock)
        with Events(make_key_source(config, stdscr, lock), tick_rate=config.tick_rate) as events:
            run_app(screen, state, events)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = get_arg_parser()
    args = parser.parse_args(argv)

    try:
        config = AppConfig.load(args.config)
    except (OSError, ValueError, ValidationError) as exc:
        print(f"Invalid config {args.config}: {exc}")
        return 1

    level = logging.DEBUG if args.verbose else getattr(logging, config.logging.level)
    setup_logging(level, config.logging.file or None)
    log.info("Starting with config %s", config.model_dump())

    try:
        run(config)
    except Exception as exc:
        log.exception("Session ended with an error")
        print(repr(exc))
    return 0


if __name__ == "__main__":
    sys.exit(main())
