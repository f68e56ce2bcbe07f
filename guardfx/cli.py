"""Main CLI entry point for GuardFX.

Entry point with signal handling for graceful shutdown and cleanup.
"""

from __future__ import annotations

import argparse
import logging
import os
import signal
import sys
from types import FrameType

import setproctitle

from guardfx import __version__
from guardfx.core.config import (
    HOME_ENV_VAR,
    SETTINGS_FILE_NAME,
    Config,
    get_config,
    get_home_dir,
    save_config,
)
from guardfx.utils.clipboard import emergency_cleanup
from guardfx.utils.logging import configure_logging

# Terminal title - shown in terminal tab/window
TERMINAL_TITLE = "◀ GUARDFX ▶ Steam Guard codes. Offline."

logger = logging.getLogger("guardfx.cli")


def set_terminal_title(title: str) -> None:
    """Set the terminal window/tab title using ANSI escape sequence."""
    sys.stdout.write(f"\033]0;{title}\007")
    sys.stdout.flush()


def _signal_handler(signum: int, _frame: FrameType | None) -> None:
    """Handle termination signals with cleanup.

    Ensures a copied code does not outlive the process on SIGINT/SIGTERM.
    """
    emergency_cleanup()

    # SIGINT (Ctrl-C) = 130, SIGTERM = 143
    sys.exit(128 + signum)


def _setup_signal_handlers() -> None:
    """Register signal handlers for graceful shutdown."""
    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)


def _write_default_settings(config: Config) -> None:
    """On first run, write the settings file so it can be edited."""
    path = get_home_dir() / SETTINGS_FILE_NAME
    if path.exists():
        return
    try:
        save_config(config, path)
    except OSError as e:
        logger.warning("Could not write default settings to %s: %s", path, e)


def build_parser() -> argparse.ArgumentParser:
    """Create the command line parser."""
    parser = argparse.ArgumentParser(
        prog="guardfx",
        description="Rotating Steam Guard codes in your terminal.",
    )
    parser.add_argument(
        "--config-dir",
        metavar="PATH",
        help=f"directory for secrets, settings and logs (default: ~/.guardfx, env {HOME_ENV_VAR})",
    )
    parser.add_argument("--debug", action="store_true", help="log at DEBUG level")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for GuardFX.

    Returns:
        Exit code (0 for success).
    """
    args = build_parser().parse_args(argv)
    if args.config_dir:
        os.environ[HOME_ENV_VAR] = os.path.expanduser(args.config_dir)

    config = get_config()
    configure_logging(get_home_dir(), "DEBUG" if args.debug else config.log_level)
    _write_default_settings(config)

    # Set process title (removes "Python" from terminal tab)
    setproctitle.setproctitle("GuardFX")
    set_terminal_title(TERMINAL_TITLE)

    # Register signal handlers before app starts
    _setup_signal_handlers()

    # Imported late so --help and --version stay fast
    from guardfx.app import GuardFXApp  # pylint: disable=import-outside-toplevel

    logger.info("Starting GuardFX %s (home %s)", __version__, get_home_dir())
    app = GuardFXApp(app_config=config)
    try:
        app.run()
    finally:
        # Ensure cleanup on any exit path
        emergency_cleanup()

    return 0


if __name__ == "__main__":
    sys.exit(main())
