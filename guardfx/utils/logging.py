"""Logging setup for GuardFX.

Records go to the Textual devtools console (``textual console``) and to a
rotating file in the GuardFX home directory. Secrets and codes are never
passed to a logger.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from textual.logging import TextualHandler

LOG_FILE_NAME = "guardfx.log"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

_HANDLER_ATTR = "_is_guardfx_handler"


def configure_logging(home_dir: Path, level: str = "INFO") -> logging.Logger:
    """Attach GuardFX handlers to the package logger once.

    Args:
        home_dir: Directory for the log file.
        level: Logging level name; unknown names fall back to INFO.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger("guardfx")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if any(getattr(h, _HANDLER_ATTR, False) for h in logger.handlers):
        return logger

    textual_handler = TextualHandler()
    setattr(textual_handler, _HANDLER_ATTR, True)
    logger.addHandler(textual_handler)

    try:
        home_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            home_dir / LOG_FILE_NAME,
            maxBytes=256 * 1024,
            backupCount=2,
            encoding="utf-8",
        )
    except OSError as e:
        logger.warning("File logging disabled: %s", e)
    else:
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        setattr(file_handler, _HANDLER_ATTR, True)
        logger.addHandler(file_handler)

    # Keep records out of the terminal the TUI is drawing on
    logger.propagate = False
    return logger
