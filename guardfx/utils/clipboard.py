"""Clipboard utilities for GuardFX.

Provides clipboard operations with auto-clear functionality.
"""

from __future__ import annotations

import logging
import threading

import pyperclip

from guardfx.core.errors import GuardError

logger = logging.getLogger(__name__)

# Track active clipboard timers
_active_timer: threading.Timer | None = None
_clipboard_lock = threading.Lock()

# Default clear timeout in seconds
DEFAULT_CLEAR_TIMEOUT = 30


class ClipboardError(GuardError):
    """Raised when something cannot be copied to the clipboard."""


def copy_to_clipboard(
    text: str,
    auto_clear: bool = True,
    clear_after: int = DEFAULT_CLEAR_TIMEOUT,
) -> bool:
    """Copy text to clipboard with optional auto-clear.

    Args:
        text: Text to copy to clipboard.
        auto_clear: Whether to automatically clear after timeout.
        clear_after: Seconds before auto-clearing (default 30).

    Returns:
        True if successful, False otherwise.
    """
    global _active_timer  # pylint: disable=global-statement

    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        logger.warning("Clipboard unavailable: %s", e)
        return False

    if auto_clear and clear_after > 0:
        with _clipboard_lock:
            # Cancel any existing timer
            if _active_timer is not None:
                _active_timer.cancel()

            _active_timer = threading.Timer(clear_after, clear_clipboard)
            _active_timer.daemon = True
            _active_timer.start()

    return True


def clear_clipboard() -> bool:
    """Clear the clipboard contents.

    Returns:
        True if successful, False otherwise.
    """
    cancel_auto_clear()

    try:
        pyperclip.copy("")
        return True
    except pyperclip.PyperclipException:
        return False


def cancel_auto_clear() -> None:
    """Cancel any pending auto-clear timer."""
    global _active_timer  # pylint: disable=global-statement

    with _clipboard_lock:
        if _active_timer is not None:
            _active_timer.cancel()
            _active_timer = None


def emergency_cleanup() -> None:
    """Clear the clipboard if a copy is still waiting to be wiped.

    Called on shutdown paths; never raises.
    """
    with _clipboard_lock:
        pending = _active_timer is not None

    if pending:
        clear_clipboard()
