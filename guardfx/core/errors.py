"""Exception base for GuardFX."""

from __future__ import annotations


class GuardError(Exception):
    """Base exception for every error GuardFX surfaces to the user."""
