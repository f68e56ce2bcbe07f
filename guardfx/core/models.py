"""Data models for GuardFX accounts and per-row display state."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Length of one code validity window in seconds
PERIOD_SECONDS = 30


def _generate_key() -> str:
    """Generate a local identifier for an account row."""
    return str(uuid.uuid4())[:8]


@dataclass
class AccountSecret:
    """A named shared secret that produces rotating codes.

    Attributes:
        name: User-facing label (e.g., 'Main Account'). Not unique.
        shared_secret: Opaque credential material, validated by the backend.
        key: Local identifier that follows the account across mutations.
            Never sent to the backend.
    """

    name: str
    shared_secret: str
    key: str = field(default_factory=_generate_key, compare=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any], key: str | None = None) -> AccountSecret:
        """Create an instance from a backend record."""
        if key is None:
            return cls(name=data["name"], shared_secret=data["shared_secret"])
        return cls(name=data["name"], shared_secret=data["shared_secret"], key=key)

    @property
    def masked_secret(self) -> str:
        """Return the secret with everything hidden."""
        return "•" * min(len(self.shared_secret), 24)


class RotationPhase(Enum):
    """Lifecycle of a rotation timer."""

    IDLE = "idle"
    LOADING = "loading"
    DISPLAYING = "displaying"
    ERROR = "error"
    STOPPED = "stopped"


@dataclass(frozen=True)
class RotationState:
    """Snapshot of what one account's code card should show.

    progress_percent is derived from seconds_remaining and never stored.
    """

    code: str = ""
    seconds_remaining: int = PERIOD_SECONDS
    error: str | None = None
    phase: RotationPhase = RotationPhase.IDLE

    @property
    def progress_percent(self) -> float:
        """Share of the period still left, 0-100."""
        return self.seconds_remaining / PERIOD_SECONDS * 100


@dataclass
class RowState:
    """Transient per-row flags on the manage screen."""

    visible: bool = False
    pending_delete: bool = False
