"""Backend command boundary for GuardFX.

Everything behind this boundary (code algorithm, secret storage and the
system clock) is reached through five coroutines. The UI side only ever
talks to a Backend; LocalBackend is the implementation that ships.
"""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from pathlib import Path
from typing import Any, Protocol

from guardfx.core import steam
from guardfx.core.config import get_home_dir
from guardfx.core.errors import GuardError
from guardfx.utils.io import atomic_write_text

logger = logging.getLogger(__name__)

SECRETS_FILE_NAME = "config.json"


class BackendError(GuardError):
    """Raised when the backend rejects a command."""


class Backend(Protocol):
    """The five commands the presentation layer may issue."""

    async def get_current_time(self) -> int:
        """Return the backend's Unix time in seconds."""

    async def generate_code(self, secret: str, time: int | None = None) -> str:
        """Return the code for a secret at a time (default: now)."""

    async def list_secrets(self) -> list[dict[str, Any]]:
        """Return the stored secrets in canonical order."""

    async def add_secret(self, name: str, secret: str) -> list[dict[str, Any]]:
        """Append a secret and return the new canonical list."""

    async def delete_secret(self, index: int) -> list[dict[str, Any]]:
        """Remove the secret at a position and return the new canonical list."""


class LocalBackend:
    """Backend that computes codes in-process and stores secrets as JSON.

    The file holds ``{"secrets": [{"name": ..., "shared_secret": ...}]}``.
    Blocking work runs in a worker thread so the event loop keeps ticking.

    Attributes:
        path: Path to the secrets file.
    """

    def __init__(self, path: Path | None = None) -> None:
        """Initialize the backend.

        Args:
            path: Secrets file. Defaults to ~/.guardfx/config.json.
        """
        self.path = path or get_home_dir() / SECRETS_FILE_NAME
        self._secrets: list[dict[str, Any]] | None = None
        self._lock = threading.Lock()

    # --- Commands ---

    async def get_current_time(self) -> int:
        return steam.current_time()

    async def generate_code(self, secret: str, time: int | None = None) -> str:
        return await asyncio.to_thread(self._generate_code, secret, time)

    async def list_secrets(self) -> list[dict[str, Any]]:
        return await asyncio.to_thread(self._list_secrets)

    async def add_secret(self, name: str, secret: str) -> list[dict[str, Any]]:
        return await asyncio.to_thread(self._add_secret, name, secret)

    async def delete_secret(self, index: int) -> list[dict[str, Any]]:
        return await asyncio.to_thread(self._delete_secret, index)

    # --- Blocking implementations ---

    @staticmethod
    def _generate_code(secret: str, time: int | None) -> str:
        try:
            return steam.generate_code(secret, time)
        except steam.SecretDecodeError as e:
            raise BackendError(str(e)) from e

    def _list_secrets(self) -> list[dict[str, Any]]:
        with self._lock:
            return [dict(s) for s in self._load()]

    def _add_secret(self, name: str, secret: str) -> list[dict[str, Any]]:
        # Validate the secret by generating a code with it
        try:
            steam.generate_code(secret)
        except steam.SecretDecodeError as e:
            raise BackendError(f"Invalid shared secret: {e}") from e

        with self._lock:
            secrets = [*self._load(), {"name": name, "shared_secret": secret}]
            self._save(secrets)
            logger.info("Stored account %r (%d total)", name, len(secrets))
            return [dict(s) for s in secrets]

    def _delete_secret(self, index: int) -> list[dict[str, Any]]:
        with self._lock:
            secrets = list(self._load())
            if not 0 <= index < len(secrets):
                raise BackendError(f"No account at position {index}")
            removed = secrets.pop(index)
            self._save(secrets)
            logger.info("Removed account %r (%d left)", removed["name"], len(secrets))
            return [dict(s) for s in secrets]

    # --- Storage ---

    def _load(self) -> list[dict[str, Any]]:
        """Return the cached secrets, reading the file on first use.

        A missing or unparsable file loads as an empty list.
        """
        if self._secrets is not None:
            return self._secrets

        secrets: list[dict[str, Any]] = []
        if self.path.exists():
            try:
                data = json.loads(self.path.read_text(encoding="utf-8"))
                secrets = [
                    {"name": str(s["name"]), "shared_secret": str(s["shared_secret"])}
                    for s in data.get("secrets", [])
                ]
            except (OSError, json.JSONDecodeError, AttributeError, KeyError, TypeError) as e:
                logger.warning("Could not read %s, starting empty: %s", self.path, e)
                secrets = []

        self._secrets = secrets
        return secrets

    def _save(self, secrets: list[dict[str, Any]]) -> None:
        """Write the secrets file atomically, then adopt it as the cache."""
        try:
            atomic_write_text(self.path, json.dumps({"secrets": secrets}, indent=2))
        except OSError as e:
            raise BackendError(f"Failed to save secrets: {e}") from e
        self._secrets = secrets
