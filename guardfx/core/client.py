"""Code generation client - time and code round trips to the backend."""

from __future__ import annotations

import logging

from guardfx.core.backend import Backend
from guardfx.core.errors import GuardError

logger = logging.getLogger(__name__)


class CodeClientError(GuardError):
    """Base exception for code client failures."""


class TimeSourceError(CodeClientError):
    """Raised when the backend time source cannot be reached."""


class CodeGenerationError(CodeClientError):
    """Raised when the backend refuses to generate a code."""


class CodeClient:
    """Fetches server time and codes. Every call is a fresh round trip."""

    def __init__(self, backend: Backend) -> None:
        self._backend = backend
        self._pending = 0

    @property
    def pending(self) -> int:
        """Number of requests awaiting a backend response."""
        return self._pending

    async def fetch_server_time(self) -> int:
        """Return the backend time in epoch seconds.

        Raises:
            TimeSourceError: If the backend cannot answer.
        """
        self._pending += 1
        try:
            return int(await self._backend.get_current_time())
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.warning("Time source unavailable: %s", e)
            raise TimeSourceError(str(e) or "Time source unavailable") from e
        finally:
            self._pending -= 1

    async def generate_code(self, secret: str, time: int | None = None) -> str:
        """Return the code for a secret, anchored to backend time by default.

        Raises:
            CodeGenerationError: If the backend rejects the secret.
        """
        self._pending += 1
        try:
            return await self._backend.generate_code(secret, time)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.warning("Code generation failed: %s", e)
            raise CodeGenerationError(str(e) or "Failed to generate code") from e
        finally:
            self._pending -= 1
