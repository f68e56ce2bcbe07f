"""Secret collection manager - the single source of truth for accounts."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from guardfx.core.backend import Backend, BackendError
from guardfx.core.errors import GuardError
from guardfx.core.models import AccountSecret

logger = logging.getLogger(__name__)


class ValidationError(GuardError):
    """Raised for input rejected before it reaches the backend."""


@dataclass(frozen=True)
class CollectionChange:
    """Notification sent to subscribers after the list changes.

    Attributes:
        kind: 'loaded', 'added' or 'deleted'.
        accounts: The new canonical list.
        index: Removed position for 'deleted', otherwise None.
    """

    kind: str
    accounts: tuple[AccountSecret, ...]
    index: int | None = None


Subscriber = Callable[[CollectionChange], None]


class SecretCollection:
    """Mediates list/add/delete through the backend.

    The last successful backend answer is kept as a read-only snapshot.
    Each account gets a local key that is carried forward across adds and
    deletes, so derived UI state can follow the account rather than its
    position. Callers serialize add/delete; there is no internal locking.
    """

    def __init__(self, backend: Backend) -> None:
        self._backend = backend
        self._accounts: tuple[AccountSecret, ...] = ()
        self._subscribers: list[Subscriber] = []
        self._busy = False

    @property
    def accounts(self) -> tuple[AccountSecret, ...]:
        """Last-known canonical list."""
        return self._accounts

    @property
    def busy(self) -> bool:
        """Whether an add or delete is awaiting the backend."""
        return self._busy

    def __len__(self) -> int:
        return len(self._accounts)

    def subscribe(self, callback: Subscriber) -> None:
        """Register a callback for every successful change."""
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        """Remove a previously registered callback."""
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    # --- Operations ---

    async def list(self) -> list[AccountSecret]:
        """Load the accounts from the backend.

        A backend failure degrades to an empty list instead of raising.
        """
        try:
            records = await self._backend.list_secrets()
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Failed to load secrets: %s", e)
            records = []

        self._adopt(records, keys=[])
        self._publish(CollectionChange("loaded", self._accounts))
        return list(self._accounts)

    async def add(self, name: str, shared_secret: str) -> list[AccountSecret]:
        """Add an account and return the new canonical list.

        The values are forwarded as entered; the backend cleans the secret.

        Raises:
            ValidationError: If name or secret is blank. No backend call is made.
            BackendError: If the backend rejects the secret. The last-known
                list is left unchanged.
        """
        if not name.strip():
            raise ValidationError("Name is required")
        if not shared_secret.strip():
            raise ValidationError("Secret is required")

        return await self._commit(self._apply_add, name, shared_secret)

    async def delete(self, index: int) -> list[AccountSecret]:
        """Delete the account at a position and return the new canonical list.

        Raises:
            BackendError: If the backend refuses, including for an index it
                does not know. The last-known list is left unchanged.
        """
        return await self._commit(self._apply_delete, index)

    # --- Internals ---

    async def _commit(self, apply: Callable[..., Any], *args: Any) -> list[AccountSecret]:
        """Run a mutation in its own task and wait for it.

        Cancelling the caller does not cancel the round trip: once the
        backend answers, its list is adopted even if nobody is waiting.
        """
        self._busy = True
        task = asyncio.ensure_future(apply(*args))
        task.add_done_callback(_retrieve_result)
        await asyncio.shield(task)
        return list(self._accounts)

    async def _apply_add(self, name: str, shared_secret: str) -> None:
        records = await self._call(self._backend.add_secret, name, shared_secret)

        self._adopt(records, keys=[a.key for a in self._accounts])
        logger.info("Added account %r (%d total)", name.strip(), len(self._accounts))
        self._publish(CollectionChange("added", self._accounts))

    async def _apply_delete(self, index: int) -> None:
        records = await self._call(self._backend.delete_secret, index)

        survivors = [a.key for i, a in enumerate(self._accounts) if i != index]
        self._adopt(records, keys=survivors)
        logger.info("Deleted account at position %d (%d left)", index, len(self._accounts))
        self._publish(CollectionChange("deleted", self._accounts, index=index))

    async def _call(self, command: Callable[..., Any], *args: Any) -> list[dict[str, Any]]:
        """Run a mutating backend command, normalizing failures."""
        try:
            return await command(*args)
        except BackendError:
            raise
        except Exception as e:  # pylint: disable=broad-exception-caught
            raise BackendError(str(e) or "Backend command failed") from e
        finally:
            self._busy = False

    def _adopt(self, records: Sequence[dict[str, Any]], keys: Sequence[str]) -> None:
        """Replace the snapshot, reusing keys position by position."""
        self._accounts = tuple(
            AccountSecret.from_dict(record, key=keys[i] if i < len(keys) else None)
            for i, record in enumerate(records)
        )

    def _publish(self, change: CollectionChange) -> None:
        for callback in list(self._subscribers):
            callback(change)


def _retrieve_result(task: asyncio.Future[Any]) -> None:
    """Consume the outcome so an abandoned failure is not reported as unhandled."""
    if not task.cancelled():
        exc = task.exception()
        if exc is not None:
            logger.debug("Mutation finished with %s", exc)
