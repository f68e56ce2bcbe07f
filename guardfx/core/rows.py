"""Row UI state map - visibility and pending-delete flags per account row."""

from __future__ import annotations

from typing import Sequence

from guardfx.core.collection import CollectionChange, SecretCollection
from guardfx.core.models import AccountSecret, RowState


class RowStateMap:
    """Per-row flags addressed by position, stored by account key.

    After a delete every surviving account keeps the flags it had, even
    though its position shifted. The map only reacts to collection
    changes; it never mutates the collection.
    """

    def __init__(self) -> None:
        self._order: list[str] = []
        self._states: dict[str, RowState] = {}

    def __len__(self) -> int:
        return len(self._order)

    def bind(self, collection: SecretCollection) -> None:
        """Follow every change published by a collection."""
        collection.subscribe(self.apply)

    def apply(self, change: CollectionChange) -> None:
        """Dispatch a collection notification."""
        if change.kind == "loaded":
            self.on_collection_loaded(change.accounts)
        elif change.kind == "added":
            self.on_added(change.accounts)
        elif change.kind == "deleted" and change.index is not None:
            self.on_deleted(change.index, change.accounts)

    # --- Collection events ---

    def on_collection_loaded(self, accounts: Sequence[AccountSecret]) -> None:
        """Reset every row to hidden and not pending."""
        self._order = [a.key for a in accounts]
        self._states = {key: RowState() for key in self._order}

    def on_added(self, accounts: Sequence[AccountSecret]) -> None:
        """Keep existing rows where they are; new trailing rows start fresh."""
        self._rekey(self._order, accounts)

    def on_deleted(self, removed_index: int, accounts: Sequence[AccountSecret]) -> None:
        """Drop the removed row and shift the later ones down by one."""
        survivors = [k for i, k in enumerate(self._order) if i != removed_index]
        self._rekey(survivors, accounts)

    def _rekey(self, old_keys: list[str], accounts: Sequence[AccountSecret]) -> None:
        """Pair old keys with the new list by position and move their state."""
        states: dict[str, RowState] = {}
        for i, account in enumerate(accounts):
            if i < len(old_keys):
                states[account.key] = self._states.get(old_keys[i], RowState())
            else:
                states[account.key] = RowState()
        self._order = [a.key for a in accounts]
        self._states = states

    # --- Local mutations ---

    def get(self, index: int) -> RowState:
        """Return the flags for a row.

        Raises:
            IndexError: If no row exists at index.
        """
        return self._states[self._key_at(index)]

    def toggle_visibility(self, index: int) -> bool:
        """Flip the secret visibility of a row and return the new value."""
        state = self.get(index)
        state.visible = not state.visible
        return state.visible

    def set_pending_delete(self, index: int, pending: bool) -> None:
        """Mark or unmark a row as waiting for its delete to finish."""
        self.get(index).pending_delete = pending

    @property
    def any_pending(self) -> bool:
        """Whether any row has a delete in flight."""
        return any(s.pending_delete for s in self._states.values())

    def _key_at(self, index: int) -> str:
        if not 0 <= index < len(self._order):
            raise IndexError(f"No row at position {index}")
        return self._order[index]
