# Row state map tests.
# Validates that visibility and pending-delete flags follow their account
# across deletes and adds, and that new rows start hidden.

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from guardfx.core.backend import BackendError
from guardfx.core.collection import SecretCollection
from guardfx.core.models import AccountSecret
from guardfx.core.rows import RowStateMap


def run_async(coro):
    """Helper to run async coroutines in sync tests."""
    return asyncio.run(coro)


def make_accounts(*names: str) -> list[AccountSecret]:
    return [AccountSecret(name=n, shared_secret=f"{n}==") for n in names]


@pytest.fixture
def rows() -> RowStateMap:
    """Map loaded with four accounts A, B, C, D."""
    row_map = RowStateMap()
    row_map.on_collection_loaded(make_accounts("A", "B", "C", "D"))
    return row_map


class TestLoad:
    """Tests for the initial state."""

    @pytest.mark.unit
    def test_loaded_rows_start_hidden(self, rows: RowStateMap) -> None:
        """Every row starts hidden and not pending."""
        assert len(rows) == 4
        for i in range(4):
            state = rows.get(i)
            assert state.visible is False
            assert state.pending_delete is False

    @pytest.mark.unit
    def test_reload_resets_flags(self, rows: RowStateMap) -> None:
        """A fresh load discards previous flags."""
        rows.toggle_visibility(0)
        rows.on_collection_loaded(make_accounts("A", "B"))
        assert rows.get(0).visible is False

    @pytest.mark.unit
    @pytest.mark.parametrize("index", [-1, 4, 99])
    def test_out_of_range_raises(self, rows: RowStateMap, index: int) -> None:
        """Positions outside the list are rejected."""
        with pytest.raises(IndexError):
            rows.get(index)


class TestDeleteShift:
    """Tests for re-keying after a delete."""

    @pytest.mark.unit
    @pytest.mark.parametrize("removed", [0, 1, 2, 3])
    def test_flags_follow_their_account(self, removed: int) -> None:
        """Survivors keep their own visibility whatever position is removed."""
        accounts = make_accounts("A", "B", "C", "D")
        row_map = RowStateMap()
        row_map.on_collection_loaded(accounts)
        # Show A and C only
        row_map.toggle_visibility(0)
        row_map.toggle_visibility(2)
        expected = {"A": True, "B": False, "C": True, "D": False}

        survivors = [a for i, a in enumerate(accounts) if i != removed]
        row_map.on_deleted(removed, survivors)

        assert len(row_map) == 3
        for i, account in enumerate(survivors):
            assert row_map.get(i).visible is expected[account.name]

    @pytest.mark.unit
    def test_shown_row_after_removed_one_stays_shown(self) -> None:
        """Showing row 2 then deleting row 1 leaves the same account shown at row 1."""
        accounts = make_accounts("A", "B", "C")
        row_map = RowStateMap()
        row_map.on_collection_loaded(accounts)
        row_map.toggle_visibility(2)

        row_map.on_deleted(1, [accounts[0], accounts[2]])

        assert row_map.get(1).visible is True
        assert row_map.get(0).visible is False

    @pytest.mark.unit
    def test_pending_flag_moves_too(self, rows: RowStateMap) -> None:
        """Pending marks shift with their rows."""
        rows.set_pending_delete(3, True)
        accounts = make_accounts("A", "C", "D")

        rows.on_deleted(1, accounts)

        assert rows.get(2).pending_delete is True
        assert rows.any_pending is True


class TestAddAndToggle:
    """Tests for adds and local mutations."""

    @pytest.mark.unit
    def test_add_keeps_existing_and_appends_fresh(self) -> None:
        """Existing rows keep flags; the new trailing row is hidden."""
        accounts = make_accounts("A", "B")
        row_map = RowStateMap()
        row_map.on_collection_loaded(accounts)
        row_map.toggle_visibility(1)

        row_map.on_added([*accounts, AccountSecret(name="C", shared_secret="C==")])

        assert len(row_map) == 3
        assert row_map.get(1).visible is True
        assert row_map.get(2).visible is False

    @pytest.mark.unit
    def test_toggle_returns_new_value(self, rows: RowStateMap) -> None:
        """toggle_visibility flips and reports."""
        assert rows.toggle_visibility(1) is True
        assert rows.toggle_visibility(1) is False

    @pytest.mark.unit
    def test_pending_can_be_cleared(self, rows: RowStateMap) -> None:
        """Clearing the mark restores the row."""
        rows.set_pending_delete(0, True)
        rows.set_pending_delete(0, False)
        assert rows.any_pending is False


class TestBinding:
    """Tests for following a live collection."""

    @pytest.mark.unit
    def test_bound_map_tracks_collection(self, fake_backend: Any) -> None:
        """Changes flow from the collection into the map."""
        collection = SecretCollection(fake_backend)
        row_map = RowStateMap()
        row_map.bind(collection)

        run_async(collection.list())
        assert len(row_map) == 3

        row_map.toggle_visibility(2)
        run_async(collection.delete(0))

        assert len(row_map) == 2
        assert row_map.get(1).visible is True

        run_async(collection.add("Smurf", "c2VjcmV0NA=="))
        assert len(row_map) == 3
        assert row_map.get(2).visible is False

    @pytest.mark.unit
    def test_failed_delete_leaves_map(self, fake_backend: Any) -> None:
        """A refused delete does not shift anything."""
        collection = SecretCollection(fake_backend)
        row_map = RowStateMap()
        row_map.bind(collection)
        run_async(collection.list())
        row_map.toggle_visibility(0)
        fake_backend.fail_delete = OSError("locked")

        with pytest.raises(BackendError):
            run_async(collection.delete(0))

        assert len(row_map) == 3
        assert row_map.get(0).visible is True
