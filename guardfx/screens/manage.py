"""Manage Screen for GuardFX - list, reveal, add and delete accounts."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Center, Horizontal, Vertical
from textual.screen import Screen
from textual.widgets import DataTable, Static

from guardfx import __version__
from guardfx.core.backend import BackendError
from guardfx.core.collection import CollectionChange
from guardfx.core.models import AccountSecret, RowState
from guardfx.screens.modals import AddAccountModal, ConfirmDeleteModal

if TYPE_CHECKING:
    from guardfx.app import GuardFXApp


EMPTY_STATE_TEXT = (
    '[dim #94a3b8]No accounts added yet. Press \\[A] "Add Account" to get started.[/]'
)


def render_secret(account: AccountSecret, row: RowState, mask: bool = True) -> str:
    """Return the secret column text for a row."""
    if row.visible or not mask:
        return account.shared_secret
    return account.masked_secret


def render_status(row: RowState) -> str:
    """Return the status column text for a row."""
    if row.pending_delete:
        return "[#f59e0b]DELETING…[/]"
    if row.visible:
        return "[#00d4ff]SHOWN[/]"
    return "[dim]HIDDEN[/]"


class ManageScreen(Screen):
    """Screen for managing accounts."""

    BINDINGS = [
        Binding("a", "add", "Add"),
        Binding("v", "toggle_visibility", "Show/Hide"),
        Binding("d", "delete", "Delete"),
        Binding("escape", "back", "Back"),
    ]

    def compose(self) -> ComposeResult:
        """Create the manage screen layout."""
        with Horizontal(id="app-header"):
            yield Static(
                "[dim #64748b]HOME[/] [#475569]›[/] [bold #00d4ff]MANAGE[/]",
                id="header-branding",
            )
            yield Static("░░ STEAM ACCOUNTS ░░", id="header-status")

        with Vertical(id="manage-body"):
            yield Static(" ≡ MANAGE STEAM ACCOUNTS ", classes="pane-header-block")
            yield DataTable(id="accounts-table", cursor_type="row")
            with Center(id="empty-state"):
                yield Static(EMPTY_STATE_TEXT, id="empty-state-text")
            yield Static("", id="manage-error", classes="error")
            yield Static(" └── SYSTEM_READY", classes="pane-footer", id="grid-footer")

            yield Static(
                "[bold]About[/]\n"
                "[dim #94a3b8]GuardFX is a terminal authenticator for Steam accounts.\n"
                f"Version {__version__}[/]",
                id="about-box",
                classes="box",
            )

        with Horizontal(id="app-footer"):
            yield Static(" MANAGE ", id="footer-version")
            yield Static(
                " \\[A] Add  \\[V] Show/Hide  \\[D] Delete  \\[ESC] Back",
                id="footer-keys-static",
            )

    def on_mount(self) -> None:
        """Render the current snapshot and follow later changes."""
        app: GuardFXApp = self.app  # type: ignore
        app.collection.subscribe(self._on_collection_change)
        self.query_one("#manage-error", Static).display = False
        self._refresh_table()
        self.query_one("#accounts-table", DataTable).focus()

    def on_unmount(self) -> None:
        """Stop following the collection."""
        app: GuardFXApp = self.app  # type: ignore
        app.collection.unsubscribe(self._on_collection_change)

    def _on_collection_change(self, _change: CollectionChange) -> None:
        self._refresh_table()

    def _refresh_table(self) -> None:
        """Rebuild the table from the collection snapshot and row flags."""
        app: GuardFXApp = self.app  # type: ignore
        table = self.query_one("#accounts-table", DataTable)
        empty_state = self.query_one("#empty-state", Center)
        cursor = table.cursor_row

        table.clear(columns=True)
        table.add_column("Name", width=24)
        table.add_column("Shared Secret", width=32)
        table.add_column("Status", width=12)

        accounts = app.collection.accounts
        table.display = bool(accounts)
        empty_state.display = not accounts

        mask = app.app_config.mask_secrets
        for index, account in enumerate(accounts):
            row = app.rows.get(index)
            table.add_row(
                escape(account.name),
                f"[#94a3b8]{escape(render_secret(account, row, mask))}[/]",
                render_status(row),
                key=account.key,
            )

        if accounts:
            table.move_cursor(row=min(cursor, len(accounts) - 1))

        footer = self.query_one("#grid-footer", Static)
        footer.update(f" └── [{len(accounts)}] ACCOUNTS LOADED")

    def _selected_index(self) -> int | None:
        """Position of the highlighted account, if any."""
        app: GuardFXApp = self.app  # type: ignore
        table = self.query_one("#accounts-table", DataTable)
        if 0 <= table.cursor_row < len(app.collection.accounts):
            return table.cursor_row
        return None

    def _show_error(self, message: str | None) -> None:
        error = self.query_one("#manage-error", Static)
        if message:
            error.update(f"Error: {escape(message)}")
            error.display = True
        else:
            error.display = False

    # --- Actions ---

    def action_add(self) -> None:
        """Open the add-account modal."""
        app: GuardFXApp = self.app  # type: ignore
        if app.collection.busy:
            self.notify("Another change is still running", severity="warning")
            return
        self.app.push_screen(AddAccountModal())

    def action_toggle_visibility(self) -> None:
        """Reveal or hide the highlighted secret."""
        index = self._selected_index()
        if index is None:
            self.notify("No account selected", severity="warning")
            return

        app: GuardFXApp = self.app  # type: ignore
        app.rows.toggle_visibility(index)
        self._refresh_table()

    def action_delete(self) -> None:
        """Delete the highlighted account after confirmation."""
        app: GuardFXApp = self.app  # type: ignore
        index = self._selected_index()
        if index is None:
            self.notify("No account selected", severity="warning")
            return
        if app.collection.busy or app.rows.any_pending:
            self.notify("Another change is still running", severity="warning")
            return

        account = app.collection.accounts[index]

        def handle_result(confirmed: bool | None) -> None:
            if confirmed:
                self.run_worker(self._delete(account.key), exclusive=True)

        self.app.push_screen(ConfirmDeleteModal(account.name), handle_result)

    async def _delete(self, key: str) -> None:
        """Delete an account, translating its key to a position at call time."""
        app: GuardFXApp = self.app  # type: ignore
        keys = [a.key for a in app.collection.accounts]
        if key not in keys:
            return
        index = keys.index(key)
        name = app.collection.accounts[index].name

        app.rows.set_pending_delete(index, True)
        self._show_error(None)
        self._refresh_table()

        try:
            await app.collection.delete(index)
        except BackendError as e:
            app.rows.set_pending_delete(index, False)
            self._refresh_table()
            self._show_error(str(e))
            self.notify(str(e), title="Delete failed", severity="error")
            return

        self.notify(f"Deleted '{name}'", title="Deleted")

    def action_back(self) -> None:
        """Go back to the codes screen once no change is in flight."""
        app: GuardFXApp = self.app  # type: ignore
        if app.collection.busy or app.rows.any_pending:
            self.notify("Wait for the change to finish", severity="warning")
            return
        self.app.pop_screen()
