"""Modal screens shared by the codes and manage views."""
# pylint: disable=duplicate-code

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, Static

from guardfx.core.errors import GuardError

if TYPE_CHECKING:
    from guardfx.app import GuardFXApp


class AddAccountModal(ModalScreen[bool]):
    """Modal for adding a new account.

    The add runs inside the modal so a rejected secret keeps the form open
    with the backend's message. Dismisses with True once the account is
    stored.
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._submitting = False

    def compose(self) -> ComposeResult:
        """Create the modal layout."""
        with Vertical(id="account-modal", classes="secure-terminal"):
            yield Static(":: NEW_ACCOUNT // STEAM GUARD ::", id="modal-title")

            with Vertical(id="account-form"):
                yield Static("", id="add-error", classes="error")

                yield Label("ACCOUNT_NAME", classes="input-label")
                yield Input(placeholder="e.g. Main Account", id="name-input")

                yield Label("SHARED_SECRET", classes="input-label")
                yield Input(placeholder="Enter your shared secret", id="secret-input")
                yield Static(
                    "[dim]The base64-encoded shared secret from your Steam account.[/]",
                    classes="input-hint",
                )

            with Horizontal(id="modal-buttons"):
                yield Button("\\[ESC] CANCEL", id="cancel-button")
                yield Button("\\[ENTER] ADD ACCOUNT", variant="primary", id="save-button")

    def on_mount(self) -> None:
        """Focus first input."""
        self.query_one("#add-error", Static).display = False
        self.query_one("#name-input", Input).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button press."""
        if event.button.id == "cancel-button":
            self.action_cancel()
        elif event.button.id == "save-button":
            self.run_worker(self._save(), exclusive=True)

    def on_input_submitted(self, _event: Input.Submitted) -> None:
        """Submit the form from either input."""
        self.run_worker(self._save(), exclusive=True)

    async def _save(self) -> None:
        """Add the account through the collection."""
        if self._submitting:
            return

        app: GuardFXApp = self.app  # type: ignore
        name = self.query_one("#name-input", Input).value
        secret = self.query_one("#secret-input", Input).value

        self._set_submitting(True)
        try:
            await app.collection.add(name, secret)
        except GuardError as e:
            self._show_error(str(e))
            return
        finally:
            self._set_submitting(False)

        self.notify(f"Added '{name.strip()}'", title="Success")
        self.dismiss(True)

    def _set_submitting(self, submitting: bool) -> None:
        """Disable the form while a request is in flight."""
        self._submitting = submitting
        for widget in self.query("Input, Button"):
            widget.disabled = submitting
        save = self.query_one("#save-button", Button)
        save.label = "ADDING..." if submitting else "\\[ENTER] ADD ACCOUNT"

    def _show_error(self, message: str) -> None:
        error = self.query_one("#add-error", Static)
        error.update(f"Error: {escape(message)}")
        error.display = True

    def action_cancel(self) -> None:
        """Cancel the modal."""
        if not self._submitting:
            self.dismiss(False)


class ConfirmDeleteModal(ModalScreen[bool]):
    """Modal for confirming deletion."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
        Binding("y", "confirm", "Yes"),
        Binding("n", "cancel", "No"),
    ]

    def __init__(self, item_name: str) -> None:
        super().__init__()
        self.item_name = item_name

    def compose(self) -> ComposeResult:
        """Create the modal layout."""
        with Vertical(id="account-modal", classes="secure-terminal"):
            yield Static(":: DELETE_ACCOUNT // WARNING ::", id="modal-title")

            with Vertical(id="account-form"):
                yield Static(f"TARGET: '{escape(self.item_name)}'", classes="delete-target")
                yield Static("⚠ THIS ACTION CANNOT BE UNDONE", classes="warning")

            with Horizontal(id="modal-buttons"):
                yield Button("\\[ESC] CANCEL", id="cancel-button")
                yield Button("\\[Y] DELETE", variant="error", id="delete-button")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button press."""
        if event.button.id == "cancel-button":
            self.dismiss(False)
        elif event.button.id == "delete-button":
            self.dismiss(True)

    def action_cancel(self) -> None:
        """Cancel deletion."""
        self.dismiss(False)

    def action_confirm(self) -> None:
        """Confirm deletion."""
        self.dismiss(True)
