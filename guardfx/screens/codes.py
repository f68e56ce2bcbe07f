"""Codes Screen for GuardFX - one live code card per account."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Center, Horizontal, Vertical, VerticalScroll
from textual.screen import Screen
from textual.timer import Timer
from textual.widgets import ProgressBar, Static

from guardfx.core.client import CodeClient
from guardfx.core.collection import CollectionChange
from guardfx.core.models import AccountSecret, RotationState
from guardfx.core.rotation import COPIED_INDICATOR_SECONDS, RotationTimer
from guardfx.screens.modals import AddAccountModal
from guardfx.utils.clipboard import ClipboardError

if TYPE_CHECKING:
    from guardfx.app import GuardFXApp


CODE_PLACEHOLDER = "• • • • •"


# ═══════════════════════════════════════════════════════════════════════════════
# HELPER FUNCTIONS
# ═══════════════════════════════════════════════════════════════════════════════


def format_code(code: str) -> str:
    """Space out a code for reading, or show the placeholder."""
    return " ".join(code) if code else CODE_PLACEHOLDER


def progress_level(percent: float) -> str:
    """Map remaining progress to the bar's colour class.

    Args:
        percent: Remaining share of the period, 0-100.

    Returns:
        '-high' above 50%, '-mid' above 25%, '-low' otherwise.
    """
    if percent > 50:
        return "-high"
    if percent > 25:
        return "-mid"
    return "-low"


# ═══════════════════════════════════════════════════════════════════════════════
# CODE CARD
# ═══════════════════════════════════════════════════════════════════════════════


class AuthCodeCard(Vertical):
    """Live code for one account. Owns the account's RotationTimer."""

    can_focus = True

    BINDINGS = [
        Binding("enter", "copy", "Copy"),
        Binding("c", "copy", "Copy"),
    ]

    LEVELS = ("-high", "-mid", "-low")

    def __init__(self, account: AccountSecret, client: CodeClient, clear_after: int) -> None:
        super().__init__(id=f"card-{account.key}", classes="code-card")
        self.account = account
        self._clear_after = clear_after
        self._copied_timer: Timer | None = None
        self.timer = RotationTimer(client, account.shared_secret, on_change=self._render_state)

    def compose(self) -> ComposeResult:
        """Create the card layout."""
        yield Static(escape(self.account.name), classes="card-name")
        yield Static("", classes="card-error error")
        with Center(classes="card-code-box"):
            yield Static(CODE_PLACEHOLDER, classes="card-code")
            yield Static("COPIED!", classes="card-copied")
        with Horizontal(classes="card-countdown-row"):
            yield Static("[dim]Time remaining[/]", classes="card-countdown-label")
            yield Static("", classes="card-countdown")
        yield ProgressBar(
            total=100, show_eta=False, show_percentage=False, classes="card-progress"
        )

    def on_mount(self) -> None:
        """Show the initial state and start rotating."""
        self.query_one(".card-copied", Static).display = False
        self._render_state(self.timer.state)
        self.timer.start()

    def on_unmount(self) -> None:
        """Tear the timer down with the card."""
        self.timer.stop()

    def on_click(self) -> None:
        """Copy on click."""
        self.action_copy()

    def _render_state(self, state: RotationState) -> None:
        """Reflect a rotation snapshot in the card widgets."""
        error = self.query_one(".card-error", Static)
        if state.error:
            error.update(f"Error: {escape(state.error)}")
            error.display = True
        else:
            error.display = False

        self.query_one(".card-code", Static).update(format_code(state.code))
        self.query_one(".card-countdown", Static).update(f"{state.seconds_remaining}s")

        bar = self.query_one(".card-progress", ProgressBar)
        bar.update(progress=state.progress_percent)
        level = progress_level(state.progress_percent)
        for name in self.LEVELS:
            bar.set_class(name == level, name)

    def action_copy(self) -> None:
        """Copy the current code and flash the copied marker."""
        try:
            self.timer.copy_code(clear_after=self._clear_after)
        except ClipboardError as e:
            error = self.query_one(".card-error", Static)
            error.update(f"Error: {escape(str(e))}")
            error.display = True
            self.notify(str(e), title=self.account.name, severity="error")
            return

        self.query_one(".card-copied", Static).display = True
        if self._copied_timer is not None:
            self._copied_timer.stop()
        self._copied_timer = self.set_timer(COPIED_INDICATOR_SECONDS, self._hide_copied)

    def _hide_copied(self) -> None:
        self._copied_timer = None
        self.query_one(".card-copied", Static).display = False


# ═══════════════════════════════════════════════════════════════════════════════
# MAIN CODES SCREEN
# ═══════════════════════════════════════════════════════════════════════════════


class CodesScreen(Screen):
    """Primary view: every account's rotating code."""

    BINDINGS = [
        Binding("a", "add", "Add"),
        Binding("m", "app.manage", "Manage"),
    ]

    def compose(self) -> ComposeResult:
        """Create the codes screen layout."""
        with Horizontal(id="app-header"):
            yield Static(
                "[dim #64748b]HOME[/] [#475569]›[/] [bold #00d4ff]CODES[/]",
                id="header-branding",
            )
            yield Static("░░ STEAM GUARD ░░", id="header-status")

        yield VerticalScroll(id="codes-list")

        with Center(id="empty-state"):
            yield Static(
                "[bold]No Steam Accounts Added[/]\n\n"
                "[dim #94a3b8]Add your first Steam account with \\[A]\n"
                "or manage accounts with \\[M].[/]",
                id="empty-state-text",
            )

        with Horizontal(id="app-footer"):
            yield Static(" CODES ", id="footer-version")
            yield Static(
                " \\[ENTER] Copy  \\[A] Add  \\[M] Manage  \\[Q] Quit",
                id="footer-keys-static",
            )

    async def on_mount(self) -> None:
        """Load the accounts and mount a card for each."""
        app: GuardFXApp = self.app  # type: ignore
        app.collection.subscribe(self._on_collection_change)

        accounts = await app.collection.list()

        # Nothing to show yet: go straight to the add flow
        if not accounts:
            self.action_add()

    def on_unmount(self) -> None:
        """Stop following the collection."""
        app: GuardFXApp = self.app  # type: ignore
        app.collection.unsubscribe(self._on_collection_change)

    def _on_collection_change(self, change: CollectionChange) -> None:
        self._sync_cards(change.accounts)

    def _sync_cards(self, accounts: tuple[AccountSecret, ...]) -> None:
        """Mount cards for new accounts and remove cards for deleted ones.

        Cards of surviving accounts stay mounted so their timers keep
        running undisturbed.
        """
        app: GuardFXApp = self.app  # type: ignore
        container = self.query_one("#codes-list", VerticalScroll)
        wanted = {a.key for a in accounts}

        existing: dict[str, AuthCodeCard] = {}
        for card in container.query(AuthCodeCard):
            if card.account.key in wanted:
                existing[card.account.key] = card
            else:
                card.remove()

        for account in accounts:
            if account.key not in existing:
                container.mount(
                    AuthCodeCard(
                        account,
                        app.client,
                        clear_after=app.app_config.clipboard_clear_seconds,
                    )
                )

        has_accounts = bool(accounts)
        container.display = has_accounts
        self.query_one("#empty-state", Center).display = not has_accounts

    def action_add(self) -> None:
        """Open the add-account modal."""
        self.app.push_screen(AddAccountModal())
