"""GuardFX - Main Textual Application."""

from __future__ import annotations

from textual.app import App
from textual.binding import Binding

from guardfx.core.backend import Backend, LocalBackend
from guardfx.core.client import CodeClient
from guardfx.core.collection import SecretCollection
from guardfx.core.config import Config, get_config
from guardfx.core.rows import RowStateMap
from guardfx.screens.codes import CodesScreen
from guardfx.screens.manage import ManageScreen
from guardfx.utils.clipboard import clear_clipboard


class GuardFXApp(App):
    """GuardFX - rotating Steam Guard codes for every account."""

    CSS_PATH = "styles/guardfx.tcss"
    TITLE = "◀ GUARDFX ▶ Steam Guard codes. Offline."

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit", priority=True),
        Binding("q", "quit", "Quit", show=True),
        Binding("m", "manage", "Manage", show=True),
        Binding("escape", "back", "Back", show=True),
    ]

    SCREENS = {"codes": CodesScreen}

    def __init__(self, backend: Backend | None = None, app_config: Config | None = None) -> None:
        super().__init__()
        self.app_config = app_config or get_config()
        self.backend = backend or LocalBackend()
        self.client = CodeClient(self.backend)
        self.collection = SecretCollection(self.backend)
        self.rows = RowStateMap()
        self.rows.bind(self.collection)

    def on_mount(self) -> None:
        """Called when app is mounted."""
        self.push_screen("codes")

    async def action_back(self) -> None:
        """Go back to previous screen (but not from the codes screen)."""
        if isinstance(self.screen, CodesScreen):
            return

        if len(self.screen_stack) > 1:
            self.pop_screen()

    async def action_manage(self) -> None:
        """Open the account management screen."""
        if isinstance(self.screen, ManageScreen):
            return
        self.push_screen(ManageScreen())

    async def action_quit(self) -> None:
        """Quit the application."""
        clear_clipboard()
        self.exit()
