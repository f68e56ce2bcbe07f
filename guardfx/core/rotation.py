"""Per-account rotation timer.

Each account card owns one RotationTimer. It ticks once a second on the
running asyncio loop, counts down the current period and fetches a fresh
code when the period runs out. Fetches never block the tick; when two
fetches overlap only the most recently issued one may update the state.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from types import TracebackType
from typing import Callable

from guardfx.core.client import CodeClient, CodeClientError
from guardfx.core.models import PERIOD_SECONDS, RotationPhase, RotationState
from guardfx.utils.clipboard import (
    DEFAULT_CLEAR_TIMEOUT,
    ClipboardError,
    copy_to_clipboard,
)

logger = logging.getLogger(__name__)

TICK_SECONDS = 1.0

# How long the UI shows its "copied" marker
COPIED_INDICATOR_SECONDS = 2.0

StateListener = Callable[[RotationState], None]


def seconds_remaining_at(server_time: int) -> int:
    """Seconds left in the period containing server_time, in 1..30.

    A time exactly on a boundary starts a full fresh period.
    """
    return PERIOD_SECONDS - (server_time % PERIOD_SECONDS)


class RotationTimer:
    """Keeps one account's code in phase with the backend clock.

    Lifecycle: IDLE -> start() -> LOADING -> DISPLAYING, ticking down.
    At the period floor it re-enters LOADING. A failed fetch moves to
    ERROR with the code cleared; the next period boundary retries.
    stop() is final.
    """

    def __init__(
        self,
        client: CodeClient,
        shared_secret: str,
        on_change: StateListener | None = None,
        tick_interval: float = TICK_SECONDS,
    ) -> None:
        self._client = client
        self._secret = shared_secret
        self._on_change = on_change
        self._tick_interval = tick_interval

        self._state = RotationState()
        self._generation = 0
        self._ticker: asyncio.Task[None] | None = None
        self._refreshes: set[asyncio.Task[None]] = set()
        self._stopped = False

    @property
    def state(self) -> RotationState:
        """Current snapshot."""
        return self._state

    @property
    def running(self) -> bool:
        """Whether the periodic tick is active."""
        return self._ticker is not None and not self._stopped

    # --- Lifecycle ---

    def start(self) -> None:
        """Issue the first fetch and begin ticking on the running loop."""
        if self._stopped:
            raise RuntimeError("A stopped RotationTimer cannot be restarted")
        if self._ticker is not None:
            return

        self._ticker = asyncio.get_running_loop().create_task(self._run())
        self._begin_refresh()

    def stop(self) -> None:
        """Stop ticking and drop any in-flight fetch. Idempotent."""
        if self._stopped:
            return
        self._stopped = True

        if self._ticker is not None:
            self._ticker.cancel()
        for task in list(self._refreshes):
            task.cancel()

        self._state = replace(self._state, phase=RotationPhase.STOPPED)

    async def aclose(self) -> None:
        """Stop and wait until every scheduled task has finished."""
        self.stop()
        tasks = [t for t in (self._ticker, *self._refreshes) if t is not None]
        await asyncio.gather(*tasks, return_exceptions=True)

    async def __aenter__(self) -> RotationTimer:
        self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    # --- Ticking ---

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._tick_interval)
            self.tick()

    def tick(self) -> None:
        """Advance the countdown by one second.

        At the period floor the countdown resets to a full period and
        exactly one new fetch is issued.
        """
        if self._stopped:
            return

        remaining = self._state.seconds_remaining
        if remaining <= 1:
            self._update(seconds_remaining=PERIOD_SECONDS)
            self._begin_refresh()
        else:
            self._update(seconds_remaining=remaining - 1)

    # --- Fetching ---

    def _begin_refresh(self) -> None:
        """Enter LOADING and schedule a fetch tagged with a fresh token."""
        self._generation += 1
        token = self._generation
        self._update(phase=RotationPhase.LOADING, error=None)

        task = asyncio.get_running_loop().create_task(self._refresh(token))
        self._refreshes.add(task)
        task.add_done_callback(self._refreshes.discard)

    def _is_current(self, token: int) -> bool:
        return not self._stopped and token == self._generation

    async def _refresh(self, token: int) -> None:
        try:
            server_time = await self._client.fetch_server_time()
            if not self._is_current(token):
                return
            code = await self._client.generate_code(self._secret, server_time)
        except CodeClientError as e:
            if self._is_current(token):
                self._update(code="", error=str(e), phase=RotationPhase.ERROR)
            return

        if not self._is_current(token):
            logger.debug("Discarding stale code response (token %d)", token)
            return

        self._update(
            code=code,
            seconds_remaining=seconds_remaining_at(server_time),
            error=None,
            phase=RotationPhase.DISPLAYING,
        )

    def _update(self, **changes: object) -> None:
        if self._stopped:
            return
        self._state = replace(self._state, **changes)  # type: ignore[arg-type]
        if self._on_change is not None:
            self._on_change(self._state)

    # --- Clipboard ---

    def copy_code(self, clear_after: int = DEFAULT_CLEAR_TIMEOUT) -> str:
        """Copy the displayed code to the clipboard.

        Returns:
            The code that was copied.

        Raises:
            ClipboardError: If no code is displayed or the clipboard refuses.
        """
        code = self._state.code
        if not code:
            raise ClipboardError("No code to copy")
        if not copy_to_clipboard(code, auto_clear=clear_after > 0, clear_after=clear_after):
            raise ClipboardError("Failed to copy to clipboard")
        return code
