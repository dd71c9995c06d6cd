"""
Textual application hosting the runtime.

The app owns no state of its own: key presses become ``KeyPressed`` messages,
the runtime runs as a worker on the app's event loop, and every new state is
rendered into one ``Static`` widget.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.events import Key
from textual.widgets import Static

from ..config.constants import APP_TITLE
from ..core.commands import LoadConfig
from ..core.executor import CommandExecutor
from ..core.messages import KeyPressed
from ..core.runtime import Runtime
from ..core.state import AppState
from ..services import clipboard
from ..services.provider import HcloudProvider, ProviderFactory
from ..services.terminal_sessions import SessionInfo, detect_multiplexer
from .render import render

logger = logging.getLogger(__name__)
key_logger = logging.getLogger("key_events")


class LazyHetznerApp(App[None]):
    """Hetzner Cloud resource browser."""

    TITLE = APP_TITLE

    CSS = """
    Screen {
        layout: vertical;
    }

    #view {
        height: 1fr;
        padding: 1 2;
    }
    """

    # Keys Textual would otherwise claim for focus handling or quitting
    BINDINGS = [
        Binding("tab", "send_key('tab')", show=False, priority=True),
        Binding("escape", "send_key('escape')", show=False, priority=True),
        Binding("ctrl+c", "send_key('ctrl+c')", show=False, priority=True),
    ]

    def __init__(
        self,
        config_path: Path,
        provider_factory: ProviderFactory = HcloudProvider,
        copy_to_clipboard: Callable[[str], None] = clipboard.write_all,
        session_info: Optional[SessionInfo] = None,
    ):
        super().__init__()
        self.config_path = config_path
        self.session_info = session_info or detect_multiplexer()
        self.executor = CommandExecutor(
            config_path=config_path,
            provider_factory=provider_factory,
            copy_to_clipboard=copy_to_clipboard,
            suspend=self.suspend,
        )
        self.runtime: Optional[Runtime] = None

    def compose(self) -> ComposeResult:
        yield Static(id="view")

    def on_mount(self) -> None:
        logger.info(f"Starting with config {self.config_path}, multiplexer {self.session_info.type.value}")
        state = AppState(multiplexer=self.session_info.type)
        self.runtime = Runtime(state, self.executor, on_state=self.show)
        self.show(state)
        self.run_worker(self._run_runtime(), name="runtime", exclusive=True)

    async def _run_runtime(self) -> None:
        await self.runtime.run([LoadConfig()])
        self.exit()

    def show(self, state: AppState) -> None:
        self.query_one("#view", Static).update(render(state))

    @property
    def app_state(self) -> AppState:
        return self.runtime.state

    def action_send_key(self, key: str) -> None:
        self._send(KeyPressed(key))

    def on_key(self, event: Key) -> None:
        event.stop()
        event.prevent_default()
        self._send(KeyPressed(event.key, event.character))

    def _send(self, message: KeyPressed) -> None:
        key_logger.debug(f"key={message.key!r}")
        if self.runtime is not None:
            self.runtime.send(message)
