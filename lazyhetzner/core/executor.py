"""
Command executor: turns command values into I/O.

Every ``execute`` call answers with exactly one message. Blocking work (API
calls, clipboard, helper processes) runs in a worker thread so the control
loop keeps processing messages. The one exception is SSH in the current
terminal, which takes over the terminal until the session ends.

Failures are translated here:

- provider and config errors become ``ErrorOccurred`` (full-screen error),
- action errors (missing field, clipboard, process) become ``StatusNotice``.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import AbstractContextManager, nullcontext
from dataclasses import replace
from pathlib import Path
from typing import Callable, Dict

from ..config.settings import load_config, save_config
from ..exceptions import (
    ActionError,
    ConfigurationError,
    ProcessLaunchError,
    ProviderError,
    ResourceNotFoundError,
)
from ..models.resources import ResourceKind, Server
from ..services import clipboard, terminal_sessions
from ..services.provider import HcloudProvider, ProviderFactory, ResourceProvider
from .actions import MenuAction
from .commands import (
    ClearStatusAfter,
    Command,
    CreateSnapshot,
    LoadConfig,
    LoadResources,
    LoadServerDetail,
    RunMenuAction,
    SaveConfig,
)
from .context_menu import (
    CopyToClipboard,
    LaunchShell,
    OpenServerDetail,
    resolve_action,
)
from .messages import (
    ClipboardCopied,
    ConfigLoaded,
    ConfigSaved,
    DetailOpened,
    ErrorOccurred,
    Message,
    ResourcesLoaded,
    ShellLaunched,
    SnapshotRequested,
    StatusCleared,
    StatusNotice,
)
from .state import DetailKind, DetailView

logger = logging.getLogger(__name__)

SuspendFactory = Callable[[], AbstractContextManager]

# Launchers in terminal_sessions that run in a worker thread
_BACKGROUND_LAUNCHERS: Dict[MenuAction, str] = {
    MenuAction.SSH_TMUX_WINDOW: "launch_tmux_window",
    MenuAction.SSH_TMUX_PANE: "launch_tmux_pane",
    MenuAction.SSH_ZELLIJ_TAB: "launch_zellij_tab",
    MenuAction.SSH_ZELLIJ_PANE: "launch_zellij_pane",
    MenuAction.SSH_NEW_TERMINAL: "launch_new_terminal",
}


class CommandExecutor:
    """Runs commands against the provider, clipboard, processes and config file."""

    def __init__(
        self,
        config_path: Path,
        provider_factory: ProviderFactory = HcloudProvider,
        copy_to_clipboard: Callable[[str], None] = clipboard.write_all,
        suspend: SuspendFactory = nullcontext,
        sleep: Callable[[float], object] = asyncio.sleep,
    ):
        self.config_path = config_path
        self.provider_factory = provider_factory
        self.copy_to_clipboard = copy_to_clipboard
        self.suspend = suspend
        self.sleep = sleep
        self._providers: Dict[str, ResourceProvider] = {}

    def provider(self, token: str) -> ResourceProvider:
        """One provider per token, created on first use."""
        if token not in self._providers:
            self._providers[token] = self.provider_factory(token)
        return self._providers[token]

    async def execute(self, command: Command) -> Message:
        logger.debug(f"Executing {command!r}")
        try:
            return await self._dispatch(command)
        except ActionError as e:
            logger.warning(f"{type(command).__name__} failed: {e}")
            return StatusNotice(e.message)
        except (ProviderError, ConfigurationError) as e:
            logger.error(f"{type(command).__name__} failed: {e}")
            kind = command.kind if isinstance(command, LoadResources) else None
            return ErrorOccurred(e.message, kind=kind)

    async def _dispatch(self, command: Command) -> Message:
        if isinstance(command, LoadConfig):
            config = await asyncio.to_thread(load_config, self.config_path)
            return ConfigLoaded(config)

        if isinstance(command, SaveConfig):
            await asyncio.to_thread(save_config, command.config, self.config_path)
            return ConfigSaved(command.config)

        if isinstance(command, LoadResources):
            provider = self.provider(command.token)
            items = await asyncio.to_thread(provider.list_all, command.kind)
            logger.info(f"Loaded {len(items)} {command.kind.value}")
            return ResourcesLoaded(kind=command.kind, items=tuple(items), token=command.token)

        if isinstance(command, RunMenuAction):
            return await self.run_menu_action(command)

        if isinstance(command, LoadServerDetail):
            server = await self._fetch(ResourceKind.SERVERS, command.server_id, command.token)
            return await self._server_detail(server, command.token)

        if isinstance(command, CreateSnapshot):
            server = await self._fetch(ResourceKind.SERVERS, command.server_id, command.token)
            provider = self.provider(command.token)
            image_id = await asyncio.to_thread(provider.create_snapshot, server.id, command.description)
            logger.info(f"Snapshot image {image_id} requested for server {server.id}")
            return SnapshotRequested(server_name=server.name, image_id=image_id)

        if isinstance(command, ClearStatusAfter):
            await self.sleep(command.seconds)
            return StatusCleared()

        raise TypeError(f"Unknown command: {command!r}")

    async def _fetch(self, kind: ResourceKind, resource_id: int, token: str):
        """Re-fetch one resource; a vanished resource is an error."""
        provider = self.provider(token)
        resource = await asyncio.to_thread(provider.get_by_id, kind, resource_id)
        if resource is None:
            raise ResourceNotFoundError(
                f"{kind.singular} not found", kind=kind.value, resource_id=resource_id
            )
        return resource

    async def run_menu_action(self, command: RunMenuAction) -> Message:
        """Fetch the resource fresh, then perform the action on it."""
        resource = await self._fetch(command.kind, command.resource_id, command.token)
        outcome = resolve_action(command.kind, resource, command.action)

        if isinstance(outcome, CopyToClipboard):
            await asyncio.to_thread(self.copy_to_clipboard, outcome.text)
            return ClipboardCopied(outcome.text)

        if isinstance(outcome, LaunchShell):
            return await self.launch_shell(outcome)

        if isinstance(outcome, OpenServerDetail):
            return await self._server_detail(outcome.server, command.token)

        if isinstance(outcome, DetailOpened):
            return replace(outcome, token=command.token)
        return outcome

    async def launch_shell(self, launch: LaunchShell) -> Message:
        if launch.action is MenuAction.SSH_CURRENT_TERMINAL:
            try:
                with self.suspend():
                    status = terminal_sessions.run_ssh_in_terminal(launch.ip)
            except ActionError:
                raise
            except Exception as e:
                # Suspending is not possible in every environment
                raise ProcessLaunchError(f"cannot hand the terminal to ssh: {e}") from e
            return ShellLaunched(status)
        launcher = getattr(terminal_sessions, _BACKGROUND_LAUNCHERS[launch.action])
        status = await asyncio.to_thread(launcher, launch.ip)
        return ShellLaunched(status)

    async def _server_detail(self, server: Server, token: str) -> Message:
        provider = self.provider(token)
        networks = await asyncio.to_thread(provider.list_server_networks, server)
        detail = DetailView(
            kind=DetailKind.SERVER,
            resource_kind=ResourceKind.SERVERS,
            title=f"Server: {server.name}",
            resource_name=server.name,
            labels=dict(server.labels),
            server=server,
            networks=tuple(networks),
        )
        return DetailOpened(detail, token=token)

