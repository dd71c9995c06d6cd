"""
The command/message loop.

One consumer takes messages off an ``asyncio.Queue`` in arrival order, applies
the transition and hands the new state to the view. Each command the
transition returns runs as its own task and posts exactly one message back
onto the queue. Nothing is cancelled while the loop runs; a ``Quit`` command
ends it.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Iterable, List, Optional, Set

from .commands import Command, LoadResources, Quit
from .executor import CommandExecutor
from .messages import ErrorOccurred, Message
from .state import AppState
from .transition import Result, transition

logger = logging.getLogger(__name__)

StateListener = Callable[[AppState], None]


class Runtime:
    """Owns the authoritative ``AppState`` and serializes every update."""

    def __init__(
        self,
        state: AppState,
        executor: CommandExecutor,
        on_state: Optional[StateListener] = None,
        update: Callable[[AppState, Message], Result] = transition,
    ):
        self.state = state
        self.executor = executor
        self.on_state = on_state
        self.update = update
        self.queue: asyncio.Queue[Message] = asyncio.Queue()
        self.running = False
        self._tasks: Set[asyncio.Task] = set()

    def send(self, message: Message) -> None:
        """Queue a message; safe to call from the event loop thread only."""
        self.queue.put_nowait(message)

    async def run(self, initial_commands: Iterable[Command] = ()) -> AppState:
        """Process messages until a ``Quit`` command is emitted."""
        self.running = True
        logger.info("Runtime started")
        self._dispatch_all(initial_commands)

        try:
            while self.running:
                message = await self.queue.get()
                self.step(message)
                self.queue.task_done()
        finally:
            self.running = False
            for task in list(self._tasks):
                task.cancel()
            logger.info("Runtime stopped")
        return self.state

    def step(self, message: Message) -> List[Command]:
        """Apply one message and start its commands."""
        previous = self.state.phase
        self.state, commands = self.update(self.state, message)
        if self.state.phase is not previous:
            logger.debug(f"{type(message).__name__}: {previous.value} -> {self.state.phase.value}")
        if self.on_state is not None:
            self.on_state(self.state)
        self._dispatch_all(commands)
        return commands

    def _dispatch_all(self, commands: Iterable[Command]) -> None:
        for command in commands:
            if isinstance(command, Quit):
                logger.info("Quit requested")
                self.running = False
                return
            self._dispatch(command)

    def _dispatch(self, command: Command) -> None:
        task = asyncio.create_task(self._run_command(command))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_command(self, command: Command) -> None:
        try:
            message = await self.executor.execute(command)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception(f"Command {type(command).__name__} failed")
            kind = command.kind if isinstance(command, LoadResources) else None
            message = ErrorOccurred(str(e) or type(e).__name__, kind=kind)
        self.send(message)

    @property
    def pending(self) -> int:
        """Commands still running."""
        return len(self._tasks)

