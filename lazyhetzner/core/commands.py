"""
Commands: deferred work requested by the transition function.

Each command is plain data. The executor turns it into I/O and answers with
exactly one message. Commands that talk to the API carry the session token so
the executor never reads state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from ..config.constants import STATUS_CLEAR_DELAY_SECONDS
from ..config.projects import AppConfig
from ..models.resources import ResourceKind
from .actions import MenuAction


@dataclass(frozen=True)
class LoadConfig:
    pass


@dataclass(frozen=True)
class SaveConfig:
    config: AppConfig


@dataclass(frozen=True)
class LoadResources:
    kind: ResourceKind
    token: str = field(repr=False)


@dataclass(frozen=True)
class RunMenuAction:
    kind: ResourceKind
    resource_id: int
    action: MenuAction
    token: str = field(repr=False)


@dataclass(frozen=True)
class LoadServerDetail:
    server_id: int
    token: str = field(repr=False)


@dataclass(frozen=True)
class CreateSnapshot:
    server_id: int
    description: str
    token: str = field(repr=False)


@dataclass(frozen=True)
class ClearStatusAfter:
    seconds: float = STATUS_CLEAR_DELAY_SECONDS


@dataclass(frozen=True)
class Quit:
    pass


Command = Union[
    LoadConfig,
    SaveConfig,
    LoadResources,
    RunMenuAction,
    LoadServerDetail,
    CreateSnapshot,
    ClearStatusAfter,
    Quit,
]
