"""
Messages fed into the transition function.

Key presses come from the terminal application; everything else is the
single result of a command run by the executor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from ..config.projects import AppConfig
from ..models.resources import Resource, ResourceKind
from .state import DetailView


@dataclass(frozen=True)
class KeyPressed:
    key: str
    character: Optional[str] = None


@dataclass(frozen=True)
class ConfigLoaded:
    config: AppConfig


@dataclass(frozen=True)
class ConfigSaved:
    config: AppConfig


@dataclass(frozen=True)
class ResourcesLoaded:
    kind: ResourceKind
    items: Tuple[Resource, ...]
    # Token of the session that asked; None applies to any open session
    token: Optional[str] = field(default=None, repr=False)


@dataclass(frozen=True)
class DetailOpened:
    detail: DetailView
    token: Optional[str] = field(default=None, repr=False)


@dataclass(frozen=True)
class StatusNotice:
    text: str


@dataclass(frozen=True)
class StatusCleared:
    pass


@dataclass(frozen=True)
class ClipboardCopied:
    text: str


@dataclass(frozen=True)
class ShellLaunched:
    status: str


@dataclass(frozen=True)
class SnapshotRequested:
    server_name: str
    image_id: int


@dataclass(frozen=True)
class ErrorOccurred:
    message: str
    kind: Optional[ResourceKind] = None


Message = Union[
    KeyPressed,
    ConfigLoaded,
    ConfigSaved,
    ResourcesLoaded,
    DetailOpened,
    StatusNotice,
    StatusCleared,
    ClipboardCopied,
    ShellLaunched,
    SnapshotRequested,
    ErrorOccurred,
]
