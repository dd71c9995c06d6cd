"""
Application state.

``AppState`` is one frozen value threaded through the runtime; only
:func:`lazyhetzner.core.transition.transition` produces new ones. Updates go
through :func:`dataclasses.replace`, and the per-kind mappings are rebuilt
rather than mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Mapping, Optional, Tuple

from ..config.projects import AppConfig
from ..models.resources import (
    FirewallRule,
    LoadBalancerService,
    LoadBalancerTarget,
    Network,
    Resource,
    ResourceKind,
    Server,
    Subnet,
)
from ..services.terminal_sessions import Multiplexer
from .actions import MenuAction


class Phase(Enum):
    PROJECT_SELECT = "project_select"
    PROJECT_MANAGE = "project_manage"
    TOKEN_INPUT = "token_input"
    RESOURCE_VIEW = "resource_view"
    CONTEXT_MENU = "context_menu"
    LABEL_VIEW = "label_view"
    SERVER_DETAIL_VIEW = "server_detail_view"
    NETWORK_SUBNET_VIEW = "network_subnet_view"
    FIREWALL_RULE_VIEW = "firewall_rule_view"
    LOAD_BALANCER_TARGET_VIEW = "load_balancer_target_view"
    LOAD_BALANCER_SERVICE_VIEW = "load_balancer_service_view"
    SNAPSHOT_INPUT = "snapshot_input"
    ERROR = "error"


# Back transitions; the root has no parent.
PARENT_PHASE: Dict[Phase, Optional[Phase]] = {
    Phase.PROJECT_SELECT: None,
    Phase.PROJECT_MANAGE: Phase.PROJECT_SELECT,
    Phase.TOKEN_INPUT: Phase.PROJECT_SELECT,
    Phase.RESOURCE_VIEW: Phase.PROJECT_SELECT,
    Phase.CONTEXT_MENU: Phase.RESOURCE_VIEW,
    Phase.LABEL_VIEW: Phase.RESOURCE_VIEW,
    Phase.SERVER_DETAIL_VIEW: Phase.RESOURCE_VIEW,
    Phase.NETWORK_SUBNET_VIEW: Phase.RESOURCE_VIEW,
    Phase.FIREWALL_RULE_VIEW: Phase.RESOURCE_VIEW,
    Phase.LOAD_BALANCER_TARGET_VIEW: Phase.RESOURCE_VIEW,
    Phase.LOAD_BALANCER_SERVICE_VIEW: Phase.RESOURCE_VIEW,
    Phase.SNAPSHOT_INPUT: Phase.RESOURCE_VIEW,
    Phase.ERROR: Phase.PROJECT_SELECT,
}

# Phases with a text field; only escape goes back so "q" can be typed.
TEXT_INPUT_PHASES = frozenset({Phase.PROJECT_MANAGE, Phase.TOKEN_INPUT, Phase.SNAPSHOT_INPUT})


@dataclass(frozen=True)
class CacheEntry:
    """Per-kind resource cache.

    ``loaded=False`` hides ``items`` behind a placeholder; a reload keeps the
    stale items until the new ones arrive.
    """

    loaded: bool = False
    items: Tuple[Resource, ...] = ()
    in_flight: bool = False


def empty_cache() -> Dict[ResourceKind, CacheEntry]:
    return {kind: CacheEntry() for kind in ResourceKind.ordered()}


def zero_cursors() -> Dict[ResourceKind, int]:
    return {kind: 0 for kind in ResourceKind.ordered()}


@dataclass(frozen=True)
class Session:
    """The credential resources are fetched with.

    An empty ``project_name`` marks one-time token access.
    """

    project_name: str
    token: str = field(repr=False)

    @property
    def is_one_time(self) -> bool:
        return not self.project_name


@dataclass(frozen=True)
class MenuItem:
    label: str
    action: MenuAction


@dataclass(frozen=True)
class ContextMenu:
    """Action menu for one resource, addressed by kind and ID only."""

    kind: ResourceKind
    resource_id: int
    items: Tuple[MenuItem, ...]
    selected_index: int = 0

    @property
    def selected(self) -> MenuItem:
        return self.items[self.selected_index]


class DetailKind(Enum):
    LABELS = "labels"
    SERVER = "server"
    SUBNETS = "subnets"
    FIREWALL_RULES = "firewall_rules"
    LOAD_BALANCER_TARGETS = "load_balancer_targets"
    LOAD_BALANCER_SERVICES = "load_balancer_services"


DETAIL_PHASES: Dict[DetailKind, Phase] = {
    DetailKind.LABELS: Phase.LABEL_VIEW,
    DetailKind.SERVER: Phase.SERVER_DETAIL_VIEW,
    DetailKind.SUBNETS: Phase.NETWORK_SUBNET_VIEW,
    DetailKind.FIREWALL_RULES: Phase.FIREWALL_RULE_VIEW,
    DetailKind.LOAD_BALANCER_TARGETS: Phase.LOAD_BALANCER_TARGET_VIEW,
    DetailKind.LOAD_BALANCER_SERVICES: Phase.LOAD_BALANCER_SERVICE_VIEW,
}


@dataclass(frozen=True)
class DetailView:
    """Payload of a sub-resource view; only the fields for ``kind`` are set."""

    kind: DetailKind
    resource_kind: ResourceKind
    title: str
    resource_name: str = ""
    labels: Mapping[str, str] = field(default_factory=dict)
    server: Optional[Server] = None
    networks: Tuple[Network, ...] = ()
    subnets: Tuple[Subnet, ...] = ()
    rules: Tuple[FirewallRule, ...] = ()
    targets: Tuple[LoadBalancerTarget, ...] = ()
    services: Tuple[LoadBalancerService, ...] = ()

    @property
    def phase(self) -> Phase:
        return DETAIL_PHASES[self.kind]


@dataclass(frozen=True)
class FormState:
    """Text fields of the add-project, token and snapshot forms."""

    values: Tuple[str, ...]
    focus: int = 0
    target_id: Optional[int] = None

    @property
    def current(self) -> str:
        return self.values[self.focus]

    def with_current(self, value: str) -> FormState:
        values = list(self.values)
        values[self.focus] = value
        return replace(self, values=tuple(values))

    def next_field(self) -> FormState:
        return replace(self, focus=(self.focus + 1) % len(self.values))


@dataclass(frozen=True)
class AppState:
    phase: Phase = Phase.PROJECT_SELECT
    active_kind: ResourceKind = ResourceKind.SERVERS
    cache: Mapping[ResourceKind, CacheEntry] = field(default_factory=empty_cache)
    loading_kind: Optional[ResourceKind] = None
    cursor: Mapping[ResourceKind, int] = field(default_factory=zero_cursors)
    session: Optional[Session] = None
    context_menu: Optional[ContextMenu] = None
    detail: Optional[DetailView] = None
    status_message: Optional[str] = None
    error: Optional[str] = None
    config: Optional[AppConfig] = None
    project_cursor: int = 0
    form: Optional[FormState] = None
    multiplexer: Multiplexer = Multiplexer.NONE

    def entry(self, kind: Optional[ResourceKind] = None) -> CacheEntry:
        return self.cache[kind or self.active_kind]

    def with_entry(self, kind: ResourceKind, entry: CacheEntry) -> AppState:
        cache = dict(self.cache)
        cache[kind] = entry
        return replace(self, cache=cache)

    def with_cursor(self, kind: ResourceKind, index: int) -> AppState:
        cursor = dict(self.cursor)
        cursor[kind] = index
        return replace(self, cursor=cursor)

    def selected_resource(self) -> Optional[Resource]:
        """The highlighted row of the active tab, if the tab is loaded."""
        entry = self.entry()
        if not entry.loaded or not entry.items:
            return None
        index = min(self.cursor[self.active_kind], len(entry.items) - 1)
        return entry.items[index]
