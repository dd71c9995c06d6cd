"""Shared pytest fixtures for lazyhetzner tests."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from lazyhetzner.config.projects import AppConfig
from lazyhetzner.core.actions import MenuAction
from lazyhetzner.core.context_menu import menu_items
from lazyhetzner.core.executor import CommandExecutor
from lazyhetzner.core.state import AppState, CacheEntry, Phase, Session
from lazyhetzner.models.resources import (
    Firewall,
    FirewallRule,
    FloatingIP,
    LoadBalancer,
    LoadBalancerService,
    LoadBalancerTarget,
    Network,
    PrivateNet,
    Resource,
    ResourceKind,
    ResourceRef,
    Server,
    Subnet,
    Volume,
)
from lazyhetzner.services.terminal_sessions import Multiplexer

TOKEN = "t" * 64


# ---------------------------------------------------------------------------
# Sample resources
# ---------------------------------------------------------------------------


WEB_SERVER = Server(
    id=1,
    name="web-1",
    status="running",
    server_type="cx22",
    datacenter="fsn1-dc14",
    image="ubuntu-24.04",
    public_ipv4="1.2.3.4",
    public_ipv6="2a01:4f8::/64",
    private_net=(PrivateNet(network=ResourceRef(10, "backend"), ip="10.0.0.2"),),
    labels={"env": "prod", "role": "web"},
)

DB_SERVER = Server(id=2, name="db-1", status="off", server_type="cx32")

BACKEND_NETWORK = Network(
    id=10,
    name="backend",
    ip_range="10.0.0.0/16",
    subnets=(Subnet(type="cloud", ip_range="10.0.0.0/24", network_zone="eu-central", gateway="10.0.0.1"),),
    server_count=1,
)

LOAD_BALANCER = LoadBalancer(
    id=20,
    name="lb-1",
    load_balancer_type="lb11",
    public_ipv4="5.6.7.8",
    public_ipv6="2a01:4f8::1",
    private_ips=("10.0.0.5",),
    targets=(LoadBalancerTarget(type="server", server=ResourceRef(1, "web-1")),),
    services=(LoadBalancerService(protocol="http", listen_port=80, destination_port=8080),),
)

FLOATING_IP = FloatingIP(id=30, name="public-entry", ip="9.9.9.9", server=ResourceRef(1, "web-1"))

FIREWALL = Firewall(
    id=40,
    name="fw-1",
    rules=(FirewallRule(direction="in", protocol="tcp", port="22", source_ips=("0.0.0.0/0",)),),
    applied_to_count=1,
)

VOLUME = Volume(id=50, name="data", size=10, location="fsn1")


def sample_resources() -> Dict[ResourceKind, List[Resource]]:
    return {
        ResourceKind.SERVERS: [WEB_SERVER, DB_SERVER],
        ResourceKind.NETWORKS: [BACKEND_NETWORK],
        ResourceKind.LOAD_BALANCERS: [LOAD_BALANCER],
        ResourceKind.FLOATING_IPS: [FLOATING_IP],
        ResourceKind.FIREWALLS: [FIREWALL],
        ResourceKind.VOLUMES: [VOLUME],
    }


# ---------------------------------------------------------------------------
# Fake collaborators
# ---------------------------------------------------------------------------


class FakeProvider:
    """In-memory ``ResourceProvider`` that records every call."""

    def __init__(self, resources: Optional[Dict[ResourceKind, List[Resource]]] = None):
        self.resources = resources if resources is not None else sample_resources()
        self.calls: List[tuple] = []
        self.errors: Dict[str, Exception] = {}
        self.snapshots: List[tuple] = []

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.errors:
            raise self.errors[operation]

    def list_all(self, kind: ResourceKind) -> List[Resource]:
        self.calls.append(("list_all", kind))
        self._maybe_fail("list_all")
        return list(self.resources.get(kind, []))

    def get_by_id(self, kind: ResourceKind, resource_id: int) -> Optional[Resource]:
        self.calls.append(("get_by_id", kind, resource_id))
        self._maybe_fail("get_by_id")
        for resource in self.resources.get(kind, []):
            if resource.id == resource_id:
                return resource
        return None

    def list_server_networks(self, server: Server) -> List[Network]:
        self.calls.append(("list_server_networks", server.id))
        ids = {private_net.network.id for private_net in server.private_net}
        return [n for n in self.resources.get(ResourceKind.NETWORKS, []) if n.id in ids]

    def create_snapshot(self, server_id: int, description: str) -> int:
        self.calls.append(("create_snapshot", server_id, description))
        self._maybe_fail("create_snapshot")
        self.snapshots.append((server_id, description))
        return 999


class FakeClipboard:
    def __init__(self) -> None:
        self.copied: List[str] = []

    def __call__(self, text: str) -> None:
        self.copied.append(text)


async def no_sleep(seconds: float) -> None:
    return None


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def fake_clipboard() -> FakeClipboard:
    return FakeClipboard()


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "lazyhetzner" / "config.json"


@pytest.fixture
def executor(config_path: Path, provider: FakeProvider, fake_clipboard: FakeClipboard) -> CommandExecutor:
    return CommandExecutor(
        config_path=config_path,
        provider_factory=lambda token: provider,
        copy_to_clipboard=fake_clipboard,
        sleep=no_sleep,
    )


@pytest.fixture
def two_projects() -> AppConfig:
    return AppConfig().with_project("prod", TOKEN).with_project("staging", "s" * 64)


def browsing_state(**overrides: Any) -> AppState:
    """A RESOURCE_VIEW state with every kind loaded from the sample data."""
    cache = {
        kind: CacheEntry(loaded=True, items=tuple(items))
        for kind, items in sample_resources().items()
    }
    state = AppState(
        phase=Phase.RESOURCE_VIEW,
        session=Session(project_name="prod", token=TOKEN),
        cache=cache,
        config=AppConfig().with_project("prod", TOKEN),
    )
    return replace(state, **overrides)


def unloaded_state(**overrides: Any) -> AppState:
    """A RESOURCE_VIEW state right after selecting a project."""
    state = AppState(
        phase=Phase.RESOURCE_VIEW,
        session=Session(project_name="prod", token=TOKEN),
        config=AppConfig().with_project("prod", TOKEN),
    )
    return replace(state, **overrides)


def supported_actions(kind: ResourceKind) -> List[MenuAction]:
    """Every action any menu for ``kind`` can offer."""
    actions: List[MenuAction] = []
    for multiplexer in Multiplexer:
        for item in menu_items(kind, multiplexer):
            if item.action not in actions:
                actions.append(item.action)
    return actions
