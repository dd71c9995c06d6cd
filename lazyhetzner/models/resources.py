"""
Resource types shown in the browser.

The provider adapter converts SDK objects into these frozen dataclasses so
the state machine and renderer never touch lazily-loading SDK models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Tuple, Union


class ResourceKind(Enum):
    """Browsable resource categories, in tab order."""

    SERVERS = "servers"
    NETWORKS = "networks"
    LOAD_BALANCERS = "load_balancers"
    FLOATING_IPS = "floating_ips"
    FIREWALLS = "firewalls"
    VOLUMES = "volumes"

    @property
    def title(self) -> str:
        return _KIND_TITLES[self]

    @property
    def singular(self) -> str:
        return _KIND_SINGULAR[self]

    @classmethod
    def ordered(cls) -> Tuple[ResourceKind, ...]:
        return tuple(cls)

    def next(self, wrap: bool = True) -> ResourceKind:
        kinds = self.ordered()
        index = kinds.index(self) + 1
        if index >= len(kinds):
            return kinds[0] if wrap else self
        return kinds[index]

    def previous(self) -> ResourceKind:
        kinds = self.ordered()
        index = kinds.index(self)
        return kinds[index - 1] if index > 0 else self


_KIND_TITLES = {
    ResourceKind.SERVERS: "Servers",
    ResourceKind.NETWORKS: "Networks",
    ResourceKind.LOAD_BALANCERS: "Load Balancers",
    ResourceKind.FLOATING_IPS: "Floating IPs",
    ResourceKind.FIREWALLS: "Firewalls",
    ResourceKind.VOLUMES: "Volumes",
}

_KIND_SINGULAR = {
    ResourceKind.SERVERS: "server",
    ResourceKind.NETWORKS: "network",
    ResourceKind.LOAD_BALANCERS: "load balancer",
    ResourceKind.FLOATING_IPS: "floating IP",
    ResourceKind.FIREWALLS: "firewall",
    ResourceKind.VOLUMES: "volume",
}


@dataclass(frozen=True)
class ResourceRef:
    """ID and name of a related resource."""

    id: int
    name: str = ""


# =============================================================================
# Servers
# =============================================================================


@dataclass(frozen=True)
class PrivateNet:
    network: ResourceRef
    ip: Optional[str] = None
    mac_address: str = ""
    aliases: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FirewallAttachment:
    firewall: ResourceRef
    status: str = ""


@dataclass(frozen=True)
class VolumeRef:
    id: int
    name: str = ""
    size: int = 0


@dataclass(frozen=True)
class FloatingIPRef:
    id: int
    ip: str = ""


@dataclass(frozen=True)
class Server:
    id: int
    name: str
    status: str = "unknown"
    server_type: Optional[str] = None
    datacenter: Optional[str] = None
    image: Optional[str] = None
    created: Optional[datetime] = None
    rescue_enabled: bool = False
    placement_group: Optional[str] = None
    public_ipv4: Optional[str] = None
    public_ipv6: Optional[str] = None
    floating_ips: Tuple[FloatingIPRef, ...] = ()
    firewalls: Tuple[FirewallAttachment, ...] = ()
    private_net: Tuple[PrivateNet, ...] = ()
    load_balancers: Tuple[ResourceRef, ...] = ()
    volumes: Tuple[VolumeRef, ...] = ()
    labels: Dict[str, str] = field(default_factory=dict)


# =============================================================================
# Networks
# =============================================================================


@dataclass(frozen=True)
class Subnet:
    type: str
    ip_range: Optional[str] = None
    network_zone: str = ""
    gateway: Optional[str] = None


@dataclass(frozen=True)
class Network:
    id: int
    name: str
    ip_range: Optional[str] = None
    subnets: Tuple[Subnet, ...] = ()
    server_count: int = 0
    labels: Dict[str, str] = field(default_factory=dict)


# =============================================================================
# Load balancers
# =============================================================================


@dataclass(frozen=True)
class LoadBalancerTarget:
    type: str
    label_selector: Optional[str] = None
    server: Optional[ResourceRef] = None
    ip: Optional[str] = None
    target_count: int = 0

    @property
    def description(self) -> str:
        if self.label_selector:
            return self.label_selector
        if self.server is not None:
            return self.server.name or f"Server {self.server.id}"
        return self.ip or "n/a"


@dataclass(frozen=True)
class LoadBalancerService:
    protocol: str
    listen_port: int
    destination_port: int


@dataclass(frozen=True)
class LoadBalancer:
    id: int
    name: str
    load_balancer_type: Optional[str] = None
    public_enabled: bool = True
    public_ipv4: Optional[str] = None
    public_ipv6: Optional[str] = None
    private_ips: Tuple[str, ...] = ()
    targets: Tuple[LoadBalancerTarget, ...] = ()
    services: Tuple[LoadBalancerService, ...] = ()
    labels: Dict[str, str] = field(default_factory=dict)


# =============================================================================
# Floating IPs
# =============================================================================


@dataclass(frozen=True)
class FloatingIP:
    id: int
    name: str = ""
    ip: Optional[str] = None
    type: str = "ipv4"
    blocked: bool = False
    description: str = ""
    server: Optional[ResourceRef] = None
    labels: Dict[str, str] = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        name = self.name.strip()
        if name:
            return name
        if self.ip:
            return self.ip
        return f"Floating IP {self.id}"


# =============================================================================
# Firewalls
# =============================================================================


@dataclass(frozen=True)
class FirewallRule:
    direction: str
    protocol: str
    port: Optional[str] = None
    source_ips: Tuple[str, ...] = ()
    destination_ips: Tuple[str, ...] = ()
    description: Optional[str] = None


@dataclass(frozen=True)
class Firewall:
    id: int
    name: str
    rules: Tuple[FirewallRule, ...] = ()
    applied_to_count: int = 0
    labels: Dict[str, str] = field(default_factory=dict)


# =============================================================================
# Volumes
# =============================================================================


@dataclass(frozen=True)
class Volume:
    id: int
    name: str
    size: int = 0
    location: str = ""
    server: Optional[ResourceRef] = None
    labels: Dict[str, str] = field(default_factory=dict)


Resource = Union[Server, Network, LoadBalancer, FloatingIP, Firewall, Volume]


def resource_title(kind: ResourceKind, resource: Resource) -> str:
    """Human label used in detail view headers, e.g. ``Server: web-1``."""
    if isinstance(resource, FloatingIP):
        name = resource.display_name
    else:
        name = resource.name
    return f"{kind.singular[0].upper()}{kind.singular[1:]}: {name}"
