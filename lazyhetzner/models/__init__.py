"""Resource data models."""

from .resources import (
    Firewall,
    FirewallRule,
    FloatingIP,
    LoadBalancer,
    LoadBalancerService,
    LoadBalancerTarget,
    Network,
    Resource,
    ResourceKind,
    ResourceRef,
    Server,
    Subnet,
    Volume,
)

__all__ = [
    "Firewall",
    "FirewallRule",
    "FloatingIP",
    "LoadBalancer",
    "LoadBalancerService",
    "LoadBalancerTarget",
    "Network",
    "Resource",
    "ResourceKind",
    "ResourceRef",
    "Server",
    "Subnet",
    "Volume",
]
