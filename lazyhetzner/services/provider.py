"""
Resource provider: the Hetzner Cloud API behind a small protocol.

``ResourceProvider`` is what the command executor talks to. ``HcloudProvider``
implements it over the ``hcloud`` SDK and converts bound SDK models into the
frozen dataclasses in :mod:`lazyhetzner.models.resources`.

Errors:
    - ``get_by_id`` returns ``None`` when the API answers ``not_found``.
    - Every other API failure raises :class:`ResourceFetchError`.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Protocol, runtime_checkable

from hcloud import APIException, Client

from .. import __version__
from ..exceptions import ResourceFetchError, ResourceNotFoundError
from ..models.resources import (
    Firewall,
    FirewallAttachment,
    FirewallRule,
    FloatingIP,
    FloatingIPRef,
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
    VolumeRef,
)

logger = logging.getLogger(__name__)


@runtime_checkable
class ResourceProvider(Protocol):
    """Read access to one project's resources plus snapshot requests."""

    def list_all(self, kind: ResourceKind) -> List[Resource]:
        """List every resource of a kind, in API order."""
        ...

    def get_by_id(self, kind: ResourceKind, resource_id: int) -> Optional[Resource]:
        """Fetch one resource fresh; ``None`` if it no longer exists."""
        ...

    def list_server_networks(self, server: Server) -> List[Network]:
        """Fetch the private networks a server is attached to."""
        ...

    def create_snapshot(self, server_id: int, description: str) -> int:
        """Request a snapshot image of a server; returns the image ID."""
        ...


ProviderFactory = Callable[[str], ResourceProvider]


class HcloudProvider:
    """``ResourceProvider`` backed by ``hcloud.Client``."""

    def __init__(self, token: str, client: Optional[Client] = None):
        self.client = client or Client(
            token=token,
            application_name="lazyhetzner",
            application_version=__version__,
        )

    def _clients(self, kind: ResourceKind) -> Any:
        return {
            ResourceKind.SERVERS: self.client.servers,
            ResourceKind.NETWORKS: self.client.networks,
            ResourceKind.LOAD_BALANCERS: self.client.load_balancers,
            ResourceKind.FLOATING_IPS: self.client.floating_ips,
            ResourceKind.FIREWALLS: self.client.firewalls,
            ResourceKind.VOLUMES: self.client.volumes,
        }[kind]

    def list_all(self, kind: ResourceKind) -> List[Resource]:
        logger.info(f"Listing {kind.value}")
        try:
            bound_items = self._clients(kind).get_all()
            return [self._convert(kind, item) for item in bound_items]
        except APIException as e:
            raise ResourceFetchError(e.message, kind=kind.value, code=str(e.code)) from e

    def get_by_id(self, kind: ResourceKind, resource_id: int) -> Optional[Resource]:
        logger.info(f"Fetching {kind.singular} {resource_id}")
        try:
            bound = self._clients(kind).get_by_id(resource_id)
        except APIException as e:
            if e.code == "not_found":
                return None
            raise ResourceFetchError(e.message, kind=kind.value, code=str(e.code)) from e
        if bound is None:
            return None
        try:
            return self._convert(kind, bound, resolve=True)
        except APIException as e:
            raise ResourceFetchError(e.message, kind=kind.value, code=str(e.code)) from e

    def list_server_networks(self, server: Server) -> List[Network]:
        networks = []
        for private_net in server.private_net:
            network = self.get_by_id(ResourceKind.NETWORKS, private_net.network.id)
            if network is not None:
                networks.append(network)
        return networks

    def create_snapshot(self, server_id: int, description: str) -> int:
        logger.info(f"Creating snapshot of server {server_id}: {description}")
        try:
            bound = self.client.servers.get_by_id(server_id)
            response = bound.create_image(description=description, type="snapshot")
        except APIException as e:
            if e.code == "not_found":
                raise ResourceNotFoundError(
                    "server not found", kind=ResourceKind.SERVERS.value, resource_id=server_id
                ) from e
            raise ResourceFetchError(e.message, kind=ResourceKind.SERVERS.value, code=str(e.code)) from e
        return response.image.id

    # ------------------------------------------------------------------
    # SDK model conversion
    # ------------------------------------------------------------------

    def _convert(self, kind: ResourceKind, bound: Any, resolve: bool = False) -> Resource:
        converters = {
            ResourceKind.SERVERS: self._server,
            ResourceKind.NETWORKS: self._network,
            ResourceKind.LOAD_BALANCERS: self._load_balancer,
            ResourceKind.FLOATING_IPS: self._floating_ip,
            ResourceKind.FIREWALLS: self._firewall,
            ResourceKind.VOLUMES: self._volume,
        }
        return converters[kind](bound, resolve)

    @staticmethod
    def _ref(bound: Any, resolve: bool) -> ResourceRef:
        # Incomplete bound models reload on attribute access; only pay for
        # that when the caller asked for resolved names.
        name = ""
        if resolve or getattr(bound, "complete", True):
            name = getattr(bound, "name", "") or ""
        return ResourceRef(id=bound.id, name=name)

    def _attached_server(self, bound_server: Any) -> Optional[ResourceRef]:
        """Unfold an attached server so its name is available."""
        if bound_server is None:
            return None
        try:
            server = self.client.servers.get_by_id(bound_server.id)
        except APIException as e:
            logger.debug(f"Could not unfold server {bound_server.id}: {e}")
            return ResourceRef(id=bound_server.id)
        return ResourceRef(id=server.id, name=server.name or "")

    def _server(self, bound: Any, resolve: bool) -> Server:
        public_net = bound.public_net
        ipv4 = public_net.ipv4.ip if public_net and public_net.ipv4 else None
        ipv6 = public_net.ipv6.ip if public_net and public_net.ipv6 else None
        floating_ips = tuple(
            FloatingIPRef(id=fip.id, ip=(fip.ip or "") if resolve else "")
            for fip in (public_net.floating_ips if public_net else None) or []
        )
        firewalls = tuple(
            FirewallAttachment(firewall=self._ref(fw.firewall, resolve), status=fw.status or "")
            for fw in (public_net.firewalls if public_net else None) or []
        )
        private_net = tuple(
            PrivateNet(
                network=self._ref(pn.network, resolve),
                ip=pn.ip,
                mac_address=pn.mac_address or "",
                aliases=tuple(pn.alias_ips or ()),
            )
            for pn in bound.private_net or []
        )
        volumes = tuple(
            VolumeRef(
                id=vol.id,
                name=(vol.name or "") if resolve else "",
                size=(vol.size or 0) if resolve else 0,
            )
            for vol in bound.volumes or []
        )
        image = None
        if bound.image is not None:
            image = bound.image.name or f"Image {bound.image.id}"
        return Server(
            id=bound.id,
            name=bound.name,
            status=bound.status or "unknown",
            server_type=bound.server_type.name if bound.server_type else None,
            datacenter=bound.datacenter.name if bound.datacenter else None,
            image=image,
            created=bound.created,
            rescue_enabled=bool(bound.rescue_enabled),
            placement_group=bound.placement_group.name if bound.placement_group else None,
            public_ipv4=ipv4,
            public_ipv6=ipv6,
            floating_ips=floating_ips,
            firewalls=firewalls,
            private_net=private_net,
            load_balancers=tuple(self._ref(lb, resolve) for lb in bound.load_balancers or []),
            volumes=volumes,
            labels=dict(bound.labels or {}),
        )

    def _network(self, bound: Any, resolve: bool) -> Network:
        subnets = tuple(
            Subnet(
                type=subnet.type or "",
                ip_range=subnet.ip_range,
                network_zone=subnet.network_zone or "",
                gateway=subnet.gateway,
            )
            for subnet in bound.subnets or []
        )
        return Network(
            id=bound.id,
            name=bound.name,
            ip_range=bound.ip_range,
            subnets=subnets,
            server_count=len(bound.servers or []),
            labels=dict(bound.labels or {}),
        )

    def _load_balancer(self, bound: Any, resolve: bool) -> LoadBalancer:
        public_net = bound.public_net
        targets = []
        for target in bound.targets or []:
            selector = target.label_selector.selector if target.label_selector else None
            server = self._ref(target.server, resolve) if target.server else None
            ip = target.ip.ip if target.ip else None
            targets.append(
                LoadBalancerTarget(
                    type=target.type or "",
                    label_selector=selector,
                    server=server,
                    ip=ip,
                    target_count=len(getattr(target, "targets", None) or []),
                )
            )
        services = tuple(
            LoadBalancerService(
                protocol=service.protocol or "",
                listen_port=service.listen_port or 0,
                destination_port=service.destination_port or 0,
            )
            for service in bound.services or []
        )
        return LoadBalancer(
            id=bound.id,
            name=bound.name,
            load_balancer_type=bound.load_balancer_type.name if bound.load_balancer_type else None,
            public_enabled=bool(public_net.enabled) if public_net else False,
            public_ipv4=public_net.ipv4.ip if public_net and public_net.ipv4 else None,
            public_ipv6=public_net.ipv6.ip if public_net and public_net.ipv6 else None,
            private_ips=tuple(pn.ip for pn in bound.private_net or [] if pn.ip),
            targets=tuple(targets),
            services=services,
            labels=dict(bound.labels or {}),
        )

    def _floating_ip(self, bound: Any, resolve: bool) -> FloatingIP:
        return FloatingIP(
            id=bound.id,
            name=bound.name or "",
            ip=bound.ip,
            type=bound.type or "ipv4",
            blocked=bool(bound.blocked),
            description=bound.description or "",
            server=self._attached_server(bound.server),
            labels=dict(bound.labels or {}),
        )

    def _firewall(self, bound: Any, resolve: bool) -> Firewall:
        rules = tuple(
            FirewallRule(
                direction=rule.direction or "",
                protocol=rule.protocol or "",
                port=rule.port,
                source_ips=tuple(rule.source_ips or ()),
                destination_ips=tuple(rule.destination_ips or ()),
                description=rule.description,
            )
            for rule in bound.rules or []
        )
        return Firewall(
            id=bound.id,
            name=bound.name,
            rules=rules,
            applied_to_count=len(bound.applied_to or []),
            labels=dict(bound.labels or {}),
        )

    def _volume(self, bound: Any, resolve: bool) -> Volume:
        return Volume(
            id=bound.id,
            name=bound.name,
            size=bound.size or 0,
            location=bound.location.name if bound.location else "",
            server=self._attached_server(bound.server),
            labels=dict(bound.labels or {}),
        )
