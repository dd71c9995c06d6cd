"""
Context menu construction and action resolution.

``build_menu`` only needs the resource kind and ID, so a menu never holds a
copy of the list row that opened it. ``resolve_action`` runs after the
executor re-fetched the resource and decides what the action does with that
fresh object:

- a message (a detail view or a "nothing to show" notice),
- an effect the executor still has to perform (clipboard, shell, server
  detail fetch),
- or a :class:`MissingFieldError` when the field to copy or connect to is
  empty.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional, Tuple, Union

from ..exceptions import MissingFieldError
from ..models.resources import (
    Firewall,
    FloatingIP,
    LoadBalancer,
    Network,
    Resource,
    ResourceKind,
    Server,
    Volume,
    resource_title,
)
from ..services.terminal_sessions import Multiplexer
from .actions import MenuAction
from .messages import DetailOpened, Message, StatusNotice
from .state import ContextMenu, DetailKind, DetailView, MenuItem

CANCEL_ITEM = MenuItem("❌ Cancel", MenuAction.CANCEL)

_MENU_ITEMS: Dict[ResourceKind, Tuple[MenuItem, ...]] = {
    ResourceKind.SERVERS: (
        CANCEL_ITEM,
        MenuItem("🔖 View Labels", MenuAction.VIEW_LABELS),
        MenuItem("🔍 View Details", MenuAction.VIEW_DETAILS),
        MenuItem("📋 Copy Public IP", MenuAction.COPY_PUBLIC_IP),
        MenuItem("📋 Copy Private IP", MenuAction.COPY_PRIVATE_IP),
        MenuItem("📸 Create Snapshot", MenuAction.CREATE_SNAPSHOT),
    ),
    ResourceKind.NETWORKS: (
        CANCEL_ITEM,
        MenuItem("🧩 View Subnets", MenuAction.VIEW_SUBNETS),
        MenuItem("🔖 View Labels", MenuAction.VIEW_LABELS),
        MenuItem("📋 Copy Network ID", MenuAction.COPY_ID),
        MenuItem("📋 Copy Network Name", MenuAction.COPY_NAME),
        MenuItem("📋 Copy IP Range", MenuAction.COPY_IP_RANGE),
    ),
    ResourceKind.LOAD_BALANCERS: (
        CANCEL_ITEM,
        MenuItem("🔖 View Labels", MenuAction.VIEW_LABELS),
        MenuItem("📋 Copy Load Balancer ID", MenuAction.COPY_ID),
        MenuItem("📋 Copy Load Balancer Name", MenuAction.COPY_NAME),
        MenuItem("📋 Copy Public IP (IPv4)", MenuAction.COPY_PUBLIC_IP),
        MenuItem("📋 Copy Public IP (IPv6)", MenuAction.COPY_PUBLIC_IPV6),
        MenuItem("📋 Copy Private IP", MenuAction.COPY_PRIVATE_IP),
        MenuItem("🔍 View Targets", MenuAction.VIEW_TARGETS),
        MenuItem("🔍 View Services", MenuAction.VIEW_SERVICES),
    ),
    ResourceKind.FLOATING_IPS: (
        CANCEL_ITEM,
        MenuItem("🔖 View Labels", MenuAction.VIEW_LABELS),
        MenuItem("📋 Copy Floating IP ID", MenuAction.COPY_ID),
        MenuItem("📋 Copy Floating IP Name", MenuAction.COPY_NAME),
        MenuItem("📋 Copy Floating IP Address", MenuAction.COPY_FLOATING_IP),
    ),
    ResourceKind.FIREWALLS: (
        CANCEL_ITEM,
        MenuItem("🔒 View Rules", MenuAction.VIEW_RULES),
        MenuItem("🔖 View Labels", MenuAction.VIEW_LABELS),
        MenuItem("📋 Copy Firewall ID", MenuAction.COPY_ID),
        MenuItem("📋 Copy Firewall Name", MenuAction.COPY_NAME),
    ),
    ResourceKind.VOLUMES: (
        CANCEL_ITEM,
        MenuItem("🔖 View Labels", MenuAction.VIEW_LABELS),
        MenuItem("📋 Copy Volume ID", MenuAction.COPY_ID),
        MenuItem("📋 Copy Volume Name", MenuAction.COPY_NAME),
        MenuItem("📋 Copy Attached Server ID", MenuAction.COPY_SERVER_ID),
        MenuItem("📋 Copy Attached Server Name", MenuAction.COPY_SERVER_NAME),
    ),
}

_SSH_ITEMS: Dict[Multiplexer, Tuple[MenuItem, ...]] = {
    Multiplexer.TMUX: (
        MenuItem("🪟 SSH (New tmux window)", MenuAction.SSH_TMUX_WINDOW),
        MenuItem("📱 SSH (New tmux pane)", MenuAction.SSH_TMUX_PANE),
    ),
    Multiplexer.ZELLIJ: (
        MenuItem("🪟 SSH (New zellij tab)", MenuAction.SSH_ZELLIJ_TAB),
        MenuItem("📱 SSH (New zellij pane)", MenuAction.SSH_ZELLIJ_PANE),
    ),
    Multiplexer.NONE: (),
}

_TERMINAL_ITEMS = (
    MenuItem("🔗 SSH (New terminal)", MenuAction.SSH_NEW_TERMINAL),
    MenuItem("🔗 SSH (Current terminal)", MenuAction.SSH_CURRENT_TERMINAL),
)


def menu_items(kind: ResourceKind, multiplexer: Multiplexer = Multiplexer.NONE) -> Tuple[MenuItem, ...]:
    items = _MENU_ITEMS[kind]
    if kind is ResourceKind.SERVERS:
        items = items + _SSH_ITEMS[multiplexer] + _TERMINAL_ITEMS
    return items


def build_menu(
    kind: ResourceKind, resource_id: int, multiplexer: Multiplexer = Multiplexer.NONE
) -> ContextMenu:
    return ContextMenu(kind=kind, resource_id=resource_id, items=menu_items(kind, multiplexer))


# =============================================================================
# Effects left for the executor
# =============================================================================


@dataclass(frozen=True)
class CopyToClipboard:
    text: str


@dataclass(frozen=True)
class LaunchShell:
    action: MenuAction
    ip: str


@dataclass(frozen=True)
class OpenServerDetail:
    server: Server


Effect = Union[CopyToClipboard, LaunchShell, OpenServerDetail]
Resolution = Union[Message, Effect]


# =============================================================================
# Resolution
# =============================================================================


def _require(value: Optional[object], message: str, field: str) -> str:
    if value is None or value == "":
        raise MissingFieldError(message, field=field)
    return str(value)


def _labels(kind: ResourceKind, resource: Resource) -> Message:
    if not resource.labels:
        return StatusNotice(f"No labels found for this {kind.singular}.")
    return DetailOpened(
        DetailView(
            kind=DetailKind.LABELS,
            resource_kind=kind,
            title=resource_title(kind, resource),
            resource_name=resource.name,
            labels=dict(resource.labels),
        )
    )


def _collection(
    kind: ResourceKind,
    resource: Resource,
    detail_kind: DetailKind,
    empty_message: str,
    **payload: tuple,
) -> Message:
    (items,) = payload.values()
    if not items:
        return StatusNotice(empty_message)
    return DetailOpened(
        DetailView(
            kind=detail_kind,
            resource_kind=kind,
            title=resource_title(kind, resource),
            resource_name=resource.name,
            **payload,
        )
    )


def _resolve_server(server: Server, action: MenuAction) -> Resolution:
    if action is MenuAction.VIEW_DETAILS:
        return OpenServerDetail(server)
    if action is MenuAction.COPY_PUBLIC_IP:
        return CopyToClipboard(_require(server.public_ipv4, "server has no public IP", "public_ipv4"))
    if action is MenuAction.COPY_PRIVATE_IP:
        private_ip = server.private_net[0].ip if server.private_net else None
        return CopyToClipboard(_require(private_ip, "server has no private IP", "private_ip"))
    if action.is_shell:
        return LaunchShell(action, _require(server.public_ipv4, "server has no public IP", "public_ipv4"))
    raise ValueError(f"Unsupported server action: {action}")


def _resolve_network(network: Network, action: MenuAction) -> Resolution:
    if action is MenuAction.VIEW_SUBNETS:
        return _collection(
            ResourceKind.NETWORKS, network, DetailKind.SUBNETS,
            "No subnets found for this network.", subnets=network.subnets,
        )
    if action is MenuAction.COPY_ID:
        return CopyToClipboard(str(network.id))
    if action is MenuAction.COPY_NAME:
        return CopyToClipboard(_require(network.name, "network has no name", "name"))
    if action is MenuAction.COPY_IP_RANGE:
        return CopyToClipboard(_require(network.ip_range, "network has no IP range", "ip_range"))
    raise ValueError(f"Unsupported network action: {action}")


def _resolve_load_balancer(lb: LoadBalancer, action: MenuAction) -> Resolution:
    if action is MenuAction.VIEW_TARGETS:
        return _collection(
            ResourceKind.LOAD_BALANCERS, lb, DetailKind.LOAD_BALANCER_TARGETS,
            "No targets found for this loadbalancer.", targets=lb.targets,
        )
    if action is MenuAction.VIEW_SERVICES:
        return _collection(
            ResourceKind.LOAD_BALANCERS, lb, DetailKind.LOAD_BALANCER_SERVICES,
            "No services found for this loadbalancer.", services=lb.services,
        )
    if action is MenuAction.COPY_ID:
        return CopyToClipboard(str(lb.id))
    if action is MenuAction.COPY_NAME:
        return CopyToClipboard(_require(lb.name, "loadbalancer has no name", "name"))
    if action is MenuAction.COPY_PUBLIC_IP:
        return CopyToClipboard(_require(lb.public_ipv4, "loadbalancer has no public IP", "public_ipv4"))
    if action is MenuAction.COPY_PUBLIC_IPV6:
        return CopyToClipboard(_require(lb.public_ipv6, "loadbalancer has no public IPv6", "public_ipv6"))
    if action is MenuAction.COPY_PRIVATE_IP:
        private_ip = lb.private_ips[0] if lb.private_ips else None
        return CopyToClipboard(_require(private_ip, "loadbalancer has no private IP", "private_ip"))
    raise ValueError(f"Unsupported load balancer action: {action}")


def _resolve_floating_ip(fip: FloatingIP, action: MenuAction) -> Resolution:
    if action is MenuAction.COPY_ID:
        return CopyToClipboard(str(fip.id))
    if action is MenuAction.COPY_NAME:
        return CopyToClipboard(_require(fip.name.strip(), "floating IP has no name", "name"))
    if action is MenuAction.COPY_FLOATING_IP:
        return CopyToClipboard(_require(fip.ip, "floating IP has no address", "ip"))
    raise ValueError(f"Unsupported floating IP action: {action}")


def _resolve_firewall(firewall: Firewall, action: MenuAction) -> Resolution:
    if action is MenuAction.VIEW_RULES:
        return _collection(
            ResourceKind.FIREWALLS, firewall, DetailKind.FIREWALL_RULES,
            "No rules found for this firewall.", rules=firewall.rules,
        )
    if action is MenuAction.COPY_ID:
        return CopyToClipboard(str(firewall.id))
    if action is MenuAction.COPY_NAME:
        return CopyToClipboard(_require(firewall.name, "firewall has no name", "name"))
    raise ValueError(f"Unsupported firewall action: {action}")


def _resolve_volume(volume: Volume, action: MenuAction) -> Resolution:
    if action is MenuAction.COPY_ID:
        return CopyToClipboard(str(volume.id))
    if action is MenuAction.COPY_NAME:
        return CopyToClipboard(_require(volume.name, "Volume has no name", "name"))
    if action in (MenuAction.COPY_SERVER_ID, MenuAction.COPY_SERVER_NAME):
        if volume.server is None:
            raise MissingFieldError("Volume is not attached to any server", field="server")
        if action is MenuAction.COPY_SERVER_ID:
            return CopyToClipboard(str(volume.server.id))
        return CopyToClipboard(_require(volume.server.name, "Attached server has no name", "server_name"))
    raise ValueError(f"Unsupported volume action: {action}")


_RESOLVERS: Mapping[ResourceKind, Callable[..., Resolution]] = {
    ResourceKind.SERVERS: _resolve_server,
    ResourceKind.NETWORKS: _resolve_network,
    ResourceKind.LOAD_BALANCERS: _resolve_load_balancer,
    ResourceKind.FLOATING_IPS: _resolve_floating_ip,
    ResourceKind.FIREWALLS: _resolve_firewall,
    ResourceKind.VOLUMES: _resolve_volume,
}


def resolve_action(kind: ResourceKind, resource: Resource, action: MenuAction) -> Resolution:
    """Decide what ``action`` does with a freshly fetched ``resource``.

    Raises:
        MissingFieldError: The field the action needs is empty.
        ValueError: ``action`` is not offered for ``kind``.
    """
    if action is MenuAction.VIEW_LABELS:
        return _labels(kind, resource)
    return _RESOLVERS[kind](resource, action)
