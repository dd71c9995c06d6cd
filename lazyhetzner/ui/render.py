"""
State to Rich renderable.

``render(state)`` is a pure function of the state: it reads the whole
``AppState`` after every processed message and never changes it. The Textual
app paints its result into a single ``Static`` widget.
"""

from __future__ import annotations

import io
from typing import Callable, Dict, Iterable, List

from rich.columns import Columns
from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.text import Text

from ..config.constants import APP_TITLE, ONE_TIME_PROJECT_LABEL, TOKEN_PREVIEW_LENGTH
from ..core.state import AppState, Phase
from ..models.resources import (
    Firewall,
    FloatingIP,
    LoadBalancer,
    Network,
    Resource,
    ResourceKind,
    Server,
    Volume,
)
from ..utils.shortcuts import index_to_shortcut

TITLE_STYLE = "bold #FAFAFA on #7D56F4"
INFO_STYLE = "#04B575"
HELP_STYLE = "#626262"
WARNING_STYLE = "bold #FFA500"
ERROR_STYLE = "bold #FF5F87"
SUCCESS_STYLE = "bold #04B575"
SELECTED_STYLE = "bold #EE6FF8"

_RUNNING_STATES = {"running"}
_STARTING_STATES = {"starting", "initializing"}


def _title(text: str) -> Text:
    return Text(f" {text} ", style=TITLE_STYLE)


def _help(text: str) -> Text:
    return Text(text, style=HELP_STYLE)


# =============================================================================
# Resource rows
# =============================================================================


def resource_name(resource: Resource) -> str:
    if isinstance(resource, FloatingIP):
        return resource.display_name
    return resource.name


def describe(resource: Resource) -> str:
    """Second line of a resource row."""
    if isinstance(resource, Server):
        if resource.status in _RUNNING_STATES:
            status = f"🟢 {resource.status}"
        elif resource.status in _STARTING_STATES:
            status = f"🟡 {resource.status}"
        else:
            status = f"🔴 {resource.status}"
        return f"{status} | {resource.server_type or 'n/a'} | {resource.public_ipv4 or 'no public IPv4'}"
    if isinstance(resource, Network):
        return f"IP Range: {resource.ip_range or 'n/a'} | Subnets: {len(resource.subnets)}"
    if isinstance(resource, LoadBalancer):
        if resource.public_enabled:
            return f"🟢 Available | {resource.public_ipv4 or 'n/a'} | Targets: {len(resource.targets)}"
        return f"🟢 Available | Private only | Targets: {len(resource.targets)}"
    if isinstance(resource, FloatingIP):
        if resource.blocked:
            status = "⛔ Blocked"
        elif resource.server is not None:
            status = f"🔗 Attached to {resource.server.name or resource.server.id}"
        else:
            status = "🟢 Unassigned"
        return f"{status} | {resource.type.upper()} | {resource.ip or 'N/A'}"
    if isinstance(resource, Firewall):
        return f"Rules: {len(resource.rules)} | Applied to: {resource.applied_to_count}"
    if isinstance(resource, Volume):
        status = "📦 Available"
        if resource.server is not None:
            status = f"🔗 Attached to {resource.server.name or resource.server.id}"
        return f"{status} | {resource.size}GB | {resource.location}"
    return ""


def _resource_rows(state: AppState) -> RenderableType:
    items = state.entry().items
    selected = state.cursor[state.active_kind]
    rows: List[Text] = []
    for index, resource in enumerate(items):
        marker = "▶ " if index == selected else "  "
        style = SELECTED_STYLE if index == selected else ""
        rows.append(Text(marker + resource_name(resource), style=style))
        rows.append(Text("  " + describe(resource), style=HELP_STYLE))
    return Group(*rows)


# =============================================================================
# Resource browser
# =============================================================================


def _project_header(state: AppState) -> Text:
    session = state.session
    if session is None or session.is_one_time:
        return Text(ONE_TIME_PROJECT_LABEL, style=INFO_STYLE)
    return Text(f"Project: {session.project_name}", style=INFO_STYLE)


def _tabs(state: AppState) -> Text:
    tabs = Text()
    for kind in ResourceKind.ordered():
        label = kind.title
        if kind is state.active_kind:
            if state.loading_kind is kind:
                label += " (loading...)"
            tabs.append(f" {label} ", style=TITLE_STYLE)
        else:
            tabs.append(f" {label} ", style=HELP_STYLE)
        tabs.append(" ")
    return tabs


def _resource_list(state: AppState) -> RenderableType:
    kind = state.active_kind
    entry = state.entry()
    if state.loading_kind is kind and not entry.loaded:
        return Text(f"Loading {kind.title.lower()}...", style=INFO_STYLE)
    if not entry.loaded:
        return _help("Resources not loaded yet. Loading will start automatically.")
    if not entry.items:
        return _help(f"No {kind.title.lower()} found.")
    return _resource_rows(state)


def _status_line(state: AppState) -> Iterable[RenderableType]:
    if state.status_message:
        yield Text("")
        yield Text(state.status_message, style=SUCCESS_STYLE)


def _browser(state: AppState) -> List[RenderableType]:
    return [_project_header(state), _tabs(state), Text(""), _resource_list(state)]


def render_resource_view(state: AppState) -> RenderableType:
    help_text = "Tab: switch view • ←/→: navigate tabs • Enter: actions • r: reload resources • q: back to projects"
    if state.active_kind is ResourceKind.SERVERS:
        help_text = (
            "Tab: switch view • ←/→: navigate tabs • Enter: server actions • "
            "i: view details • r: reload resources • q: back to projects"
        )
    return Group(*_browser(state), *_status_line(state), Text(""), _help(help_text))


def render_context_menu(state: AppState) -> RenderableType:
    menu = state.context_menu
    lines: List[Text] = [Text(f"Actions for {menu.kind.title}:"), Text("")]
    for index, item in enumerate(menu.items):
        shortcut = index_to_shortcut(index)
        prefix = f"[{shortcut}] " if shortcut else "    "
        style = SELECTED_STYLE if index == menu.selected_index else ""
        lines.append(Text(prefix + item.label, style=style))
    lines.append(Text(""))
    lines.append(_help("Press number keys for quick selection • ↑/↓ to navigate • Enter to select • Esc to cancel"))
    panel = Panel(Group(*lines), border_style="#7D56F4", expand=False)
    return Group(*_browser(state), Text(""), panel)


# =============================================================================
# Projects and forms
# =============================================================================


def render_project_select(state: AppState) -> RenderableType:
    title = _title(APP_TITLE)
    if state.config is None:
        return Group(title, Text(""), Text("Loading configuration...", style=INFO_STYLE))

    if not state.config.projects:
        return Group(
            title,
            Text(""),
            Text("No projects configured yet.", style=WARNING_STYLE),
            Text(""),
            _help("Press 'a' to add your first project • t: one-time token • q: quit"),
            *_status_line(state),
        )

    rows: List[Text] = []
    for index, project in enumerate(state.config.projects):
        is_default = project.name == state.config.default_project
        selected = index == state.project_cursor
        name = f"⭐ {project.name}" if is_default else project.name
        token = f"Token: {project.token_preview(TOKEN_PREVIEW_LENGTH)}"
        if is_default:
            token += " (default project)"
        rows.append(Text(("▶ " if selected else "  ") + name, style=SELECTED_STYLE if selected else ""))
        rows.append(Text("  " + token, style=HELP_STYLE))

    return Group(
        title,
        Text(""),
        *rows,
        *_status_line(state),
        Text(""),
        _help("Enter: select project • a: add project • d: delete project • t: one-time token • q: quit"),
    )


def _field(label: str, value: str, focused: bool, secret: bool = False) -> List[Text]:
    shown = "•" * len(value) if secret and not focused else value
    cursor = "█" if focused else ""
    style = SELECTED_STYLE if focused else HELP_STYLE
    return [Text(label), Text(f"> {shown}{cursor}", style=style), Text("")]


def render_project_manage(state: AppState) -> RenderableType:
    form = state.form
    lines: List[RenderableType] = [_title(f"{APP_TITLE} - Add Project"), Text(""), Text("Add New Project"), Text("")]
    lines += _field("Project Name:", form.values[0], form.focus == 0)
    lines += _field("API Token:", form.values[1], form.focus == 1, secret=True)
    lines.append(_help("Tab: next field • Enter: save • Esc: cancel"))
    return Group(*lines, *_status_line(state))


def render_token_input(state: AppState) -> RenderableType:
    return Group(
        _title(APP_TITLE),
        Text(""),
        Text("Enter API token for one-time access:", style=INFO_STYLE),
        Text(""),
        *_field("API Token:", state.form.current, True),
        _help("Press Enter to continue • Press Esc to go back"),
    )


def render_snapshot_input(state: AppState) -> RenderableType:
    return Group(
        _title("Create Server Snapshot"),
        Text(""),
        *_field("Snapshot name (e.g., my-server-snapshot):", state.form.current, True),
        _help("Enter: create snapshot • Esc: cancel"),
    )


# =============================================================================
# Detail views
# =============================================================================


def _detail_page(title: str, info: str, body: List[RenderableType], back_to: str) -> RenderableType:
    return Group(
        _title(title),
        Text(""),
        Text(info, style=INFO_STYLE),
        Text(""),
        *body,
        Text(""),
        _help(f"💡 Press 'q' to return to {back_to}"),
    )


def _found(count: int, noun: str) -> Text:
    return Text(f"Found {count} {noun}(s):")


def render_labels(state: AppState) -> RenderableType:
    detail = state.detail
    body: List[RenderableType] = []
    if not detail.labels:
        body.append(Text("⚠️  No labels found for this resource", style=WARNING_STYLE))
    else:
        body.append(_found(len(detail.labels), "label"))
        body.append(Text(""))
        for key in sorted(detail.labels):
            line = Text(f"🏷️  {key}", style="bold #7D56F4")
            line.append(" → ")
            line.append(detail.labels[key], style="#FAFAFA")
            body.append(line)
    return _detail_page("Labels", f"📋 Labels for {detail.title}", body, "resource view")


def render_subnets(state: AppState) -> RenderableType:
    detail = state.detail
    body: List[RenderableType] = []
    if not detail.subnets:
        body.append(Text("⚠️  No subnets found for this Network", style=WARNING_STYLE))
    else:
        body.append(_found(len(detail.subnets), "subnet"))
        for index, subnet in enumerate(detail.subnets, start=1):
            body.append(Text(""))
            body.append(Text(f"🧩 Subnet {index}: {subnet.ip_range or 'n/a'} ({subnet.type.upper()})"))
            body.append(_help(f"Network Zone: {subnet.network_zone} | Gateway: {subnet.gateway or 'n/a'}"))
    return _detail_page("Network Subnets", f"🧩 Subnets for Network: {detail.resource_name}", body, "Network view")


def render_firewall_rules(state: AppState) -> RenderableType:
    detail = state.detail
    body: List[RenderableType] = []
    if not detail.rules:
        body.append(Text("⚠️  No rules found for this Firewall", style=WARNING_STYLE))
    else:
        body.append(_found(len(detail.rules), "rule"))
        for index, rule in enumerate(detail.rules, start=1):
            port = f"port {rule.port}" if rule.port else "all ports"
            sources = ", ".join(rule.source_ips) or "any"
            destinations = ", ".join(rule.destination_ips) or "any"
            details = f"Sources: {sources} | Destinations: {destinations}"
            if rule.description:
                details += f" | {rule.description}"
            body.append(Text(""))
            body.append(Text(f"🧱 Rule {index}: {rule.direction.upper()} {rule.protocol.upper()} {port}"))
            body.append(_help(details))
    return _detail_page("Firewall Rules", f"🧱 Rules for Firewall: {detail.resource_name}", body, "Firewall view")


def render_lb_targets(state: AppState) -> RenderableType:
    detail = state.detail
    body: List[RenderableType] = []
    if not detail.targets:
        body.append(Text("⚠️  No targets found for this Load Balancer", style=WARNING_STYLE))
    else:
        body.append(_found(len(detail.targets), "target"))
        for index, target in enumerate(detail.targets, start=1):
            body.append(Text(""))
            body.append(
                Text(
                    f"🎯Target {index}: {target.description} "
                    f"(Type: {target.type}, Target count: {target.target_count})"
                )
            )
    return _detail_page(
        "Load Balancer Targets", f"🎯Targets for Load Balancer: {detail.resource_name}", body, "Load Balancer view"
    )


def render_lb_services(state: AppState) -> RenderableType:
    detail = state.detail
    body: List[RenderableType] = []
    if not detail.services:
        body.append(Text("⚠️  No services found for this Load Balancer", style=WARNING_STYLE))
    else:
        body.append(_found(len(detail.services), "service"))
        for index, service in enumerate(detail.services, start=1):
            body.append(Text(""))
            body.append(
                Text(
                    f"🔌Service {index}: {service.protocol} "
                    f"(Port: {service.listen_port} -> {service.destination_port})"
                )
            )
    return _detail_page(
        "Load Balancer Services", f"🔌Services for Load Balancer: {detail.resource_name}", body, "Load Balancer view"
    )


def _section(title: str, lines: List[str]) -> Panel:
    content = "\n".join(lines) if lines else "No data available."
    return Panel(Text(content), title=title, title_align="left", border_style="#7D56F4", width=44)


def server_detail_sections(state: AppState) -> Dict[str, List[str]]:
    """Section title to lines for the server detail grid."""
    server = state.detail.server
    overview = [
        f"Status: {server.status}",
        f"Type: {server.server_type or 'n/a'}",
        f"Datacenter: {server.datacenter or 'n/a'}",
        f"Image: {server.image or 'n/a'}",
        f"Created: {server.created.strftime('%Y-%m-%d %H:%M:%S') if server.created else 'n/a'}",
        f"Rescue Enabled: {str(server.rescue_enabled).lower()}",
    ]
    if server.placement_group:
        overview.append(f"Placement Group: {server.placement_group}")

    floating = ", ".join(fip.ip or str(fip.id) for fip in server.floating_ips) or "none"
    networking = [
        f"Public IPv4: {server.public_ipv4 or 'n/a'}",
        f"Public IPv6: {server.public_ipv6 or 'n/a'}",
        f"Floating IPs: {floating}",
    ]
    if server.private_net:
        networking.append("Private Networks:")
        for private_net in server.private_net:
            name = private_net.network.name or f"Network {private_net.network.id}"
            line = f"- {name}: {private_net.ip or 'n/a'}"
            if private_net.aliases:
                line += f" (aliases: {', '.join(private_net.aliases)})"
            networking.append(line)

    subnets = []
    for network in state.detail.networks:
        for subnet in network.subnets:
            subnets.append(f"{network.name}: {subnet.ip_range or 'n/a'} ({subnet.network_zone})")

    firewalls = [
        f"{fw.firewall.name or fw.firewall.id} ({fw.status})" if fw.status else f"{fw.firewall.name or fw.firewall.id}"
        for fw in server.firewalls
    ]
    load_balancers = [lb.name or f"Load Balancer {lb.id}" for lb in server.load_balancers]
    volumes = [
        f"{volume.name or f'Volume {volume.id}'} ({volume.size}GB)" if volume.size else volume.name or f"Volume {volume.id}"
        for volume in server.volumes
    ]
    labels = [f"{key}={value}" for key, value in sorted(server.labels.items())]

    return {
        "Overview": overview,
        "Networking": networking,
        "Subnets": subnets,
        "Firewalls": firewalls,
        "Load Balancers": load_balancers,
        "Volumes": volumes,
        "Labels": labels,
    }


def render_server_detail(state: AppState) -> RenderableType:
    detail = state.detail
    if detail is None or detail.server is None:
        return Group(
            _title("Server Details"),
            Text(""),
            Text("No server details available.", style=WARNING_STYLE),
            Text(""),
            _help("Press 'q' to return to resource view"),
        )
    server = detail.server
    sections = [_section(title, lines) for title, lines in server_detail_sections(state).items()]
    return Group(
        _title("Server Details"),
        Text(""),
        Text(f"🖥️ Server: {server.name} (ID: {server.id})", style=INFO_STYLE),
        Text(""),
        Columns(sections),
        _help("💡 Press 'q' to return to resource view"),
    )


def render_error(state: AppState) -> RenderableType:
    return Group(
        _title(f"{APP_TITLE} - Error"),
        Text(""),
        Text(f"Error: {state.error}", style=ERROR_STYLE),
        Text(""),
        _help("Press q to go back • ctrl+c to quit"),
    )


_RENDERERS: Dict[Phase, Callable[[AppState], RenderableType]] = {
    Phase.PROJECT_SELECT: render_project_select,
    Phase.PROJECT_MANAGE: render_project_manage,
    Phase.TOKEN_INPUT: render_token_input,
    Phase.RESOURCE_VIEW: render_resource_view,
    Phase.CONTEXT_MENU: render_context_menu,
    Phase.LABEL_VIEW: render_labels,
    Phase.SERVER_DETAIL_VIEW: render_server_detail,
    Phase.NETWORK_SUBNET_VIEW: render_subnets,
    Phase.FIREWALL_RULE_VIEW: render_firewall_rules,
    Phase.LOAD_BALANCER_TARGET_VIEW: render_lb_targets,
    Phase.LOAD_BALANCER_SERVICE_VIEW: render_lb_services,
    Phase.SNAPSHOT_INPUT: render_snapshot_input,
    Phase.ERROR: render_error,
}


def render(state: AppState) -> RenderableType:
    """Renderable for the current phase."""
    return _RENDERERS[state.phase](state)


def render_plain(state: AppState, width: int = 120) -> str:
    """Render to plain text; used by tests and debug logging."""
    console = Console(file=io.StringIO(), width=width, color_system=None, record=True)
    console.print(render(state))
    return console.export_text()
