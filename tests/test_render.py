"""Tests for rendering state to text."""

from dataclasses import replace

from lazyhetzner.config.projects import AppConfig
from lazyhetzner.core.actions import MenuAction
from lazyhetzner.core.context_menu import build_menu, resolve_action
from lazyhetzner.core.state import AppState, DetailKind, DetailView, FormState, Phase, Session
from lazyhetzner.models.resources import ResourceKind
from lazyhetzner.services.terminal_sessions import Multiplexer
from lazyhetzner.ui.render import describe, render_plain, server_detail_sections

from conftest import (
    BACKEND_NETWORK,
    DB_SERVER,
    FIREWALL,
    FLOATING_IP,
    LOAD_BALANCER,
    VOLUME,
    WEB_SERVER,
    browsing_state,
    unloaded_state,
)


class TestResourceView:
    def test_rows_and_header(self):
        text = render_plain(browsing_state())
        assert "Project: prod" in text
        assert "▶ web-1" in text
        assert "db-1" in text
        assert "🟢 running | cx22 | 1.2.3.4" in text
        assert "i: view details" in text

    def test_one_time_header(self):
        state = browsing_state(session=Session(project_name="", token="x"))
        assert "One-time Access" in render_plain(state)

    def test_loading_tab(self):
        state = unloaded_state(loading_kind=ResourceKind.SERVERS)
        text = render_plain(state)
        assert "Servers (loading...)" in text
        assert "Loading servers..." in text

    def test_not_loaded_placeholder(self):
        assert "Resources not loaded yet. Loading will start automatically." in render_plain(unloaded_state())

    def test_empty_tab(self):
        state = browsing_state(active_kind=ResourceKind.LOAD_BALANCERS)
        state = state.with_entry(ResourceKind.LOAD_BALANCERS, replace(state.entry(), items=()))
        assert "No load balancers found." in render_plain(state)

    def test_status_line(self):
        state = browsing_state(status_message="✅ Copied 1.2.3.4 to clipboard")
        assert "✅ Copied 1.2.3.4 to clipboard" in render_plain(state)


class TestDescriptions:
    def test_each_kind(self):
        assert describe(DB_SERVER) == "🔴 off | cx32 | no public IPv4"
        assert describe(BACKEND_NETWORK) == "IP Range: 10.0.0.0/16 | Subnets: 1"
        assert describe(LOAD_BALANCER) == "🟢 Available | 5.6.7.8 | Targets: 1"
        assert describe(FLOATING_IP) == "🔗 Attached to web-1 | IPV4 | 9.9.9.9"
        assert describe(FIREWALL) == "Rules: 1 | Applied to: 1"
        assert describe(VOLUME) == "📦 Available | 10GB | fsn1"


class TestMenus:
    def test_context_menu_shortcuts(self):
        state = browsing_state(
            phase=Phase.CONTEXT_MENU,
            context_menu=build_menu(ResourceKind.SERVERS, 1, Multiplexer.TMUX),
        )
        text = render_plain(state)
        assert "Actions for Servers:" in text
        assert "[1] ❌ Cancel" in text
        assert "[7] 🪟 SSH (New tmux window)" in text
        assert "[9] 🔗 SSH (New terminal)" in text
        assert "[0] 🔗 SSH (Current terminal)" in text


class TestProjectScreens:
    def test_project_list(self, two_projects):
        text = render_plain(AppState(config=two_projects))
        assert "▶ ⭐ prod" in text
        assert "(default project)" in text
        assert "staging" in text
        assert "Token: ssssssssssssssss..." in text

    def test_no_projects(self):
        assert "No projects configured yet." in render_plain(AppState(config=AppConfig()))

    def test_add_project_masks_unfocused_token(self):
        state = AppState(
            config=AppConfig(),
            phase=Phase.PROJECT_MANAGE,
            form=FormState(values=("prod", "secret"), focus=0),
        )
        text = render_plain(state)
        assert "> prod█" in text
        assert "> ••••••" in text

    def test_snapshot_form(self):
        state = browsing_state(phase=Phase.SNAPSHOT_INPUT, form=FormState(values=("nightly",), target_id=1))
        assert "> nightly█" in render_plain(state)


class TestDetailViews:
    def test_labels_sorted(self):
        message = resolve_action(ResourceKind.SERVERS, WEB_SERVER, MenuAction.VIEW_LABELS)
        text = render_plain(browsing_state(phase=Phase.LABEL_VIEW, detail=message.detail))
        assert "📋 Labels for Server: web-1" in text
        assert text.index("env") < text.index("role")
        assert "Found 2 label(s):" in text

    def test_subnets(self):
        message = resolve_action(ResourceKind.NETWORKS, BACKEND_NETWORK, MenuAction.VIEW_SUBNETS)
        text = render_plain(browsing_state(phase=Phase.NETWORK_SUBNET_VIEW, detail=message.detail))
        assert "🧩 Subnet 1: 10.0.0.0/24 (CLOUD)" in text
        assert "Gateway: 10.0.0.1" in text

    def test_firewall_rules(self):
        message = resolve_action(ResourceKind.FIREWALLS, FIREWALL, MenuAction.VIEW_RULES)
        text = render_plain(browsing_state(phase=Phase.FIREWALL_RULE_VIEW, detail=message.detail))
        assert "🧱 Rule 1: IN TCP port 22" in text
        assert "Sources: 0.0.0.0/0 | Destinations: any" in text

    def test_lb_targets_and_services(self):
        targets = resolve_action(ResourceKind.LOAD_BALANCERS, LOAD_BALANCER, MenuAction.VIEW_TARGETS)
        services = resolve_action(ResourceKind.LOAD_BALANCERS, LOAD_BALANCER, MenuAction.VIEW_SERVICES)
        text = render_plain(browsing_state(phase=Phase.LOAD_BALANCER_TARGET_VIEW, detail=targets.detail))
        assert "🎯Target 1: web-1 (Type: server, Target count: 0)" in text
        text = render_plain(browsing_state(phase=Phase.LOAD_BALANCER_SERVICE_VIEW, detail=services.detail))
        assert "🔌Service 1: http (Port: 80 -> 8080)" in text

    def test_server_detail_sections(self):
        detail = DetailView(
            kind=DetailKind.SERVER,
            resource_kind=ResourceKind.SERVERS,
            title="Server: web-1",
            server=WEB_SERVER,
            networks=(BACKEND_NETWORK,),
        )
        state = browsing_state(phase=Phase.SERVER_DETAIL_VIEW, detail=detail)
        sections = server_detail_sections(state)
        assert "Status: running" in sections["Overview"]
        assert "- backend: 10.0.0.2" in sections["Networking"]
        assert sections["Subnets"] == ["backend: 10.0.0.0/24 (eu-central)"]
        assert sections["Volumes"] == []
        assert sections["Labels"] == ["env=prod", "role=web"]
        assert "🖥️ Server: web-1 (ID: 1)" in render_plain(state, width=160)

    def test_error(self):
        text = render_plain(browsing_state(phase=Phase.ERROR, error="unable to authenticate"))
        assert "Error: unable to authenticate" in text


def test_three_servers_and_no_networks():
    servers = (WEB_SERVER, DB_SERVER, replace(DB_SERVER, id=3, name="db-2"))
    state = unloaded_state(active_kind=ResourceKind.NETWORKS)
    state = state.with_entry(ResourceKind.SERVERS, replace(state.entry(ResourceKind.SERVERS), loaded=True, items=servers))
    state = state.with_entry(ResourceKind.NETWORKS, replace(state.entry(ResourceKind.NETWORKS), loaded=True))
    assert "No networks found." in render_plain(state)
