"""Tests for phase navigation in the transition function."""

from dataclasses import replace

import pytest

from lazyhetzner.config.projects import AppConfig
from lazyhetzner.core.actions import MenuAction
from lazyhetzner.core.commands import LoadResources, LoadServerDetail, Quit, SaveConfig
from lazyhetzner.core.context_menu import build_menu
from lazyhetzner.core.messages import (
    ConfigLoaded,
    ConfigSaved,
    DetailOpened,
    ErrorOccurred,
    KeyPressed,
)
from lazyhetzner.core.state import (
    PARENT_PHASE,
    AppState,
    DetailKind,
    DetailView,
    FormState,
    Phase,
    Session,
)
from lazyhetzner.core.transition import transition
from lazyhetzner.models.resources import ResourceKind

from conftest import TOKEN, browsing_state


def press(state, key, character=None):
    if character is None and len(key) == 1:
        character = key
    return transition(state, KeyPressed(key, character))


def type_text(state, text):
    for char in text:
        state, _ = press(state, char)
    return state


class TestPhaseTree:
    def test_every_non_root_phase_has_exactly_one_parent(self):
        assert set(PARENT_PHASE) == set(Phase)
        roots = [phase for phase, parent in PARENT_PHASE.items() if parent is None]
        assert roots == [Phase.PROJECT_SELECT]

    def test_parents_lead_back_to_root(self):
        for phase in Phase:
            seen = set()
            while PARENT_PHASE[phase] is not None:
                assert phase not in seen
                seen.add(phase)
                phase = PARENT_PHASE[phase]
            assert phase is Phase.PROJECT_SELECT

    def test_back_from_root_quits(self):
        state = AppState(config=AppConfig())
        _, commands = press(state, "q")
        assert commands == [Quit()]

    @pytest.mark.parametrize(
        "phase",
        [
            Phase.LABEL_VIEW,
            Phase.SERVER_DETAIL_VIEW,
            Phase.NETWORK_SUBNET_VIEW,
            Phase.FIREWALL_RULE_VIEW,
            Phase.LOAD_BALANCER_TARGET_VIEW,
            Phase.LOAD_BALANCER_SERVICE_VIEW,
        ],
    )
    def test_detail_views_return_to_resource_view(self, phase):
        state = browsing_state(phase=phase)
        new_state, commands = press(state, "q")
        assert new_state.phase is Phase.RESOURCE_VIEW
        assert new_state.detail is None
        assert commands == []

    def test_back_from_resource_view_drops_session(self):
        state = browsing_state()
        new_state, commands = press(state, "escape")
        assert new_state.phase is Phase.PROJECT_SELECT
        assert new_state.session is None
        assert not new_state.entry(ResourceKind.SERVERS).loaded
        assert commands == []

    def test_error_phase_only_accepts_back(self):
        state = browsing_state(phase=Phase.ERROR, error="boom")
        for key in ("j", "enter", "r", "tab"):
            unchanged, commands = press(state, key)
            assert unchanged == state
            assert commands == []
        new_state, _ = press(state, "q")
        assert new_state.phase is Phase.PROJECT_SELECT
        assert new_state.error is None

    def test_ctrl_c_quits_from_any_phase(self):
        for phase in (Phase.RESOURCE_VIEW, Phase.ERROR, Phase.LABEL_VIEW):
            _, commands = press(browsing_state(phase=phase), "ctrl+c")
            assert commands == [Quit()]


class TestProjectSelect:
    def test_enter_opens_session_and_loads_first_tab(self, two_projects):
        state = AppState(config=two_projects, project_cursor=1)
        new_state, commands = press(state, "enter")
        assert new_state.phase is Phase.RESOURCE_VIEW
        assert new_state.session == Session(project_name="staging", token="s" * 64)
        assert commands == [LoadResources(kind=ResourceKind.SERVERS, token="s" * 64)]
        assert new_state.loading_kind is ResourceKind.SERVERS

    def test_cursor_moves_within_bounds(self, two_projects):
        state = AppState(config=two_projects)
        state, _ = press(state, "k")
        assert state.project_cursor == 0
        state, _ = press(state, "down")
        state, _ = press(state, "j")
        assert state.project_cursor == 1

    def test_delete_removes_highlighted_project_and_saves(self, two_projects):
        state = AppState(config=two_projects)
        new_state, commands = press(state, "d")
        assert [p.name for p in new_state.config.projects] == ["staging"]
        assert new_state.config.default_project == "staging"
        assert commands == [SaveConfig(new_state.config)]

    def test_keys_ignored_until_config_loaded(self):
        state = AppState()
        assert press(state, "enter") == (state, [])
        assert press(state, "a") == (state, [])

    def test_config_saved_shows_status(self, two_projects):
        state = AppState(config=two_projects)
        new_state, commands = transition(state, ConfigSaved(two_projects))
        assert new_state.status_message == "✅ Project configuration saved"
        assert len(commands) == 1


class TestConfigBootstrap:
    def test_default_project_is_auto_selected(self, two_projects):
        new_state, commands = transition(AppState(), ConfigLoaded(two_projects))
        assert new_state.phase is Phase.RESOURCE_VIEW
        assert new_state.session.project_name == "prod"
        assert commands == [LoadResources(kind=ResourceKind.SERVERS, token=TOKEN)]

    def test_no_projects_opens_token_input(self):
        new_state, commands = transition(AppState(), ConfigLoaded(AppConfig()))
        assert new_state.phase is Phase.TOKEN_INPUT
        assert new_state.form == FormState(values=("",))
        assert commands == []

    def test_projects_without_default_stay_on_select(self):
        config = AppConfig(projects=AppConfig().with_project("a", "x").projects, default_project="")
        new_state, commands = transition(AppState(), ConfigLoaded(config))
        assert new_state.phase is Phase.PROJECT_SELECT
        assert commands == []


class TestForms:
    def test_add_project_form(self):
        state = AppState(config=AppConfig())
        state, _ = press(state, "a")
        assert state.phase is Phase.PROJECT_MANAGE
        state = type_text(state, "prod")
        state, _ = press(state, "tab")
        state = type_text(state, "secret")
        state, _ = press(state, "backspace")
        new_state, commands = press(state, "enter")

        assert new_state.phase is Phase.PROJECT_SELECT
        assert new_state.config.get_project("prod").token == "secre"
        assert new_state.config.default_project == "prod"
        assert commands == [SaveConfig(new_state.config)]

    def test_add_project_requires_both_fields(self):
        state = AppState(config=AppConfig(), phase=Phase.PROJECT_MANAGE, form=FormState(values=("prod", "")))
        new_state, _ = press(state, "enter")
        assert new_state.phase is Phase.PROJECT_MANAGE
        assert new_state.status_message == "Project name and API token are required"

    def test_q_is_typed_in_text_fields(self):
        state = AppState(config=AppConfig(), phase=Phase.TOKEN_INPUT, form=FormState(values=("",)))
        new_state, commands = press(state, "q")
        assert new_state.phase is Phase.TOKEN_INPUT
        assert new_state.form.current == "q"
        assert commands == []

    def test_escape_leaves_form(self):
        state = AppState(config=AppConfig(), phase=Phase.PROJECT_MANAGE, form=FormState(values=("a", "b")))
        new_state, _ = press(state, "escape")
        assert new_state.phase is Phase.PROJECT_SELECT
        assert new_state.form is None

    def test_token_entry_opens_one_time_session(self):
        state = AppState(config=AppConfig(), phase=Phase.TOKEN_INPUT, form=FormState(values=("",)))
        state = type_text(state, "abc")
        new_state, commands = press(state, "enter")
        assert new_state.phase is Phase.RESOURCE_VIEW
        assert new_state.session.is_one_time
        assert new_state.config == AppConfig()
        assert commands == [LoadResources(kind=ResourceKind.SERVERS, token="abc")]

    def test_token_is_capped_at_64_characters(self):
        state = AppState(config=AppConfig(), phase=Phase.TOKEN_INPUT, form=FormState(values=("x" * 64,)))
        new_state, _ = press(state, "y")
        assert new_state.form.current == "x" * 64


class TestResourceView:
    def test_cursor_moves_and_clamps(self):
        state = browsing_state()
        state, _ = press(state, "j")
        state, _ = press(state, "j")
        assert state.cursor[ResourceKind.SERVERS] == 1
        state, _ = press(state, "up")
        assert state.cursor[ResourceKind.SERVERS] == 0

    def test_tab_wraps_and_arrows_do_not(self):
        state = browsing_state(active_kind=ResourceKind.VOLUMES)
        state, _ = press(state, "right")
        assert state.active_kind is ResourceKind.VOLUMES
        state, _ = press(state, "tab")
        assert state.active_kind is ResourceKind.SERVERS
        state, _ = press(state, "h")
        assert state.active_kind is ResourceKind.SERVERS
        state, _ = press(state, "l")
        assert state.active_kind is ResourceKind.NETWORKS

    def test_enter_opens_menu_for_selected_id(self):
        state = browsing_state()
        state, _ = press(state, "j")
        new_state, commands = press(state, "enter")
        assert new_state.phase is Phase.CONTEXT_MENU
        assert new_state.context_menu == build_menu(ResourceKind.SERVERS, 2)
        assert commands == []

    def test_enter_on_empty_tab_does_nothing(self):
        state = browsing_state()
        state = state.with_entry(ResourceKind.NETWORKS, replace(state.entry(ResourceKind.NETWORKS), items=()))
        state = replace(state, active_kind=ResourceKind.NETWORKS)
        assert press(state, "enter") == (state, [])

    def test_i_requests_server_detail(self):
        new_state, commands = press(browsing_state(), "i")
        assert new_state.phase is Phase.RESOURCE_VIEW
        assert commands == [LoadServerDetail(server_id=1, token=TOKEN)]

    def test_i_ignored_outside_servers(self):
        state = browsing_state(active_kind=ResourceKind.NETWORKS)
        assert press(state, "i") == (state, [])


class TestCompletions:
    def test_detail_opened_enters_matching_phase(self):
        detail = DetailView(kind=DetailKind.SUBNETS, resource_kind=ResourceKind.NETWORKS, title="Network: backend")
        new_state, _ = transition(browsing_state(), DetailOpened(detail))
        assert new_state.phase is Phase.NETWORK_SUBNET_VIEW
        assert new_state.detail == detail

    def test_error_clears_in_flight_for_failed_kind(self):
        state, _ = press(browsing_state(), "r")
        assert state.entry().in_flight
        new_state, _ = transition(state, ErrorOccurred("unauthorized", kind=ResourceKind.SERVERS))
        assert new_state.phase is Phase.ERROR
        assert new_state.error == "unauthorized"
        assert not new_state.entry(ResourceKind.SERVERS).in_flight
        assert new_state.loading_kind is None

    def test_create_snapshot_opens_form_without_fetch(self):
        state = browsing_state(phase=Phase.CONTEXT_MENU, context_menu=build_menu(ResourceKind.SERVERS, 1))
        index = [item.action for item in state.context_menu.items].index(MenuAction.CREATE_SNAPSHOT)
        new_state, commands = press(state, str(index + 1))
        assert new_state.phase is Phase.SNAPSHOT_INPUT
        assert new_state.form.target_id == 1
        assert commands == []


class TestMenuShortcuts:
    @pytest.mark.parametrize("index", range(10))
    def test_number_key_matches_arrows_and_enter(self, index):
        menu = build_menu(ResourceKind.SERVERS, 1)
        if index >= len(menu.items):
            pytest.skip("menu shorter than shortcut range")
        state = browsing_state(phase=Phase.CONTEXT_MENU, context_menu=menu)

        by_number, number_commands = press(state, "0" if index == 9 else str(index + 1))

        by_arrows = state
        for _ in range(index):
            by_arrows, _ = press(by_arrows, "down")
        by_arrows, arrow_commands = press(by_arrows, "enter")

        assert number_commands == arrow_commands
        assert by_number.phase is by_arrows.phase
        assert by_number.form == by_arrows.form
