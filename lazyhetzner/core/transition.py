"""
The pure state transition.

``transition(state, message)`` returns the next state and the commands to run.
It never performs I/O; the runtime executes the commands and feeds their
results back in as messages.

Completion messages are applied whatever phase the user is in by the time
they arrive. Two loads of the same kind both land, and the later one wins.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Dict, List, Optional, Tuple

from ..config.constants import TOKEN_CHAR_LIMIT
from ..models.resources import ResourceKind
from ..utils.shortcuts import shortcut_to_index
from .actions import MenuAction
from .commands import (
    ClearStatusAfter,
    Command,
    CreateSnapshot,
    LoadResources,
    LoadServerDetail,
    Quit,
    RunMenuAction,
    SaveConfig,
)
from .context_menu import build_menu
from .messages import (
    ClipboardCopied,
    ConfigLoaded,
    ConfigSaved,
    DetailOpened,
    ErrorOccurred,
    KeyPressed,
    Message,
    ResourcesLoaded,
    ShellLaunched,
    SnapshotRequested,
    StatusCleared,
    StatusNotice,
)
from .state import (
    PARENT_PHASE,
    TEXT_INPUT_PHASES,
    AppState,
    CacheEntry,
    FormState,
    Phase,
    Session,
    empty_cache,
    zero_cursors,
)

Result = Tuple[AppState, List[Command]]

UP_KEYS = ("up", "k")
DOWN_KEYS = ("down", "j")
LEFT_KEYS = ("left", "h")
RIGHT_KEYS = ("right", "l")
BACK_KEYS = ("q", "escape")


def transition(state: AppState, message: Message) -> Result:
    """Apply one message to the state."""
    handler = _HANDLERS.get(type(message))
    if handler is None:
        raise TypeError(f"Unhandled message: {message!r}")
    return handler(state, message)


# =============================================================================
# Shared steps
# =============================================================================


def with_status(state: AppState, text: str) -> Result:
    """Show a status line and schedule its own clear."""
    return replace(state, status_message=text), [ClearStatusAfter()]


def start_load(state: AppState, kind: ResourceKind) -> Result:
    """Mark ``kind`` in flight and request it."""
    if state.session is None:
        return state, []
    entry = replace(state.entry(kind), loaded=False, in_flight=True)
    state = replace(state.with_entry(kind, entry), loading_kind=kind)
    return state, [LoadResources(kind=kind, token=state.session.token)]


def open_session(state: AppState, session: Session) -> Result:
    """Enter the browser with a fresh cache and load the first tab."""
    state = replace(
        state,
        phase=Phase.RESOURCE_VIEW,
        session=session,
        active_kind=ResourceKind.SERVERS,
        cache=empty_cache(),
        cursor=zero_cursors(),
        loading_kind=None,
        context_menu=None,
        detail=None,
        form=None,
        error=None,
    )
    return start_load(state, state.active_kind)


def close_session(state: AppState) -> AppState:
    return replace(
        state,
        phase=Phase.PROJECT_SELECT,
        session=None,
        cache=empty_cache(),
        cursor=zero_cursors(),
        loading_kind=None,
        context_menu=None,
        detail=None,
        form=None,
        error=None,
    )


def switch_tab(state: AppState, kind: ResourceKind) -> Result:
    """Show another tab; load it unless it is loaded or already in flight."""
    if kind is state.active_kind:
        return state, []
    state = replace(state, active_kind=kind)
    entry = state.entry(kind)
    if entry.loaded or entry.in_flight:
        return state, []
    return start_load(state, kind)


def go_back(state: AppState) -> Result:
    """Pop to the parent phase; from the root, quit."""
    parent = PARENT_PHASE[state.phase]
    if parent is None:
        return state, [Quit()]
    if parent is Phase.PROJECT_SELECT:
        return close_session(state), []
    return replace(state, phase=parent, context_menu=None, detail=None, form=None), []


def _move(index: int, delta: int, size: int) -> int:
    if size == 0:
        return 0
    return max(0, min(size - 1, index + delta))


def _vertical_delta(key: str) -> int:
    if key in UP_KEYS:
        return -1
    if key in DOWN_KEYS:
        return 1
    return 0


# =============================================================================
# Key handling per phase
# =============================================================================


def _project_select_key(state: AppState, msg: KeyPressed) -> Result:
    key = msg.key
    if key in BACK_KEYS:
        return go_back(state)
    if state.config is None:
        return state, []

    projects = state.config.projects
    delta = _vertical_delta(key)
    if delta:
        return replace(state, project_cursor=_move(state.project_cursor, delta, len(projects))), []

    if key == "a":
        return replace(state, phase=Phase.PROJECT_MANAGE, form=FormState(values=("", ""))), []
    if key == "t":
        return replace(state, phase=Phase.TOKEN_INPUT, form=FormState(values=("",))), []

    if not projects:
        return state, []
    project = projects[min(state.project_cursor, len(projects) - 1)]

    if key == "enter":
        return open_session(state, Session(project_name=project.name, token=project.token))
    if key in ("d", "delete"):
        config = state.config.without_project(project.name)
        cursor = _move(state.project_cursor, 0, len(config.projects))
        return replace(state, config=config, project_cursor=cursor), [SaveConfig(config)]
    return state, []


def _edit_form(state: AppState, msg: KeyPressed, limit: Optional[int] = None) -> Optional[AppState]:
    """Apply a text-editing key to the focused field; ``None`` if not one."""
    form = state.form
    if form is None:
        return None
    if msg.key == "backspace":
        return replace(state, form=form.with_current(form.current[:-1]))
    char = msg.character
    if char and len(char) == 1 and char.isprintable():
        if limit is not None and len(form.current) >= limit:
            return state
        return replace(state, form=form.with_current(form.current + char))
    return None


def _project_manage_key(state: AppState, msg: KeyPressed) -> Result:
    if msg.key == "escape":
        return go_back(state)
    if msg.key == "tab":
        return replace(state, form=state.form.next_field()), []
    if msg.key == "enter":
        name, token = (value.strip() for value in state.form.values)
        if not name or not token:
            return with_status(state, "Project name and API token are required")
        config = state.config.with_project(name, token)
        state = replace(state, phase=Phase.PROJECT_SELECT, form=None, config=config)
        return state, [SaveConfig(config)]
    edited = _edit_form(state, msg, limit=TOKEN_CHAR_LIMIT if state.form.focus == 1 else None)
    return (edited or state), []


def _token_input_key(state: AppState, msg: KeyPressed) -> Result:
    if msg.key == "escape":
        return go_back(state)
    if msg.key == "enter":
        token = state.form.current.strip()
        if not token:
            return state, []
        return open_session(state, Session(project_name="", token=token))
    edited = _edit_form(state, msg, limit=TOKEN_CHAR_LIMIT)
    return (edited or state), []


def _snapshot_input_key(state: AppState, msg: KeyPressed) -> Result:
    if msg.key == "escape":
        return go_back(state)
    if msg.key == "enter":
        description = state.form.current.strip()
        if not description or state.session is None:
            return state, []
        command = CreateSnapshot(
            server_id=state.form.target_id,
            description=description,
            token=state.session.token,
        )
        return replace(state, phase=Phase.RESOURCE_VIEW, form=None), [command]
    edited = _edit_form(state, msg)
    return (edited or state), []


def _resource_view_key(state: AppState, msg: KeyPressed) -> Result:
    key = msg.key
    kind = state.active_kind

    if key in BACK_KEYS:
        return go_back(state)

    delta = _vertical_delta(key)
    if delta:
        entry = state.entry()
        if not entry.loaded:
            return state, []
        return state.with_cursor(kind, _move(state.cursor[kind], delta, len(entry.items))), []

    if key == "tab":
        return switch_tab(state, kind.next(wrap=True))
    if key in RIGHT_KEYS:
        return switch_tab(state, kind.next(wrap=False))
    if key in LEFT_KEYS:
        return switch_tab(state, kind.previous())

    if key == "r":
        return start_load(state, kind)

    selected = state.selected_resource()
    if selected is None:
        return state, []

    if key == "enter":
        menu = build_menu(kind, selected.id, state.multiplexer)
        return replace(state, phase=Phase.CONTEXT_MENU, context_menu=menu), []
    if key == "i" and kind is ResourceKind.SERVERS and state.session is not None:
        return state, [LoadServerDetail(server_id=selected.id, token=state.session.token)]
    return state, []


def select_menu_item(state: AppState, index: int) -> Result:
    """Run the menu item at ``index`` against the resource the menu was built for."""
    menu = state.context_menu
    if menu is None or not 0 <= index < len(menu.items):
        return state, []
    action = menu.items[index].action
    closed = replace(state, phase=Phase.RESOURCE_VIEW, context_menu=None)

    if action is MenuAction.CANCEL:
        return closed, []
    if action is MenuAction.CREATE_SNAPSHOT:
        form = FormState(values=("",), target_id=menu.resource_id)
        return replace(closed, phase=Phase.SNAPSHOT_INPUT, form=form), []
    if state.session is None:
        return closed, []
    command = RunMenuAction(
        kind=menu.kind,
        resource_id=menu.resource_id,
        action=action,
        token=state.session.token,
    )
    return closed, [command]


def _context_menu_key(state: AppState, msg: KeyPressed) -> Result:
    menu = state.context_menu
    key = msg.key
    if key in BACK_KEYS:
        return go_back(state)

    delta = _vertical_delta(key)
    if delta:
        index = _move(menu.selected_index, delta, len(menu.items))
        return replace(state, context_menu=replace(menu, selected_index=index)), []

    if key == "enter":
        return select_menu_item(state, menu.selected_index)

    index = shortcut_to_index(key)
    if index is not None:
        return select_menu_item(state, index)
    return state, []


def _leaf_view_key(state: AppState, msg: KeyPressed) -> Result:
    if msg.key in BACK_KEYS:
        return go_back(state)
    return state, []


_KEY_HANDLERS: Dict[Phase, Callable[[AppState, KeyPressed], Result]] = {
    Phase.PROJECT_SELECT: _project_select_key,
    Phase.PROJECT_MANAGE: _project_manage_key,
    Phase.TOKEN_INPUT: _token_input_key,
    Phase.RESOURCE_VIEW: _resource_view_key,
    Phase.CONTEXT_MENU: _context_menu_key,
    Phase.LABEL_VIEW: _leaf_view_key,
    Phase.SERVER_DETAIL_VIEW: _leaf_view_key,
    Phase.NETWORK_SUBNET_VIEW: _leaf_view_key,
    Phase.FIREWALL_RULE_VIEW: _leaf_view_key,
    Phase.LOAD_BALANCER_TARGET_VIEW: _leaf_view_key,
    Phase.LOAD_BALANCER_SERVICE_VIEW: _leaf_view_key,
    Phase.SNAPSHOT_INPUT: _snapshot_input_key,
    Phase.ERROR: _leaf_view_key,
}


def _on_key(state: AppState, msg: KeyPressed) -> Result:
    if msg.key == "ctrl+c":
        return state, [Quit()]
    if state.phase in TEXT_INPUT_PHASES and state.form is None:
        return go_back(state)
    return _KEY_HANDLERS[state.phase](state, msg)


# =============================================================================
# Completion messages
# =============================================================================


def _on_config_loaded(state: AppState, msg: ConfigLoaded) -> Result:
    config = msg.config
    state = replace(state, config=config, project_cursor=0)
    if state.phase is not Phase.PROJECT_SELECT or state.session is not None:
        return state, []

    default = config.get_project(config.default_project) if config.default_project else None
    if default is not None:
        return open_session(state, Session(project_name=default.name, token=default.token))
    if not config.projects:
        return replace(state, phase=Phase.TOKEN_INPUT, form=FormState(values=("",))), []
    return state, []


def _on_config_saved(state: AppState, msg: ConfigSaved) -> Result:
    return with_status(state, "✅ Project configuration saved")


def _for_open_session(state: AppState, token: Optional[str]) -> bool:
    """A completion only lands in the session that requested it."""
    if state.session is None:
        return False
    return token is None or token == state.session.token


def _on_resources_loaded(state: AppState, msg: ResourcesLoaded) -> Result:
    if not _for_open_session(state, msg.token):
        return state, []
    state = state.with_entry(msg.kind, CacheEntry(loaded=True, items=tuple(msg.items)))
    cursor = _move(state.cursor[msg.kind], 0, len(msg.items))
    state = state.with_cursor(msg.kind, cursor)
    if state.loading_kind is msg.kind:
        state = replace(state, loading_kind=None)
    return state, []


def _on_detail_opened(state: AppState, msg: DetailOpened) -> Result:
    if not _for_open_session(state, msg.token):
        return state, []
    return replace(state, phase=msg.detail.phase, detail=msg.detail, context_menu=None), []


def _on_status_notice(state: AppState, msg: StatusNotice) -> Result:
    return with_status(state, msg.text)


def _on_status_cleared(state: AppState, msg: StatusCleared) -> Result:
    return replace(state, status_message=None), []


def _on_clipboard_copied(state: AppState, msg: ClipboardCopied) -> Result:
    return with_status(state, f"✅ Copied {msg.text} to clipboard")


def _on_shell_launched(state: AppState, msg: ShellLaunched) -> Result:
    return with_status(state, msg.status)


def _on_snapshot_requested(state: AppState, msg: SnapshotRequested) -> Result:
    return with_status(state, f"📸 Snapshot of {msg.server_name} requested (image {msg.image_id})")


def _on_error(state: AppState, msg: ErrorOccurred) -> Result:
    if msg.kind is not None:
        state = state.with_entry(msg.kind, replace(state.entry(msg.kind), in_flight=False))
        if state.loading_kind is msg.kind:
            state = replace(state, loading_kind=None)
    return replace(state, phase=Phase.ERROR, error=msg.message, context_menu=None, form=None), []


_HANDLERS: Dict[type, Callable[..., Result]] = {
    KeyPressed: _on_key,
    ConfigLoaded: _on_config_loaded,
    ConfigSaved: _on_config_saved,
    ResourcesLoaded: _on_resources_loaded,
    DetailOpened: _on_detail_opened,
    StatusNotice: _on_status_notice,
    StatusCleared: _on_status_cleared,
    ClipboardCopied: _on_clipboard_copied,
    ShellLaunched: _on_shell_launched,
    SnapshotRequested: _on_snapshot_requested,
    ErrorOccurred: _on_error,
}
