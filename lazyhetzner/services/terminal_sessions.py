"""
Terminal multiplexer detection and SSH launchers.

Detection reads the environment once at start-up. The launchers build the
argv for each SSH variant and run it; a process that fails to start raises
:class:`ProcessLaunchError` so the caller can show a notice.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Mapping, Optional

from ..config.constants import (
    DASH_DASH_TERMINALS,
    LINUX_TERMINALS,
    PROCESS_TIMEOUT_SECONDS,
    SSH_USER,
)
from ..exceptions import ProcessLaunchError

logger = logging.getLogger(__name__)


class Multiplexer(Enum):
    NONE = "none"
    TMUX = "tmux"
    ZELLIJ = "zellij"


@dataclass(frozen=True)
class SessionInfo:
    """The multiplexer the application runs inside, if any."""

    type: Multiplexer = Multiplexer.NONE
    session_name: str = ""
    window_name: str = ""
    pane_name: str = ""


def _tmux_session_name() -> str:
    try:
        result = subprocess.run(
            ["tmux", "display-message", "-p", "#S"],
            capture_output=True,
            text=True,
            timeout=PROCESS_TIMEOUT_SECONDS,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug(f"Could not read tmux session name: {e}")
        return ""
    if result.returncode != 0:
        return ""
    return result.stdout.strip()


def detect_multiplexer(
    environ: Optional[Mapping[str, str]] = None,
    tmux_session_name: Callable[[], str] = _tmux_session_name,
) -> SessionInfo:
    """Detect whether we run inside tmux or zellij.

    tmux wins when both are set. The tmux session name falls back to asking
    tmux itself when ``TMUX_SESSION`` is not exported.
    """
    env = os.environ if environ is None else environ

    if env.get("TMUX"):
        session_name = env.get("TMUX_SESSION", "")
        if not session_name:
            session_name = tmux_session_name()
        return SessionInfo(
            type=Multiplexer.TMUX,
            session_name=session_name,
            window_name=env.get("TMUX_WINDOW", ""),
            pane_name=env.get("TMUX_PANE", ""),
        )

    if env.get("ZELLIJ"):
        return SessionInfo(
            type=Multiplexer.ZELLIJ,
            session_name=env.get("ZELLIJ_SESSION_NAME", ""),
        )

    return SessionInfo()


# =============================================================================
# Command builders
# =============================================================================


def ssh_target(ip: str) -> str:
    return f"{SSH_USER}@{ip}"


def session_window_name(ip: str) -> str:
    """Name for a new tmux window or zellij tab, e.g. ``ssh-1-2-3-4``."""
    return "ssh-" + ip.replace(".", "-")


def ssh_command(ip: str) -> List[str]:
    return ["ssh", ssh_target(ip)]


def tmux_window_command(ip: str) -> List[str]:
    return ["tmux", "new-window", "-n", session_window_name(ip), f"ssh {ssh_target(ip)}"]


def tmux_pane_command(ip: str) -> List[str]:
    return ["tmux", "split-window", "-h", f"ssh {ssh_target(ip)}"]


def zellij_tab_command(ip: str) -> List[str]:
    return [
        "zellij", "action", "new-tab", "--name", session_window_name(ip),
        "--", "ssh", ssh_target(ip),
    ]


def zellij_pane_command(ip: str) -> List[str]:
    return ["zellij", "action", "new-pane", "--", "ssh", ssh_target(ip)]


def new_terminal_command(
    ip: str,
    platform: str = sys.platform,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> Optional[List[str]]:
    """Build the command that opens SSH in a new terminal window.

    Returns ``None`` when no terminal emulator could be found.
    """
    target = ssh_target(ip)

    if platform == "darwin":
        return ["osascript", "-e", f'tell application "Terminal" to do script "ssh {target}"']

    if platform.startswith("win"):
        if which("wt"):
            return ["wt", "ssh", target]
        if which("powershell"):
            return ["powershell", "-Command", f"ssh {target}"]
        return ["cmd", "/C", f"ssh {target}"]

    for terminal in LINUX_TERMINALS:
        if which(terminal):
            flag = "--" if terminal in DASH_DASH_TERMINALS else "-e"
            return [terminal, flag, "ssh", target]
    return None


# =============================================================================
# Launchers
# =============================================================================


def _run(argv: List[str], failure: str) -> None:
    logger.info(f"Running: {' '.join(argv)}")
    try:
        subprocess.run(argv, check=True, timeout=PROCESS_TIMEOUT_SECONDS)
    except subprocess.CalledProcessError as e:
        raise ProcessLaunchError(failure, command=" ".join(argv), exit_code=e.returncode) from e
    except (OSError, subprocess.TimeoutExpired) as e:
        raise ProcessLaunchError(f"{failure}: {e}", command=" ".join(argv)) from e


def launch_tmux_window(ip: str) -> str:
    _run(tmux_window_command(ip), "failed to create tmux window")
    return f"🪟 SSH session launched in new tmux window: {session_window_name(ip)}"


def launch_tmux_pane(ip: str) -> str:
    _run(tmux_pane_command(ip), "failed to create tmux pane")
    return "📱 SSH session launched in new tmux pane"


def launch_zellij_tab(ip: str) -> str:
    _run(zellij_tab_command(ip), "failed to create zellij tab")
    return f"🪟 SSH session launched in new zellij tab: {session_window_name(ip)}"


def launch_zellij_pane(ip: str) -> str:
    _run(zellij_pane_command(ip), "failed to create zellij pane")
    return "📱 SSH session launched in new zellij pane"


def launch_new_terminal(ip: str) -> str:
    """Start SSH in a detached terminal window; does not wait for it."""
    argv = new_terminal_command(ip)
    if argv is None:
        raise ProcessLaunchError("no suitable terminal found")
    logger.info(f"Starting: {' '.join(argv)}")
    try:
        subprocess.Popen(
            argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as e:
        raise ProcessLaunchError(str(e), command=" ".join(argv)) from e
    return "🚀 SSH session launched"


def run_ssh_in_terminal(ip: str) -> str:
    """Run SSH attached to the current terminal until it exits.

    The caller is responsible for releasing the terminal first.
    """
    argv = ssh_command(ip)
    logger.info(f"Running in foreground: {' '.join(argv)}")
    try:
        subprocess.run(argv, check=True)
    except subprocess.CalledProcessError as e:
        raise ProcessLaunchError(
            "ssh exited with an error", command=" ".join(argv), exit_code=e.returncode
        ) from e
    except OSError as e:
        raise ProcessLaunchError(str(e), command=" ".join(argv)) from e
    return "🚀 SSH session launched"
