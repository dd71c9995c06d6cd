"""
Centralized constants for lazyhetzner.

Magic numbers and tool names used across the state machine, the command
executor and the terminal launchers live here.
"""

from pathlib import Path

# =============================================================================
# PATHS
# =============================================================================

LAZYHETZNER_CONFIG_DIR = Path.home() / ".config" / "lazyhetzner"
CONFIG_FILE_NAME = "config.json"
LOG_FILE_NAME = "lazyhetzner.log"
KEY_LOG_FILE_NAME = "key_events.log"

# =============================================================================
# TIMERS (in seconds)
# =============================================================================

STATUS_CLEAR_DELAY_SECONDS = 3.0  # Status line auto-clear after a notice
PROCESS_TIMEOUT_SECONDS = 10  # tmux/zellij helper commands

# =============================================================================
# SSH & TERMINALS
# =============================================================================

SSH_USER = "root"

# Tried in order on Linux when opening SSH in a new terminal window
LINUX_TERMINALS = ["gnome-terminal", "konsole", "xterm", "alacritty", "kitty", "foot"]

# Terminals that take "--" instead of "-e" before the command
DASH_DASH_TERMINALS = {"gnome-terminal"}

# =============================================================================
# UI
# =============================================================================

APP_TITLE = "lazyhetzner"
ONE_TIME_PROJECT_LABEL = "One-time Access"
TOKEN_PREVIEW_LENGTH = 16  # Characters of an API token shown in the project list
TOKEN_CHAR_LIMIT = 64  # Hetzner Cloud API tokens are 64 characters
MAX_MENU_SHORTCUTS = 10  # Keys 1-9 then 0

# =============================================================================
# ENVIRONMENT VARIABLES
# =============================================================================

ENV_VAR_DEFINITIONS = {
    "LAZYHETZNER_CONFIG": {
        "description": "Path of the project config file",
        "default": None,
        "valid_values": None,
    },
    "LAZYHETZNER_LOG_LEVEL": {
        "description": "Log level for the lazyhetzner log file",
        "default": "INFO",
        "valid_values": ["DEBUG", "INFO", "WARNING", "ERROR"],
    },
}
