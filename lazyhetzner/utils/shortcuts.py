"""Number key shortcuts for menu items: 1-9, then 0 for the tenth."""

from typing import Optional

from ..config.constants import MAX_MENU_SHORTCUTS


def index_to_shortcut(index: int) -> str:
    """Label for a menu index, or an empty string past the tenth item."""
    if 0 <= index < MAX_MENU_SHORTCUTS - 1:
        return str(index + 1)
    if index == MAX_MENU_SHORTCUTS - 1:
        return "0"
    return ""


def shortcut_to_index(key: str) -> Optional[int]:
    """Menu index for a number key, ``None`` for anything else."""
    if len(key) != 1 or not key.isdigit():
        return None
    if key == "0":
        return MAX_MENU_SHORTCUTS - 1
    return int(key) - 1
