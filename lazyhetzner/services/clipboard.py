"""System clipboard access."""

import logging

import pyperclip

from ..exceptions import ClipboardError

logger = logging.getLogger(__name__)


def write_all(text: str) -> None:
    """Replace the clipboard contents with ``text``.

    Raises:
        ClipboardError: If no clipboard mechanism is available or the write fails.
    """
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        logger.warning(f"Clipboard write failed: {e}")
        raise ClipboardError(f"Failed to copy to clipboard: {e}") from e
    logger.debug(f"Copied {len(text)} characters to clipboard")
