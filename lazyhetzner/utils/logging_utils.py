"""Logging setup for the TUI.

Modules log the standard way::

    import logging
    logger = logging.getLogger(__name__)

The TUI owns the terminal, so ``setup_tui_logging`` sends records to rotating
files under the config directory instead of stderr.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from ..config.constants import KEY_LOG_FILE_NAME, LAZYHETZNER_CONFIG_DIR, LOG_FILE_NAME

# Max log file size: 5MB, keep 2 backups
_MAX_LOG_BYTES = 5 * 1024 * 1024
_BACKUP_COUNT = 2


def setup_tui_logging(
    level: int = logging.INFO,
    log_dir: Optional[Path] = None,
) -> tuple[logging.Logger, logging.Logger]:
    """
    Set up file logging for a TUI session.

    The root logger is set to WARNING to keep third-party noise out.
    lazyhetzner.* loggers use ``level``. Key events get a separate file that
    only receives records when ``level`` is DEBUG.

    Returns:
        tuple: (main_logger, key_events_logger)
    """
    log_dir = log_dir or LAZYHETZNER_CONFIG_DIR
    try:
        log_dir.mkdir(parents=True, exist_ok=True)

        if not logging.getLogger().handlers:
            handler = RotatingFileHandler(
                log_dir / LOG_FILE_NAME, maxBytes=_MAX_LOG_BYTES, backupCount=_BACKUP_COUNT
            )
            handler.setFormatter(
                logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
            )
            logging.basicConfig(level=logging.WARNING, handlers=[handler])

        main_logger = logging.getLogger("lazyhetzner")
        main_logger.setLevel(level)

        key_logger = logging.getLogger("key_events")
        if not key_logger.handlers:
            key_handler = RotatingFileHandler(
                log_dir / KEY_LOG_FILE_NAME, maxBytes=_MAX_LOG_BYTES, backupCount=_BACKUP_COUNT
            )
            key_handler.setFormatter(logging.Formatter("%(asctime)s - %(message)s"))
            key_logger.addHandler(key_handler)
            key_logger.propagate = False
        key_logger.setLevel(logging.DEBUG if level <= logging.DEBUG else logging.WARNING)

        return main_logger, key_logger

    except OSError as e:
        # Logging is what failed, so report on stderr
        print(f"Warning: TUI logging setup failed: {e}", file=sys.stderr)
        return logging.getLogger("lazyhetzner"), logging.getLogger("key_events")


def level_from_name(name: Optional[str], verbose: bool = False) -> int:
    """Log level for ``--verbose`` or a LAZYHETZNER_LOG_LEVEL value."""
    if verbose:
        return logging.DEBUG
    if not name:
        return logging.INFO
    return logging.getLevelName(name.upper())
