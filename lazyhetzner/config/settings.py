"""Configuration utilities for lazyhetzner."""

import json
import logging
import os
from pathlib import Path
from typing import List, Optional, Tuple

from ..exceptions import ConfigLoadError, ConfigSaveError
from .constants import CONFIG_FILE_NAME, ENV_VAR_DEFINITIONS, LAZYHETZNER_CONFIG_DIR
from .projects import AppConfig

logger = logging.getLogger(__name__)


def get_config_path(override: Optional[Path] = None) -> Path:
    """Get the project config path.

    An explicit ``override`` wins, then the LAZYHETZNER_CONFIG environment
    variable, then ``~/.config/lazyhetzner/config.json``.
    """
    if override is not None:
        return Path(override)

    env_path = os.environ.get("LAZYHETZNER_CONFIG")
    if env_path:
        return Path(env_path)

    return LAZYHETZNER_CONFIG_DIR / CONFIG_FILE_NAME


def validate_env_var(name: str, value: Optional[str]) -> Tuple[bool, Optional[str]]:
    """Validate a single environment variable value.

    Returns:
        Tuple of (is_valid, error_message).
    """
    if name not in ENV_VAR_DEFINITIONS or value is None:
        return True, None

    valid_values = ENV_VAR_DEFINITIONS[name].get("valid_values")
    if valid_values is None:
        return True, None

    if value.upper() not in [v.upper() for v in valid_values]:
        return False, f"Invalid value '{value}' for {name}. Valid values: {valid_values}"

    return True, None


def validate_all_env_vars() -> List[str]:
    """Validate all lazyhetzner environment variables.

    Returns:
        List of error messages (empty if all valid).
    """
    errors = []
    for name in ENV_VAR_DEFINITIONS:
        is_valid, error = validate_env_var(name, os.environ.get(name))
        if not is_valid:
            errors.append(error)
    return errors


def get_env_var(name: str) -> Optional[str]:
    """Get an environment variable, falling back to its documented default.

    Raises:
        ValueError: If the value is not one of the documented values.
    """
    value = os.environ.get(name)
    is_valid, error = validate_env_var(name, value)
    if not is_valid:
        raise ValueError(error)

    if value is None and name in ENV_VAR_DEFINITIONS:
        return ENV_VAR_DEFINITIONS[name].get("default")
    return value


def load_config(path: Path) -> AppConfig:
    """Read the project config; a missing file is an empty config."""
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.info(f"No config at {path}, starting with no projects")
        return AppConfig()
    except OSError as e:
        raise ConfigLoadError(str(e), path=str(path)) from e

    try:
        data = json.loads(raw)
        config = AppConfig.from_dict(data)
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise ConfigLoadError(f"Invalid config file: {e}", path=str(path)) from e

    logger.info(f"Loaded {len(config.projects)} project(s) from {path}")
    return config


def save_config(config: AppConfig, path: Path) -> None:
    """Write the project config; tokens are secrets so the file is 0600."""
    try:
        path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        path.write_text(json.dumps(config.to_dict(), indent=2), encoding="utf-8")
        os.chmod(path, 0o600)
    except OSError as e:
        raise ConfigSaveError(str(e), path=str(path)) from e

    logger.info(f"Saved {len(config.projects)} project(s) to {path}")
