"""Configuration for lazyhetzner."""

from .projects import AppConfig, ProjectConfig
from .settings import get_config_path, load_config, save_config

__all__ = ["AppConfig", "ProjectConfig", "get_config_path", "load_config", "save_config"]
