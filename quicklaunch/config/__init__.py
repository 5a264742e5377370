"""Configuration module for quicklaunch."""

from quicklaunch.config.loader import get_config_path, load_config, save_config
from quicklaunch.config.schema import AppsConfig, Config, FilesConfig, FrecencyConfig

__all__ = [
    "AppsConfig",
    "Config",
    "FilesConfig",
    "FrecencyConfig",
    "get_config_path",
    "load_config",
    "save_config",
]
