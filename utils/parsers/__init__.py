"""
utils.parsers - Configuration loading.

Modules:
    global_config_parser - YAML configuration loader (GlobalConfig)
"""

from utils.parsers.global_config_parser import (
    GlobalConfig,
    ConfigError,
    ConfigFileError,
)

__all__ = [
    "GlobalConfig",
    "ConfigError",
    "ConfigFileError",
]
