# global_config_parser.py
"""
YAML configuration for P4 Structure Lens.

global_config.yaml is read once per run. Values are addressed by dot-path
(``extraction.key_field_mode``, ``llm.timeout``), may reference the
environment as ``${VAR}`` or ``${VAR:-default}``, and a handful of them can be
overridden outright by environment variables (see ENV_OVERRIDES).

Dependencies: PyYAML (pip install pyyaml)

Usage:
    from utils.parsers.global_config_parser import GlobalConfig

    config = GlobalConfig()                                  # auto-discover
    config = GlobalConfig(config_file="base.yaml", override_file="local.yaml")

    timeout = config.get_int("llm.timeout", 60)
    split   = config.get_bool("extraction.split_statements", True)
    out_dir = config.get_path("paths.out_dir", "out")
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)


# Environment variable -> dot-path it replaces
ENV_OVERRIDES: Dict[str, str] = {
    "OUT_DIR": "paths.out_dir",
    "EXPLAIN_PROMPT_FILE_PATH": "paths.explain_prompt_file_path",
    "LLM_API_KEY": "llm.llm_api_key",
    "LLM_MODEL": "llm.model",
    "LLM_MAX_TOKENS": "llm.max_tokens",
    "LLM_TEMPERATURE": "llm.temperature",
    "LLM_TIMEOUT": "llm.timeout",
    "LLM_MAX_RETRIES": "llm.max_retries",
    "P4_SPLIT_STATEMENTS": "extraction.split_statements",
    "P4_STRIP_COMMENTS": "extraction.strip_comments",
    "P4_KEY_FIELD_MODE": "extraction.key_field_mode",
    "LOG_LEVEL": "logging.level",
    "DEBUG": "logging.debug",
}

# ${VAR} or ${VAR:-default}
_ENV_REF = re.compile(r"\$\{([^}:]+)(?::-(.*?))?\}")

# Looked up in the working directory first, then at the project root
CONFIG_NAMES = ("global_config.yaml", "config/global_config.yaml")

_TRUE_STRINGS = ("1", "true", "yes", "on")


class ConfigError(Exception):
    """Base error for configuration problems."""


class ConfigFileError(ConfigError):
    """A configuration file is missing, unreadable or not valid YAML."""


def _read_yaml(filepath: str) -> Dict[str, Any]:
    try:
        with open(filepath, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigFileError(f"Failed to load YAML config '{filepath}': {e}") from e
    return data if isinstance(data, dict) else {}


def _expand_env(value: Any) -> Any:
    """Substitute ${VAR} references in every string of a loaded document."""
    if isinstance(value, dict):
        return {k: _expand_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env(v) for v in value]
    if not isinstance(value, str):
        return value

    def _sub(match):
        found = os.environ.get(match.group(1))
        if found is not None:
            return found
        # Unknown variable without a default stays as written
        return match.group(2) if match.group(2) is not None else match.group(0)

    return _ENV_REF.sub(_sub, value)


def _merge(base: Dict[str, Any], layer: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, val in layer.items():
        if isinstance(val, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], val)
        else:
            merged[key] = val
    return merged


class GlobalConfig:
    """
    Dot-path view over global_config.yaml.

    Load order: base file, optional override file (deep-merged), ``${VAR}``
    expansion, then ENV_OVERRIDES. An explicitly named base file that does
    not exist is an error; a missing auto-discovered file is not.
    """

    def __init__(self, config_file: Optional[str] = None, override_file: Optional[str] = None):
        self._data: Dict[str, Any] = {}
        self.config_file: Optional[str] = None
        self.load(config_file, override_file)

    def load(self, config_file: Optional[str] = None, override_file: Optional[str] = None) -> None:
        if config_file and not os.path.isfile(config_file):
            raise ConfigFileError(f"Config file not found: {config_file}")

        self.config_file = config_file or self._discover()
        if self.config_file:
            data = _read_yaml(self.config_file)
        else:
            logger.info("No YAML config file found; using defaults and environment.")
            data = {}

        if override_file and os.path.isfile(override_file):
            data = _merge(data, _read_yaml(override_file))
            logger.info("Applied override config: %s", override_file)

        data = _expand_env(data)
        for env_key, dot_path in ENV_OVERRIDES.items():
            if env_key in os.environ:
                self._set(data, dot_path, os.environ[env_key])
        self._data = data

    @staticmethod
    def _discover() -> Optional[str]:
        project_root = Path(__file__).resolve().parent.parent.parent
        for base in (Path.cwd(), project_root):
            for name in CONFIG_NAMES:
                if (base / name).is_file():
                    return str(base / name)
        return None

    @staticmethod
    def _set(data: Dict[str, Any], dot_path: str, value: Any) -> None:
        *parents, leaf = dot_path.split(".")
        node = data
        for key in parents:
            if not isinstance(node.get(key), dict):
                node[key] = {}
            node = node[key]
        node[leaf] = value

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return default if node is None else node

    def get_bool(self, key: str, default: bool = False) -> bool:
        val = self.get(key)
        if val is None:
            return default
        if isinstance(val, str):
            return val.strip().lower() in _TRUE_STRINGS
        return bool(val)

    def get_int(self, key: str, default: int = 0) -> int:
        try:
            return int(self.get(key, default))
        except (ValueError, TypeError):
            logger.warning("Config value %s is not an integer; using %s", key, default)
            return default

    def get_float(self, key: str, default: float = 0.0) -> float:
        try:
            return float(self.get(key, default))
        except (ValueError, TypeError):
            logger.warning("Config value %s is not a number; using %s", key, default)
            return default

    def get_path(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Path value with ``~`` expanded, resolved against the working directory."""
        val = self.get(key) or default
        if not val:
            return None
        return str(Path(str(val)).expanduser().resolve())
