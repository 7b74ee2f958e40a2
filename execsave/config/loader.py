"""
Configuration Loader - Load and merge configuration from multiple sources.

Configuration precedence (low → high):
1. ~/.execsave/config.yaml or config.json (global defaults)
2. <workspace folder>/.execsave/config.yaml or config.json (resource scope)
3. Environment variables (EXECSAVE_*)
4. Runtime overrides

Configuration is read fresh for every document, so two files in different
workspace folders may be processed with different settings.
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..errors import ConfigError
from ..logger import get_logger
from ..logging_config import is_bool_word, parse_bool
from ..permission import Strategy

CONFIG_DIR_NAME = ".execsave"
CONFIG_FILE_NAMES = ("config.yaml", "config.yml", "config.json")

# Keys as the editor exposes them
KEY_ENABLED = "enabled"
KEY_STRATEGY = "permissionStrategy"
KEY_SILENT = "silent"
KEY_SILENT_ERRORS = "silentErrors"

# Keys from the first release, mapped onto the current names
LEGACY_KEYS = {
    "enableShebangMarking": KEY_ENABLED,
}

ENV_MAPPINGS = {
    "EXECSAVE_ENABLED": KEY_ENABLED,
    "EXECSAVE_PERMISSION_STRATEGY": KEY_STRATEGY,
    "EXECSAVE_SILENT": KEY_SILENT,
    "EXECSAVE_SILENT_ERRORS": KEY_SILENT_ERRORS,
}


@dataclass(frozen=True)
class ExecSaveConfig:
    """Resolved configuration for one document.

    Attributes:
        enabled: Process documents on save
        strategy: Strategy used to grant execute bits
        silent: Suppress every notification
        silent_errors: Suppress error notifications only
    """
    enabled: bool = True
    strategy: Strategy = Strategy.UMASK
    silent: bool = False
    silent_errors: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary using the editor key names."""
        return {
            KEY_ENABLED: self.enabled,
            KEY_STRATEGY: self.strategy.value,
            KEY_SILENT: self.silent,
            KEY_SILENT_ERRORS: self.silent_errors,
        }


class ConfigLoader:
    """Load configuration from multiple sources with precedence.

    Example:
        loader = ConfigLoader()
        config = loader.load(project_root="/path/to/workspace")
        print(config.strategy)  # Strategy.UMASK
    """

    def __init__(
        self,
        home_dir: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ):
        """Initialize the config loader.

        Args:
            home_dir: Home directory (default: user's home)
            overrides: Runtime overrides applied last, keyed like the files

        Raises:
            ConfigError: If an override has an invalid value
        """
        self.home_dir = Path(home_dir) if home_dir else Path.home()
        self.global_config_dir = self.home_dir / CONFIG_DIR_NAME
        self.overrides = self._validate_overrides(overrides or {})

    def load(self, project_root: Optional[str] = None) -> ExecSaveConfig:
        """Load and merge configuration from all sources.

        Args:
            project_root: Workspace folder whose .execsave directory applies

        Returns:
            Merged ExecSaveConfig object
        """
        config_dict: Dict[str, Any] = {}

        # 1. Global config (lowest priority)
        config_dict.update(self._load_dir(self.global_config_dir))

        # 2. Workspace folder config
        if project_root:
            config_dict.update(self._load_dir(Path(project_root) / CONFIG_DIR_NAME))

        # 3. Environment variables
        config_dict.update(self._env_values())

        # 4. Runtime overrides
        config_dict.update(self.overrides)

        return ExecSaveConfig(
            enabled=self._to_bool(config_dict, KEY_ENABLED, True),
            strategy=Strategy.from_config(config_dict.get(KEY_STRATEGY)),
            silent=self._to_bool(config_dict, KEY_SILENT, False),
            silent_errors=self._to_bool(config_dict, KEY_SILENT_ERRORS, False),
        )

    def find_config_file(self, config_dir: Path) -> Optional[Path]:
        """Return the first config file present in ``config_dir``."""
        for name in CONFIG_FILE_NAMES:
            candidate = config_dir / name
            try:
                if candidate.is_file():
                    return candidate
            except OSError as e:
                get_logger().warn("config", "config_dir_unreadable", {
                    "path": str(config_dir),
                    "error": e,
                })
                return None
        return None

    def _load_dir(self, config_dir: Path) -> Dict[str, Any]:
        path = self.find_config_file(config_dir)
        if path is None:
            return {}
        return self._normalize_keys(self._load_file(path))

    def _load_file(self, path: Path) -> Dict[str, Any]:
        """Load a YAML or JSON configuration file.

        Args:
            path: Path to the file

        Returns:
            Parsed mapping, or empty dict if the file is unusable
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                if path.suffix == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
            get_logger().warn("config", "config_file_unreadable", {
                "path": str(path),
                "error": e,
            })
            return {}

        if data is None:
            return {}
        if not isinstance(data, dict):
            get_logger().warn("config", "config_file_not_mapping", {
                "path": str(path),
                "type": type(data).__name__,
            })
            return {}
        return data

    def _normalize_keys(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Map legacy key names onto current ones.

        A current key wins over its legacy alias when both are present.
        """
        result = dict(data)
        for legacy, current in LEGACY_KEYS.items():
            if legacy in result:
                value = result.pop(legacy)
                result.setdefault(current, value)
        return result

    def _env_values(self) -> Dict[str, Any]:
        """Collect environment variable overrides.

        Examples:
            EXECSAVE_ENABLED=0 -> config["enabled"] = "0"
            EXECSAVE_PERMISSION_STRATEGY=all -> config["permissionStrategy"]
        """
        values: Dict[str, Any] = {}
        for env_var, config_key in ENV_MAPPINGS.items():
            value = os.environ.get(env_var)
            if value is not None:
                values[config_key] = value
        return values

    def _to_bool(self, config: Dict[str, Any], key: str, default: bool) -> bool:
        value = config.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and is_bool_word(value):
            return parse_bool(value, default)
        get_logger().warn("config", "invalid_bool", {
            "key": key,
            "value": value,
            "default": default,
        })
        return default

    def _validate_overrides(self, overrides: Dict[str, Any]) -> Dict[str, Any]:
        overrides = self._normalize_keys(overrides)
        known = {KEY_ENABLED, KEY_STRATEGY, KEY_SILENT, KEY_SILENT_ERRORS}
        for key, value in overrides.items():
            if key not in known:
                raise ConfigError(f"Unknown configuration key: {key}")
            if key == KEY_STRATEGY:
                if isinstance(value, Strategy):
                    overrides[key] = value.value
                elif not isinstance(value, str):
                    raise ConfigError(f"{key} must be a strategy name, got {value!r}")
            elif not isinstance(value, bool):
                raise ConfigError(f"{key} must be a bool, got {value!r}")
        return overrides


def load_config(
    project_root: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> ExecSaveConfig:
    """Convenience function to load configuration.

    Args:
        project_root: Optional workspace folder
        overrides: Optional runtime overrides

    Returns:
        Loaded ExecSaveConfig
    """
    loader = ConfigLoader(overrides=overrides)
    return loader.load(project_root=project_root)
