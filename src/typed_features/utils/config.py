"""
Configuration Loader
Load and validate configuration files with environment variable substitution.
"""
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional
import yaml

_PLACEHOLDER = re.compile(r'\$\{([^}:]+)(?::([^}]*))?\}')

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "configs" / "feature_config.yaml"


def _substitute_env_vars(value: Any) -> Any:
    """
    Substitute environment variables in string values.

    Supports patterns:
    - ${VAR_NAME} - Left untouched if not set
    - ${VAR_NAME:default} - Optional with default value
    """

    if not isinstance(value, str):
        return value

    def replacer(match):
        var_name = match.group(1)
        default = match.group(2)

        env_value = os.environ.get(var_name)

        if env_value is not None:
            return env_value
        elif default is not None:
            return default
        else:
            # Return original if no env var and no default
            return match.group(0)

    return _PLACEHOLDER.sub(replacer, value)


_TRUE_STRINGS = {"true", "yes", "on", "1"}
_FALSE_STRINGS = {"false", "no", "off", "0", ""}


def _as_bool(value: Any) -> bool:
    """Interpret a YAML bool or a substituted string as a flag."""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise ValueError(f"Expected a boolean setting, got {value!r}")


def _process_config(config: Any) -> Any:
    """Recursively process config and substitute env vars."""
    if isinstance(config, dict):
        return {k: _process_config(v) for k, v in config.items()}
    elif isinstance(config, list):
        return [_process_config(v) for v in config]
    else:
        return _substitute_env_vars(config)


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load a YAML configuration file with environment variable substitution.

    Args:
        config_path: Path to YAML config file

    Returns:
        Parsed configuration dictionary
    """
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, 'r') as f:
        config = yaml.safe_load(f)

    return _process_config(config or {})


def load_feature_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load feature builder configuration."""
    if config_path is None:
        config_path = os.environ.get("TYPED_FEATURES_CONFIG_PATH", DEFAULT_CONFIG_PATH)
    return load_config(str(config_path))


class Config:
    """
    Centralized configuration access.

    Example:
        >>> config = Config()
        >>> print(config.default_feature_name)
        >>> print(config.settings['uid']['length'])
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._settings = None
        self._config_path: Optional[str] = None
        self._initialized = True

    @property
    def settings(self) -> Dict[str, Any]:
        """Get feature builder configuration."""
        if self._settings is None:
            self._settings = load_feature_config(self._config_path)
        return self._settings

    def _get(self, section: str, key: str, default: Any) -> Any:
        value = self.settings.get(section, {}).get(key)
        return default if value is None else value

    @property
    def default_feature_name(self) -> str:
        """Name used for features built without an explicit name."""
        return str(self._get("builder", "default_feature_name", "feature"))

    @property
    def log_extract_failures(self) -> bool:
        return _as_bool(self._get("extraction", "log_failures", False))

    @property
    def failure_log_level(self) -> int:
        """Numeric log level for masked extraction failures (DEBUG if unknown)."""
        name = str(self._get("extraction", "failure_log_level", "DEBUG")).upper()
        level = logging.getLevelName(name)
        return level if isinstance(level, int) else logging.DEBUG

    @property
    def text_separator(self) -> str:
        return str(self._get("aggregation", "text_separator", " "))

    @property
    def uid_length(self) -> int:
        return int(self._get("uid", "length", 12))

    @property
    def mlflow_artifact_file(self) -> str:
        return str(self._get("mlflow", "artifact_file", "features.json"))

    @property
    def version(self) -> str:
        return str(self._get("metadata", "version", "unknown"))

    def use(self, config_path: Optional[str]) -> None:
        """Point the configuration at a different YAML file and reload it."""
        self._config_path = config_path
        self.reload()

    def reload(self):
        """Force reload all configurations."""
        self._settings = None


# Global config instance
config = Config()
