"""
Configuration System

YAML configuration loading shared by the logger, the file-backed declaration
sources and the CLI. Features:
- Single-file YAML loading with validation and error handling
- .env loading and environment variable resolution (${VAR}, ${VAR:-default}, $VAR)
- Dot-notation access to nested values
- One cached builder per configuration file plus a default singleton
"""

import copy
import logging
import os
import re
import threading
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

# Use standard logging (not get_logger) to avoid circular imports with logger.py
logger = logging.getLogger("CONFIG")

_ENV_PATTERN = re.compile(r"\$\{([^}:]+)(?::-(.*?))?\}|\$([A-Za-z_][A-Za-z0-9_]*)")


def resolve_env_vars(data: Any) -> Any:
    """Recursively resolve environment variables in configuration data.

    Supports both simple and bash-style default value syntax:
    - ${VAR_NAME} - simple substitution
    - ${VAR_NAME:-default_value} - with default value
    - $VAR_NAME - simple substitution without braces

    Unset variables without a default are left untouched.
    """
    if isinstance(data, dict):
        return {key: resolve_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [resolve_env_vars(item) for item in data]
    elif isinstance(data, str):

        def replace_env_var(match):
            if match.group(1):  # ${VAR_NAME:-default} or ${VAR_NAME}
                var_name = match.group(1)
                default_value = match.group(2)
            else:  # $VAR_NAME
                var_name = match.group(3)
                default_value = None

            env_value = os.environ.get(var_name)
            if env_value is None:
                if default_value is not None:
                    return default_value
                logger.debug(f"Environment variable '{var_name}' not found, keeping original value")
                return match.group(0)
            return env_value

        return _ENV_PATTERN.sub(replace_env_var, data)
    else:
        return data


def load_yaml_file(file_path: str | Path) -> dict[str, Any]:
    """Load and validate a YAML configuration file.

    Returns:
        The mapping stored in the file, or an empty dict for an empty file

    Raises:
        ValueError: If the document is not a mapping
        yaml.YAMLError: If the file cannot be parsed
    """
    file_path = Path(file_path)
    try:
        with open(file_path, encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        error_msg = f"Error parsing YAML configuration {file_path}: {e}"
        logger.error(error_msg)
        raise yaml.YAMLError(error_msg) from e

    if config is None:
        logger.warning(f"Configuration file is empty: {file_path}")
        return {}

    if not isinstance(config, dict):
        error_msg = f"Configuration file must contain a dictionary/mapping: {file_path}"
        logger.error(error_msg)
        raise ValueError(error_msg)

    logger.debug(f"Loaded configuration from {file_path}")
    return config


class ConfigBuilder:
    """
    Configuration builder for a single config.yml file.

    Features:
    - YAML loading with validation
    - Environment variable resolution (the unexpanded document is kept too)
    - Explicit fail-fast behavior for required settings
    """

    # Sentinel object to distinguish between "no default provided" and "default is None"
    _REQUIRED = object()

    def __init__(self, config_path: str | Path | None = None):
        """
        Initialize configuration builder.

        Args:
            config_path: Path to the config.yml file. If None, looks in current directory.

        Raises:
            FileNotFoundError: If no path is given and ./config.yml does not exist,
                or if the given path does not exist.
        """
        dotenv_path = Path.cwd() / ".env"
        if dotenv_path.exists():
            load_dotenv(dotenv_path, override=False)  # Don't override existing env vars
            logger.debug(f"Loaded .env file from {dotenv_path}")

        if config_path is None:
            cwd_config = Path.cwd() / "config.yml"
            if not cwd_config.exists():
                raise FileNotFoundError(
                    f"No config.yml found in current directory: {Path.cwd()}\n\n"
                    f"Run from a project directory containing config.yml, or set the "
                    f"CONFIG_FILE environment variable to point to your config file."
                )
            config_path = cwd_config

        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        self._unexpanded_config = load_yaml_file(self.config_path)
        self.raw_config = resolve_env_vars(copy.deepcopy(self._unexpanded_config))
        logger.info(f"Loaded configuration from {self.config_path}")

    def get_unexpanded_config(self) -> dict[str, Any]:
        """Get configuration with environment variable placeholders preserved."""
        return copy.deepcopy(self._unexpanded_config)

    def require(self, path: str, default: Any = _REQUIRED) -> Any:
        """Get a configuration value, failing fast when a required one is missing.

        Args:
            path: Dot-separated configuration path
            default: Value to use when missing. If omitted the setting is
                required and a missing value raises ValueError. If given, a
                warning is logged when the default is used.
        """
        value = self.get(path)

        if value is None:
            if default is self._REQUIRED:
                raise ValueError(
                    f"Missing required configuration: '{path}' must be explicitly set in "
                    f"{self.config_path.name}"
                )
            logger.warning(f"Using default value for '{path}' = {default}")
            return default
        return value

    def get(self, path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation path."""
        keys = path.split(".")
        value = self.raw_config

        try:
            for key in keys:
                value = value[key]
            return value
        except (KeyError, TypeError):
            return default


# =============================================================================
# GLOBAL CONFIGURATION
# =============================================================================

_default_config: ConfigBuilder | None = None
_config_cache: dict[str, ConfigBuilder] = {}
_config_lock = threading.Lock()


def get_config_builder(config_path: str | Path | None = None) -> ConfigBuilder:
    """Get configuration builder instance (singleton per path).

    Args:
        config_path: Optional explicit path to a configuration file. If None,
            uses the default singleton (CONFIG_FILE env var or ./config.yml).

    Returns:
        ConfigBuilder for the specified or default configuration

    Raises:
        FileNotFoundError: If the configuration file cannot be located
    """
    global _default_config

    with _config_lock:
        if config_path is None:
            if _default_config is None:
                config_file = os.environ.get("CONFIG_FILE")
                _default_config = ConfigBuilder(config_file) if config_file else ConfigBuilder()
                logger.info("Initialized default configuration system")
            return _default_config

        resolved_path = str(Path(config_path).resolve())
        if resolved_path not in _config_cache:
            logger.info(f"Loading configuration from explicit path: {resolved_path}")
            _config_cache[resolved_path] = ConfigBuilder(resolved_path)
        return _config_cache[resolved_path]


def get_config_value(path: str, default: Any = None, config_path: str | Path | None = None) -> Any:
    """
    Get a specific configuration value by dot-separated path.

    Args:
        path: Dot-separated configuration path (e.g., "logging.rich_tracebacks")
        default: Default value to return if path is not found
        config_path: Optional explicit path to configuration file

    Returns:
        The configuration value at the specified path, or default if not found

    Raises:
        ValueError: If path is empty or None
        FileNotFoundError: If the configuration file cannot be located

    Examples:
        >>> get_config_value("logging.logging_colors.registry", "white")
    """
    if not path:
        raise ValueError("Configuration path cannot be empty or None")

    return get_config_builder(config_path).get(path, default)


def reset_config() -> None:
    """Drop every cached configuration (mainly for tests)."""
    global _default_config

    with _config_lock:
        _default_config = None
        _config_cache.clear()
