"""File-backed declaration sources.

Provider sections are read from YAML documents with this shape::

    greeters:
      default_provider: English
      providers:
        - name: English
          type: greeter_providers:EnglishGreeterProvider
          parameters:
            greetname: John Doe
        - name: Spanish
          type: greeter_providers:SpanishGreeterProvider

Parameter values are coerced to strings. A missing file or a missing section
yields no declarations, which lets a registry fall back to its default
providers.
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from provider_model.base.errors import ConfigurationError
from provider_model.utils.config import (
    ConfigBuilder,
    get_config_builder,
    load_yaml_file,
    resolve_env_vars,
)
from provider_model.utils.logger import get_logger

from .base import DeclarationSource, ProviderDeclaration, ProviderSettings

logger = get_logger("sources")

_TYPE_KEYS = ("type", "type_identifier")


_TRUE_VALUES = ("true", "1")
_FALSE_VALUES = ("false", "0")


def _to_str(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return "" if value is None else str(value)


def parse_flag(value: Any, setting: str, default: bool = False) -> bool:
    """Strictly interpret a boolean setting.

    Accepts booleans, 0/1 and the strings "true"/"false"/"1"/"0" in any case
    (environment placeholders resolve to strings). None means ``default``.

    Raises:
        ConfigurationError: For any other value
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _TRUE_VALUES:
            return True
        if normalized in _FALSE_VALUES:
            return False
    raise ConfigurationError(f"'{setting}' must be true or false, got {value!r}")


def load_config_builder(config_path: str | Path | None = None) -> ConfigBuilder:
    """Return the cached ConfigBuilder, reporting unreadable files as ConfigurationError.

    Raises:
        FileNotFoundError: If the configuration file cannot be located
        ConfigurationError: If the file is not valid YAML or not a mapping
    """
    try:
        return get_config_builder(config_path)
    except (yaml.YAMLError, ValueError) as e:
        raise ConfigurationError(f"Cannot read provider configuration: {e}") from e


def parse_provider_section(section: Any, section_name: str = "providers") -> ProviderSettings:
    """Validate a provider section mapping and turn it into ProviderSettings.

    Args:
        section: The mapping stored under the section key (None means absent)
        section_name: Section label used in error messages

    Returns:
        ProviderSettings in declaration order

    Raises:
        ConfigurationError: If the section or one of its entries is malformed
    """
    if section is None:
        return ProviderSettings()
    if not isinstance(section, Mapping):
        raise ConfigurationError(
            f"The {section_name} configuration section must be a mapping, "
            f"got {type(section).__name__}"
        )

    default_provider = section.get("default_provider")
    if default_provider is not None and not isinstance(default_provider, str):
        raise ConfigurationError(
            f"'default_provider' in the {section_name} configuration section must be a string"
        )

    entries = section.get("providers") or []
    if not isinstance(entries, list):
        raise ConfigurationError(
            f"'providers' in the {section_name} configuration section must be a list"
        )

    declarations = []
    for position, entry in enumerate(entries):
        if not isinstance(entry, Mapping):
            raise ConfigurationError(
                f"Provider entry #{position} in the {section_name} configuration section "
                f"must be a mapping"
            )

        name = entry.get("name")
        if not name or not str(name).strip():
            raise ConfigurationError(
                f"Provider entry #{position} in the {section_name} configuration section "
                f"has no name"
            )

        type_identifier = next((entry[key] for key in _TYPE_KEYS if entry.get(key)), None)
        if not type_identifier:
            raise ConfigurationError(
                f"Provider '{name}' in the {section_name} configuration section has no type"
            )

        parameters = entry.get("parameters") or {}
        if not isinstance(parameters, Mapping):
            raise ConfigurationError(
                f"Parameters of provider '{name}' in the {section_name} configuration section "
                f"must be a mapping"
            )

        declarations.append(
            ProviderDeclaration(
                name=str(name),
                type_identifier=str(type_identifier),
                parameters={str(key): _to_str(value) for key, value in parameters.items()},
            )
        )

    return ProviderSettings(tuple(declarations), default_provider or None)


class YamlDeclarationSource(DeclarationSource):
    """Declaration source reading one section of a YAML file.

    Changes are detected by comparing the file's modification stamp (and
    existence) with the one observed at the last load.

    Args:
        path: YAML file path
        section: Top-level key holding the provider section
    """

    def __init__(self, path: str | Path, section: str):
        self.path = Path(path)
        self.section = section
        self._loaded_stamp: tuple | None = None
        self._has_loaded = False

    @classmethod
    def from_config(cls, section: str, config_path: str | Path | None = None) -> "YamlDeclarationSource":
        """Source for a section of the application configuration file.

        Uses the same path resolution as the configuration system
        (explicit path, CONFIG_FILE, or ./config.yml).
        """
        builder = load_config_builder(config_path)
        return cls(builder.config_path, section)

    def _stamp(self) -> tuple | None:
        try:
            stat = self.path.stat()
        except FileNotFoundError:
            return None
        return (stat.st_mtime_ns, stat.st_size)

    def read_section(self) -> Any:
        """Return the raw (environment-resolved) section, or None if absent.

        Raises:
            ConfigurationError: If the file is not valid YAML or not a mapping
        """
        if not self.path.exists():
            logger.debug(f"Provider configuration file not found: {self.path}")
            return None
        try:
            document = load_yaml_file(self.path)
        except (yaml.YAMLError, ValueError) as e:
            raise ConfigurationError(
                f"Cannot read the {self.section} configuration section from {self.path}: {e}"
            ) from e
        return resolve_env_vars(document.get(self.section))

    def load(self) -> ProviderSettings:
        stamp = self._stamp()
        settings = parse_provider_section(self.read_section(), self.section)
        self._loaded_stamp = stamp
        self._has_loaded = True
        logger.debug(
            f"Read {len(settings.declarations)} declarations from section "
            f"'{self.section}' of {self.path}"
        )
        return settings

    def has_changed(self) -> bool:
        return self._has_loaded and self._stamp() != self._loaded_stamp

    def __repr__(self) -> str:
        return f"YamlDeclarationSource(path={str(self.path)!r}, section={self.section!r})"
