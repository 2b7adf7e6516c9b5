"""Tests for declaration sources.

Tests YAML section parsing and validation, change detection of file-backed
sources and the configuration-driven registry factory.
"""

import os

import pytest

from provider_model.base import ConfigurationError
from provider_model.registry import (
    ProviderDeclaration,
    ProviderRegistry,
    StaticDeclarationSource,
    YamlDeclarationSource,
    parse_flag,
    parse_provider_section,
)


def touch_later(path, seconds=10):
    """Push the file's modification time forward so a rewrite is always detected."""
    stat = path.stat()
    os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + seconds * 1_000_000_000))


class TestParseProviderSection:
    """Test parse_provider_section validation."""

    def test_parses_entries_in_order(self):
        settings = parse_provider_section(
            {
                "default_provider": "Spanish",
                "providers": [
                    {"name": "English", "type": "greeters:English", "parameters": {"greetname": "Ann"}},
                    {"name": "Spanish", "type_identifier": "greeters:Spanish"},
                ],
            }
        )

        assert settings.default_provider == "Spanish"
        assert settings.declarations == (
            ProviderDeclaration("English", "greeters:English", {"greetname": "Ann"}),
            ProviderDeclaration("Spanish", "greeters:Spanish", {}),
        )

    def test_missing_section_yields_no_declarations(self):
        settings = parse_provider_section(None)

        assert settings.declarations == ()
        assert settings.default_provider is None

    def test_parameter_values_become_strings(self):
        settings = parse_provider_section(
            {
                "providers": [
                    {
                        "name": "Typed",
                        "type": "pkg:Typed",
                        "parameters": {"retries": 3, "enabled": True, "ratio": 0.5, "empty": None},
                    }
                ]
            }
        )

        assert dict(settings.declarations[0].parameters) == {
            "retries": "3",
            "enabled": "true",
            "ratio": "0.5",
            "empty": "",
        }

    @pytest.mark.parametrize(
        "section, message",
        [
            (["not", "a", "mapping"], "must be a mapping"),
            ({"providers": {"name": "x"}}, "must be a list"),
            ({"providers": ["English"]}, "must be a mapping"),
            ({"providers": [{"type": "pkg:Type"}]}, "has no name"),
            ({"providers": [{"name": "English"}]}, "has no type"),
            ({"providers": [{"name": "English", "type": "pkg:T", "parameters": [1]}]}, "must be a mapping"),
            ({"default_provider": 3, "providers": []}, "must be a string"),
        ],
    )
    def test_malformed_sections_raise(self, section, message):
        with pytest.raises(ConfigurationError, match=message):
            parse_provider_section(section, "greeters")


class TestParseFlag:
    """Test strict boolean parsing of settings."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (True, True),
            (False, False),
            (1, True),
            (0, False),
            ("TRUE", True),
            (" false ", False),
            ("1", True),
            ("0", False),
            (None, False),
        ],
    )
    def test_accepted_values(self, value, expected):
        assert parse_flag(value, "greeters.retry_failed") is expected

    def test_none_uses_default(self):
        assert parse_flag(None, "greeters.retry_failed", default=True) is True

    @pytest.mark.parametrize("value", ["yes please", "", 2, 0.5, ["true"]])
    def test_rejected_values(self, value):
        with pytest.raises(ConfigurationError, match="must be true or false"):
            parse_flag(value, "greeters.retry_failed")


class TestStaticDeclarationSource:
    """Test StaticDeclarationSource change tracking."""

    def test_update_flags_change_until_next_load(self):
        source = StaticDeclarationSource([ProviderDeclaration("A", "pkg:A")])
        assert not source.has_changed()

        source.update([ProviderDeclaration("B", "pkg:B")], default_provider="B")

        assert source.has_changed()
        settings = source.load()
        assert [d.name for d in settings.declarations] == ["B"]
        assert settings.default_provider == "B"
        assert not source.has_changed()


class TestYamlDeclarationSource:
    """Test YAML-backed declaration loading."""

    def test_loads_section(self, greeters_config):
        source = YamlDeclarationSource(greeters_config, "greeters")

        settings = source.load()

        assert [d.name for d in settings.declarations] == ["English", "Spanish", "French"]
        assert settings.default_provider == "Spanish"
        assert settings.declarations[1].parameters["description"] == "Saludos en castellano"

    def test_missing_file_and_section_yield_nothing(self, tmp_path, greeters_config):
        assert YamlDeclarationSource(tmp_path / "absent.yml", "greeters").load().declarations == ()
        assert YamlDeclarationSource(greeters_config, "loggers").load().declarations == ()

    def test_environment_variables_are_resolved(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GREET_NAME", "Env Person")
        config_file = tmp_path / "config.yml"
        config_file.write_text(
            """
greeters:
  providers:
    - name: English
      type: greeter_providers:EnglishGreeterProvider
      parameters:
        greetname: ${GREET_NAME}
        fallback: ${UNSET_GREETER_VAR:-nobody}
"""
        )

        declaration = YamlDeclarationSource(config_file, "greeters").load().declarations[0]

        assert declaration.parameters["greetname"] == "Env Person"
        assert declaration.parameters["fallback"] == "nobody"

    def test_change_detection(self, greeters_config):
        source = YamlDeclarationSource(greeters_config, "greeters")
        assert not source.has_changed()  # nothing loaded yet

        source.load()
        assert not source.has_changed()

        greeters_config.write_text(greeters_config.read_text() + "\nother: 1\n")
        touch_later(greeters_config)
        assert source.has_changed()

        source.load()
        assert not source.has_changed()

    def test_from_config_uses_config_file_env_var(self, greeters_config, monkeypatch):
        monkeypatch.setenv("CONFIG_FILE", str(greeters_config))

        source = YamlDeclarationSource.from_config("greeters")

        assert source.path == greeters_config
        assert source.section == "greeters"
        assert repr(source) == (
            f"YamlDeclarationSource(path={str(greeters_config)!r}, section='greeters')"
        )

    def test_non_mapping_document_raises_configuration_error(self, tmp_path):
        config_file = tmp_path / "config.yml"
        config_file.write_text("- just\n- a list\n")

        with pytest.raises(ConfigurationError) as exc_info:
            YamlDeclarationSource(config_file, "greeters").load()

        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_deleting_file_counts_as_change(self, greeters_config):
        source = YamlDeclarationSource(greeters_config, "greeters")
        source.load()

        greeters_config.unlink()

        assert source.has_changed()


class TestRegistryFromConfig:
    """Test ProviderRegistry.from_config with YAML files."""

    def test_default_provider_from_config(self, greeters_config):
        registry = ProviderRegistry.from_config("greeters", greeters_config)

        spanish = registry.get_default_provider()

        assert spanish.greet() == "Hola Juan Perez"
        assert spanish.description == "Saludos en castellano"
        assert registry.get_provider("english").greet() == "Hello John Doe"
        assert registry.retry_failed is False
        assert registry.section == "greeters"

    def test_config_file_env_var(self, greeters_config, monkeypatch):
        monkeypatch.setenv("CONFIG_FILE", str(greeters_config))

        registry = ProviderRegistry.from_config("greeters")

        assert registry.get_provider_names() == ["English", "Spanish", "French"]

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("true", True),
            ("false", False),
            ("1", True),
            ("0", False),
            ('"TRUE"', True),
            ("${GREETER_RETRY:-false}", False),
            ("${GREETER_RETRY:-true}", True),
        ],
    )
    def test_retry_failed_read_from_section(self, tmp_path, monkeypatch, value, expected):
        """Test that retry_failed is parsed strictly, including env placeholders."""
        monkeypatch.delenv("GREETER_RETRY", raising=False)
        config_file = tmp_path / "config.yml"
        config_file.write_text(
            f"""
greeters:
  retry_failed: {value}
  providers:
    - name: English
      type: greeter_providers:EnglishGreeterProvider
"""
        )

        assert ProviderRegistry.from_config("greeters", config_file).retry_failed is expected
        assert (
            ProviderRegistry.from_config("greeters", config_file, retry_failed=False).retry_failed
            is False
        )

    def test_retry_failed_rejects_non_boolean(self, tmp_path):
        config_file = tmp_path / "config.yml"
        config_file.write_text(
            """
greeters:
  retry_failed: sometimes
  providers:
    - name: English
      type: greeter_providers:EnglishGreeterProvider
"""
        )

        with pytest.raises(ConfigurationError, match="greeters.retry_failed"):
            ProviderRegistry.from_config("greeters", config_file)

    def test_malformed_config_file_raises_configuration_error(self, tmp_path):
        config_file = tmp_path / "config.yml"
        config_file.write_text("greeters: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Cannot read provider configuration"):
            ProviderRegistry.from_config("greeters", config_file)

    def test_yaml_broken_after_first_load(self, greeters_config):
        """Test that a live edit breaking the YAML surfaces as ConfigurationError."""
        registry = ProviderRegistry.from_config("greeters", greeters_config)
        assert registry.get_provider_names() == ["English", "Spanish", "French"]
        good_yaml = greeters_config.read_text()

        greeters_config.write_text("greeters: [unclosed\n")
        touch_later(greeters_config)

        with pytest.raises(ConfigurationError, match="Cannot read the greeters configuration"):
            registry.get_provider_names()
        with pytest.raises(ConfigurationError):
            registry.get_provider("English")

        greeters_config.write_text(good_yaml)
        touch_later(greeters_config, seconds=20)

        assert registry.get_provider("English").greet() == "Hello John Doe"

    def test_edited_file_starts_new_generation(self, greeters_config):
        registry = ProviderRegistry.from_config("greeters", greeters_config)
        old_french = registry.get_provider("French")

        greeters_config.write_text(
            greeters_config.read_text().replace("Monsieur Dupont", "Madame Curie")
        )
        touch_later(greeters_config)

        new_french = registry.get_provider("French")
        assert new_french is not old_french
        assert new_french.greet() == "Bonjour Madame Curie"
        assert registry.generation == 2

    def test_missing_config_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        with pytest.raises(FileNotFoundError):
            ProviderRegistry.from_config("greeters")
