"""
Pytest configuration and shared test utilities.

This module provides shared fixtures for all provider model tests.
"""

import textwrap

import pytest

from provider_model.registry import ProviderDeclaration, StaticDeclarationSource
from provider_model.utils.config import reset_config

# ===================================================================
# Isolation
# ===================================================================


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Start every test without cached configuration or CONFIG_FILE override."""
    monkeypatch.delenv("CONFIG_FILE", raising=False)
    reset_config()
    yield
    reset_config()


# ===================================================================
# Declarations
# ===================================================================

GREETERS_YAML = textwrap.dedent(
    """
    greeters:
      default_provider: Spanish
      providers:
        - name: English
          type: greeter_providers:EnglishGreeterProvider
          parameters:
            greetname: John Doe
        - name: Spanish
          type: greeter_providers:SpanishGreeterProvider
          parameters:
            greetname: Juan Perez
            description: Saludos en castellano
        - name: French
          type: greeter_providers:FrenchGreeterProvider
          parameters:
            greetname: Monsieur Dupont
    """
)


@pytest.fixture
def greeter_declarations():
    """English, Spanish and French greeter declarations in that order."""
    return [
        ProviderDeclaration(
            "English", "greeter_providers:EnglishGreeterProvider", {"greetname": "John Doe"}
        ),
        ProviderDeclaration(
            "Spanish", "greeter_providers:SpanishGreeterProvider", {"greetname": "Juan Perez"}
        ),
        ProviderDeclaration(
            "French", "greeter_providers:FrenchGreeterProvider", {"greetname": "Monsieur Dupont"}
        ),
    ]


@pytest.fixture
def greeter_source(greeter_declarations):
    """Static source holding the greeter declarations (no explicit default)."""
    return StaticDeclarationSource(greeter_declarations)


@pytest.fixture
def greeters_config(tmp_path):
    """config.yml with a 'greeters' section; returns its path."""
    config_file = tmp_path / "config.yml"
    config_file.write_text(GREETERS_YAML)
    return config_file
