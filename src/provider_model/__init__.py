"""Provider Model.

Name-keyed provider registry: turns configured provider declarations into
lazily built, initialized and cached provider instances.

This package contains:
- Provider contract, base class and exception hierarchy (provider_model.base)
- The registry, declaration sources and type resolvers (provider_model.registry)
- Configuration and logging utilities (provider_model.utils)
- An inspection CLI (provider_model.cli)
"""

# Version information
__version__ = "0.3.0"

__all__ = ["__version__"]

# Use specific imports like: from provider_model.registry import ProviderRegistry
