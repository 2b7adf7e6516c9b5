"""Provider Registry System.

Lazily constructs, initializes and caches named provider instances from an
ordered list of declarations supplied by a configuration source.

Key Components:
    - **ProviderRegistry**: Declaration management, lazy construction, default selection
    - **ProviderDeclaration / ProviderSettings**: Declaration data model
    - **DeclarationSource**: Interface for declaration suppliers
      (StaticDeclarationSource, YamlDeclarationSource)
    - **Resolvers**: ImportPathResolver and TypeMapResolver
    - **ProviderCell**: Per-provider compute-once cell

Examples:
    >>> from provider_model.registry import ProviderRegistry
    >>> registry = ProviderRegistry.from_config("greeters")
    >>> registry.get_default_provider().greet()
    'Hello John Doe'
"""

from .base import (
    DeclarationSource,
    FallbackProvider,
    FallbackSupplier,
    InstanceResolver,
    PostInitHook,
    ProviderDeclaration,
    ProviderSettings,
    StaticDeclarationSource,
    identity_hook,
)
from .cell import CellState, ProviderCell
from .factory import ProviderRegistry
from .resolvers import ImportPathResolver, TypeMapResolver, import_type
from .sources import (
    YamlDeclarationSource,
    load_config_builder,
    parse_flag,
    parse_provider_section,
)

__all__ = [
    "ProviderRegistry",
    "ProviderDeclaration",
    "ProviderSettings",
    "FallbackProvider",
    "DeclarationSource",
    "StaticDeclarationSource",
    "YamlDeclarationSource",
    "parse_provider_section",
    "parse_flag",
    "load_config_builder",
    "ImportPathResolver",
    "TypeMapResolver",
    "import_type",
    "ProviderCell",
    "CellState",
    "identity_hook",
    "InstanceResolver",
    "PostInitHook",
    "FallbackSupplier",
]
