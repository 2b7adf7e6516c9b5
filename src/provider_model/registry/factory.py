"""Provider Registry - lazy, name-keyed provider construction.

This module provides :class:`ProviderRegistry`, the component that turns an
ordered list of provider declarations into initialized, cached provider
instances. Declarations come from a :class:`DeclarationSource`; instances are
produced by an injectable resolver, initialized once, optionally replaced by a
post-initialization hook and cached for the lifetime of the declaration list.

Provider Lifecycle:
    1. **Declaration load**: The source's declarations become a new
       *generation* with one fresh cell per name (fallback providers are used
       when the source yields none)
    2. **Resolve**: ``resolver(type_identifier, name)`` creates the raw instance
    3. **Initialize**: ``instance.initialize(name, parameters)``, exactly once
    4. **Post-process**: ``post_init_hook(instance, declaration)`` may return a
       different instance, which is cached in place of the original
    5. **Cache**: The outcome (instance or error) is kept until the next
       generation

Concurrency:
    - Rebuilding the declaration list is a single critical section per registry
    - Each provider builds under its own cell, so building one provider never
      blocks requests for another
    - Concurrent requests for the same provider observe the same outcome

.. note::
   Names are matched case-insensitively. Listing operations always follow
   declaration order.

Examples:
    Configuration-driven registry::

        >>> registry = ProviderRegistry.from_config("greeters")
        >>> registry.get_provider_names()
        ['English', 'Spanish', 'French']
        >>> registry.get_provider("spanish") is registry.get_provider("Spanish")
        True

    Fallback providers and a substituting hook::

        >>> registry = ProviderRegistry(
        ...     StaticDeclarationSource(),
        ...     section="greeters",
        ...     fallback_providers=lambda: [("English", EnglishGreeterProvider)],
        ...     post_init_hook=lambda provider, declaration: provider,
        ... )
        >>> registry.get_default_provider().name
        'English'

.. seealso::
   :class:`provider_model.registry.cell.ProviderCell` : Per-provider compute-once cell
   :class:`provider_model.registry.sources.YamlDeclarationSource` : YAML-backed source
"""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from provider_model.base.errors import (
    ConfigurationError,
    InvalidArgumentError,
    MissingConfigurationError,
    ProviderCreationError,
    ProviderNotFoundError,
)
from provider_model.utils.logger import get_logger

from .base import (
    DeclarationSource,
    FallbackProvider,
    FallbackSupplier,
    InstanceResolver,
    PostInitHook,
    ProviderDeclaration,
    StaticDeclarationSource,
    identity_hook,
    no_fallback_providers,
)
from .cell import ProviderCell
from .resolvers import ImportPathResolver
from .sources import YamlDeclarationSource, load_config_builder, parse_flag

logger = get_logger("registry")


def _normalize(name: str) -> str:
    return name.casefold()


@dataclass(frozen=True)
class _ProviderEntry:
    declaration: ProviderDeclaration
    cell: ProviderCell


@dataclass(frozen=True)
class _Generation:
    """One complete load of the declaration list."""
    number: int
    entries: tuple[_ProviderEntry, ...]
    index: dict[str, _ProviderEntry]
    default_provider: str | None
    from_fallback: bool


class ProviderRegistry:
    """Lazy, thread-safe registry of named provider instances.

    :param source: Supplier of declarations; an empty static source when omitted
    :type source: DeclarationSource, optional
    :param section: Configuration section label used in messages
    :type section: str
    :param resolver: ``(type_identifier, name) -> instance``; defaults to
        :class:`ImportPathResolver`
    :param post_init_hook: ``(instance, declaration) -> instance``; defaults to identity
    :param fallback_providers: Supplier used when the source yields no declarations
    :param retry_failed: Rebuild failed providers on the next request instead
        of memoizing the failure for the generation
    :type retry_failed: bool
    """

    def __init__(
        self,
        source: DeclarationSource | None = None,
        *,
        section: str = "providers",
        resolver: InstanceResolver | None = None,
        post_init_hook: PostInitHook | None = None,
        fallback_providers: FallbackSupplier | None = None,
        retry_failed: bool = False,
    ):
        self.source = source if source is not None else StaticDeclarationSource()
        self.section = section
        self.resolver = resolver if resolver is not None else ImportPathResolver()
        self.post_init_hook = post_init_hook if post_init_hook is not None else identity_hook
        self.fallback_providers = (
            fallback_providers if fallback_providers is not None else no_fallback_providers
        )
        self.retry_failed = retry_failed

        self._lock = threading.Lock()
        self._generation: _Generation | None = None
        self._generation_count = 0
        self._invalidated = False

    @classmethod
    def from_config(
        cls,
        section: str,
        config_path: str | Path | None = None,
        **kwargs: Any,
    ) -> "ProviderRegistry":
        """Create a registry reading ``section`` of the application config file.

        ``retry_failed`` defaults to the section's ``retry_failed`` key
        (true/false, 1/0).

        :param section: Top-level key of the provider section
        :param config_path: Explicit config path (CONFIG_FILE or ./config.yml otherwise)
        :param kwargs: Remaining ProviderRegistry keyword arguments
        :raises FileNotFoundError: If the configuration file cannot be located
        :raises ConfigurationError: If the file is unreadable or ``retry_failed`` is not a boolean
        """
        builder = load_config_builder(config_path)
        if "retry_failed" not in kwargs:
            kwargs["retry_failed"] = parse_flag(
                builder.get(f"{section}.retry_failed"), f"{section}.retry_failed"
            )
        source = YamlDeclarationSource(builder.config_path, section)
        return cls(source, section=section, **kwargs)

    # ==========================================================================
    # DECLARATION MANAGEMENT
    # ==========================================================================

    @property
    def generation(self) -> int:
        """Number of declaration-list loads performed so far."""
        return self._generation_count

    def invalidate(self) -> None:
        """Discard the current generation; the next operation reloads declarations."""
        with self._lock:
            self._invalidated = True
        logger.debug(f"Invalidated provider declarations for section '{self.section}'")

    def ensure_declarations(self) -> _Generation:
        """Load declarations if absent, invalidated or reported changed.

        Only the list rebuild is serialized; provider builds happen outside
        this lock.

        :raises MissingConfigurationError: If neither the source nor the
            fallback supplier declares any provider
        :raises ConfigurationError: If declarations are malformed
        """
        with self._lock:
            current = self._generation
            if current is not None and not self._invalidated and not self.source.has_changed():
                return current

            self._generation = self._load_generation()
            self._invalidated = False
            return self._generation

    def _load_generation(self) -> _Generation:
        settings = self.source.load()
        entries: list[_ProviderEntry] = []
        from_fallback = False

        if settings.declarations:
            for declaration in settings.declarations:
                entries.append(self._create_entry(declaration, self._declared_builder(declaration)))
            default_provider = settings.default_provider
        else:
            for item in self.fallback_providers() or []:
                fallback = FallbackProvider.coerce(item)
                declaration = fallback.to_declaration()
                entries.append(
                    self._create_entry(declaration, self._fallback_builder(fallback))
                )
            if not entries:
                raise MissingConfigurationError(self.section)
            from_fallback = True
            default_provider = None
            logger.warning(
                f"No providers configured for section '{self.section}', "
                f"using {len(entries)} fallback provider(s)"
            )

        index: dict[str, _ProviderEntry] = {}
        for entry in entries:
            name = entry.declaration.name
            if not name or not name.strip():
                raise ConfigurationError(
                    f"A provider in the {self.section} configuration section has an empty name"
                )
            key = _normalize(name)
            if key in index:
                raise ConfigurationError(
                    f"Provider name '{name}' is declared more than once in the "
                    f"{self.section} configuration section"
                )
            index[key] = entry

        self._generation_count += 1
        generation = _Generation(
            number=self._generation_count,
            entries=tuple(entries),
            index=index,
            default_provider=default_provider or None,
            from_fallback=from_fallback,
        )
        logger.info(
            f"Loaded generation {generation.number} of section '{self.section}': "
            f"{[entry.declaration.name for entry in entries]}"
        )
        return generation

    def _create_entry(self, declaration: ProviderDeclaration, produce: Callable[[], Any]) -> _ProviderEntry:
        def build():
            return self._run_pipeline(declaration, produce)

        return _ProviderEntry(declaration, ProviderCell(build, retry_failed=self.retry_failed))

    # ==========================================================================
    # CONSTRUCTION PIPELINE
    # ==========================================================================

    def _declared_builder(self, declaration: ProviderDeclaration) -> Callable[[], Any]:
        def produce():
            return self.resolver(declaration.type_identifier, declaration.name)

        return produce

    def _fallback_builder(self, fallback: FallbackProvider) -> Callable[[], Any]:
        return fallback.factory

    def _run_pipeline(self, declaration: ProviderDeclaration, produce: Callable[[], Any]) -> Any:
        """Resolve, initialize and post-process one provider (runs inside its cell)."""
        start = time.perf_counter()
        try:
            result = self._construct(declaration, produce)
        except ProviderCreationError as e:
            logger.error(str(e))
            raise

        logger.debug(
            f"Built provider '{declaration.name}' ({declaration.type_identifier}) "
            f"in {time.perf_counter() - start:.4f}s"
        )
        return result

    def _construct(self, declaration: ProviderDeclaration, produce: Callable[[], Any]) -> Any:
        name, type_identifier = declaration.name, declaration.type_identifier

        try:
            instance = produce()
        except ProviderCreationError:
            raise
        except Exception as e:
            raise ProviderCreationError(name, type_identifier, e, stage="resolve") from e
        if instance is None:
            raise ProviderCreationError(
                name, type_identifier, TypeError("resolver returned no instance"), stage="resolve"
            )

        try:
            instance.initialize(name, dict(declaration.parameters))
        except Exception as e:
            raise ProviderCreationError(name, type_identifier, e, stage="initialize") from e

        try:
            result = self.post_init_hook(instance, declaration)
        except Exception as e:
            raise ProviderCreationError(name, type_identifier, e, stage="post_init") from e
        if result is None:
            raise ProviderCreationError(
                name,
                type_identifier,
                TypeError("post-initialization hook returned no instance"),
                stage="post_init",
            )

        if result is not instance:
            logger.debug(f"Provider '{name}' replaced by {type(result).__name__} after initialization")
        return result

    def _build(self, entry: _ProviderEntry) -> Any:
        return entry.cell.get()

    # ==========================================================================
    # PUBLIC ACCESS
    # ==========================================================================

    def _lookup(self, generation: _Generation, name: str) -> _ProviderEntry:
        entry = generation.index.get(_normalize(name))
        if entry is None:
            raise ProviderNotFoundError(name, self.section)
        return entry

    def get_provider(self, name: str) -> Any:
        """Return the provider declared under ``name`` (case-insensitive).

        :raises InvalidArgumentError: If name is empty
        :raises ProviderNotFoundError: If name is not declared
        :raises ProviderCreationError: If the provider could not be built
            (memoized for the generation unless ``retry_failed``)
        """
        if not isinstance(name, str) or not name.strip():
            raise InvalidArgumentError(
                "The name of the provider cannot be null or empty", argument="name"
            )
        generation = self.ensure_declarations()
        return self._build(self._lookup(generation, name))

    def get_default_provider(self) -> Any:
        """Return the explicit default provider, or the first declared one.

        :raises ProviderNotFoundError: If the explicit default is not declared
        """
        generation = self.ensure_declarations()
        if generation.default_provider:
            entry = self._lookup(generation, generation.default_provider)
        else:
            entry = generation.entries[0]
        return self._build(entry)

    def get_default_provider_name(self) -> str:
        """Name of the provider get_default_provider() returns, without building it."""
        generation = self.ensure_declarations()
        if generation.default_provider:
            return self._lookup(generation, generation.default_provider).declaration.name
        return generation.entries[0].declaration.name

    def get_providers(self) -> list[Any]:
        """Build every declared provider and return them in declaration order.

        All-or-nothing: the first construction failure is raised and no
        partial list is returned.
        """
        generation = self.ensure_declarations()
        return [self._build(entry) for entry in generation.entries]

    def get_provider_names(self) -> list[str]:
        """Declared provider names in declaration order (nothing is built)."""
        generation = self.ensure_declarations()
        return [entry.declaration.name for entry in generation.entries]

    def get_declarations(self) -> list[ProviderDeclaration]:
        """Declarations of the current generation in declaration order."""
        generation = self.ensure_declarations()
        return [entry.declaration for entry in generation.entries]

    def uses_fallback(self) -> bool:
        """Whether the current generation came from the fallback providers."""
        return self.ensure_declarations().from_fallback

    def has_provider(self, name: str) -> bool:
        """Whether ``name`` is declared in the current generation (case-insensitive)."""
        if not isinstance(name, str) or not name.strip():
            return False
        return _normalize(name) in self.ensure_declarations().index

    def __repr__(self) -> str:
        return (
            f"ProviderRegistry(section={self.section!r}, source={self.source!r}, "
            f"generation={self._generation_count})"
        )
