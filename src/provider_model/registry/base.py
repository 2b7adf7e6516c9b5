"""Declaration Model and Collaborator Interfaces.

This module defines the data handed to a ProviderRegistry by the outside
world, plus the interfaces of the collaborators the registry orchestrates:

1. **ProviderDeclaration**: One named provider entry (name, type identifier,
   parameters) as supplied by configuration
2. **ProviderSettings**: The ordered declarations of one load plus the
   optional explicit default provider name
3. **DeclarationSource**: Abstract supplier of ProviderSettings that can
   report that its contents changed
4. **FallbackProvider**: Instance-producing entry used only when the
   declaration source yields nothing

The remaining collaborators are plain callables, described by the type
aliases :data:`InstanceResolver`, :data:`PostInitHook` and
:data:`FallbackSupplier`.

.. note::
   Declarations are immutable once built. The registry never mutates them and
   hands the same object to the post-initialization hook.

Examples:
    In-memory declarations::

        >>> source = StaticDeclarationSource(
        ...     [
        ...         ProviderDeclaration("English", "greeters:EnglishGreeter", {"greetname": "John"}),
        ...         ProviderDeclaration("Spanish", "greeters:SpanishGreeter"),
        ...     ],
        ...     default_provider="Spanish",
        ... )
        >>> settings = source.load()
        >>> [d.name for d in settings.declarations]
        ['English', 'Spanish']
"""

import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

# =============================================================================
# COLLABORATOR SIGNATURES
# =============================================================================

#: ``(type_identifier, name) -> raw, uninitialized provider instance``
InstanceResolver = Callable[[str, str], Any]

#: ``(initialized_instance, declaration) -> instance to cache``
PostInitHook = Callable[[Any, "ProviderDeclaration"], Any]

#: ``() -> iterable of FallbackProvider, (name, factory) or (name, factory, parameters)``
FallbackSupplier = Callable[[], Iterable[Any]]


def identity_hook(instance: Any, declaration: "ProviderDeclaration") -> Any:
    """Default post-initialization hook: keep the instance unchanged."""
    return instance


def no_fallback_providers() -> list["FallbackProvider"]:
    """Default fallback supplier: no providers without configuration."""
    return []


# =============================================================================
# DECLARATIONS
# =============================================================================

@dataclass(frozen=True)
class ProviderDeclaration:
    """Registration metadata for one configured provider.

    :param name: Provider name, matched case-insensitively at lookup time
    :type name: str
    :param type_identifier: String the instance resolver turns into an instance
    :type type_identifier: str
    :param parameters: Ordered string parameters passed to ``initialize``
    :type parameters: Mapping[str, str]
    """
    name: str
    type_identifier: str
    parameters: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        # Freeze a private copy so later changes by the caller are not observed
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))


@dataclass(frozen=True)
class ProviderSettings:
    """Result of one DeclarationSource load.

    :param declarations: Declarations in declaration order
    :type declarations: tuple[ProviderDeclaration, ...]
    :param default_provider: Explicit default provider name, if configured
    :type default_provider: str or None
    """
    declarations: tuple[ProviderDeclaration, ...] = ()
    default_provider: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "declarations", tuple(self.declarations))


@dataclass(frozen=True)
class FallbackProvider:
    """Provider used when no declarations are configured.

    :param name: Provider name
    :type name: str
    :param factory: Zero-argument callable producing the raw instance
    :type factory: Callable[[], Any]
    :param parameters: Parameters passed to ``initialize`` (empty by default)
    :type parameters: Mapping[str, str]
    """
    name: str
    factory: Callable[[], Any]
    parameters: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def coerce(cls, entry: Any) -> "FallbackProvider":
        """Accept FallbackProvider instances or ``(name, factory[, parameters])`` tuples."""
        if isinstance(entry, cls):
            return entry
        if isinstance(entry, tuple) and len(entry) in (2, 3):
            return cls(*entry)
        raise TypeError(
            f"Fallback providers must be FallbackProvider or (name, factory[, parameters]) "
            f"tuples, got {type(entry).__name__}"
        )

    @property
    def type_identifier(self) -> str:
        """Dotted import path of the factory, used in synthetic declarations."""
        module = getattr(self.factory, "__module__", None)
        qualname = getattr(self.factory, "__qualname__", None) or type(self.factory).__qualname__
        return f"{module}:{qualname}" if module else qualname

    def to_declaration(self) -> ProviderDeclaration:
        return ProviderDeclaration(self.name, self.type_identifier, self.parameters)


# =============================================================================
# DECLARATION SOURCES
# =============================================================================

class DeclarationSource(ABC):
    """Abstract supplier of provider declarations.

    Implementations must be safe to call from several threads; the registry
    serializes its own calls to :meth:`load` but polls :meth:`has_changed` on
    every operation.
    """

    @abstractmethod
    def load(self) -> ProviderSettings:
        """Return the current declarations and optional default name.

        A successful load must reset the state reported by :meth:`has_changed`.
        """

    def has_changed(self) -> bool:
        """Whether the contents changed since the last :meth:`load`.

        Sources that never change keep the default, which freezes the
        registry's view after the first load.
        """
        return False


class StaticDeclarationSource(DeclarationSource):
    """In-memory declaration source.

    The contents can be swapped at runtime with :meth:`update`, which flags a
    change so the next registry operation starts a new generation.
    """

    def __init__(
        self,
        declarations: Sequence[ProviderDeclaration] = (),
        default_provider: str | None = None,
    ):
        self._lock = threading.Lock()
        self._settings = ProviderSettings(tuple(declarations), default_provider)
        self._changed = False

    def load(self) -> ProviderSettings:
        with self._lock:
            self._changed = False
            return self._settings

    def has_changed(self) -> bool:
        with self._lock:
            return self._changed

    def update(
        self,
        declarations: Sequence[ProviderDeclaration],
        default_provider: str | None = None,
    ) -> None:
        """Replace the declarations and signal a change."""
        with self._lock:
            self._settings = ProviderSettings(tuple(declarations), default_provider)
            self._changed = True
