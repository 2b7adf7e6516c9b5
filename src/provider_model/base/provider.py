"""Provider capability contract and reusable base class.

Every object managed by a ProviderRegistry must satisfy the :class:`Provider`
protocol: it is initialized exactly once with its declared name and
parameters, and exposes that name afterwards. :class:`ProviderBase` is the
ready-made implementation most providers derive from.

Examples:
    A provider reading its own parameter::

        >>> class EchoProvider(ProviderBase):
        ...     def initialize(self, name, parameters=None):
        ...         super().initialize(name, parameters)
        ...         self.prefix = self.parameters.get("prefix", "")
        ...
        ...     def echo(self, text: str) -> str:
        ...         return f"{self.prefix}{text}"
"""

import threading
from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from .errors import ProviderInitializationError

DESCRIPTION_KEY = "description"


@runtime_checkable
class Provider(Protocol):
    """Structural contract every provider type must satisfy."""

    @property
    def name(self) -> str | None: ...

    def initialize(self, name: str, parameters: Mapping[str, str] | None = None) -> None: ...


class ProviderBase:
    """Base class for providers managed by a ProviderRegistry.

    Handles the bookkeeping shared by all providers: recording the name,
    extracting the optional ``description`` parameter and keeping the
    remaining parameters in declaration order. Subclasses override
    :meth:`initialize`, call ``super().initialize(...)`` first and then read
    their own keys from :attr:`parameters`.

    .. note::
       ``initialize`` may only run once per instance; a second call raises
       ProviderInitializationError.
    """

    def __init__(self) -> None:
        self._name: str | None = None
        self._description: str | None = None
        self._parameters: dict[str, str] = {}
        self._initialized = False
        self._init_lock = threading.Lock()

    @property
    def name(self) -> str | None:
        """Provider name assigned during initialization."""
        return self._name

    @property
    def description(self) -> str | None:
        """Human-readable description, defaults to the provider name."""
        return self._description

    @property
    def parameters(self) -> dict[str, str]:
        """Declared parameters minus the description entry."""
        return self._parameters

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self, name: str, parameters: Mapping[str, str] | None = None) -> None:
        """Initialize the provider with its declared name and parameters.

        Args:
            name: Declared provider name
            parameters: Declared parameters (may be empty or None)

        Raises:
            ProviderInitializationError: If name is empty or the provider is
                already initialized
        """
        if not name or not name.strip():
            raise ProviderInitializationError("The name of the provider cannot be null or empty")

        with self._init_lock:
            if self._initialized:
                raise ProviderInitializationError(
                    f"Provider '{self._name}' has already been initialized"
                )
            self._initialized = True

        settings = dict(parameters or {})
        description = settings.pop(DESCRIPTION_KEY, None)

        self._name = name
        self._description = description if description else name
        self._parameters = settings

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r})"
