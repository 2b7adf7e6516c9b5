"""Instance resolvers: turning a type identifier into a raw provider instance.

A resolver is any callable ``(type_identifier, name) -> instance``. The
registry calls it once per provider per generation and wraps any failure in
ProviderCreationError. Two implementations ship with the package:

- :class:`ImportPathResolver` imports ``"package.module:ClassName"`` (or
  ``"package.module.ClassName"``) with importlib and default-constructs it.
  This is the registry's default.
- :class:`TypeMapResolver` looks identifiers up in an explicit mapping of
  constructors registered at start-up.

Dependency-injection containers plug in the same way: pass any callable
with the resolver signature to the registry.
"""

import importlib
import inspect
import threading
from collections.abc import Callable, Mapping
from typing import Any

from provider_model.base.errors import TypeResolutionError


def import_type(type_identifier: str) -> Any:
    """Import the object named by a ``module:attr`` or dotted ``module.attr`` path.

    Nested attributes (``module:Outer.Inner``) are supported.

    Raises:
        TypeResolutionError: If the module cannot be imported or the attribute
            does not exist
    """
    if not type_identifier or not type_identifier.strip():
        raise TypeResolutionError(type_identifier, "empty type identifier")

    identifier = type_identifier.strip()
    if ":" in identifier:
        module_path, _, attr_path = identifier.partition(":")
    else:
        module_path, _, attr_path = identifier.rpartition(".")

    if not module_path or not attr_path:
        raise TypeResolutionError(
            type_identifier, "expected 'package.module:ClassName' or 'package.module.ClassName'"
        )

    try:
        obj = importlib.import_module(module_path)
    except ImportError as e:
        raise TypeResolutionError(type_identifier, f"cannot import module '{module_path}': {e}") from e

    for attr in attr_path.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError as e:
            raise TypeResolutionError(
                type_identifier, f"'{attr}' not found in '{module_path}'"
            ) from e
    return obj


class ImportPathResolver:
    """Resolve type identifiers as import paths and default-construct them.

    Resolved types are cached per identifier.

    Args:
        expected_type: Optional base class every resolved type must derive from
    """

    def __init__(self, expected_type: type | None = None):
        self.expected_type = expected_type
        self._types: dict[str, Any] = {}
        self._lock = threading.Lock()

    def resolve_type(self, type_identifier: str) -> Any:
        with self._lock:
            cached = self._types.get(type_identifier)
        if cached is not None:
            return cached

        resolved = import_type(type_identifier)
        if not callable(resolved):
            raise TypeResolutionError(type_identifier, "resolved object is not callable")
        if self.expected_type is not None and not (
            inspect.isclass(resolved) and issubclass(resolved, self.expected_type)
        ):
            raise TypeResolutionError(
                type_identifier, f"type must derive from {self.expected_type.__name__}"
            )

        with self._lock:
            self._types[type_identifier] = resolved
        return resolved

    def __call__(self, type_identifier: str, name: str) -> Any:
        return self.resolve_type(type_identifier)()


class TypeMapResolver:
    """Resolve type identifiers through an explicit constructor mapping.

    Examples:
        >>> resolver = TypeMapResolver({"english": EnglishGreeter})
        >>> resolver.register("spanish", SpanishGreeter)
        >>> resolver("spanish", "Spanish")
        SpanishGreeter(name=None)
    """

    def __init__(self, constructors: Mapping[str, Callable[[], Any]] | None = None):
        self._constructors: dict[str, Callable[[], Any]] = dict(constructors or {})
        self._lock = threading.Lock()

    def register(self, type_identifier: str, constructor: Callable[[], Any]) -> None:
        """Register (or replace) the constructor for a type identifier."""
        if not type_identifier:
            raise ValueError("Type identifier cannot be empty")
        with self._lock:
            self._constructors[type_identifier] = constructor

    def identifiers(self) -> list[str]:
        with self._lock:
            return list(self._constructors)

    def __contains__(self, type_identifier: str) -> bool:
        with self._lock:
            return type_identifier in self._constructors

    def __call__(self, type_identifier: str, name: str) -> Any:
        with self._lock:
            constructor = self._constructors.get(type_identifier)
        if constructor is None:
            raise TypeResolutionError(
                type_identifier, f"no constructor registered (known: {self.identifiers()})"
            )
        return constructor()
