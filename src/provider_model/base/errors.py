"""Provider Model Exception Hierarchy

This module defines every exception raised by the provider model package.
All exceptions inherit from ProviderModelError so callers can catch the whole
family at an application boundary, while the concrete classes let them react
to the dominant failure modes individually:

Exception Families:
    - **InvalidArgumentError**: A caller passed an empty or missing provider name
    - **ConfigurationError**: Declarations are malformed or absent
        - **ProviderNotFoundError**: Name not declared in the current generation
        - **MissingConfigurationError**: No declarations and no fallback providers
    - **ProviderCreationError**: Resolving, initializing or post-processing a
      declared provider failed
    - **TypeResolutionError**: A resolver could not map a type identifier to a type
    - **ProviderInitializationError**: A provider rejected its initialization

Structured context (provider name, section, type identifier, underlying cause)
is stored as attributes on the exception instances so that CLIs and log
handlers can render it without parsing messages.

.. note::
   Construction failures are memoized by the registry: the same
   ProviderCreationError instance is raised for every request of that provider
   until the declaration list is rebuilt.

.. seealso::
   :class:`provider_model.registry.ProviderRegistry` : Main producer of these errors
"""


class ProviderModelError(Exception):
    """Base exception for all provider model errors.

    This is the root exception class for all custom exceptions within the
    package. It provides a common base for provider-specific error handling.
    """

    pass


class InvalidArgumentError(ProviderModelError, ValueError):
    """Raised when a required argument such as a provider name is empty."""

    def __init__(self, message: str, argument: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.argument = argument


class ConfigurationError(ProviderModelError):
    """Exception for configuration-related errors.

    Raised when declaration sources yield malformed entries (missing names or
    types, duplicate names, non-mapping sections) or when the configuration
    needed by an operation is absent.
    """

    pass


class ProviderNotFoundError(ConfigurationError, LookupError):
    """Raised when a provider name is not declared in the current generation.

    Attributes:
        name: The requested provider name
        section: Configuration section the registry reads from
    """

    def __init__(self, name: str, section: str | None = None) -> None:
        """Initialize ProviderNotFoundError.

        Args:
            name: The requested provider name
            section: Configuration section the registry reads from
        """
        message = f"The provider with the name {name} is not configured"
        if section:
            message += f" on the {section} configuration section"
        super().__init__(message)
        self.name = name
        self.section = section


class MissingConfigurationError(ConfigurationError):
    """Raised when neither the declaration source nor the fallback supplier
    yields a single provider.

    Attributes:
        section: Configuration section the registry reads from
    """

    def __init__(self, section: str | None = None) -> None:
        label = section or "providers"
        super().__init__(
            f"There are no providers configured for the {label} configuration section, "
            f"make sure the section is configured and declares at least one provider"
        )
        self.section = section


class ProviderCreationError(ProviderModelError):
    """Raised when a declared provider cannot be created.

    Wraps failures of the instance resolver, of the provider's own
    ``initialize`` call and of the post-initialization hook.

    Attributes:
        name: Declared provider name
        type_identifier: Type identifier from the declaration
        cause: The underlying exception (also available as ``__cause__``)
    """

    def __init__(
        self,
        name: str,
        type_identifier: str,
        cause: BaseException | None = None,
        stage: str | None = None,
    ) -> None:
        """Initialize ProviderCreationError.

        Args:
            name: Declared provider name
            type_identifier: Type identifier from the declaration
            cause: The underlying exception
            stage: Pipeline stage that failed ("resolve", "initialize", "post_init")
        """
        message = f"The provider type {type_identifier} with name {name} could not be created"
        if stage:
            message += f" (failed during {stage})"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)
        self.name = name
        self.type_identifier = type_identifier
        self.cause = cause
        self.stage = stage


class TypeResolutionError(ProviderModelError, LookupError):
    """Raised by resolvers when a type identifier does not name a usable type."""

    def __init__(self, type_identifier: str, reason: str) -> None:
        super().__init__(f"Cannot resolve provider type '{type_identifier}': {reason}")
        self.type_identifier = type_identifier
        self.reason = reason


class ProviderInitializationError(ProviderModelError):
    """Raised by ProviderBase when initialization is invalid or repeated."""

    pass
