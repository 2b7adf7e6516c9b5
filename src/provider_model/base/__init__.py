"""Base classes, provider contract and exception hierarchy."""

from .errors import (
    ConfigurationError,
    InvalidArgumentError,
    MissingConfigurationError,
    ProviderCreationError,
    ProviderInitializationError,
    ProviderModelError,
    ProviderNotFoundError,
    TypeResolutionError,
)
from .provider import Provider, ProviderBase

__all__ = [
    "Provider",
    "ProviderBase",
    "ProviderModelError",
    "InvalidArgumentError",
    "ConfigurationError",
    "ProviderNotFoundError",
    "MissingConfigurationError",
    "ProviderCreationError",
    "TypeResolutionError",
    "ProviderInitializationError",
]
