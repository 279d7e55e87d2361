"""Integration domain: provider connections, matching and sync planning."""

from ledgerline.domain.integration.exceptions import (
    AccountSyncInProgressError,
    ConnectionAuthenticationError,
    ConnectionFatalError,
    ConnectionNotFoundError,
    IntegrationError,
    ProviderAuthenticationError,
    ProviderConfigurationError,
    ProviderRequestError,
    RecordMappingError,
)

__all__ = [
    "AccountSyncInProgressError",
    "ConnectionAuthenticationError",
    "ConnectionFatalError",
    "ConnectionNotFoundError",
    "IntegrationError",
    "ProviderAuthenticationError",
    "ProviderConfigurationError",
    "ProviderRequestError",
    "RecordMappingError",
]
