"""Ports for provider integrations."""

from ledgerline.domain.integration.ports.provider import (
    ClientFactory,
    Provider,
    ProviderRegistry,
)
from ledgerline.domain.integration.ports.provider_client import ProviderClient
from ledgerline.domain.integration.ports.provider_mapper import ProviderMapper

__all__ = [
    "ClientFactory",
    "Provider",
    "ProviderClient",
    "ProviderMapper",
    "ProviderRegistry",
]
