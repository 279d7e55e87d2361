"""Provider bundle and lookup by source."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable

from ledgerline.domain.enrichment.value_objects import EnrichmentSource
from ledgerline.domain.integration.entities import ProviderConnection
from ledgerline.domain.integration.exceptions import ProviderConfigurationError
from ledgerline.domain.integration.ports.provider_client import ProviderClient
from ledgerline.domain.integration.ports.provider_mapper import ProviderMapper

ClientFactory = Callable[[ProviderConnection], ProviderClient]


@dataclass(frozen=True)
class Provider:
    """Everything the sync core needs to talk to one provider."""

    mapper: ProviderMapper
    client_factory: ClientFactory

    @property
    def source(self) -> EnrichmentSource:
        return self.mapper.source

    def client_for(self, connection: ProviderConnection) -> ProviderClient:
        return self.client_factory(connection)


class ProviderRegistry:
    """Providers keyed by their enrichment source."""

    def __init__(self, providers: Iterable[Provider] = ()):
        self._providers: dict[EnrichmentSource, Provider] = {}
        for provider in providers:
            self.register(provider)

    def register(self, provider: Provider) -> None:
        self._providers[provider.source] = provider

    def get(self, source: EnrichmentSource) -> Provider:
        provider = self._providers.get(source)
        if provider is None:
            raise ProviderConfigurationError(source.value)
        return provider

    def __contains__(self, source: object) -> bool:
        return source in self._providers
