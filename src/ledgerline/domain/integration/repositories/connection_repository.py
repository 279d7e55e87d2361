"""Repository interface for provider connections."""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from ledgerline.domain.integration.entities import ProviderConnection


class ConnectionRepository(ABC):
    """Repository for persisting provider connections."""

    @abstractmethod
    async def save(self, connection: ProviderConnection) -> None:
        """Create or update a connection."""

    @abstractmethod
    async def find_by_id(self, connection_id: UUID) -> Optional[ProviderConnection]:
        """Find a connection by its ID."""

    @abstractmethod
    async def find_all(self) -> list[ProviderConnection]:
        """All connections, oldest first."""
