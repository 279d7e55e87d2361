"""Repository interface for enrichment records."""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from ledgerline.domain.enrichment.entities import EnrichmentRecord
from ledgerline.domain.enrichment.value_objects import EnrichmentSource


class EnrichmentRecordRepository(ABC):
    """Repository for persisting enrichment records."""

    @abstractmethod
    async def save(self, record: EnrichmentRecord) -> None:
        """Create or update a record (upsert by ID)."""

    @abstractmethod
    async def find(
        self,
        enrichable_type: str,
        enrichable_id: UUID,
        attribute_name: str,
        source: EnrichmentSource,
    ) -> Optional[EnrichmentRecord]:
        """Find the record for one (entity, attribute, source) key."""

    @abstractmethod
    async def find_by_entity(
        self,
        enrichable_type: str,
        enrichable_id: UUID,
    ) -> list[EnrichmentRecord]:
        """All records for one entity, oldest first."""

    @abstractmethod
    async def find_by_source(
        self,
        enrichable_type: str,
        source: EnrichmentSource,
        enrichable_id: Optional[UUID] = None,
    ) -> list[EnrichmentRecord]:
        """
        All records from one source for an entity type.

        Parameters
        ----------
        enrichable_type
            Entity type name (e.g. "Entry")
        source
            The enrichment source
        enrichable_id
            Restrict to one entity when given
        """

    @abstractmethod
    async def delete_many(self, record_ids: list[UUID]) -> int:
        """Delete records by ID and return how many were removed."""
