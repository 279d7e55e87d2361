"""Repository protocol for entities that implement Enrichable."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol
from uuid import UUID

if TYPE_CHECKING:
    from ledgerline.domain.enrichment.enrichable import Enrichable


class EnrichableRepository(Protocol):
    """What the enrichment ledger needs to load and persist an entity type."""

    @property
    def enrichable_type(self) -> str: ...

    async def find_enrichable_by_id(self, entity_id: UUID) -> Optional[Enrichable]: ...

    async def find_enrichable_by_ids(self, entity_ids: list[UUID]) -> list[Enrichable]: ...

    async def save_enrichable(self, entity: Enrichable) -> None: ...
