"""Repository interfaces for the enrichment domain."""

from ledgerline.domain.enrichment.repositories.enrichable_repository import (
    EnrichableRepository,
)
from ledgerline.domain.enrichment.repositories.enrichment_record_repository import (
    EnrichmentRecordRepository,
)

__all__ = ["EnrichableRepository", "EnrichmentRecordRepository"]
