"""Enrichment domain entities."""

from ledgerline.domain.enrichment.entities.enrichment_record import (
    EnrichmentRecord,
    to_snapshot,
)

__all__ = ["EnrichmentRecord", "to_snapshot"]
