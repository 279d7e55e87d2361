"""Domain services for the enrichment domain."""

from ledgerline.domain.enrichment.services.enrichment_policy import EnrichmentPolicy

__all__ = ["EnrichmentPolicy"]
