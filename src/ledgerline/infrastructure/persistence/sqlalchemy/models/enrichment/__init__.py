"""Enrichment domain models."""

from ledgerline.infrastructure.persistence.sqlalchemy.models.enrichment.enrichment_record_model import (  # NOQA: E501
    EnrichmentRecordModel,
)

__all__ = ["EnrichmentRecordModel"]
