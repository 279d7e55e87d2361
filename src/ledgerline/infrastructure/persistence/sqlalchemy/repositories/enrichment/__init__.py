"""Enrichment repositories."""

from ledgerline.infrastructure.persistence.sqlalchemy.repositories.enrichment.enrichment_record_repository import (  # NOQA: E501
    EnrichmentRecordRepositorySQLAlchemy,
)

__all__ = ["EnrichmentRecordRepositorySQLAlchemy"]
