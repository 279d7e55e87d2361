"""SQLAlchemy models for persistence layer."""

from ledgerline.infrastructure.persistence.sqlalchemy.models.base import Base
from ledgerline.infrastructure.persistence.sqlalchemy.models.enrichment import (
    EnrichmentRecordModel,
)
from ledgerline.infrastructure.persistence.sqlalchemy.models.integration import (
    ProviderConnectionModel,
)
from ledgerline.infrastructure.persistence.sqlalchemy.models.ledger import (
    EntryModel,
    LinkedAccountModel,
)

__all__ = [
    "Base",
    "EnrichmentRecordModel",
    "EntryModel",
    "LinkedAccountModel",
    "ProviderConnectionModel",
]
