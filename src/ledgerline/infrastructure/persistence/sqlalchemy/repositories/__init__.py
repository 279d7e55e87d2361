"""SQLAlchemy repository implementations."""

from ledgerline.infrastructure.persistence.sqlalchemy.repositories.enrichment import (
    EnrichmentRecordRepositorySQLAlchemy,
)
from ledgerline.infrastructure.persistence.sqlalchemy.repositories.factory import (
    SQLAlchemyRepositoryFactory,
    session_scope_factory,
)
from ledgerline.infrastructure.persistence.sqlalchemy.repositories.integration import (
    ConnectionRepositorySQLAlchemy,
)
from ledgerline.infrastructure.persistence.sqlalchemy.repositories.ledger import (
    EntryRepositorySQLAlchemy,
    LinkedAccountRepositorySQLAlchemy,
)

__all__ = [
    "ConnectionRepositorySQLAlchemy",
    "EnrichmentRecordRepositorySQLAlchemy",
    "EntryRepositorySQLAlchemy",
    "LinkedAccountRepositorySQLAlchemy",
    "SQLAlchemyRepositoryFactory",
    "session_scope_factory",
]
