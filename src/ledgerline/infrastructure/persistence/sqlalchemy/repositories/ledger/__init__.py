"""Ledger repositories."""

from ledgerline.infrastructure.persistence.sqlalchemy.repositories.ledger.entry_repository import (  # NOQA: E501
    EntryRepositorySQLAlchemy,
)
from ledgerline.infrastructure.persistence.sqlalchemy.repositories.ledger.linked_account_repository import (  # NOQA: E501
    LinkedAccountRepositorySQLAlchemy,
)

__all__ = ["EntryRepositorySQLAlchemy", "LinkedAccountRepositorySQLAlchemy"]
