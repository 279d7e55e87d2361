"""Repository interfaces for the ledger domain."""

from ledgerline.domain.ledger.repositories.entry_repository import EntryRepository
from ledgerline.domain.ledger.repositories.linked_account_repository import (
    LinkedAccountRepository,
)

__all__ = ["EntryRepository", "LinkedAccountRepository"]
