"""Ledger domain models."""

from ledgerline.infrastructure.persistence.sqlalchemy.models.ledger.entry_model import (
    EntryModel,
)
from ledgerline.infrastructure.persistence.sqlalchemy.models.ledger.linked_account_model import (  # NOQA: E501
    LinkedAccountModel,
)

__all__ = ["EntryModel", "LinkedAccountModel"]
