"""Ledger domain: entries, linked accounts and the opening balance anchor."""

from ledgerline.domain.ledger.entities import Entry, LinkedAccount
from ledgerline.domain.ledger.exceptions import (
    DuplicateExternalIdentityError,
    EntryNotFoundError,
    IdentityDowngradeError,
    LinkedAccountNotFoundError,
    OpeningAnchorMoveError,
)
from ledgerline.domain.ledger.value_objects import ExternalIdentity, IdentityKind

__all__ = [
    "DuplicateExternalIdentityError",
    "Entry",
    "EntryNotFoundError",
    "ExternalIdentity",
    "IdentityDowngradeError",
    "IdentityKind",
    "LinkedAccount",
    "LinkedAccountNotFoundError",
    "OpeningAnchorMoveError",
]
