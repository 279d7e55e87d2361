"""Ledger domain entities."""

from ledgerline.domain.ledger.entities.entry import OPENING_ANCHOR_DESCRIPTION, Entry
from ledgerline.domain.ledger.entities.linked_account import LinkedAccount

__all__ = ["Entry", "LinkedAccount", "OPENING_ANCHOR_DESCRIPTION"]
