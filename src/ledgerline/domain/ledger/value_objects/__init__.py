"""Value objects for the ledger domain."""

from ledgerline.domain.ledger.value_objects.entryable import (
    Entryable,
    EntryableKind,
    TradePayload,
    TransactionPayload,
    ValuationKind,
    ValuationPayload,
    entryable_from_dict,
    entryable_to_dict,
)
from ledgerline.domain.ledger.value_objects.external_identity import (
    ExternalIdentity,
    IdentityKind,
)

__all__ = [
    "Entryable",
    "EntryableKind",
    "ExternalIdentity",
    "IdentityKind",
    "TradePayload",
    "TransactionPayload",
    "ValuationKind",
    "ValuationPayload",
    "entryable_from_dict",
    "entryable_to_dict",
]
