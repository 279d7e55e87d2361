"""Entryable payloads carried by ledger entries.

An Entry's payload is one of Transaction, Trade or Valuation. The payloads
form a tagged union rather than a class hierarchy: the ingestion core only
needs the common Entry fields and passes payloads through untouched, except
for the opening-balance anchor valuation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Union


class EntryableKind(str, Enum):
    TRANSACTION = "transaction"
    TRADE = "trade"
    VALUATION = "valuation"


class ValuationKind(str, Enum):
    RECONCILIATION = "reconciliation"
    OPENING_ANCHOR = "opening_anchor"
    CURRENT_ANCHOR = "current_anchor"


@dataclass(frozen=True)
class TransactionPayload:
    entryable_kind: ClassVar[EntryableKind] = EntryableKind.TRANSACTION

    pending: bool = False
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TradePayload:
    entryable_kind: ClassVar[EntryableKind] = EntryableKind.TRADE

    security: str
    quantity: Decimal
    price: Decimal


@dataclass(frozen=True)
class ValuationPayload:
    entryable_kind: ClassVar[EntryableKind] = EntryableKind.VALUATION

    kind: ValuationKind
    balance: Decimal

    def is_opening_anchor(self) -> bool:
        return self.kind == ValuationKind.OPENING_ANCHOR


Entryable = Union[TransactionPayload, TradePayload, ValuationPayload]


def entryable_to_dict(payload: Entryable) -> dict[str, Any]:
    """Serialize a payload into a JSON-compatible dict tagged by kind."""
    if isinstance(payload, TransactionPayload):
        return {
            "type": EntryableKind.TRANSACTION.value,
            "pending": payload.pending,
            "extra": dict(payload.extra),
        }
    if isinstance(payload, TradePayload):
        return {
            "type": EntryableKind.TRADE.value,
            "security": payload.security,
            "quantity": str(payload.quantity),
            "price": str(payload.price),
        }
    if isinstance(payload, ValuationPayload):
        return {
            "type": EntryableKind.VALUATION.value,
            "kind": payload.kind.value,
            "balance": str(payload.balance),
        }
    msg = f"Unsupported entryable payload: {type(payload).__name__}"
    raise TypeError(msg)


def entryable_from_dict(data: dict[str, Any]) -> Entryable:
    """Rebuild a payload from its tagged dict form."""
    kind = EntryableKind(data["type"])
    if kind == EntryableKind.TRANSACTION:
        return TransactionPayload(
            pending=bool(data.get("pending", False)),
            extra=dict(data.get("extra") or {}),
        )
    if kind == EntryableKind.TRADE:
        return TradePayload(
            security=data["security"],
            quantity=Decimal(data["quantity"]),
            price=Decimal(data["price"]),
        )
    return ValuationPayload(
        kind=ValuationKind(data["kind"]),
        balance=Decimal(data["balance"]),
    )
