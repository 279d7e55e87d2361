"""Identity matcher results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional
from uuid import UUID

from ledgerline.domain.ledger.value_objects import ExternalIdentity

if TYPE_CHECKING:
    from ledgerline.domain.integration.value_objects.normalized_record import (
        NormalizedRecord,
    )
    from ledgerline.domain.ledger.entities import Entry


class MatchOutcome(str, Enum):
    NEW = "new"
    DUPLICATE = "duplicate"
    UPGRADE = "upgrade"
    AMBIGUOUS = "ambiguous"

    def writes(self) -> bool:
        return self in (MatchOutcome.NEW, MatchOutcome.UPGRADE)


@dataclass
class MatchResult:
    """
    What to do with one incoming record.

    - NEW: create an entry carrying ``identity`` (may be None)
    - DUPLICATE: ``entry`` already represents the record, write nothing
    - UPGRADE: set ``entry``'s external identity to ``identity``
    - AMBIGUOUS: several ``candidates`` matched, write nothing
    """

    outcome: MatchOutcome
    entry: Optional[Entry] = None
    identity: Optional[ExternalIdentity] = None
    candidates: list[Entry] = field(default_factory=list)

    @classmethod
    def new(cls, identity: Optional[ExternalIdentity]) -> MatchResult:
        return cls(MatchOutcome.NEW, identity=identity)

    @classmethod
    def duplicate(cls, entry: Entry) -> MatchResult:
        return cls(MatchOutcome.DUPLICATE, entry=entry)

    @classmethod
    def upgrade(cls, entry: Entry, identity: ExternalIdentity) -> MatchResult:
        return cls(MatchOutcome.UPGRADE, entry=entry, identity=identity)

    @classmethod
    def ambiguous(cls, candidates: list[Entry]) -> MatchResult:
        return cls(MatchOutcome.AMBIGUOUS, candidates=list(candidates))


@dataclass(frozen=True)
class MergeCandidate:
    """An incoming record that matched several entries and needs a manual merge."""

    account_id: UUID
    date: date
    amount: Decimal
    currency: str
    description: str
    external_id: Optional[str]
    candidate_entry_ids: tuple[UUID, ...]

    @classmethod
    def from_match(
        cls,
        account_id: UUID,
        record: NormalizedRecord,
        candidates: list[Entry],
    ) -> MergeCandidate:
        identity = record.preferred_identity()
        return cls(
            account_id=account_id,
            date=record.date,
            amount=record.amount,
            currency=record.currency,
            description=record.description,
            external_id=identity.value if identity else None,
            candidate_entry_ids=tuple(entry.id for entry in candidates),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "account_id": str(self.account_id),
            "date": self.date.isoformat(),
            "amount": str(self.amount),
            "currency": self.currency,
            "description": self.description,
            "external_id": self.external_id,
            "candidate_entry_ids": [str(i) for i in self.candidate_entry_ids],
        }
