"""Identity matcher: decide whether an incoming record is new, a duplicate or an upgrade.

Strategies, first match wins:

1. Stable id. The record's ``"<provider>_<id>"`` identity is held by an
   entry -> duplicate. Otherwise the entry holding the record's fallback
   identity, or a single composite match without a stable identity, is
   upgraded to the stable id (pending -> posted).
2. Fallback id only. Same lookup in the ``"<provider>_fitid_<id>"``
   namespace, also matching entries that gave up this fallback id for a
   stable id -> duplicate. Otherwise a single composite match without any
   identity is upgraded.
3. No id. A single composite match is a duplicate.

Composite match: same date, exactly equal signed amount, same currency and
normalized descriptions where one contains the other. More than one
composite candidate is ambiguous and never merged automatically.

The matcher is pure; it reads an ``AccountLedgerIndex`` snapshot that the
caller loads and keeps current.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Callable, Iterable, Optional
from uuid import UUID

from ledgerline.domain.integration.value_objects import MatchResult, NormalizedRecord
from ledgerline.domain.ledger.entities import Entry
from ledgerline.domain.ledger.value_objects import ExternalIdentity
from ledgerline.domain.shared.text import normalize_description

CandidateFilter = Callable[[Entry], bool]


class AccountLedgerIndex:
    """In-memory view of one account's entries, keyed for matching.

    Holds entries by external identity and by date. Opening anchors are
    kept out of the date index so they never become composite candidates.
    """

    def __init__(self, account_id: UUID, entries: Iterable[Entry] = ()):
        self._account_id = account_id
        self._by_identity: dict[str, Entry] = {}
        self._by_superseded: dict[str, Entry] = {}
        self._by_date: dict[date, list[Entry]] = defaultdict(list)
        self._ids: set[UUID] = set()
        for entry in entries:
            self.add(entry)

    @property
    def account_id(self) -> UUID:
        return self._account_id

    def add(self, entry: Entry) -> None:
        if entry.account_id != self._account_id:
            msg = f"Entry {entry.id} belongs to another account"
            raise ValueError(msg)
        if entry.id in self._ids:
            return
        self._ids.add(entry.id)
        if entry.external_identity is not None:
            self._by_identity[entry.external_identity.value] = entry
        if entry.superseded_identity is not None:
            self._by_superseded[entry.superseded_identity.value] = entry
        if not entry.is_opening_anchor:
            self._by_date[entry.date].append(entry)

    def reindex(self, entry: Entry, previous: Optional[ExternalIdentity]) -> None:
        """Refresh identity keys after an entry's identity changed."""
        if previous is not None and self._by_identity.get(previous.value) is entry:
            del self._by_identity[previous.value]
        if entry.external_identity is not None:
            self._by_identity[entry.external_identity.value] = entry
        if entry.superseded_identity is not None:
            self._by_superseded[entry.superseded_identity.value] = entry

    def find(self, identity: ExternalIdentity) -> Optional[Entry]:
        entry = self._by_identity.get(identity.value)
        if entry is None or entry.external_identity != identity:
            return None
        return entry

    def find_superseded(self, identity: ExternalIdentity) -> Optional[Entry]:
        """Entry that held ``identity`` before upgrading to a stable id."""
        return self._by_superseded.get(identity.value)

    def on_date(self, day: date) -> list[Entry]:
        return list(self._by_date.get(day, ()))

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, entry: object) -> bool:
        return isinstance(entry, Entry) and entry.id in self._ids


def descriptions_match(left: Optional[str], right: Optional[str]) -> bool:
    """Equal or contained after normalization; empty only matches empty."""
    a = normalize_description(left)
    b = normalize_description(right)
    if not a or not b:
        return a == b
    return a in b or b in a


class IdentityMatcher:
    """Pure decision logic over an AccountLedgerIndex."""

    def match(self, index: AccountLedgerIndex, record: NormalizedRecord) -> MatchResult:
        stable = record.stable_identity()
        fallback = record.fallback_identity()

        if stable is not None:
            return self._match_stable(index, record, stable, fallback)
        if fallback is not None:
            return self._match_fallback(index, record, fallback)
        return self._match_composite_only(index, record)

    def _match_stable(
        self,
        index: AccountLedgerIndex,
        record: NormalizedRecord,
        stable: ExternalIdentity,
        fallback: Optional[ExternalIdentity],
    ) -> MatchResult:
        existing = index.find(stable)
        if existing is not None:
            return MatchResult.duplicate(existing)

        if fallback is not None:
            held = index.find(fallback)
            if held is not None:
                return MatchResult.upgrade(held, stable)

        # A candidate holding some other fallback id is a different record
        # when the incoming one carries its own fallback id.
        def upgradable(entry: Entry) -> bool:
            identity = entry.external_identity
            if identity is None:
                return True
            return not identity.is_stable() and fallback is None

        candidates = self.composite_candidates(index, record, upgradable)
        if len(candidates) == 1:
            return MatchResult.upgrade(candidates[0], stable)
        if len(candidates) > 1:
            return MatchResult.ambiguous(candidates)
        return MatchResult.new(stable)

    def _match_fallback(
        self,
        index: AccountLedgerIndex,
        record: NormalizedRecord,
        fallback: ExternalIdentity,
    ) -> MatchResult:
        existing = index.find(fallback) or index.find_superseded(fallback)
        if existing is not None:
            return MatchResult.duplicate(existing)

        candidates = self.composite_candidates(
            index,
            record,
            lambda entry: entry.external_identity is None,
        )
        if len(candidates) == 1:
            return MatchResult.upgrade(candidates[0], fallback)
        if len(candidates) > 1:
            return MatchResult.ambiguous(candidates)
        return MatchResult.new(fallback)

    def _match_composite_only(
        self,
        index: AccountLedgerIndex,
        record: NormalizedRecord,
    ) -> MatchResult:
        candidates = self.composite_candidates(index, record)
        if len(candidates) == 1:
            return MatchResult.duplicate(candidates[0])
        if len(candidates) > 1:
            return MatchResult.ambiguous(candidates)
        return MatchResult.new(None)

    @staticmethod
    def composite_candidates(
        index: AccountLedgerIndex,
        record: NormalizedRecord,
        accept: Optional[CandidateFilter] = None,
    ) -> list[Entry]:
        return [
            entry
            for entry in index.on_date(record.date)
            if entry.amount == record.amount
            and entry.currency == record.currency
            and descriptions_match(entry.description, record.description)
            and (accept is None or accept(entry))
        ]
