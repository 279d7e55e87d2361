"""Unit tests for the identity matcher."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from ledgerline.domain.enrichment.value_objects import EnrichmentSource
from ledgerline.domain.integration.services import (
    AccountLedgerIndex,
    IdentityMatcher,
)
from ledgerline.domain.integration.services.identity_matcher import (
    descriptions_match,
)
from ledgerline.domain.integration.value_objects import MatchOutcome, NormalizedRecord
from ledgerline.domain.ledger.entities import Entry
from ledgerline.domain.ledger.value_objects import ExternalIdentity

ACCOUNT_ID = uuid4()
DAY = date(2025, 1, 1)


def record(**overrides) -> NormalizedRecord:
    values = {
        "source": EnrichmentSource.SIMPLEFIN,
        "date": DAY,
        "amount": Decimal("-25.00"),
        "currency": "USD",
        "description": "AMAZON MARKETPLACE",
    }
    values.update(overrides)
    return NormalizedRecord(**values)


def entry(identity=None, **overrides) -> Entry:
    values = {
        "account_id": ACCOUNT_ID,
        "date": DAY,
        "amount": Decimal("-25.00"),
        "currency": "USD",
        "description": "AMAZON MARKETPLACE",
        "external_identity": identity,
    }
    values.update(overrides)
    return Entry(**values)


@pytest.fixture
def matcher() -> IdentityMatcher:
    return IdentityMatcher()


class TestDescriptionsMatch:
    @pytest.mark.parametrize(
        ("left", "right"),
        [
            ("AMAZON MARKETPLACE", "amazon  marketplace"),
            ("Amazon", "AMAZON MARKETPLACE PMTS"),
            ("", None),
        ],
    )
    def test_matching_descriptions(self, left, right):
        assert descriptions_match(left, right)

    @pytest.mark.parametrize(
        ("left", "right"),
        [("Amazon", "Netflix"), ("", "Amazon"), ("Amazon", None)],
    )
    def test_non_matching_descriptions(self, left, right):
        assert not descriptions_match(left, right)


class TestCompositeOnly:
    def test_new_when_ledger_is_empty(self, matcher):
        result = matcher.match(AccountLedgerIndex(ACCOUNT_ID), record())

        assert result.outcome == MatchOutcome.NEW
        assert result.identity is None

    def test_normalized_description_is_duplicate(self, matcher):
        existing = entry()
        index = AccountLedgerIndex(ACCOUNT_ID, [existing])

        result = matcher.match(index, record(description="amazon  marketplace"))

        assert result.outcome == MatchOutcome.DUPLICATE
        assert result.entry is existing

    def test_amount_must_match_exactly(self, matcher):
        index = AccountLedgerIndex(ACCOUNT_ID, [entry()])

        result = matcher.match(index, record(amount=Decimal("-25.01")))

        assert result.outcome == MatchOutcome.NEW

    def test_sign_matters(self, matcher):
        index = AccountLedgerIndex(ACCOUNT_ID, [entry()])

        result = matcher.match(index, record(amount=Decimal("25.00")))

        assert result.outcome == MatchOutcome.NEW

    def test_several_candidates_are_ambiguous(self, matcher):
        first, second = entry(), entry()
        index = AccountLedgerIndex(ACCOUNT_ID, [first, second])

        result = matcher.match(index, record())

        assert result.outcome == MatchOutcome.AMBIGUOUS
        assert set(result.candidates) == {first, second}

    def test_opening_anchor_is_never_a_candidate(self, matcher):
        anchor = Entry.opening_anchor(ACCOUNT_ID, DAY, Decimal("0"), "USD")
        index = AccountLedgerIndex(ACCOUNT_ID, [anchor])

        result = matcher.match(
            index,
            record(amount=Decimal("0"), description="Opening balance"),
        )

        assert result.outcome == MatchOutcome.NEW


class TestStableId:
    def test_same_stable_id_is_duplicate(self, matcher):
        existing = entry(ExternalIdentity.stable("simplefin", "tx_1"))
        index = AccountLedgerIndex(ACCOUNT_ID, [existing])

        result = matcher.match(
            index,
            record(stable_id="tx_1", amount=Decimal("50.00"), description="x"),
        )

        assert result.outcome == MatchOutcome.DUPLICATE
        assert result.entry is existing

    def test_new_stable_id_creates_with_stable_identity(self, matcher):
        result = matcher.match(AccountLedgerIndex(ACCOUNT_ID), record(stable_id="tx_1"))

        assert result.outcome == MatchOutcome.NEW
        assert result.identity == ExternalIdentity.stable("simplefin", "tx_1")

    def test_pending_entry_without_id_is_upgraded(self, matcher):
        pending = entry()
        index = AccountLedgerIndex(ACCOUNT_ID, [pending])

        result = matcher.match(index, record(stable_id="stable_123"))

        assert result.outcome == MatchOutcome.UPGRADE
        assert result.entry is pending
        assert result.identity.value == "simplefin_stable_123"

    def test_entry_holding_fallback_is_upgraded(self, matcher):
        held = entry(
            ExternalIdentity.fallback("simplefin", "FIT9"),
            description="something else",
        )
        index = AccountLedgerIndex(ACCOUNT_ID, [held])

        result = matcher.match(index, record(stable_id="tx_9", fallback_id="FIT9"))

        assert result.outcome == MatchOutcome.UPGRADE
        assert result.entry is held

    def test_entry_with_other_stable_id_is_not_a_candidate(self, matcher):
        other = entry(ExternalIdentity.stable("simplefin", "tx_other"))
        index = AccountLedgerIndex(ACCOUNT_ID, [other])

        result = matcher.match(index, record(stable_id="tx_1"))

        assert result.outcome == MatchOutcome.NEW

    def test_entry_with_different_fallback_is_not_a_candidate(self, matcher):
        other = entry(ExternalIdentity.fallback("simplefin", "FIT_A"))
        index = AccountLedgerIndex(ACCOUNT_ID, [other])

        result = matcher.match(index, record(stable_id="tx_1", fallback_id="FIT_B"))

        assert result.outcome == MatchOutcome.NEW


class TestFallbackId:
    def test_same_fallback_is_duplicate(self, matcher):
        existing = entry(ExternalIdentity.fallback("simplefin", "FIT1"))
        index = AccountLedgerIndex(ACCOUNT_ID, [existing])

        result = matcher.match(index, record(fallback_id="FIT1"))

        assert result.outcome == MatchOutcome.DUPLICATE

    def test_fallback_never_matches_stable_namespace(self, matcher):
        # Same rendered value as the fallback, but a stable identity
        existing = entry(
            ExternalIdentity.stable("simplefin", "fitid_1"),
            description="unrelated",
        )
        index = AccountLedgerIndex(ACCOUNT_ID, [existing])

        result = matcher.match(index, record(fallback_id="1"))

        assert result.outcome == MatchOutcome.NEW
        assert result.identity.value == "simplefin_fitid_1"

    def test_composite_entry_without_identity_is_upgraded(self, matcher):
        bare = entry()
        index = AccountLedgerIndex(ACCOUNT_ID, [bare])

        result = matcher.match(index, record(fallback_id="FIT1"))

        assert result.outcome == MatchOutcome.UPGRADE
        assert result.identity == ExternalIdentity.fallback("simplefin", "FIT1")

    def test_entry_upgraded_away_from_fallback_is_duplicate(self, matcher):
        upgraded = entry(
            ExternalIdentity.stable("simplefin", "tx_1"),
            superseded_identity=ExternalIdentity.fallback("simplefin", "FIT1"),
        )
        index = AccountLedgerIndex(ACCOUNT_ID, [upgraded])

        result = matcher.match(index, record(fallback_id="FIT1"))

        assert result.outcome == MatchOutcome.DUPLICATE
        assert result.entry is upgraded


class TestAccountLedgerIndex:
    def test_rejects_foreign_entries(self):
        index = AccountLedgerIndex(ACCOUNT_ID)

        with pytest.raises(ValueError, match="another account"):
            index.add(entry(account_id=uuid4()))

    def test_add_is_idempotent(self):
        existing = entry()
        index = AccountLedgerIndex(ACCOUNT_ID, [existing, existing])

        assert len(index) == 1
        assert existing in index

    def test_reindex_after_upgrade(self):
        fallback = ExternalIdentity.fallback("simplefin", "FIT1")
        stable = ExternalIdentity.stable("simplefin", "tx_1")
        existing = entry(fallback)
        index = AccountLedgerIndex(ACCOUNT_ID, [existing])

        existing.assign_external_identity(stable)
        index.reindex(existing, fallback)

        assert index.find(stable) is existing
        assert index.find(fallback) is None
        assert index.find_superseded(fallback) is existing
