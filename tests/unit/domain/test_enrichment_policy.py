"""Unit tests for lock state and the enrichment policy."""

from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from ledgerline.domain.enrichment.entities import EnrichmentRecord
from ledgerline.domain.enrichment.exceptions import InvalidAttributeError
from ledgerline.domain.enrichment.services import EnrichmentPolicy
from ledgerline.domain.enrichment.value_objects import (
    EnrichmentSource,
    LockedAttributes,
)
from ledgerline.domain.ledger.entities import Entry


@pytest.fixture
def entry() -> Entry:
    return Entry(
        account_id=uuid4(),
        date=date(2025, 3, 1),
        amount=Decimal("9.99"),
        currency="USD",
        description="Netflix",
    )


class TestLockedAttributes:
    def test_lock_records_source(self):
        locks = LockedAttributes()

        locks.lock("category", EnrichmentSource.AI)

        assert locks.is_locked("category")
        assert locks.locked_by("category") == EnrichmentSource.AI
        assert "category" in locks

    def test_relock_keeps_only_latest_source(self):
        locks = LockedAttributes()
        locks.lock("category", EnrichmentSource.RULE)

        locks.lock("category", EnrichmentSource.USER)

        assert locks.locked_by("category") == EnrichmentSource.USER
        assert len(locks) == 1

    def test_unlock_reports_whether_locked(self):
        locks = LockedAttributes()
        locks.lock("notes")

        assert locks.unlock("notes") is True
        assert locks.unlock("notes") is False

    def test_round_trips_through_dict(self):
        locks = LockedAttributes()
        locks.lock("merchant", EnrichmentSource.RULE)

        restored = LockedAttributes.from_dict(locks.to_dict())

        assert restored.locked_by("merchant") == EnrichmentSource.RULE

    def test_legacy_timestamp_only_value_is_user_lock(self):
        restored = LockedAttributes.from_dict(
            {"category": datetime(2024, 5, 1, tzinfo=timezone.utc).isoformat()},
        )

        assert restored.locked_by("category") == EnrichmentSource.USER


class TestEnrichmentPolicy:
    def test_select_skips_locked_and_unchanged(self, entry):
        entry.locked_attributes.lock("category")
        policy = EnrichmentPolicy()

        selected = policy.select(
            entry,
            {"category": "Streaming", "description": "Netflix", "notes": "monthly"},
        )

        assert selected == {"notes": "monthly"}

    def test_select_ignores_identity_and_timestamp_fields(self, entry):
        selected = EnrichmentPolicy().select(entry, {"id": uuid4(), "notes": "x"})

        assert selected == {"notes": "x"}

    def test_select_rejects_unknown_attributes_before_selecting(self, entry):
        with pytest.raises(InvalidAttributeError):
            EnrichmentPolicy().select(entry, {"notes": "x", "amount": Decimal("1")})

    def test_attributes_to_lock_come_from_saved_changes(self, entry):
        entry.apply_direct_changes({"category": "TV", "notes": None})

        assert EnrichmentPolicy().attributes_to_lock(entry) == ["category"]

    def test_attributes_to_unlock_only_where_source_holds_lock(self, entry):
        entry.locked_attributes.lock("category", EnrichmentSource.AI)
        entry.locked_attributes.lock("merchant", EnrichmentSource.USER)
        records = [
            EnrichmentRecord("Entry", entry.id, "category", EnrichmentSource.AI, "TV"),
            EnrichmentRecord("Entry", entry.id, "merchant", EnrichmentSource.AI, "N"),
        ]

        names = EnrichmentPolicy().attributes_to_unlock(
            entry,
            records,
            EnrichmentSource.AI,
        )

        assert names == ["category"]

    def test_filter_enrichable_drops_locked_entities(self, entry):
        other = Entry(
            account_id=entry.account_id,
            date=entry.date,
            amount=Decimal("1"),
            currency="USD",
            description="Other",
        )
        other.locked_attributes.lock("category")

        result = EnrichmentPolicy.filter_enrichable([entry, other], "category")

        assert result == [entry]


class TestEnrichmentRecord:
    def test_id_is_deterministic_per_key(self, entry):
        first = EnrichmentRecord("Entry", entry.id, "notes", EnrichmentSource.AI, "a")
        second = EnrichmentRecord("Entry", entry.id, "notes", EnrichmentSource.AI, "b")
        other_source = EnrichmentRecord(
            "Entry",
            entry.id,
            "notes",
            EnrichmentSource.RULE,
            "a",
        )

        assert first.id == second.id
        assert first.id != other_source.id

    def test_values_are_snapshotted_as_json_types(self, entry):
        record = EnrichmentRecord(
            "Entry",
            entry.id,
            "date",
            EnrichmentSource.RULE,
            date(2025, 3, 2),
        )

        assert record.value == "2025-03-02"

    def test_supersede_replaces_value_and_metadata(self, entry):
        record = EnrichmentRecord(
            "Entry",
            entry.id,
            "notes",
            EnrichmentSource.AI,
            "a",
            metadata={"model": "v1"},
        )

        record.supersede("b", {"model": "v2"})

        assert record.value == "b"
        assert record.metadata == {"model": "v2"}


class TestEnrichmentSource:
    def test_provider_sources(self):
        assert EnrichmentSource.SIMPLEFIN.is_provider()
        assert not EnrichmentSource.AI.is_provider()
        assert not EnrichmentSource.USER.is_automated()
        assert EnrichmentSource.RULE.is_automated()
