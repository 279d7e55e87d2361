"""Tests for EnrichmentLedger against a SQLite session."""

from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio

from ledgerline.application.services import EnrichmentLedger
from ledgerline.domain.enrichment.exceptions import InvalidAttributeError
from ledgerline.domain.enrichment.value_objects import EnrichmentSource
from ledgerline.domain.ledger.entities import Entry
from ledgerline.domain.shared.exceptions import ValidationError
from tests.shared.fixtures import seed_connection_and_account


@pytest.fixture
def ledger(factory) -> EnrichmentLedger:
    return EnrichmentLedger.from_factory(factory)


@pytest_asyncio.fixture
async def account(factory):
    _, account = await seed_connection_and_account(factory)
    return account


async def _saved_entry(factory, account, description="NETFLIX.COM") -> Entry:
    entry = Entry(
        account_id=account.id,
        date=date(2025, 3, 1),
        amount=Decimal("15.99"),
        currency="USD",
        description=description,
    )
    await factory.entry_repository().save(entry)
    return entry


async def _reload(factory, entry: Entry) -> Entry:
    factory.session.expunge_all()
    reloaded = await factory.entry_repository().find_by_id(entry.id)
    assert reloaded is not None
    return reloaded


class TestEnrich:
    async def test_writes_values_and_records(self, factory, ledger, account):
        entry = await _saved_entry(factory, account)

        applied = await ledger.enrich(
            entry,
            {"category": "Subscriptions", "merchant": "Netflix"},
            EnrichmentSource.AI,
            metadata={"model": "classifier-v2", "confidence": 0.93},
        )

        assert sorted(applied) == ["category", "merchant"]
        reloaded = await _reload(factory, entry)
        assert reloaded.category == "Subscriptions"
        assert reloaded.merchant == "Netflix"

        records = await factory.enrichment_record_repository().find_by_entity(
            "Entry",
            entry.id,
        )
        assert {r.attribute_name for r in records} == {"category", "merchant"}
        assert all(r.source == EnrichmentSource.AI for r in records)
        assert records[0].metadata["model"] == "classifier-v2"

    async def test_unchanged_values_are_skipped(self, factory, ledger, account):
        entry = await _saved_entry(factory, account)

        applied = await ledger.enrich(
            entry,
            {"description": "NETFLIX.COM"},
            EnrichmentSource.RULE,
        )

        assert applied == []
        records = await factory.enrichment_record_repository().find_by_entity(
            "Entry",
            entry.id,
        )
        assert records == []

    async def test_same_source_supersedes_its_record(self, factory, ledger, account):
        entry = await _saved_entry(factory, account)

        await ledger.enrich(entry, {"category": "TV"}, EnrichmentSource.AI)
        await ledger.enrich(entry, {"category": "Streaming"}, EnrichmentSource.AI)

        record = await factory.enrichment_record_repository().find(
            "Entry",
            entry.id,
            "category",
            EnrichmentSource.AI,
        )
        assert record.value == "Streaming"
        records = await factory.enrichment_record_repository().find_by_entity(
            "Entry",
            entry.id,
        )
        assert len(records) == 1

    async def test_sources_keep_separate_records(self, factory, ledger, account):
        entry = await _saved_entry(factory, account)

        await ledger.enrich(entry, {"category": "TV"}, EnrichmentSource.RULE)
        await ledger.enrich(entry, {"category": "Streaming"}, EnrichmentSource.AI)

        records = await factory.enrichment_record_repository().find_by_entity(
            "Entry",
            entry.id,
        )
        assert {r.source for r in records} == {
            EnrichmentSource.RULE,
            EnrichmentSource.AI,
        }
        assert entry.category == "Streaming"

    async def test_unknown_attribute_raises_before_writing(
        self,
        factory,
        ledger,
        account,
    ):
        entry = await _saved_entry(factory, account)

        with pytest.raises(InvalidAttributeError):
            await ledger.enrich(
                entry,
                {"category": "TV", "amount": Decimal("1")},
                EnrichmentSource.AI,
            )

        assert entry.category is None

    async def test_lock_flag_locks_to_source(self, factory, ledger, account):
        entry = await _saved_entry(factory, account)

        await ledger.enrich(entry, {"category": "TV"}, EnrichmentSource.AI, lock=True)

        reloaded = await _reload(factory, entry)
        assert reloaded.locked_attributes.locked_by("category") == EnrichmentSource.AI


class TestUserPrecedence:
    async def test_user_edit_blocks_automated_writes(self, factory, ledger, account):
        entry = await _saved_entry(factory, account)

        locked = await ledger.apply_user_edit(entry, {"category": "Entertainment"})
        applied = await ledger.enrich(
            entry,
            {"category": "Subscriptions", "merchant": "Netflix"},
            EnrichmentSource.AI,
        )

        assert locked == ["category"]
        assert applied == ["merchant"]
        reloaded = await _reload(factory, entry)
        assert reloaded.category == "Entertainment"
        assert reloaded.locked_attributes.locked_by("category") == EnrichmentSource.USER

    async def test_user_edit_writes_no_record(self, factory, ledger, account):
        entry = await _saved_entry(factory, account)

        await ledger.apply_user_edit(entry, {"notes": "shared account"})

        records = await factory.enrichment_record_repository().find_by_entity(
            "Entry",
            entry.id,
        )
        assert records == []

    async def test_unlock_lets_automated_writes_through(self, factory, ledger, account):
        entry = await _saved_entry(factory, account)
        await ledger.apply_user_edit(entry, {"category": "Entertainment"})

        assert await ledger.unlock_attr(entry, "category") is True
        assert await ledger.unlock_attr(entry, "category") is False

        applied = await ledger.enrich(entry, {"category": "TV"}, EnrichmentSource.AI)
        assert applied == ["category"]

    async def test_lock_attr(self, factory, ledger, account):
        entry = await _saved_entry(factory, account)

        await ledger.lock_attr(entry, "merchant")

        assert await ledger.enrich_attribute(
            entry,
            "merchant",
            "Netflix",
            EnrichmentSource.AI,
        ) is False

    async def test_enrichable_filters_locked_entities(self, factory, ledger, account):
        free = await _saved_entry(factory, account, "A")
        locked = await _saved_entry(factory, account, "B")
        await ledger.lock_attr(locked, "category")

        assert ledger.enrichable([free, locked], "category") == [free]


class TestClearCache:
    async def test_clear_ai_cache_unlocks_and_keeps_values(
        self,
        factory,
        ledger,
        account,
    ):
        entry = await _saved_entry(factory, account)
        await ledger.enrich(entry, {"category": "TV"}, EnrichmentSource.AI, lock=True)

        deleted = await ledger.clear_ai_cache(entry)

        assert deleted == 1
        reloaded = await _reload(factory, entry)
        assert reloaded.category == "TV"
        assert not reloaded.locked_attributes.is_locked("category")
        records = await factory.enrichment_record_repository().find_by_entity(
            "Entry",
            entry.id,
        )
        assert records == []

    async def test_clear_keeps_user_locks_and_other_sources(
        self,
        factory,
        ledger,
        account,
    ):
        entry = await _saved_entry(factory, account)
        await ledger.enrich(entry, {"merchant": "Netflix"}, EnrichmentSource.RULE)
        await ledger.enrich(entry, {"category": "TV"}, EnrichmentSource.AI)
        await ledger.apply_user_edit(entry, {"category": "Entertainment"})

        deleted = await ledger.clear_ai_cache(entry)

        assert deleted == 1
        reloaded = await _reload(factory, entry)
        assert reloaded.locked_attributes.locked_by("category") == EnrichmentSource.USER
        records = await factory.enrichment_record_repository().find_by_entity(
            "Entry",
            entry.id,
        )
        assert [r.source for r in records] == [EnrichmentSource.RULE]

    async def test_clear_without_records_is_noop(self, factory, ledger, account):
        entry = await _saved_entry(factory, account)

        assert await ledger.clear_ai_cache(entry) == 0

    async def test_clear_for_type_covers_all_entities(self, factory, ledger, account):
        first = await _saved_entry(factory, account, "A")
        second = await _saved_entry(factory, account, "B")
        await ledger.enrich(first, {"category": "X"}, EnrichmentSource.AI, lock=True)
        await ledger.enrich(second, {"category": "Y"}, EnrichmentSource.AI, lock=True)

        deleted = await ledger.clear_ai_cache_for_type("Entry")

        assert deleted == 2
        for entry in (first, second):
            reloaded = await _reload(factory, entry)
            assert not reloaded.locked_attributes.is_locked("category")

    async def test_clear_for_unknown_type_raises(self, ledger):
        with pytest.raises(ValidationError):
            await ledger.clear_source_cache_for_type("Invoice", EnrichmentSource.AI)
