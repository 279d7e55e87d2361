"""Tests for the SQLAlchemy entry and linked account repositories."""

from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio

from ledgerline.domain.enrichment.value_objects import EnrichmentSource
from ledgerline.domain.ledger.entities import Entry
from ledgerline.domain.ledger.exceptions import DuplicateExternalIdentityError
from ledgerline.domain.ledger.value_objects import ExternalIdentity, IdentityKind
from tests.shared.fixtures import seed_connection_and_account


@pytest_asyncio.fixture
async def account(factory):
    _, account = await seed_connection_and_account(factory)
    return account


def _entry(account, day=date(2025, 1, 10), amount="10.00", **kwargs) -> Entry:
    return Entry(
        account_id=account.id,
        date=day,
        amount=Decimal(amount),
        currency="USD",
        description=kwargs.pop("description", "Groceries"),
        **kwargs,
    )


class TestEntryRepository:
    async def test_round_trip(self, factory, account):
        repo = factory.entry_repository()
        entry = _entry(
            account,
            external_identity=ExternalIdentity.fallback("simplefin", "F1"),
            notes="weekly shop",
        )
        entry.locked_attributes.lock("notes", EnrichmentSource.USER)
        await repo.save(entry)
        factory.session.expunge_all()

        loaded = await repo.find_by_id(entry.id)

        assert loaded == entry
        assert loaded.amount == Decimal("10.00")
        assert loaded.external_identity.kind == IdentityKind.FALLBACK
        assert loaded.notes == "weekly shop"
        assert loaded.locked_attributes.locked_by("notes") == EnrichmentSource.USER
        assert loaded.created_at.tzinfo is not None

    async def test_update_existing(self, factory, account):
        repo = factory.entry_repository()
        entry = _entry(account)
        await repo.save(entry)

        entry.assign_external_identity(ExternalIdentity.stable("simplefin", "tx"))
        entry.set_attribute("category", "Food")
        await repo.save(entry)
        factory.session.expunge_all()

        loaded = await repo.find_by_id(entry.id)
        assert loaded.external_id == "simplefin_tx"
        assert loaded.category == "Food"
        assert await repo.count_by_account(account.id) == 1

    async def test_external_identity_is_unique_per_account(self, factory, account):
        repo = factory.entry_repository()
        identity = ExternalIdentity.stable("simplefin", "tx_1")
        await repo.save(_entry(account, external_identity=identity))

        with pytest.raises(DuplicateExternalIdentityError):
            await repo.save(_entry(account, external_identity=identity))

    async def test_same_identity_on_other_account_is_allowed(self, factory, account):
        connection = await factory.connection_repository().find_by_id(
            account.connection_id,
        )
        _, other = await seed_connection_and_account(
            factory,
            "ACT-2",
            connection=connection,
        )
        repo = factory.entry_repository()
        identity = ExternalIdentity.stable("simplefin", "tx_1")

        await repo.save(_entry(account, external_identity=identity))
        await repo.save(_entry(other, external_identity=identity))

        assert len(await repo.find_by_external_ids(other.id, ["simplefin_tx_1"])) == 1

    async def test_find_by_dates_and_external_ids(self, factory, account):
        repo = factory.entry_repository()
        first = _entry(
            account,
            day=date(2025, 1, 1),
            external_identity=ExternalIdentity.stable("simplefin", "a"),
        )
        second = _entry(account, day=date(2025, 1, 2))
        for entry in (first, second):
            await repo.save(entry)

        by_date = await repo.find_by_dates(account.id, [date(2025, 1, 2)])
        by_id = await repo.find_by_external_ids(account.id, ["simplefin_a", "missing"])

        assert by_date == [second]
        assert by_id == [first]
        assert await repo.find_by_external_ids(account.id, []) == []

    async def test_superseded_fallback_is_kept_after_upgrade(self, factory, account):
        repo = factory.entry_repository()
        fallback = ExternalIdentity.fallback("simplefin", "F1")
        entry = _entry(account, external_identity=fallback)
        await repo.save(entry)

        entry.assign_external_identity(ExternalIdentity.stable("simplefin", "S1"))
        await repo.save(entry)

        found = await repo.find_by_external_ids(account.id, ["simplefin_fitid_F1"])
        assert found == [entry]
        assert found[0].external_id == "simplefin_S1"
        assert found[0].superseded_identity == fallback

    async def test_anchor_queries_ignore_anchor(self, factory, account):
        repo = factory.entry_repository()
        await repo.save(_entry(account, day=date(2025, 1, 10), amount="10"))
        await repo.save(_entry(account, day=date(2025, 1, 20), amount="-4"))
        anchor = Entry.opening_anchor(account.id, date(2025, 1, 9), Decimal("50"), "USD")
        await repo.save(anchor)

        found = await repo.find_opening_anchor(account.id)

        assert found == anchor
        assert found.anchor_balance == Decimal("50")
        assert await repo.earliest_entry_date(account.id) == date(2025, 1, 10)
        assert await repo.sum_amounts(account.id) == Decimal("6")
        assert await repo.sum_amounts(
            account.id,
            after=date(2025, 1, 10),
            until=date(2025, 1, 20),
        ) == Decimal("-4")

    async def test_empty_account_aggregates(self, factory, account):
        repo = factory.entry_repository()

        assert await repo.find_opening_anchor(account.id) is None
        assert await repo.earliest_entry_date(account.id) is None
        assert await repo.sum_amounts(account.id) == Decimal("0")


class TestLinkedAccountRepository:
    async def test_sync_flag_is_exclusive(self, factory, account):
        repo = factory.linked_account_repository()

        assert await repo.try_begin_sync(account.id) is True
        assert await repo.try_begin_sync(account.id) is False

        await repo.end_sync(account.id)
        assert await repo.try_begin_sync(account.id) is True

    async def test_find_by_provider_account_id(self, factory, account):
        repo = factory.linked_account_repository()

        found = await repo.find_by_provider_account_id(account.connection_id, "ACT-1")

        assert found == account
        assert await repo.find_by_provider_account_id(account.connection_id, "x") is None
        assert await repo.find_by_connection(account.connection_id) == [account]
