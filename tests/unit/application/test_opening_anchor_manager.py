"""Tests for OpeningAnchorManager against a SQLite session."""

from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio

from ledgerline.application.services import OpeningAnchorManager
from ledgerline.domain.ledger.entities import Entry
from ledgerline.domain.ledger.exceptions import OpeningAnchorMoveError
from tests.shared.fixtures import seed_connection_and_account


@pytest.fixture
def manager(factory) -> OpeningAnchorManager:
    return OpeningAnchorManager.from_factory(factory)


@pytest_asyncio.fixture
async def account(factory):
    _, account = await seed_connection_and_account(
        factory,
        current_balance=Decimal("900"),
    )
    return account


async def _import(factory, account, *rows: tuple[date, str]) -> list[Entry]:
    entries = []
    for day, amount in rows:
        entry = Entry(
            account_id=account.id,
            date=day,
            amount=Decimal(amount),
            currency="USD",
            description=f"row {day}",
        )
        await factory.entry_repository().save(entry)
        entries.append(entry)
    return entries


async def _balance_after(factory, account, anchor: Entry, day: date) -> Decimal:
    spent = await factory.entry_repository().sum_amounts(
        account.id,
        after=anchor.date,
        until=day,
    )
    return anchor.anchor_balance - spent


class TestReconcile:
    async def test_no_entries_no_anchor(self, manager, account):
        assert await manager.reconcile(account, []) is None

    async def test_creates_anchor_before_earliest_entry(
        self,
        factory,
        manager,
        account,
    ):
        imported = await _import(
            factory,
            account,
            (date(2025, 1, 10), "100"),
            (date(2025, 1, 12), "-50"),
        )

        anchor = await manager.reconcile(
            account,
            imported,
            known_balance=account.current_balance,
        )

        assert anchor.is_opening_anchor
        assert anchor.date == date(2025, 1, 9)
        assert anchor.amount == Decimal("0")
        assert anchor.anchor_balance == Decimal("950")
        assert await _balance_after(factory, account, anchor, date(2025, 1, 12)) == Decimal(
            "900",
        )

    async def test_explicit_opening_overrides_back_calculation(
        self,
        factory,
        manager,
        account,
    ):
        imported = await _import(factory, account, (date(2025, 1, 10), "100"))

        anchor = await manager.reconcile(
            account,
            imported,
            known_balance=Decimal("900"),
            explicit_opening=Decimal("5000"),
        )

        assert anchor.anchor_balance == Decimal("5000")

    async def test_unknown_balance_anchors_at_zero(self, factory, manager, account):
        imported = await _import(factory, account, (date(2025, 1, 10), "100"))

        anchor = await manager.reconcile(account, imported)

        assert anchor.anchor_balance == Decimal("0")

    async def test_older_import_moves_anchor_and_keeps_later_balances(
        self,
        factory,
        manager,
        account,
    ):
        first = await _import(
            factory,
            account,
            (date(2025, 1, 10), "100"),
            (date(2025, 1, 12), "-50"),
        )
        anchor = await manager.reconcile(account, first, known_balance=Decimal("900"))
        before = await _balance_after(factory, account, anchor, date(2025, 1, 12))

        older = await _import(factory, account, (date(2025, 1, 5), "30"))
        moved = await manager.reconcile(account, older)

        assert moved.id == anchor.id
        assert moved.date == date(2025, 1, 4)
        assert moved.anchor_balance == Decimal("980")
        after = await _balance_after(factory, account, moved, date(2025, 1, 12))
        assert after == before

    async def test_import_on_anchor_date_moves_anchor(self, factory, manager, account):
        first = await _import(factory, account, (date(2025, 1, 10), "100"))
        await manager.reconcile(account, first)

        same_day = await _import(factory, account, (date(2025, 1, 9), "20"))
        moved = await manager.reconcile(account, same_day)

        assert moved.date == date(2025, 1, 8)
        assert moved.anchor_balance == Decimal("20")

    async def test_newer_import_leaves_anchor(self, factory, manager, account):
        first = await _import(factory, account, (date(2025, 1, 10), "100"))
        anchor = await manager.reconcile(account, first)

        newer = await _import(factory, account, (date(2025, 2, 1), "10"))
        unchanged = await manager.reconcile(account, newer)

        assert unchanged.date == anchor.date
        assert unchanged.anchor_balance == anchor.anchor_balance

    async def test_only_one_anchor_per_account(self, factory, manager, account):
        first = await _import(factory, account, (date(2025, 1, 10), "100"))
        await manager.reconcile(account, first)
        older = await _import(factory, account, (date(2025, 1, 1), "5"))
        await manager.reconcile(account, older)

        entries = await factory.entry_repository().find_by_account(account.id)

        assert sum(1 for e in entries if e.is_opening_anchor) == 1


class TestExplicitOpeningBalance:
    async def test_creates_anchor(self, manager, account):
        anchor = await manager.set_opening_balance(
            account,
            Decimal("250"),
            date(2024, 12, 31),
        )

        assert anchor.date == date(2024, 12, 31)
        assert anchor.anchor_balance == Decimal("250")

    async def test_moves_anchor_earlier(self, manager, account):
        await manager.set_opening_balance(account, Decimal("250"), date(2024, 12, 31))

        anchor = await manager.set_opening_balance(
            account,
            Decimal("300"),
            date(2024, 12, 1),
        )

        assert anchor.date == date(2024, 12, 1)
        assert anchor.anchor_balance == Decimal("300")

    async def test_never_moves_forward(self, manager, account):
        await manager.set_opening_balance(account, Decimal("250"), date(2024, 12, 31))

        with pytest.raises(OpeningAnchorMoveError):
            await manager.set_opening_balance(account, Decimal("1"), date(2025, 1, 5))


class TestPreview:
    async def test_will_adjust(self, factory, manager, account):
        imported = await _import(factory, account, (date(2025, 1, 10), "100"))
        await manager.reconcile(account, imported)

        assert await manager.will_adjust(account, date(2025, 1, 9)) is True
        assert await manager.will_adjust(account, date(2025, 1, 10)) is False
        assert await manager.will_adjust(account, None) is False

    async def test_will_adjust_without_anchor(self, manager, account):
        assert await manager.will_adjust(account, date(2025, 1, 1)) is False

    def test_adjusted_anchor_date(self, manager):
        assert manager.adjusted_anchor_date(date(2025, 1, 10)) == date(2025, 1, 9)
        assert manager.adjusted_anchor_date(None) is None
