"""Application service keeping an account's opening balance anchor consistent.

Invoked once after a batch import. The anchor is created lazily before the
account's earliest tracked entry and moved earlier whenever imported entries
predate it, with its balance recomputed so running balances after the old
anchor date do not change. It is never deleted and never moved forward.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable, Optional

from ledgerline.domain.ledger.entities import Entry
from ledgerline.domain.ledger.services import AnchorAction, OpeningAnchorPolicy

if TYPE_CHECKING:
    from ledgerline.application.factories import RepositoryFactory
    from ledgerline.domain.ledger.entities import LinkedAccount
    from ledgerline.domain.ledger.repositories import EntryRepository

logger = logging.getLogger(__name__)


class OpeningAnchorManager:
    """Create, move and preview the opening balance anchor of an account."""

    def __init__(
        self,
        entry_repository: EntryRepository,
        policy: Optional[OpeningAnchorPolicy] = None,
    ):
        self._entries = entry_repository
        self._policy = policy or OpeningAnchorPolicy()

    @classmethod
    def from_factory(cls, factory: RepositoryFactory) -> OpeningAnchorManager:
        return cls(entry_repository=factory.entry_repository())

    async def reconcile(
        self,
        account: LinkedAccount,
        imported_entries: Iterable[Entry],
        known_balance: Optional[Decimal] = None,
        explicit_opening: Optional[Decimal] = None,
    ) -> Optional[Entry]:
        """
        Reconcile the anchor after an import.

        Parameters
        ----------
        account
            The account that was imported into
        imported_entries
            Entries created by the import; they must already be saved
        known_balance
            The account's current balance, used to back-calculate the
            opening balance of a new anchor
        explicit_opening
            Opening balance supplied by the import source itself

        Returns
        -------
        The anchor after reconciliation, or None if the account has no
        entries to anchor
        """
        earliest_imported = _earliest(imported_entries)
        anchor = await self._entries.find_opening_anchor(account.id)

        if anchor is None:
            return await self._create(
                account,
                earliest_imported,
                known_balance,
                explicit_opening,
            )

        decision = self._policy.decide(anchor.date, earliest_imported)
        if decision.action == AnchorAction.MOVE:
            old_date = anchor.date
            if explicit_opening is not None:
                balance = explicit_opening
            else:
                between = await self._entries.sum_amounts(
                    account.id,
                    after=decision.anchor_date,
                    until=old_date,
                )
                balance = self._policy.moved_balance(anchor.anchor_balance, [between])
            anchor.move_anchor(decision.anchor_date, balance)
            await self._entries.save(anchor)
            logger.info(
                "Moved opening anchor of account %s from %s to %s (balance %s)",
                account.id,
                old_date,
                decision.anchor_date,
                balance,
            )
        elif explicit_opening is not None and explicit_opening != anchor.anchor_balance:
            anchor.move_anchor(anchor.date, explicit_opening)
            await self._entries.save(anchor)
            logger.info(
                "Set opening balance of account %s to %s",
                account.id,
                explicit_opening,
            )
        return anchor

    async def set_opening_balance(
        self,
        account: LinkedAccount,
        balance: Decimal,
        on_date: date,
    ) -> Entry:
        """
        Set an explicit opening balance, e.g. from a file import.

        Raises
        ------
        OpeningAnchorMoveError
            If an anchor exists and ``on_date`` is after its date
        """
        anchor = await self._entries.find_opening_anchor(account.id)
        if anchor is None:
            anchor = Entry.opening_anchor(account.id, on_date, balance, account.currency)
        else:
            self._policy.ensure_not_forward(anchor.date, on_date)
            anchor.move_anchor(on_date, balance)
        await self._entries.save(anchor)
        return anchor

    async def will_adjust(self, account: LinkedAccount, earliest_date: Optional[date]) -> bool:
        """Whether importing entries from ``earliest_date`` would move the anchor."""
        anchor = await self._entries.find_opening_anchor(account.id)
        return self._policy.will_adjust(anchor.date if anchor else None, earliest_date)

    def adjusted_anchor_date(self, earliest_date: Optional[date]) -> Optional[date]:
        """Where the anchor would move for entries starting at ``earliest_date``."""
        if earliest_date is None:
            return None
        return self._policy.anchor_date_for(earliest_date)

    async def _create(
        self,
        account: LinkedAccount,
        earliest_imported: Optional[date],
        known_balance: Optional[Decimal],
        explicit_opening: Optional[Decimal],
    ) -> Optional[Entry]:
        earliest_tracked = await self._entries.earliest_entry_date(account.id)
        decision = self._policy.decide(None, earliest_imported, earliest_tracked)
        if decision.action != AnchorAction.CREATE:
            return None

        tracked: list[Decimal] = []
        if explicit_opening is None and known_balance is not None:
            tracked.append(await self._entries.sum_amounts(account.id))
        balance = self._policy.initial_balance(explicit_opening, known_balance, tracked)

        anchor = Entry.opening_anchor(
            account.id,
            decision.anchor_date,
            balance,
            account.currency,
        )
        await self._entries.save(anchor)
        logger.info(
            "Created opening anchor for account %s on %s (balance %s)",
            account.id,
            decision.anchor_date,
            balance,
        )
        return anchor


def _earliest(entries: Iterable[Entry]) -> Optional[date]:
    dates = [e.date for e in entries if not e.is_opening_anchor]
    return min(dates) if dates else None
