"""Repository interface for ledger entries."""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional
from uuid import UUID

from ledgerline.domain.ledger.entities import Entry


class EntryRepository(ABC):
    """Repository for persisting ledger entries.

    Also satisfies the EnrichableRepository protocol for ``"Entry"``.
    """

    enrichable_type = Entry.enrichable_type

    @abstractmethod
    async def save(self, entry: Entry) -> None:
        """
        Create or update an entry.

        Raises
        ------
        ConflictError
            If another entry on the same account already holds the
            entry's external identity
        """

    @abstractmethod
    async def find_by_id(self, entry_id: UUID) -> Optional[Entry]:
        """Find an entry by its ID."""

    @abstractmethod
    async def find_by_ids(self, entry_ids: list[UUID]) -> list[Entry]:
        """Find several entries by ID. Missing IDs are ignored."""

    @abstractmethod
    async def find_by_external_ids(
        self,
        account_id: UUID,
        external_ids: Iterable[str],
    ) -> list[Entry]:
        """
        Find entries on one account by external identity value.

        Parameters
        ----------
        account_id
            The ledger account
        external_ids
            Identity values (namespaced, e.g. ``"simplefin_tx_1"``)

        Returns
        -------
        Entries holding any of the given identities, including entries that
        held one as a fallback id before a stable upgrade
        """

    @abstractmethod
    async def find_by_dates(
        self,
        account_id: UUID,
        dates: Iterable[date],
    ) -> list[Entry]:
        """Find entries on one account dated on any of the given dates."""

    @abstractmethod
    async def find_by_account(self, account_id: UUID) -> list[Entry]:
        """All entries of an account, oldest first."""

    @abstractmethod
    async def count_by_account(self, account_id: UUID) -> int:
        """Number of entries on an account, anchors included."""

    @abstractmethod
    async def find_opening_anchor(self, account_id: UUID) -> Optional[Entry]:
        """The account's opening balance anchor, if one exists."""

    @abstractmethod
    async def earliest_entry_date(self, account_id: UUID) -> Optional[date]:
        """Date of the account's earliest entry, anchors excluded."""

    @abstractmethod
    async def sum_amounts(
        self,
        account_id: UUID,
        after: Optional[date] = None,
        until: Optional[date] = None,
    ) -> Decimal:
        """
        Sum of entry amounts dated in ``(after, until]``, anchors excluded.

        An omitted bound leaves that side of the range open.

        Returns
        -------
        The sum, or ``Decimal("0")`` when no entries fall in the range
        """

    # EnrichableRepository

    async def find_enrichable_by_id(self, entity_id: UUID) -> Optional[Entry]:
        return await self.find_by_id(entity_id)

    async def find_enrichable_by_ids(self, entity_ids: list[UUID]) -> list[Entry]:
        return await self.find_by_ids(entity_ids)

    async def save_enrichable(self, entity: Entry) -> None:
        await self.save(entity)
