"""Repository interface for linked accounts."""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from ledgerline.domain.ledger.entities import LinkedAccount


class LinkedAccountRepository(ABC):
    """Repository for persisting linked accounts."""

    @abstractmethod
    async def save(self, account: LinkedAccount) -> None:
        """Create or update a linked account."""

    @abstractmethod
    async def find_by_id(self, account_id: UUID) -> Optional[LinkedAccount]:
        """Find a linked account by its ID."""

    @abstractmethod
    async def find_by_provider_account_id(
        self,
        connection_id: UUID,
        provider_account_id: str,
    ) -> Optional[LinkedAccount]:
        """Find the ledger account linked to one upstream account."""

    @abstractmethod
    async def find_by_connection(self, connection_id: UUID) -> list[LinkedAccount]:
        """All accounts linked through a connection."""

    @abstractmethod
    async def try_begin_sync(self, account_id: UUID) -> bool:
        """
        Atomically set the account's sync-in-progress flag.

        Returns
        -------
        True if the flag was acquired, False if a sync already holds it
        """

    @abstractmethod
    async def end_sync(self, account_id: UUID) -> None:
        """Clear the account's sync-in-progress flag."""
