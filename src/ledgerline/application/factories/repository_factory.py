"""Repository factory protocol for application layer."""

from __future__ import annotations

from typing import Any, AsyncContextManager, Callable, Protocol

from ledgerline.domain.enrichment.repositories import (
    EnrichableRepository,
    EnrichmentRecordRepository,
)
from ledgerline.domain.integration.repositories import ConnectionRepository
from ledgerline.domain.ledger.repositories import (
    EntryRepository,
    LinkedAccountRepository,
)


class RepositoryFactory(Protocol):
    """Protocol for creating repositories bound to one unit of work."""

    @property
    def session(self) -> Any:
        """Get the database session for transaction management.

        The type is intentionally `Any` to avoid coupling the
        application layer to specific database implementations.
        """
        ...

    def entry_repository(self) -> EntryRepository:
        """Get entry repository."""
        ...

    def linked_account_repository(self) -> LinkedAccountRepository:
        """Get linked account repository."""
        ...

    def enrichment_record_repository(self) -> EnrichmentRecordRepository:
        """Get enrichment record repository."""
        ...

    def connection_repository(self) -> ConnectionRepository:
        """Get provider connection repository."""
        ...

    def enrichable_repositories(self) -> list[EnrichableRepository]:
        """Get repositories for every enrichable entity type."""
        ...

    async def commit(self) -> None:
        """Commit the unit of work."""
        ...

    async def rollback(self) -> None:
        """Roll back the unit of work."""
        ...


# Opens a fresh unit of work (own session) and yields its factory.
UnitOfWork = Callable[[], AsyncContextManager[RepositoryFactory]]
