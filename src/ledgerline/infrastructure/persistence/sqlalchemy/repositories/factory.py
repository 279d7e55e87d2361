"""SQLAlchemy repository factory and unit-of-work helpers."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ledgerline.infrastructure.persistence.sqlalchemy.repositories.enrichment import (
    EnrichmentRecordRepositorySQLAlchemy,
)
from ledgerline.infrastructure.persistence.sqlalchemy.repositories.integration import (
    ConnectionRepositorySQLAlchemy,
)
from ledgerline.infrastructure.persistence.sqlalchemy.repositories.ledger import (
    EntryRepositorySQLAlchemy,
    LinkedAccountRepositorySQLAlchemy,
)

if TYPE_CHECKING:
    from ledgerline.application.factories import UnitOfWork
    from ledgerline.domain.enrichment.repositories import EnrichableRepository

logger = logging.getLogger(__name__)


class SQLAlchemyRepositoryFactory:
    """SQLAlchemy implementation of the RepositoryFactory Protocol."""

    def __init__(self, session: AsyncSession):
        self._session = session

        # Cached instances (created on demand)
        self._entry_repo: EntryRepositorySQLAlchemy | None = None
        self._linked_account_repo: LinkedAccountRepositorySQLAlchemy | None = None
        self._record_repo: EnrichmentRecordRepositorySQLAlchemy | None = None
        self._connection_repo: ConnectionRepositorySQLAlchemy | None = None

    @property
    def session(self) -> AsyncSession:
        return self._session

    def entry_repository(self) -> EntryRepositorySQLAlchemy:
        if self._entry_repo is None:
            self._entry_repo = EntryRepositorySQLAlchemy(self._session)
        return self._entry_repo

    def linked_account_repository(self) -> LinkedAccountRepositorySQLAlchemy:
        if self._linked_account_repo is None:
            self._linked_account_repo = LinkedAccountRepositorySQLAlchemy(
                self._session,
            )
        return self._linked_account_repo

    def enrichment_record_repository(self) -> EnrichmentRecordRepositorySQLAlchemy:
        if self._record_repo is None:
            self._record_repo = EnrichmentRecordRepositorySQLAlchemy(self._session)
        return self._record_repo

    def connection_repository(self) -> ConnectionRepositorySQLAlchemy:
        if self._connection_repo is None:
            self._connection_repo = ConnectionRepositorySQLAlchemy(self._session)
        return self._connection_repo

    def enrichable_repositories(self) -> list[EnrichableRepository]:
        return [self.entry_repository()]

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()


def session_scope_factory(
    session_maker: async_sessionmaker[AsyncSession],
) -> UnitOfWork:
    """
    Build a UnitOfWork that opens a fresh session per call.

    Each account in a sync run gets its own session so one account's
    failure or rollback never touches another account's writes.

    Parameters
    ----------
    session_maker
        The shared session maker

    Returns
    -------
    Callable returning an async context manager that yields a factory
    """

    @asynccontextmanager
    async def unit_of_work() -> AsyncIterator[SQLAlchemyRepositoryFactory]:
        async with session_maker() as session:
            factory = SQLAlchemyRepositoryFactory(session)
            try:
                yield factory
            except Exception:
                logger.debug("Rolling back unit of work after error")
                await session.rollback()
                raise

    return unit_of_work
