"""SQLAlchemy implementation of LinkedAccountRepository."""

from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ledgerline.domain.ledger.entities import LinkedAccount
from ledgerline.domain.ledger.repositories import LinkedAccountRepository
from ledgerline.domain.shared.time import ensure_tz_aware, utc_now
from ledgerline.infrastructure.persistence.sqlalchemy.models import LinkedAccountModel

logger = logging.getLogger(__name__)


class LinkedAccountRepositorySQLAlchemy(LinkedAccountRepository):
    """SQLAlchemy implementation of linked account repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, account: LinkedAccount) -> None:
        model = await self._session.get(LinkedAccountModel, account.id)

        if model:
            logger.debug("Updating linked account: %s", account.id)
            # sync_in_progress is owned by try_begin_sync/end_sync; a stale
            # domain object must not clear a flag held by another run
            model.name = account.name
            model.currency = account.currency
            model.current_balance = account.current_balance
            model.available_balance = account.available_balance
            model.balance_date = account.balance_date
            model.updated_at = account.updated_at
        else:
            logger.debug("Creating linked account: %s", account.id)
            model = LinkedAccountModel(
                id=account.id,
                connection_id=account.connection_id,
                provider_account_id=account.provider_account_id,
                name=account.name,
                currency=account.currency,
                current_balance=account.current_balance,
                available_balance=account.available_balance,
                balance_date=account.balance_date,
                sync_in_progress=account.sync_in_progress,
                created_at=account.created_at,
                updated_at=account.updated_at,
            )
            self._session.add(model)

        await self._session.flush()

    async def find_by_id(self, account_id: UUID) -> Optional[LinkedAccount]:
        model = await self._session.get(LinkedAccountModel, account_id)
        if not model:
            return None
        return self._map_to_domain(model)

    async def find_by_provider_account_id(
        self,
        connection_id: UUID,
        provider_account_id: str,
    ) -> Optional[LinkedAccount]:
        stmt = select(LinkedAccountModel).where(
            LinkedAccountModel.connection_id == connection_id,
            LinkedAccountModel.provider_account_id == provider_account_id,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        if not model:
            return None
        return self._map_to_domain(model)

    async def find_by_connection(self, connection_id: UUID) -> list[LinkedAccount]:
        stmt = (
            select(LinkedAccountModel)
            .where(LinkedAccountModel.connection_id == connection_id)
            .order_by(LinkedAccountModel.created_at)
        )
        result = await self._session.execute(stmt)
        return [self._map_to_domain(model) for model in result.scalars().all()]

    async def try_begin_sync(self, account_id: UUID) -> bool:
        # Conditional UPDATE: only one writer can flip the flag
        stmt = (
            update(LinkedAccountModel)
            .where(
                LinkedAccountModel.id == account_id,
                LinkedAccountModel.sync_in_progress.is_(False),
            )
            .values(sync_in_progress=True, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        acquired = result.rowcount == 1
        if not acquired:
            logger.debug("Sync flag for account %s is already held", account_id)
        return acquired

    async def end_sync(self, account_id: UUID) -> None:
        stmt = (
            update(LinkedAccountModel)
            .where(LinkedAccountModel.id == account_id)
            .values(sync_in_progress=False, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(stmt)

    def _map_to_domain(self, model: LinkedAccountModel) -> LinkedAccount:
        return LinkedAccount(
            id=model.id,
            connection_id=model.connection_id,
            provider_account_id=model.provider_account_id,
            name=model.name,
            currency=model.currency,
            current_balance=model.current_balance,
            available_balance=model.available_balance,
            balance_date=model.balance_date,
            sync_in_progress=model.sync_in_progress,
            created_at=ensure_tz_aware(model.created_at),
            updated_at=ensure_tz_aware(model.updated_at),
        )
