"""SQLAlchemy implementation of ConnectionRepository."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledgerline.domain.enrichment.value_objects import EnrichmentSource
from ledgerline.domain.integration.entities import ProviderConnection
from ledgerline.domain.integration.repositories import ConnectionRepository
from ledgerline.domain.integration.value_objects import ConnectionStatus
from ledgerline.domain.shared.time import ensure_tz_aware
from ledgerline.infrastructure.persistence.sqlalchemy.models import (
    ProviderConnectionModel,
)


class ConnectionRepositorySQLAlchemy(ConnectionRepository):
    """SQLAlchemy implementation of provider connection repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, connection: ProviderConnection) -> None:
        model = await self._session.get(ProviderConnectionModel, connection.id)

        if model:
            model.name = connection.name
            model.status = connection.status.value
            model.last_synced_at = connection.last_synced_at
            model.raw_snapshot = connection.raw_snapshot
            model.snapshot_at = connection.snapshot_at
            model.updated_at = connection.updated_at
        else:
            model = ProviderConnectionModel(
                id=connection.id,
                source=connection.source.value,
                name=connection.name,
                status=connection.status.value,
                last_synced_at=connection.last_synced_at,
                raw_snapshot=connection.raw_snapshot,
                snapshot_at=connection.snapshot_at,
                created_at=connection.created_at,
                updated_at=connection.updated_at,
            )
            self._session.add(model)

        await self._session.flush()

    async def find_by_id(self, connection_id: UUID) -> Optional[ProviderConnection]:
        model = await self._session.get(ProviderConnectionModel, connection_id)
        if not model:
            return None
        return self._map_to_domain(model)

    async def find_all(self) -> list[ProviderConnection]:
        stmt = select(ProviderConnectionModel).order_by(
            ProviderConnectionModel.created_at,
        )
        result = await self._session.execute(stmt)
        return [self._map_to_domain(model) for model in result.scalars().all()]

    def _map_to_domain(self, model: ProviderConnectionModel) -> ProviderConnection:
        return ProviderConnection(
            id=model.id,
            source=EnrichmentSource(model.source),
            name=model.name,
            status=ConnectionStatus(model.status),
            last_synced_at=(
                ensure_tz_aware(model.last_synced_at) if model.last_synced_at else None
            ),
            raw_snapshot=model.raw_snapshot,
            snapshot_at=ensure_tz_aware(model.snapshot_at) if model.snapshot_at else None,
            created_at=ensure_tz_aware(model.created_at),
            updated_at=ensure_tz_aware(model.updated_at),
        )
