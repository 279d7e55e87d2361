"""SQLAlchemy implementation of EnrichmentRecordRepository."""

from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledgerline.domain.enrichment.entities import EnrichmentRecord
from ledgerline.domain.enrichment.repositories import EnrichmentRecordRepository
from ledgerline.domain.enrichment.value_objects import EnrichmentSource
from ledgerline.domain.shared.time import ensure_tz_aware
from ledgerline.infrastructure.persistence.sqlalchemy.models import (
    EnrichmentRecordModel,
)

logger = logging.getLogger(__name__)


class EnrichmentRecordRepositorySQLAlchemy(EnrichmentRecordRepository):
    """SQLAlchemy implementation of enrichment record repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, record: EnrichmentRecord) -> None:
        model = await self._session.get(EnrichmentRecordModel, record.id)

        if model:
            model.value = record.value
            model.metadata_ = record.metadata
            model.updated_at = record.updated_at
        else:
            model = EnrichmentRecordModel(
                id=record.id,
                enrichable_type=record.enrichable_type,
                enrichable_id=record.enrichable_id,
                attribute_name=record.attribute_name,
                source=record.source.value,
                value=record.value,
                metadata_=record.metadata,
                created_at=record.created_at,
                updated_at=record.updated_at,
            )
            self._session.add(model)

        await self._session.flush()

    async def find(
        self,
        enrichable_type: str,
        enrichable_id: UUID,
        attribute_name: str,
        source: EnrichmentSource,
    ) -> Optional[EnrichmentRecord]:
        stmt = select(EnrichmentRecordModel).where(
            EnrichmentRecordModel.enrichable_type == enrichable_type,
            EnrichmentRecordModel.enrichable_id == enrichable_id,
            EnrichmentRecordModel.attribute_name == attribute_name,
            EnrichmentRecordModel.source == source.value,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        if not model:
            return None
        return self._map_to_domain(model)

    async def find_by_entity(
        self,
        enrichable_type: str,
        enrichable_id: UUID,
    ) -> list[EnrichmentRecord]:
        stmt = (
            select(EnrichmentRecordModel)
            .where(
                EnrichmentRecordModel.enrichable_type == enrichable_type,
                EnrichmentRecordModel.enrichable_id == enrichable_id,
            )
            .order_by(EnrichmentRecordModel.created_at)
        )
        result = await self._session.execute(stmt)
        return [self._map_to_domain(model) for model in result.scalars().all()]

    async def find_by_source(
        self,
        enrichable_type: str,
        source: EnrichmentSource,
        enrichable_id: Optional[UUID] = None,
    ) -> list[EnrichmentRecord]:
        stmt = select(EnrichmentRecordModel).where(
            EnrichmentRecordModel.enrichable_type == enrichable_type,
            EnrichmentRecordModel.source == source.value,
        )
        if enrichable_id is not None:
            stmt = stmt.where(EnrichmentRecordModel.enrichable_id == enrichable_id)
        stmt = stmt.order_by(EnrichmentRecordModel.created_at)

        result = await self._session.execute(stmt)
        return [self._map_to_domain(model) for model in result.scalars().all()]

    async def delete_many(self, record_ids: list[UUID]) -> int:
        if not record_ids:
            return 0
        stmt = select(EnrichmentRecordModel).where(
            EnrichmentRecordModel.id.in_(record_ids),
        )
        result = await self._session.execute(stmt)
        models = result.scalars().all()
        for model in models:
            await self._session.delete(model)
        await self._session.flush()

        logger.debug("Deleted %d enrichment records", len(models))
        return len(models)

    def _map_to_domain(self, model: EnrichmentRecordModel) -> EnrichmentRecord:
        return EnrichmentRecord(
            id=model.id,
            enrichable_type=model.enrichable_type,
            enrichable_id=model.enrichable_id,
            attribute_name=model.attribute_name,
            source=EnrichmentSource(model.source),
            value=model.value,
            metadata=model.metadata_,
            created_at=ensure_tz_aware(model.created_at),
            updated_at=ensure_tz_aware(model.updated_at),
        )
