"""SQLAlchemy implementation of EntryRepository."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ledgerline.domain.enrichment.value_objects import LockedAttributes
from ledgerline.domain.ledger.entities import Entry
from ledgerline.domain.ledger.exceptions import DuplicateExternalIdentityError
from ledgerline.domain.ledger.repositories import EntryRepository
from ledgerline.domain.ledger.value_objects import (
    ExternalIdentity,
    IdentityKind,
    entryable_from_dict,
    entryable_to_dict,
)
from ledgerline.domain.shared.time import ensure_tz_aware
from ledgerline.infrastructure.persistence.sqlalchemy.models import EntryModel

logger = logging.getLogger(__name__)


class EntryRepositorySQLAlchemy(EntryRepository):
    """SQLAlchemy implementation of entry repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, entry: Entry) -> None:
        if entry.external_id is not None:
            await self._ensure_identity_free(entry)

        model = await self._session.get(EntryModel, entry.id)
        if model:
            self._update_model_from_domain(model, entry)
        else:
            model = self._create_model_from_domain(entry)
            self._session.add(model)

        try:
            await self._session.flush()
        except IntegrityError as e:
            # A concurrent writer claimed the identity between check and flush
            if entry.external_id is None:
                raise
            raise DuplicateExternalIdentityError(
                entry.account_id,
                entry.external_id,
            ) from e
        logger.debug("Entry saved: %s", entry.id)

    async def find_by_id(self, entry_id: UUID) -> Optional[Entry]:
        model = await self._session.get(EntryModel, entry_id)
        if not model:
            return None
        return self._map_to_domain(model)

    async def find_by_ids(self, entry_ids: list[UUID]) -> list[Entry]:
        if not entry_ids:
            return []
        stmt = select(EntryModel).where(EntryModel.id.in_(entry_ids))
        result = await self._session.execute(stmt)
        return [self._map_to_domain(model) for model in result.scalars().all()]

    async def find_by_external_ids(
        self,
        account_id: UUID,
        external_ids: Iterable[str],
    ) -> list[Entry]:
        values = list(set(external_ids))
        if not values:
            return []
        stmt = select(EntryModel).where(
            EntryModel.account_id == account_id,
            or_(
                EntryModel.external_id.in_(values),
                EntryModel.superseded_external_id.in_(values),
            ),
        )
        result = await self._session.execute(stmt)
        return [self._map_to_domain(model) for model in result.scalars().all()]

    async def find_by_dates(
        self,
        account_id: UUID,
        dates: Iterable[date],
    ) -> list[Entry]:
        values = list(set(dates))
        if not values:
            return []
        stmt = (
            select(EntryModel)
            .where(
                EntryModel.account_id == account_id,
                EntryModel.date.in_(values),
            )
            .order_by(EntryModel.date, EntryModel.created_at)
        )
        result = await self._session.execute(stmt)
        return [self._map_to_domain(model) for model in result.scalars().all()]

    async def find_by_account(self, account_id: UUID) -> list[Entry]:
        stmt = (
            select(EntryModel)
            .where(EntryModel.account_id == account_id)
            .order_by(EntryModel.date, EntryModel.created_at)
        )
        result = await self._session.execute(stmt)
        return [self._map_to_domain(model) for model in result.scalars().all()]

    async def count_by_account(self, account_id: UUID) -> int:
        stmt = select(func.count(EntryModel.id)).where(
            EntryModel.account_id == account_id,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def find_opening_anchor(self, account_id: UUID) -> Optional[Entry]:
        stmt = select(EntryModel).where(
            EntryModel.account_id == account_id,
            EntryModel.is_opening_anchor.is_(True),
        )
        result = await self._session.execute(stmt)
        model = result.scalars().first()
        if not model:
            return None
        return self._map_to_domain(model)

    async def earliest_entry_date(self, account_id: UUID) -> Optional[date]:
        stmt = select(func.min(EntryModel.date)).where(
            EntryModel.account_id == account_id,
            EntryModel.is_opening_anchor.is_(False),
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def sum_amounts(
        self,
        account_id: UUID,
        after: Optional[date] = None,
        until: Optional[date] = None,
    ) -> Decimal:
        stmt = select(func.sum(EntryModel.amount)).where(
            EntryModel.account_id == account_id,
            EntryModel.is_opening_anchor.is_(False),
        )
        if after is not None:
            stmt = stmt.where(EntryModel.date > after)
        if until is not None:
            stmt = stmt.where(EntryModel.date <= until)

        result = await self._session.execute(stmt)
        total = result.scalar_one_or_none()
        if total is None:
            return Decimal("0")
        return Decimal(str(total))

    async def _ensure_identity_free(self, entry: Entry) -> None:
        stmt = select(EntryModel.id).where(
            EntryModel.account_id == entry.account_id,
            EntryModel.external_id == entry.external_id,
            EntryModel.id != entry.id,
        )
        result = await self._session.execute(stmt)
        if result.first() is not None:
            raise DuplicateExternalIdentityError(entry.account_id, entry.external_id)

    def _create_model_from_domain(self, entry: Entry) -> EntryModel:
        identity = entry.external_identity
        return EntryModel(
            id=entry.id,
            account_id=entry.account_id,
            date=entry.date,
            amount=entry.amount,
            currency=entry.currency,
            description=entry.description,
            notes=entry.notes,
            category=entry.category,
            merchant=entry.merchant,
            external_id=identity.value if identity else None,
            external_id_kind=identity.kind.value if identity else None,
            superseded_external_id=(
                entry.superseded_identity.value if entry.superseded_identity else None
            ),
            is_opening_anchor=entry.is_opening_anchor,
            entryable=entryable_to_dict(entry.entryable),
            locked_attributes=entry.locked_attributes.to_dict(),
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )

    def _update_model_from_domain(self, model: EntryModel, entry: Entry) -> None:
        identity = entry.external_identity
        model.date = entry.date
        model.amount = entry.amount
        model.currency = entry.currency
        model.description = entry.description
        model.notes = entry.notes
        model.category = entry.category
        model.merchant = entry.merchant
        model.external_id = identity.value if identity else None
        model.external_id_kind = identity.kind.value if identity else None
        model.superseded_external_id = (
            entry.superseded_identity.value if entry.superseded_identity else None
        )
        model.is_opening_anchor = entry.is_opening_anchor
        # JSON columns are replaced, never mutated, so changes are detected
        model.entryable = entryable_to_dict(entry.entryable)
        model.locked_attributes = entry.locked_attributes.to_dict()
        model.updated_at = entry.updated_at

    def _map_to_domain(self, model: EntryModel) -> Entry:
        identity = None
        if model.external_id:
            identity = ExternalIdentity(
                value=model.external_id,
                kind=IdentityKind(model.external_id_kind or IdentityKind.STABLE.value),
            )
        superseded = None
        if model.superseded_external_id:
            superseded = ExternalIdentity(
                value=model.superseded_external_id,
                kind=IdentityKind.FALLBACK,
            )
        return Entry.reconstitute(
            id=model.id,
            account_id=model.account_id,
            date=model.date,
            amount=model.amount,
            currency=model.currency,
            description=model.description,
            notes=model.notes,
            category=model.category,
            merchant=model.merchant,
            external_identity=identity,
            superseded_identity=superseded,
            entryable=entryable_from_dict(model.entryable),
            locked_attributes=LockedAttributes.from_dict(model.locked_attributes),
            created_at=ensure_tz_aware(model.created_at),
            updated_at=ensure_tz_aware(model.updated_at),
        )
