"""Application service applying enrichment writes, locks and cache clears.

All methods work inside the caller's unit of work: they save through the
repositories (which flush) and leave commit or rollback to the caller, so
an enrichment and its audit records land in one transaction.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Optional
from uuid import UUID

from ledgerline.domain.enrichment.enrichable import IGNORED_ENRICHABLE_ATTRIBUTES
from ledgerline.domain.enrichment.entities import EnrichmentRecord
from ledgerline.domain.enrichment.services import EnrichmentPolicy
from ledgerline.domain.enrichment.value_objects import EnrichmentSource
from ledgerline.domain.shared.exceptions import ErrorCode, ValidationError

if TYPE_CHECKING:
    from ledgerline.application.factories import RepositoryFactory
    from ledgerline.domain.enrichment.enrichable import Enrichable
    from ledgerline.domain.enrichment.repositories import (
        EnrichableRepository,
        EnrichmentRecordRepository,
    )

logger = logging.getLogger(__name__)


class EnrichmentLedger:
    """Per-attribute writes from automated sources, subject to locks."""

    def __init__(
        self,
        record_repository: EnrichmentRecordRepository,
        enrichable_repositories: Iterable[EnrichableRepository],
        policy: Optional[EnrichmentPolicy] = None,
    ):
        self._records = record_repository
        self._repositories = {
            repo.enrichable_type: repo for repo in enrichable_repositories
        }
        self._policy = policy or EnrichmentPolicy()

    @classmethod
    def from_factory(cls, factory: RepositoryFactory) -> EnrichmentLedger:
        return cls(
            record_repository=factory.enrichment_record_repository(),
            enrichable_repositories=factory.enrichable_repositories(),
        )

    async def enrich(
        self,
        entity: Enrichable,
        attrs: Mapping[str, Any],
        source: EnrichmentSource,
        metadata: Optional[dict[str, Any]] = None,
        lock: bool = False,
    ) -> list[str]:
        """
        Write ``attrs`` on behalf of ``source`` where allowed.

        Locked, ignored and unchanged attributes are skipped silently. For
        every applied attribute one EnrichmentRecord keyed by (entity,
        attribute, source) is created or superseded.

        Parameters
        ----------
        entity
            The enrichable entity
        attrs
            Attribute name -> value
        source
            Who is writing; required so precedence is auditable
        metadata
            Free-form context stored on the records (model, confidence, ...)
        lock
            Lock each applied attribute to ``source`` afterwards

        Returns
        -------
        Names of the attributes actually applied

        Raises
        ------
        InvalidAttributeError
            If ``attrs`` names an attribute the entity does not have
        """
        source = EnrichmentSource(source)
        selected = self._policy.select(entity, attrs)
        if not selected:
            return []

        for name, value in selected.items():
            entity.set_attribute(name, value)
            if lock:
                entity.locked_attributes.lock(name, source)

        await self._repository_for(entity).save_enrichable(entity)

        for name, value in selected.items():
            await self._upsert_record(entity, name, value, source, metadata)

        logger.debug(
            "Enriched %s %s from %s: %s",
            entity.enrichable_type,
            entity.id,
            source.value,
            ", ".join(selected),
        )
        return list(selected)

    async def enrich_attribute(  # noqa: PLR0913
        self,
        entity: Enrichable,
        name: str,
        value: Any,
        source: EnrichmentSource,
        metadata: Optional[dict[str, Any]] = None,
        lock: bool = False,
    ) -> bool:
        applied = await self.enrich(entity, {name: value}, source, metadata, lock)
        return name in applied

    async def lock_attr(
        self,
        entity: Enrichable,
        name: str,
        source: EnrichmentSource = EnrichmentSource.USER,
    ) -> None:
        self._policy.validate_attribute(entity, name)
        if name in IGNORED_ENRICHABLE_ATTRIBUTES:
            return
        if entity.locked_attributes.locked_by(name) == source:
            return
        entity.locked_attributes.lock(name, source)
        await self._repository_for(entity).save_enrichable(entity)

    async def unlock_attr(self, entity: Enrichable, name: str) -> bool:
        """Remove a lock; returns False when the attribute was not locked."""
        self._policy.validate_attribute(entity, name)
        if not entity.locked_attributes.unlock(name):
            return False
        await self._repository_for(entity).save_enrichable(entity)
        return True

    async def lock_saved_attributes(self, entity: Enrichable) -> list[str]:
        """Lock every attribute in the entity's last directly saved change set."""
        names = self._policy.attributes_to_lock(entity)
        if not names:
            return []
        for name in names:
            entity.locked_attributes.lock(name, EnrichmentSource.USER)
        await self._repository_for(entity).save_enrichable(entity)
        return names

    async def apply_user_edit(
        self,
        entity: Enrichable,
        attrs: Mapping[str, Any],
    ) -> list[str]:
        """
        Direct user edit: write values regardless of locks, then lock them.

        No enrichment record is written; user values are not a cache.

        Returns
        -------
        Names of the attributes that changed (and are now locked)
        """
        for name in attrs:
            self._policy.validate_attribute(entity, name)
        changes = {
            name: value
            for name, value in attrs.items()
            if name not in IGNORED_ENRICHABLE_ATTRIBUTES
        }
        entity.apply_direct_changes(changes)
        return await self.lock_saved_attributes(entity)

    async def clear_source_cache(
        self,
        entity: Enrichable,
        source: EnrichmentSource,
    ) -> int:
        """
        Forget everything ``source`` wrote on one entity.

        Unlocks the attributes whose lock ``source`` holds, then deletes the
        source's records. Values stay as they are.

        Returns
        -------
        Number of records deleted
        """
        source = EnrichmentSource(source)
        records = await self._records.find_by_source(
            entity.enrichable_type,
            source,
            enrichable_id=entity.id,
        )
        if not records:
            return 0

        await self._unlock_for_records(entity, records, source)
        deleted = await self._records.delete_many([r.id for r in records])
        logger.info(
            "Cleared %d %s enrichment record(s) on %s %s",
            deleted,
            source.value,
            entity.enrichable_type,
            entity.id,
        )
        return deleted

    async def clear_source_cache_for_type(
        self,
        enrichable_type: str,
        source: EnrichmentSource,
    ) -> int:
        """Forget everything ``source`` wrote on all entities of one type."""
        source = EnrichmentSource(source)
        repository = self._repository_for_type(enrichable_type)
        records = await self._records.find_by_source(enrichable_type, source)
        if not records:
            return 0

        by_entity: dict[UUID, list[EnrichmentRecord]] = defaultdict(list)
        for record in records:
            by_entity[record.enrichable_id].append(record)

        entities = await repository.find_enrichable_by_ids(list(by_entity))
        for entity in entities:
            await self._unlock_for_records(entity, by_entity[entity.id], source)

        deleted = await self._records.delete_many([r.id for r in records])
        logger.info(
            "Cleared %d %s enrichment record(s) across %d %s entities",
            deleted,
            source.value,
            len(by_entity),
            enrichable_type,
        )
        return deleted

    async def clear_ai_cache(self, entity: Enrichable) -> int:
        return await self.clear_source_cache(entity, EnrichmentSource.AI)

    async def clear_ai_cache_for_type(self, enrichable_type: str) -> int:
        return await self.clear_source_cache_for_type(
            enrichable_type,
            EnrichmentSource.AI,
        )

    def enrichable(
        self,
        entities: Iterable[Enrichable],
        attribute: str,
    ) -> list[Enrichable]:
        """Entities whose ``attribute`` may still be enriched."""
        return self._policy.filter_enrichable(entities, attribute)

    async def _unlock_for_records(
        self,
        entity: Enrichable,
        records: Iterable[EnrichmentRecord],
        source: EnrichmentSource,
    ) -> None:
        names = self._policy.attributes_to_unlock(entity, records, source)
        if not names:
            return
        for name in names:
            entity.locked_attributes.unlock(name)
        await self._repository_for(entity).save_enrichable(entity)

    async def _upsert_record(
        self,
        entity: Enrichable,
        name: str,
        value: Any,
        source: EnrichmentSource,
        metadata: Optional[dict[str, Any]],
    ) -> None:
        record = await self._records.find(
            entity.enrichable_type,
            entity.id,
            name,
            source,
        )
        if record is None:
            record = EnrichmentRecord(
                enrichable_type=entity.enrichable_type,
                enrichable_id=entity.id,
                attribute_name=name,
                source=source,
                value=value,
                metadata=metadata,
            )
        else:
            record.supersede(value, metadata)
        await self._records.save(record)

    def _repository_for(self, entity: Enrichable) -> EnrichableRepository:
        return self._repository_for_type(entity.enrichable_type)

    def _repository_for_type(self, enrichable_type: str) -> EnrichableRepository:
        repository = self._repositories.get(enrichable_type)
        if repository is None:
            msg = f"No repository registered for enrichable type '{enrichable_type}'"
            raise ValidationError(
                msg,
                code=ErrorCode.INVALID_ATTRIBUTE,
                details={"enrichable_type": enrichable_type},
            )
        return repository
