"""Domain service deciding which enrichment writes are allowed.

Pure state and transition logic: no persistence. The application-level
EnrichmentLedger uses it inside a unit of work.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from ledgerline.domain.enrichment.enrichable import (
    IGNORED_ENRICHABLE_ATTRIBUTES,
    Enrichable,
)
from ledgerline.domain.enrichment.entities import EnrichmentRecord
from ledgerline.domain.enrichment.exceptions import InvalidAttributeError
from ledgerline.domain.enrichment.value_objects import EnrichmentSource


class EnrichmentPolicy:
    """Decide which attributes to write, lock and unlock."""

    def validate_attribute(self, entity: Enrichable, name: str) -> None:
        if name in IGNORED_ENRICHABLE_ATTRIBUTES:
            return
        if name not in entity.enrichable_attributes():
            raise InvalidAttributeError(entity.enrichable_type, name)

    def select(
        self,
        entity: Enrichable,
        attrs: Mapping[str, Any],
    ) -> dict[str, Any]:
        """
        Return the subset of ``attrs`` that may be written.

        An attribute is skipped when it is locked, ignored, or its value
        equals the current value. Unknown names raise InvalidAttributeError
        before anything is selected.

        Parameters
        ----------
        entity
            The enrichable entity
        attrs
            Attribute name -> proposed value
        """
        for name in attrs:
            self.validate_attribute(entity, name)

        selected: dict[str, Any] = {}
        for name, value in attrs.items():
            if name in IGNORED_ENRICHABLE_ATTRIBUTES:
                continue
            if entity.locked_attributes.is_locked(name):
                continue
            if entity.get_attribute(name) == value:
                continue
            selected[name] = value
        return selected

    def attributes_to_lock(self, entity: Enrichable) -> list[str]:
        return [
            name
            for name in entity.saved_changes()
            if name not in IGNORED_ENRICHABLE_ATTRIBUTES
        ]

    def attributes_to_unlock(
        self,
        entity: Enrichable,
        records: Iterable[EnrichmentRecord],
        source: EnrichmentSource,
    ) -> list[str]:
        """Attributes enriched by ``source`` whose lock that source still holds."""
        names = {
            record.attribute_name
            for record in records
            if record.source == source and record.enrichable_id == entity.id
        }
        return sorted(
            name
            for name in names
            if entity.locked_attributes.locked_by(name) == source
        )

    @staticmethod
    def filter_enrichable(
        entities: Iterable[Enrichable],
        attribute: str,
    ) -> list[Enrichable]:
        return [e for e in entities if not e.locked_attributes.is_locked(attribute)]
