"""Enrichment record entity: the audit trail of automated attribute writes."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID, uuid5

from ledgerline.domain.enrichment.value_objects import EnrichmentSource
from ledgerline.domain.shared.time import utc_now

ENRICHMENT_RECORD_NAMESPACE = UUID("6f1c2d3e-4a5b-4c6d-8e7f-9a0b1c2d3e4f")


def to_snapshot(value: Any) -> Any:
    """Convert a value into a JSON-serialisable snapshot."""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    return value


class EnrichmentRecord:
    """
    One row per (enrichable entity, attribute name, source).

    Repeat enrichment from the same source updates the row in place, so the
    ID is derived deterministically from that key.
    """

    def __init__(  # noqa: PLR0913
        self,
        enrichable_type: str,
        enrichable_id: UUID,
        attribute_name: str,
        source: EnrichmentSource,
        value: Any = None,
        metadata: Optional[dict[str, Any]] = None,
        # For reconstitution from persistence:
        id: Optional[UUID] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        self._enrichable_type = enrichable_type
        self._enrichable_id = enrichable_id
        self._attribute_name = attribute_name
        self._source = EnrichmentSource(source)
        self._id = id or self.key_for(
            enrichable_type,
            enrichable_id,
            attribute_name,
            self._source,
        )
        self._value = to_snapshot(value)
        self._metadata = dict(metadata or {})
        self._created_at = created_at or utc_now()
        self._updated_at = updated_at or utc_now()

    @staticmethod
    def key_for(
        enrichable_type: str,
        enrichable_id: UUID,
        attribute_name: str,
        source: EnrichmentSource,
    ) -> UUID:
        name = f"{enrichable_type}:{enrichable_id}:{attribute_name}:{source.value}"
        return uuid5(ENRICHMENT_RECORD_NAMESPACE, name)

    @property
    def id(self) -> UUID:
        return self._id

    @property
    def enrichable_type(self) -> str:
        return self._enrichable_type

    @property
    def enrichable_id(self) -> UUID:
        return self._enrichable_id

    @property
    def attribute_name(self) -> str:
        return self._attribute_name

    @property
    def source(self) -> EnrichmentSource:
        return self._source

    @property
    def value(self) -> Any:
        return self._value

    @property
    def metadata(self) -> dict[str, Any]:
        return dict(self._metadata)

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    def supersede(self, value: Any, metadata: Optional[dict[str, Any]] = None) -> None:
        self._value = to_snapshot(value)
        self._metadata = dict(metadata or {})
        self._updated_at = utc_now()

    def __eq__(self, other) -> bool:
        if not isinstance(other, EnrichmentRecord):
            return False
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __str__(self) -> str:
        return (
            f"EnrichmentRecord[{self._source.value}]: "
            f"{self._enrichable_type}.{self._attribute_name}={self._value!r}"
        )
