"""SQLAlchemy model for enrichment records."""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import JSON, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledgerline.infrastructure.persistence.sqlalchemy.models.base import (
    Base,
    TimestampMixin,
)


class EnrichmentRecordModel(Base, TimestampMixin):
    """Database model for enrichment records.

    The reference to the enriched entity is polymorphic
    (enrichable_type, enrichable_id) and therefore carries no foreign key.
    """

    __tablename__ = "enrichment_records"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True)

    enrichable_type: Mapped[str] = mapped_column(String(50), nullable=False)
    enrichable_id: Mapped[uuid.UUID] = mapped_column(nullable=False)
    attribute_name: Mapped[str] = mapped_column(String(100), nullable=False)
    source: Mapped[str] = mapped_column(String(50), nullable=False)

    value: Mapped[Any] = mapped_column(JSON, nullable=True)
    # "metadata" is reserved on declarative classes
    metadata_: Mapped[dict[str, Any]] = mapped_column(
        "metadata",
        JSON,
        nullable=False,
        default=dict,
    )

    __table_args__ = (
        UniqueConstraint(
            "enrichable_type",
            "enrichable_id",
            "attribute_name",
            "source",
            name="uq_enrichment_records_key",
        ),
        Index("ix_enrichment_records_entity", "enrichable_type", "enrichable_id"),
        Index("ix_enrichment_records_source", "enrichable_type", "source"),
    )

    def __repr__(self) -> str:
        return (
            f"<EnrichmentRecordModel({self.enrichable_type}:{self.enrichable_id} "
            f"{self.attribute_name} [{self.source}])>"
        )
