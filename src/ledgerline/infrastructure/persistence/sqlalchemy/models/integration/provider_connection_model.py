"""SQLAlchemy model for provider connections."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from ledgerline.infrastructure.persistence.sqlalchemy.models.base import (
    Base,
    TimestampMixin,
)


class ProviderConnectionModel(Base, TimestampMixin):
    """Database model for provider connections."""

    __tablename__ = "provider_connections"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)

    source: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)

    last_synced_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
    )

    # Verbatim payload of the first fetched chunk of the latest sync
    raw_snapshot: Mapped[Optional[Any]] = mapped_column(JSON)
    snapshot_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"<ProviderConnectionModel(id={self.id}, source={self.source})>"
