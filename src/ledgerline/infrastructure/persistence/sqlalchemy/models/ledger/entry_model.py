"""SQLAlchemy model for ledger entries."""

from __future__ import annotations

import datetime
import uuid
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from ledgerline.infrastructure.persistence.sqlalchemy.models.base import (
    Base,
    TimestampMixin,
)


class EntryModel(Base, TimestampMixin):
    """Database model for ledger entries.

    Deduplication:
    - external_id holds the namespaced provider id ("simplefin_TRN-1",
      "simplefin_fitid_ABC") and is unique per account.
    - external_id_kind keeps stable and fallback ids apart.
    - superseded_external_id keeps the fallback id an entry held before it
      was upgraded to a stable id, so replays of the fallback record match.
    - Entries without an external id are only matched by composite key
      (date, amount, description) and are never constrained here.
    """

    __tablename__ = "entries"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)

    account_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("linked_accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(19, 4), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)

    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    notes: Mapped[Optional[str]] = mapped_column(Text)
    category: Mapped[Optional[str]] = mapped_column(String(255))
    merchant: Mapped[Optional[str]] = mapped_column(String(255))

    external_id: Mapped[Optional[str]] = mapped_column(String(255))
    external_id_kind: Mapped[Optional[str]] = mapped_column(String(20))
    superseded_external_id: Mapped[Optional[str]] = mapped_column(String(255))

    # Denormalised from entryable so balance queries can exclude anchors
    is_opening_anchor: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    # Tagged union: {"type": "transaction" | "trade" | "valuation", ...}
    entryable: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    locked_attributes: Mapped[dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )

    __table_args__ = (
        UniqueConstraint(
            "account_id",
            "external_id",
            name="uq_entries_account_external_id",
        ),
        Index("ix_entries_account_date", "account_id", "date"),
        Index(
            "ix_entries_account_superseded_external_id",
            "account_id",
            "superseded_external_id",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<EntryModel(id={self.id}, date={self.date}, "
            f"amount={self.amount}, external_id={self.external_id})>"
        )
