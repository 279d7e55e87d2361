"""SQLAlchemy model for linked accounts."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, Date, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledgerline.infrastructure.persistence.sqlalchemy.models.base import (
    Base,
    TimestampMixin,
)


class LinkedAccountModel(Base, TimestampMixin):
    """Database model for ledger accounts linked to a provider account."""

    __tablename__ = "linked_accounts"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True)

    connection_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("provider_connections.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    provider_account_id: Mapped[str] = mapped_column(String(255), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)

    current_balance: Mapped[Optional[Decimal]] = mapped_column(Numeric(19, 4))
    available_balance: Mapped[Optional[Decimal]] = mapped_column(Numeric(19, 4))
    balance_date: Mapped[Optional[date]] = mapped_column(Date)

    # Acquired with a conditional UPDATE so only one sync runs per account.
    sync_in_progress: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    __table_args__ = (
        UniqueConstraint(
            "connection_id",
            "provider_account_id",
            name="uq_linked_accounts_connection_provider_account",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<LinkedAccountModel(id={self.id}, "
            f"provider_account_id={self.provider_account_id})>"
        )
