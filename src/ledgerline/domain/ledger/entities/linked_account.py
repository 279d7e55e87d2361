"""Linked account entity: a ledger account bound to one provider account."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid5

from ledgerline.domain.shared.time import utc_now

LINKED_ACCOUNT_NAMESPACE = UUID("0d4e5f6a-7b8c-4d9e-a0f1-b2c3d4e5f6a7")


class LinkedAccount:
    """
    A ledger account linked to an account at an external provider.

    The ID is derived from connection + provider account id so relinking the
    same upstream account never produces a second ledger account.
    """

    def __init__(  # noqa: PLR0913
        self,
        connection_id: UUID,
        provider_account_id: str,
        name: str,
        currency: str,
        current_balance: Optional[Decimal] = None,
        available_balance: Optional[Decimal] = None,
        balance_date: Optional[date] = None,
        sync_in_progress: bool = False,
        # For reconstitution from persistence:
        id: Optional[UUID] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        self._connection_id = connection_id
        self._provider_account_id = provider_account_id
        self._id = id or uuid5(
            LINKED_ACCOUNT_NAMESPACE,
            f"{connection_id}:{provider_account_id}",
        )
        self._name = name.strip()
        self._currency = currency.strip().upper()
        self._current_balance = current_balance
        self._available_balance = available_balance
        self._balance_date = balance_date
        self._sync_in_progress = sync_in_progress
        self._created_at = created_at or utc_now()
        self._updated_at = updated_at or utc_now()

        self._validate()

    def _validate(self) -> None:
        if not self._provider_account_id:
            msg = "Provider account id cannot be empty"
            raise ValueError(msg)
        if not self._name:
            msg = "Account name cannot be empty"
            raise ValueError(msg)

    @property
    def id(self) -> UUID:
        return self._id

    @property
    def connection_id(self) -> UUID:
        return self._connection_id

    @property
    def provider_account_id(self) -> str:
        return self._provider_account_id

    @property
    def name(self) -> str:
        return self._name

    @property
    def currency(self) -> str:
        return self._currency

    @property
    def current_balance(self) -> Optional[Decimal]:
        return self._current_balance

    @property
    def available_balance(self) -> Optional[Decimal]:
        return self._available_balance

    @property
    def balance_date(self) -> Optional[date]:
        return self._balance_date

    @property
    def sync_in_progress(self) -> bool:
        return self._sync_in_progress

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    def update_balance(
        self,
        current_balance: Optional[Decimal],
        available_balance: Optional[Decimal] = None,
        as_of: Optional[date] = None,
    ) -> None:
        self._current_balance = current_balance
        self._available_balance = (
            available_balance if available_balance is not None else current_balance
        )
        self._balance_date = as_of
        self._updated_at = utc_now()

    def __eq__(self, other) -> bool:
        if not isinstance(other, LinkedAccount):
            return False
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __str__(self) -> str:
        return f"LinkedAccount: {self._name} ({self._provider_account_id})"
