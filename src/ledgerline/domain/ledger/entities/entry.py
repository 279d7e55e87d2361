"""Ledger entry entity."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, ClassVar, Mapping, Optional
from uuid import UUID, uuid4

from ledgerline.domain.enrichment.exceptions import InvalidAttributeError
from ledgerline.domain.enrichment.value_objects import LockedAttributes
from ledgerline.domain.ledger.exceptions import IdentityDowngradeError
from ledgerline.domain.ledger.value_objects import (
    Entryable,
    ExternalIdentity,
    TransactionPayload,
    ValuationKind,
    ValuationPayload,
)
from ledgerline.domain.shared.exceptions import ErrorCode, ValidationError
from ledgerline.domain.shared.time import utc_now

OPENING_ANCHOR_DESCRIPTION = "Opening balance"


class Entry:
    """
    A dated, signed monetary line on one account.

    Sign convention: positive amounts are outflows (debits), negative
    amounts are inflows (credits).

    Entries are enrichable: description, notes, category, merchant and date
    may be written by automated sources unless locked by a user edit.
    """

    enrichable_type: ClassVar[str] = "Entry"
    ENRICHABLE_ATTRIBUTES: ClassVar[frozenset[str]] = frozenset(
        {"date", "description", "notes", "category", "merchant"},
    )

    def __init__(  # noqa: PLR0913
        self,
        account_id: UUID,
        date: date,
        amount: Decimal | int | str,
        currency: str,
        description: str,
        entryable: Optional[Entryable] = None,
        external_identity: Optional[ExternalIdentity] = None,
        superseded_identity: Optional[ExternalIdentity] = None,
        notes: Optional[str] = None,
        category: Optional[str] = None,
        merchant: Optional[str] = None,
        locked_attributes: Optional[LockedAttributes] = None,
        # For reconstitution from persistence:
        id: Optional[UUID] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        self._id = id or uuid4()
        self._account_id = account_id
        self._date = date
        self._amount = self._coerce_amount(amount)
        self._currency = (currency or "").strip().upper()
        self._description = (description or "").strip()
        self._entryable: Entryable = entryable or TransactionPayload()
        self._external_identity = external_identity
        self._superseded_identity = superseded_identity
        self._notes = notes
        self._category = category
        self._merchant = merchant
        self._locked_attributes = locked_attributes or LockedAttributes()
        self._saved_changes: dict[str, tuple[Any, Any]] = {}
        self._created_at = created_at or utc_now()
        self._updated_at = updated_at or utc_now()

        self._validate()

    @classmethod
    def opening_anchor(
        cls,
        account_id: UUID,
        on_date: date,
        balance: Decimal,
        currency: str,
    ) -> Entry:
        return cls(
            account_id=account_id,
            date=on_date,
            amount=Decimal("0"),
            currency=currency,
            description=OPENING_ANCHOR_DESCRIPTION,
            entryable=ValuationPayload(
                kind=ValuationKind.OPENING_ANCHOR,
                balance=balance,
            ),
        )

    @staticmethod
    def _coerce_amount(amount: Decimal | int | str) -> Decimal:
        if isinstance(amount, float):
            msg = "Entry amounts must not be floats"
            raise ValidationError(msg, code=ErrorCode.INVALID_AMOUNT)
        return amount if isinstance(amount, Decimal) else Decimal(str(amount))

    def _validate(self) -> None:
        if len(self._currency) != 3 or not self._currency.isalpha():
            msg = f"Invalid currency code: {self._currency!r}"
            raise ValidationError(msg, code=ErrorCode.INVALID_CURRENCY)

        if self.is_opening_anchor and self._amount != 0:
            msg = "Opening anchor entries must have a zero amount"
            raise ValidationError(msg, code=ErrorCode.INVALID_AMOUNT)

    @property
    def id(self) -> UUID:
        return self._id

    @property
    def account_id(self) -> UUID:
        return self._account_id

    @property
    def date(self) -> date:
        return self._date

    @property
    def amount(self) -> Decimal:
        return self._amount

    @property
    def currency(self) -> str:
        return self._currency

    @property
    def description(self) -> str:
        return self._description

    @property
    def notes(self) -> Optional[str]:
        return self._notes

    @property
    def category(self) -> Optional[str]:
        return self._category

    @property
    def merchant(self) -> Optional[str]:
        return self._merchant

    @property
    def entryable(self) -> Entryable:
        return self._entryable

    @property
    def external_identity(self) -> Optional[ExternalIdentity]:
        return self._external_identity

    @property
    def superseded_identity(self) -> Optional[ExternalIdentity]:
        """The fallback identity this entry held before its stable upgrade."""
        return self._superseded_identity

    @property
    def external_id(self) -> Optional[str]:
        return self._external_identity.value if self._external_identity else None

    @property
    def locked_attributes(self) -> LockedAttributes:
        return self._locked_attributes

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    @property
    def is_opening_anchor(self) -> bool:
        return (
            isinstance(self._entryable, ValuationPayload)
            and self._entryable.is_opening_anchor()
        )

    @property
    def anchor_balance(self) -> Decimal:
        if not isinstance(self._entryable, ValuationPayload):
            msg = "Entry is not a valuation"
            raise ValidationError(msg)
        return self._entryable.balance

    # -- Enrichable -------------------------------------------------------

    def enrichable_attributes(self) -> frozenset[str]:
        return self.ENRICHABLE_ATTRIBUTES

    def get_attribute(self, name: str) -> Any:
        if name not in self.ENRICHABLE_ATTRIBUTES:
            raise InvalidAttributeError(self.enrichable_type, name)
        return getattr(self, f"_{name}")

    def set_attribute(self, name: str, value: Any) -> None:
        if name not in self.ENRICHABLE_ATTRIBUTES:
            raise InvalidAttributeError(self.enrichable_type, name)
        if name == "description":
            value = (value or "").strip()
        setattr(self, f"_{name}", value)
        self._updated_at = utc_now()

    def saved_changes(self) -> dict[str, tuple[Any, Any]]:
        return dict(self._saved_changes)

    def apply_direct_changes(self, changes: Mapping[str, Any]) -> dict[str, tuple[Any, Any]]:
        """
        Apply a direct (user-initiated) update.

        Records the change set so ``lock_saved_attributes`` can lock every
        attribute that actually changed. Lock state is ignored here: a direct
        edit may always overwrite.
        """
        applied: dict[str, tuple[Any, Any]] = {}
        for name, value in changes.items():
            old = self.get_attribute(name)
            if old == value:
                continue
            self.set_attribute(name, value)
            applied[name] = (old, value)
        self._saved_changes = applied
        return dict(applied)

    # -- Identity ---------------------------------------------------------

    def assign_external_identity(self, identity: ExternalIdentity) -> bool:
        """
        Set or upgrade the external identity.

        Allowed: absent -> any, fallback -> stable. Re-assigning the same
        value is a no-op. Anything else would reassign a stable id and raises.
        The replaced fallback identity is kept as ``superseded_identity``.

        Returns
        -------
        True if the identity changed
        """
        current = self._external_identity
        if current == identity:
            return False
        if current is not None and not current.can_be_replaced_by(identity):
            raise IdentityDowngradeError(current.value, identity.value)

        if current is not None:
            self._superseded_identity = current
        self._external_identity = identity
        self._updated_at = utc_now()
        return True

    # -- Opening anchor ---------------------------------------------------

    def move_anchor(self, on_date: date, balance: Decimal) -> None:
        if not self.is_opening_anchor:
            msg = "Only opening anchor entries can be moved"
            raise ValidationError(msg)
        self._date = on_date
        self._entryable = ValuationPayload(
            kind=ValuationKind.OPENING_ANCHOR,
            balance=balance,
        )
        self._updated_at = utc_now()

    @classmethod
    def reconstitute(cls, **kwargs: Any) -> Entry:
        return cls(**kwargs)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Entry):
            return False
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __str__(self) -> str:
        return (
            f"Entry[{self._date}]: {self._amount} {self._currency} "
            f"- {self._description[:50]}"
        )
