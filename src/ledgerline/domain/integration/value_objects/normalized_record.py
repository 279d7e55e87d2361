"""Provider-agnostic shapes every provider mapper must produce."""

from __future__ import annotations

import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from ledgerline.domain.enrichment.value_objects import EnrichmentSource
from ledgerline.domain.ledger.value_objects import ExternalIdentity

# Attributes a provider may set on a newly created entry.
PROVIDER_SETTABLE_ATTRIBUTES = ("description", "notes", "merchant")


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class NormalizedRecord(BaseModel):
    """One upstream transaction in canonical form.

    Amounts follow the ledger convention: positive = outflow (debit),
    negative = inflow (credit). Mappers flip provider signs as needed.
    """

    source: EnrichmentSource = Field(..., description="Provider that produced it")
    date: datetime.date
    amount: Decimal
    currency: str = Field(..., min_length=3, max_length=3)
    description: str = Field(default="")

    stable_id: Optional[str] = Field(
        default=None,
        description="Provider's permanent transaction id",
    )
    fallback_id: Optional[str] = Field(
        default=None,
        description="Secondary identifier such as a bank FITID",
    )

    notes: Optional[str] = None
    merchant: Optional[str] = None
    pending: bool = False

    raw: dict[str, Any] = Field(default_factory=dict, repr=False)

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
    )

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        return value.upper()

    @field_validator("stable_id", "fallback_id", "notes", "merchant", mode="before")
    @classmethod
    def _blank_optional(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("description", mode="before")
    @classmethod
    def _none_description(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_serializer("amount")
    def serialize_amount(self, value: Decimal) -> str:
        return str(value)

    @field_serializer("date")
    def serialize_date(self, value: datetime.date) -> str:
        return value.isoformat()

    def stable_identity(self) -> Optional[ExternalIdentity]:
        if self.stable_id is None:
            return None
        return ExternalIdentity.stable(self.source.value, self.stable_id)

    def fallback_identity(self) -> Optional[ExternalIdentity]:
        if self.fallback_id is None:
            return None
        return ExternalIdentity.fallback(self.source.value, self.fallback_id)

    def preferred_identity(self) -> Optional[ExternalIdentity]:
        return self.stable_identity() or self.fallback_identity()

    def settable_attributes(self) -> dict[str, Any]:
        """Provider-owned attribute values, empty optional fields left out."""
        values: dict[str, Any] = {"description": self.description}
        if self.notes is not None:
            values["notes"] = self.notes
        if self.merchant is not None:
            values["merchant"] = self.merchant
        return values

    def __str__(self) -> str:
        return (
            f"{self.date}: {self.amount} {self.currency} "
            f"- {self.description[:50]}"
        )


class NormalizedAccount(BaseModel):
    """One upstream account in canonical form."""

    provider_account_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    currency: str = Field(..., min_length=3, max_length=3)
    current_balance: Optional[Decimal] = None
    available_balance: Optional[Decimal] = None
    balance_date: Optional[datetime.date] = None

    raw: dict[str, Any] = Field(default_factory=dict, repr=False)

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
    )

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        return value.upper()
