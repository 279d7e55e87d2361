"""Map SimpleFin bridge payloads to normalized accounts and records.

SimpleFin uses the banking sign convention (expenses negative, income
positive); the ledger stores outflows as positive amounts, so amounts are
negated here.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional
from urllib.parse import urlparse

from ledgerline.domain.enrichment.value_objects import EnrichmentSource
from ledgerline.domain.integration.exceptions import RecordMappingError
from ledgerline.domain.integration.ports import ProviderMapper
from ledgerline.domain.integration.value_objects import (
    NormalizedAccount,
    NormalizedRecord,
)

logger = logging.getLogger(__name__)

UNKNOWN_TRANSACTION_NAME = "Unknown transaction"
DEFAULT_CURRENCY = "USD"


class SimplefinMapper(ProviderMapper):
    """ProviderMapper for the SimpleFin bridge."""

    source = EnrichmentSource.SIMPLEFIN
    # SimpleFin rejects ranges longer than 60 days
    max_window_days = 60

    def normalize_account(self, raw: dict[str, Any]) -> NormalizedAccount:
        current = self._parse_decimal(raw.get("balance"), "balance")
        available = self._parse_decimal(
            raw.get("available-balance"),
            "available-balance",
        )
        if current is None and available is None:
            msg = "SimpleFin account has neither balance nor available-balance"
            raise RecordMappingError(msg, payload=raw)

        balance_date = raw.get("balance-date")
        return NormalizedAccount(
            provider_account_id=str(raw["id"]),
            name=raw.get("name") or str(raw["id"]),
            currency=self._parse_currency(raw.get("currency")),
            current_balance=current if current is not None else available,
            available_balance=available,
            balance_date=(
                self._parse_date(balance_date) if balance_date is not None else None
            ),
            raw=raw,
        )

    def normalize_transaction(
        self,
        raw: dict[str, Any],
        currency: str,
    ) -> NormalizedRecord:
        amount = self._parse_decimal(raw.get("amount"), "amount")
        if amount is None:
            msg = "SimpleFin transaction has no amount"
            raise RecordMappingError(msg, payload=raw)

        return NormalizedRecord(
            source=self.source,
            date=self._parse_date(raw.get("posted")),
            amount=-amount,
            currency=self._parse_currency(raw.get("currency"), default=currency),
            description=self._name(raw),
            stable_id=self._optional_str(raw.get("id")),
            fallback_id=self._optional_str(raw.get("fitid")),
            notes=self._optional_str(raw.get("memo")),
            pending=bool(raw.get("pending", False)),
            raw=raw,
        )

    def extract_error(self, raw: dict[str, Any]) -> Optional[str]:
        errors = raw.get("errors")
        if isinstance(errors, list) and errors:
            return "; ".join(str(error) for error in errors)
        if isinstance(errors, str) and errors.strip():
            return errors
        return super().extract_error(raw)

    @staticmethod
    def _name(raw: dict[str, Any]) -> str:
        payee = (raw.get("payee") or "").strip()
        description = (raw.get("description") or "").strip()

        if payee and description and payee != description:
            return f"{payee} - {description}"
        if payee:
            return payee
        if description:
            return description
        return (raw.get("memo") or "").strip() or UNKNOWN_TRANSACTION_NAME

    @staticmethod
    def _parse_decimal(value: Any, field: str) -> Optional[Decimal]:
        if value is None or value == "":
            return None
        if isinstance(value, bool):
            msg = f"Invalid {field}: {value!r}"
            raise RecordMappingError(msg)
        try:
            return Decimal(str(value))
        except InvalidOperation as e:
            msg = f"Invalid {field}: {value!r}"
            raise RecordMappingError(msg) from e

    @staticmethod
    def _parse_date(value: Any) -> date:
        """Parse an ISO date string or a UNIX timestamp."""
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return datetime.fromtimestamp(value, tz=timezone.utc).date()
        if isinstance(value, str) and value.strip():
            text = value.strip()
            if text.isdigit():
                return datetime.fromtimestamp(int(text), tz=timezone.utc).date()
            try:
                return date.fromisoformat(text[:10])
            except ValueError as e:
                msg = f"Unable to parse transaction date: {value!r}"
                raise RecordMappingError(msg) from e
        msg = f"Invalid date value: {value!r}"
        raise RecordMappingError(msg)

    @staticmethod
    def _parse_currency(value: Any, default: str = DEFAULT_CURRENCY) -> str:
        if not value:
            return default
        text = str(value).strip()
        # Custom currencies are identified by URL; keep the last path segment
        if text.startswith("http"):
            segment = urlparse(text).path.rstrip("/").split("/")[-1]
            if len(segment) == 3 and segment.isalpha():
                return segment.upper()
            logger.debug("Unrecognised custom currency %s, using %s", text, default)
            return default
        return text.upper()

    @staticmethod
    def _optional_str(value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None
