"""Provider mapper port (interface)."""

from abc import ABC, abstractmethod
from typing import Any, Optional

from ledgerline.domain.enrichment.value_objects import EnrichmentSource
from ledgerline.domain.integration.value_objects import (
    NormalizedAccount,
    NormalizedRecord,
)


class ProviderMapper(ABC):
    """
    Turns one provider's raw payloads into the normalized shapes.

    The core treats a mapper as a black box. Mapping failures for a single
    payload raise RecordMappingError (or a ValueError/KeyError/TypeError
    from the parsing itself) and only affect that payload.
    """

    source: EnrichmentSource
    max_window_days: int

    @abstractmethod
    def normalize_account(self, raw: dict[str, Any]) -> NormalizedAccount:
        """Map a raw account payload."""

    @abstractmethod
    def normalize_transaction(
        self,
        raw: dict[str, Any],
        currency: str,
    ) -> NormalizedRecord:
        """
        Map a raw transaction payload.

        Parameters
        ----------
        raw
            The provider's transaction payload
        currency
            The owning account's currency, used when the payload has none
        """

    def provider_account_id(self, raw: Any) -> Optional[str]:
        """Best-effort account id of a raw account payload, for reporting."""
        if isinstance(raw, dict) and raw.get("id") is not None:
            return str(raw["id"])
        return None

    def extract_error(self, raw: dict[str, Any]) -> Optional[str]:
        """Embedded error marker of a payload, or None when it is clean."""
        error = raw.get("error")
        if error:
            return str(error)
        return None
