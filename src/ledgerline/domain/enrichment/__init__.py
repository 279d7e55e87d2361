"""Enrichment domain: attribute locks and the audit trail of automated writes."""

from ledgerline.domain.enrichment.enrichable import (
    IGNORED_ENRICHABLE_ATTRIBUTES,
    Enrichable,
)
from ledgerline.domain.enrichment.exceptions import InvalidAttributeError

__all__ = [
    "Enrichable",
    "IGNORED_ENRICHABLE_ATTRIBUTES",
    "InvalidAttributeError",
]
