"""Application services."""

from ledgerline.application.services.account_processor import AccountProcessor
from ledgerline.application.services.enrichment_ledger import EnrichmentLedger
from ledgerline.application.services.opening_anchor_manager import (
    OpeningAnchorManager,
)

__all__ = ["AccountProcessor", "EnrichmentLedger", "OpeningAnchorManager"]
