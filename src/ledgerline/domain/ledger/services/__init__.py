"""Domain services for the ledger domain."""

from ledgerline.domain.ledger.services.opening_anchor_policy import (
    AnchorAction,
    AnchorDecision,
    OpeningAnchorPolicy,
)

__all__ = ["AnchorAction", "AnchorDecision", "OpeningAnchorPolicy"]
