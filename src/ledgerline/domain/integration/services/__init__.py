"""Domain services for the integration domain."""

from ledgerline.domain.integration.services.identity_matcher import (
    AccountLedgerIndex,
    IdentityMatcher,
    descriptions_match,
)
from ledgerline.domain.integration.services.sync_window_planner import (
    DiscoverySnapshot,
    SyncWindowPlanner,
)

__all__ = [
    "AccountLedgerIndex",
    "DiscoverySnapshot",
    "IdentityMatcher",
    "SyncWindowPlanner",
    "descriptions_match",
]
