"""Value objects for the integration domain."""

from ledgerline.domain.integration.value_objects.account_sync_state import (
    AccountSyncState,
)
from ledgerline.domain.integration.value_objects.connection_status import (
    ConnectionStatus,
)
from ledgerline.domain.integration.value_objects.match_result import (
    MatchOutcome,
    MatchResult,
    MergeCandidate,
)
from ledgerline.domain.integration.value_objects.normalized_record import (
    PROVIDER_SETTABLE_ATTRIBUTES,
    NormalizedAccount,
    NormalizedRecord,
)
from ledgerline.domain.integration.value_objects.skipped_account import (
    SkippedAccount,
)
from ledgerline.domain.integration.value_objects.sync_window import (
    SyncPlan,
    SyncWindow,
)

__all__ = [
    "AccountSyncState",
    "ConnectionStatus",
    "MatchOutcome",
    "MatchResult",
    "MergeCandidate",
    "NormalizedAccount",
    "NormalizedRecord",
    "PROVIDER_SETTABLE_ATTRIBUTES",
    "SkippedAccount",
    "SyncPlan",
    "SyncWindow",
]
