"""DTOs for sync runs."""

from ledgerline.application.dtos.integration.account_process_result import (
    CANCELLED_REASON,
    SYNC_IN_PROGRESS_REASON,
    TIMEOUT_REASON,
    AccountProcessResult,
)
from ledgerline.application.dtos.integration.sync_summary import SyncSummary

__all__ = [
    "AccountProcessResult",
    "CANCELLED_REASON",
    "SYNC_IN_PROGRESS_REASON",
    "SyncSummary",
    "TIMEOUT_REASON",
]
