"""DTO for the result of one connection-level sync run."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional
from uuid import UUID

from ledgerline.application.dtos.integration.account_process_result import (
    AccountProcessResult,
)
from ledgerline.domain.integration.value_objects import MergeCandidate, SkippedAccount
from ledgerline.domain.shared.time import utc_now


@dataclass
class SyncSummary:
    """Aggregated result of a sync run across a connection's accounts.

    Skipped accounts do not make a run unsuccessful; only connection-level
    errors do.
    """

    connection_id: UUID
    requested_start: date
    effective_start: date
    truncated: bool = False
    synced_at: datetime = field(default_factory=utc_now)

    accounts_processed: int = 0
    transactions_imported: int = 0
    duplicates: int = 0
    upgraded: int = 0
    failed: int = 0

    skipped_accounts: list[SkippedAccount] = field(default_factory=list)
    merge_candidates: list[MergeCandidate] = field(default_factory=list)
    unlinked_accounts: list[str] = field(default_factory=list)
    account_results: list[AccountProcessResult] = field(default_factory=list)

    first_chunk_snapshot: Optional[Any] = None
    success: bool = True
    error_message: Optional[str] = None

    def add_result(self, result: AccountProcessResult) -> None:
        self.account_results.append(result)
        self.transactions_imported += result.imported
        self.duplicates += result.duplicates
        self.upgraded += result.upgraded
        self.failed += result.failed
        self.merge_candidates.extend(result.ambiguous)

        if result.skipped:
            self.add_skipped(
                SkippedAccount(
                    provider_account_id=result.provider_account_id,
                    reason=result.reason or "skipped",
                ),
            )
        else:
            self.accounts_processed += 1

    def add_skipped(self, skipped: SkippedAccount) -> None:
        self.skipped_accounts.append(skipped)

    def fail(self, message: str) -> None:
        self.success = False
        self.error_message = message

    @property
    def skipped_count(self) -> int:
        return len(self.skipped_accounts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "connection_id": str(self.connection_id),
            "requested_start": self.requested_start.isoformat(),
            "effective_start": self.effective_start.isoformat(),
            "truncated": self.truncated,
            "synced_at": self.synced_at.isoformat(),
            "accounts_processed": self.accounts_processed,
            "transactions_imported": self.transactions_imported,
            "duplicates": self.duplicates,
            "upgraded": self.upgraded,
            "failed": self.failed,
            "skipped_accounts": [s.to_dict() for s in self.skipped_accounts],
            "merge_candidates": [c.to_dict() for c in self.merge_candidates],
            "unlinked_accounts": list(self.unlinked_accounts),
            "first_chunk_snapshot": self.first_chunk_snapshot,
            "success": self.success,
            "error_message": self.error_message,
        }
