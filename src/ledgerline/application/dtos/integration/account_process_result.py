"""DTO for the outcome of processing one linked account."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional
from uuid import UUID

from ledgerline.domain.integration.value_objects import (
    AccountSyncState,
    MergeCandidate,
    SyncWindow,
)

if TYPE_CHECKING:
    from ledgerline.domain.ledger.entities import LinkedAccount

SYNC_IN_PROGRESS_REASON = "sync already in progress"
TIMEOUT_REASON = "timeout"
CANCELLED_REASON = "sync cancelled"


@dataclass
class AccountProcessResult:
    """Counts and final state of one account in one sync run."""

    account_id: UUID
    provider_account_id: str
    state: AccountSyncState = AccountSyncState.PENDING
    imported: int = 0
    duplicates: int = 0
    upgraded: int = 0
    failed: int = 0
    ambiguous: list[MergeCandidate] = field(default_factory=list)
    windows: list[SyncWindow] = field(default_factory=list)
    reason: Optional[str] = None

    @classmethod
    def skipped_before_start(
        cls,
        account_id: UUID,
        provider_account_id: str,
        reason: str,
    ) -> AccountProcessResult:
        """An account that never started fetching."""
        return cls(
            account_id=account_id,
            provider_account_id=provider_account_id,
            state=AccountSyncState.SKIPPED,
            reason=reason,
        )

    @classmethod
    def for_account(cls, account: LinkedAccount) -> AccountProcessResult:
        return cls(
            account_id=account.id,
            provider_account_id=account.provider_account_id,
        )

    def mark_skipped(self, reason: str) -> None:
        """Stop the account early; counts of committed windows are kept."""
        self.state = AccountSyncState.SKIPPED
        self.reason = reason

    def merge_counts(self, other: AccountProcessResult) -> None:
        self.imported += other.imported
        self.duplicates += other.duplicates
        self.upgraded += other.upgraded
        self.failed += other.failed
        self.ambiguous.extend(other.ambiguous)

    @property
    def skipped(self) -> bool:
        return self.state == AccountSyncState.SKIPPED

    @property
    def done(self) -> bool:
        return self.state == AccountSyncState.DONE

    def to_dict(self) -> dict[str, Any]:
        return {
            "account_id": str(self.account_id),
            "provider_account_id": self.provider_account_id,
            "state": self.state.value,
            "imported": self.imported,
            "duplicates": self.duplicates,
            "upgraded": self.upgraded,
            "failed": self.failed,
            "ambiguous": [c.to_dict() for c in self.ambiguous],
            "windows": [w.to_dict() for w in self.windows],
            "skipped": self.skipped,
            "reason": self.reason,
        }
