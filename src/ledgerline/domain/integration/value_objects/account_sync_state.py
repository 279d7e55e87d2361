"""Per-account sync state machine."""

from __future__ import annotations

from enum import Enum

from ledgerline.domain.shared.exceptions import BusinessRuleViolation, ErrorCode


class AccountSyncState(str, Enum):
    """State of one linked account within one sync run.

    pending -> fetching -> mapping -> matching -> fetching ... -> done
    skipped is terminal and reachable from fetching or mapping.
    """

    PENDING = "pending"
    FETCHING = "fetching"
    MAPPING = "mapping"
    MATCHING = "matching"
    DONE = "done"
    SKIPPED = "skipped"

    def is_terminal(self) -> bool:
        return self in (AccountSyncState.DONE, AccountSyncState.SKIPPED)

    def can_transition_to(self, target: AccountSyncState) -> bool:
        return target in _TRANSITIONS[self]

    def transition_to(self, target: AccountSyncState) -> AccountSyncState:
        if not self.can_transition_to(target):
            msg = f"Illegal account sync transition: {self.value} -> {target.value}"
            raise BusinessRuleViolation(
                msg,
                code=ErrorCode.ILLEGAL_STATE_TRANSITION,
                details={"from": self.value, "to": target.value},
            )
        return target


_TRANSITIONS: dict[AccountSyncState, frozenset[AccountSyncState]] = {
    AccountSyncState.PENDING: frozenset(
        {AccountSyncState.FETCHING, AccountSyncState.DONE},
    ),
    AccountSyncState.FETCHING: frozenset(
        {AccountSyncState.MAPPING, AccountSyncState.SKIPPED},
    ),
    AccountSyncState.MAPPING: frozenset(
        {AccountSyncState.MATCHING, AccountSyncState.SKIPPED},
    ),
    AccountSyncState.MATCHING: frozenset(
        {AccountSyncState.FETCHING, AccountSyncState.DONE},
    ),
    AccountSyncState.DONE: frozenset(),
    AccountSyncState.SKIPPED: frozenset(),
}
