"""Rules for placing and moving an account's opening balance anchor.

The anchor is a zero-amount valuation Entry whose payload carries the
account balance at the end of the anchor date. Running balances for later
dates are derived from it:

    balance(d) = anchor_balance - sum(amount for entries in (anchor_date, d])

because positive amounts are outflows. The anchor date only ever moves
earlier; moving it later would drop history.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional

from ledgerline.domain.ledger.exceptions import OpeningAnchorMoveError

ZERO = Decimal("0")


class AnchorAction(str, Enum):
    NONE = "none"
    CREATE = "create"
    MOVE = "move"


@dataclass(frozen=True)
class AnchorDecision:
    action: AnchorAction
    anchor_date: Optional[date] = None


class OpeningAnchorPolicy:
    """Pure decisions about the opening anchor; no persistence."""

    @staticmethod
    def anchor_date_for(earliest: date) -> date:
        """The anchor sits on the day before the earliest tracked entry."""
        return earliest - timedelta(days=1)

    def decide(
        self,
        current_anchor_date: Optional[date],
        earliest_imported: Optional[date],
        earliest_tracked: Optional[date] = None,
    ) -> AnchorDecision:
        """
        Decide what reconciliation should do with the anchor.

        Parameters
        ----------
        current_anchor_date
            Date of the existing anchor, or None when there is none
        earliest_imported
            Earliest date among entries imported in this batch
        earliest_tracked
            Earliest date among all of the account's entries; used to place
            a new anchor so it precedes entries imported earlier

        Returns
        -------
        The action and, for CREATE and MOVE, the target anchor date
        """
        if current_anchor_date is None:
            earliest = _min_date(earliest_imported, earliest_tracked)
            if earliest is None:
                return AnchorDecision(AnchorAction.NONE)
            return AnchorDecision(AnchorAction.CREATE, self.anchor_date_for(earliest))

        if self.will_adjust(current_anchor_date, earliest_imported):
            return AnchorDecision(
                AnchorAction.MOVE,
                self.anchor_date_for(earliest_imported),
            )
        return AnchorDecision(AnchorAction.NONE)

    @staticmethod
    def will_adjust(
        current_anchor_date: Optional[date],
        earliest_imported: Optional[date],
    ) -> bool:
        """Whether an existing anchor must move to cover imported entries."""
        if current_anchor_date is None or earliest_imported is None:
            return False
        return earliest_imported <= current_anchor_date

    @staticmethod
    def initial_balance(
        explicit_opening: Optional[Decimal] = None,
        known_balance: Optional[Decimal] = None,
        tracked_amounts: Iterable[Decimal] = (),
    ) -> Decimal:
        """
        Balance for a newly created anchor.

        An explicit opening value wins. Otherwise the opening is
        back-calculated from the known current balance by adding back every
        tracked amount (outflows are positive). Unknown balances give zero.
        """
        if explicit_opening is not None:
            return explicit_opening
        if known_balance is not None:
            return known_balance + sum(tracked_amounts, ZERO)
        return ZERO

    @staticmethod
    def moved_balance(
        old_balance: Decimal,
        amounts_between: Iterable[Decimal],
    ) -> Decimal:
        """
        Balance for an anchor moved earlier.

        ``amounts_between`` are the amounts dated in (new_date, old_date];
        adding them back keeps the balance at the old anchor date unchanged.
        """
        return old_balance + sum(amounts_between, ZERO)

    @staticmethod
    def ensure_not_forward(current_date: date, proposed_date: date) -> None:
        if proposed_date > current_date:
            raise OpeningAnchorMoveError(current_date, proposed_date)


def _min_date(*values: Optional[date]) -> Optional[date]:
    present = [v for v in values if v is not None]
    return min(present) if present else None
