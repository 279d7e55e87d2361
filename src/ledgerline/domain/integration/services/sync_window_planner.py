"""Plan the date windows of a chunked historical backfill."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Optional

from ledgerline.domain.integration.value_objects import SyncPlan, SyncWindow
from ledgerline.domain.shared.exceptions import ErrorCode, ValidationError
from ledgerline.domain.shared.time import today_utc

logger = logging.getLogger(__name__)


class SyncWindowPlanner:
    """
    Walk from today back to the lookback start in provider-sized steps.

    The effective start is ``max(lookback_start, today - lookback_cap_days)``.
    A requested lookback older than the cap is never shortened silently:
    the plan's ``truncated`` flag reports it.
    """

    def __init__(self, lookback_cap_days: int):
        if lookback_cap_days < 0:
            msg = f"Lookback cap must not be negative, got {lookback_cap_days}"
            raise ValidationError(msg, code=ErrorCode.INVALID_SYNC_WINDOW)
        self._lookback_cap_days = lookback_cap_days

    @property
    def lookback_cap_days(self) -> int:
        return self._lookback_cap_days

    def plan(
        self,
        lookback_start: date,
        provider_max_window_days: int,
        today: Optional[date] = None,
    ) -> SyncPlan:
        """
        Build the plan for one account.

        Parameters
        ----------
        lookback_start
            Oldest date the caller wants
        provider_max_window_days
            Largest ``end - start`` distance one request may span
        today
            Newest date to fetch; defaults to today (UTC)

        Returns
        -------
        A SyncPlan whose windows are generated lazily, newest first

        Raises
        ------
        ValidationError
            If ``provider_max_window_days`` is smaller than 1
        """
        if provider_max_window_days < 1:
            msg = (
                "Provider window size must be at least 1 day, "
                f"got {provider_max_window_days}"
            )
            raise ValidationError(
                msg,
                code=ErrorCode.INVALID_SYNC_WINDOW,
                details={"provider_max_window_days": provider_max_window_days},
            )

        today = today or today_utc()
        cap_start = today - timedelta(days=self._lookback_cap_days)

        truncated = lookback_start < cap_start
        effective_start = cap_start if truncated else lookback_start
        if effective_start > today:
            effective_start = today

        if truncated:
            logger.warning(
                "Lookback start %s is beyond the %d day cap, starting at %s",
                lookback_start,
                self._lookback_cap_days,
                effective_start,
            )

        return SyncPlan(
            requested_start=lookback_start,
            effective_start=effective_start,
            today=today,
            max_window_days=provider_max_window_days,
            truncated=truncated,
        )


class DiscoverySnapshot:
    """
    Keeps the raw response of the first chunk fetched in a sync run.

    Concurrent account tasks all offer their first response; the first one
    recorded wins and later offers are ignored.
    """

    def __init__(self) -> None:
        self._payload: Optional[Any] = None
        self._window: Optional[SyncWindow] = None
        self._provider_account_id: Optional[str] = None
        self._recorded = False

    @property
    def recorded(self) -> bool:
        return self._recorded

    @property
    def payload(self) -> Optional[Any]:
        return self._payload

    @property
    def window(self) -> Optional[SyncWindow]:
        return self._window

    def offer(
        self,
        payload: Any,
        window: Optional[SyncWindow] = None,
        provider_account_id: Optional[str] = None,
    ) -> bool:
        """Record ``payload`` unless a snapshot was already taken."""
        if self._recorded:
            return False
        self._payload = payload
        self._window = window
        self._provider_account_id = provider_account_id
        self._recorded = True
        return True

    def to_dict(self) -> Optional[dict[str, Any]]:
        if not self._recorded:
            return None
        return {
            "provider_account_id": self._provider_account_id,
            "window": self._window.to_dict() if self._window else None,
            "payload": self._payload,
        }
