"""Sync window and plan value objects."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterator


@dataclass(frozen=True)
class SyncWindow:
    """An inclusive date range requested from a provider in one fetch."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            msg = f"Window end {self.end} is before start {self.start}"
            raise ValueError(msg)

    @property
    def span_days(self) -> int:
        """Distance between start and end; a single-day window spans 0."""
        return (self.end - self.start).days

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def to_dict(self) -> dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}

    def __str__(self) -> str:
        return f"{self.start.isoformat()}..{self.end.isoformat()}"


@dataclass(frozen=True)
class SyncPlan:
    """
    The windows for one account backfill.

    Windows are produced lazily, newest first, from ``today`` back to
    ``effective_start`` so a long backfill can stop between chunks without
    the whole plan ever being materialized.
    """

    requested_start: date
    effective_start: date
    today: date
    max_window_days: int
    truncated: bool = False

    def windows(self) -> Iterator[SyncWindow]:
        step = timedelta(days=self.max_window_days)
        end = self.today
        while end >= self.effective_start:
            start = max(self.effective_start, end - step)
            yield SyncWindow(start=start, end=end)
            end = start - timedelta(days=1)

    def __iter__(self) -> Iterator[SyncWindow]:
        return self.windows()

    def to_dict(self) -> dict[str, object]:
        return {
            "requested_start": self.requested_start.isoformat(),
            "effective_start": self.effective_start.isoformat(),
            "today": self.today.isoformat(),
            "max_window_days": self.max_window_days,
            "truncated": self.truncated,
        }
