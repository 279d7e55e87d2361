"""Provider connection entity (a SimpleFin item, a Plaid item, ...)."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any, Optional
from uuid import UUID, uuid4

from ledgerline.domain.enrichment.value_objects import EnrichmentSource
from ledgerline.domain.integration.value_objects import ConnectionStatus
from ledgerline.domain.shared.time import utc_now


class ProviderConnection:
    """
    One set of credentials at one provider, owning several linked accounts.

    Holds the diagnostic snapshot of the most recent discovery fetch and the
    time of the last completed sync, from which incremental lookbacks are
    derived.
    """

    def __init__(  # noqa: PLR0913
        self,
        source: EnrichmentSource,
        name: str,
        status: ConnectionStatus = ConnectionStatus.ACTIVE,
        last_synced_at: Optional[datetime] = None,
        raw_snapshot: Optional[Any] = None,
        snapshot_at: Optional[datetime] = None,
        # For reconstitution from persistence:
        id: Optional[UUID] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        self._id = id or uuid4()
        self._source = EnrichmentSource(source)
        self._name = name
        self._status = ConnectionStatus(status)
        self._last_synced_at = last_synced_at
        self._raw_snapshot = raw_snapshot
        self._snapshot_at = snapshot_at
        self._created_at = created_at or utc_now()
        self._updated_at = updated_at or utc_now()

        if not self._source.is_provider():
            msg = f"{self._source.value!r} is not a provider source"
            raise ValueError(msg)

    @property
    def id(self) -> UUID:
        return self._id

    @property
    def source(self) -> EnrichmentSource:
        return self._source

    @property
    def name(self) -> str:
        return self._name

    @property
    def status(self) -> ConnectionStatus:
        return self._status

    @property
    def requires_update(self) -> bool:
        return self._status == ConnectionStatus.REQUIRES_UPDATE

    @property
    def last_synced_at(self) -> Optional[datetime]:
        return self._last_synced_at

    @property
    def raw_snapshot(self) -> Optional[Any]:
        return self._raw_snapshot

    @property
    def snapshot_at(self) -> Optional[datetime]:
        return self._snapshot_at

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    def mark_requires_update(self) -> None:
        self._status = ConnectionStatus.REQUIRES_UPDATE
        self._updated_at = utc_now()

    def reactivate(self) -> None:
        self._status = ConnectionStatus.ACTIVE
        self._updated_at = utc_now()

    def record_snapshot(self, payload: Any, at: Optional[datetime] = None) -> None:
        """Replace the diagnostic snapshot with the latest discovery payload."""
        self._raw_snapshot = payload
        self._snapshot_at = at or utc_now()
        self._updated_at = utc_now()

    def mark_synced(self, at: Optional[datetime] = None) -> None:
        self._last_synced_at = at or utc_now()
        self._updated_at = utc_now()

    def default_lookback_start(
        self,
        today: date,
        lookback_cap_days: int,
        incremental_buffer_days: int,
    ) -> date:
        """
        Where a sync without an explicit lookback should start.

        First sync: as far back as the cap allows. Later syncs: a few days
        before the last sync so late-posting transactions are picked up.
        """
        if self._last_synced_at is None:
            return today - timedelta(days=lookback_cap_days)
        return self._last_synced_at.date() - timedelta(days=incremental_buffer_days)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ProviderConnection):
            return False
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __str__(self) -> str:
        return f"ProviderConnection[{self._source.value}]: {self._name}"
