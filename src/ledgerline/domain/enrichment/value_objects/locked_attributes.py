"""Per-attribute lock state owned by an enrichable entity."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterator, Mapping, Optional

from ledgerline.domain.enrichment.value_objects.enrichment_source import (
    EnrichmentSource,
)
from ledgerline.domain.shared.time import ensure_tz_aware, utc_now


@dataclass(frozen=True)
class AttributeLock:
    """When an attribute was locked and by which source."""

    locked_at: datetime
    source: EnrichmentSource

    def to_dict(self) -> dict[str, str]:
        return {
            "locked_at": self.locked_at.isoformat(),
            "source": self.source.value,
        }

    @classmethod
    def from_value(cls, value: Any) -> AttributeLock:
        # Older rows stored only the lock timestamp; those are user locks.
        if isinstance(value, str):
            return cls(
                locked_at=ensure_tz_aware(datetime.fromisoformat(value)),
                source=EnrichmentSource.USER,
            )
        return cls(
            locked_at=ensure_tz_aware(datetime.fromisoformat(value["locked_at"])),
            source=EnrichmentSource(value.get("source", EnrichmentSource.USER.value)),
        )


class LockedAttributes:
    """Map of attribute name -> AttributeLock.

    Only the most recent locking source is kept per attribute. An attribute
    present here cannot be enriched; only a direct user update may change it.
    """

    def __init__(self, locks: Optional[Mapping[str, AttributeLock]] = None):
        self._locks: dict[str, AttributeLock] = dict(locks or {})

    def is_locked(self, name: str) -> bool:
        return name in self._locks

    def locked_by(self, name: str) -> Optional[EnrichmentSource]:
        lock = self._locks.get(name)
        return lock.source if lock else None

    def get(self, name: str) -> Optional[AttributeLock]:
        return self._locks.get(name)

    def lock(
        self,
        name: str,
        source: EnrichmentSource = EnrichmentSource.USER,
        at: Optional[datetime] = None,
    ) -> None:
        self._locks[name] = AttributeLock(locked_at=at or utc_now(), source=source)

    def unlock(self, name: str) -> bool:
        return self._locks.pop(name, None) is not None

    def names(self) -> list[str]:
        return sorted(self._locks)

    def to_dict(self) -> dict[str, dict[str, str]]:
        return {name: lock.to_dict() for name, lock in self._locks.items()}

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> LockedAttributes:
        if not data:
            return cls()
        return cls(
            {name: AttributeLock.from_value(value) for name, value in data.items()},
        )

    def __contains__(self, name: object) -> bool:
        return name in self._locks

    def __iter__(self) -> Iterator[str]:
        return iter(self._locks)

    def __len__(self) -> int:
        return len(self._locks)

    def __repr__(self) -> str:
        return f"LockedAttributes({self.names()!r})"
