"""The Enrichable capability.

Enrichable entities can have one or more of their fields written by
automated sources (providers, rules, AI) as well as by users. User edits
always take precedence: once a user changes an attribute it is locked and no
automated source may overwrite it until it is explicitly unlocked.

Entities opt in by exposing the members of the ``Enrichable`` protocol; the
behaviour itself lives in ``EnrichmentPolicy`` and the application-level
``EnrichmentLedger``.
"""

from __future__ import annotations

from typing import Any, ClassVar, Mapping, Protocol, runtime_checkable
from uuid import UUID

from ledgerline.domain.enrichment.value_objects import LockedAttributes

# Identity and timestamp fields are never enriched nor locked.
IGNORED_ENRICHABLE_ATTRIBUTES = frozenset({"id", "created_at", "updated_at"})


@runtime_checkable
class Enrichable(Protocol):
    """Interface an entity implements to take part in enrichment."""

    enrichable_type: ClassVar[str]

    @property
    def id(self) -> UUID: ...

    @property
    def locked_attributes(self) -> LockedAttributes: ...

    def enrichable_attributes(self) -> frozenset[str]:
        """Names of attributes that may be enriched."""
        ...

    def get_attribute(self, name: str) -> Any: ...

    def set_attribute(self, name: str, value: Any) -> None:
        """Set an attribute without recording a direct change."""
        ...

    def apply_direct_changes(
        self,
        changes: Mapping[str, Any],
    ) -> dict[str, tuple[Any, Any]]:
        """Write values directly and record them as the saved change set."""
        ...

    def saved_changes(self) -> dict[str, tuple[Any, Any]]:
        """The most recent directly-saved change set as name -> (old, new)."""
        ...
