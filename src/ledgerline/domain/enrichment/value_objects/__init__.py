"""Value objects for the enrichment domain."""

from ledgerline.domain.enrichment.value_objects.enrichment_source import (
    EnrichmentSource,
)
from ledgerline.domain.enrichment.value_objects.locked_attributes import (
    AttributeLock,
    LockedAttributes,
)

__all__ = [
    "AttributeLock",
    "EnrichmentSource",
    "LockedAttributes",
]
