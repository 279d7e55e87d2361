"""External identity value object.

Correlates a ledger Entry with one upstream provider record. Values are
namespaced by provider so ids from different providers never collide:

- stable ids:   ``"<provider>_<id>"``
- fallback ids: ``"<provider>_fitid_<id>"`` (e.g. a bank FITID)

The kind is stored alongside the value so the two namespaces stay apart even
when a provider's raw id happens to look like a fallback value.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

FALLBACK_MARKER = "fitid"


class IdentityKind(str, Enum):
    FALLBACK = "fallback"
    STABLE = "stable"

    @property
    def rank(self) -> int:
        return 1 if self == IdentityKind.FALLBACK else 2


@dataclass(frozen=True)
class ExternalIdentity:
    value: str
    kind: IdentityKind = IdentityKind.STABLE

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            msg = "External identity cannot be empty"
            raise ValueError(msg)

    @classmethod
    def stable(cls, provider: str, provider_id: str) -> ExternalIdentity:
        return cls(value=f"{provider}_{provider_id}", kind=IdentityKind.STABLE)

    @classmethod
    def fallback(cls, provider: str, fallback_id: str) -> ExternalIdentity:
        return cls(
            value=f"{provider}_{FALLBACK_MARKER}_{fallback_id}",
            kind=IdentityKind.FALLBACK,
        )

    def is_stable(self) -> bool:
        return self.kind == IdentityKind.STABLE

    def can_be_replaced_by(self, other: ExternalIdentity) -> bool:
        """Whether ``other`` is a legal upgrade of this identity."""
        return other.kind.rank > self.kind.rank

    def __str__(self) -> str:
        return self.value
