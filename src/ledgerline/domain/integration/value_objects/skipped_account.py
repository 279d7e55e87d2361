"""Skipped account value object."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SkippedAccount:
    """An account whose payload could not be processed in one sync run."""

    provider_account_id: str
    reason: str

    def to_dict(self) -> dict[str, str]:
        return {
            "provider_account_id": self.provider_account_id,
            "reason": self.reason,
        }
