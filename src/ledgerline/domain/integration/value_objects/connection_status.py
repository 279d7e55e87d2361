"""Provider connection status enumeration."""

from enum import Enum


class ConnectionStatus(str, Enum):
    ACTIVE = "active"
    REQUIRES_UPDATE = "requires_update"

    def can_sync(self) -> bool:
        return self == ConnectionStatus.ACTIVE
