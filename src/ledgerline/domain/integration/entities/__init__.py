"""Integration domain entities."""

from ledgerline.domain.integration.entities.provider_connection import (
    ProviderConnection,
)

__all__ = ["ProviderConnection"]
