"""Integration domain models."""

from ledgerline.infrastructure.persistence.sqlalchemy.models.integration.provider_connection_model import (  # NOQA: E501
    ProviderConnectionModel,
)

__all__ = ["ProviderConnectionModel"]
