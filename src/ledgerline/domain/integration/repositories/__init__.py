"""Repository interfaces for the integration domain."""

from ledgerline.domain.integration.repositories.connection_repository import (
    ConnectionRepository,
)

__all__ = ["ConnectionRepository"]
