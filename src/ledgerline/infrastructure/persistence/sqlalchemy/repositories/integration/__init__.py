"""Integration repositories."""

from ledgerline.infrastructure.persistence.sqlalchemy.repositories.integration.connection_repository import (  # NOQA: E501
    ConnectionRepositorySQLAlchemy,
)

__all__ = ["ConnectionRepositorySQLAlchemy"]
