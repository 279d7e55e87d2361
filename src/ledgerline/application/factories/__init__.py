"""Factories for the application layer."""

from ledgerline.application.factories.repository_factory import (
    RepositoryFactory,
    UnitOfWork,
)

__all__ = ["RepositoryFactory", "UnitOfWork"]
