"""Shared test fixtures and utilities."""

from tests.shared.fixtures.database import (
    async_engine,
    async_session,
    factory,
    session_maker,
    unit_of_work,
)
from tests.shared.fixtures.factories import (
    build_simplefin_account,
    build_simplefin_transaction,
    seed_connection_and_account,
)
from tests.shared.fixtures.providers import FakeProviderClient, simplefin_registry

__all__ = [
    "FakeProviderClient",
    "async_engine",
    "async_session",
    "build_simplefin_account",
    "build_simplefin_transaction",
    "factory",
    "seed_connection_and_account",
    "session_maker",
    "simplefin_registry",
    "unit_of_work",
]
