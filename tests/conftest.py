"""Root pytest configuration.

Test Structure:
    tests/
    ├── unit/
    │   ├── domain/           # Entities, value objects, domain services
    │   ├── application/      # Services and commands against SQLite
    │   ├── infrastructure/   # SQLAlchemy repositories, provider mappers
    │   └── presentation/     # CLI
    └── shared/fixtures/      # Database fixtures, fake provider, factories
"""

from pathlib import Path

import pytest
from dotenv import load_dotenv

from ledgerline_config import clear_settings_cache
from tests.shared.fixtures.database import (  # noqa: F401
    async_engine,
    async_session,
    factory,
    session_maker,
    unit_of_work,
)

PROJECT_ROOT = Path(__file__).resolve().parents[1]

# Load a test env file when present (same as local development)
CONFIG_DIR = PROJECT_ROOT / "config"
if (CONFIG_DIR / ".env.test").exists():
    load_dotenv(CONFIG_DIR / ".env.test")


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Settings are cached process-wide; reset them around every test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
