"""Shared domain components.

This module exports shared exceptions and utilities used across domain
boundaries.
"""

from ledgerline.domain.shared.exceptions import (
    BusinessRuleViolation,
    ConcurrencyError,
    ConflictError,
    DomainException,
    EntityNotFoundError,
    ErrorCode,
    ValidationError,
)
from ledgerline.domain.shared.text import excerpt, normalize_description
from ledgerline.domain.shared.time import ensure_tz_aware, today_utc, utc_now

__all__ = [
    # Error codes
    "ErrorCode",
    # Base exception
    "DomainException",
    # Exception categories
    "ValidationError",
    "BusinessRuleViolation",
    "EntityNotFoundError",
    "ConflictError",
    "ConcurrencyError",
    # Utilities
    "ensure_tz_aware",
    "excerpt",
    "normalize_description",
    "today_utc",
    "utc_now",
]
