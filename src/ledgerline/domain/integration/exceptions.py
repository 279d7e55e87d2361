"""Integration domain exceptions.

Errors are scoped by how far they reach:

- connection-fatal errors abort a whole sync run before any account task
  starts, and propagate to the caller;
- account-scoped errors skip one account and are summarized;
- record-scoped errors skip one record and are counted.

Lock rejections and ambiguous matches are results, never exceptions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional
from uuid import UUID

from ledgerline.domain.shared.exceptions import (
    ConflictError,
    DomainException,
    EntityNotFoundError,
    ErrorCode,
    ValidationError,
)

if TYPE_CHECKING:
    from ledgerline.application.dtos.integration import SyncSummary


class IntegrationError(DomainException):
    """Base exception for integration domain errors."""


class ConnectionFatalError(IntegrationError):
    """Base for errors that abort the whole connection's sync run."""


class ConnectionAuthenticationError(ConnectionFatalError):
    """Credentials for a connection are expired, revoked or rejected.

    When raised after some accounts already ran, ``summary`` carries the
    partial result.
    """

    def __init__(
        self,
        connection_id: UUID,
        reason: str = "Provider rejected the connection's credentials",
        summary: Optional[SyncSummary] = None,
    ) -> None:
        super().__init__(
            message=f"Connection {connection_id} requires re-authentication: {reason}",
            code=ErrorCode.CONNECTION_REQUIRES_UPDATE,
            details={"connection_id": str(connection_id), "reason": reason},
        )
        self.connection_id = connection_id
        self.reason = reason
        self.summary = summary


class ProviderConfigurationError(ConnectionFatalError):
    """The connection's provider is unknown or misconfigured."""

    def __init__(self, provider: str, reason: str = "No provider registered") -> None:
        super().__init__(
            message=f"Provider '{provider}' is not usable: {reason}",
            code=ErrorCode.PROVIDER_MISCONFIGURED,
            details={"provider": provider, "reason": reason},
        )


class ProviderAuthenticationError(IntegrationError):
    """Raised by provider clients when the provider rejects credentials."""

    def __init__(self, message: str = "Authentication with provider failed") -> None:
        super().__init__(
            message=message,
            code=ErrorCode.PROVIDER_AUTHENTICATION_FAILED,
        )


class ProviderRequestError(IntegrationError):
    """A provider request failed for reasons other than credentials."""

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.PROVIDER_REQUEST_FAILED,
            details=details,
        )


class AccountSyncInProgressError(ConflictError):
    """Another sync currently holds the account's sync-in-progress flag."""

    def __init__(self, account_id: UUID) -> None:
        super().__init__(
            message=f"Sync already in progress for account {account_id}",
            code=ErrorCode.SYNC_IN_PROGRESS,
            details={"account_id": str(account_id)},
        )


class RecordMappingError(ValidationError):
    """A single provider record could not be normalized."""

    def __init__(self, reason: str, payload: Any = None) -> None:
        super().__init__(
            message=f"Could not map provider record: {reason}",
            code=ErrorCode.RECORD_MAPPING_FAILED,
            details={"reason": reason},
        )
        self.payload = payload


class ConnectionNotFoundError(EntityNotFoundError):
    def __init__(self, connection_id: object) -> None:
        super().__init__(
            message=f"Provider connection '{connection_id}' not found",
            code=ErrorCode.CONNECTION_NOT_FOUND,
            details={"connection_id": str(connection_id)},
        )
