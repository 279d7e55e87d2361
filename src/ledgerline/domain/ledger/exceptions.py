"""Ledger domain exceptions."""

from datetime import date

from ledgerline.domain.shared.exceptions import (
    BusinessRuleViolation,
    ConflictError,
    EntityNotFoundError,
    ErrorCode,
)


class EntryNotFoundError(EntityNotFoundError):
    def __init__(self, entry_id: object) -> None:
        super().__init__(
            message=f"Entry '{entry_id}' not found",
            code=ErrorCode.ENTRY_NOT_FOUND,
            details={"entry_id": str(entry_id)},
        )


class LinkedAccountNotFoundError(EntityNotFoundError):
    def __init__(self, account_id: object) -> None:
        super().__init__(
            message=f"Linked account '{account_id}' not found",
            code=ErrorCode.ACCOUNT_NOT_FOUND,
            details={"account_id": str(account_id)},
        )


class IdentityDowngradeError(BusinessRuleViolation):
    """Raised when a stable external identity would be replaced."""

    def __init__(self, current: str, proposed: str) -> None:
        super().__init__(
            message=(
                f"External identity '{current}' cannot be replaced by '{proposed}'"
            ),
            code=ErrorCode.IDENTITY_DOWNGRADE,
            details={"current": current, "proposed": proposed},
        )


class OpeningAnchorMoveError(BusinessRuleViolation):
    """Raised when the opening anchor would move to a later date."""

    def __init__(self, current_date: date, proposed_date: date) -> None:
        super().__init__(
            message=(
                f"Opening anchor cannot move forward from {current_date} "
                f"to {proposed_date}"
            ),
            code=ErrorCode.ANCHOR_MOVED_FORWARD,
            details={
                "current_date": current_date.isoformat(),
                "proposed_date": proposed_date.isoformat(),
            },
        )


class DuplicateExternalIdentityError(ConflictError):
    """Raised when two entries on one account would share an external id."""

    def __init__(self, account_id: object, external_id: str) -> None:
        super().__init__(
            message=(
                f"Account '{account_id}' already has an entry with external id "
                f"'{external_id}'"
            ),
            code=ErrorCode.DUPLICATE_EXTERNAL_ID,
            details={"account_id": str(account_id), "external_id": external_id},
        )
