"""Enrichment domain exceptions."""

from ledgerline.domain.shared.exceptions import ErrorCode, ValidationError


class InvalidAttributeError(ValidationError):
    """Raised when enriching or locking an attribute the entity does not have.

    This is a programming error and is kept distinct from a lock rejection,
    which is a normal outcome and never raised.
    """

    def __init__(self, enrichable_type: str, attribute_name: str) -> None:
        super().__init__(
            message=(
                f"'{attribute_name}' is not an enrichable attribute "
                f"of {enrichable_type}"
            ),
            code=ErrorCode.INVALID_ATTRIBUTE,
            details={
                "enrichable_type": enrichable_type,
                "attribute_name": attribute_name,
            },
        )
