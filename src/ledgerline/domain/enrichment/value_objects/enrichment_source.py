"""Enrichment source enumeration."""

from enum import Enum


class EnrichmentSource(str, Enum):
    """Who or what wrote an attribute value.

    The source is a required parameter on every enrichment so precedence is
    stored as data instead of being implied by call order.
    """

    USER = "user"
    RULE = "rule"
    AI = "ai"

    # Providers
    SIMPLEFIN = "simplefin"
    PLAID = "plaid"
    DIRECT_BANK = "direct_bank"
    QIF = "qif"
    CSV = "csv"

    def is_provider(self) -> bool:
        return self not in (
            EnrichmentSource.USER,
            EnrichmentSource.RULE,
            EnrichmentSource.AI,
        )

    def is_automated(self) -> bool:
        return self is not EnrichmentSource.USER
