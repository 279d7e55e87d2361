"""SimpleFin provider adapter."""

from ledgerline.infrastructure.providers.simplefin.mapper import SimplefinMapper

__all__ = ["SimplefinMapper"]
