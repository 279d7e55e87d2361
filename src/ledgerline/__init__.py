"""ledgerline: ingestion, deduplication and enrichment of financial transactions."""

__version__ = "0.1.0"
