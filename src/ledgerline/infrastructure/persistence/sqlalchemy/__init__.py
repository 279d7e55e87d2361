"""SQLAlchemy persistence for the ledger, enrichment and integration domains."""
