"""Provider adapters (mappers from raw provider payloads)."""
