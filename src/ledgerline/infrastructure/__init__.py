"""Infrastructure layer: persistence and provider adapters."""
