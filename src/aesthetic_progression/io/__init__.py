"""Storage, serialization and notification adapters."""
