"""Infrastructure Layer: database, persistence adapters, feed fetching, logging."""
