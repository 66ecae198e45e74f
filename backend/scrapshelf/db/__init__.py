"""Database package: declarative base and id/timestamp defaults."""
