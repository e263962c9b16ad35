"""Persistence: JSON serialization and the JSONL document store."""
