"""Route geometry helpers."""
