"""Bundled data files (vessel polars)."""
