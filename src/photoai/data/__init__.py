"""Bundled data resources (default prompt catalog)."""
