"""Command-line interface for filter design."""
