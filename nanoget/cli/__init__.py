"""Command-line interface for nanoget."""
