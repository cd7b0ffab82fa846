"""Command-line interface for repoark."""
