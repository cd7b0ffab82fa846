"""Configuration for repoark."""
