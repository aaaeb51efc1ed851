"""Command-line interface for autostock."""
