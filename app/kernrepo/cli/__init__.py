"""Command-line interface for kernrepo."""
