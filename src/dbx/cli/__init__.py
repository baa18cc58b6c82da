"""Command-line interface for dbx."""
