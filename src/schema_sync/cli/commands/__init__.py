"""CLI commands for schema-sync."""

from schema_sync.cli.commands import sync

__all__ = ["sync"]
