"""Main CLI entry point for schema-sync."""  # pragma: no cover

from schema_sync.cli.app import app  # pragma: no cover

# Register commands
from schema_sync.cli.commands import sync  # noqa: F401  # pragma: no cover

if __name__ == "__main__":  # pragma: no cover
    # start the app
    app()
