"""CLI tools for schema-sync."""
