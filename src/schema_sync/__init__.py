"""schema-sync - keep a local configuration schema in step with its documentation."""

__version__ = "0.3.0"
