"""Factory for creating the configured retrieval strategy."""

from schema_sync.config import RetrievalMode, SchemaSyncConfig
from schema_sync.repository.postgres_doc_repository import PostgresDocRepository
from schema_sync.repository.retrieval_strategy import RetrievalStrategy
from schema_sync.repository.sqlite_fts_repository import SQLiteFtsDocRepository


def create_retrieval_strategy(app_config: SchemaSyncConfig) -> RetrievalStrategy:
    """Create a retrieval strategy based on ``retrieval_mode``."""
    if app_config.retrieval_mode == RetrievalMode.STRUCTURED:
        return PostgresDocRepository(app_config)

    if app_config.retrieval_mode == RetrievalMode.FREE_TEXT:
        return SQLiteFtsDocRepository(
            app_config.fts_database_path,
            table_name=app_config.fts_table,
            top_k=app_config.top_k,
        )

    raise ValueError(f"Unsupported retrieval mode: {app_config.retrieval_mode}")
