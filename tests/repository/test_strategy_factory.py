"""Tests for the retrieval strategy factory."""

from schema_sync.config import RetrievalMode, SchemaSyncConfig
from schema_sync.repository.postgres_doc_repository import PostgresDocRepository
from schema_sync.repository.retrieval_adapter import RetrievalAdapter
from schema_sync.repository.sqlite_fts_repository import SQLiteFtsDocRepository
from schema_sync.repository.strategy_factory import create_retrieval_strategy


def test_structured_mode_creates_postgres_strategy():
    config = SchemaSyncConfig(retrieval_mode=RetrievalMode.STRUCTURED, docs_table="docs_v2")

    strategy = create_retrieval_strategy(config)

    assert isinstance(strategy, PostgresDocRepository)
    assert strategy.table_name == "docs_v2"


def test_free_text_mode_creates_fts_strategy(tmp_path):
    config = SchemaSyncConfig(
        retrieval_mode=RetrievalMode.FREE_TEXT,
        fts_database_path=tmp_path / "index.db",
        fts_table="chunks",
        top_k=7,
    )

    strategy = create_retrieval_strategy(config)

    assert isinstance(strategy, SQLiteFtsDocRepository)
    assert strategy.db_path == tmp_path / "index.db"
    assert strategy.table_name == "chunks"
    assert strategy.top_k == 7


def test_adapter_from_config(app_config):
    app_config.max_chunks = 12
    app_config.retry_max_attempts = 5

    adapter = RetrievalAdapter.from_config(app_config)

    assert adapter.mode == "free_text"
    assert adapter.max_chunks == 12
    assert adapter.max_attempts == 5
    assert adapter.base_delay == 0
