"""Documentation retrieval for schema-sync.

Two backend-specific strategies sit behind one adapter:
- PostgresDocRepository: structured docs table, keyword filter, priority ordering
- SQLiteFtsDocRepository: FTS5 index ranked by bm25
"""

from schema_sync.repository.doc_chunk import DocChunk, RetrievalStats, make_source_ref
from schema_sync.repository.retrieval_adapter import RetrievalAdapter, merge_chunks
from schema_sync.repository.retrieval_errors import (
    RetrievalConnectionError,
    RetrievalError,
    RetrievalQueryError,
)
from schema_sync.repository.retry import retry_async

__all__ = [
    "DocChunk",
    "RetrievalAdapter",
    "RetrievalConnectionError",
    "RetrievalError",
    "RetrievalQueryError",
    "RetrievalStats",
    "make_source_ref",
    "merge_chunks",
    "retry_async",
]
