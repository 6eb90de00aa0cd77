"""Shared fixtures for schema-sync tests."""

import json
from pathlib import Path

import pytest

from schema_sync.config import RetrievalMode, SchemaSyncConfig
from schema_sync.repository.doc_chunk import DocChunk
from schema_sync.repository.retrieval_errors import RetrievalConnectionError, RetrievalQueryError


class StubStrategy:
    """In-memory retrieval strategy.

    ``failures`` maps a topic to how many times its search raises
    RetrievalQueryError before answering.
    """

    mode = RetrievalMode.FREE_TEXT
    combines_topics = False

    def __init__(
        self,
        results: dict[str, list[DocChunk]] | None = None,
        *,
        failures: dict[str, int] | None = None,
        versions: list[str] | None = None,
        connect_error: Exception | None = None,
    ):
        self.results = results or {}
        self.failures = dict(failures or {})
        self.versions = versions or []
        self.connect_error = connect_error
        self.searched: list[str] = []
        self.connected = False
        self.closed = False

    async def connect(self) -> None:
        if self.connect_error is not None:
            raise self.connect_error
        self.connected = True

    async def search(self, topic: str) -> list[DocChunk]:
        self.searched.append(topic)
        if self.failures.get(topic, 0) > 0:
            self.failures[topic] -= 1
            raise RetrievalQueryError(f"search failed for {topic}")
        return list(self.results.get(topic, []))

    async def search_topics(self, topics: list[str]) -> list[DocChunk]:
        chunks: list[DocChunk] = []
        for topic in topics:
            chunks.extend(await self.search(topic))
        return chunks

    async def version_texts(self) -> list[str]:
        return list(self.versions)

    async def stats(self) -> dict[str, int]:
        return {"total_chunks": sum(len(c) for c in self.results.values())}

    async def close(self) -> None:
        self.closed = True


class SleepRecorder:
    """Awaitable stand-in for asyncio.sleep that records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def make_chunk(
    chunk_id: str,
    content: str,
    *,
    source_ref: str | None = None,
    relevance_score: float = 1.0,
) -> DocChunk:
    return DocChunk(
        id=chunk_id,
        source_ref=source_ref or f"https://docs.openclaw.ai/page-{chunk_id}",
        title=f"Page {chunk_id}",
        category="general",
        content=content,
        relevance_score=relevance_score,
    )


@pytest.fixture
def stub_strategy_factory():
    return StubStrategy


@pytest.fixture
def connection_refused() -> RetrievalConnectionError:
    return RetrievalConnectionError("connection refused")


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def chunk_factory():
    return make_chunk


@pytest.fixture
def app_config(tmp_path) -> SchemaSyncConfig:
    """Settings pointing at paths under tmp_path, isolated from the environment."""
    return SchemaSyncConfig(
        retrieval_mode=RetrievalMode.FREE_TEXT,
        fts_database_path=tmp_path / "docs-index.db",
        local_schema_path=tmp_path / "schema.json",
        sync_state_path=tmp_path / "state" / ".sync-state.json",
        topics=["configuration", "gateway"],
        retry_base_delay=0,
    )


@pytest.fixture
def local_schema_file(tmp_path) -> Path:
    """A local schema with two nodes and one enum."""
    path = tmp_path / "schema.json"
    path.write_text(
        json.dumps(
            {
                "meta": {"lastTouchedVersion": "2026.1.5"},
                "schema": {
                    "type": "object",
                    "properties": {
                        "gateway": {
                            "type": "object",
                            "properties": {
                                "port": {"type": "unknown"},
                                "mode": {"type": "unknown"},
                            },
                        },
                        "agents": {
                            "type": "object",
                            "properties": {"defaults": {"type": "unknown"}},
                        },
                    },
                },
            }
        ),
        encoding="utf-8",
    )
    return path
