"""Tests for the SQLite FTS5 retrieval strategy, against a real index file."""

import pytest
import pytest_asyncio

from schema_sync.repository.retrieval_errors import RetrievalConnectionError, RetrievalQueryError
from schema_sync.repository.sqlite_fts_repository import SQLiteFtsDocRepository

DOCS = "https://docs.openclaw.ai"


@pytest_asyncio.fixture
async def fts_repository(tmp_path):
    """An FTS5 index with three documentation chunks."""
    repo = SQLiteFtsDocRepository(tmp_path / "docs-index.db", top_k=5, create_if_missing=True)
    await repo.connect()
    await repo.init_search_index()

    await repo.index_chunk(
        "c1",
        f"{DOCS}/gateway/configuration",
        'gateway: { port: 18789, auth: { mode: "token" } }',
        title="Gateway configuration",
        heading="Auth",
        category="configuration",
    )
    await repo.index_chunk(
        "c2",
        f"{DOCS}/concepts/agents",
        "agents: { defaults: {} } sets the defaults for every agent",
        title="Agents",
    )
    await repo.index_chunk(
        "c3",
        f"{DOCS}/changelog",
        "Release 2026.2.1 version notes: the gateway now supports tailnet binding",
        title="Changelog",
    )

    yield repo
    await repo.close()


class TestPrepareMatchQuery:
    def test_terms_are_quoted_and_ored(self):
        assert SQLiteFtsDocRepository.prepare_match_query("gateway config") == (
            '"gateway" OR "config"'
        )

    def test_operators_are_inert(self):
        assert SQLiteFtsDocRepository.prepare_match_query('gateway AND "auth" -x') == (
            '"gateway" OR "AND" OR "auth" OR "x"'
        )

    def test_duplicate_terms_collapse(self):
        assert SQLiteFtsDocRepository.prepare_match_query("agents agents") == '"agents"'

    def test_no_terms(self):
        assert SQLiteFtsDocRepository.prepare_match_query("-- ::") == ""


@pytest.mark.asyncio
async def test_search_ranks_matching_chunks(fts_repository):
    chunks = await fts_repository.search("gateway")

    assert {c.id for c in chunks} == {"c1", "c3"}
    scores = [c.relevance_score for c in chunks]
    assert scores == sorted(scores, reverse=True)


@pytest.mark.asyncio
async def test_search_maps_row_fields(fts_repository):
    chunks = await fts_repository.search("token")

    assert len(chunks) == 1
    chunk = chunks[0]
    assert chunk.source_ref == f"{DOCS}/gateway/configuration#Auth"
    assert chunk.title == "Gateway configuration"
    assert chunk.category == "configuration"
    assert chunk.content.startswith("gateway:")


@pytest.mark.asyncio
async def test_search_without_heading_uses_source(fts_repository):
    chunks = await fts_repository.search("agents")
    assert [c.source_ref for c in chunks] == [f"{DOCS}/concepts/agents"]


@pytest.mark.asyncio
async def test_search_respects_top_k(tmp_path):
    repo = SQLiteFtsDocRepository(tmp_path / "many.db", top_k=2, create_if_missing=True)
    await repo.connect()
    try:
        await repo.init_search_index()
        for i in range(5):
            await repo.index_chunk(f"c{i}", f"{DOCS}/p{i}", "schema reference")
        assert len(await repo.search("schema")) == 2
    finally:
        await repo.close()


@pytest.mark.asyncio
async def test_search_no_match(fts_repository):
    assert await fts_repository.search("kubernetes") == []


@pytest.mark.asyncio
async def test_search_without_terms(fts_repository):
    assert await fts_repository.search("---") == []


@pytest.mark.asyncio
async def test_search_topics_concatenates_per_topic_results(fts_repository):
    assert fts_repository.combines_topics is False

    chunks = await fts_repository.search_topics(["token", "agents"])

    assert [c.id for c in chunks] == ["c1", "c2"]


@pytest.mark.asyncio
async def test_version_texts(fts_repository):
    texts = await fts_repository.version_texts()
    assert texts == ["Release 2026.2.1 version notes: the gateway now supports tailnet binding"]


@pytest.mark.asyncio
async def test_stats(fts_repository):
    assert await fts_repository.stats() == {"total_chunks": 3, "total_documents": 3}


@pytest.mark.asyncio
async def test_missing_index_file(tmp_path):
    repo = SQLiteFtsDocRepository(tmp_path / "absent.db")

    with pytest.raises(RetrievalConnectionError, match="not found"):
        await repo.connect()


@pytest.mark.asyncio
async def test_missing_table_is_query_error(tmp_path):
    repo = SQLiteFtsDocRepository(tmp_path / "empty.db", create_if_missing=True)
    await repo.connect()
    try:
        with pytest.raises(RetrievalQueryError):
            await repo.search("gateway")
    finally:
        await repo.close()


@pytest.mark.asyncio
async def test_use_after_close(fts_repository):
    await fts_repository.close()

    with pytest.raises(RuntimeError, match="connect"):
        await fts_repository.search("gateway")
