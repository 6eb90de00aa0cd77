"""SQLite FTS5 free-text retrieval strategy."""

import re
from pathlib import Path
from typing import Optional

from loguru import logger
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from schema_sync import db
from schema_sync.config import RetrievalMode
from schema_sync.repository.doc_chunk import DocChunk, make_source_ref
from schema_sync.repository.retrieval_errors import (
    RetrievalConnectionError,
    RetrievalQueryError,
)

VERSION_QUERY = "version changelog release"
VERSION_TOP_K = 3
TERM_PATTERN = re.compile(r"\w+")


class SQLiteFtsDocRepository:
    """Reads documentation chunks from an SQLite FTS5 index.

    Uses:
    - MATCH for term queries, each term quoted so FTS5 operators in topics are inert
    - bm25() for relevance, negated so larger scores mean more relevant
    - LIMIT top_k per query
    """

    mode = RetrievalMode.FREE_TEXT
    combines_topics = False

    def __init__(
        self,
        db_path: Path,
        table_name: str = "doc_chunks",
        top_k: int = 10,
        *,
        create_if_missing: bool = False,
    ):
        self.db_path = db_path
        self.table_name = table_name
        self.top_k = top_k
        self.create_if_missing = create_if_missing
        self._engine: Optional[AsyncEngine] = None
        self._session_maker: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def session_maker(self) -> async_sessionmaker[AsyncSession]:
        if self._session_maker is None:
            raise RuntimeError("SQLiteFtsDocRepository used before connect() or after close()")
        return self._session_maker

    async def connect(self) -> None:
        if not self.create_if_missing and not self.db_path.exists():
            raise RetrievalConnectionError(f"Docs index not found: {self.db_path}")

        self._engine, self._session_maker = db.create_engine_and_session(
            db.get_sqlite_url(self.db_path), db.DatabaseType.SQLITE
        )
        try:
            async with db.scoped_session(self.session_maker) as session:
                await session.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Cannot open docs index {self.db_path}: {e}")
            await self.close()
            raise RetrievalConnectionError(f"Cannot open docs index {self.db_path}") from e
        logger.info(f"Docs index opened: {self.db_path}")

    async def init_search_index(self) -> None:
        """Create the FTS5 table if it doesn't exist."""
        logger.info("Initializing SQLite FTS5 docs index")
        async with db.scoped_session(self.session_maker) as session:
            await session.execute(
                text(f"""
                    CREATE VIRTUAL TABLE IF NOT EXISTS {self.table_name} USING fts5(
                        chunk_id UNINDEXED,
                        source UNINDEXED,
                        title,
                        heading,
                        category UNINDEXED,
                        content,
                        tokenize='unicode61'
                    )
                """)
            )

    async def index_chunk(
        self,
        chunk_id: str,
        source: str,
        content: str,
        title: Optional[str] = None,
        heading: Optional[str] = None,
        category: Optional[str] = None,
    ) -> None:
        """Add one chunk to the index."""
        async with db.scoped_session(self.session_maker) as session:
            await session.execute(
                text(f"""
                    INSERT INTO {self.table_name} (chunk_id, source, title, heading, category, content)
                    VALUES (:chunk_id, :source, :title, :heading, :category, :content)
                """),
                {
                    "chunk_id": chunk_id,
                    "source": source,
                    "title": title,
                    "heading": heading,
                    "category": category,
                    "content": content,
                },
            )
        logger.debug(f"indexed chunk {chunk_id} from {source}")

    @staticmethod
    def prepare_match_query(topic: str) -> str:
        """Turn free text into an FTS5 query matching any of its terms.

        Every term is quoted, so words like AND/NOT and characters such as
        ``-`` or ``:`` are searched literally instead of parsed as syntax.
        """
        terms = TERM_PATTERN.findall(topic)
        return " OR ".join(f'"{term}"' for term in dict.fromkeys(terms))

    async def _query(self, topic: str, limit: int) -> list:
        match_query = self.prepare_match_query(topic)
        if not match_query:
            return []

        sql = f"""
            SELECT chunk_id, source, title, heading, category, content,
                   bm25({self.table_name}) AS score
            FROM {self.table_name}
            WHERE {self.table_name} MATCH :query
            ORDER BY score ASC
            LIMIT :limit
        """
        logger.trace(f"Search {sql} query: {match_query}")
        try:
            async with db.scoped_session(self.session_maker) as session:
                result = await session.execute(text(sql), {"query": match_query, "limit": limit})
                return list(result.fetchall())
        except SQLAlchemyError as e:
            if "fts5: syntax error" in str(e).lower():
                logger.warning(f"FTS5 syntax error for topic: {topic}, error: {e}")
                return []
            logger.error(f"Database error during docs search: {e}")
            raise RetrievalQueryError(f"Docs search failed: {e}") from e

    async def search(self, topic: str) -> list[DocChunk]:
        rows = await self._query(topic, self.top_k)
        chunks = [
            DocChunk(
                id=str(row.chunk_id),
                source_ref=make_source_ref(row.source, row.heading),
                title=row.title,
                category=row.category,
                content=row.content or "",
                relevance_score=-float(row.score),
            )
            for row in rows
        ]
        logger.debug(f"Topic '{topic}' matched {len(chunks)} chunks")
        return chunks

    async def search_topics(self, topics: list[str]) -> list[DocChunk]:
        chunks: list[DocChunk] = []
        for topic in topics:
            chunks.extend(await self.search(topic))
        return chunks

    async def version_texts(self) -> list[str]:
        rows = await self._query(VERSION_QUERY, VERSION_TOP_K)
        return [row.content for row in rows if row.content]

    async def stats(self) -> dict[str, int]:
        try:
            async with db.scoped_session(self.session_maker) as session:
                result = await session.execute(
                    text(
                        f"SELECT COUNT(*) AS total_chunks, COUNT(DISTINCT source) AS total_documents "
                        f"FROM {self.table_name}"
                    )
                )
                row = result.one()
        except SQLAlchemyError as e:
            raise RetrievalQueryError(f"Docs index stats failed: {e}") from e
        return {"total_chunks": int(row.total_chunks), "total_documents": int(row.total_documents)}

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            logger.debug(f"Docs index closed: {self.db_path}")
        self._engine = None
        self._session_maker = None
