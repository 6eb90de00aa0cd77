"""PostgreSQL structured-store retrieval strategy."""

from datetime import datetime
from typing import Optional

from loguru import logger
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from schema_sync import db
from schema_sync.config import RetrievalMode, SchemaSyncConfig
from schema_sync.repository.doc_chunk import DocChunk, make_source_ref
from schema_sync.repository.retrieval_errors import (
    RetrievalConnectionError,
    RetrievalQueryError,
)

ROW_LIMIT = 100
VERSION_ROW_LIMIT = 10
STRUCTURED_RELEVANCE = 1.0

# Path-prefix priority classes: configuration pages first, concept pages second
PRIORITY_CATEGORIES = {1: "configuration", 2: "concepts", 3: "general"}
PRIORITY_CASE = """
    CASE
        WHEN source LIKE '%/gateway/configuration%' THEN 1
        WHEN source LIKE '%/concepts/%' THEN 2
        ELSE 3
    END
"""
PRIORITY_PATH_PREDICATES = (
    "source LIKE '%/gateway/configuration%'",
    "source LIKE '%/concepts/%'",
)


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class PostgresDocRepository:
    """Reads documentation chunks from a Postgres table.

    The table is expected to provide ``id, text, source, title, heading,
    created_at``. Rows are filtered by keyword, restricted to the configured
    documentation source, and ordered by path-prefix priority then recency.
    Every row is equally relevant (1.0); the ordering carries the ranking.
    """

    mode = RetrievalMode.STRUCTURED
    combines_topics = True

    def __init__(
        self,
        config: SchemaSyncConfig,
        *,
        engine: Optional[AsyncEngine] = None,
        session_maker: Optional[async_sessionmaker[AsyncSession]] = None,
    ):
        self.config = config
        self.table_name = config.docs_table
        self.source_filter = config.docs_source_filter
        self._engine = engine
        self._session_maker = session_maker

    @property
    def session_maker(self) -> async_sessionmaker[AsyncSession]:
        if self._session_maker is None:
            raise RuntimeError("PostgresDocRepository used before connect() or after close()")
        return self._session_maker

    async def connect(self) -> None:
        if self._session_maker is None:
            self._engine, self._session_maker = db.create_engine_and_session(
                db.get_postgres_url(self.config), db.DatabaseType.POSTGRES
            )
        try:
            async with db.scoped_session(self.session_maker) as session:
                await session.execute(text("SELECT NOW()"))
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Cannot reach docs database {self.config.pg_host}:{self.config.pg_port}: {e}")
            await self.close()
            raise RetrievalConnectionError(
                f"Cannot connect to docs database at {self.config.pg_host}:{self.config.pg_port}"
            ) from e
        logger.info("Database connection established")

    async def _fetch(self, sql: str, params: dict) -> list:
        logger.trace(f"Query {sql} params: {params}")
        try:
            async with db.scoped_session(self.session_maker) as session:
                result = await session.execute(text(sql), params)
                return list(result.fetchall())
        except SQLAlchemyError as e:
            logger.error(f"Database error during docs query: {e}")
            raise RetrievalQueryError(f"Docs query failed: {e}") from e

    async def search(self, topic: str) -> list[DocChunk]:
        return await self.search_topics([topic])

    async def search_topics(self, topics: list[str]) -> list[DocChunk]:
        """Fetch rows matching any topic keyword or a priority path, in one query.

        A single query keeps the path-priority ordering and the row limit
        global across topics.
        """
        params: dict[str, str] = {"source_filter": self.source_filter}
        predicates = []
        for index, topic in enumerate(dict.fromkeys(topics)):
            name = f"pattern_{index}"
            params[name] = f"%{_escape_like(topic)}%"
            predicates.append(f"text ILIKE :{name} OR title ILIKE :{name}")
        predicates.extend(PRIORITY_PATH_PREDICATES)

        sql = f"""
            SELECT id, text, source, title, heading, {PRIORITY_CASE} AS priority
            FROM {self.table_name}
            WHERE ({" OR ".join(predicates)})
              AND source LIKE :source_filter
            ORDER BY priority, created_at DESC
            LIMIT {ROW_LIMIT}
        """
        rows = await self._fetch(sql, params)

        chunks = [
            DocChunk(
                id=str(row.id),
                source_ref=make_source_ref(row.source, row.heading),
                title=row.title,
                category=PRIORITY_CATEGORIES.get(row.priority, "general"),
                content=row.text or "",
                relevance_score=STRUCTURED_RELEVANCE,
            )
            for row in rows
        ]
        logger.debug(f"Topics {topics} matched {len(chunks)} rows")
        return chunks

    async def version_texts(self) -> list[str]:
        year = self.config.version_year_anchor or str(datetime.now().year)
        sql = f"""
            SELECT text
            FROM {self.table_name}
            WHERE text ILIKE '%version%'
              AND text ILIKE :year
              AND source LIKE :source_filter
            ORDER BY created_at DESC
            LIMIT {VERSION_ROW_LIMIT}
        """
        rows = await self._fetch(
            sql, {"year": f"%{year}%", "source_filter": self.source_filter}
        )
        return [row.text for row in rows if row.text]

    async def stats(self) -> dict[str, int]:
        sql = f"""
            SELECT COUNT(*) AS total_chunks, COUNT(DISTINCT source) AS total_sources
            FROM {self.table_name}
        """
        rows = await self._fetch(sql, {})
        row = rows[0]
        return {"total_chunks": int(row.total_chunks), "total_sources": int(row.total_sources)}

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            logger.info("Database connection closed")
        self._engine = None
        self._session_maker = None
