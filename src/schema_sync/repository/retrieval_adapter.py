"""Uniform access to documentation chunks across retrieval strategies.

The adapter owns everything that must behave the same whatever the backend:
retry with backoff, dropping topics that keep failing, a single
order-preserving dedup pass by source_ref, ranking and the result cap.
"""

import asyncio
from collections.abc import Awaitable, Callable

from loguru import logger

from schema_sync.config import SchemaSyncConfig
from schema_sync.repository.doc_chunk import DocChunk, RetrievalStats
from schema_sync.repository.retrieval_errors import RetrievalConnectionError, RetrievalQueryError
from schema_sync.repository.retrieval_strategy import RetrievalStrategy
from schema_sync.repository.retry import DEFAULT_BASE_DELAY, DEFAULT_MAX_ATTEMPTS, retry_async
from schema_sync.repository.strategy_factory import create_retrieval_strategy

DEFAULT_MAX_CHUNKS = 50


def merge_chunks(results: list[list[DocChunk]], max_chunks: int = DEFAULT_MAX_CHUNKS) -> list[DocChunk]:
    """Combine per-topic results into one ranked list.

    The first chunk seen for a source_ref wins. Ranking is by relevance,
    descending; the sort is stable so equally relevant chunks keep query order.
    """
    seen: dict[str, DocChunk] = {}
    for chunks in results:
        for chunk in chunks:
            if chunk.source_ref not in seen:
                seen[chunk.source_ref] = chunk

    ranked = sorted(seen.values(), key=lambda c: c.relevance_score, reverse=True)
    return ranked[:max_chunks]


class RetrievalAdapter:
    """Retrieves ranked documentation chunks through one strategy.

    The strategy is chosen once, at construction. Use ``init()`` before any
    query and ``close()`` when done, or use the adapter as an async context
    manager.
    """

    def __init__(
        self,
        strategy: RetrievalStrategy,
        *,
        max_chunks: int = DEFAULT_MAX_CHUNKS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        base_delay: float = DEFAULT_BASE_DELAY,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ):
        self.strategy = strategy
        self.max_chunks = max_chunks
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._sleep = sleep
        self._initialized = False
        self._closed = False

    @classmethod
    def from_config(cls, app_config: SchemaSyncConfig) -> "RetrievalAdapter":
        return cls(
            create_retrieval_strategy(app_config),
            max_chunks=app_config.max_chunks,
            max_attempts=app_config.retry_max_attempts,
            base_delay=app_config.retry_base_delay,
        )

    @property
    def mode(self) -> str:
        return self.strategy.mode.value

    async def init(self) -> None:
        """Connect the strategy. Failure here is fatal for the run.

        Raises:
            RetrievalConnectionError: With the originating failure chained.
        """
        try:
            await self.strategy.connect()
        except RetrievalConnectionError:
            raise
        except Exception as e:
            raise RetrievalConnectionError(f"Retrieval backend unavailable: {e}") from e
        self._initialized = True
        self._closed = False

    async def close(self) -> None:
        if self._initialized and not self._closed:
            await self.strategy.close()
        self._closed = True

    async def __aenter__(self) -> "RetrievalAdapter":
        await self.init()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _check_open(self) -> None:
        if not self._initialized or self._closed:
            raise RuntimeError("RetrievalAdapter is not initialized or already closed")

    async def _with_retry(self, operation, description: str):
        return await retry_async(
            operation,
            max_attempts=self.max_attempts,
            base_delay=self.base_delay,
            retry_on=(RetrievalQueryError,),
            sleep=self._sleep,
            description=description,
        )

    async def query_candidate_chunks(self, topics: list[str]) -> list[DocChunk]:
        """Query every topic and return ranked, deduplicated chunks.

        Topics run one after another so "first seen" is deterministic. A topic
        that still fails after its retries is logged and left out.
        """
        self._check_open()

        if self.strategy.combines_topics:
            return await self._query_combined(topics)

        results: list[list[DocChunk]] = []
        failed: list[str] = []
        for topic in topics:
            try:
                chunks = await self._with_retry(
                    lambda topic=topic: self.strategy.search(topic),
                    description=f"query for topic '{topic}'",
                )
            except RetrievalQueryError as e:
                logger.warning(f"Dropping topic '{topic}' after {self.max_attempts} attempts: {e}")
                failed.append(topic)
                continue
            results.append(chunks)

        merged = merge_chunks(results, self.max_chunks)
        logger.info(
            f"Found {len(merged)} relevant documentation chunks "
            f"({len(topics) - len(failed)}/{len(topics)} topics answered)"
        )
        return merged

    async def _query_combined(self, topics: list[str]) -> list[DocChunk]:
        # One query answers every topic; if it keeps failing there is nothing to merge
        try:
            chunks = await self._with_retry(
                lambda: self.strategy.search_topics(list(topics)),
                description="combined topic query",
            )
        except RetrievalQueryError as e:
            logger.warning(f"Dropping topics {topics} after {self.max_attempts} attempts: {e}")
            chunks = []

        merged = merge_chunks([chunks], self.max_chunks)
        logger.info(f"Found {len(merged)} relevant documentation chunks (one query for {len(topics)} topics)")
        return merged

    async def version_texts(self) -> list[str]:
        """Texts the strategy considers likely to carry the documented version."""
        self._check_open()
        return await self._with_retry(self.strategy.version_texts, description="version query")

    async def get_stats(self) -> RetrievalStats:
        self._check_open()
        counters = await self._with_retry(self.strategy.stats, description="stats query")
        return RetrievalStats(mode=self.mode, counters=counters)
