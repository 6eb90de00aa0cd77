"""Retrieval strategy protocol for pluggable documentation backends."""

from typing import Protocol

from schema_sync.config import RetrievalMode
from schema_sync.repository.doc_chunk import DocChunk


class RetrievalStrategy(Protocol):
    """Contract for documentation retrieval backends."""

    mode: RetrievalMode
    # True when search_topics answers all topics with one ranked, capped query
    combines_topics: bool

    async def connect(self) -> None:
        """Acquire the backend handle and verify it answers.

        Raises RetrievalConnectionError when the backend is unreachable.
        """
        ...

    async def search(self, topic: str) -> list[DocChunk]:
        """Return chunks relevant to one topic, best first."""
        ...

    async def search_topics(self, topics: list[str]) -> list[DocChunk]:
        """Return chunks relevant to any of the topics, best first."""
        ...

    async def version_texts(self) -> list[str]:
        """Return the texts to scan for a version token, in priority order."""
        ...

    async def stats(self) -> dict[str, int]:
        """Return backend-specific counters."""
        ...

    async def close(self) -> None:
        """Release the backend handle."""
        ...
