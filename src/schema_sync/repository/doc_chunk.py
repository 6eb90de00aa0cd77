"""Retrieved documentation chunk shared by every retrieval strategy."""

from dataclasses import dataclass, field
from typing import Optional


def make_source_ref(source: str, heading: Optional[str] = None) -> str:
    """Identify a chunk by its page URL, narrowed to a heading when one is known."""
    if heading:
        return f"{source}#{heading.strip()}"
    return source


@dataclass(frozen=True)
class DocChunk:
    """One retrieved unit of documentation text.

    relevance_score is comparable only within one strategy: the structured
    store reports 1.0 for every row, the free-text index reports negated bm25.
    """

    id: str
    source_ref: str
    title: Optional[str]
    category: Optional[str]
    content: str
    relevance_score: float = 1.0


@dataclass
class RetrievalStats:
    """Strategy mode tag plus the strategy's own counters."""

    mode: str
    counters: dict[str, int] = field(default_factory=dict)
