"""Version resolution from retrieved documentation text.

The resolver takes a fetch function instead of a retrieval strategy so it
stays decoupled from the repository layer. Each strategy decides which texts
form the scan window (the top relevance hits for the free-text index, the
newest version rows for the structured store).
"""

import re
from collections.abc import Awaitable, Callable, Iterable

from loguru import logger

from schema_sync.schema.models import UNKNOWN_VERSION

# Given nothing, returns the texts to scan in priority order.
type VersionTextFn = Callable[[], Awaitable[list[str]]]

# Either a calendar-style token (2026.2.1, v2026.2.1) or an explicit label
# (version: 1.4.0).
VERSION_PATTERN = re.compile(
    r"""\bversion["']?\s*[:=]\s*["']?[vV]?(?P<labeled>\d+(?:\.\d+)+)"""
    r"""|(?<![\w.])[A-Za-z]?(?P<dated>\d{4}\.\d+\.\d+)(?!\d)""",
    re.IGNORECASE,
)


def find_version(texts: Iterable[str]) -> str | None:
    """Return the first version token found, scanning texts in order."""
    for text in texts:
        if not text:
            continue
        match = VERSION_PATTERN.search(text)
        if match:
            return match.group("labeled") or match.group("dated")
    return None


async def resolve_version(fetch_texts: VersionTextFn) -> str:
    """Resolve the documented version, or "unknown".

    Never raises: a failed fetch is logged and treated like a miss.
    """
    try:
        texts = await fetch_texts()
    except Exception as e:
        logger.warning(f"Version lookup failed, falling back to '{UNKNOWN_VERSION}': {e}")
        return UNKNOWN_VERSION

    version = find_version(texts)
    if version is None:
        logger.debug(f"No version token in {len(texts)} scanned texts")
        return UNKNOWN_VERSION

    logger.debug(f"Resolved documented version {version}")
    return version
