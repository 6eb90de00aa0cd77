"""Heuristic schema extraction from documentation text.

Documentation pages show configuration as JSON/JSON5 snippets embedded in
prose. Nothing guarantees the snippets are complete or even well formed, so
extraction is best effort:

  - Node definitions: an allow-listed identifier followed by ``{``. The block
    ends at the brace that balances it; a lazy regex would stop at the first
    inner ``}`` and truncate nested structures.
  - Enum values: either ``"field": "a" | "b"`` alternatives or a bracketed
    ``"field": ["a", "b"]`` list. Alternatives win when both appear.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Iterable

from loguru import logger

from schema_sync.config import MergePolicy
from schema_sync.repository.doc_chunk import DocChunk
from schema_sync.schema.models import (
    RAW_EXCERPT_LIMIT,
    ChunkSource,
    EnumTable,
    NodeDescriptor,
    PropertyDescriptor,
    UNKNOWN_TYPE,
)
from schema_sync.schema.vocabulary import is_valid_node_name

# "name": {   'name': {   name: {
NODE_START_PATTERN = re.compile(r"""(?:"(\w+)"|'(\w+)'|\b(\w+))\s*:\s*\{""")

# String delimiters honoured while matching braces (JSON5 allows both)
QUOTE_CHARS = ('"', "'")

# Direct child keys inside a block, quoted or bare
PROPERTY_KEY_PATTERN = re.compile(
    r"""(?:"([A-Za-z_]\w*)"|'([A-Za-z_]\w*)'|\b([A-Za-z_]\w*))\s*:"""
)

# "mode": "local" | "remote" | "hybrid"
ENUM_ALTERNATIVES_PATTERN = re.compile(
    r'"(\w+)"\s*:\s*((?:"[\w.\-/]+"\s*\|\s*)+"[\w.\-/]+")'
)
QUOTED_VALUE_PATTERN = re.compile(r'"([^"]*)"')

# "bind": ["loopback", "lan"]
ENUM_ARRAY_PATTERN = re.compile(
    r'"(\w+)"\s*:\s*(\[\s*"[^"\]]*"(?:\s*,\s*"[^"\]]*")*\s*,?\s*\])'
)


# --- Brace Matching ---


def find_block_end(text: str, open_index: int) -> int | None:
    """Return the index of the ``}`` that closes the ``{`` at ``open_index``.

    Braces inside single- or double-quoted strings are ignored. A string also
    ends at a newline, since documentation snippets are often not valid JSON
    and a stray quote (or an apostrophe in a comment) must not swallow the rest
    of the page.

    Returns None when the block never closes.
    """
    depth = 0
    quote: str | None = None
    escaped = False

    for index in range(open_index, len(text)):
        char = text[index]

        if quote is not None:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == quote or char == "\n":
                quote = None
            continue

        if char in QUOTE_CHARS:
            quote = char
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index

    return None


def _top_level_keys(block: str) -> list[str]:
    """Collect keys declared directly inside ``block`` (which starts with ``{``).

    Keys of nested objects and text inside string values are skipped.
    """
    depth_at: list[int] = []
    in_string_at: list[bool] = []
    depth = 0
    quote: str | None = None
    escaped = False

    for char in block:
        depth_at.append(depth)
        in_string_at.append(quote is not None)
        if quote is not None:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == quote or char == "\n":
                quote = None
            continue
        if char in QUOTE_CHARS:
            quote = char
        elif char == "{" or char == "[":
            depth += 1
        elif char == "}" or char == "]":
            depth -= 1

    keys: list[str] = []
    for match in PROPERTY_KEY_PATTERN.finditer(block):
        start = match.start()
        if depth_at[start] != 1 or in_string_at[start]:
            continue
        name = match.group(1) or match.group(2) or match.group(3)
        if name not in keys:
            keys.append(name)
    return keys


# --- Node Extraction ---


def parse_node_block(block: str) -> NodeDescriptor:
    """Build a descriptor from a balanced ``{...}`` block.

    Property types can't be recovered reliably from prose, so every property
    is typed "unknown".
    """
    properties = {name: PropertyDescriptor(type=UNKNOWN_TYPE) for name in _top_level_keys(block)}
    return NodeDescriptor(properties=properties, raw=block[:RAW_EXCERPT_LIMIT])


def extract_node_definitions(text: str) -> dict[str, NodeDescriptor]:
    """Extract allow-listed node definitions from a chunk of text.

    Args:
        text: Raw chunk content.

    Returns:
        Mapping of node name to descriptor. Identifiers outside the node
        vocabulary never appear as keys. Nested keys of an extracted node are
        recorded as its properties, not as separate nodes.
    """
    nodes: dict[str, NodeDescriptor] = {}
    position = 0

    while True:
        match = NODE_START_PATTERN.search(text, position)
        if match is None:
            break

        name = match.group(1) or match.group(2) or match.group(3)
        open_index = match.end() - 1

        if not is_valid_node_name(name):
            position = match.end()
            continue

        close_index = find_block_end(text, open_index)
        if close_index is None:
            logger.debug(f"Unbalanced block for node '{name}', using text to end of chunk")
            block = text[open_index:]
            position = len(text)
        else:
            block = text[open_index : close_index + 1]
            position = close_index + 1

        nodes[name] = parse_node_block(block)

    return nodes


# --- Enum Extraction ---


def _dedupe(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(values))


def extract_enum_values(text: str) -> EnumTable:
    """Extract enumerated value lists keyed by field name.

    Malformed bracketed lists are skipped without raising.
    """
    enums: EnumTable = {}

    for match in ENUM_ALTERNATIVES_PATTERN.finditer(text):
        field_name = match.group(1)
        # group(2) starts after the field name, so the name is never taken as a value
        enums[field_name] = _dedupe(QUOTED_VALUE_PATTERN.findall(match.group(2)))

    from_alternatives = set(enums)

    for match in ENUM_ARRAY_PATTERN.finditer(text):
        field_name = match.group(1)
        if field_name in from_alternatives:
            continue
        try:
            values = json.loads(match.group(2))
        except json.JSONDecodeError:
            logger.debug(f"Skipping malformed enum list for '{field_name}': {match.group(2)!r}")
            continue
        enums[field_name] = _dedupe(str(value) for value in values)

    return enums


# --- Multi-Chunk Merge ---


@dataclass
class ExtractionResult:
    """Nodes, enums and provenance recovered from a set of chunks."""

    nodes: dict[str, NodeDescriptor] = field(default_factory=dict)
    enums: EnumTable = field(default_factory=dict)
    sources: list[ChunkSource] = field(default_factory=list)
    conflicts: list[str] = field(default_factory=list)


def extract_from_chunks(
    chunks: Iterable[DocChunk],
    merge_policy: MergePolicy = MergePolicy.LAST,
) -> ExtractionResult:
    """Run node and enum extraction over chunks and merge the results.

    With ``MergePolicy.LAST`` a definition from a later chunk replaces one
    from an earlier chunk. With ``MergePolicy.RELEVANCE`` the definition from
    the chunk with the higher relevance score is kept, ties going to the
    earlier chunk. Every replaced definition that differed is logged and
    listed in ``conflicts``.
    """
    result = ExtractionResult()
    node_scores: dict[str, float] = {}
    enum_scores: dict[str, float] = {}

    for chunk in chunks:
        result.sources.append(
            ChunkSource(
                id=chunk.id,
                source_ref=chunk.source_ref,
                title=chunk.title,
                category=chunk.category,
            )
        )

        for name, node in extract_node_definitions(chunk.content).items():
            if _should_take(name, chunk, result.nodes, node_scores, merge_policy):
                if name in result.nodes and result.nodes[name].properties != node.properties:
                    logger.warning(
                        f"Node '{name}' redefined by chunk {chunk.id} ({chunk.source_ref}), "
                        f"replacing earlier definition"
                    )
                    result.conflicts.append(f"nodes.{name}")
                result.nodes[name] = node
                node_scores[name] = chunk.relevance_score

        for key, values in extract_enum_values(chunk.content).items():
            if _should_take(key, chunk, result.enums, enum_scores, merge_policy):
                if key in result.enums and result.enums[key] != values:
                    logger.warning(
                        f"Enum '{key}' redefined by chunk {chunk.id} ({chunk.source_ref}): "
                        f"{result.enums[key]} -> {values}"
                    )
                    result.conflicts.append(f"enums.{key}")
                result.enums[key] = values
                enum_scores[key] = chunk.relevance_score

    logger.info(
        f"Extracted {len(result.nodes)} nodes and {len(result.enums)} enums "
        f"from {len(result.sources)} chunks"
    )
    return result


def _should_take(
    key: str,
    chunk: DocChunk,
    current: dict,
    scores: dict[str, float],
    merge_policy: MergePolicy,
) -> bool:
    if key not in current or merge_policy == MergePolicy.LAST:
        return True
    return chunk.relevance_score > scores[key]
