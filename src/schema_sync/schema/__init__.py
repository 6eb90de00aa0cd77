"""Schema system for schema-sync.

Recovers configuration schema fragments from documentation text, fills gaps
from a curated node catalog, and diffs the result against the local schema.
"""

from schema_sync.schema.models import (
    UNKNOWN_VERSION,
    UNSET,
    ChunkSource,
    DiffReport,
    EnumDiff,
    NodeDescriptor,
    NodeDiff,
    PropertyDescriptor,
    PropertyDiff,
    SchemaDocument,
)
from schema_sync.schema.vocabulary import (
    KNOWN_NODES,
    VALID_NODE_NAMES,
    KnownNode,
    is_valid_node_name,
)
from schema_sync.schema.extractor import (
    ExtractionResult,
    extract_enum_values,
    extract_from_chunks,
    extract_node_definitions,
    find_block_end,
)
from schema_sync.schema.augmenter import add_known_nodes
from schema_sync.schema.version import find_version, resolve_version
from schema_sync.schema.local import LocalSchemaError, load_local_schema, parse_local_schema
from schema_sync.schema.diff import (
    calculate_migration_effort,
    compare,
    compare_enums,
    compare_node,
    compare_property,
)

__all__ = [
    # Models
    "UNKNOWN_VERSION",
    "UNSET",
    "ChunkSource",
    "DiffReport",
    "EnumDiff",
    "NodeDescriptor",
    "NodeDiff",
    "PropertyDescriptor",
    "PropertyDiff",
    "SchemaDocument",
    # Vocabulary
    "KNOWN_NODES",
    "VALID_NODE_NAMES",
    "KnownNode",
    "is_valid_node_name",
    # Extractor
    "ExtractionResult",
    "extract_enum_values",
    "extract_from_chunks",
    "extract_node_definitions",
    "find_block_end",
    # Augmenter
    "add_known_nodes",
    # Version
    "find_version",
    "resolve_version",
    # Local
    "LocalSchemaError",
    "load_local_schema",
    "parse_local_schema",
    # Diff
    "calculate_migration_effort",
    "compare",
    "compare_enums",
    "compare_node",
    "compare_property",
]
