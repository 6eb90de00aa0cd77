"""Data model shared by extraction, augmentation and diffing.

Plain dataclasses, decoupled from any storage layer so the same types describe
a schema recovered from documentation and one loaded from the local JSON file.
"""

from dataclasses import dataclass, field
from typing import Any

UNKNOWN_VERSION = "unknown"
UNKNOWN_TYPE = "unknown"
RAW_EXCERPT_LIMIT = 500


class _Unset:
    """Marker for a property that declares no default at all."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()

# field/path -> deduplicated values in order of first appearance
type EnumTable = dict[str, list[str]]


# --- Schema Tree ---


@dataclass
class PropertyDescriptor:
    """A single property inside a configuration node."""

    type: str = UNKNOWN_TYPE
    enum: list[str] | None = None
    default: Any = UNSET
    required: bool | None = None

    def to_dict(self) -> dict:
        data: dict[str, Any] = {"type": self.type}
        if self.enum is not None:
            data["enum"] = list(self.enum)
        if self.default is not UNSET:
            data["default"] = self.default
        if self.required is not None:
            data["required"] = self.required
        return data


@dataclass
class NodeDescriptor:
    """A top-level configuration section such as ``gateway`` or ``agents``."""

    type: str = "object"
    description: str | None = None
    properties: dict[str, PropertyDescriptor] = field(default_factory=dict)
    raw: str | None = None  # bounded excerpt of the source block, for auditing

    def to_dict(self) -> dict:
        data: dict[str, Any] = {"type": self.type}
        if self.description is not None:
            data["description"] = self.description
        data["properties"] = {name: prop.to_dict() for name, prop in self.properties.items()}
        if self.raw is not None:
            data["raw"] = self.raw
        return data


@dataclass
class ChunkSource:
    """Provenance of one chunk that contributed to an extracted schema."""

    id: str
    source_ref: str
    title: str | None = None
    category: str | None = None


@dataclass
class SchemaDocument:
    """A schema tree plus the metadata that travels with it."""

    version: str = UNKNOWN_VERSION
    nodes: dict[str, NodeDescriptor] = field(default_factory=dict)
    enums: EnumTable = field(default_factory=dict)
    sources: list[ChunkSource] = field(default_factory=list)
    timestamp: str | None = None

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "timestamp": self.timestamp,
            "nodes": {name: node.to_dict() for name, node in self.nodes.items()},
            "enums": {key: list(values) for key, values in self.enums.items()},
            "sources": [
                {
                    "id": s.id,
                    "source": s.source_ref,
                    "title": s.title,
                    "category": s.category,
                }
                for s in self.sources
            ],
        }


# --- Diff Results ---


@dataclass
class PropertyDiff:
    """Differences found for one property present on both sides."""

    has_changes: bool = False
    breaking: bool = False
    changes: list[str] = field(default_factory=list)  # "type" | "enum" | "default" | "required"


@dataclass
class NodeDiff:
    """Property-level differences for one node present on both sides."""

    has_changes: bool = False
    breaking: bool = False
    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    modified: list[str] = field(default_factory=list)
    properties: dict[str, PropertyDiff] = field(default_factory=dict)


@dataclass
class EnumChange:
    """Old and new values for an enum whose value list changed."""

    local: list[str]
    remote: list[str]


@dataclass
class EnumDiff:
    """Differences between the local and remote enum tables."""

    has_changes: bool = False
    added: list[str] = field(default_factory=list)
    modified: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    details: dict[str, EnumChange] = field(default_factory=dict)


@dataclass
class ChangeSet:
    """Dotted paths grouped by kind of change."""

    added: list[str] = field(default_factory=list)
    modified: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.added) + len(self.modified) + len(self.removed)


@dataclass
class VersionPair:
    local: str = UNKNOWN_VERSION
    remote: str = UNKNOWN_VERSION


@dataclass
class DiffReport:
    """Outcome of comparing a local schema against a remote one."""

    versions: VersionPair = field(default_factory=VersionPair)
    changes: ChangeSet = field(default_factory=ChangeSet)
    has_changes: bool = False
    breaking: bool = False
    migration_effort: str = "low"  # "low" | "medium" | "high"
    details: dict[str, NodeDiff] = field(default_factory=dict)
    enum_diff: EnumDiff = field(default_factory=EnumDiff)

    def to_dict(self) -> dict:
        return {
            "hasChanges": self.has_changes,
            "version": {"local": self.versions.local, "remote": self.versions.remote},
            "changes": {
                "added": list(self.changes.added),
                "modified": list(self.changes.modified),
                "removed": list(self.changes.removed),
            },
            "breaking": self.breaking,
            "migrationEffort": self.migration_effort,
            "details": {
                node: {
                    "hasChanges": d.has_changes,
                    "breaking": d.breaking,
                    "added": d.added,
                    "removed": d.removed,
                    "modified": d.modified,
                    "properties": {
                        name: {"breaking": p.breaking, "changes": p.changes}
                        for name, p in d.properties.items()
                    },
                }
                for node, d in self.details.items()
            },
            "enums": {
                "added": self.enum_diff.added,
                "modified": self.enum_diff.modified,
                "removed": self.enum_diff.removed,
                "details": {
                    key: {"local": change.local, "remote": change.remote}
                    for key, change in self.enum_diff.details.items()
                },
            },
        }
