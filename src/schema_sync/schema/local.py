"""Loader for the persisted local schema document.

The local file is a JSON-Schema-like document. Its node collection lives under
``schema.properties`` or, in older files, under top-level ``properties``.
"""

import json
from pathlib import Path
from typing import Any

from loguru import logger

from schema_sync.schema.models import (
    UNKNOWN_VERSION,
    UNSET,
    EnumTable,
    NodeDescriptor,
    PropertyDescriptor,
    SchemaDocument,
)


class LocalSchemaError(ValueError):
    """Raised when the local schema file is missing or not a JSON object."""


def get_node_container(data: dict) -> dict:
    """Return the mapping that holds the top-level nodes, or an empty dict."""
    schema = data.get("schema")
    if isinstance(schema, dict) and isinstance(schema.get("properties"), dict):
        return schema["properties"]
    if isinstance(data.get("properties"), dict):
        return data["properties"]
    return {}


def get_node_names(data: dict) -> list[str]:
    return list(get_node_container(data))


def get_local_version(data: dict) -> str:
    """Read the version from ``version``, ``meta.lastTouchedVersion`` or ``$version``."""
    if data.get("version"):
        return str(data["version"])
    meta = data.get("meta")
    if isinstance(meta, dict) and meta.get("lastTouchedVersion"):
        return str(meta["lastTouchedVersion"])
    if data.get("$version"):
        return str(data["$version"])
    return UNKNOWN_VERSION


def collect_enums(data: dict) -> EnumTable:
    """Walk the tree and collect every ``enum`` keyed by its dotted property path.

    An enum on the root object itself is keyed ``root``.
    """
    enums: EnumTable = {}

    def traverse(obj: Any, path: str = "") -> None:
        if not isinstance(obj, dict):
            return
        if isinstance(obj.get("enum"), list):
            enums[path or "root"] = [str(v) for v in obj["enum"]]
        properties = obj.get("properties")
        if isinstance(properties, dict):
            for key, value in properties.items():
                traverse(value, f"{path}.{key}" if path else key)

    schema = data.get("schema")
    traverse(schema if isinstance(schema, dict) else data)
    return enums


def _normalize_type(value: Any) -> str:
    if isinstance(value, list):
        return "|".join(str(v) for v in value)
    if value is None:
        return "any"
    return str(value)


def parse_property(data: Any) -> PropertyDescriptor:
    if not isinstance(data, dict):
        return PropertyDescriptor(type="any")
    enum = data.get("enum")
    required = data.get("required")
    return PropertyDescriptor(
        type=_normalize_type(data.get("type")),
        enum=[str(v) for v in enum] if isinstance(enum, list) else None,
        default=data["default"] if "default" in data else UNSET,
        required=required if isinstance(required, bool) else None,
    )


def parse_node(data: Any) -> NodeDescriptor:
    if not isinstance(data, dict):
        return NodeDescriptor()
    properties = data.get("properties")
    description = data.get("description")
    return NodeDescriptor(
        type=_normalize_type(data.get("type", "object")),
        description=description if isinstance(description, str) else None,
        properties=(
            {name: parse_property(prop) for name, prop in properties.items()}
            if isinstance(properties, dict)
            else {}
        ),
    )


def parse_local_schema(data: dict) -> SchemaDocument:
    """Convert a decoded local schema document into a SchemaDocument."""
    return SchemaDocument(
        version=get_local_version(data),
        nodes={name: parse_node(node) for name, node in get_node_container(data).items()},
        enums=collect_enums(data),
    )


def load_local_schema(path: Path) -> SchemaDocument:
    """Read and parse the local schema file.

    Raises:
        LocalSchemaError: If the file can't be read or isn't a JSON object.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise LocalSchemaError(f"Local schema not found: {path}") from e
    except OSError as e:
        raise LocalSchemaError(f"Cannot read local schema: {path}: {e}") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise LocalSchemaError(f"Local schema is not valid JSON: {path}: {e}") from e

    if not isinstance(data, dict):
        raise LocalSchemaError(f"Local schema must be a JSON object: {path}")

    document = parse_local_schema(data)
    logger.debug(
        f"Loaded local schema {path}: version={document.version}, "
        f"nodes={len(document.nodes)}, enums={len(document.enums)}"
    )
    return document
