"""Tests for schema_sync.schema.local -- loading the persisted local schema."""

import json
from pathlib import Path

import pytest

from schema_sync.schema.local import (
    LocalSchemaError,
    collect_enums,
    get_local_version,
    get_node_names,
    load_local_schema,
    parse_local_schema,
    parse_property,
)
from schema_sync.schema.models import UNKNOWN_VERSION, UNSET


def _write(tmp_path, data) -> Path:
    path = tmp_path / "schema.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestNodeContainer:
    def test_nested_schema_properties(self):
        data = {"schema": {"properties": {"gateway": {}, "agents": {}}}}
        assert get_node_names(data) == ["gateway", "agents"]

    def test_top_level_properties(self):
        assert get_node_names({"properties": {"cron": {}}}) == ["cron"]

    def test_nested_takes_precedence(self):
        data = {"schema": {"properties": {"gateway": {}}}, "properties": {"cron": {}}}
        assert get_node_names(data) == ["gateway"]

    def test_no_container(self):
        assert get_node_names({"title": "empty"}) == []


class TestLocalVersion:
    @pytest.mark.parametrize(
        "data,expected",
        [
            ({"version": "2026.1.5", "meta": {"lastTouchedVersion": "x"}}, "2026.1.5"),
            ({"meta": {"lastTouchedVersion": "2026.1.30"}}, "2026.1.30"),
            ({"$version": "3"}, "3"),
            ({}, UNKNOWN_VERSION),
        ],
    )
    def test_lookup_order(self, data, expected):
        assert get_local_version(data) == expected


class TestCollectEnums:
    def test_dotted_paths(self):
        data = {
            "schema": {
                "properties": {
                    "gateway": {
                        "properties": {
                            "bind": {"enum": ["loopback", "lan"]},
                            "auth": {"properties": {"mode": {"enum": ["token", "password"]}}},
                        }
                    }
                }
            }
        }

        assert collect_enums(data) == {
            "gateway.bind": ["loopback", "lan"],
            "gateway.auth.mode": ["token", "password"],
        }

    def test_root_enum(self):
        assert collect_enums({"enum": ["a", "b"]}) == {"root": ["a", "b"]}

    def test_values_stringified(self):
        data = {"properties": {"logging": {"properties": {"level": {"enum": [1, True]}}}}}
        assert collect_enums(data) == {"logging.level": ["1", "True"]}


class TestParseProperty:
    def test_full_property(self):
        prop = parse_property({"type": "string", "enum": ["a"], "default": "a", "required": True})
        assert prop.type == "string"
        assert prop.enum == ["a"]
        assert prop.default == "a"
        assert prop.required is True

    def test_absent_default_differs_from_null_default(self):
        assert parse_property({"type": "string"}).default is UNSET
        assert parse_property({"type": "string", "default": None}).default is None

    def test_union_type(self):
        assert parse_property({"type": ["string", "number"]}).type == "string|number"

    def test_missing_type(self):
        assert parse_property({}).type == "any"

    def test_non_bool_required_is_ignored(self):
        assert parse_property({"type": "string", "required": ["x"]}).required is None


def test_parse_local_schema():
    data = {
        "meta": {"lastTouchedVersion": "2026.1.5"},
        "schema": {
            "properties": {
                "gateway": {
                    "type": "object",
                    "description": "Gateway server",
                    "properties": {"port": {"type": "number", "default": 18789}},
                }
            }
        },
    }

    document = parse_local_schema(data)

    assert document.version == "2026.1.5"
    gateway = document.nodes["gateway"]
    assert gateway.description == "Gateway server"
    assert gateway.properties["port"].type == "number"
    assert gateway.properties["port"].default == 18789


def test_load_local_schema(local_schema_file):
    document = load_local_schema(local_schema_file)

    assert document.version == "2026.1.5"
    assert list(document.nodes) == ["gateway", "agents"]
    assert list(document.nodes["gateway"].properties) == ["port", "mode"]


def test_load_missing_file(tmp_path):
    with pytest.raises(LocalSchemaError, match="not found"):
        load_local_schema(tmp_path / "missing.json")


def test_load_invalid_json(tmp_path):
    path = tmp_path / "schema.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(LocalSchemaError, match="not valid JSON"):
        load_local_schema(path)


def test_load_non_object(tmp_path):
    with pytest.raises(LocalSchemaError, match="JSON object"):
        load_local_schema(_write(tmp_path, ["gateway"]))


def test_local_schema_error_is_value_error(tmp_path):
    with pytest.raises(ValueError):
        load_local_schema(tmp_path / "missing.json")


def test_load_directory_is_local_schema_error(tmp_path):
    with pytest.raises(LocalSchemaError, match="Cannot read local schema") as exc:
        load_local_schema(tmp_path)

    assert isinstance(exc.value.__cause__, OSError)


def test_load_non_utf8_file(tmp_path):
    path = tmp_path / "schema.json"
    path.write_bytes(b'{"version": "\xff"}')

    with pytest.raises(LocalSchemaError, match="not valid JSON"):
        load_local_schema(path)
