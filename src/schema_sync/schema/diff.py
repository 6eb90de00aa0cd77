"""Structural diff between a local schema and one recovered from documentation.

Differences are reported as dotted paths grouped into added, modified and
removed:

  - nodes.<name>   top-level node added, removed, or changed underneath
  - enums.<key>    enum table entry added or changed

A change is breaking when it can invalidate configuration that used to be
valid: a removed node, a removed property, a changed property type, or a
property that became required. Enum entries missing remotely are listed on
``report.enum_diff.removed`` only and are never breaking.
"""

from loguru import logger

from schema_sync.schema.models import (
    DiffReport,
    EnumChange,
    EnumDiff,
    EnumTable,
    NodeDescriptor,
    NodeDiff,
    PropertyDescriptor,
    PropertyDiff,
    SchemaDocument,
)

MEDIUM_EFFORT_THRESHOLD = 10


def compare_property(
    local_prop: PropertyDescriptor | None,
    remote_prop: PropertyDescriptor | None,
) -> PropertyDiff:
    """Compare one property present in both schemas.

    A side that is missing counts as a change but not as a breaking one.
    """
    diff = PropertyDiff()

    if local_prop is None or remote_prop is None:
        diff.has_changes = True
        return diff

    if local_prop.type != remote_prop.type:
        diff.changes.append("type")
        diff.breaking = True

    if local_prop.enum != remote_prop.enum:
        diff.changes.append("enum")

    if local_prop.default != remote_prop.default:
        diff.changes.append("default")

    local_required = bool(local_prop.required)
    remote_required = bool(remote_prop.required)
    if local_required != remote_required:
        diff.changes.append("required")
        # Only tightening breaks existing configs
        if remote_required and not local_required:
            diff.breaking = True

    diff.has_changes = bool(diff.changes)
    return diff


def compare_node(
    local_node: NodeDescriptor | None,
    remote_node: NodeDescriptor | None,
) -> NodeDiff:
    """Compare the properties of one node present in both schemas."""
    diff = NodeDiff()

    if local_node is None or remote_node is None:
        diff.has_changes = True
        return diff

    local_props = local_node.properties
    remote_props = remote_node.properties

    for name in remote_props:
        if name not in local_props:
            diff.added.append(name)

    for name in local_props:
        if name not in remote_props:
            diff.removed.append(name)
            diff.breaking = True

    for name, local_prop in local_props.items():
        if name not in remote_props:
            continue
        prop_diff = compare_property(local_prop, remote_props[name])
        if prop_diff.has_changes:
            diff.modified.append(name)
            diff.properties[name] = prop_diff
            if prop_diff.breaking:
                diff.breaking = True

    diff.has_changes = bool(diff.added or diff.removed or diff.modified)
    return diff


def compare_enums(local_enums: EnumTable, remote_enums: EnumTable) -> EnumDiff:
    """Compare two enum tables key by key."""
    diff = EnumDiff()

    for key in remote_enums:
        if key not in local_enums:
            diff.added.append(key)

    for key in local_enums:
        if key not in remote_enums:
            diff.removed.append(key)

    for key, local_values in local_enums.items():
        if key not in remote_enums:
            continue
        remote_values = remote_enums[key]
        if local_values != remote_values:
            diff.modified.append(key)
            diff.details[key] = EnumChange(local=list(local_values), remote=list(remote_values))

    diff.has_changes = bool(diff.added or diff.removed or diff.modified)
    return diff


def calculate_migration_effort(report: DiffReport) -> str:
    """Rate the effort of adopting the remote schema: low, medium or high."""
    if report.breaking:
        return "high"
    if report.changes.total > MEDIUM_EFFORT_THRESHOLD:
        return "medium"
    return "low"


def compare(local: SchemaDocument, remote: SchemaDocument) -> DiffReport:
    """Compare a local schema against a remote one.

    Pure function of its inputs; neither document is modified.
    """
    report = DiffReport()
    report.versions.local = local.version
    report.versions.remote = remote.version

    # --- Node level ---
    for name in remote.nodes:
        if name not in local.nodes:
            report.changes.added.append(f"nodes.{name}")

    for name in local.nodes:
        if name not in remote.nodes:
            report.changes.removed.append(f"nodes.{name}")
            report.breaking = True

    for name, local_node in local.nodes.items():
        if name not in remote.nodes:
            continue
        node_diff = compare_node(local_node, remote.nodes[name])
        if node_diff.has_changes:
            report.changes.modified.append(f"nodes.{name}")
            report.details[name] = node_diff
            if node_diff.breaking:
                report.breaking = True

    # --- Enum table ---
    report.enum_diff = compare_enums(local.enums, remote.enums)
    report.changes.added.extend(f"enums.{key}" for key in report.enum_diff.added)
    report.changes.modified.extend(f"enums.{key}" for key in report.enum_diff.modified)
    if report.enum_diff.removed:
        logger.debug(
            f"{len(report.enum_diff.removed)} local enums have no remote counterpart: "
            f"{report.enum_diff.removed}"
        )

    report.has_changes = report.changes.total > 0 or report.enum_diff.has_changes
    report.migration_effort = calculate_migration_effort(report)

    logger.info(
        f"Compared schemas {report.versions.local} -> {report.versions.remote}: "
        f"+{len(report.changes.added)} ~{len(report.changes.modified)} "
        f"-{len(report.changes.removed)}, breaking={report.breaking}, "
        f"effort={report.migration_effort}"
    )
    return report
