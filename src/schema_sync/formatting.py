"""Rendering of diff reports as console text and Markdown."""

from datetime import datetime, timezone
from typing import Optional

from schema_sync.schema.models import DiffReport


def format_report(report: DiffReport) -> str:
    """Format a diff report for terminal display."""
    lines = [
        "",
        "Schema Comparison Report",
        "========================",
        "",
        "Versions:",
        f"   Local:  {report.versions.local}",
        f"   Remote: {report.versions.remote}",
        "",
    ]

    if not report.has_changes:
        lines.append("No changes detected. Schemas are in sync.")
        return "\n".join(lines)

    lines.append(f"Changes detected (Migration effort: {report.migration_effort.upper()})")
    if report.breaking:
        lines.append("BREAKING CHANGES detected!")
    lines.append("")

    for label, marker, items in (
        ("Added", "+", report.changes.added),
        ("Modified", "~", report.changes.modified),
        ("Removed", "-", report.changes.removed),
    ):
        if not items:
            continue
        lines.append(f"{label} ({len(items)}):")
        lines.extend(f"   {marker} {item}" for item in items)
        lines.append("")

    if report.enum_diff.removed:
        lines.append(f"Local enums not found in documentation ({len(report.enum_diff.removed)}):")
        lines.extend(f"   ? enums.{key}" for key in report.enum_diff.removed)
        lines.append("")

    return "\n".join(lines)


def format_markdown_report(report: DiffReport, generated_at: Optional[datetime] = None) -> str:
    """Format a diff report as a Markdown document with per-node detail."""
    generated_at = generated_at or datetime.now(timezone.utc)
    out = ["# Schema Change Report", ""]
    out.append(f"**Generated:** {generated_at.isoformat()}")
    out.append(f"**Versions:** local `{report.versions.local}` / remote `{report.versions.remote}`")
    out.append(f"**Migration effort:** {report.migration_effort}")
    out.append("")

    if not report.has_changes:
        out.append("*No changes detected.*")
        return "\n".join(out) + "\n"

    if report.changes.added:
        out.append(f"## Added ({len(report.changes.added)})")
        out.append("")
        out.extend(f"- **{path}**" for path in report.changes.added)
        out.append("")

    if report.changes.modified:
        out.append(f"## Modified ({len(report.changes.modified)})")
        out.append("")
        for path in report.changes.modified:
            out.append(f"- **{path}**")
            node = path.removeprefix("nodes.")
            detail = report.details.get(node) if path.startswith("nodes.") else None
            if detail is not None:
                out.extend(f"  - added property `{name}`" for name in detail.added)
                out.extend(f"  - removed property `{name}`" for name in detail.removed)
                for name, prop in detail.properties.items():
                    out.append(f"  - `{name}`: {', '.join(prop.changes)}")
            enum_change = report.enum_diff.details.get(path.removeprefix("enums."))
            if path.startswith("enums.") and enum_change is not None:
                out.append(f"  - {enum_change.local} -> {enum_change.remote}")
        out.append("")

    if report.changes.removed:
        out.append(f"## Removed ({len(report.changes.removed)})")
        out.append("")
        out.append("**BREAKING CHANGES** - these may break existing configurations!")
        out.append("")
        out.extend(f"- **{path}**" for path in report.changes.removed)
        out.append("")

    if report.enum_diff.removed:
        out.append(f"## Local enums without a documented counterpart ({len(report.enum_diff.removed)})")
        out.append("")
        out.extend(f"- `{key}`" for key in report.enum_diff.removed)
        out.append("")

    return "\n".join(out)
