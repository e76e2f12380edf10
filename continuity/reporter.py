"""
continuity/reporter.py -- Aggregator/Reporter

Merges detector output into a ``ConsistencyReport`` and renders it as a
friendly message.

Issues are concatenated in detection order (multiple_outfits, then
item_conflict, then missing_data) and stable-sorted by severity, so issues
of equal severity keep their detection order.  Nothing here does I/O.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from continuity.models.report import (
    ConflictIssue,
    ConflictType,
    ConsistencyReport,
    ConsistencySummary,
    Severity,
)

_SEVERITY_LABELS = {
    Severity.HIGH: "HIGH",
    Severity.MEDIUM: "MEDIUM",
    Severity.LOW: "LOW",
}

_TYPE_LABELS = {
    ConflictType.MULTIPLE_OUTFITS: "Multiple outfits",
    ConflictType.ITEM_CONFLICT: "Item conflicts",
    ConflictType.MISSING_DATA: "Missing data",
}


def summarize(conflicts: list[ConflictIssue]) -> ConsistencySummary:
    """Count *conflicts* by severity and by type."""
    by_severity = Counter(c.severity for c in conflicts)
    by_type = Counter(c.type for c in conflicts)
    return ConsistencySummary(
        total=len(conflicts),
        high=by_severity[Severity.HIGH],
        medium=by_severity[Severity.MEDIUM],
        low=by_severity[Severity.LOW],
        by_type={t.value: by_type[t] for t in ConflictType},
    )


def build_report(*issue_groups: Iterable[ConflictIssue]) -> ConsistencyReport:
    """Merge *issue_groups* (in the order given) into a sorted report.

    Callers pass the detector outputs in detection order::

        build_report(multiple_outfits, item_conflicts, missing_data)
    """
    merged: list[ConflictIssue] = []
    for group in issue_groups:
        merged.extend(group)
    # sorted() is stable: equal ranks keep detection order
    conflicts = sorted(merged, key=lambda issue: issue.rank)
    return ConsistencyReport(conflicts=conflicts, summary=summarize(conflicts))


# ---------------------------------------------------------------------------
# Human-friendly rendering
# ---------------------------------------------------------------------------

def _location(issue: ConflictIssue) -> str | None:
    details = issue.details
    if not details.chapter:
        return None
    location = f"Chapter {details.chapter}"
    if details.scene:
        location += f", Scene {details.scene}"
    return location


def format_issue(issue: ConflictIssue) -> list[str]:
    """Render one issue as indented lines (without numbering)."""
    details = issue.details
    lines = [f"[{_SEVERITY_LABELS[issue.severity]}] {issue.message}"]
    if details.character_name:
        lines.append(f"    Character: {details.character_name}")
    location = _location(issue)
    if location:
        lines.append(f"    Location: {location}")
    if details.outfit_names:
        lines.append(f"    Outfits: {', '.join(details.outfit_names)}")
    elif details.outfit_ids:
        lines.append(f"    Outfits: {', '.join(details.outfit_ids)}")
    if details.item_id:
        lines.append(f"    Item: {details.item_name or details.item_id}")
    if details.entry_ids and issue.type == ConflictType.MISSING_DATA:
        lines.append(f"    Entry: {', '.join(details.entry_ids)}")
    return lines


def format_report(report: ConsistencyReport) -> str:
    """Convert a report into a readable summary for a non-technical user."""
    summary = report.summary
    if summary.total == 0:
        return "No continuity issues found. Every scene checks out."

    plural = "s" if summary.total != 1 else ""
    lines = [
        f"Found {summary.total} potential issue{plural} in the timeline.",
        f"  High: {summary.high}   Medium: {summary.medium}   Low: {summary.low}",
        "",
    ]
    for conflict_type in ConflictType:
        count = summary.by_type.get(conflict_type.value, 0)
        lines.append(f"  {_TYPE_LABELS[conflict_type]}: {count}")
    lines.append("")

    for i, issue in enumerate(report.conflicts, 1):
        first, *rest = format_issue(issue)
        lines.append(f"{i}. {first}")
        lines.extend(rest)

    lines.append("")
    lines.append("Nothing was changed. Review the entries above and fix them in the timeline.")
    return "\n".join(lines)
