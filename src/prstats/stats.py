"""Formatting helpers for PR statistics reporting.

This module provides utilities for:
- Formatting hour values as ``"<hours> hours (<days> days)"``.
- Building a human-readable report from a :class:`~prstats.models.Report`.

Every section is always rendered; empty aggregates are replaced by an explicit
"no data" line.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from .durations import round_half_up
from .models import Report

NO_MERGED_ITEMS = "No merged PRs found."
NO_COMMENTS = "No comments found."
NO_REVIEWS = "No review data found."
NO_ITEMS = "No PRs found."


def format_hours(hours: Optional[float]) -> str:
    """Format hours with their day equivalent.

    Returns:
        ``"n/a"`` when ``hours`` is ``None``; otherwise e.g.
        ``"36.0 hours (1.5 days)"``.
    """
    if hours is None:
        return "n/a"
    return f"{round_half_up(hours):.1f} hours ({round_half_up(hours / 24):.1f} days)"


def _scope(report: Report) -> str:
    if report.exhaustive:
        return f"all {report.analyzed_items} PRs"
    return f"sample of {report.analyzed_items} PRs"


def generate_report(report: Report, label: Optional[str] = None) -> str:
    """Render a statistics report as multi-line text.

    Args:
        report: Aggregated statistics.
        label: Label the pull requests were filtered by, shown in the header.

    Returns:
        Formatted multi-line text report.
    """
    subject = f"PRs with label '{label}'" if label else "PRs"
    lines = [
        "PULL REQUEST STATISTICS",
        "",
        f"Total number of {subject}: {report.total_items}",
        "",
        "1) PRs by repository",
    ]
    if report.items_by_repository:
        lines.extend(f"   - {entry.name}: {entry.count} PRs" for entry in report.items_by_repository)
    else:
        lines.append(f"   {NO_ITEMS}")

    lines.extend(["", "2) PRs created by user (across all repositories)"])
    if report.creator_counts:
        lines.extend(f"   - {entry.name}: {entry.count} PRs" for entry in report.creator_counts)
    else:
        lines.append(f"   {NO_ITEMS}")

    lines.extend(
        [
            "",
            "3) PR status",
            f"   - Merged: {report.states.merged}",
            f"   - Open: {report.states.open}",
            f"   - Closed (without merge): {report.states.closed_not_merged}",
            "",
            f"4) Most active commenters ({_scope(report)} across all repositories)",
        ]
    )
    if report.commenters:
        lines.extend(f"   - {entry.name}: {entry.count} comments" for entry in report.commenters)
    else:
        lines.append(f"   {NO_COMMENTS}")

    lines.extend(["", "5) PR review coverage"])
    if report.reviewers:
        lines.append(
            f"   PRs analyzed for review coverage: {report.coverage_items}; "
            f"{report.reviewed_items} with reviews"
        )
        lines.extend(
            f"   - {entry.reviewer}: {entry.items_reviewed}/{report.coverage_items} PRs ({entry.percentage:.1f}%)"
            for entry in report.reviewers
        )
    else:
        lines.append(f"   {NO_REVIEWS}")

    lines.extend(["", "6) Average resolution time by creator (excluding weekends)"])
    if report.resolution_times:
        lines.extend(
            f"   - {entry.creator}: {format_hours(entry.average_business_hours)} across {entry.count} PRs"
            for entry in report.resolution_times
        )
    else:
        lines.append(f"   {NO_MERGED_ITEMS}")

    lines.extend(["", "   Global average time (excluding weekends):"])
    lines.append(_global_line(report.global_business_hours, report.merged_items_timed))
    lines.extend(["", "   Global average time (including weekends):"])
    lines.append(_global_line(report.global_total_hours, report.merged_items_timed))

    if report.skipped_duration_records:
        lines.extend(
            [
                "",
                f"   Note: {report.skipped_duration_records} merged PRs excluded "
                "from averages due to invalid timestamps.",
            ]
        )

    return "\n".join(lines)


def _global_line(hours: Optional[float], count: int) -> str:
    if hours is None:
        return f"   {NO_MERGED_ITEMS}"
    return f"   {format_hours(hours)} across {count} PRs"


def generate_export_summary(exported: Dict[str, int], output_dir: str) -> str:
    """Render the summary of per-user comment export files."""
    lines: List[str] = ["Comments export summary"]
    if not exported:
        lines.append("   No comment files were created.")
        return "\n".join(lines)

    lines.append(f"   Comments saved for {len(exported)} users in: {output_dir}")
    lines.extend(f"   - {filename} ({count} comments)" for filename, count in sorted(exported.items()))
    return "\n".join(lines)
