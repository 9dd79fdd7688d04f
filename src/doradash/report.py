"""Plain-text rendering of already-aggregated dashboard data.

Nothing in this module computes a metric; it only lays out values produced by
:mod:`doradash.metrics`.
"""

from __future__ import annotations

from typing import Callable, List, Sequence, Tuple

from .models import ContributorMetric, TimeWindow, TrendPoint
from .stats import format_count, format_hours, format_per_week, format_percent, format_score

MetricColumn = Tuple[str, str, Callable[[float], str]]

METRIC_COLUMNS: Tuple[MetricColumn, ...] = (
    ("deployment_frequency", "Deployment Frequency", format_per_week),
    ("lead_time", "Lead Time", format_hours),
    ("time_to_restore", "Time to Restore", format_hours),
    ("change_failure_rate", "Change Failure Rate", format_percent),
    ("code_quality", "Code Quality", format_score),
    ("impact", "Impact", format_count),
    ("collaboration", "Collaboration", format_count),
    ("growth", "Growth", format_count),
)


def render_cards(contributors: Sequence[ContributorMetric]) -> List[str]:
    """Render one card per metric listing every contributor's current value."""
    lines: List[str] = []
    for attr, title, formatter in METRIC_COLUMNS:
        lines.append(f"[{title}]")
        if not contributors:
            lines.append("   (no contributors)")
        for scorecard in contributors:
            lines.append(f"   {scorecard.name}: {formatter(getattr(scorecard, attr))}")
        lines.append("")
    return lines


def render_contributor_table(contributors: Sequence[ContributorMetric]) -> List[str]:
    """Render a fixed-width comparison table, one row per contributor."""
    header = ["Contributor"] + [title for _, title, _ in METRIC_COLUMNS]
    rows = [
        [scorecard.name] + [formatter(getattr(scorecard, attr)) for attr, _, formatter in METRIC_COLUMNS]
        for scorecard in contributors
    ]

    widths = [len(cell) for cell in header]
    for row in rows:
        widths = [max(width, len(cell)) for width, cell in zip(widths, row)]

    def _line(cells: Sequence[str]) -> str:
        return " | ".join(cell.ljust(width) for cell, width in zip(cells, widths)).rstrip()

    lines = [_line(header), "-+-".join("-" * width for width in widths)]
    lines.extend(_line(row) for row in rows)
    return lines


def render_trends(trends: Sequence[TrendPoint]) -> List[str]:
    """Render each metric as a week-by-contributor series."""
    logins: List[str] = []
    for point in trends:
        for login in point.contributors:
            if login not in logins:
                logins.append(login)

    lines: List[str] = []
    for attr, title, formatter in METRIC_COLUMNS:
        lines.append(f"[{title} trend]")
        for point in trends:
            values = ", ".join(
                f"{login}={formatter(getattr(point.contributors[login], attr))}"
                for login in logins
                if login in point.contributors
            )
            lines.append(f"   {point.date}: {values or 'n/a'}")
        lines.append("")
    return lines


def generate_report(
    repo_name: str,
    window: TimeWindow,
    contributors: Sequence[ContributorMetric],
    trends: Sequence[TrendPoint],
) -> str:
    """Generate the human-readable DORA metrics dashboard.

    The report includes:
    - metric cards with the current value per contributor
    - a contributor comparison table
    - weekly trend series per metric

    Args:
        repo_name: ``owner/name`` of the repository.
        window: The window the current values were computed for.
        contributors: Per-contributor scorecards for ``window``.
        trends: Weekly trend points, oldest first.

    Returns:
        Formatted multi-line text report.
    """
    lines = [
        "DORA Metrics Dashboard",
        f"Repository: {repo_name}",
        f"Window: {window.start:%Y-%m-%d} to {window.end:%Y-%m-%d}",
        "",
        "== Current Metrics ==",
        "",
    ]
    lines.extend(render_cards(contributors))
    lines.append("== Contributors ==")
    lines.append("")
    lines.extend(render_contributor_table(contributors))
    lines.append("")
    lines.append("== Trends ==")
    lines.append("")
    lines.extend(render_trends(trends))

    return "\n".join(lines).rstrip() + "\n"
