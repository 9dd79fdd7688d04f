"""Metric aggregation for GitHub repository records.

This module reduces already-fetched records into named metrics, either for the
whole repository or grouped by contributor login. Every function is pure: the
result depends only on the records and the window passed in.

Units:
- deployment frequency: events per week
- lead time for changes: hours
- time to restore service: hours
- change failure rate: percent

Code quality, impact, collaboration and growth are illustrative proxy scores,
not authoritative measurements.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .models import (
    Commit,
    ContributorMetric,
    Deployment,
    Issue,
    PullRequest,
    RepositoryData,
    RepositoryMetrics,
    TimeWindow,
)
from .stats import hours_between, safe_mean, safe_ratio

logger = logging.getLogger(__name__)

DEFAULT_DEFECT_LABELS: Tuple[str, ...] = ("bug",)
CODE_QUALITY_BASELINE = 100.0
COLLABORATION_REVIEW_WEIGHT = 20.0
COLLABORATION_CEILING = 100.0


def qualifying_pull_requests(pull_requests: Iterable[PullRequest], window: TimeWindow) -> List[PullRequest]:
    """Return pull requests merged inside ``window``."""
    return [pr for pr in pull_requests if window.contains(pr.merged_at)]


def commits_in_window(commits: Iterable[Commit], window: TimeWindow) -> List[Commit]:
    """Return commits authored inside ``window``; undated commits are dropped."""
    return [commit for commit in commits if window.contains(commit.authored_at)]


def deployments_in_window(deployments: Iterable[Deployment], window: TimeWindow) -> List[Deployment]:
    return [deployment for deployment in deployments if window.contains(deployment.created_at)]


def defect_issues(issues: Iterable[Issue], defect_labels: Tuple[str, ...]) -> List[Issue]:
    return [issue for issue in issues if issue.has_any_label(defect_labels)]


def deployment_frequency(
    window: TimeWindow,
    merged_pull_requests: Sequence[PullRequest],
    deployments: Optional[Sequence[Deployment]] = None,
) -> float:
    """Compute qualifying events per week.

    Business logic:
    - When any deployments are available, the events are the deployments
      created inside the window.
    - Otherwise the events are the merged pull requests passed in, which the
      caller has already restricted to the window.
    - Result is ``count / (window days / 7)``.
    """
    if deployments:
        event_count = len(deployments_in_window(deployments, window))
    else:
        event_count = len(merged_pull_requests)

    return safe_ratio(event_count, window.weeks)


def resolve_first_commit_time(pr: PullRequest, commits_by_sha: Dict[str, Commit]) -> datetime:
    """Resolve the instant work on ``pr`` started.

    Resolution order: a fetched commit matching the PR's base sha, then the
    earliest commit of the PR itself, then the PR creation time.
    """
    if pr.base_sha:
        match = commits_by_sha.get(pr.base_sha)
        if match is not None and match.authored_at is not None:
            return match.authored_at

    if pr.first_commit_at is not None:
        return pr.first_commit_at

    return pr.created_at


def lead_time_hours(merged_pull_requests: Sequence[PullRequest], commits: Sequence[Commit]) -> float:
    """Compute mean hours from first commit to merge over merged pull requests.

    Negative durations (first commit recorded after the merge) are skipped.
    Returns ``0.0`` when no pull request yields a usable sample.
    """
    commits_by_sha = {commit.sha: commit for commit in commits}
    samples: List[float] = []

    for pr in merged_pull_requests:
        duration = hours_between(resolve_first_commit_time(pr, commits_by_sha), pr.merged_at)
        if duration is None:
            continue
        if duration < 0:
            logger.debug(
                "Skipping lead time sample due to negative duration",
                extra={"pr_number": pr.number, "duration_hours": duration},
            )
            continue
        samples.append(duration)

    return safe_mean(samples)


def time_to_restore_hours(
    issues: Sequence[Issue],
    window: TimeWindow,
    defect_labels: Tuple[str, ...] = DEFAULT_DEFECT_LABELS,
) -> float:
    """Compute mean hours from creation to close for defect issues closed in ``window``."""
    samples: List[float] = []
    for issue in defect_issues(issues, defect_labels):
        if issue.state != "closed" or not window.contains(issue.closed_at):
            continue
        duration = hours_between(issue.created_at, issue.closed_at)
        if duration is not None and duration >= 0:
            samples.append(duration)

    return safe_mean(samples)


def change_failure_rate(
    issues: Sequence[Issue],
    merged_pull_requests: Sequence[PullRequest],
    window: TimeWindow,
    defect_labels: Tuple[str, ...] = DEFAULT_DEFECT_LABELS,
) -> float:
    """Compute ``100 * defects opened in window / merged pull requests``; ``0.0`` without merges."""
    failures = [issue for issue in defect_issues(issues, defect_labels) if window.contains(issue.created_at)]
    return safe_ratio(100.0 * len(failures), len(merged_pull_requests))


def code_quality(merged_pull_requests: Sequence[PullRequest]) -> float:
    """Illustrative proxy: ``100 - mean review comments per pull request``.

    No floor is applied, so heavily discussed pull requests can push the value
    below zero. Returns ``100.0`` when there are no pull requests.
    """
    if not merged_pull_requests:
        return CODE_QUALITY_BASELINE
    return CODE_QUALITY_BASELINE - safe_mean(pr.review_comments for pr in merged_pull_requests)


def impact(issues: Sequence[Issue], window: TimeWindow) -> int:
    """Illustrative proxy: number of issues closed inside ``window``."""
    return sum(1 for issue in issues if issue.state == "closed" and window.contains(issue.closed_at))


def review_comment_total(merged_pull_requests: Sequence[PullRequest]) -> int:
    """Illustrative proxy: total review comments received across pull requests."""
    return sum(pr.review_comments for pr in merged_pull_requests)


def collaboration_score(merged_pull_requests: Sequence[PullRequest]) -> float:
    """Illustrative proxy: mean reviews per pull request scaled to a 0-100 band."""
    average_reviews = safe_mean(pr.review_count for pr in merged_pull_requests)
    return min(average_reviews * COLLABORATION_REVIEW_WEIGHT, COLLABORATION_CEILING)


def growth(commits: Iterable[Commit]) -> int:
    """Illustrative proxy: number of distinct file paths touched by ``commits``."""
    paths = {path for commit in commits for path in commit.files}
    return len(paths)


def aggregate_repository(
    data: RepositoryData,
    window: TimeWindow,
    defect_labels: Tuple[str, ...] = DEFAULT_DEFECT_LABELS,
) -> RepositoryMetrics:
    """Reduce all records of one window into ungrouped repository metrics.

    Commits without a resolvable author still count towards growth here.
    Commit listing is inclusive of its upper bound, so growth re-applies the
    half-open window.
    """
    merged = qualifying_pull_requests(data.pull_requests, window)

    metrics = RepositoryMetrics(
        deployment_frequency=deployment_frequency(window, merged, data.deployments),
        lead_time=lead_time_hours(merged, data.commits),
        change_failure_rate=change_failure_rate(data.issues, merged, window, defect_labels),
        time_to_restore=time_to_restore_hours(data.issues, window, defect_labels),
        code_quality=code_quality(merged),
        impact=impact(data.issues, window),
        collaboration=collaboration_score(merged),
        growth=growth(commits_in_window(data.commits, window)),
    )

    logger.info(
        "Aggregated repository metrics",
        extra={
            "window_start": window.start.isoformat(),
            "window_end": window.end.isoformat(),
            "merged_pull_requests": len(merged),
            "issues": len(data.issues),
            "deployments": len(data.deployments),
            "commits": len(data.commits),
        },
    )

    return metrics


def aggregate_contributor(
    login: str,
    data: RepositoryData,
    window: TimeWindow,
    defect_labels: Tuple[str, ...] = DEFAULT_DEFECT_LABELS,
) -> ContributorMetric:
    """Reduce the records authored by ``login`` into one scorecard.

    Deployments are not attributable to contributors, so deployment frequency
    is always derived from the contributor's merged pull requests.
    """
    commits = [commit for commit in data.commits if commit.author_login == login]
    merged = [pr for pr in qualifying_pull_requests(data.pull_requests, window) if pr.author_login == login]
    issues = [issue for issue in data.issues if issue.author_login == login]

    return ContributorMetric(
        name=login,
        deployment_frequency=deployment_frequency(window, merged),
        lead_time=lead_time_hours(merged, commits),
        change_failure_rate=change_failure_rate(issues, merged, window, defect_labels),
        time_to_restore=time_to_restore_hours(issues, window, defect_labels),
        code_quality=code_quality(merged),
        impact=impact(issues, window),
        collaboration=review_comment_total(merged),
        growth=growth(commits_in_window(commits, window)),
    )


def aggregate_contributors(
    data: RepositoryData,
    window: TimeWindow,
    defect_labels: Tuple[str, ...] = DEFAULT_DEFECT_LABELS,
) -> List[ContributorMetric]:
    """Compute one scorecard per listed contributor, preserving contributor order."""
    scorecards = [
        aggregate_contributor(contributor.login, data, window, defect_labels)
        for contributor in data.contributors
    ]

    unattributed_commits = sum(1 for commit in data.commits if commit.author_login is None)
    logger.info(
        "Aggregated contributor metrics",
        extra={
            "window_start": window.start.isoformat(),
            "contributors": len(scorecards),
            "unattributed_commits": unattributed_commits,
        },
    )

    return scorecards
