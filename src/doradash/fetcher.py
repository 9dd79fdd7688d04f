"""Concurrent retrieval of the raw records needed for one time window.

The GitHub client is synchronous (``requests``), so each call is pushed to the
event loop's default executor and the calls for one window are joined with
``asyncio.gather``. A failure in any call fails the whole window.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import Any, Callable, List, TypeVar

from .github_client import GitHubClient
from .metrics import qualifying_pull_requests
from .models import Commit, PullRequest, RepositoryData, TimeWindow

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _run_in_thread(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run a blocking client call without blocking the event loop."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))


async def _enrich_pull_request(client: GitHubClient, pr: PullRequest) -> PullRequest:
    """Fill in review-comment count, review count and first commit time for ``pr``."""
    detail, commits, reviews = await asyncio.gather(
        _run_in_thread(client.get_pull_request, pr.number),
        _run_in_thread(client.list_pull_request_commits, pr.number),
        _run_in_thread(client.list_pull_request_reviews, pr.number),
    )

    pr.review_comments = detail.review_comments
    pr.review_count = len(reviews)

    commit_times = [commit.authored_at for commit in commits if commit.authored_at is not None]
    pr.first_commit_at = min(commit_times) if commit_times else None
    return pr


async def _with_files(client: GitHubClient, commits: List[Commit]) -> List[Commit]:
    detailed = await asyncio.gather(*(_run_in_thread(client.get_commit, commit.sha) for commit in commits))
    for commit, detail in zip(commits, detailed):
        commit.files = detail.files
    return commits


async def fetch_repository_data(
    client: GitHubClient,
    window: TimeWindow,
    include_commit_files: bool = True,
) -> RepositoryData:
    """Fetch every record kind for ``window`` concurrently.

    Business logic:
    - Commits, pull requests, issues, deployments and contributors are
      requested at the same time and joined; each list is a single page.
    - Pull requests merged inside the window are then enriched with detail
      counts, their own commits and their reviews.
    - When ``include_commit_files`` is set, each commit is re-fetched to learn
      the file paths it touched.

    Raises:
        ApiError: If any request fails; no partial data is returned.
    """
    commits, pull_requests, issues, deployments, contributors = await asyncio.gather(
        _run_in_thread(client.list_commits, since=window.start, until=window.end),
        _run_in_thread(client.list_pull_requests, state="all", sort="updated", direction="desc"),
        _run_in_thread(client.list_issues, state="all", since=window.start),
        _run_in_thread(client.list_deployments),
        _run_in_thread(client.list_contributors),
    )

    merged = qualifying_pull_requests(pull_requests, window)
    enrichment = [_enrich_pull_request(client, pr) for pr in merged]
    if include_commit_files:
        await asyncio.gather(_with_files(client, commits), *enrichment)
    else:
        await asyncio.gather(*enrichment)

    logger.info(
        "Fetched repository records",
        extra={
            "window_start": window.start.isoformat(),
            "window_end": window.end.isoformat(),
            "commits": len(commits),
            "pull_requests": len(pull_requests),
            "merged_in_window": len(merged),
            "issues": len(issues),
            "deployments": len(deployments),
            "contributors": len(contributors),
        },
    )

    return RepositoryData(
        commits=commits,
        pull_requests=pull_requests,
        issues=issues,
        deployments=deployments,
        contributors=contributors,
    )
