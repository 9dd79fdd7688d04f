"""Fetch-then-aggregate pipeline shared by the HTTP API and the dashboard loader."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from .config import Config
from .errors import DoraMetricsError
from .fetcher import fetch_repository_data
from .github_client import GitHubClient
from .metrics import aggregate_contributors, aggregate_repository
from .models import ContributorMetric, RepositoryMetrics, TimeWindow, TrendPoint, weekly_windows

logger = logging.getLogger(__name__)

DASHBOARD_ERROR_MESSAGE = "Failed to fetch data from GitHub. Please check your token and try again."


async def compute_repository_metrics(
    client: GitHubClient,
    window: TimeWindow,
    config: Config,
) -> RepositoryMetrics:
    """Compute ungrouped metrics for ``window``."""
    data = await fetch_repository_data(client, window, include_commit_files=config.include_commit_files)
    return aggregate_repository(data, window, config.defect_labels)


async def compute_contributor_metrics(
    client: GitHubClient,
    window: TimeWindow,
    config: Config,
) -> List[ContributorMetric]:
    """Compute one scorecard per contributor for ``window``."""
    data = await fetch_repository_data(client, window, include_commit_files=config.include_commit_files)
    return aggregate_contributors(data, window, config.defect_labels)


async def compute_trends(
    client: GitHubClient,
    end: datetime,
    weeks: int,
    config: Config,
) -> List[TrendPoint]:
    """Compute per-contributor metrics for each of the last ``weeks`` calendar weeks.

    Weeks are processed one at a time so each week's fetch set is joined and
    aggregated before the next starts. Points are returned oldest first.
    """
    points: List[TrendPoint] = []
    for window in weekly_windows(end, weeks):
        scorecards = await compute_contributor_metrics(client, window, config)
        points.append(
            TrendPoint(
                date=window.label(),
                contributors={scorecard.name: scorecard for scorecard in scorecards},
            )
        )
    return points


@dataclass(slots=True)
class DashboardState:
    """What the dashboard currently shows: either data or a fixed error message."""

    window: Optional[TimeWindow] = None
    contributors: List[ContributorMetric] = field(default_factory=list)
    trends: List[TrendPoint] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> dict:
        if self.error is not None:
            return {"error": self.error}
        return {
            "window": {
                "from": self.window.start.isoformat() if self.window else None,
                "to": self.window.end.isoformat() if self.window else None,
            },
            "contributors": [scorecard.to_dict() for scorecard in self.contributors],
            "trends": [point.to_dict() for point in self.trends],
        }


class DashboardLoader:
    """Loads current and trend metrics and applies only the newest request's result.

    Every :meth:`load` call takes a new generation number. When a load finishes
    after a newer one has started, its result is discarded rather than applied,
    so out-of-order completions can never overwrite fresher data.
    """

    def __init__(self, client: GitHubClient, config: Config) -> None:
        self._client = client
        self._config = config
        self._generation = 0
        self.state = DashboardState()

    @property
    def generation(self) -> int:
        return self._generation

    def _fail(self, generation: int) -> bool:
        # Earlier data is hidden only when no newer load has started.
        if generation == self._generation:
            self.state = DashboardState(error=DASHBOARD_ERROR_MESSAGE)
        return False

    async def load(self, window: TimeWindow) -> bool:
        """Fetch and aggregate ``window`` plus its weekly trend.

        Returns:
            ``True`` when the result was applied to :attr:`state`; ``False``
            when it failed or was superseded by a newer load.
        """
        self._generation += 1
        generation = self._generation

        try:
            contributors = await compute_contributor_metrics(self._client, window, self._config)
            trends = await compute_trends(self._client, window.end, self._config.weeks, self._config)
        except DoraMetricsError as exc:
            logger.error(
                "Dashboard load failed",
                extra={"generation": generation, "error": str(exc)},
            )
            return self._fail(generation)
        except Exception:
            logger.exception("Unexpected dashboard load failure", extra={"generation": generation})
            return self._fail(generation)

        if generation != self._generation:
            logger.info(
                "Discarding stale dashboard result",
                extra={"generation": generation, "current_generation": self._generation},
            )
            return False

        self.state = DashboardState(window=window, contributors=contributors, trends=trends)
        return True
