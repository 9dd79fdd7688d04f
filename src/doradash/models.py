"""Domain models for GitHub DORA metrics processing.

These dataclasses intentionally model only the subset of API payload fields that
are required for metric computation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple, Union

_METRIC_KEYS = (
    ("deployment_frequency", "deploymentFrequency"),
    ("lead_time", "leadTime"),
    ("change_failure_rate", "changeFailureRate"),
    ("time_to_restore", "timeToRestore"),
    ("code_quality", "codeQuality"),
    ("impact", "impact"),
    ("collaboration", "collaboration"),
    ("growth", "growth"),
)

MetricValue = Union[int, float]


@dataclass(frozen=True, slots=True)
class TimeWindow:
    """Half-open ``[start, end)`` range bounding one metrics computation."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.end <= self.start:
            raise ValueError("TimeWindow end must be after start.")

    @classmethod
    def last_days(cls, days: int, now: Optional[datetime] = None) -> TimeWindow:
        end = now or datetime.now(timezone.utc)
        return cls(start=end - timedelta(days=days), end=end)

    @classmethod
    def week_of(cls, moment: datetime) -> TimeWindow:
        """Return the calendar week (Sunday 00:00 through the next Sunday) containing ``moment``."""
        day_start = moment.replace(hour=0, minute=0, second=0, microsecond=0)
        days_since_sunday = (day_start.weekday() + 1) % 7
        start = day_start - timedelta(days=days_since_sunday)
        return cls(start=start, end=start + timedelta(days=7))

    @property
    def days(self) -> float:
        return (self.end - self.start).total_seconds() / 86400

    @property
    def weeks(self) -> float:
        return self.days / 7

    def contains(self, moment: Optional[datetime]) -> bool:
        if moment is None:
            return False
        return self.start <= moment < self.end

    def label(self) -> str:
        return self.start.strftime("%Y-%m-%d")


def weekly_windows(end: datetime, count: int) -> List[TimeWindow]:
    """Return the ``count`` most recent calendar weeks up to ``end``, oldest first."""
    windows = [TimeWindow.week_of(end - timedelta(weeks=offset)) for offset in range(count)]
    windows.reverse()
    return windows


@dataclass(slots=True)
class Commit:
    """Represents the commit data needed for lead time and growth."""

    sha: str
    author_login: Optional[str]
    authored_at: Optional[datetime]
    files: Tuple[str, ...] = ()


@dataclass(slots=True)
class PullRequest:
    """Represents the pull request data needed for delivery metrics."""

    number: int
    author_login: Optional[str]
    title: str
    state: str
    created_at: datetime
    closed_at: Optional[datetime]
    merged_at: Optional[datetime]
    base_sha: Optional[str]
    review_comments: int = 0
    review_count: int = 0
    first_commit_at: Optional[datetime] = None


@dataclass(slots=True)
class Issue:
    """Represents an issue (never a pull request) with its labels."""

    number: int
    author_login: Optional[str]
    state: str
    labels: Tuple[str, ...]
    created_at: datetime
    closed_at: Optional[datetime]

    def has_any_label(self, labels: Tuple[str, ...]) -> bool:
        wanted = {label.lower() for label in labels}
        return any(label.lower() in wanted for label in self.labels)


@dataclass(slots=True)
class Deployment:
    """Represents a GitHub deployment event."""

    id: int
    creator_login: Optional[str]
    environment: str
    created_at: datetime


@dataclass(slots=True)
class Contributor:
    """Represents a repository contributor account."""

    login: str
    contributions: int


@dataclass(slots=True)
class RepositoryData:
    """Raw records fetched for one time window."""

    commits: List[Commit] = field(default_factory=list)
    pull_requests: List[PullRequest] = field(default_factory=list)
    issues: List[Issue] = field(default_factory=list)
    deployments: List[Deployment] = field(default_factory=list)
    contributors: List[Contributor] = field(default_factory=list)


@dataclass(slots=True)
class RepositoryMetrics:
    """Ungrouped metrics for the whole repository over one window."""

    deployment_frequency: float
    lead_time: float
    change_failure_rate: float
    time_to_restore: float
    code_quality: float
    impact: int
    collaboration: float
    growth: int

    def to_dict(self) -> Dict[str, MetricValue]:
        return {key: getattr(self, attr) for attr, key in _METRIC_KEYS}


@dataclass(slots=True)
class ContributorMetric:
    """One contributor's scorecard for a window."""

    name: str
    deployment_frequency: float
    lead_time: float
    change_failure_rate: float
    time_to_restore: float
    code_quality: float
    impact: int
    collaboration: int
    growth: int

    def to_dict(self) -> Dict[str, Union[str, MetricValue]]:
        payload: Dict[str, Union[str, MetricValue]] = {"name": self.name}
        payload.update({key: getattr(self, attr) for attr, key in _METRIC_KEYS})
        return payload


@dataclass(slots=True)
class TrendPoint:
    """Per-contributor metrics for one historical week."""

    date: str
    contributors: Dict[str, ContributorMetric]

    def to_dict(self) -> Dict[str, Union[str, MetricValue]]:
        """Flatten into ``{"date": ..., "<login>_<metricKey>": value}`` chart rows."""
        row: Dict[str, Union[str, MetricValue]] = {"date": self.date}
        for login, metric in self.contributors.items():
            for attr, key in _METRIC_KEYS:
                row[f"{login}_{key}"] = getattr(metric, attr)
        return row
