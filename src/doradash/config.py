"""Configuration parsing and validation for the GitHub DORA metrics dashboard."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Tuple

from .errors import AuthenticationError, ConfigurationError

DEFAULT_OWNER = "chethanbr25"
DEFAULT_REPO = "my-component-library"
DEFAULT_DAYS = 28
DEFAULT_WEEKS = 4
MAX_PAGE_SIZE = 100

_TOKEN_ENV_VARS = ("GITHUB_PAT", "GITHUB_TOKEN")


@dataclass(frozen=True)
class Config:
    """Validated runtime settings used by the metrics pipeline."""

    owner: str
    repo: str
    days: int
    weeks: int
    token: str
    page_size: int = MAX_PAGE_SIZE
    max_pages: int = 1
    defect_labels: Tuple[str, ...] = ("bug",)
    include_commit_files: bool = True
    timeout_seconds: int = 30

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


def _read_token() -> str:
    for name in _TOKEN_ENV_VARS:
        token = os.getenv(name, "").strip()
        if token:
            return token
    return ""


def load_config(
    owner: str = DEFAULT_OWNER,
    repo: str = DEFAULT_REPO,
    days: int = DEFAULT_DAYS,
    weeks: int = DEFAULT_WEEKS,
    page_size: int = MAX_PAGE_SIZE,
    include_commit_files: bool = True,
) -> Config:
    """Build and validate application configuration.

    Args:
        owner: GitHub account that owns the repository.
        repo: GitHub repository name.
        days: Positive length of the current metrics window in days.
        weeks: Positive number of weekly trend points to compute.
        page_size: Items requested per page, capped at 100.
        include_commit_files: Whether to fetch per-commit file lists for growth.

    Returns:
        A validated ``Config`` instance.

    Raises:
        ConfigurationError: If a numeric setting is not greater than ``0`` or
            the repository coordinates are blank.
        AuthenticationError: If neither ``GITHUB_PAT`` nor ``GITHUB_TOKEN`` is set.
    """
    if not owner.strip() or not repo.strip():
        raise ConfigurationError("Repository owner and name must both be non-empty.")

    if days <= 0:
        raise ConfigurationError("Invalid value for 'days': expected an integer greater than 0.")

    if weeks <= 0:
        raise ConfigurationError("Invalid value for 'weeks': expected an integer greater than 0.")

    if page_size <= 0:
        raise ConfigurationError("Invalid value for 'page_size': expected an integer greater than 0.")

    token = _read_token()
    if not token:
        raise AuthenticationError(
            "Missing required GitHub access token. "
            "Set the 'GITHUB_PAT' (or 'GITHUB_TOKEN') environment variable before running."
        )

    return Config(
        owner=owner.strip(),
        repo=repo.strip(),
        days=days,
        weeks=weeks,
        token=token,
        page_size=min(page_size, MAX_PAGE_SIZE),
        include_commit_files=include_commit_files,
    )
