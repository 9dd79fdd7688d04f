"""Command-line argument parsing for the GitHub DORA metrics dashboard."""

from __future__ import annotations

import argparse
from typing import Optional, Sequence

from .config import DEFAULT_DAYS, DEFAULT_OWNER, DEFAULT_REPO, DEFAULT_WEEKS


def _positive_int(value: str) -> int:
    """Parse and validate a positive integer CLI value.

    Args:
        value: Raw command-line argument value.

    Returns:
        The validated positive integer.

    Raises:
        argparse.ArgumentTypeError: If value is not a positive integer.
    """
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be an integer") from exc

    if parsed <= 0:
        raise argparse.ArgumentTypeError("must be greater than 0")

    return parsed


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments for the dashboard.

    Returns:
        Parsed CLI arguments containing repository owner and name, the current
        window length in days, the number of trend weeks and output options.
    """
    parser = argparse.ArgumentParser(
        prog="github-dora-metrics",
        description=(
            "Compute DORA metrics (deployment frequency, lead time, change failure "
            "rate, time to restore) and proxy scores for a GitHub repository."
        ),
    )

    parser.add_argument(
        "--owner",
        default=DEFAULT_OWNER,
        help=f"Repository owner (default: {DEFAULT_OWNER}).",
    )
    parser.add_argument(
        "--repo",
        default=DEFAULT_REPO,
        help=f"Repository name (default: {DEFAULT_REPO}).",
    )
    parser.add_argument(
        "--days",
        type=_positive_int,
        default=DEFAULT_DAYS,
        help=f"Length of the current metrics window in days (default: {DEFAULT_DAYS}).",
    )
    parser.add_argument(
        "--weeks",
        type=_positive_int,
        default=DEFAULT_WEEKS,
        help=f"Number of weekly trend points (default: {DEFAULT_WEEKS}).",
    )
    parser.add_argument(
        "--skip-file-stats",
        action="store_true",
        help="Do not fetch per-commit file lists; growth is reported as 0.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print dashboard data as JSON instead of the text report.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    return parser.parse_args(argv)
