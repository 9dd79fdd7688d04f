"""Entry point for the GitHub DORA metrics dashboard CLI."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Optional, Sequence

from .cli import parse_args
from .config import load_config
from .errors import ApiError, AuthenticationError, ConfigurationError, DoraMetricsError
from .github_client import GitHubClient
from .models import TimeWindow
from .pipeline import DashboardLoader
from .report import generate_report

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_UNEXPECTED = 1
EXIT_CONFIGURATION = 2
EXIT_AUTHENTICATION = 3
EXIT_API = 4


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )


def orchestrate_dashboard(argv: Optional[Sequence[str]] = None) -> int:
    """Run the fetch, aggregate and render pipeline once.

    Returns:
        Process exit code: ``0`` on success, ``2`` for configuration errors,
        ``3`` for missing credentials, ``4`` for GitHub API failures and ``1``
        for anything unexpected.
    """
    try:
        args = parse_args(argv)
        _configure_logging(args.verbose)

        config = load_config(
            owner=args.owner,
            repo=args.repo,
            days=args.days,
            weeks=args.weeks,
            include_commit_files=not args.skip_file_stats,
        )
        client = GitHubClient(config=config)
        loader = DashboardLoader(client=client, config=config)
        window = TimeWindow.last_days(config.days)

        print(
            f"Fetching metrics for '{config.full_name}' over the last {config.days} days...",
            file=sys.stderr,
        )
        applied = asyncio.run(loader.load(window))

        if not applied:
            print(f"ERROR: {loader.state.error}", file=sys.stderr)
            return EXIT_API

        if args.json:
            payload = {"repository": config.full_name}
            payload.update(loader.state.to_dict())
            print(json.dumps(payload, indent=2))
        else:
            print(
                generate_report(
                    repo_name=config.full_name,
                    window=window,
                    contributors=loader.state.contributors,
                    trends=loader.state.trends,
                )
            )
        return EXIT_OK
    except ConfigurationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_CONFIGURATION
    except AuthenticationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_AUTHENTICATION
    except ApiError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_API
    except DoraMetricsError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_UNEXPECTED
    except Exception:
        logger.exception("Unexpected failure while generating the dashboard")
        return EXIT_UNEXPECTED


def main() -> None:
    raise SystemExit(orchestrate_dashboard())


if __name__ == "__main__":
    main()
