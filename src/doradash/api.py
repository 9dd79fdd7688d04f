"""
FastAPI application exposing DORA metrics over HTTP.

Usage:
    # Development
    uvicorn doradash.api:app --reload --port 8000

    # Console script
    github-dora-metrics-api
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import Callable, Optional

import uvicorn
from fastapi import FastAPI, Query, status
from fastapi.responses import JSONResponse

from .config import DEFAULT_DAYS, DEFAULT_WEEKS, Config, load_config
from .github_client import GitHubClient
from .models import TimeWindow
from .pipeline import DASHBOARD_ERROR_MESSAGE, compute_contributor_metrics, compute_repository_metrics, compute_trends

logger = logging.getLogger(__name__)

METRICS_WINDOW_DAYS = 30
METRICS_ERROR_MESSAGE = "Failed to fetch metrics"

ClientFactory = Callable[[Config], GitHubClient]


def create_app(
    config: Optional[Config] = None,
    client_factory: ClientFactory = GitHubClient,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Fixed configuration; when omitted it is loaded from the
            environment on every request so a missing token is reported as an
            endpoint error instead of a startup crash.
        client_factory: Builds the GitHub client for a configuration.
    """
    app = FastAPI(
        title="GitHub DORA Metrics API",
        description="On-demand DORA metrics and proxy scores for a GitHub repository",
        version="0.1.0",
    )

    def _resolve(days: int = METRICS_WINDOW_DAYS, weeks: int = DEFAULT_WEEKS):
        resolved = config or load_config(days=days, weeks=weeks)
        return resolved, client_factory(resolved)

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Liveness probe."""
        return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.get("/api/github-metrics", tags=["Metrics"])
    async def github_metrics():
        """Aggregate repository metrics over the last 30 days."""
        try:
            resolved, client = _resolve()
            window = TimeWindow.last_days(METRICS_WINDOW_DAYS)
            metrics = await compute_repository_metrics(client, window, resolved)
        except Exception:
            logger.exception("Failed to compute repository metrics")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": METRICS_ERROR_MESSAGE},
            )

        return metrics.to_dict()

    @app.get("/api/dashboard", tags=["Metrics"])
    async def dashboard(
        days: int = Query(DEFAULT_DAYS, gt=0, le=365),
        weeks: int = Query(DEFAULT_WEEKS, gt=0, le=52),
    ):
        """Per-contributor metrics for the current window plus weekly trends."""
        try:
            resolved, client = _resolve(days=days, weeks=weeks)
            window = TimeWindow.last_days(days)
            contributors = await compute_contributor_metrics(client, window, resolved)
            trends = await compute_trends(client, window.end, weeks, resolved)
        except Exception:
            logger.exception("Failed to compute dashboard data")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": DASHBOARD_ERROR_MESSAGE},
            )

        return {
            "repository": resolved.full_name,
            "window": {"from": window.start.isoformat(), "to": window.end.isoformat()},
            "contributors": [scorecard.to_dict() for scorecard in contributors],
            "trends": [point.to_dict() for point in trends],
        }

    return app


app = create_app()


def serve() -> None:
    """Run the API with uvicorn on ``DORA_API_HOST``:``DORA_API_PORT``."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )
    host = os.getenv("DORA_API_HOST", "127.0.0.1")
    port = int(os.getenv("DORA_API_PORT", "8000"))
    uvicorn.run(app, host=host, port=port)
