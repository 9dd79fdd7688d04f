"""GitHub REST API client for DORA metric data retrieval."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

import requests

from .config import Config
from .errors import ApiError, DataValidationError
from .models import Commit, Contributor, Deployment, Issue, PullRequest


class GitHubClient:
    """Small, typed client for the GitHub repository REST APIs.

    Every list operation reads at most ``config.max_pages`` pages of
    ``config.page_size`` items; the client never retries and never inspects
    rate-limit headers. Any transport failure, HTTP error status, or
    malformed body surfaces as :class:`ApiError`; a record whose required
    fields are missing or unparseable raises :class:`DataValidationError`.
    """

    _BASE_URL = "https://api.github.com"
    _API_VERSION = "2022-11-28"

    def __init__(self, config: Config) -> None:
        """Initialize an authenticated GitHub API client.

        Args:
            config: Validated runtime configuration including owner/repo/token.
        """
        self._config = config
        self._timeout_seconds = config.timeout_seconds
        self._repo_url = f"{self._BASE_URL}/repos/{config.owner}/{config.repo}"

        self._session = requests.Session()
        self._session.headers.update(
            {
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {config.token}",
                "X-GitHub-Api-Version": self._API_VERSION,
            }
        )

    def _build_url(self, path: str) -> str:
        """Build a fully qualified API URL from a path below the repository."""
        path = path.strip("/")
        return f"{self._repo_url}/{path}" if path else self._repo_url

    def _format_datetime(self, value: datetime) -> str:
        """Format a datetime as UTC ISO8601 suitable for GitHub query params."""
        utc_value = value.astimezone(timezone.utc).replace(microsecond=0)
        return utc_value.isoformat().replace("+00:00", "Z")

    def _parse_datetime(self, value: Optional[str], field: str = "timestamp") -> Optional[datetime]:
        """Parse GitHub ISO8601 timestamps into timezone-aware datetimes.

        Raises:
            DataValidationError: If ``value`` is not an ISO8601 string.
        """
        if not value:
            return None

        try:
            normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
            parsed = datetime.fromisoformat(normalized)
        except (TypeError, ValueError, AttributeError) as exc:
            raise DataValidationError(
                f"GitHub payload has an invalid '{field}' timestamp: {value!r}",
                field=field,
                value=value,
            ) from exc
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed

    def _get(self, url: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        """Execute a single GET request.

        Raises:
            ApiError: If the request fails or returns HTTP >= 400.
        """
        try:
            response = self._session.get(url, params=params, timeout=self._timeout_seconds)
        except requests.RequestException as exc:
            raise ApiError(f"GitHub request failed: GET {url}") from exc

        if response.status_code >= 400:
            raise ApiError(
                "GitHub API request failed: "
                f"GET {url} returned {response.status_code} - {response.text}"
            )

        return response

    def _decode(self, response: requests.Response, url: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(f"GitHub API returned invalid JSON: GET {url}") from exc

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Fetch a single JSON object below the repository URL."""
        url = self._build_url(path)
        payload = self._decode(self._get(url, params), url)
        if not isinstance(payload, dict):
            raise ApiError(f"GitHub API returned unexpected payload shape: GET {url}")
        return payload

    def iter_pages(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        max_pages: Optional[int] = None,
    ) -> Iterator[List[Dict[str, Any]]]:
        """Lazily yield pages of a list endpoint, following ``rel="next"`` links.

        Each call starts again from the first page. Iteration stops after
        ``max_pages`` pages (``config.max_pages`` when omitted) or when the
        server reports no further page.
        """
        limit = self._config.max_pages if max_pages is None else max_pages
        url: Optional[str] = self._build_url(path)
        query: Optional[Dict[str, Any]] = dict(params or {})
        query.setdefault("per_page", self._config.page_size)
        pages_read = 0

        while url is not None and pages_read < limit:
            response = self._get(url, query)
            if response.status_code == 204:
                # Empty repositories answer some list endpoints with no body.
                return

            payload = self._decode(response, url)
            if not isinstance(payload, list):
                raise ApiError(f"GitHub API returned unexpected payload shape: GET {url}")

            yield payload
            pages_read += 1

            url = response.links.get("next", {}).get("url")
            # The next link already carries the original query string.
            query = None

    def _list(self, path: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        items: List[Dict[str, Any]] = []
        for page in self.iter_pages(path, params):
            if not all(isinstance(item, dict) for item in page):
                raise ApiError(f"GitHub API returned non-object list items: GET {self._build_url(path)}")
            items.extend(page)
        return items

    def _login(self, account: Optional[Dict[str, Any]]) -> Optional[str]:
        if not account:
            return None
        login = account.get("login")
        return str(login) if login else None

    def _to_commit(self, item: Dict[str, Any]) -> Commit:
        sha = item.get("sha")
        if not sha:
            raise DataValidationError(f"GitHub commit payload is missing 'sha': payload={item}")

        git_author = (item.get("commit") or {}).get("author") or {}
        files = tuple(
            str(entry["filename"]) for entry in item.get("files") or [] if entry.get("filename")
        )
        return Commit(
            sha=str(sha),
            author_login=self._login(item.get("author")),
            authored_at=self._parse_datetime(git_author.get("date"), "commit.author.date"),
            files=files,
        )

    def _to_pull_request(self, item: Dict[str, Any]) -> PullRequest:
        number = item.get("number")
        created_at = self._parse_datetime(item.get("created_at"), "created_at")
        if number is None or created_at is None:
            raise DataValidationError(
                f"GitHub pull request payload is missing required fields: payload={item}"
            )

        return PullRequest(
            number=int(number),
            author_login=self._login(item.get("user")),
            title=str(item.get("title") or ""),
            state=str(item.get("state") or ""),
            created_at=created_at,
            closed_at=self._parse_datetime(item.get("closed_at"), "closed_at"),
            merged_at=self._parse_datetime(item.get("merged_at"), "merged_at"),
            base_sha=(item.get("base") or {}).get("sha"),
            review_comments=int(item.get("review_comments") or 0),
        )

    def list_commits(self, since: datetime, until: datetime) -> List[Commit]:
        """List commits on the default branch authored within ``[since, until]``."""
        params = {
            "since": self._format_datetime(since),
            "until": self._format_datetime(until),
        }
        return [self._to_commit(item) for item in self._list("commits", params)]

    def get_commit(self, sha: str) -> Commit:
        """Fetch one commit including the paths of the files it touched."""
        return self._to_commit(self._get_json(f"commits/{sha}"))

    def list_pull_requests(
        self,
        state: str = "all",
        sort: str = "updated",
        direction: str = "desc",
    ) -> List[PullRequest]:
        """List pull requests filtered by ``state`` and ordered by ``sort``."""
        params = {"state": state, "sort": sort, "direction": direction}
        return [self._to_pull_request(item) for item in self._list("pulls", params)]

    def get_pull_request(self, number: int) -> PullRequest:
        """Fetch one pull request including its review-comment count."""
        return self._to_pull_request(self._get_json(f"pulls/{number}"))

    def list_pull_request_commits(self, number: int) -> List[Commit]:
        """List the commits that belong to a pull request, oldest first."""
        return [self._to_commit(item) for item in self._list(f"pulls/{number}/commits")]

    def list_pull_request_reviews(self, number: int) -> List[Dict[str, Any]]:
        """List submitted reviews for a pull request."""
        return self._list(f"pulls/{number}/reviews")

    def list_issues(
        self,
        state: str = "all",
        labels: Optional[str] = None,
        since: Optional[datetime] = None,
    ) -> List[Issue]:
        """List issues, excluding the pull requests GitHub returns from the same endpoint.

        Args:
            state: ``open``, ``closed`` or ``all``.
            labels: Comma-separated label names that every issue must carry.
            since: Only issues updated at or after this instant.
        """
        params: Dict[str, Any] = {"state": state}
        if labels:
            params["labels"] = labels
        if since is not None:
            params["since"] = self._format_datetime(since)

        issues: List[Issue] = []
        for item in self._list("issues", params):
            if "pull_request" in item:
                continue

            number = item.get("number")
            created_at = self._parse_datetime(item.get("created_at"), "created_at")
            if number is None or created_at is None:
                raise DataValidationError(
                    f"GitHub issue payload is missing required fields: payload={item}"
                )

            label_names = tuple(
                str(label.get("name"))
                for label in item.get("labels") or []
                if isinstance(label, dict) and label.get("name")
            )
            issues.append(
                Issue(
                    number=int(number),
                    author_login=self._login(item.get("user")),
                    state=str(item.get("state") or ""),
                    labels=label_names,
                    created_at=created_at,
                    closed_at=self._parse_datetime(item.get("closed_at"), "closed_at"),
                )
            )

        return issues

    def list_deployments(self) -> List[Deployment]:
        """List deployments for the repository, newest first."""
        deployments: List[Deployment] = []
        for item in self._list("deployments"):
            deployment_id = item.get("id")
            created_at = self._parse_datetime(item.get("created_at"), "created_at")
            if deployment_id is None or created_at is None:
                continue

            deployments.append(
                Deployment(
                    id=int(deployment_id),
                    creator_login=self._login(item.get("creator")),
                    environment=str(item.get("environment") or ""),
                    created_at=created_at,
                )
            )

        return deployments

    def list_contributors(self) -> List[Contributor]:
        """List contributor accounts ordered by contribution count."""
        contributors: List[Contributor] = []
        for item in self._list("contributors"):
            login = item.get("login")
            if not login:
                continue
            contributors.append(
                Contributor(login=str(login), contributions=int(item.get("contributions") or 0))
            )

        return contributors
