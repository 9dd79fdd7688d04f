"""Tests for GitHub API client behavior with mocked HTTP."""

import sys
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import Mock

import pytest
import requests

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from doradash.config import Config
from doradash.errors import ApiError, DataValidationError
from doradash.github_client import GitHubClient


def _build_client(max_pages: int = 1) -> GitHubClient:
    config = Config(
        owner="octo",
        repo="demo",
        days=28,
        weeks=4,
        token="gh-token",
        max_pages=max_pages,
    )
    return GitHubClient(config=config)


def _response(status_code: int, payload=None, text: str = "", links: dict | None = None):
    response = Mock()
    response.status_code = status_code
    response.text = text
    response.links = links or {}
    response.json.return_value = payload if payload is not None else []
    return response


def _pr_item(number: int, login: str = "alice") -> dict:
    return {
        "number": number,
        "title": f"Change {number}",
        "state": "closed",
        "user": {"login": login},
        "created_at": "2026-01-01T00:00:00Z",
        "closed_at": "2026-01-01T05:00:00Z",
        "merged_at": "2026-01-01T05:00:00Z",
        "base": {"sha": "abc123"},
    }


def test_session_sends_bearer_token_and_api_headers():
    """Verify the session authenticates with the configured token."""
    client = _build_client()

    headers = client._session.headers
    assert headers["Authorization"] == "Bearer gh-token"
    assert headers["Accept"] == "application/vnd.github+json"
    assert "X-GitHub-Api-Version" in headers


def test_get_raises_api_error_on_http_error_without_retrying():
    """Verify any HTTP error status is surfaced once as ApiError."""
    client = _build_client()
    client._session.get = Mock(return_value=_response(403, text="rate limited"))

    with pytest.raises(ApiError, match="403"):
        client.list_deployments()

    assert client._session.get.call_count == 1


def test_get_wraps_transport_failures_in_api_error():
    """Verify network errors from requests become ApiError."""
    client = _build_client()
    client._session.get = Mock(side_effect=requests.ConnectionError("offline"))

    with pytest.raises(ApiError):
        client.list_contributors()


def test_invalid_json_raises_api_error():
    """Verify an undecodable body raises ApiError."""
    client = _build_client()
    response = _response(200)
    response.json.side_effect = ValueError("not json")
    client._session.get = Mock(return_value=response)

    with pytest.raises(ApiError, match="invalid JSON"):
        client.list_deployments()


def test_list_endpoint_with_object_payload_raises_api_error():
    """Verify list endpoints reject non-list payloads."""
    client = _build_client()
    client._session.get = Mock(return_value=_response(200, payload={"message": "nope"}))

    with pytest.raises(ApiError, match="unexpected payload shape"):
        client.list_deployments()


def test_iter_pages_reads_single_page_by_default_even_with_next_link():
    """Verify the default page budget stops after the first page."""
    client = _build_client()
    first = _response(
        200,
        payload=[{"id": 1, "created_at": "2026-01-01T00:00:00Z"}],
        links={"next": {"url": "https://api.github.com/repos/octo/demo/deployments?page=2"}},
    )
    client._session.get = Mock(return_value=first)

    deployments = client.list_deployments()

    assert len(deployments) == 1
    assert client._session.get.call_count == 1
    params = client._session.get.call_args.kwargs["params"]
    assert params["per_page"] == 100


def test_iter_pages_follows_next_links_up_to_max_pages():
    """Verify pagination follows rel=next links and reuses the link's query string."""
    client = _build_client(max_pages=2)
    next_url = "https://api.github.com/repos/octo/demo/contributors?page=2"
    first = _response(200, payload=[{"login": "alice", "contributions": 3}], links={"next": {"url": next_url}})
    second = _response(
        200,
        payload=[{"login": "bob", "contributions": 1}],
        links={"next": {"url": "https://api.github.com/repos/octo/demo/contributors?page=3"}},
    )
    client._session.get = Mock(side_effect=[first, second])

    pages = list(client.iter_pages("contributors"))

    assert [len(page) for page in pages] == [1, 1]
    assert client._session.get.call_count == 2
    second_call = client._session.get.call_args_list[1]
    assert second_call.args[0] == next_url
    assert second_call.kwargs["params"] is None


def test_iter_pages_is_restartable():
    """Verify each iteration starts again from the first page."""
    client = _build_client()
    client._session.get = Mock(return_value=_response(200, payload=[{"login": "alice"}]))

    assert list(client.iter_pages("contributors")) == list(client.iter_pages("contributors"))
    assert client._session.get.call_count == 2


def test_list_contributors_handles_empty_repository_no_content():
    """Verify a 204 response yields no contributors instead of a JSON error."""
    client = _build_client()
    client._session.get = Mock(return_value=_response(204))

    assert client.list_contributors() == []


def test_list_pull_requests_parses_fields_and_sends_filters():
    """Verify pull-request listing maps payload fields and query parameters."""
    client = _build_client()
    client._session.get = Mock(return_value=_response(200, payload=[_pr_item(7)]))

    prs = client.list_pull_requests(state="closed", sort="updated", direction="desc")

    assert len(prs) == 1
    pr = prs[0]
    assert pr.number == 7
    assert pr.author_login == "alice"
    assert pr.base_sha == "abc123"
    assert pr.merged_at == datetime(2026, 1, 1, 5, tzinfo=timezone.utc)

    call = client._session.get.call_args
    assert call.args[0] == "https://api.github.com/repos/octo/demo/pulls"
    assert call.kwargs["params"]["state"] == "closed"
    assert call.kwargs["params"]["sort"] == "updated"
    assert call.kwargs["params"]["direction"] == "desc"


def test_get_pull_request_reads_review_comment_count():
    """Verify the pull-request detail call exposes the review-comment counter."""
    client = _build_client()
    item = dict(_pr_item(9), comments=4, review_comments=6)
    client._session.get = Mock(return_value=_response(200, payload=item))

    pr = client.get_pull_request(9)

    assert pr.review_comments == 6
    assert client._session.get.call_args.args[0].endswith("/pulls/9")


def test_list_pull_requests_missing_required_fields_raises():
    """Verify malformed pull-request payloads raise DataValidationError."""
    client = _build_client()
    client._session.get = Mock(return_value=_response(200, payload=[{"title": "no number"}]))

    with pytest.raises(DataValidationError):
        client.list_pull_requests()


def test_malformed_timestamp_raises_data_validation_error():
    """Verify an unparseable timestamp names the offending field."""
    client = _build_client()
    item = dict(_pr_item(3), merged_at="not-a-date")
    client._session.get = Mock(return_value=_response(200, payload=[item]))

    with pytest.raises(DataValidationError) as exc_info:
        client.list_pull_requests()

    assert exc_info.value.field == "merged_at"
    assert exc_info.value.value == "not-a-date"


def test_list_endpoint_with_non_object_items_raises_api_error():
    """Verify list pages must contain JSON objects."""
    client = _build_client()
    client._session.get = Mock(return_value=_response(200, payload=["alice", 7]))

    with pytest.raises(ApiError):
        client.list_contributors()


def test_list_issues_excludes_pull_requests_and_parses_labels():
    """Verify the issues listing drops pull requests and keeps label names."""
    client = _build_client()
    payload = [
        {
            "number": 1,
            "state": "closed",
            "user": {"login": "alice"},
            "labels": [{"name": "bug"}, {"name": "p1"}],
            "created_at": "2026-01-01T00:00:00Z",
            "closed_at": "2026-01-02T00:00:00Z",
        },
        {
            "number": 2,
            "state": "open",
            "user": {"login": "bob"},
            "labels": [],
            "created_at": "2026-01-01T00:00:00Z",
            "pull_request": {"url": "https://api.github.com/repos/octo/demo/pulls/2"},
        },
    ]
    client._session.get = Mock(return_value=_response(200, payload=payload))

    issues = client.list_issues(
        state="all",
        labels="bug",
        since=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )

    assert [issue.number for issue in issues] == [1]
    assert issues[0].labels == ("bug", "p1")
    assert issues[0].closed_at == datetime(2026, 1, 2, tzinfo=timezone.utc)

    params = client._session.get.call_args.kwargs["params"]
    assert params["labels"] == "bug"
    assert params["since"] == "2026-01-01T00:00:00Z"


def test_list_commits_keeps_commits_without_linked_account():
    """Verify commits whose author has no GitHub account are kept with no login."""
    client = _build_client()
    payload = [
        {"sha": "a1", "author": {"login": "alice"}, "commit": {"author": {"date": "2026-01-01T10:00:00Z"}}},
        {"sha": "b2", "author": None, "commit": {"author": {"date": "2026-01-01T11:00:00Z"}}},
    ]
    client._session.get = Mock(return_value=_response(200, payload=payload))

    commits = client.list_commits(
        since=datetime(2026, 1, 1, tzinfo=timezone.utc),
        until=datetime(2026, 1, 8, tzinfo=timezone.utc),
    )

    assert [commit.author_login for commit in commits] == ["alice", None]
    params = client._session.get.call_args.kwargs["params"]
    assert params["since"] == "2026-01-01T00:00:00Z"
    assert params["until"] == "2026-01-08T00:00:00Z"


def test_get_commit_reads_file_paths():
    """Verify single-commit detail exposes touched file paths."""
    client = _build_client()
    payload = {
        "sha": "a1",
        "author": {"login": "alice"},
        "commit": {"author": {"date": "2026-01-01T10:00:00Z"}},
        "files": [{"filename": "src/app.py"}, {"filename": "README.md"}],
    }
    client._session.get = Mock(return_value=_response(200, payload=payload))

    commit = client.get_commit("a1")

    assert commit.files == ("src/app.py", "README.md")
