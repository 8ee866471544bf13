"""
Tests for GitHubClient: request shape and upstream failure mapping.
"""
from unittest.mock import MagicMock, patch

import pytest
import requests

from config import Settings
from errors import UpstreamError
from github_client import YEAR_ACTIVITY_QUERY, GitHubClient, year_window


def _response(status_code=200, payload=None, text=""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text
    if isinstance(payload, Exception):
        resp.json.side_effect = payload
    else:
        resp.json.return_value = payload
    return resp


@pytest.fixture
def gh():
    return GitHubClient("secret-token", "https://example.test/graphql", timeout=7)


def test_session_carries_bearer_token(gh):
    assert gh.session.headers["Authorization"] == "Bearer secret-token"
    assert gh.session.headers["X-GitHub-Api-Version"] == "2022-11-28"


def test_from_settings():
    settings = Settings(github_token="abc", graphql_url="https://example.test/gql", timeout_seconds=3)
    gh = GitHubClient.from_settings(settings)
    assert gh.api_url == "https://example.test/gql"
    assert gh.timeout == 3
    assert gh.session.headers["Authorization"] == "Bearer abc"


def test_year_window():
    assert year_window(2024) == {"from": "2024-01-01T00:00:00Z", "to": "2024-12-31T23:59:59Z"}


def test_fetch_year_activity_posts_single_query(gh):
    user = {"contributionsCollection": {}, "repositories": {"nodes": []}}
    with patch.object(gh.session, "post", return_value=_response(payload={"data": {"user": user}})) as post:
        assert gh.fetch_year_activity("octocat", 2024) == user

    post.assert_called_once()
    args, kwargs = post.call_args
    assert args == ("https://example.test/graphql",)
    assert kwargs["timeout"] == 7
    assert kwargs["json"]["query"] == YEAR_ACTIVITY_QUERY
    assert kwargs["json"]["variables"] == {
        "login": "octocat",
        "from": "2024-01-01T00:00:00Z",
        "to": "2024-12-31T23:59:59Z",
    }


def test_null_user_is_upstream_error(gh):
    with patch.object(gh.session, "post", return_value=_response(payload={"data": {"user": None}})):
        with pytest.raises(UpstreamError, match="not found"):
            gh.fetch_year_activity("ghost", 2024)


@pytest.mark.parametrize(
    "exc",
    [requests.ConnectionError("connection refused"), requests.Timeout("read timed out")],
)
def test_transport_failures_are_upstream_errors(gh, exc):
    with patch.object(gh.session, "post", side_effect=exc):
        with pytest.raises(UpstreamError):
            gh.graphql("query { viewer { login } }", {})


def test_http_error_status(gh):
    with patch.object(gh.session, "post", return_value=_response(502, text="Bad Gateway")):
        with pytest.raises(UpstreamError, match="502"):
            gh.graphql("query { viewer { login } }", {})


def test_graphql_errors(gh):
    payload = {"data": None, "errors": [{"message": "Something went wrong"}]}
    with patch.object(gh.session, "post", return_value=_response(payload=payload)):
        with pytest.raises(UpstreamError, match="Something went wrong"):
            gh.graphql("query { viewer { login } }", {})


def test_non_json_body(gh):
    with patch.object(gh.session, "post", return_value=_response(payload=ValueError("no json"))):
        with pytest.raises(UpstreamError):
            gh.graphql("query { viewer { login } }", {})


def test_missing_data(gh):
    with patch.object(gh.session, "post", return_value=_response(payload={})):
        with pytest.raises(UpstreamError, match="no data"):
            gh.graphql("query { viewer { login } }", {})


def test_close_releases_session(gh):
    with patch.object(gh.session, "close") as close:
        gh.close()
    close.assert_called_once_with()
