"""
Thin GitHub GraphQL client.

One instance is built at process start and shared by every request; it owns a
requests.Session carrying the bearer token. No retries, no pagination: a single
upstream failure surfaces immediately as UpstreamError.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from errors import UpstreamError

logger = logging.getLogger(__name__)

USER_AGENT = "github-year-stats"

# -----------------------------
# GraphQL query
# -----------------------------
# contributionsCollection(from,to) cannot exceed 1 year; callers pass one calendar year.
YEAR_ACTIVITY_QUERY = """
query($login:String!, $from:DateTime!, $to:DateTime!) {
  user(login:$login) {
    contributionsCollection(from:$from, to:$to) {
      contributionCalendar {
        totalContributions
        weeks {
          contributionDays {
            contributionCount
            date
            weekday
          }
        }
      }
    }
    repositories(first:100, orderBy:{field:STARGAZERS, direction:DESC}) {
      nodes {
        stargazerCount
        primaryLanguage { name }
      }
    }
  }
}
"""


def year_window(year: int) -> Dict[str, str]:
    return {"from": f"{year}-01-01T00:00:00Z", "to": f"{year}-12-31T23:59:59Z"}


class GitHubClient:
    def __init__(
        self,
        token: str,
        api_url: str = "https://api.github.com/graphql",
        *,
        api_version: str = "2022-11-28",
        timeout: int = 25,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_url = api_url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/vnd.github+json",
                "User-Agent": USER_AGENT,
                "X-GitHub-Api-Version": api_version,
                "Authorization": f"Bearer {token}",
            }
        )

    @classmethod
    def from_settings(cls, settings) -> "GitHubClient":
        return cls(
            settings.github_token,
            settings.graphql_url,
            api_version=settings.api_version,
            timeout=settings.timeout_seconds,
        )

    def close(self) -> None:
        self.session.close()

    def graphql(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        payload = {"query": query, "variables": variables}
        try:
            resp = self.session.post(self.api_url, json=payload, timeout=self.timeout)
        except requests.Timeout as e:
            raise UpstreamError(f"GitHub GraphQL request timed out: {e}") from e
        except requests.RequestException as e:
            raise UpstreamError(f"GitHub GraphQL request failed: {e}") from e

        if resp.status_code >= 400:
            raise UpstreamError(f"GitHub GraphQL error {resp.status_code}: {resp.text[:600]}")

        try:
            data = resp.json()
        except ValueError as e:
            raise UpstreamError("GitHub GraphQL returned a non-JSON response.") from e

        if not isinstance(data, dict):
            raise UpstreamError("GitHub GraphQL returned an unexpected payload.")
        if data.get("errors"):
            # Show only first few errors to keep responses short
            raise UpstreamError(f"GitHub GraphQL errors: {data['errors'][:3]}")
        if not isinstance(data.get("data"), dict):
            raise UpstreamError("GitHub GraphQL response has no data.")
        return data["data"]

    def fetch_year_activity(self, username: str, year: int) -> Dict[str, Any]:
        """
        Returns the raw `user` node: contribution calendar for `year` plus the
        100 most-starred repositories.
        """
        window = year_window(year)
        logger.info(f"Querying GitHub for {username} ({window['from']} .. {window['to']})")
        data = self.graphql(YEAR_ACTIVITY_QUERY, {"login": username, **window})
        user = data.get("user")
        if not user:
            raise UpstreamError(f"GitHub user '{username}' not found.")
        return user
