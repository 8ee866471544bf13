"""
Pytest configuration and fixtures
"""
import datetime as dt
from typing import Any, Dict, List
from unittest.mock import MagicMock

import pytest

from app import create_app
from config import Settings
from github_client import GitHubClient


def make_days(start: str, counts: List[int]) -> List[Dict[str, Any]]:
    """Consecutive calendar days from `start` in GitHub's shape (weekday: Sunday=0)."""
    first = dt.date.fromisoformat(start)
    days = []
    for i, c in enumerate(counts):
        d = first + dt.timedelta(days=i)
        days.append({"contributionCount": c, "date": d.isoformat(), "weekday": (d.weekday() + 1) % 7})
    return days


def make_user(days: List[Dict[str, Any]], total: int, repos: List[Dict[str, Any]]) -> Dict[str, Any]:
    weeks = [{"contributionDays": days[i:i + 7]} for i in range(0, len(days), 7)]
    return {
        "contributionsCollection": {
            "contributionCalendar": {"totalContributions": total, "weeks": weeks},
        },
        "repositories": {"nodes": repos},
    }


def repo(stars: int, lang=None) -> Dict[str, Any]:
    return {"stargazerCount": stars, "primaryLanguage": {"name": lang} if lang else None}


@pytest.fixture
def settings() -> Settings:
    return Settings(github_token="test-token", stats_year=2024)


@pytest.fixture
def sample_user() -> Dict[str, Any]:
    # 2023-12-31 is GitHub's padding day from the previous year
    days = make_days("2023-12-31", [9, 1, 2, 0, 4, 5, 6, 0, 3, 3])
    repos = [repo(10, "Python"), repo(5, "Go"), repo(2, None), repo(1, "Python")]
    return make_user(days, 24, repos)


@pytest.fixture
def fake_client(sample_user) -> MagicMock:
    client = MagicMock(spec=GitHubClient)
    client.fetch_year_activity.return_value = sample_user
    return client


@pytest.fixture
def app(settings, fake_client):
    return create_app(settings=settings, client=fake_client)


@pytest.fixture
def client(app):
    return app.test_client()
