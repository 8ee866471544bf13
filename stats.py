"""
Year-in-review statistics for a GitHub user.

compute_stats() pulls one year of contribution calendar plus the user's 100
most-starred repositories and reduces them to the handful of numbers the
front end renders: longest streak, commit rank, most active weekday/month,
stars earned and top languages.
"""

from __future__ import annotations

import datetime as dt
import logging
import math
import re
from typing import Any, Dict, List, Optional, Tuple, TypedDict

from errors import UpstreamError, ValidationError

logger = logging.getLogger(__name__)

# GitHub allows alnum and hyphen; max length 39
USERNAME_RE = re.compile(r"^[A-Za-z0-9-]{1,39}$")

WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

# Approximations based on general GitHub activity patterns, highest first.
COMMIT_RANKS: Tuple[Tuple[int, str], ...] = (
    (5000, "Top 0.5%-1%"),
    (2000, "Top 1%-3%"),
    (1000, "Top 5%-10%"),
    (500, "Top 10%-15%"),
    (200, "Top 25%-30%"),
    (50, "Median 50%"),
)
BOTTOM_RANK = "Bottom 30%"

TOP_LANGUAGES_LIMIT = 3


class ContributionDay(TypedDict):
    contributionCount: int
    date: str
    weekday: int


class Peak(TypedDict):
    name: Optional[str]
    commits: int


class GitHubStats(TypedDict):
    longestStreak: int
    totalCommits: int
    commitRank: str
    calendarData: List[ContributionDay]
    mostActiveDay: Peak
    mostActiveMonth: Peak
    starsEarned: int
    topLanguages: List[str]


# -----------------------------
# Input validation
# -----------------------------
def validate_username(username: Any) -> str:
    if username is None:
        username = ""
    if not isinstance(username, str):
        raise ValidationError("Username must be a string.")
    username = username.strip()
    if not username:
        raise ValidationError("Username parameter is required")
    if not USERNAME_RE.match(username):
        raise ValidationError("Invalid GitHub username format.")
    return username


# -----------------------------
# Calendar helpers
# -----------------------------
def _parse_day(raw: Dict[str, Any]) -> ContributionDay:
    try:
        dt.date.fromisoformat(raw["date"])
        count = int(raw["contributionCount"])
        weekday = int(raw["weekday"])
    except (KeyError, TypeError, ValueError) as e:
        raise UpstreamError(f"Malformed contribution day from GitHub: {raw!r}") from e
    if count < 0 or not 0 <= weekday <= 6:
        raise UpstreamError(f"Malformed contribution day from GitHub: {raw!r}")
    return {"contributionCount": count, "date": raw["date"], "weekday": weekday}


def flatten_calendar(contribution_calendar: Dict[str, Any], year: int) -> List[ContributionDay]:
    """
    Flattens weeks -> days and drops anything before Jan 1 of `year`.
    GitHub pads the first week with days of the previous year.
    """
    start = dt.date(year, 1, 1)
    days: List[ContributionDay] = []
    for w in contribution_calendar.get("weeks") or []:
        for d in w.get("contributionDays") or []:
            day = _parse_day(d)
            if dt.date.fromisoformat(day["date"]) >= start:
                days.append(day)
    return days


def longest_streak(days: List[ContributionDay]) -> int:
    max_streak = 0
    cur_streak = 0
    for d in days:
        if d["contributionCount"] > 0:
            cur_streak += 1
            if cur_streak > max_streak:
                max_streak = cur_streak
        else:
            cur_streak = 0
    return max_streak


def commit_rank(total_commits: int) -> str:
    for threshold, label in COMMIT_RANKS:
        if total_commits >= threshold:
            return label
    return BOTTOM_RANK


def _peak(totals: Dict[int, int]) -> Optional[Tuple[int, int]]:
    # max() keeps the first of equal values, i.e. the first-inserted key.
    if not totals:
        return None
    return max(totals.items(), key=lambda kv: kv[1])


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def most_active_month(days: List[ContributionDay]) -> Peak:
    monthly: Dict[int, int] = {}
    for d in days:
        month = dt.date.fromisoformat(d["date"]).month
        monthly[month] = monthly.get(month, 0) + d["contributionCount"]

    peak = _peak(monthly)
    if peak is None:
        return {"name": None, "commits": 0}
    month, commits = peak
    return {"name": MONTH_NAMES[month - 1], "commits": commits}


def most_active_day(days: List[ContributionDay]) -> Peak:
    """
    Busiest weekday. `commits` is the average per occurrence of that weekday
    (total / weeks covered), unlike most_active_month which reports a raw total.
    """
    daily: Dict[int, int] = {}
    for d in days:
        daily[d["weekday"]] = daily.get(d["weekday"], 0) + d["contributionCount"]

    peak = _peak(daily)
    if peak is None:
        return {"name": None, "commits": 0}
    weekday, total = peak
    return {"name": WEEKDAY_NAMES[weekday], "commits": _round_half_up(total / (len(days) / 7))}


# -----------------------------
# Repository helpers
# -----------------------------
def stars_earned(repos: List[Dict[str, Any]]) -> int:
    return sum(int(r.get("stargazerCount") or 0) for r in repos)


def top_languages(repos: List[Dict[str, Any]], limit: int = TOP_LANGUAGES_LIMIT) -> List[str]:
    counts: Dict[str, int] = {}
    for r in repos:
        name = (r.get("primaryLanguage") or {}).get("name")
        if name:
            counts[name] = counts.get(name, 0) + 1
    # sorted() is stable, so ties keep first-seen order
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    return [lang for lang, _ in ranked[:limit]]


# -----------------------------
# Aggregation
# -----------------------------
def build_stats(user: Dict[str, Any], year: int) -> GitHubStats:
    """Reduce a raw GraphQL `user` node to GitHubStats."""
    try:
        calendar = user["contributionsCollection"]["contributionCalendar"]
        total_commits = int(calendar["totalContributions"])
        repos = [r for r in (user.get("repositories") or {}).get("nodes") or [] if r]
    except (KeyError, TypeError, ValueError) as e:
        raise UpstreamError("Malformed user record from GitHub.") from e

    days = flatten_calendar(calendar, year)

    return {
        "longestStreak": longest_streak(days),
        "totalCommits": total_commits,
        "commitRank": commit_rank(total_commits),
        "calendarData": days,
        "mostActiveDay": most_active_day(days),
        "mostActiveMonth": most_active_month(days),
        "starsEarned": stars_earned(repos),
        "topLanguages": top_languages(repos),
    }


def compute_stats(client, username: Optional[str], year: int) -> GitHubStats:
    username = validate_username(username)
    logger.info(f"Computing {year} stats for {username}")
    user = client.fetch_year_activity(username, year)
    return build_stats(user, year)
