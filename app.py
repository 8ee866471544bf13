"""
GitHub Year Stats (Flask)

What it does:
- Accepts a GitHub username
- Fetches one year of contribution calendar + the 100 most-starred repos (single GraphQL call)
- Returns longest streak, commit rank, most active weekday/month, stars earned and top languages

Run:
  export GITHUB_TOKEN="github_pat_..."   # required
  python app.py
  # or: flask --app app run

Endpoints:
  GET  /stats?username=   -> returns JSON stats
  POST /stats             -> accepts form-data or JSON { "username": "..." }
  GET  /healthz           -> liveness + tracked year
"""

from __future__ import annotations

import atexit
import logging
from typing import Optional

from flask import Flask, current_app, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from config import Settings
from errors import StatsError, UpstreamError, ValidationError
from github_client import GitHubClient
from stats import compute_stats

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _get_username_from_request() -> Optional[str]:
    if request.method == "GET":
        return request.args.get("username")
    if request.is_json:
        payload = request.get_json(silent=True) or {}
        return payload.get("username") if isinstance(payload, dict) else None
    return request.form.get("username")


# -----------------------------
# Routes
# -----------------------------
def stats_view():
    ext = current_app.extensions["github_stats"]
    stats = compute_stats(ext["client"], _get_username_from_request(), ext["settings"].stats_year)
    return jsonify(stats)


def healthz():
    settings: Settings = current_app.extensions["github_stats"]["settings"]
    return jsonify({"ok": True, "trackedYear": settings.stats_year})


# -----------------------------
# Error boundary
# -----------------------------
def _handle_validation_error(e: ValidationError):
    logger.warning(f"Rejected stats request: {e}")
    return jsonify({"error": str(e)}), e.status_code


def _handle_upstream_error(e: UpstreamError):
    logger.error(f"Error fetching GitHub stats: {e}")
    return jsonify({"error": str(e) or "Failed to fetch GitHub statistics"}), e.status_code


def _handle_unexpected_error(e: Exception):
    if isinstance(e, HTTPException):
        return jsonify({"error": e.description}), e.code
    logger.exception("Unexpected error while computing GitHub stats")
    return jsonify({"error": "Failed to fetch GitHub statistics"}), 500


# -----------------------------
# App factory
# -----------------------------
def create_app(settings: Optional[Settings] = None, client: Optional[GitHubClient] = None) -> Flask:
    """
    Builds the Flask app. Settings and the GitHub client are created once here
    and live for the whole process; ConfigurationError propagates to the caller.
    """
    settings = settings or Settings.from_env()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)

    if client is None:
        client = GitHubClient.from_settings(settings)
        atexit.register(client.close)

    app = Flask(__name__)
    app.extensions["github_stats"] = {"settings": settings, "client": client}
    CORS(app, origins=settings.cors_origins)

    app.add_url_rule("/stats", "stats", stats_view, methods=["GET", "POST"])
    app.add_url_rule("/healthz", "healthz", healthz, methods=["GET"])

    app.register_error_handler(ValidationError, _handle_validation_error)
    app.register_error_handler(UpstreamError, _handle_upstream_error)
    app.register_error_handler(StatsError, _handle_upstream_error)
    app.register_error_handler(Exception, _handle_unexpected_error)

    logger.info(f"GitHub stats service ready (tracked year {settings.stats_year})")
    return app


if __name__ == "__main__":
    app = create_app()
    app.run(host="0.0.0.0", port=app.extensions["github_stats"]["settings"].port, debug=True)
