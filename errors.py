"""
Error taxonomy shared by the client, the aggregator and the Flask layer.

Each per-request error carries the HTTP status the API boundary responds with.
ConfigurationError is raised only at process start.
"""

from __future__ import annotations


class StatsError(RuntimeError):
    status_code = 500


class ValidationError(StatsError):
    """Missing or malformed input (username)."""

    status_code = 400


class UpstreamError(StatsError):
    """GitHub failed, timed out, or returned something we can't use."""

    status_code = 500


class ConfigurationError(RuntimeError):
    pass
