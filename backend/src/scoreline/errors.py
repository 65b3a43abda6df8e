"""Exception types shared by the gateways and the upstream client."""

from __future__ import annotations


class ScorelineError(Exception):
    """Base class for all scoreline errors."""


class ConfigurationError(ScorelineError):
    """Deployment misconfiguration (e.g. the provider API key is missing)."""


class UpstreamError(ScorelineError):
    """The sports-data provider failed, timed out, or returned garbage."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status
