"""HTTP client for the Highlightly sports-data API."""

from __future__ import annotations

import logging
from typing import Any

import requests
from requests.exceptions import ConnectionError, RequestException, Timeout
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from scoreline.config import get_settings
from scoreline.errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

_session: requests.Session | None = None


def _get_session() -> requests.Session:
    global _session
    if _session is None:
        _session = requests.Session()
    return _session


def ensure_configured() -> str:
    """Return the API key, raising ConfigurationError when it is missing."""
    key = get_settings().highlightly_key
    if not key:
        raise ConfigurationError("HIGHLIGHTLY_KEY not configured")
    return key


@retry(
    stop=stop_after_attempt(2),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=2),
    retry=retry_if_exception_type((ConnectionError, Timeout)),
    reraise=True,
)
def _get(path: str, params: dict[str, Any] | None = None) -> requests.Response:
    s = get_settings()
    url = f"{s.highlightly_base_url.rstrip('/')}/{path.lstrip('/')}"
    return _get_session().get(
        url,
        params=params,
        headers={"x-rapidapi-key": ensure_configured()},
        timeout=s.upstream_timeout_s,
    )


def get_json(path: str, params: dict[str, Any] | None = None) -> Any:
    """GET ``path`` and decode JSON, mapping every failure to UpstreamError."""
    attempts = max(1, get_settings().upstream_retries)
    try:
        resp = _get.retry_with(stop=stop_after_attempt(attempts))(path, params)
    except RequestException as exc:
        logger.warning("Highlightly request %s failed: %s", path, exc)
        raise UpstreamError(f"request to {path} failed: {exc}") from exc

    if not resp.ok:
        logger.warning("Highlightly %s returned HTTP %d", path, resp.status_code)
        raise UpstreamError(f"{path} returned HTTP {resp.status_code}", status=resp.status_code)
    try:
        return resp.json()
    except ValueError as exc:
        raise UpstreamError(f"{path} returned invalid JSON", status=resp.status_code) from exc


def fetch_match(sport_endpoint: str, highlightly_id: str | int) -> Any:
    """GET /{sport}/matches/{id}

    Returns the raw match payload (a dict, or a one-element list for some sports).
    """
    logger.debug("Fetching %s match %s", sport_endpoint, highlightly_id)
    return get_json(f"{sport_endpoint}/matches/{highlightly_id}")


def fetch_head_to_head(sport_endpoint: str, team_one_id: str | int, team_two_id: str | int) -> Any:
    """GET /{sport}/head-2-head?teamIdOne=..&teamIdTwo=..

    Returns the list of past meetings between two provider teams.
    """
    logger.debug("Fetching %s head-2-head %s vs %s", sport_endpoint, team_one_id, team_two_id)
    return get_json(
        f"{sport_endpoint}/head-2-head",
        {"teamIdOne": team_one_id, "teamIdTwo": team_two_id},
    )


def fetch_lineups(sport_endpoint: str, highlightly_id: str | int) -> Any:
    """GET /{sport}/lineups/{id}"""
    logger.debug("Fetching %s lineups for %s", sport_endpoint, highlightly_id)
    return get_json(f"{sport_endpoint}/lineups/{highlightly_id}")
