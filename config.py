"""Environment-driven configuration for wikiquery.

Goal: centralize all environment variable parsing + validation so the rest of the
codebase deals in typed config objects instead of raw strings.

Environment variables:
- WIKI_API_ENDPOINT (optional, default: English Wikipedia)
- WIKI_USER_AGENT (optional)
- WIKI_MAX_RESULT_LIMIT (optional, default: 500; the per-page count the server grants for "max")
- WIKI_GROUP_QUERY_MAX (optional, default: 50; titles per request)
- WIKI_SLEEP_SECONDS (optional, default: 0)
- WIKI_HTTP_TIMEOUT (optional, default: 30)
- WIKI_DEBUG (optional, default: off; log every decoded response)
"""

from __future__ import annotations

import os
from dataclasses import dataclass

ENV_WIKI_API_ENDPOINT = "WIKI_API_ENDPOINT"
ENV_WIKI_USER_AGENT = "WIKI_USER_AGENT"
ENV_WIKI_MAX_RESULT_LIMIT = "WIKI_MAX_RESULT_LIMIT"
ENV_WIKI_GROUP_QUERY_MAX = "WIKI_GROUP_QUERY_MAX"
ENV_WIKI_SLEEP_SECONDS = "WIKI_SLEEP_SECONDS"
ENV_WIKI_HTTP_TIMEOUT = "WIKI_HTTP_TIMEOUT"
ENV_WIKI_DEBUG = "WIKI_DEBUG"

DEFAULT_API_ENDPOINT = "https://en.wikipedia.org/w/api.php"
DEFAULT_MAX_RESULT_LIMIT = 500
DEFAULT_GROUP_QUERY_MAX = 50
DEFAULT_SLEEP_SECONDS = 0.0
DEFAULT_HTTP_TIMEOUT = 30.0

_DEFAULT_USER_AGENT = "wikiquery/1.0 (https://example.invalid; contact: you@example.invalid)"


@dataclass(frozen=True)
class WikiConfig:
    """Per-wiki settings shared by the transport, sessions and coordinator."""

    api_endpoint: str = DEFAULT_API_ENDPOINT
    user_agent: str = _DEFAULT_USER_AGENT
    # Page-size ceiling; what the server substitutes for "max".
    max_result_limit: int = DEFAULT_MAX_RESULT_LIMIT
    group_query_max: int = DEFAULT_GROUP_QUERY_MAX
    sleep_seconds: float = DEFAULT_SLEEP_SECONDS
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    debug: bool = False


def _env_truthy(value: str | None) -> bool:
    """Interpret environment-variable style booleans.

    Truthy values: 1, true, t, yes, y, on (case-insensitive)
    """

    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    value = value.strip()
    return value if value else default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise SystemExit(f"{name} must be an int (got {raw!r})") from exc


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise SystemExit(f"{name} must be a float (got {raw!r})") from exc


def load_wiki_config_from_env() -> WikiConfig:
    """Load and validate wiki configuration from environment variables."""

    api_endpoint = _env_str(ENV_WIKI_API_ENDPOINT, DEFAULT_API_ENDPOINT)
    if not api_endpoint.startswith(("http://", "https://")):
        raise SystemExit(f"{ENV_WIKI_API_ENDPOINT} must be an http(s) URL (got {api_endpoint!r})")

    user_agent = _env_str(ENV_WIKI_USER_AGENT, _DEFAULT_USER_AGENT)

    max_result_limit = _env_int(ENV_WIKI_MAX_RESULT_LIMIT, DEFAULT_MAX_RESULT_LIMIT)
    if max_result_limit < 1:
        raise SystemExit(f"{ENV_WIKI_MAX_RESULT_LIMIT} must be >= 1")

    group_query_max = _env_int(ENV_WIKI_GROUP_QUERY_MAX, DEFAULT_GROUP_QUERY_MAX)
    if group_query_max < 1:
        raise SystemExit(f"{ENV_WIKI_GROUP_QUERY_MAX} must be >= 1")

    sleep_seconds = _env_float(ENV_WIKI_SLEEP_SECONDS, DEFAULT_SLEEP_SECONDS)
    if sleep_seconds < 0:
        raise SystemExit(f"{ENV_WIKI_SLEEP_SECONDS} must be >= 0")

    http_timeout = _env_float(ENV_WIKI_HTTP_TIMEOUT, DEFAULT_HTTP_TIMEOUT)
    if http_timeout <= 0:
        raise SystemExit(f"{ENV_WIKI_HTTP_TIMEOUT} must be > 0")

    return WikiConfig(
        api_endpoint=api_endpoint,
        user_agent=user_agent,
        max_result_limit=max_result_limit,
        group_query_max=group_query_max,
        sleep_seconds=sleep_seconds,
        http_timeout=http_timeout,
        debug=_env_truthy(os.getenv(ENV_WIKI_DEBUG)),
    )
