"""MediaWiki Action API transport.

See https://www.mediawiki.org/wiki/API:Main_page

This module isolates the network-facing part of the library: it turns a flat
parameter map into one HTTP GET against the configured endpoint and hands back
the raw body. Decoding and continuation handling live in `query.py`.

Notes:
- One `requests.Session` per client, so cookies persist across calls.
- Non-2xx responses and `requests` failures surface as `TransportError`.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Mapping

import requests

from config import WikiConfig
from errors import TransportError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApiResponse:
    """Raw result of one API call."""

    status_code: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class MediaWikiApiClient:
    """Performs GET requests against one wiki's API endpoint."""

    def __init__(self, config: WikiConfig, session: requests.Session | None = None) -> None:
        self.config = config
        self.session = session if session is not None else requests.Session()
        self.session.headers["User-Agent"] = config.user_agent

    @property
    def endpoint(self) -> str:
        return self.config.api_endpoint

    def get(self, params: Mapping[str, str]) -> ApiResponse:
        """Send `params` as URL query parameters and return the raw response."""

        if self.config.sleep_seconds > 0:
            time.sleep(self.config.sleep_seconds)

        log.debug("GET %s params=%s", self.endpoint, dict(params))
        try:
            response = self.session.get(self.endpoint, params=dict(params), timeout=self.config.http_timeout)
        except requests.RequestException as exc:
            raise TransportError(f"GET {self.endpoint} failed: {exc}") from exc

        api_response = ApiResponse(status_code=response.status_code, text=response.text)
        if not api_response.ok:
            raise TransportError(
                f"GET {self.endpoint} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return api_response

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> MediaWikiApiClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
