"""Global test configuration."""

from __future__ import annotations

import os

import pytest

from config import WikiConfig
from errors import TransportError
from tests.helpers import FakeTransport, Reply


@pytest.fixture(autouse=True)
def isolate_wiki_env(monkeypatch):
    """Ensure a clean WIKI_* environment for each test."""
    for name in list(os.environ):
        if name.startswith("WIKI_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config() -> WikiConfig:
    return WikiConfig(api_endpoint="https://wiki.example.org/w/api.php", user_agent="wikiquery-tests/1.0")


@pytest.fixture
def make_transport(config):
    def _make(*replies: Reply, config_override: WikiConfig | None = None) -> FakeTransport:
        return FakeTransport(replies, config=config_override or config)

    return _make


@pytest.fixture
def transport_error() -> TransportError:
    return TransportError("GET https://wiki.example.org/w/api.php returned HTTP 503", status_code=503)
