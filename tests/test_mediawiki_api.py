from __future__ import annotations

import pytest
import requests

from config import WikiConfig
from errors import TransportError
from mediawiki_api import MediaWikiApiClient


class _StubResponse:
    def __init__(self, status_code: int, text: str) -> None:
        self.status_code = status_code
        self.text = text


@pytest.fixture
def recorded(monkeypatch):
    calls = []

    def install(status_code=200, text='{"batchcomplete": ""}', exc=None):
        def fake_get(self, url, params=None, timeout=None, **kwargs):
            calls.append({"url": url, "params": params, "timeout": timeout, "headers": dict(self.headers)})
            if exc is not None:
                raise exc
            return _StubResponse(status_code, text)

        monkeypatch.setattr(requests.Session, "get", fake_get)
        return calls

    return install


def test_get_sends_params_with_user_agent(recorded, config):
    calls = recorded()
    client = MediaWikiApiClient(config)

    response = client.get({"action": "query", "meta": "userinfo", "format": "json"})

    assert response.status_code == 200
    assert response.text == '{"batchcomplete": ""}'
    assert calls[0]["url"] == "https://wiki.example.org/w/api.php"
    assert calls[0]["params"] == {"action": "query", "meta": "userinfo", "format": "json"}
    assert calls[0]["timeout"] == config.http_timeout
    assert calls[0]["headers"]["User-Agent"] == "wikiquery-tests/1.0"


def test_non_2xx_raises_transport_error(recorded, config):
    recorded(status_code=503, text="busy")

    with pytest.raises(TransportError) as excinfo:
        MediaWikiApiClient(config).get({"action": "query"})

    assert excinfo.value.status_code == 503


def test_requests_failures_become_transport_errors(recorded, config):
    recorded(exc=requests.ConnectionError("connection refused"))

    with pytest.raises(TransportError) as excinfo:
        MediaWikiApiClient(config).get({"action": "query"})

    assert excinfo.value.status_code is None
    assert isinstance(excinfo.value.__cause__, requests.ConnectionError)


def test_sleeps_between_requests(recorded, monkeypatch):
    recorded()
    sleeps = []
    monkeypatch.setattr("mediawiki_api.time.sleep", sleeps.append)

    MediaWikiApiClient(WikiConfig(sleep_seconds=0.25)).get({"action": "query"})

    assert sleeps == [0.25]


def test_client_reuses_one_session_for_cookies(config):
    session = requests.Session()
    with MediaWikiApiClient(config, session=session) as client:
        assert client.session is session
        assert session.headers["User-Agent"] == "wikiquery-tests/1.0"
