"""Test helpers: a scripted stand-in for the HTTP transport and reply builders."""

from __future__ import annotations

import json
from typing import Any, Callable, Iterable, Mapping

from config import WikiConfig
from mediawiki_api import ApiResponse

Reply = Mapping[str, Any] | str | Exception | Callable[[dict[str, str]], Any]


class FakeTransport:
    """Replays canned replies in order and records every parameter map it was sent.

    A reply may be a JSON-able mapping, a raw body string, an exception to raise,
    or a callable taking the request parameters and returning one of those.
    """

    def __init__(self, replies: Iterable[Reply] = (), config: WikiConfig | None = None) -> None:
        self.config = config if config is not None else WikiConfig()
        self.replies: list[Reply] = list(replies)
        self.calls: list[dict[str, str]] = []

    def get(self, params: Mapping[str, str]) -> ApiResponse:
        sent = dict(params)
        self.calls.append(sent)
        if not self.replies:
            raise AssertionError(f"Unexpected request: {sent}")

        reply = self.replies.pop(0)
        if callable(reply) and not isinstance(reply, Exception):
            reply = reply(sent)
        if isinstance(reply, Exception):
            raise reply
        body = reply if isinstance(reply, str) else json.dumps(reply)
        return ApiResponse(status_code=200, text=body)


def prop_reply(
    pages: Mapping[str, Mapping[str, Any]],
    *,
    normalized: Iterable[tuple[str, str]] = (),
    cont: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Build a legacy-format `prop` response; `pages` maps title -> extra page fields."""

    query: dict[str, Any] = {
        "pages": {
            str(index): {"pageid": index, "ns": 0, "title": title, **fields}
            for index, (title, fields) in enumerate(pages.items(), start=1)
        }
    }
    normalized = list(normalized)
    if normalized:
        query["normalized"] = [{"from": source, "to": target} for source, target in normalized]

    reply: dict[str, Any] = {"batchcomplete": "", "query": query}
    if cont is not None:
        reply["continue"] = dict(cont)
    return reply


def list_reply(module: str, records: list[dict[str, Any]], cont: Mapping[str, str] | None = None) -> dict[str, Any]:
    reply: dict[str, Any] = {"query": {module: records}}
    if cont is not None:
        reply["continue"] = dict(cont)
    return reply


ENGLISH_NAMESPACES = {
    -1: "Special",
    0: "",
    1: "Talk",
    2: "User",
    3: "User talk",
    6: "File",
    7: "File talk",
    14: "Category",
    15: "Category talk",
}

def namespace_reply(
    names: Mapping[int, str] | None = None, aliases: Mapping[str, int] | None = None
) -> dict[str, Any]:
    """Build a `meta=siteinfo` namespace response. `names` maps id -> local name."""

    names = ENGLISH_NAMESPACES if names is None else names
    aliases = {"Image": 6, "Image talk": 7} if aliases is None else aliases
    namespaces = {}
    for ns_id, name in names.items():
        record: dict[str, Any] = {"id": ns_id, "case": "first-letter", "*": name}
        if ns_id in ENGLISH_NAMESPACES and ns_id != 0:
            record["canonical"] = ENGLISH_NAMESPACES[ns_id]
        namespaces[str(ns_id)] = record
    return {
        "batchcomplete": "",
        "query": {
            "namespaces": namespaces,
            "namespacealiases": [{"id": ns_id, "*": alias} for alias, ns_id in aliases.items()],
        },
    }
