"""Continuation-driven `action=query` sessions.

A `QuerySession` owns the parameter map of one logical query and walks its
result pages one GET at a time:

    session = QuerySession(client, CATEGORY_MEMBERS, total_limit=20).set("cmtitle", "Category:Foo")
    for page in session:
        titles = [record["title"] for record in page.list_extract("categorymembers")]

Each call to `next()` returns a `ResponseView`, or a falsy `QueryEnd` once the
session is done. Transport and decoding failures end the session with
`QueryEnd(reason=error)` instead of raising; an unfilled placeholder parameter
is a programming error and raises `UnsetParameterError` before any request.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Protocol

from config import WikiConfig
from errors import TransportError, UnsetParameterError
from mediawiki_api import ApiResponse
from query_templates import LIMIT_MAX, QueryTemplate
from response import ResponseView, parse_continuation
from utils import PIPE, pipe_fence

log = logging.getLogger(__name__)


class Transport(Protocol):
    config: WikiConfig

    def get(self, params: Mapping[str, str]) -> ApiResponse: ...


class QueryEndReason(StrEnum):
    exhausted = "exhausted"
    error = "error"


@dataclass(frozen=True)
class QueryEnd:
    """Terminal result of `QuerySession.next()`."""

    reason: QueryEndReason = QueryEndReason.exhausted
    error: Exception | None = None

    def __bool__(self) -> bool:
        return False


EXHAUSTED = QueryEnd()


class QuerySession:
    """Stateful walk over the result pages of one query.

    Several templates may be combined. Modules of the same family are
    pipe-joined (`prop=categories|templates`); other parameters are merged,
    later templates winning on a clash.
    """

    def __init__(
        self,
        client: Transport,
        *templates: QueryTemplate,
        total_limit: int = -1,
        config: WikiConfig | None = None,
    ) -> None:
        self._client = client
        self._config = config if config is not None else client.config

        self._parameters: dict[str, str | None] = {"action": "query", "format": "json"}
        self._limit_parameters: list[str] = []
        self._modules: list[str] = []
        for template in templates:
            family = str(template.family) if template.family is not None else None
            previous = self._parameters.get(family) if family is not None else None
            self._parameters.update(template.default_parameters)
            if previous and template.module not in previous.split(PIPE):
                # Modules of one family share a single pipe-joined parameter.
                self._parameters[family] = pipe_fence([previous, template.module])
            if template.limit_parameter is not None:
                self._limit_parameters.append(template.limit_parameter)
            if template.module is not None:
                self._modules.append(template.module)

        self._per_page_limit = self._config.max_result_limit
        self._total_limit = total_limit
        self._running_count = 0
        self._can_continue = True

    @property
    def parameters(self) -> Mapping[str, str | None]:
        return MappingProxyType(self._parameters)

    @property
    def limit_parameters(self) -> tuple[str, ...]:
        return tuple(self._limit_parameters)

    @property
    def per_page_limit(self) -> int:
        return self._per_page_limit

    @property
    def total_limit(self) -> int:
        return self._total_limit

    @property
    def running_count(self) -> int:
        return self._running_count

    def has_next(self) -> bool:
        """True while another page can be requested."""
        return self._can_continue

    def set(self, key: str, value: str | bool | int | Iterable[object] | None) -> QuerySession:
        """Set one request parameter. Iterables are pipe-joined. Do not URL-encode.

        Flags follow the API convention: True sends "1", False drops the parameter.
        """
        if value is None or isinstance(value, str):
            self._parameters[key] = value
        elif isinstance(value, bool):
            if value:
                self._parameters[key] = "1"
            else:
                self._parameters.pop(key, None)
        elif isinstance(value, int):
            self._parameters[key] = str(value)
        else:
            self._parameters[key] = pipe_fence(value)
        return self

    def set_all(self, parameters: Mapping[str, str | int | Iterable[object] | None] | None) -> QuerySession:
        for key, value in (parameters or {}).items():
            self.set(key, value)
        return self

    def adjust_limit(self, limit: int) -> QuerySession:
        """Request at most `limit` items per page; <= 0 or above the ceiling means "max"."""
        if limit <= 0 or limit > self._config.max_result_limit:
            limit_value = LIMIT_MAX
            self._per_page_limit = self._config.max_result_limit
        else:
            limit_value = str(limit)
            self._per_page_limit = limit

        for limit_parameter in self._limit_parameters:
            self._parameters[limit_parameter] = limit_value

        return self

    def next(self) -> ResponseView | QueryEnd:
        """Fetch the next page of results."""
        missing = [key for key, value in self._parameters.items() if value is None]
        if missing:
            raise UnsetParameterError(missing, dict(self._parameters))

        if not self._can_continue:
            return EXHAUSTED

        self._running_count += self._per_page_limit
        if self._total_limit > 0 and self._running_count >= self._total_limit:
            if self._running_count > self._total_limit:
                # Shrink the last page to exactly what is left of the quota.
                self.adjust_limit(self._per_page_limit - (self._running_count - self._total_limit))
                self._running_count = self._total_limit
            self._can_continue = False

        try:
            response = self._client.get(self._parameters)
            document = json.loads(response.text)
            if not isinstance(document, dict):
                raise ValueError(f"expected a JSON object, got {type(document).__name__}")
        except (TransportError, ValueError) as exc:
            log.exception("Error while fetching next query page; params=%s", self._parameters)
            self._can_continue = False
            return QueryEnd(QueryEndReason.error, exc)

        continuation = parse_continuation(document, self._modules)
        if continuation is None:
            self._can_continue = False
        else:
            self._parameters.update(continuation.values)

        if self._config.debug:
            log.debug("%s", json.dumps(document, indent=2, ensure_ascii=False))

        return ResponseView(document)

    def __iter__(self) -> Iterator[ResponseView]:
        while self._can_continue:
            page = self.next()
            if not page:
                return
            yield page

    def __repr__(self) -> str:
        state = "active" if self._can_continue else "done"
        return f"QuerySession({state}, params={self._parameters!r})"
