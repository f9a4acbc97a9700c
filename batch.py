"""Batched multi-title queries.

The API accepts a bounded number of titles per request. `BatchCoordinator`
splits a caller's titles into fixed-size groups, drains every page of each
group through a fresh `QuerySession`, and merges what came back into one
mapping keyed by the titles the caller supplied.

Merge rules:
- single-value queries: the latest page wins for a key; missing keys map to None.
- multi-value queries: records accumulate per key in page order; missing keys
  map to an empty list.

Batches run strictly one after the other. A batch whose session ends with an
error simply contributes nothing further.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Iterator, Mapping

from config import WikiConfig
from query import QuerySession, Transport
from query_templates import TITLES, QueryTemplate
from response import ResponseView
from utils import GroupQueue, contains_none, dedupe_preserving_order

log = logging.getLogger(__name__)

TITLE = "title"
ERROR_MESSAGE_NULL_INPUT = "None is not an acceptable title to query with"

_UNSET: Any = object()


class BatchCoordinator:
    """Runs one template over many titles, `group_query_max` titles per request."""

    def __init__(self, client: Transport, config: WikiConfig | None = None) -> None:
        self.client = client
        self.config = config if config is not None else client.config

    def new_session(self, *templates: QueryTemplate, total_limit: int = -1) -> QuerySession:
        return QuerySession(self.client, *templates, total_limit=total_limit, config=self.config)

    def _checked_keys(self, keys: Iterable[str]) -> list[str]:
        key_list = list(keys)
        if contains_none(key_list):
            raise ValueError(ERROR_MESSAGE_NULL_INPUT)
        return key_list

    def iter_pages(
        self,
        keys: Iterable[str],
        template: QueryTemplate,
        key_parameter: str = TITLES,
        extra_params: Mapping[str, Any] | None = None,
    ) -> Iterator[ResponseView]:
        """Yield every result page of every batch, in order."""
        key_list = self._checked_keys(keys)

        group_queue = GroupQueue(key_list, self.config.group_query_max)
        while group_queue.has_more():
            batch = group_queue.poll()
            session = self.new_session(template).set(key_parameter, batch).set_all(extra_params)
            log.debug("Querying batch of %d for %s", len(batch), key_parameter)
            yield from session

    def fetch(
        self,
        keys: Iterable[str],
        template: QueryTemplate,
        extra_params: Mapping[str, Any] | None = None,
        result_key: str | None = None,
        *,
        multi_value: bool | None = None,
        key_parameter: str = TITLES,
        empty: Any = _UNSET,
        overwrite_with_none: bool = True,
    ) -> dict[str, Any]:
        """Fetch `result_key` of every page in `keys`.

        `multi_value` defaults to whether `template` pages its results. The
        returned mapping holds exactly the requested keys, in request order.
        Keys the server said nothing about map to `empty` (None, or [] for
        multi-value queries).

        With `overwrite_with_none=False` a later page that lists a title without
        the property keeps the value an earlier page gave it.
        """
        key_list = self._checked_keys(keys)

        if result_key is None:
            result_key = template.result_key
        if result_key is None:
            raise ValueError(f"No result key given and template {template.module!r} has none")
        if multi_value is None:
            multi_value = template.limit_parameter is not None

        merged: dict[str, Any] = {}
        for page in self.iter_pages(key_list, template, key_parameter, extra_params):
            for key, value in page.prop_extract(TITLE, result_key).items():
                if multi_value:
                    records = merged.setdefault(key, [])
                    if value is None:
                        continue
                    records.extend(value if isinstance(value, list) else [value])
                elif value is not None or overwrite_with_none or key not in merged:
                    merged[key] = value

        out: dict[str, Any] = {}
        for key in dedupe_preserving_order(key_list):
            if key in merged:
                out[key] = merged[key]
            elif empty is _UNSET:
                out[key] = [] if multi_value else None
            else:
                out[key] = empty
        return out

    def fetch_list(
        self,
        keys: Iterable[str],
        template: QueryTemplate,
        key_parameter: str,
        result_key: str | None = None,
        extra_params: Mapping[str, Any] | None = None,
    ) -> list[Any]:
        """Concatenate the `list` records of every page of every batch."""
        if result_key is None:
            result_key = template.result_key
        if result_key is None:
            raise ValueError(f"No result key given and template {template.module!r} has none")

        records: list[Any] = []
        for page in self.iter_pages(keys, template, key_parameter, extra_params):
            records.extend(page.list_extract(result_key))
        return records

    def fetch_grouped(
        self,
        keys: Iterable[str],
        template: QueryTemplate,
        key_parameter: str,
        group_field: str,
        result_key: str | None = None,
        extra_params: Mapping[str, Any] | None = None,
        canonical: Callable[[str], str] | None = None,
    ) -> dict[str, list[Any]]:
        """`fetch_list`, grouped per requested key by each record's `group_field`.

        When the server echoes keys back in a canonical spelling, pass `canonical`
        so requested keys are looked up in that spelling.
        """
        key_list = self._checked_keys(keys)
        grouped = group_by(self.fetch_list(key_list, template, key_parameter, result_key, extra_params), group_field)
        if canonical is None:
            return {key: grouped.get(key, []) for key in dedupe_preserving_order(key_list)}
        return {key: grouped.get(canonical(key), []) for key in dedupe_preserving_order(key_list)}


def group_by(records: Iterable[Mapping[str, Any]], key_field: str) -> dict[str, list[Mapping[str, Any]]]:
    """Group records by `key_field`, keeping their order. Records without the field are dropped."""

    grouped: dict[str, list[Mapping[str, Any]]] = {}
    for record in records:
        key = record.get(key_field)
        if key is None:
            continue
        grouped.setdefault(str(key), []).append(record)
    return grouped
