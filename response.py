"""Read-only comprehension of a single `action=query` response.

Notes:
- Everything interesting lives under the top-level `query` object.
- `prop` results come back under `query.pages`, either as an object keyed by
  page id (the legacy format) or as a list of pages (`formatversion=2`).
- When the server canonicalizes an input title it reports a `normalized`
  list of `{"from": ..., "to": ...}` pairs. Keyed results are re-exposed under
  the caller's original (`from`) title as well.
- More pages are signalled either by a top-level `continue` object or by the
  legacy `query-continue` object nested one level deeper per module.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, MutableMapping, TypeVar, Union

QUERY = "query"
PAGES = "pages"
NORMALIZED = "normalized"
CONTINUE = "continue"
QUERY_CONTINUE = "query-continue"

V = TypeVar("V")


@dataclass(frozen=True)
class FlatContinuation:
    """`{"continue": {...}}`: merge the values straight into the next request."""

    values: Mapping[str, str]


@dataclass(frozen=True)
class NestedContinuation:
    """`{"query-continue": {module: {...}}}`: merge one module's values."""

    module: str
    values: Mapping[str, str]


Continuation = Union[FlatContinuation, NestedContinuation, None]


def _stringify(values: Mapping[str, Any]) -> dict[str, str]:
    return {str(key): str(value) for key, value in values.items()}


def parse_continuation(document: Mapping[str, Any], modules: Iterable[str] = ()) -> Continuation:
    """Decode the continuation marker of a response, if any.

    For the legacy shape, the first of `modules` present in `query-continue`
    wins; when none of them is there, the first nested object is used.
    """

    flat = document.get(CONTINUE)
    if isinstance(flat, Mapping):
        return FlatContinuation(_stringify(flat))

    nested = document.get(QUERY_CONTINUE)
    if isinstance(nested, Mapping) and nested:
        for module in modules:
            if isinstance(nested.get(module), Mapping):
                return NestedContinuation(module, _stringify(nested[module]))

        for module, values in nested.items():
            if isinstance(values, Mapping):
                return NestedContinuation(module, _stringify(values))

    return None


@dataclass(frozen=True)
class ResponseView:
    """One decoded page of results plus the extraction helpers callers need."""

    document: Mapping[str, Any]
    normalized_titles: Mapping[str, str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        normalized_map: dict[str, str] = {}
        query = self.document.get(QUERY)
        if isinstance(query, Mapping):
            for normalized_entry in query.get(NORMALIZED) or []:
                # E.g. "foo bar" -> "Foo bar"
                from_title = normalized_entry.get("from")
                to_title = normalized_entry.get("to")
                if not isinstance(from_title, str) or not isinstance(to_title, str):
                    continue
                normalized_map[from_title] = to_title

        object.__setattr__(self, "normalized_titles", normalized_map)

    @property
    def query(self) -> Mapping[str, Any] | None:
        query = self.document.get(QUERY)
        return query if isinstance(query, Mapping) else None

    def list_extract(self, key: str) -> list[Any]:
        """Records listed under `query.<key>`, or an empty list."""
        query = self.query
        if query is None:
            return []

        records = query.get(key)
        if isinstance(records, list):
            return list(records)
        if isinstance(records, Mapping):
            # Some modules (siteinfo namespaces, ...) are keyed objects rather than arrays.
            return list(records.values())
        return []

    def prop_extract(self, key_field: str, value_field: str) -> dict[str, Any]:
        """Map each page's `key_field` to its `value_field` (None when absent).

        Normalization is applied to the result.
        """
        query = self.query
        if query is None:
            return {}

        pages = query.get(PAGES)
        if isinstance(pages, Mapping):
            entries = pages.values()
        elif isinstance(pages, list):
            entries = pages
        else:
            return {}

        extracted: dict[str, Any] = {}
        for entry in entries:
            if not isinstance(entry, Mapping):
                continue
            key = entry.get(key_field)
            if key is None:
                continue
            extracted[str(key)] = entry.get(value_field)

        return self.normalize(extracted)

    def meta_extract(self, key: str) -> Any:
        """Value at `query.<key>`, or an empty dict."""
        query = self.query
        if query is None:
            return {}
        value = query.get(key)
        return {} if value is None else value

    def normalize(self, mapping: MutableMapping[str, V]) -> MutableMapping[str, V]:
        """Copy entries keyed by a canonical title to the caller's original title."""
        for from_title, to_title in self.normalized_titles.items():
            if to_title in mapping:
                mapping[from_title] = mapping[to_title]
        return mapping
