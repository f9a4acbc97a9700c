"""Multi-title convenience queries.

Each function takes a `BatchCoordinator` and a collection of titles and returns
a dict keyed by those titles. They consolidate titles into as few requests as
possible, so prefer them over looping on the single-title `Wiki` methods.
"""

from __future__ import annotations

from typing import Any, Iterable

import query_templates as qt
from batch import TITLE, BatchCoordinator
from utils import pipe_fence

FILE_PREFIX = "File:"


def _values(records: list[Any], field: str = TITLE) -> list[Any]:
    return [record.get(field) for record in records if isinstance(record, dict)]


def _as_file_title(name: str) -> str:
    title = name.replace("_", " ")
    return title if title.startswith(FILE_PREFIX) else FILE_PREFIX + title


def canonical_name(name: str) -> str:
    """Spelling the server reports a title or username in: spaces, first letter upper-case."""
    name = name.replace("_", " ").strip()
    return name[:1].upper() + name[1:]


def _namespace_filter(namespaces: Iterable[int]) -> str | None:
    namespaces = list(namespaces)
    return pipe_fence(namespaces) if namespaces else None


def categories_on_page(coordinator: BatchCoordinator, titles: Iterable[str]) -> dict[str, list[str]]:
    """Categories of each page."""
    result = coordinator.fetch(titles, qt.PAGE_CATEGORIES)
    return {title: _values(records) for title, records in result.items()}


def category_size(coordinator: BatchCoordinator, titles: Iterable[str]) -> dict[str, int]:
    """Number of members of each category. Titles must carry the "Category:" prefix.

    Empty or non-existent categories report 0.
    """
    result = coordinator.fetch(titles, qt.CATEGORY_INFO)
    return {
        title: int(info.get("size", 0)) if isinstance(info, dict) else 0
        for title, info in result.items()
    }


def page_text(coordinator: BatchCoordinator, titles: Iterable[str]) -> dict[str, str]:
    """Current wikitext of each page; "" for missing pages."""
    result = coordinator.fetch(titles, qt.PAGE_TEXT, overwrite_with_none=False)

    texts: dict[str, str] = {}
    for title, revisions in result.items():
        if not revisions:
            texts[title] = ""
            continue
        first = revisions[0]
        texts[title] = first.get("*", first.get("content", "")) or ""
    return texts


def links_on_page(
    coordinator: BatchCoordinator, titles: Iterable[str], namespaces: Iterable[int] = ()
) -> dict[str, list[str]]:
    """Wiki links on each page, optionally restricted to `namespaces`."""
    extra = {}
    namespace_filter = _namespace_filter(namespaces)
    if namespace_filter is not None:
        extra["plnamespace"] = namespace_filter

    result = coordinator.fetch(titles, qt.LINKS_ON_PAGE, extra)
    return {title: _values(records) for title, records in result.items()}


def links_here(coordinator: BatchCoordinator, titles: Iterable[str], redirects: bool) -> dict[str, list[str]]:
    """Pages redirecting to (`redirects=True`) or linking to each page."""
    extra = {"lhshow": ("" if redirects else "!") + "redirect"}
    result = coordinator.fetch(titles, qt.LINKS_HERE, extra)
    return {title: _values(records) for title, records in result.items()}


def transcluded_in(
    coordinator: BatchCoordinator, titles: Iterable[str], namespaces: Iterable[int] = ()
) -> dict[str, list[str]]:
    """Pages transcluding each template."""
    extra = {}
    namespace_filter = _namespace_filter(namespaces)
    if namespace_filter is not None:
        extra["tinamespace"] = namespace_filter

    result = coordinator.fetch(titles, qt.TRANSCLUDED_IN, extra)
    return {title: _values(records) for title, records in result.items()}


def file_usage(coordinator: BatchCoordinator, titles: Iterable[str]) -> dict[str, list[str]]:
    """Pages displaying each file. Titles must carry the "File:" prefix."""
    result = coordinator.fetch(titles, qt.FILE_USAGE)
    return {title: _values(records) for title, records in result.items()}


def external_links(coordinator: BatchCoordinator, titles: Iterable[str]) -> dict[str, list[str]]:
    """External (non-interwiki) URLs on each page."""
    result = coordinator.fetch(titles, qt.EXTERNAL_LINKS)
    return {
        title: [record.get("*", record.get("url")) for record in records]
        for title, records in result.items()
    }


def exists(coordinator: BatchCoordinator, titles: Iterable[str]) -> dict[str, bool]:
    """Whether each title exists.

    Existing pages come back without a `missing` flag; titles the server never
    reported are treated as missing.
    """
    result = coordinator.fetch(titles, qt.EXISTS, multi_value=False, empty="")
    return {title: missing is None for title, missing in result.items()}


def filter_exists(coordinator: BatchCoordinator, titles: Iterable[str], exists_: bool = True) -> list[str]:
    """Titles that exist (or, with `exists_=False`, that do not)."""
    return [title for title, found in exists(coordinator, titles).items() if found == exists_]


def images_on_page(coordinator: BatchCoordinator, titles: Iterable[str]) -> dict[str, list[str]]:
    result = coordinator.fetch(titles, qt.IMAGES)
    return {title: _values(records) for title, records in result.items()}


def templates_on_page(coordinator: BatchCoordinator, titles: Iterable[str]) -> dict[str, list[str]]:
    result = coordinator.fetch(titles, qt.TEMPLATES_ON_PAGE)
    return {title: _values(records) for title, records in result.items()}


def global_usage(coordinator: BatchCoordinator, titles: Iterable[str]) -> dict[str, list[tuple[str, str]]]:
    """(title, wiki) pairs using each file across the wiki farm."""
    result = coordinator.fetch(titles, qt.GLOBAL_USAGE)
    return {
        title: [(record.get(TITLE), record.get("wiki")) for record in records]
        for title, records in result.items()
    }


def resolve_redirects(coordinator: BatchCoordinator, titles: Iterable[str]) -> dict[str, str]:
    """Map each title to its redirect target, or to itself when it is not a redirect."""
    title_list = list(titles)
    resolved = {title: title for title in title_list}

    for page in coordinator.iter_pages(title_list, qt.RESOLVE_REDIRECT):
        redirect_map: dict[str, str] = {}
        for redirect_entry in page.list_extract("redirects"):
            # E.g. "Wiki walker" -> "Wikipedia walker"
            from_title = redirect_entry.get("from")
            to_title = redirect_entry.get("to")
            if from_title and to_title:
                redirect_map[from_title] = to_title

        for title in title_list:
            normalized_title = page.normalized_titles.get(title, title)
            if normalized_title in redirect_map:
                resolved[title] = redirect_map[normalized_title]

    return resolved


def duplicates_of(coordinator: BatchCoordinator, titles: Iterable[str], local_only: bool = False) -> dict[str, list[str]]:
    """Files whose contents duplicate each file."""
    extra = {"dflocalonly": ""} if local_only else None
    result = coordinator.fetch(titles, qt.DUPLICATE_FILES, extra)
    return {
        title: [_as_file_title(record["name"]) for record in records if record.get("name")]
        for title, records in result.items()
    }


def shared_duplicates_of(coordinator: BatchCoordinator, titles: Iterable[str]) -> dict[str, list[str]]:
    """Duplicates of each file that live in a shared (non-local) repository."""
    result = coordinator.fetch(titles, qt.DUPLICATE_FILES)
    return {
        title: [
            _as_file_title(record["name"])
            for record in records
            if record.get("name") and "shared" in record
        ]
        for title, records in result.items()
    }


def text_extracts(coordinator: BatchCoordinator, titles: Iterable[str]) -> dict[str, str | None]:
    """Plain-text lead section of each page; None when unavailable."""
    return coordinator.fetch(titles, qt.TEXT_EXTRACTS, multi_value=False, overwrite_with_none=False)


def image_info(coordinator: BatchCoordinator, titles: Iterable[str]) -> dict[str, list[dict[str, Any]]]:
    """Image info records for every revision of each file, oldest first."""
    result = coordinator.fetch(titles, qt.IMAGE_INFO)
    # imageinfo does not come back in a reliable order.
    return {
        title: sorted(records, key=lambda record: record.get("timestamp") or "")
        for title, records in result.items()
    }


def user_rights(coordinator: BatchCoordinator, users: Iterable[str]) -> dict[str, list[str] | None]:
    """Groups each user belongs to; None when the user does not exist.

    Usernames are given without the "User:" prefix. Results are keyed by the spelling
    supplied, even though the server answers with the canonical one.
    """
    grouped = coordinator.fetch_grouped(users, qt.USER_RIGHTS, "ususers", "name", canonical=canonical_name)
    rights: dict[str, list[str] | None] = {}
    for user, records in grouped.items():
        groups = records[0].get("groups") if records else None
        rights[user] = list(groups) if groups is not None else None
    return rights
