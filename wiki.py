"""High-level entry point: one wiki, one HTTP session, many queries.

    wiki = Wiki(WikiConfig(api_endpoint="https://commons.wikimedia.org/w/api.php"))
    wiki.category_members("Category:Fish", cap=100)
    wiki.categories_on_page("File:Example.jpg")

Single-title methods delegate to the batched functions in `multi_query.py`
with a one-element list. Open-ended `list` queries take a `cap`; -1 (or 0)
means "everything".

Namespace helpers (`which_ns`, `nss`, `talk_page_of`, ...) use the wiki's own
namespace names, fetched on first use.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Iterable

import multi_query
import query_templates as qt
from batch import TITLE, BatchCoordinator
from config import WikiConfig, load_wiki_config_from_env
from mediawiki_api import MediaWikiApiClient
from namespaces import NS, NamespaceTable
from query import QuerySession, Transport

log = logging.getLogger(__name__)

USER_PREFIX = "User:"
DIR_NEWER = "newer"


def _strip_prefix(title: str, prefix: str) -> str:
    return title[len(prefix):] if title.startswith(prefix) else title


def _api_timestamp(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")


class Wiki:
    def __init__(self, config: WikiConfig | None = None, client: Transport | None = None) -> None:
        if config is None:
            config = client.config if client is not None else load_wiki_config_from_env()
        self.config = config
        self.client = client if client is not None else MediaWikiApiClient(config)
        self.coordinator = BatchCoordinator(self.client, config)
        self._namespace_table: NamespaceTable | None = None

    def __repr__(self) -> str:
        return f"Wiki({self.config.api_endpoint!r})"

    def new_query(self, *templates: qt.QueryTemplate, total_limit: int = -1) -> QuerySession:
        """Start an ad-hoc session against this wiki."""
        return self.coordinator.new_session(*templates, total_limit=total_limit)

    def _drain_list(self, session: QuerySession, key: str) -> list[dict[str, Any]]:
        records: list[dict[str, Any]] = []
        for page in session:
            records.extend(page.list_extract(key))
        return records

    def _drain_titles(self, session: QuerySession, key: str) -> list[str]:
        return [record.get(TITLE) for record in self._drain_list(session, key)]

    # ---- list / meta queries ----

    def all_pages(
        self,
        prefix: str | None = None,
        redirects_only: bool = False,
        protected_only: bool = False,
        cap: int = -1,
        namespace: int | None = None,
    ) -> list[str]:
        log.info("Doing all pages fetch for %s", prefix or "all pages")

        session = self.new_query(qt.ALL_PAGES, total_limit=cap)
        if prefix is not None:
            session.set("apprefix", prefix)
        if namespace is not None:
            session.set("apnamespace", namespace)
        if redirects_only:
            session.set("apfilterredir", "redirects")
        if protected_only:
            session.set("apprtype", "edit|move|upload")

        return self._drain_titles(session, "allpages")

    def category_members(self, title: str, cap: int = -1, namespaces: Iterable[int] = ()) -> list[str]:
        """Titles in a category. Items skipped by the namespace filter count against `cap`."""
        title = self.convert_if_not_in_ns(title, NS.CATEGORY)
        log.info("Getting category members from %s", title)

        session = self.new_query(qt.CATEGORY_MEMBERS, total_limit=cap).set("cmtitle", title)
        namespaces = list(namespaces)
        if namespaces:
            session.set("cmnamespace", namespaces)

        return self._drain_titles(session, "categorymembers")

    def contribs(
        self, user: str, cap: int = -1, older_first: bool = False, namespaces: Iterable[int] = ()
    ) -> list[dict[str, Any]]:
        log.info("Fetching contribs of %s", user)

        session = self.new_query(qt.USER_CONTRIBS, total_limit=cap).set("ucuser", _strip_prefix(user, USER_PREFIX))
        namespaces = list(namespaces)
        if namespaces:
            session.set("ucnamespace", namespaces)
        if older_first:
            session.set("ucdir", DIR_NEWER)

        return self._drain_list(session, "usercontribs")

    def logs(
        self, title: str | None = None, user: str | None = None, log_type: str | None = None, cap: int = -1
    ) -> list[dict[str, Any]]:
        """Log events, newest first."""
        log.info("Fetching log entries -> title: %s, user: %s, type: %s", title, user, log_type)

        session = self.new_query(qt.LOG_EVENTS, total_limit=cap)
        if title is not None:
            session.set("letitle", title)
        if user is not None:
            session.set("leuser", _strip_prefix(user, USER_PREFIX))
        if log_type is not None:
            session.set("letype", log_type)

        return self._drain_list(session, "logevents")

    def protected_titles(
        self, cap: int = -1, older_first: bool = False, namespaces: Iterable[int] = ()
    ) -> list[dict[str, Any]]:
        log.info("Fetching a list of protected titles")

        session = self.new_query(qt.PROTECTED_TITLES, total_limit=cap)
        namespaces = list(namespaces)
        if namespaces:
            session.set("ptnamespace", namespaces)
        if older_first:
            session.set("ptdir", DIR_NEWER)

        return self._drain_list(session, "protectedtitles")

    def random_pages(self, cap: int, namespaces: Iterable[int] = ()) -> list[str]:
        if cap <= 0:
            raise ValueError("random_pages needs a positive cap; the random list never ends")
        log.info("Fetching %d random page(s)", cap)

        session = self.new_query(qt.RANDOM, total_limit=cap)
        namespaces = list(namespaces)
        if namespaces:
            session.set("rnnamespace", namespaces)

        return self._drain_titles(session, "random")

    def recent_changes(self, start: datetime, end: datetime) -> list[dict[str, Any]]:
        """Recent changes between `start` and `end`, newest first."""
        log.info("Querying recent changes from %s to %s", start, end)

        # The API enumerates backwards in time: rcstart is the newer bound.
        session = (
            self.new_query(qt.RECENT_CHANGES)
            .set("rcstart", _api_timestamp(end))
            .set("rcend", _api_timestamp(start))
        )
        return self._drain_list(session, "recentchanges")

    def revisions(
        self,
        title: str,
        cap: int = -1,
        older_first: bool = False,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[dict[str, Any]]:
        log.info("Getting revisions from %s", title)

        session = self.new_query(qt.REVISIONS, total_limit=cap).set(qt.TITLES, title)
        if older_first:
            session.set("rvdir", DIR_NEWER)
        if start is not None and end is not None:
            # rvstart is the bound the enumeration begins at.
            first, last = (start, end) if older_first else (end, start)
            session.set("rvstart", _api_timestamp(first)).set("rvend", _api_timestamp(last))

        revisions: list[dict[str, Any]] = []
        for page in session:
            records = page.prop_extract(TITLE, "revisions").get(title)
            if records:
                revisions.extend(records)
        return revisions

    def search(self, query: str, cap: int = -1, namespaces: Iterable[int] = ()) -> list[str]:
        log.info("Searching for %r", query)

        session = self.new_query(qt.SEARCH, total_limit=cap).set("srsearch", query)
        namespaces = list(namespaces)
        if namespaces:
            session.set("srnamespace", namespaces)

        return self._drain_titles(session, "search")

    def user_uploads(self, user: str) -> list[str]:
        log.info("Fetching uploads for %s", user)

        session = self.new_query(qt.USER_UPLOADS).set("aiuser", _strip_prefix(user, USER_PREFIX))
        return self._drain_titles(session, "allimages")

    def query_special_page(self, title: str, cap: int = -1) -> list[str]:
        """Titles listed by a query special page, e.g. "Special:Lonelypages"."""
        log.info("Querying special page %s", title)

        session = self.new_query(qt.QUERY_PAGES, total_limit=cap).set("qppage", _strip_prefix(title, "Special:"))
        titles: list[str] = []
        for page in session:
            results = page.meta_extract("querypage")
            titles.extend(record.get(TITLE) for record in results.get("results") or [])
        return titles

    def allowed_file_exts(self) -> list[str]:
        """File extensions accepted for upload. Not cached."""
        log.info("Fetching a list of permissible file extensions")

        page = self.new_query(qt.ALLOWED_FILE_EXTS).next()
        return [record.get("ext") for record in page.list_extract("fileextensions")] if page else []

    def namespaces(self) -> dict[int, str]:
        """Namespace id -> local name."""
        return dict(self.namespace_table.names)

    @property
    def namespace_table(self) -> NamespaceTable:
        """This wiki's namespaces, fetched once.

        Until the fetch succeeds, lookups fall back to the canonical English names.
        """
        if self._namespace_table is None:
            page = self.new_query(qt.NAMESPACES).next()
            if not page:
                log.warning("Could not load namespaces of %s; using canonical names", self.config.api_endpoint)
                return NamespaceTable.canonical()
            self._namespace_table = NamespaceTable.from_response(page)
        return self._namespace_table

    def which_ns(self, title: str) -> int:
        """Namespace id of `title`; titles without a known prefix are in the main namespace."""
        return self.namespace_table.which(title)

    def nss(self, title: str) -> str:
        """Strip the namespace prefix from `title`."""
        return self.namespace_table.strip(title)

    def get_ns(self, prefix: str) -> int | None:
        """Namespace id for a prefix such as "Category" or "image"; None if it is not a namespace."""
        return self.namespace_table.lookup(prefix)

    def filter_by_ns(self, titles: Iterable[str], *ns_ids: int) -> list[str]:
        return self.namespace_table.filter(titles, ns_ids)

    def convert_if_not_in_ns(self, title: str, ns_id: int) -> str:
        """`title` if it is already in `ns_id`, otherwise its name moved into `ns_id`."""
        table = self.namespace_table
        if table.which(title) == ns_id:
            return title
        converted = table.prefixed(table.strip(title), ns_id)
        if converted is None:
            raise ValueError(f"unknown namespace id {ns_id}")
        return converted

    def talk_page_of(self, title: str) -> str | None:
        """Talk page of `title`; None for special pages and pages that already are talk pages."""
        table = self.namespace_table
        ns_id = table.which(title)
        if ns_id < 0 or ns_id % 2 == 1:
            return None
        return table.prefixed(table.strip(title), ns_id + 1)

    def talk_page_belongs_to(self, title: str) -> str | None:
        """Content page a talk page belongs to; None unless `title` is a talk page."""
        table = self.namespace_table
        ns_id = table.which(title)
        if ns_id < 0 or ns_id % 2 == 0:
            return None
        return table.prefixed(table.strip(title), ns_id - 1)

    def whoami(self) -> str | None:
        page = self.new_query(qt.USER_INFO).next()
        return page.meta_extract("userinfo").get("name") if page else None

    def last_editor(self, title: str) -> str | None:
        revisions = self.revisions(title, cap=1)
        return revisions[0].get("user") if revisions else None

    def page_creator(self, title: str) -> str | None:
        revisions = self.revisions(title, cap=1, older_first=True)
        return revisions[0].get("user") if revisions else None

    # ---- single-title forms of the batched queries ----

    def categories_on_page(self, title: str) -> list[str]:
        log.info("Getting categories of %s", title)
        return multi_query.categories_on_page(self.coordinator, [title])[title]

    def category_size(self, title: str) -> int:
        log.info("Getting category size of %s", title)
        return multi_query.category_size(self.coordinator, [title])[title]

    def page_text(self, title: str) -> str:
        log.info("Getting page text of %s", title)
        return multi_query.page_text(self.coordinator, [title])[title]

    def links_on_page(self, title: str, namespaces: Iterable[int] = ()) -> list[str]:
        log.info("Getting wiki links on %s", title)
        return multi_query.links_on_page(self.coordinator, [title], namespaces)[title]

    def what_links_here(self, title: str, redirects: bool = False) -> list[str]:
        log.info("Getting %s linking to %s", "redirects" if redirects else "links", title)
        return multi_query.links_here(self.coordinator, [title], redirects)[title]

    def what_transcludes_here(self, title: str, namespaces: Iterable[int] = ()) -> list[str]:
        log.info("Getting transclusions of %s", title)
        return multi_query.transcluded_in(self.coordinator, [title], namespaces)[title]

    def file_usage(self, title: str) -> list[str]:
        log.info("Fetching local file usage of %s", title)
        return multi_query.file_usage(self.coordinator, [title])[title]

    def external_links(self, title: str) -> list[str]:
        log.info("Getting external links on %s", title)
        return multi_query.external_links(self.coordinator, [title])[title]

    def exists(self, title: str) -> bool:
        log.info("Checking to see if title exists: %s", title)
        return multi_query.exists(self.coordinator, [title])[title]

    def images_on_page(self, title: str) -> list[str]:
        log.info("Getting files on %s", title)
        return multi_query.images_on_page(self.coordinator, [title])[title]

    def templates_on_page(self, title: str) -> list[str]:
        log.info("Getting templates transcluded on %s", title)
        return multi_query.templates_on_page(self.coordinator, [title])[title]

    def global_usage(self, title: str) -> list[tuple[str, str]]:
        log.info("Getting global usage of %s", title)
        return multi_query.global_usage(self.coordinator, [title])[title]

    def resolve_redirect(self, title: str) -> str:
        log.info("Resolving redirect for %s", title)
        return multi_query.resolve_redirects(self.coordinator, [title])[title]

    def duplicates_of(self, title: str, local_only: bool = False) -> list[str]:
        log.info("Getting duplicates of %s", title)
        return multi_query.duplicates_of(self.coordinator, [title], local_only)[title]

    def shared_duplicates_of(self, title: str) -> list[str]:
        log.info("Getting shared duplicates of %s", title)
        return multi_query.shared_duplicates_of(self.coordinator, [title])[title]

    def text_extract(self, title: str) -> str | None:
        log.info("Getting a text extract for %s", title)
        return multi_query.text_extracts(self.coordinator, [title])[title]

    def image_info(self, title: str) -> list[dict[str, Any]]:
        log.info("Getting image info for %s", title)
        return multi_query.image_info(self.coordinator, [title])[title]

    def user_rights(self, user: str) -> list[str] | None:
        log.info("Getting user rights for %s", user)
        user = _strip_prefix(user, USER_PREFIX)
        return multi_query.user_rights(self.coordinator, [user])[user]

    def close(self) -> None:
        close = getattr(self.client, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> Wiki:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
