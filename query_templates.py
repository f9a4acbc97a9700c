"""Catalog of MediaWiki `action=query` shapes.

See https://www.mediawiki.org/wiki/API:Query

Each `QueryTemplate` names the query family (`prop`, `list` or `meta`), the
module, the fixed parameters it always sends and, for modules that page their
results, the parameter controlling how many items come back per page.

A parameter whose default is `None` is a placeholder: whoever builds a query
from the template has to fill it in before sending it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Mapping

LIMIT_MAX = "max"
TITLES = "titles"


class QueryFamily(StrEnum):
    prop = "prop"
    list = "list"
    meta = "meta"


@dataclass(frozen=True)
class QueryTemplate:
    """Immutable description of one query shape."""

    family: QueryFamily | None
    module: str | None
    parameters: Mapping[str, str | None] = field(default_factory=dict)
    limit_parameter: str | None = None
    # Where callers look for the answer inside a response.
    result_key: str | None = None
    default_parameters: Mapping[str, str | None] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        defaults: dict[str, str | None] = {}
        if self.family is not None and self.module is not None:
            defaults[str(self.family)] = self.module
        defaults.update(self.parameters)
        if self.limit_parameter is not None:
            defaults[self.limit_parameter] = LIMIT_MAX

        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))
        object.__setattr__(self, "default_parameters", MappingProxyType(defaults))

    @property
    def placeholders(self) -> list[str]:
        """Names of parameters the caller must fill in."""
        return [key for key, value in self.default_parameters.items() if value is None]


ALLOWED_FILE_EXTS = QueryTemplate(
    QueryFamily.meta, "siteinfo", {"siprop": "fileextensions"}, result_key="fileextensions"
)
ALL_PAGES = QueryTemplate(QueryFamily.list, "allpages", limit_parameter="aplimit", result_key="allpages")
CATEGORY_INFO = QueryTemplate(QueryFamily.prop, "categoryinfo", {TITLES: None}, result_key="categoryinfo")
CATEGORY_MEMBERS = QueryTemplate(
    QueryFamily.list, "categorymembers", {"cmtitle": None}, "cmlimit", "categorymembers"
)
NAMESPACES = QueryTemplate(QueryFamily.meta, "siteinfo", {"siprop": "namespaces|namespacealiases"})
DUPLICATE_FILES = QueryTemplate(QueryFamily.prop, "duplicatefiles", {TITLES: None}, "dflimit", "duplicatefiles")
EXISTS = QueryTemplate(QueryFamily.prop, "pageprops", {"ppprop": "missing", TITLES: None}, result_key="missing")
EXTERNAL_LINKS = QueryTemplate(
    QueryFamily.prop, "extlinks", {"elexpandurl": "1", TITLES: None}, "ellimit", "extlinks"
)
FILE_USAGE = QueryTemplate(QueryFamily.prop, "fileusage", {TITLES: None}, "fulimit", "fileusage")
GLOBAL_USAGE = QueryTemplate(QueryFamily.prop, "globalusage", {TITLES: None}, "gulimit", "globalusage")
IMAGES = QueryTemplate(QueryFamily.prop, "images", {TITLES: None}, "imlimit", "images")
IMAGE_INFO = QueryTemplate(
    QueryFamily.prop,
    "imageinfo",
    {"iiprop": "canonicaltitle|url|size|sha1|mime|user|timestamp|comment", TITLES: None},
    "iilimit",
    "imageinfo",
)
LINKS_HERE = QueryTemplate(
    QueryFamily.prop, "linkshere", {"lhprop": "title", "lhshow": None, TITLES: None}, "lhlimit", "linkshere"
)
LINKS_ON_PAGE = QueryTemplate(QueryFamily.prop, "links", {TITLES: None}, "pllimit", "links")
LOG_EVENTS = QueryTemplate(QueryFamily.list, "logevents", limit_parameter="lelimit", result_key="logevents")
PAGE_CATEGORIES = QueryTemplate(QueryFamily.prop, "categories", {TITLES: None}, "cllimit", "categories")
PAGE_TEXT = QueryTemplate(QueryFamily.prop, "revisions", {"rvprop": "content", TITLES: None}, result_key="revisions")
PROTECTED_TITLES = QueryTemplate(
    QueryFamily.list, "protectedtitles", {"ptprop": "timestamp|level|user|comment"}, "ptlimit", "protectedtitles"
)
QUERY_PAGES = QueryTemplate(QueryFamily.list, "querypage", {"qppage": None}, "qplimit", "querypage")
RANDOM = QueryTemplate(QueryFamily.list, "random", {"rnfilterredir": "nonredirects"}, "rnlimit", "random")
RECENT_CHANGES = QueryTemplate(
    QueryFamily.list,
    "recentchanges",
    {"rcprop": "title|timestamp|user|comment", "rctype": "edit|new|log"},
    "rclimit",
    "recentchanges",
)
# Not a module of its own: `redirects` is a flag on the query action.
RESOLVE_REDIRECT = QueryTemplate(None, None, {"redirects": "", TITLES: None}, result_key="redirects")
REVISIONS = QueryTemplate(
    QueryFamily.prop, "revisions", {"rvprop": "timestamp|user|comment|content", TITLES: None}, "rvlimit", "revisions"
)
SEARCH = QueryTemplate(
    QueryFamily.list, "search", {"srprop": "", "srnamespace": "*", "srsearch": None}, "srlimit", "search"
)
TEMPLATES_ON_PAGE = QueryTemplate(
    QueryFamily.prop, "templates", {"tiprop": "title", TITLES: None}, "tllimit", "templates"
)
TEXT_EXTRACTS = QueryTemplate(
    QueryFamily.prop, "extracts", {"exintro": "1", "explaintext": "1", TITLES: None}, "exlimit", "extract"
)
TOKENS_CSRF = QueryTemplate(QueryFamily.meta, "tokens", {"type": "csrf"}, result_key="tokens")
TOKENS_LOGIN = QueryTemplate(QueryFamily.meta, "tokens", {"type": "login"}, result_key="tokens")
TRANSCLUDED_IN = QueryTemplate(
    QueryFamily.prop, "transcludedin", {"tiprop": "title", TITLES: None}, "tilimit", "transcludedin"
)
USER_CONTRIBS = QueryTemplate(QueryFamily.list, "usercontribs", {"ucuser": None}, "uclimit", "usercontribs")
USER_INFO = QueryTemplate(QueryFamily.meta, "userinfo", result_key="userinfo")
USER_RIGHTS = QueryTemplate(QueryFamily.list, "users", {"usprop": "groups", "ususers": None}, result_key="users")
USER_UPLOADS = QueryTemplate(
    QueryFamily.list, "allimages", {"aisort": "timestamp", "aiuser": None}, "ailimit", "allimages"
)


TEMPLATES: Mapping[str, QueryTemplate] = MappingProxyType(
    {
        name: value
        for name, value in sorted(globals().items())
        if isinstance(value, QueryTemplate)
    }
)


def get_template(name: str) -> QueryTemplate:
    """Look up a catalog template by its constant name (case-insensitive)."""

    try:
        return TEMPLATES[name.upper()]
    except KeyError:
        raise KeyError(f"Unknown query template {name!r}; known: {', '.join(TEMPLATES)}") from None
