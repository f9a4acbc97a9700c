"""Namespace lookups for one wiki.

A `NamespaceTable` is built from the `meta=siteinfo` namespace reply and maps
title prefixes (local names, canonical names and aliases) to namespace ids.
Prefix matching ignores case and treats underscores as spaces, as the wiki
itself does.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from response import ResponseView

SEPARATOR = ":"


class NS(IntEnum):
    """Namespaces every MediaWiki install has. Wikis may define more."""

    MEDIA = -2
    SPECIAL = -1
    MAIN = 0
    TALK = 1
    USER = 2
    USER_TALK = 3
    PROJECT = 4
    PROJECT_TALK = 5
    FILE = 6
    FILE_TALK = 7
    MEDIAWIKI = 8
    MEDIAWIKI_TALK = 9
    TEMPLATE = 10
    TEMPLATE_TALK = 11
    HELP = 12
    HELP_TALK = 13
    CATEGORY = 14
    CATEGORY_TALK = 15


CANONICAL_NAMES: Mapping[int, str] = MappingProxyType(
    {
        NS.MEDIA: "Media",
        NS.SPECIAL: "Special",
        NS.MAIN: "",
        NS.TALK: "Talk",
        NS.USER: "User",
        NS.USER_TALK: "User talk",
        NS.PROJECT: "Project",
        NS.PROJECT_TALK: "Project talk",
        NS.FILE: "File",
        NS.FILE_TALK: "File talk",
        NS.MEDIAWIKI: "MediaWiki",
        NS.MEDIAWIKI_TALK: "MediaWiki talk",
        NS.TEMPLATE: "Template",
        NS.TEMPLATE_TALK: "Template talk",
        NS.HELP: "Help",
        NS.HELP_TALK: "Help talk",
        NS.CATEGORY: "Category",
        NS.CATEGORY_TALK: "Category talk",
    }
)

CANONICAL_ALIASES: Mapping[str, int] = MappingProxyType({"Image": NS.FILE, "Image talk": NS.FILE_TALK})


def _lookup_key(prefix: str) -> str:
    return prefix.replace("_", " ").strip().casefold()


def _record_name(record: Mapping[str, Any]) -> str:
    return str(record.get("*", record.get("name", "")))


@dataclass(frozen=True)
class NamespaceTable:
    names: Mapping[int, str]
    ids: Mapping[str, int]

    @classmethod
    def build(cls, names: Mapping[int, str], aliases: Mapping[str, int]) -> NamespaceTable:
        ids: dict[str, int] = {}
        for alias, ns_id in aliases.items():
            ids[_lookup_key(alias)] = ns_id
        for ns_id, name in names.items():
            if name:
                ids[_lookup_key(name)] = ns_id
        return cls(MappingProxyType(dict(names)), MappingProxyType(ids))

    @classmethod
    def canonical(cls) -> NamespaceTable:
        """Table of the English canonical names, which every wiki accepts."""
        return cls.build(CANONICAL_NAMES, CANONICAL_ALIASES)

    @classmethod
    def from_response(cls, page: ResponseView) -> NamespaceTable:
        names: dict[int, str] = {}
        aliases: dict[str, int] = {}
        for record in page.list_extract("namespaces"):
            ns_id = int(record["id"])
            names[ns_id] = _record_name(record)
            if record.get("canonical"):
                aliases[record["canonical"]] = ns_id
        for record in page.list_extract("namespacealiases"):
            aliases[_record_name(record)] = int(record["id"])
        return cls.build(names, aliases)

    def _split(self, title: str) -> tuple[int, str]:
        prefix, separator, rest = title.partition(SEPARATOR)
        if separator and _lookup_key(prefix) in self.ids:
            return self.ids[_lookup_key(prefix)], rest.lstrip(" _")
        return NS.MAIN, title

    def which(self, title: str) -> int:
        """Namespace id of `title`. Unknown prefixes belong to the main namespace."""
        return self._split(title)[0]

    def strip(self, title: str) -> str:
        """`title` without its namespace prefix."""
        return self._split(title)[1]

    def lookup(self, prefix: str) -> int | None:
        """Namespace id for a prefix given without the colon, or None if it is not one."""
        if not prefix or _lookup_key(prefix) == "main":
            return NS.MAIN
        return self.ids.get(_lookup_key(prefix))

    def prefixed(self, title: str, ns_id: int) -> str | None:
        """`title` (already stripped) placed in namespace `ns_id`; None for unknown ids."""
        name = self.names.get(ns_id)
        if name is None:
            return None
        return f"{name}{SEPARATOR}{title}" if name else title

    def filter(self, titles: Iterable[str], ns_ids: Iterable[int]) -> list[str]:
        wanted = set(ns_ids)
        return [title for title in titles if self.which(title) in wanted]
