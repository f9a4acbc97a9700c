from __future__ import annotations

from namespaces import NS, NamespaceTable
from response import ResponseView
from tests.helpers import namespace_reply


def test_table_from_siteinfo_reply():
    table = NamespaceTable.from_response(ResponseView(namespace_reply()))

    assert table.names[NS.CATEGORY] == "Category"
    assert table.which("CATEGORY:Fish") == NS.CATEGORY
    assert table.which("category talk:Fish") == NS.CATEGORY_TALK
    assert table.which("Image_talk:A.png") == NS.FILE_TALK


def test_formatversion_2_records_are_read():
    reply = {
        "query": {
            "namespaces": {"0": {"id": 0, "name": ""}, "14": {"id": 14, "name": "Kategoria", "canonical": "Category"}},
            "namespacealiases": [],
        }
    }
    table = NamespaceTable.from_response(ResponseView(reply))

    assert table.which("Kategoria:Ryby") == NS.CATEGORY
    assert table.which("Category:Ryby") == NS.CATEGORY
    assert table.prefixed("Ryby", NS.CATEGORY) == "Kategoria:Ryby"


def test_strip_trims_whitespace_after_the_colon():
    table = NamespaceTable.canonical()

    assert table.strip("Category: Fish") == "Fish"
    assert table.strip("Category:") == ""


def test_titles_that_only_contain_a_colon_stay_in_main():
    table = NamespaceTable.canonical()

    assert table.which("Star Trek: Voyager") == NS.MAIN
    assert table.strip("Star Trek: Voyager") == "Star Trek: Voyager"


def test_prefixed():
    table = NamespaceTable.canonical()

    assert table.prefixed("Foo", NS.MAIN) == "Foo"
    assert table.prefixed("Foo", NS.TEMPLATE) == "Template:Foo"
    assert table.prefixed("Foo", 100) is None


def test_lookup():
    table = NamespaceTable.canonical()

    assert table.lookup("") == NS.MAIN
    assert table.lookup("Main") == NS.MAIN
    assert table.lookup("mediawiki_talk") == NS.MEDIAWIKI_TALK
    assert table.lookup("Portal") is None
