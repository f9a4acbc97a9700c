from __future__ import annotations

from response import FlatContinuation, NestedContinuation, ResponseView, parse_continuation
from tests.helpers import prop_reply


def test_prop_extract_maps_title_to_value():
    view = ResponseView(prop_reply({"Foo": {"categoryinfo": {"size": 3}}, "Bar": {"missing": ""}}))

    assert view.prop_extract("title", "categoryinfo") == {"Foo": {"size": 3}, "Bar": None}


def test_prop_extract_undoes_normalization():
    view = ResponseView(
        prop_reply({"Foo bar": {"extract": "Some text"}}, normalized=[("foo bar", "Foo bar")])
    )

    extracted = view.prop_extract("title", "extract")

    assert extracted["foo bar"] == "Some text"
    assert extracted["Foo bar"] == "Some text"
    assert view.normalized_titles == {"foo bar": "Foo bar"}


def test_prop_extract_accepts_formatversion_2_page_lists():
    view = ResponseView(
        {"query": {"pages": [{"pageid": 1, "title": "Foo", "links": [{"ns": 0, "title": "Bar"}]}]}}
    )

    assert view.prop_extract("title", "links") == {"Foo": [{"ns": 0, "title": "Bar"}]}


def test_prop_extract_without_pages_is_empty():
    assert ResponseView({"batchcomplete": ""}).prop_extract("title", "links") == {}
    assert ResponseView({"query": {}}).prop_extract("title", "links") == {}


def test_list_extract():
    records = [{"title": "A"}, {"title": "B"}]
    view = ResponseView({"query": {"categorymembers": records}})

    assert view.list_extract("categorymembers") == records
    assert view.list_extract("allpages") == []
    assert ResponseView({}).list_extract("categorymembers") == []


def test_list_extract_flattens_keyed_objects():
    view = ResponseView({"query": {"namespaces": {"0": {"id": 0, "*": ""}, "6": {"id": 6, "*": "File"}}}})

    assert [record["id"] for record in view.list_extract("namespaces")] == [0, 6]


def test_meta_extract():
    view = ResponseView({"query": {"userinfo": {"id": 0, "name": "127.0.0.1", "anon": ""}}})

    assert view.meta_extract("userinfo")["name"] == "127.0.0.1"
    assert view.meta_extract("tokens") == {}
    assert ResponseView({"error": {"code": "badtoken"}}).meta_extract("userinfo") == {}


def test_normalize_only_touches_known_titles():
    view = ResponseView(prop_reply({"Foo": {}}, normalized=[("foo", "Foo"), ("bar", "Bar")]))

    assert view.normalize({"Foo": 1}) == {"Foo": 1, "foo": 1}


def test_parse_continuation_flat():
    document = {"continue": {"clcontinue": "12|Cats", "continue": "||"}}

    assert parse_continuation(document) == FlatContinuation({"clcontinue": "12|Cats", "continue": "||"})


def test_parse_continuation_nested_prefers_queried_module():
    document = {
        "query-continue": {
            "allpages": {"apcontinue": "B"},
            "categorymembers": {"cmcontinue": "page|42"},
        }
    }

    assert parse_continuation(document, ["categorymembers"]) == NestedContinuation(
        "categorymembers", {"cmcontinue": "page|42"}
    )


def test_parse_continuation_nested_falls_back_to_first_module():
    document = {"query-continue": {"usercontribs": {"ucstart": 20240101}}}

    assert parse_continuation(document, ["allpages"]) == NestedContinuation("usercontribs", {"ucstart": "20240101"})


def test_parse_continuation_none():
    assert parse_continuation({"batchcomplete": "", "query": {}}) is None
    assert parse_continuation({"query-continue": {}}) is None
