from urllib.parse import parse_qsl, urlsplit

import pytest
from pydantic import ValidationError

from estimates_mcp.core.clients.estimates import build_query

BASE = "https://fp.example.test/api"


def test_defaults_only():
    query = build_query({}, BASE)
    assert query.query_string == "page=1&itemsPerPage=20"
    assert query.url == f"{BASE}/estimates?page=1&itemsPerPage=20"


def test_none_and_empty_mapping_are_identical():
    assert build_query(None, BASE) == build_query({}, BASE)
    assert build_query(None, BASE).url == build_query({}, BASE).url


def test_filters_appended_in_order():
    query = build_query({"status": "open", "client_id": 42, "archived": False}, BASE)
    assert query.params == [
        ("page", "1"),
        ("itemsPerPage", "20"),
        ("status", "open"),
        ("client_id", "42"),
        ("archived", "false"),
    ]


def test_null_and_empty_values_dropped():
    query = build_query({"status": None, "name": "", "zero": 0, "flag": True}, BASE)
    keys = [key for key, _ in parse_qsl(query.query_string)]
    assert "status" not in keys
    assert "name" not in keys
    assert ("zero", "0") in query.params
    assert ("flag", "true") in query.params


def test_keys_and_values_are_escaped():
    filters = {"project name": "A&B = C", "order[createdAt]": "desc", "note": "é/?"}
    query = build_query(filters, BASE)
    pairs = parse_qsl(urlsplit(query.url).query)
    for key, value in filters.items():
        assert pairs.count((key, value)) == 1
    assert "A&B" not in query.query_string


def test_pagination_filters_replace_defaults():
    query = build_query({"page": 3, "itemsPerPage": 50, "status": "won"}, BASE)
    pairs = parse_qsl(query.query_string)
    assert pairs == [("page", "3"), ("itemsPerPage", "50"), ("status", "won")]


def test_nested_values_serialized_as_json():
    query = build_query({"ids": [1, 2]}, BASE)
    assert ("ids", "[1,2]") in query.params


def test_trailing_slash_on_base_url():
    assert build_query({}, BASE + "/").url == f"{BASE}/estimates?page=1&itemsPerPage=20"


def test_query_is_immutable():
    query = build_query({"status": "open"}, BASE)
    with pytest.raises(ValidationError):
        query.page = "2"


@pytest.mark.parametrize(
    "filters",
    [
        {"a": 1, "b": "two", "c": 3.5},
        {"status": "open", "client": "Ω Corp"},
        {"x": True, "y": False, "z": -7},
    ],
)
def test_every_filter_key_appears_once(filters):
    pairs = parse_qsl(build_query(filters, BASE).query_string)
    for key in filters:
        assert [k for k, _ in pairs].count(key) == 1
