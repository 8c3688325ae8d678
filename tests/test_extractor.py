"""Tests for request extraction from collection item trees."""

import pytest

from conftest import folder_item, request_item
from postman_graph.core.entities import FolderItem, RequestItem, parse_items
from postman_graph.core.extractor import extract_folders, extract_requests


@pytest.mark.parametrize("items", [None, [], {}, "not-a-list", 42])
def test_extract_non_list_or_empty_returns_empty(items):
    """Absent or non-list input is not an error."""
    assert extract_requests(items) == []


def test_extract_folder_order_and_parent_names():
    """A -> [B(request), C -> [D(request)]] yields B then D with immediate parents."""
    tree = [
        folder_item("A", [
            request_item("b", "B"),
            folder_item("C", [request_item("d", "D")]),
        ])
    ]

    records = extract_requests(tree)

    assert [r.name for r in records] == ["B", "D"]
    assert records[0].parent_folder == "A"
    assert records[1].parent_folder == "C"


def test_extract_top_level_request_has_empty_parent():
    records = extract_requests([request_item("r1", "Root")])
    assert records[0].parent_folder == ""


def test_extract_uses_given_parent_folder():
    records = extract_requests([request_item("r1", "Root")], "Outer")
    assert records[0].parent_folder == "Outer"


def test_extract_counts_leaves_regardless_of_depth():
    """Deeply nested trees are fully flattened."""
    depth = 40
    tree = [request_item("leaf-0", "Leaf 0")]
    for level in range(1, depth + 1):
        tree = [folder_item(f"F{level}", tree), request_item(f"leaf-{level}", f"Leaf {level}")]

    records = extract_requests(tree)

    assert len(records) == depth + 1
    assert records[0].name == "Leaf 0"
    assert records[0].parent_folder == "F1"


def test_url_resolution():
    tree = [
        request_item("1", "plain", url="https://a.example.com"),
        request_item("2", "structured", url={"raw": "https://b.example.com", "host": ["b", "example", "com"]}),
        request_item("3", "structured without raw", url={"host": ["c"]}),
        request_item("4", "missing"),
    ]

    urls = [r.url for r in extract_requests(tree)]

    assert urls == ["https://a.example.com", "https://b.example.com", "No URL", "No URL"]


def test_method_defaults_to_get():
    records = extract_requests([request_item("1", "no method", method=None, url="https://x")])
    assert records[0].method == "GET"


def test_bare_string_request_uses_defaults():
    records = extract_requests([{"id": "s1", "name": "Shorthand", "request": "https://x.example.com"}])
    assert records[0].method == "GET"
    assert records[0].url == "No URL"


def test_items_without_request_or_folder_are_skipped():
    tree = [{"name": "neither"}, None, "junk", request_item("ok", "Valid")]
    records = extract_requests(tree)
    assert [r.id for r in records] == ["ok"]


def test_request_wins_over_item_key():
    """An item with both ``request`` and ``item`` is a request."""
    item = request_item("both", "Both")
    item["item"] = [request_item("inner", "Inner")]

    records = extract_requests([item])

    assert [r.id for r in records] == ["both"]


def test_missing_ids_are_deterministic():
    tree = [folder_item("F", [request_item(None, "anonymous")]), request_item(None, "top")]

    first = extract_requests(tree, scope="c1")
    second = extract_requests(tree, scope="c1")

    assert [r.id for r in first] == [r.id for r in second]
    assert first[0].id != first[1].id
    assert all(r.id.startswith("req_") for r in first)


def test_missing_ids_differ_across_collections():
    tree = [request_item(None, "anonymous")]
    assert extract_requests(tree, scope="c1")[0].id != extract_requests(tree, scope="c2")[0].id


def test_extract_accepts_decoded_items():
    items = parse_items([folder_item("F", [request_item("r", "R")])])
    assert isinstance(items[0], FolderItem)
    assert isinstance(items[0].item[0], RequestItem)

    records = extract_requests(items)

    assert records[0].parent_folder == "F"


def test_record_serializes_parent_folder_in_camel_case():
    record = extract_requests([folder_item("F", [request_item("r", "R")])])[0]
    assert record.model_dump(by_alias=True)["parentFolder"] == "F"


def test_extract_folders_deduplicates_in_first_seen_order():
    tree = [
        folder_item("Auth", [folder_item("Tokens", [request_item("1", "a")])]),
        folder_item("Users", [folder_item("Auth", [])]),
        request_item("2", "b"),
    ]

    assert extract_folders(tree) == ["Auth", "Tokens", "Users"]


def test_extract_folders_non_list():
    assert extract_folders(None) == []


def test_null_names_and_ids_use_defaults():
    tree = [
        {"id": None, "name": None, "item": [{"id": None, "name": None, "request": {"method": None}}]},
    ]

    records = extract_requests(tree, scope="c1")

    assert records[0].name == ""
    assert records[0].parent_folder == ""
    assert records[0].id.startswith("req_")
    assert records[0].method == "GET"


def test_empty_request_object_is_still_a_request():
    records = extract_requests([{"id": "e", "name": "Empty", "request": {}}])
    assert records[0].method == "GET"
    assert records[0].url == "No URL"
