import pytest
from pipedrive_mcp.core.normalize import is_shape_mismatch, normalize, single_item

DEALS = [{"id": 1, "title": "A"}, {"id": 2, "title": "B"}]


@pytest.mark.parametrize(
    "raw",
    [
        {"success": True, "data": {"data": DEALS}},
        {"success": True, "data": DEALS},
    ],
    ids=["nested-paginated", "bare-array"],
)
def test_normalize_extracts_the_same_items_from_both_shapes(raw):
    collection = normalize(raw)

    assert collection.items == DEALS
    assert collection.empty is False
    assert len(collection) == 2
    assert [d["id"] for d in collection] == [1, 2]


@pytest.mark.parametrize(
    "raw",
    [None, {}, {"data": None}, {"data": {"id": 1}}, {"data": "oops"}, [1, 2]],
)
def test_normalize_degrades_to_empty(raw):
    collection = normalize(raw)

    assert collection.items == []
    assert collection.empty is True


def test_nested_data_wins_over_outer_list_handling():
    raw = {"data": {"data": [{"id": 3}], "items": [{"id": 99}]}}

    assert normalize(raw).items == [{"id": 3}]


def test_non_object_items_are_dropped():
    assert normalize({"data": [{"id": 1}, None, "x", 5]}).items == [{"id": 1}]


def test_empty_list_is_flagged_empty():
    assert normalize({"data": []}).empty is True


def test_pagination_hint_is_carried():
    raw = {
        "data": DEALS,
        "additional_data": {
            "pagination": {"start": 0, "limit": 2, "more_items_in_collection": True}
        },
    }

    collection = normalize(raw)

    assert collection.pagination == {
        "start": 0,
        "limit": 2,
        "more_items_in_collection": True,
    }


def test_cursor_hint_from_nested_envelope():
    raw = {"data": {"data": DEALS, "additional_data": {"next_cursor": "abc"}}}

    assert normalize(raw).pagination == {"next_cursor": "abc"}


def test_shape_mismatch_detection():
    assert is_shape_mismatch({"data": {"id": 1}}) is True
    assert is_shape_mismatch({"data": DEALS}) is False
    assert is_shape_mismatch({"data": {"data": DEALS}}) is False
    assert is_shape_mismatch({"data": None}) is False
    assert is_shape_mismatch({}) is False


def test_single_item():
    assert single_item({"data": {"id": 5}}) == {"id": 5}
    assert single_item({"data": None}) is None
    assert single_item({"data": {}}) is None
    assert single_item({}) is None
    assert single_item(None) is None
