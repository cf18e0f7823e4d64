"""Collection Label — tests for post label precedence."""

from kondo.core.collection_label import resolve_post_label

RESERVED = ["all responses", "daily summary", "search"]


def test_first_non_reserved_title_wins():
    label = resolve_post_label(["daily summary", "travel", "food"], RESERVED, "Untitled")
    assert label == "travel"


def test_falls_back_to_first_title_when_all_reserved():
    label = resolve_post_label(["search", "all responses"], RESERVED, "Untitled")
    assert label == "search"


def test_default_label_when_no_collections():
    assert resolve_post_label([], RESERVED, "Untitled") == "Untitled"
