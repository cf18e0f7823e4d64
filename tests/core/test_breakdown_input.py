"""Breakdown Input — tests for numbered-content extraction."""

from kondo.core.breakdown_input import extract_breakdown_input


def test_combines_first_section_and_last_line():
    content = "1/ 日本に行きたい\n2/ I want to go to Japan\n3/ I wanna go to Japan"
    assert extract_breakdown_input(content) == "日本に行きたい\nI wanna go to Japan"


def test_multiline_first_section_is_kept():
    content = "1/ line one\nline two\n2/ second\n4/ original"
    assert extract_breakdown_input(content) == "line one\nline two\noriginal"


def test_returns_none_without_numbered_sections():
    assert extract_breakdown_input("just some text") is None
    assert extract_breakdown_input("1/ only one section") is None


def test_returns_none_when_first_section_empty():
    assert extract_breakdown_input("1/   2/ something") is None
