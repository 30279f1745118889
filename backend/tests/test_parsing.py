"""
Tests for tolerant JSON extraction.
"""

import pytest

from trustie.errors import ParseError
from trustie.services.parsing import coerce_count, extract_json_array, extract_json_object


def test_array_inside_code_fence():
    text = 'Here you go:\n```json\n[{"claim": "x"}]\n```'
    assert extract_json_array(text) == [{"claim": "x"}]


def test_does_not_glue_two_arrays():
    assert extract_json_array("[1, 2] and later [3]") == [1, 2]


def test_skips_broken_json():
    assert extract_json_object('{"broken": } then {"ok": true}') == {"ok": True}


def test_object_nested_in_prose():
    text = 'Verdict follows. {"status": "supported", "meta": {"n": 1}} Thanks!'
    assert extract_json_object(text) == {"status": "supported", "meta": {"n": 1}}


@pytest.mark.parametrize("text", ["", "no json here", "[unclosed", "{'single': 'quotes'}"])
def test_no_object_raises(text):
    with pytest.raises(ParseError):
        extract_json_object(text)


def test_array_search_ignores_objects():
    with pytest.raises(ParseError):
        extract_json_array('{"claims": "none"}')


@pytest.mark.parametrize(
    "value, expected",
    [
        (3, 3), ("4", 4), (2.0, 2), (-1, 0), (None, 7), ("many", 7), (True, 7),
        (float("inf"), 7), (float("-inf"), 7), (float("nan"), 7), ("1e999", 7),
    ],
)
def test_coerce_count(value, expected):
    assert coerce_count(value, default=7) == expected


@pytest.mark.parametrize("literal", ["1e999", "Infinity", "-Infinity", "NaN"])
def test_non_finite_json_count_falls_back(literal):
    data = extract_json_object(f'{{"agreementCount": {literal}}}')
    assert coerce_count(data["agreementCount"], default=2) == 2
