"""
Tolerant JSON extraction from backend replies.

The backend is asked for JSON but often wraps it in prose or code fences,
or returns something broken. These helpers find the FIRST well-formed JSON
array/object anywhere in the text.

Unlike a greedy regex (\\[[\\s\\S]*\\]), scanning with raw_decode does not
glue together two separate arrays or swallow trailing brackets in prose.

EXAMPLE:
    text = 'Here you go:\\n```json\\n[{"claim": "x"}]\\n```'
    extract_json_array(text)  # → [{"claim": "x"}]
"""

import json

from trustie.errors import ParseError

_decoder = json.JSONDecoder()


def _first_json(text: str, opener: str, kind: type):
    """Return the first value of type `kind` that decodes at an `opener` char."""
    if not text:
        raise ParseError("empty reply")

    start = text.find(opener)
    while start != -1:
        try:
            value, _ = _decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            value = None
        if isinstance(value, kind):
            return value
        start = text.find(opener, start + 1)

    raise ParseError(f"no well-formed JSON {kind.__name__} in reply")


def extract_json_array(text: str) -> list:
    """First well-formed JSON array in `text`. Raises ParseError if none."""
    return _first_json(text, "[", list)


def extract_json_object(text: str) -> dict:
    """First well-formed JSON object in `text`. Raises ParseError if none."""
    return _first_json(text, "{", dict)


def coerce_count(value: object, default: int) -> int:
    """Non-negative int from a loosely typed JSON value ("3", 3.0, 3). Infinity and NaN give `default`."""
    if value is None or isinstance(value, bool):
        return default
    try:
        count = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default
    return max(count, 0)
