"""
Shared typing utilities for better-nh-energy.

This module defines `JSONLike`, a recursive type alias representing any value that
can be serialized to (or deserialized from) JSON using Python's `json` module.

- `JSONScalar` covers primitive JSON values.
- `JSONLike` allows nested lists and dicts with string keys and JSON-like values.
- `JSONObj` is a JSON object (one serialized supplier plan, one log record, ...).

Examples
--------
Valid:
    {"plan_name": "Fixed 12", "price_per_kwh": 0.1234, "link": None}

Invalid (non-string dict keys, non-JSON types):
    {1: "x"}                     # keys must be str
    {"last_updated": date.today()}  # date is not JSON-serializable by default
"""

from __future__ import annotations

from typing import TypeAlias

JSONScalar: TypeAlias = str | int | float | bool | None
JSONLike: TypeAlias = JSONScalar | list["JSONLike"] | dict[str, "JSONLike"]
JSONObj: TypeAlias = dict[str, JSONLike]

__all__ = ["JSONScalar", "JSONLike", "JSONObj"]
