"""Canonical JSON form of request payloads, the input to every content hash."""

from __future__ import annotations

import hashlib
from typing import Any

import orjson

_OPTIONS = orjson.OPT_SORT_KEYS | orjson.OPT_STRICT_INTEGER | orjson.OPT_NAIVE_UTC


def canonical_dumps(payload: Any) -> bytes:
    """Compact JSON with sorted keys; equal payloads give equal bytes."""
    return orjson.dumps(payload, option=_OPTIONS)


def canonical_hash(payload: Any) -> str:
    return hashlib.sha256(canonical_dumps(payload)).hexdigest()
