"""Canonical serialization and content hashing."""

from __future__ import annotations

from .canonical_json import canonical_dumps, canonical_hash
from .object_hash import get_hash

__all__ = ["canonical_dumps", "canonical_hash", "get_hash"]
