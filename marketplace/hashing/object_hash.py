"""Content hashes for marketplace objects.

Each hashable type names the fields that take part in its hash. The type tag
is hashed together with the fields so that two different kinds of object
never share a digest even when their selected fields coincide.
"""

from __future__ import annotations

from typing import Any, Mapping

from ..enums import HashableObjectType
from .canonical_json import canonical_hash

HASHED_FIELDS: dict[HashableObjectType, tuple[str, ...]] = {
    HashableObjectType.BID_CREATEREQUEST: (
        "type",
        "bidder",
        "listing_item_id",
        "bid_datas",
        "generated_at",
    ),
    HashableObjectType.ORDER_CREATEREQUEST: (
        "address",
        "order_items",
        "buyer",
        "seller",
    ),
}


def get_hash(payload: Mapping[str, Any], object_type: HashableObjectType) -> str:
    try:
        fields = HASHED_FIELDS[object_type]
    except KeyError as exc:
        raise ValueError(f"no hashing scheme for {object_type}") from exc
    hashable = {name: payload.get(name) for name in fields}
    hashable["object_type"] = object_type.value
    return canonical_hash(hashable)
