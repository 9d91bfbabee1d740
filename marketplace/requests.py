"""Request structures accepted and produced by the bid services.

Incoming requests are parsed leniently with ``from_payload`` and validated
against the JSON schemas in ``marketplace/schemas`` before the services act
on them, so the fields here may hold unvalidated values.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, TypeVar

from .enums import AddressType, MPAction, OrderItemStatus, SearchOrder

_E = TypeVar("_E", bound=Enum)


def _coerce_enum(enum_cls: type[_E], value: Any) -> _E | Any:
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return value


def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


@dataclass
class AddressCreateRequest:
    profile_id: int | None = None
    type: AddressType | None = AddressType.SHIPPING_BID
    title: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    address_line1: str | None = None
    address_line2: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> AddressCreateRequest:
        known = {name: payload.get(name) for name in cls.__dataclass_fields__ if name in payload}
        if "type" in known:
            known["type"] = _coerce_enum(AddressType, known["type"])
        return cls(**known)

    def to_payload(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["type"] = _enum_value(self.type)
        return payload


@dataclass
class BidDataCreateRequest:
    key: str | None = None
    value: Any = None
    bid_id: int | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> BidDataCreateRequest:
        return cls(key=payload.get("key"), value=payload.get("value"), bid_id=payload.get("bid_id"))

    def to_payload(self) -> dict[str, Any]:
        return {"key": self.key, "value": self.value, "bid_id": self.bid_id}


@dataclass
class BidCreateRequest:
    listing_item_id: int | None = None
    bidder: str | None = None
    address: AddressCreateRequest | None = None
    type: MPAction | None = MPAction.MPA_BID
    hash: str | None = None
    bid_datas: list[BidDataCreateRequest] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> BidCreateRequest:
        address = payload.get("address")
        return cls(
            listing_item_id=payload.get("listing_item_id"),
            bidder=payload.get("bidder"),
            address=AddressCreateRequest.from_payload(address) if isinstance(address, dict) else address,
            type=_coerce_enum(MPAction, payload.get("type", MPAction.MPA_BID)),
            hash=payload.get("hash"),
            bid_datas=[
                BidDataCreateRequest.from_payload(item) if isinstance(item, dict) else item
                for item in payload.get("bid_datas") or []
            ],
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "listing_item_id": self.listing_item_id,
            "bidder": self.bidder,
            "address": self.address.to_payload() if isinstance(self.address, AddressCreateRequest) else self.address,
            "type": _enum_value(self.type),
            "hash": self.hash,
            "bid_datas": [
                item.to_payload() if isinstance(item, BidDataCreateRequest) else item
                for item in self.bid_datas
            ],
        }


@dataclass
class BidUpdateRequest:
    type: MPAction | None = None
    hash: str | None = None
    bid_datas: list[BidDataCreateRequest] | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> BidUpdateRequest:
        bid_datas = payload.get("bid_datas")
        if isinstance(bid_datas, list):
            bid_datas = [
                BidDataCreateRequest.from_payload(item) if isinstance(item, dict) else item
                for item in bid_datas
            ]
        return cls(
            type=_coerce_enum(MPAction, payload.get("type")),
            hash=payload.get("hash"),
            bid_datas=bid_datas,
        )

    def to_payload(self) -> dict[str, Any]:
        bid_datas = self.bid_datas
        if isinstance(bid_datas, list):
            bid_datas = [
                item.to_payload() if isinstance(item, BidDataCreateRequest) else item
                for item in bid_datas
            ]
        return {"type": _enum_value(self.type), "hash": self.hash, "bid_datas": bid_datas}


@dataclass
class BidSearchParams:
    listing_item_id: int | None = None
    listing_item_hash: str | None = None
    bidders: list[str] = field(default_factory=list)
    type: MPAction | None = None
    ordering: SearchOrder = SearchOrder.ASC

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> BidSearchParams:
        return cls(
            listing_item_id=payload.get("listing_item_id"),
            listing_item_hash=payload.get("listing_item_hash"),
            bidders=list(payload.get("bidders") or []),
            type=_coerce_enum(MPAction, payload.get("type")),
            ordering=_coerce_enum(SearchOrder, payload.get("ordering") or SearchOrder.ASC),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "listing_item_id": self.listing_item_id,
            "listing_item_hash": self.listing_item_hash,
            "bidders": list(self.bidders),
            "type": _enum_value(self.type),
            "ordering": _enum_value(self.ordering),
        }


@dataclass
class OrderItemObjectCreateRequest:
    key: str
    value: str


@dataclass
class OrderItemCreateRequest:
    bid_id: int
    item_hash: str
    status: OrderItemStatus
    order_item_objects: list[OrderItemObjectCreateRequest] = field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        return {
            "bid_id": self.bid_id,
            "item_hash": self.item_hash,
            "status": self.status.value,
            "order_item_objects": [asdict(obj) for obj in self.order_item_objects],
        }


@dataclass
class OrderCreateRequest:
    address: AddressCreateRequest
    order_items: list[OrderItemCreateRequest]
    buyer: str
    seller: str
    hash: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return {
            "address": self.address.to_payload(),
            "order_items": [item.to_payload() for item in self.order_items],
            "buyer": self.buyer,
            "seller": self.seller,
            "hash": self.hash,
        }
