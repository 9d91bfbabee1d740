"""Typed views over the stored entity records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .enums import AddressType, MPAction


def _parse_datetime(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@dataclass
class Profile:
    id: int
    name: str | None = None
    address: str | None = None

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Profile:
        return cls(id=record["id"], name=record.get("name"), address=record.get("address"))


@dataclass
class ListingItemTemplate:
    id: int
    hash: str | None = None
    profile_id: int | None = None

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> ListingItemTemplate:
        return cls(id=record["id"], hash=record.get("hash"), profile_id=record.get("profile_id"))


@dataclass
class ListingItem:
    id: int
    hash: str
    seller: str
    listing_item_template_id: int | None = None
    template: ListingItemTemplate | None = None

    @classmethod
    def from_record(
        cls, record: dict[str, Any], template: ListingItemTemplate | None = None
    ) -> ListingItem:
        return cls(
            id=record["id"],
            hash=record["hash"],
            seller=record["seller"],
            listing_item_template_id=record.get("listing_item_template_id"),
            template=template,
        )


@dataclass
class Address:
    id: int
    profile_id: int | None = None
    type: AddressType | None = None
    title: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    address_line1: str | None = None
    address_line2: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    profile: Profile | None = None

    @classmethod
    def from_record(cls, record: dict[str, Any], profile: Profile | None = None) -> Address:
        address_type = record.get("type")
        return cls(
            id=record["id"],
            profile_id=record.get("profile_id"),
            type=AddressType(address_type) if address_type else None,
            title=record.get("title"),
            first_name=record.get("first_name"),
            last_name=record.get("last_name"),
            address_line1=record.get("address_line1"),
            address_line2=record.get("address_line2"),
            city=record.get("city"),
            state=record.get("state"),
            zip_code=record.get("zip_code"),
            country=record.get("country"),
            created_at=_parse_datetime(record.get("created_at")),
            updated_at=_parse_datetime(record.get("updated_at")),
            profile=profile,
        )


@dataclass
class BidData:
    id: int
    bid_id: int
    key: str
    value: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> BidData:
        return cls(
            id=record["id"],
            bid_id=record["bid_id"],
            key=record["key"],
            value=record["value"],
            created_at=_parse_datetime(record.get("created_at")),
            updated_at=_parse_datetime(record.get("updated_at")),
        )


@dataclass
class Bid:
    """A bid against a listing item.

    Relations are only populated when the bid was loaded with
    ``with_related=True``; otherwise ``listing_item`` and ``shipping_address``
    are ``None`` and ``bid_datas`` is empty.
    """

    id: int
    type: MPAction
    hash: str
    bidder: str
    listing_item_id: int
    address_id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
    listing_item: ListingItem | None = None
    shipping_address: Address | None = None
    bid_datas: list[BidData] = field(default_factory=list)

    @classmethod
    def from_record(
        cls,
        record: dict[str, Any],
        *,
        listing_item: ListingItem | None = None,
        shipping_address: Address | None = None,
        bid_datas: list[BidData] | None = None,
    ) -> Bid:
        return cls(
            id=record["id"],
            type=MPAction(record["type"]),
            hash=record["hash"],
            bidder=record["bidder"],
            listing_item_id=record["listing_item_id"],
            address_id=record["address_id"],
            created_at=_parse_datetime(record.get("created_at")),
            updated_at=_parse_datetime(record.get("updated_at")),
            listing_item=listing_item,
            shipping_address=shipping_address,
            bid_datas=list(bid_datas or []),
        )

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "hash": self.hash,
            "bidder": self.bidder,
            "listing_item_id": self.listing_item_id,
            "address_id": self.address_id,
        }
