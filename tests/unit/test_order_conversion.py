"""Tests for deriving an OrderCreateRequest from an accepted bid."""

from __future__ import annotations

from dataclasses import replace

import pytest

from marketplace.enums import AddressType, HashableObjectType, MPAction, OrderItemStatus
from marketplace.exceptions import MessageException
from marketplace.hashing import get_hash
from marketplace.models import Address, Bid, BidData, ListingItem, Profile
from marketplace.orders.conversion import get_order_from_bid


def build_bid(bid_type: MPAction = MPAction.MPA_ACCEPT, **overrides) -> Bid:
    profile = Profile(id=7, name="buyer", address="pmarket-buyer")
    values = {
        "id": 11,
        "type": bid_type,
        "hash": "bid-hash",
        "bidder": "pmarket-buyer",
        "listing_item_id": 3,
        "address_id": 5,
        "listing_item": ListingItem(id=3, hash="item-hash", seller="pmarket-seller"),
        "shipping_address": Address(
            id=5,
            profile_id=7,
            type=AddressType.SHIPPING_BID,
            title="Home",
            first_name="Robin",
            last_name="Doe",
            address_line1="1 Market Street",
            address_line2=None,
            city="Helsinki",
            state="Uusimaa",
            zip_code="00100",
            country="FI",
            profile=profile,
        ),
        "bid_datas": [
            BidData(id=1, bid_id=11, key="size", value="XL"),
            BidData(id=2, bid_id=11, key="colors", value='["red","blue"]'),
            BidData(id=3, bid_id=11, key="gift", value="true"),
        ],
    }
    values.update(overrides)
    return Bid(**values)


class TestGetOrderFromBid:
    def test_accepted_bid_becomes_single_item_order(self):
        bid = build_bid()

        order = get_order_from_bid(bid)

        assert order.buyer == "pmarket-buyer"
        assert order.seller == "pmarket-seller"
        assert len(order.order_items) == 1
        item = order.order_items[0]
        assert item.bid_id == 11
        assert item.item_hash == "item-hash"
        assert item.status == OrderItemStatus.AWAITING_ESCROW
        assert [(o.key, o.value) for o in item.order_item_objects] == [
            (d.key, d.value) for d in bid.bid_datas
        ]

    def test_shipping_address_snapshot(self):
        order = get_order_from_bid(build_bid())

        assert order.address.type == AddressType.SHIPPING_ORDER
        assert order.address.profile_id == 7
        assert order.address.first_name == "Robin"
        assert order.address.address_line1 == "1 Market Street"
        assert order.address.city == "Helsinki"
        assert order.address.zip_code == "00100"
        assert order.address.country == "FI"

    def test_bid_without_bid_datas_has_empty_objects(self):
        order = get_order_from_bid(build_bid(bid_datas=[]))

        assert order.order_items[0].order_item_objects == []

    @pytest.mark.parametrize(
        "bid_type", [MPAction.MPA_BID, MPAction.MPA_REJECT, MPAction.MPA_CANCEL]
    )
    def test_other_actions_are_rejected(self, bid_type):
        bid = build_bid(bid_type)
        before = replace(bid, bid_datas=list(bid.bid_datas))

        with pytest.raises(MessageException, match="Cannot create Order from this MPAction"):
            get_order_from_bid(bid)

        assert bid == before

    def test_missing_relations_are_rejected(self):
        with pytest.raises(MessageException):
            get_order_from_bid(build_bid(listing_item=None))
        with pytest.raises(MessageException):
            get_order_from_bid(build_bid(shipping_address=None))


class TestOrderHash:
    def test_hash_matches_recomputation(self):
        order = get_order_from_bid(build_bid())

        assert len(order.hash) == 64
        assert order.hash == get_hash(order.to_payload(), HashableObjectType.ORDER_CREATEREQUEST)

    def test_hash_is_deterministic(self):
        assert get_order_from_bid(build_bid()).hash == get_order_from_bid(build_bid()).hash

    def test_hash_ignores_existing_hash_field(self):
        order = get_order_from_bid(build_bid())
        payload = order.to_payload()
        payload["hash"] = "something-else"

        assert get_hash(payload, HashableObjectType.ORDER_CREATEREQUEST) == order.hash

    @pytest.mark.parametrize(
        "overrides",
        [
            {"bidder": "pmarket-someone-else"},
            {"listing_item": ListingItem(id=3, hash="item-hash", seller="pmarket-other-seller")},
            {"listing_item": ListingItem(id=3, hash="other-item-hash", seller="pmarket-seller")},
            {"bid_datas": [BidData(id=1, bid_id=11, key="size", value="S")]},
        ],
    )
    def test_changing_a_field_changes_hash(self, overrides):
        baseline = get_order_from_bid(build_bid()).hash

        assert get_order_from_bid(build_bid(**overrides)).hash != baseline

    def test_changing_address_changes_hash(self):
        bid = build_bid()
        moved = build_bid(shipping_address=replace(bid.shipping_address, city="Tampere"))

        assert get_order_from_bid(moved).hash != get_order_from_bid(bid).hash

    def test_hash_is_tagged_by_object_type(self):
        payload = get_order_from_bid(build_bid()).to_payload()

        assert get_hash(payload, HashableObjectType.ORDER_CREATEREQUEST) != get_hash(
            payload, HashableObjectType.BID_CREATEREQUEST
        )
