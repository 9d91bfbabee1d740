"""Conversion of an accepted bid into an order creation request."""

from __future__ import annotations

import logging
from typing import Iterable

from ..enums import AddressType, HashableObjectType, MPAction, OrderItemStatus
from ..exceptions import MessageException
from ..hashing import get_hash
from ..models import Bid, BidData
from ..requests import (
    AddressCreateRequest,
    OrderCreateRequest,
    OrderItemCreateRequest,
    OrderItemObjectCreateRequest,
)

logger = logging.getLogger(__name__)


def get_shipping_address(bid: Bid) -> AddressCreateRequest:
    address = bid.shipping_address
    if address is None:
        raise MessageException("Bid is missing its ShippingAddress.")
    profile_id = address.profile.id if address.profile else address.profile_id
    return AddressCreateRequest(
        profile_id=profile_id,
        type=AddressType.SHIPPING_ORDER,
        title=address.title,
        first_name=address.first_name,
        last_name=address.last_name,
        address_line1=address.address_line1,
        address_line2=address.address_line2,
        city=address.city,
        state=address.state,
        zip_code=address.zip_code,
        country=address.country,
    )


def get_order_item_objects(bid_datas: Iterable[BidData]) -> list[OrderItemObjectCreateRequest]:
    return [OrderItemObjectCreateRequest(key=data.key, value=data.value) for data in bid_datas]


def get_order_items(bid: Bid) -> list[OrderItemCreateRequest]:
    if bid.listing_item is None:
        raise MessageException("Bid is missing its ListingItem.")
    # an order holds exactly one order item
    return [
        OrderItemCreateRequest(
            bid_id=bid.id,
            item_hash=bid.listing_item.hash,
            status=OrderItemStatus.AWAITING_ESCROW,
            order_item_objects=get_order_item_objects(bid.bid_datas),
        )
    ]


def get_order_from_bid(bid: Bid) -> OrderCreateRequest:
    """Build the OrderCreateRequest for a fully hydrated MPA_ACCEPT bid."""
    if bid.type != MPAction.MPA_ACCEPT:
        logger.error(f"Bid id={bid.id} has type {bid.type.value}, cannot create Order")
        raise MessageException("Cannot create Order from this MPAction.")

    address = get_shipping_address(bid)
    order_items = get_order_items(bid)
    order_create_request = OrderCreateRequest(
        address=address,
        order_items=order_items,
        buyer=bid.bidder,
        seller=bid.listing_item.seller,
    )
    order_create_request.hash = get_hash(
        order_create_request.to_payload(), HashableObjectType.ORDER_CREATEREQUEST
    )
    return order_create_request
