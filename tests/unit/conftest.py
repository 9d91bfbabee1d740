"""Shared fixtures for the bid service tests."""

from __future__ import annotations

from typing import Any

import pytest
import pytest_asyncio

from marketplace.requests import AddressCreateRequest, BidCreateRequest, BidDataCreateRequest
from marketplace.services import BidService, build_bid_service
from marketplace.storage.in_memory import InMemoryStorage

SELLER = "pmarket-seller-address"
BIDDER = "pmarket-bidder-address"


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def bid_service(storage) -> BidService:
    return build_bid_service(storage)


@pytest_asyncio.fixture
async def seller_profile(bid_service):
    return await bid_service.profile_service.create("seller", SELLER)


@pytest_asyncio.fixture
async def listing_item(bid_service, seller_profile):
    template = await bid_service.listing_item_service.create_template(
        seller_profile.id, "template-hash"
    )
    return await bid_service.listing_item_service.create(
        "listing-item-hash", SELLER, template.id
    )


def make_address(**overrides: Any) -> AddressCreateRequest:
    values: dict[str, Any] = {
        "title": "Home",
        "first_name": "Robin",
        "last_name": "Doe",
        "address_line1": "1 Market Street",
        "address_line2": "Flat 2",
        "city": "Helsinki",
        "state": "Uusimaa",
        "zip_code": "00100",
        "country": "FI",
    }
    values.update(overrides)
    return AddressCreateRequest(**values)


def make_create_request(listing_item_id: int | None, /, **overrides: Any) -> BidCreateRequest:
    values: dict[str, Any] = {
        "listing_item_id": listing_item_id,
        "bidder": BIDDER,
        "address": make_address(),
        "bid_datas": [
            BidDataCreateRequest(key="size", value="XL"),
            BidDataCreateRequest(key="colors", value=["red", "blue"]),
        ],
    }
    values.update(overrides)
    return BidCreateRequest(**values)


@pytest.fixture
def address_factory():
    return make_address


@pytest.fixture
def create_request_factory():
    return make_create_request
