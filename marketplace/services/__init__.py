"""Bid services wired over a single storage backend."""

from __future__ import annotations

from ..storage import MarketplaceStorage
from .address_service import AddressService
from .bid_data_service import BidDataService
from .bid_service import BidService
from .listing_item_service import ListingItemService
from .profile_service import ProfileService

__all__ = [
    "AddressService",
    "BidDataService",
    "BidService",
    "ListingItemService",
    "ProfileService",
    "build_bid_service",
]


def build_bid_service(storage: MarketplaceStorage) -> BidService:
    """Build a BidService whose collaborators share one backend.

    Sharing the backend is what lets a single ``storage.transaction()`` scope
    cover the address, bid and bid data writes.
    """
    profile_service = ProfileService(storage)
    return BidService(
        storage=storage,
        bid_data_service=BidDataService(storage),
        listing_item_service=ListingItemService(storage),
        address_service=AddressService(storage, profile_service),
        profile_service=profile_service,
    )
