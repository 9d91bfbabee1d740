"""Bid lifecycle: lookup, search, create, update, destroy and order conversion."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any

from ..enums import HashableObjectType, MPAction, SearchOrder
from ..exceptions import NotFoundException
from ..hashing import get_hash
from ..models import Bid
from ..orders import get_order_from_bid
from ..requests import (
    BidCreateRequest,
    BidDataCreateRequest,
    BidSearchParams,
    BidUpdateRequest,
    OrderCreateRequest,
)
from ..storage import BidStorage
from ..validation.validator import SchemaRegistry, get_schema_registry
from .address_service import AddressService
from .bid_data_service import BidDataService
from .listing_item_service import ListingItemService
from .profile_service import ProfileService

logger = logging.getLogger(__name__)


@dataclass
class BidService:
    storage: BidStorage
    bid_data_service: BidDataService
    listing_item_service: ListingItemService
    address_service: AddressService
    profile_service: ProfileService
    schemas: SchemaRegistry = field(default_factory=get_schema_registry)

    async def find_all(self) -> list[Bid]:
        return [Bid.from_record(record) for record in await self.storage.list_bids()]

    async def find_one(self, bid_id: int, with_related: bool = True) -> Bid:
        record = await self.storage.get_bid(bid_id)
        if record is None:
            logger.warning(f"Bid with the id={bid_id} was not found!")
            raise NotFoundException(bid_id)
        return await self._to_bid(record, with_related)

    async def find_one_by_hash(self, bid_hash: str, with_related: bool = True) -> Bid:
        record = await self.storage.get_bid_by_hash(bid_hash)
        if record is None:
            logger.warning(f"Bid with the hash={bid_hash} was not found!")
            raise NotFoundException(bid_hash)
        return await self._to_bid(record, with_related)

    async def find_all_by_listing_item_hash(
        self, item_hash: str, with_related: bool = True
    ) -> list[Bid]:
        return await self.search(BidSearchParams(listing_item_hash=item_hash), with_related)

    async def search(self, params: BidSearchParams, with_related: bool = True) -> list[Bid]:
        self.schemas.validate("bid_search_params", params.to_payload())
        listing_item_id = params.listing_item_id
        # if item hash was given, set the item id
        if params.listing_item_hash:
            listing_item = await self.listing_item_service.find_one_by_hash(
                params.listing_item_hash, False
            )
            listing_item_id = listing_item.id
        records = await self.storage.search_bids(
            listing_item_id=listing_item_id,
            bidders=list(params.bidders),
            bid_type=params.type.value if params.type else None,
            descending=params.ordering == SearchOrder.DESC,
        )
        return [await self._to_bid(record, with_related) for record in records]

    async def get_latest_bid(self, listing_item_id: int, bidder: str) -> Bid | None:
        bids = await self.search(
            BidSearchParams(
                listing_item_id=listing_item_id,
                bidders=[bidder],
                ordering=SearchOrder.DESC,
            ),
            True,
        )
        return bids[0] if bids else None

    async def create(self, request: BidCreateRequest) -> Bid:
        self.schemas.validate("bid_create_request", request.to_payload())

        address_request = replace(request.address)
        bid_type = request.type or MPAction.MPA_BID
        bid_hash = request.hash or self._generate_hash(request)

        async with self.storage.transaction():
            # in case there's no profile id, figure it out
            if address_request.profile_id is None:
                address_request.profile_id = await self._resolve_profile_id(request)

            address = await self.address_service.create(address_request)
            record = await self.storage.create_bid(
                {
                    "type": bid_type.value,
                    "hash": bid_hash,
                    "bidder": request.bidder,
                    "listing_item_id": request.listing_item_id,
                    "address_id": address.id,
                }
            )
            await self._create_bid_datas(record["id"], request.bid_datas)

        logger.info(
            f"Created bid id={record['id']} hash={bid_hash} "
            f"for listing item {request.listing_item_id}"
        )
        return await self.find_one(record["id"])

    async def update(self, bid_id: int, request: BidUpdateRequest) -> Bid:
        self.schemas.validate("bid_update_request", request.to_payload())

        async with self.storage.transaction():
            # find the existing one without related
            bid = await self.find_one(bid_id, False)
            bid.type = request.type
            bid.hash = request.hash
            await self.storage.update_bid(bid_id, bid.to_record())

            if request.bid_datas is not None:
                for bid_data in await self.bid_data_service.find_all_by_bid_id(bid_id):
                    await self.bid_data_service.destroy(bid_data.id)
                await self._create_bid_datas(bid_id, request.bid_datas)

        logger.info(f"Updated bid id={bid_id} to type {request.type.value}")
        return await self.find_one(bid_id, True)

    async def destroy(self, bid_id: int) -> None:
        try:
            await self.storage.delete_bid(bid_id)
        except KeyError as exc:
            logger.warning(f"Bid with the id={bid_id} was not found!")
            raise NotFoundException(bid_id) from exc

    def get_order_from_bid(self, bid: Bid) -> OrderCreateRequest:
        return get_order_from_bid(bid)

    async def _resolve_profile_id(self, request: BidCreateRequest) -> int | None:
        bidder_profile = await self.profile_service.find_one_by_address(request.bidder)
        if bidder_profile:
            # we are the bidder
            return bidder_profile.id
        # we are the seller
        try:
            listing_item = await self.listing_item_service.find_one(request.listing_item_id)
        except NotFoundException:
            listing_item = None
        if listing_item and listing_item.template and listing_item.template.profile_id:
            return listing_item.template.profile_id
        logger.warning(
            f"Funny test data bid? It seems we are neither bidder nor the seller "
            f"(bidder={request.bidder}, listing_item_id={request.listing_item_id})."
        )
        return None

    async def _create_bid_datas(
        self, bid_id: int, bid_datas: list[BidDataCreateRequest]
    ) -> None:
        for bid_data in bid_datas:
            await self.bid_data_service.create(replace(bid_data, bid_id=bid_id))

    def _generate_hash(self, request: BidCreateRequest) -> str:
        payload: dict[str, Any] = request.to_payload()
        payload["generated_at"] = datetime.now(timezone.utc).isoformat()
        return get_hash(payload, HashableObjectType.BID_CREATEREQUEST)

    async def _to_bid(self, record: dict[str, Any], with_related: bool) -> Bid:
        if not with_related:
            return Bid.from_record(record)
        try:
            listing_item = await self.listing_item_service.find_one(record["listing_item_id"])
        except NotFoundException:
            listing_item = None
        try:
            shipping_address = await self.address_service.find_one(record["address_id"])
        except NotFoundException:
            shipping_address = None
        bid_datas = await self.bid_data_service.find_all_by_bid_id(record["id"])
        return Bid.from_record(
            record,
            listing_item=listing_item,
            shipping_address=shipping_address,
            bid_datas=bid_datas,
        )
