"""Operational stats endpoint."""

from __future__ import annotations

from collections import Counter
from typing import Any

from fastapi import APIRouter, Depends, Request

from ..services import BidService

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_bid_service(request: Request) -> BidService:
    return request.app.state.bid_service


@router.get("/stats")
async def stats(service: BidService = Depends(_get_bid_service)) -> dict[str, Any]:
    bids = await service.find_all()
    bids_by_type: Counter[str] = Counter(bid.type.value for bid in bids)
    bids_by_listing_item: Counter[int] = Counter(bid.listing_item_id for bid in bids)
    bidders = {bid.bidder for bid in bids}
    return {
        "total_bids": len(bids),
        "unique_bidders": len(bidders),
        "bids_by_type": dict(bids_by_type),
        "bids_by_listing_item": {str(k): v for k, v in bids_by_listing_item.items()},
    }
