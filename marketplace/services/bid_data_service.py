"""Key/value data attached to bids."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import orjson

from ..exceptions import NotFoundException
from ..models import BidData
from ..requests import BidDataCreateRequest
from ..storage import BidDataStorage

logger = logging.getLogger(__name__)


def serialize_value(value: Any) -> str:
    """Bid data values are stored as strings; anything else is JSON encoded."""
    if isinstance(value, str):
        return value
    return orjson.dumps(value).decode()


@dataclass
class BidDataService:
    storage: BidDataStorage

    async def create(self, request: BidDataCreateRequest) -> BidData:
        if request.bid_id is None:
            raise ValueError("bid_id is required")
        record = await self.storage.create_bid_data(
            {
                "bid_id": request.bid_id,
                "key": request.key,
                "value": serialize_value(request.value),
            }
        )
        return BidData.from_record(record)

    async def find_all_by_bid_id(self, bid_id: int) -> list[BidData]:
        return [BidData.from_record(record) for record in await self.storage.list_bid_datas(bid_id)]

    async def destroy(self, bid_data_id: int) -> None:
        try:
            await self.storage.delete_bid_data(bid_data_id)
        except KeyError as exc:
            logger.warning(f"BidData with the id={bid_data_id} was not found!")
            raise NotFoundException(bid_data_id) from exc
