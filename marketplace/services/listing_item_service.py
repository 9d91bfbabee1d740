"""Listing item lookups by id or hash."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ..exceptions import NotFoundException
from ..models import ListingItem, ListingItemTemplate
from ..storage import ListingItemStorage

logger = logging.getLogger(__name__)


@dataclass
class ListingItemService:
    storage: ListingItemStorage

    async def create_template(self, profile_id: int, template_hash: str | None = None) -> ListingItemTemplate:
        record = await self.storage.create_listing_item_template(
            {"profile_id": profile_id, "hash": template_hash}
        )
        return ListingItemTemplate.from_record(record)

    async def create(
        self, item_hash: str, seller: str, listing_item_template_id: int | None = None
    ) -> ListingItem:
        record = await self.storage.create_listing_item(
            {
                "hash": item_hash,
                "seller": seller,
                "listing_item_template_id": listing_item_template_id,
            }
        )
        return await self._hydrate(record, True)

    async def find_one(self, listing_item_id: int, with_related: bool = True) -> ListingItem:
        record = await self.storage.get_listing_item(listing_item_id)
        if record is None:
            logger.warning(f"ListingItem with the id={listing_item_id} was not found!")
            raise NotFoundException(listing_item_id)
        return await self._hydrate(record, with_related)

    async def find_one_by_hash(self, item_hash: str, with_related: bool = True) -> ListingItem:
        record = await self.storage.get_listing_item_by_hash(item_hash)
        if record is None:
            logger.warning(f"ListingItem with the hash={item_hash} was not found!")
            raise NotFoundException(item_hash)
        return await self._hydrate(record, with_related)

    async def _hydrate(self, record: dict[str, Any], with_related: bool) -> ListingItem:
        template = None
        template_id = record.get("listing_item_template_id")
        if with_related and template_id is not None:
            template_record = await self.storage.get_listing_item_template(template_id)
            if template_record:
                template = ListingItemTemplate.from_record(template_record)
        return ListingItem.from_record(record, template=template)
