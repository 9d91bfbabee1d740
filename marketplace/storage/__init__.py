"""Storage backend factory."""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Any, Protocol

from ..config import ServerConfig
from .in_memory import InMemoryStorage
from .postgres import PostgresStorage


class TransactionalStorage(Protocol):
    def transaction(self) -> AbstractAsyncContextManager[None]:
        """Scope in which every write commits together or not at all."""
        ...


class BidStorage(TransactionalStorage, Protocol):
    async def create_bid(self, record: dict) -> dict: ...

    async def update_bid(self, bid_id: int, updates: dict) -> dict: ...

    async def get_bid(self, bid_id: int) -> dict | None: ...

    async def get_bid_by_hash(self, bid_hash: str) -> dict | None: ...

    async def search_bids(
        self,
        *,
        listing_item_id: int | None = None,
        bidders: list[str] | None = None,
        bid_type: str | None = None,
        descending: bool = False,
    ) -> list[dict]: ...

    async def list_bids(self) -> list[dict]: ...

    async def delete_bid(self, bid_id: int) -> None:
        """Delete the bid and every bid data entry attached to it."""
        ...


class BidDataStorage(Protocol):
    async def create_bid_data(self, record: dict) -> dict: ...

    async def get_bid_data(self, bid_data_id: int) -> dict | None: ...

    async def list_bid_datas(self, bid_id: int) -> list[dict]: ...

    async def delete_bid_data(self, bid_data_id: int) -> None: ...


class AddressStorage(Protocol):
    async def create_address(self, record: dict) -> dict: ...

    async def get_address(self, address_id: int) -> dict | None: ...


class ProfileStorage(Protocol):
    async def create_profile(self, record: dict) -> dict: ...

    async def get_profile(self, profile_id: int) -> dict | None: ...

    async def get_profile_by_address(self, address: str) -> dict | None: ...


class ListingItemStorage(Protocol):
    async def create_listing_item(self, record: dict) -> dict: ...

    async def get_listing_item(self, listing_item_id: int) -> dict | None: ...

    async def get_listing_item_by_hash(self, item_hash: str) -> dict | None: ...

    async def create_listing_item_template(self, record: dict) -> dict: ...

    async def get_listing_item_template(self, template_id: int) -> dict | None: ...


class MarketplaceStorage(
    BidStorage,
    BidDataStorage,
    AddressStorage,
    ProfileStorage,
    ListingItemStorage,
    Protocol,
):
    """Everything the bid services need from a single backend."""


def build_storage(config: ServerConfig) -> MarketplaceStorage:
    backend = config.storage.backend
    options: dict[str, Any] = dict(config.storage.options)
    if backend == "in_memory":
        return InMemoryStorage()
    if backend == "postgres":
        return PostgresStorage(**options)
    raise ValueError(f"unknown storage backend {backend}")
