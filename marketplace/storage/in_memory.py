"""In-memory storage backend for bids and their related records."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from copy import deepcopy
from datetime import datetime, timezone
from typing import Any, AsyncIterator

_TABLES = (
    "bids",
    "bid_datas",
    "addresses",
    "profiles",
    "listing_items",
    "listing_item_templates",
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class InMemoryStorage:
    def __init__(self) -> None:
        self._tables: dict[str, dict[int, dict[str, Any]]] = {name: {} for name in _TABLES}
        self._sequences: dict[str, int] = {name: 0 for name in _TABLES}
        self._lock = asyncio.Lock()
        self._tx_lock = asyncio.Lock()
        self._tx_owner: asyncio.Task | None = None
        self._undo: list[tuple[str, int, dict[str, Any] | None]] = []

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Undo this scope's own writes if it raises.

        Every row the owning task inserts, updates or deletes is logged with its
        previous image; rollback replays the log backwards, leaving writes made
        by other tasks in the meantime untouched. Sequences are not rewound.
        Transactions are serialized; a nested scope in the owning task joins the
        outer one.
        """
        if self._in_transaction():
            yield
            return
        async with self._tx_lock:
            self._tx_owner = asyncio.current_task()
            self._undo = []
            try:
                yield
            except BaseException:
                async with self._lock:
                    self._rollback()
                raise
            finally:
                self._tx_owner = None
                self._undo = []

    def _in_transaction(self) -> bool:
        return self._tx_owner is not None and self._tx_owner is asyncio.current_task()

    def _log_write(self, table: str, record_id: int) -> None:
        # callers hold self._lock
        if self._in_transaction():
            previous = self._tables[table].get(record_id)
            self._undo.append((table, record_id, deepcopy(previous)))

    def _rollback(self) -> None:
        for table, record_id, previous in reversed(self._undo):
            if previous is None:
                self._tables[table].pop(record_id, None)
            else:
                self._tables[table][record_id] = previous

    async def _insert(self, table: str, record: dict[str, Any]) -> dict[str, Any]:
        async with self._lock:
            self._sequences[table] += 1
            now = _now()
            stored = {
                **deepcopy(record),
                "id": self._sequences[table],
                "created_at": now,
                "updated_at": now,
            }
            self._log_write(table, stored["id"])
            self._tables[table][stored["id"]] = stored
            return deepcopy(stored)

    async def _get(self, table: str, record_id: int) -> dict[str, Any] | None:
        async with self._lock:
            record = self._tables[table].get(record_id)
            return deepcopy(record) if record else None

    async def _find_one(self, table: str, **match: Any) -> dict[str, Any] | None:
        async with self._lock:
            for record in self._tables[table].values():
                if all(record.get(key) == value for key, value in match.items()):
                    return deepcopy(record)
            return None

    # Bids

    async def create_bid(self, record: dict[str, Any]) -> dict[str, Any]:
        return await self._insert("bids", record)

    async def update_bid(self, bid_id: int, updates: dict[str, Any]) -> dict[str, Any]:
        async with self._lock:
            if bid_id not in self._tables["bids"]:
                raise KeyError(bid_id)
            changes = {k: deepcopy(v) for k, v in updates.items() if k not in {"id", "created_at"}}
            self._log_write("bids", bid_id)
            self._tables["bids"][bid_id].update(changes, updated_at=_now())
            return deepcopy(self._tables["bids"][bid_id])

    async def get_bid(self, bid_id: int) -> dict[str, Any] | None:
        return await self._get("bids", bid_id)

    async def get_bid_by_hash(self, bid_hash: str) -> dict[str, Any] | None:
        return await self._find_one("bids", hash=bid_hash)

    async def search_bids(
        self,
        *,
        listing_item_id: int | None = None,
        bidders: list[str] | None = None,
        bid_type: str | None = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        async with self._lock:
            matches = [
                record
                for record in self._tables["bids"].values()
                if (listing_item_id is None or record.get("listing_item_id") == listing_item_id)
                and (not bidders or record.get("bidder") in bidders)
                and (bid_type is None or record.get("type") == bid_type)
            ]
            matches.sort(key=lambda record: (record["created_at"], record["id"]), reverse=descending)
            return [deepcopy(record) for record in matches]

    async def list_bids(self) -> list[dict[str, Any]]:
        async with self._lock:
            return [deepcopy(record) for record in self._tables["bids"].values()]

    async def delete_bid(self, bid_id: int) -> None:
        async with self._lock:
            if bid_id not in self._tables["bids"]:
                raise KeyError(bid_id)
            self._log_write("bids", bid_id)
            del self._tables["bids"][bid_id]
            bid_datas = self._tables["bid_datas"]
            for bid_data_id in [k for k, v in bid_datas.items() if v.get("bid_id") == bid_id]:
                self._log_write("bid_datas", bid_data_id)
                del bid_datas[bid_data_id]

    # Bid data

    async def create_bid_data(self, record: dict[str, Any]) -> dict[str, Any]:
        return await self._insert("bid_datas", record)

    async def get_bid_data(self, bid_data_id: int) -> dict[str, Any] | None:
        return await self._get("bid_datas", bid_data_id)

    async def list_bid_datas(self, bid_id: int) -> list[dict[str, Any]]:
        async with self._lock:
            return [
                deepcopy(record)
                for record in sorted(self._tables["bid_datas"].values(), key=lambda r: r["id"])
                if record.get("bid_id") == bid_id
            ]

    async def delete_bid_data(self, bid_data_id: int) -> None:
        async with self._lock:
            if bid_data_id not in self._tables["bid_datas"]:
                raise KeyError(bid_data_id)
            self._log_write("bid_datas", bid_data_id)
            del self._tables["bid_datas"][bid_data_id]

    # Addresses

    async def create_address(self, record: dict[str, Any]) -> dict[str, Any]:
        return await self._insert("addresses", record)

    async def get_address(self, address_id: int) -> dict[str, Any] | None:
        return await self._get("addresses", address_id)

    # Profiles

    async def create_profile(self, record: dict[str, Any]) -> dict[str, Any]:
        return await self._insert("profiles", record)

    async def get_profile(self, profile_id: int) -> dict[str, Any] | None:
        return await self._get("profiles", profile_id)

    async def get_profile_by_address(self, address: str) -> dict[str, Any] | None:
        return await self._find_one("profiles", address=address)

    # Listing items

    async def create_listing_item(self, record: dict[str, Any]) -> dict[str, Any]:
        return await self._insert("listing_items", record)

    async def get_listing_item(self, listing_item_id: int) -> dict[str, Any] | None:
        return await self._get("listing_items", listing_item_id)

    async def get_listing_item_by_hash(self, item_hash: str) -> dict[str, Any] | None:
        return await self._find_one("listing_items", hash=item_hash)

    async def create_listing_item_template(self, record: dict[str, Any]) -> dict[str, Any]:
        return await self._insert("listing_item_templates", record)

    async def get_listing_item_template(self, template_id: int) -> dict[str, Any] | None:
        return await self._get("listing_item_templates", template_id)
