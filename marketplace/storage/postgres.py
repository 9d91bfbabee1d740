"""Postgres storage backend leveraging asyncpg."""

from __future__ import annotations

from contextlib import asynccontextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, AsyncIterator

import asyncpg
import orjson

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


class PostgresStorage:
    def __init__(self, *, dsn: str | None = None, **connect_kwargs: Any) -> None:
        if not dsn and not connect_kwargs:
            raise ValueError("postgres connection details missing")
        self._dsn = dsn
        self._connect_kwargs = connect_kwargs
        self._pool: asyncpg.Pool | None = None
        self._tx_connection: ContextVar[asyncpg.Connection | None] = ContextVar(
            f"postgres_tx_{id(self)}", default=None
        )

    def _encode(self, payload: dict[str, Any]) -> str:
        return orjson.dumps(payload).decode()

    def _decode(self, value: Any) -> dict[str, Any]:
        if isinstance(value, (bytes, bytearray)):
            value = value.decode()
        if isinstance(value, str):
            return orjson.loads(value)
        return value

    def _row(self, row: asyncpg.Record | None) -> dict[str, Any] | None:
        if not row:
            return None
        return {**self._decode(row["data"]), "id": row["id"]}

    async def _ensure_pool(self) -> asyncpg.Pool:
        if self._pool is None:
            self._pool = await asyncpg.create_pool(dsn=self._dsn, **self._connect_kwargs)
            async with self._pool.acquire() as conn:
                for table in _TABLES:
                    await conn.execute(
                        f"""
                        CREATE TABLE IF NOT EXISTS {table} (
                            id SERIAL PRIMARY KEY,
                            data JSONB NOT NULL
                        );
                        """
                    )
                await conn.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_bids_hash ON bids ((data->>'hash'));
                    CREATE INDEX IF NOT EXISTS idx_bids_listing_item
                    ON bids (((data->>'listing_item_id')::int));
                    CREATE INDEX IF NOT EXISTS idx_bid_datas_bid
                    ON bid_datas (((data->>'bid_id')::int));
                    CREATE INDEX IF NOT EXISTS idx_profiles_address ON profiles ((data->>'address'));
                    CREATE INDEX IF NOT EXISTS idx_listing_items_hash ON listing_items ((data->>'hash'));
                    """
                )
        return self._pool

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[asyncpg.Connection]:
        conn = self._tx_connection.get()
        if conn is not None:
            yield conn
            return
        pool = await self._ensure_pool()
        async with pool.acquire() as conn:
            yield conn

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Bind one pooled connection to the current context inside a transaction."""
        if self._tx_connection.get() is not None:
            yield
            return
        pool = await self._ensure_pool()
        async with pool.acquire() as conn:
            async with conn.transaction():
                token = self._tx_connection.set(conn)
                try:
                    yield
                finally:
                    self._tx_connection.reset(token)

    async def _insert(self, table: str, record: dict[str, Any]) -> dict[str, Any]:
        now = _now()
        data = {**record, "created_at": now, "updated_at": now}
        data.pop("id", None)
        async with self._connection() as conn:
            row = await conn.fetchrow(
                f"INSERT INTO {table}(data) VALUES($1::jsonb) RETURNING id, data",
                self._encode(data),
            )
        return self._row(row)

    async def _get(self, table: str, record_id: int) -> dict[str, Any] | None:
        async with self._connection() as conn:
            row = await conn.fetchrow(f"SELECT id, data FROM {table} WHERE id=$1", record_id)
        return self._row(row)

    async def _find_one(self, table: str, field: str, value: str) -> dict[str, Any] | None:
        async with self._connection() as conn:
            row = await conn.fetchrow(
                f"SELECT id, data FROM {table} WHERE data->>'{field}' = $1 ORDER BY id LIMIT 1",
                value,
            )
        return self._row(row)

    # Bids

    async def create_bid(self, record: dict[str, Any]) -> dict[str, Any]:
        return await self._insert("bids", record)

    async def update_bid(self, bid_id: int, updates: dict[str, Any]) -> dict[str, Any]:
        changes = {k: v for k, v in updates.items() if k not in {"id", "created_at"}}
        changes["updated_at"] = _now()
        async with self._connection() as conn:
            row = await conn.fetchrow(
                "UPDATE bids SET data = data || $2::jsonb WHERE id=$1 RETURNING id, data",
                bid_id,
                self._encode(changes),
            )
        if not row:
            raise KeyError(bid_id)
        return self._row(row)

    async def get_bid(self, bid_id: int) -> dict[str, Any] | None:
        return await self._get("bids", bid_id)

    async def get_bid_by_hash(self, bid_hash: str) -> dict[str, Any] | None:
        return await self._find_one("bids", "hash", bid_hash)

    async def search_bids(
        self,
        *,
        listing_item_id: int | None = None,
        bidders: list[str] | None = None,
        bid_type: str | None = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        conditions: list[str] = []
        params: list[Any] = []
        if listing_item_id is not None:
            params.append(listing_item_id)
            conditions.append(f"(data->>'listing_item_id')::int = ${len(params)}")
        if bidders:
            params.append(list(bidders))
            conditions.append(f"data->>'bidder' = ANY(${len(params)}::text[])")
        if bid_type is not None:
            params.append(bid_type)
            conditions.append(f"data->>'type' = ${len(params)}")
        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        direction = "DESC" if descending else "ASC"
        query = (
            f"SELECT id, data FROM bids {where} "
            f"ORDER BY data->>'created_at' {direction}, id {direction}"
        )
        async with self._connection() as conn:
            rows = await conn.fetch(query, *params)
        return [self._row(row) for row in rows]

    async def list_bids(self) -> list[dict[str, Any]]:
        async with self._connection() as conn:
            rows = await conn.fetch("SELECT id, data FROM bids ORDER BY id")
        return [self._row(row) for row in rows]

    async def delete_bid(self, bid_id: int) -> None:
        async with self.transaction():
            async with self._connection() as conn:
                await conn.execute(
                    "DELETE FROM bid_datas WHERE (data->>'bid_id')::int = $1", bid_id
                )
                status = await conn.execute("DELETE FROM bids WHERE id=$1", bid_id)
        if status == "DELETE 0":
            raise KeyError(bid_id)

    # Bid data

    async def create_bid_data(self, record: dict[str, Any]) -> dict[str, Any]:
        return await self._insert("bid_datas", record)

    async def get_bid_data(self, bid_data_id: int) -> dict[str, Any] | None:
        return await self._get("bid_datas", bid_data_id)

    async def list_bid_datas(self, bid_id: int) -> list[dict[str, Any]]:
        async with self._connection() as conn:
            rows = await conn.fetch(
                "SELECT id, data FROM bid_datas WHERE (data->>'bid_id')::int = $1 ORDER BY id",
                bid_id,
            )
        return [self._row(row) for row in rows]

    async def delete_bid_data(self, bid_data_id: int) -> None:
        async with self._connection() as conn:
            status = await conn.execute("DELETE FROM bid_datas WHERE id=$1", bid_data_id)
        if status == "DELETE 0":
            raise KeyError(bid_data_id)

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
        return await self._find_one("profiles", "address", address)

    # Listing items

    async def create_listing_item(self, record: dict[str, Any]) -> dict[str, Any]:
        return await self._insert("listing_items", record)

    async def get_listing_item(self, listing_item_id: int) -> dict[str, Any] | None:
        return await self._get("listing_items", listing_item_id)

    async def get_listing_item_by_hash(self, item_hash: str) -> dict[str, Any] | None:
        return await self._find_one("listing_items", "hash", item_hash)

    async def create_listing_item_template(self, record: dict[str, Any]) -> dict[str, Any]:
        return await self._insert("listing_item_templates", record)

    async def get_listing_item_template(self, template_id: int) -> dict[str, Any] | None:
        return await self._get("listing_item_templates", template_id)
