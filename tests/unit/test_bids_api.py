"""HTTP-level tests for the bid routes."""

from __future__ import annotations

from datetime import datetime, timezone

import httpx
import pytest
import pytest_asyncio

from marketplace.config import LoggingConfig, ServerConfig, StorageConfig
from marketplace.enums import MPAction
from marketplace.main import app
from marketplace.requests import BidUpdateRequest

BIDDER = "pmarket-bidder-address"


def bid_payload(listing_item_id: int, **overrides) -> dict:
    payload = {
        "listing_item_id": listing_item_id,
        "bidder": BIDDER,
        "address": {
            "first_name": "Robin",
            "last_name": "Doe",
            "address_line1": "1 Market Street",
            "city": "Helsinki",
            "zip_code": "00100",
            "country": "FI",
        },
        "bid_datas": [{"key": "size", "value": "XL"}],
    }
    payload.update(overrides)
    return payload


@pytest_asyncio.fixture
async def client(storage, bid_service):
    app.state.server_config = ServerConfig(
        listen={},
        storage=StorageConfig(backend="in_memory", options={}),
        logging=LoggingConfig(level="INFO"),
    )
    app.state.storage = storage
    app.state.bid_service = bid_service
    app.state.start_time = datetime.now(timezone.utc)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


class TestBidRoutes:
    @pytest.mark.asyncio
    async def test_create_and_fetch(self, client, listing_item):
        response = await client.post("/bids", json=bid_payload(listing_item.id))

        assert response.status_code == 201
        body = response.json()
        assert body["type"] == "MPA_BID"
        assert body["bidder"] == BIDDER
        assert body["listing_item"]["hash"] == "listing-item-hash"
        assert [d["key"] for d in body["bid_datas"]] == ["size"]

        fetched = await client.get(f"/bids/{body['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["hash"] == body["hash"]

        by_hash = await client.get(f"/bids/hash/{body['hash']}")
        assert by_hash.json()["id"] == body["id"]

    @pytest.mark.asyncio
    async def test_invalid_body_is_422(self, client, listing_item):
        payload = bid_payload(listing_item.id)
        del payload["bidder"]

        response = await client.post("/bids", json=payload)

        assert response.status_code == 422
        assert response.json()["detail"] == {
            "message": "Request body is not valid",
            "errors": ["bidder missing"],
        }

    @pytest.mark.asyncio
    async def test_float_listing_item_id_is_422(self, client, listing_item, bid_service):
        response = await client.post("/bids", json=bid_payload(float(listing_item.id)))

        assert response.status_code == 422
        assert response.json()["detail"]["errors"][0].startswith("listing_item_id:")
        assert await bid_service.find_all() == []

    @pytest.mark.asyncio
    async def test_unknown_bid_is_404(self, client):
        assert (await client.get("/bids/99")).status_code == 404
        assert (await client.delete("/bids/99")).status_code == 404

    @pytest.mark.asyncio
    async def test_search_and_listing_item_routes(self, client, listing_item):
        first = (await client.post("/bids", json=bid_payload(listing_item.id))).json()
        second = (await client.post("/bids", json=bid_payload(listing_item.id))).json()

        ascending = await client.get("/bids", params={"listing_item_id": listing_item.id})
        assert [bid["id"] for bid in ascending.json()] == [first["id"], second["id"]]

        descending = await client.get(
            "/bids", params={"listing_item_hash": "listing-item-hash", "ordering": "DESC"}
        )
        assert [bid["id"] for bid in descending.json()] == [second["id"], first["id"]]

        by_item = await client.get("/listing-items/listing-item-hash/bids")
        assert len(by_item.json()) == 2

        latest = await client.get(
            f"/listing-items/{listing_item.id}/bids/latest", params={"bidder": BIDDER}
        )
        assert latest.json()["id"] == second["id"]

        nobody = await client.get(
            f"/listing-items/{listing_item.id}/bids/latest", params={"bidder": "nobody"}
        )
        assert nobody.status_code == 404

    @pytest.mark.asyncio
    async def test_update_and_order(self, client, listing_item):
        created = (await client.post("/bids", json=bid_payload(listing_item.id))).json()

        rejected = await client.post(f"/bids/{created['id']}/order")
        assert rejected.status_code == 400

        updated = await client.put(
            f"/bids/{created['id']}", json={"type": "MPA_ACCEPT", "hash": created["hash"]}
        )
        assert updated.status_code == 200
        assert updated.json()["type"] == "MPA_ACCEPT"

        order = await client.post(f"/bids/{created['id']}/order")
        assert order.status_code == 200
        body = order.json()
        assert body["buyer"] == BIDDER
        assert body["address"]["type"] == "SHIPPING_ORDER"
        assert body["order_items"][0]["status"] == "AWAITING_ESCROW"
        assert len(body["hash"]) == 64

    @pytest.mark.asyncio
    async def test_delete(self, client, listing_item, bid_service):
        created = (await client.post("/bids", json=bid_payload(listing_item.id))).json()

        response = await client.delete(f"/bids/{created['id']}")

        assert response.status_code == 204
        assert await bid_service.find_all() == []


class TestAdminRoutes:
    @pytest.mark.asyncio
    async def test_health(self, client):
        body = (await client.get("/admin/health")).json()

        assert body["status"] == "healthy"
        assert body["storage_backend"] == "in_memory"
        assert "bid_create_request" in body["request_schemas"]

    @pytest.mark.asyncio
    async def test_stats(self, client, listing_item, bid_service):
        created = (await client.post("/bids", json=bid_payload(listing_item.id))).json()
        await client.post("/bids", json=bid_payload(listing_item.id, bidder="another-bidder"))
        await bid_service.update(
            created["id"], BidUpdateRequest(type=MPAction.MPA_CANCEL, hash=created["hash"])
        )

        body = (await client.get("/admin/stats")).json()

        assert body["total_bids"] == 2
        assert body["unique_bidders"] == 2
        assert body["bids_by_type"] == {"MPA_CANCEL": 1, "MPA_BID": 1}
        assert body["bids_by_listing_item"] == {str(listing_item.id): 2}
