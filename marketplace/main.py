from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, Query, Request, Response, status
from fastapi.encoders import jsonable_encoder

from .admin import health as admin_health
from .admin import stats as admin_stats
from .config import ServerConfig, get_server_config
from .enums import MPAction, SearchOrder
from .exceptions import MarketplaceError, MessageException, NotFoundException, ValidationException
from .requests import BidCreateRequest, BidSearchParams, BidUpdateRequest
from .services import BidService, build_bid_service
from .storage import build_storage


@asynccontextmanager
async def lifespan(app: FastAPI):
    server_config = get_server_config()
    logging.getLogger("marketplace").setLevel(server_config.logging.level)
    storage = build_storage(server_config)
    bid_service = build_bid_service(storage)

    app.state.server_config = server_config
    app.state.storage = storage
    app.state.bid_service = bid_service
    app.state.start_time = datetime.now(timezone.utc)

    yield

    close = getattr(storage, "close", None)
    if close is not None:
        await close()


app = FastAPI(
    title="Marketplace Bid Service",
    version="1.0.0",
    docs_url="/docs",
    lifespan=lifespan,
)

app.include_router(admin_health.router)
app.include_router(admin_stats.router)


# Dependency helpers ---------------------------------------------------------


def get_server_settings(request: Request) -> ServerConfig:
    return request.app.state.server_config


def get_bid_service(request: Request) -> BidService:
    return request.app.state.bid_service


def http_error(exc: MarketplaceError) -> HTTPException:
    if isinstance(exc, NotFoundException):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ValidationException):
        return HTTPException(status_code=422, detail={"message": str(exc), "errors": exc.errors})
    if isinstance(exc, MessageException):
        return HTTPException(status_code=400, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))


# Routes ---------------------------------------------------------------------


@app.get("/", tags=["meta"])
async def root(settings: ServerConfig = Depends(get_server_settings)) -> dict[str, Any]:
    return {
        "service": "marketplace-bids",
        "version": app.version,
        "storage_backend": settings.storage.backend,
    }


@app.post("/bids", tags=["bids"], status_code=status.HTTP_201_CREATED)
async def create_bid(
    payload: dict[str, Any] = Body(...),
    service: BidService = Depends(get_bid_service),
) -> dict[str, Any]:
    try:
        bid = await service.create(BidCreateRequest.from_payload(payload))
    except MarketplaceError as exc:
        raise http_error(exc) from exc
    return jsonable_encoder(bid)


@app.get("/bids", tags=["bids"])
async def search_bids(
    listing_item_id: int | None = None,
    listing_item_hash: str | None = None,
    bidders: list[str] | None = Query(None),
    bid_type: MPAction | None = Query(None, alias="type"),
    ordering: SearchOrder = SearchOrder.ASC,
    service: BidService = Depends(get_bid_service),
) -> list[dict[str, Any]]:
    params = BidSearchParams(
        listing_item_id=listing_item_id,
        listing_item_hash=listing_item_hash,
        bidders=bidders or [],
        type=bid_type,
        ordering=ordering,
    )
    try:
        bids = await service.search(params)
    except MarketplaceError as exc:
        raise http_error(exc) from exc
    return jsonable_encoder(bids)


@app.get("/bids/hash/{bid_hash}", tags=["bids"])
async def get_bid_by_hash(
    bid_hash: str,
    service: BidService = Depends(get_bid_service),
) -> dict[str, Any]:
    try:
        bid = await service.find_one_by_hash(bid_hash)
    except MarketplaceError as exc:
        raise http_error(exc) from exc
    return jsonable_encoder(bid)


@app.get("/bids/{bid_id}", tags=["bids"])
async def get_bid(
    bid_id: int,
    service: BidService = Depends(get_bid_service),
) -> dict[str, Any]:
    try:
        bid = await service.find_one(bid_id)
    except MarketplaceError as exc:
        raise http_error(exc) from exc
    return jsonable_encoder(bid)


@app.put("/bids/{bid_id}", tags=["bids"])
async def update_bid(
    bid_id: int,
    payload: dict[str, Any] = Body(...),
    service: BidService = Depends(get_bid_service),
) -> dict[str, Any]:
    try:
        bid = await service.update(bid_id, BidUpdateRequest.from_payload(payload))
    except MarketplaceError as exc:
        raise http_error(exc) from exc
    return jsonable_encoder(bid)


@app.delete("/bids/{bid_id}", tags=["bids"], status_code=status.HTTP_204_NO_CONTENT)
async def delete_bid(
    bid_id: int,
    service: BidService = Depends(get_bid_service),
) -> Response:
    try:
        await service.destroy(bid_id)
    except MarketplaceError as exc:
        raise http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.post("/bids/{bid_id}/order", tags=["orders"])
async def order_from_bid(
    bid_id: int,
    service: BidService = Depends(get_bid_service),
) -> dict[str, Any]:
    """Return the OrderCreateRequest derived from an accepted bid.

    The request is not persisted here; order creation belongs to the order
    service that consumes it.
    """
    try:
        bid = await service.find_one(bid_id)
        order_request = service.get_order_from_bid(bid)
    except MarketplaceError as exc:
        raise http_error(exc) from exc
    return order_request.to_payload()


@app.get("/listing-items/{item_hash}/bids", tags=["bids"])
async def listing_item_bids(
    item_hash: str,
    service: BidService = Depends(get_bid_service),
) -> list[dict[str, Any]]:
    try:
        bids = await service.find_all_by_listing_item_hash(item_hash)
    except MarketplaceError as exc:
        raise http_error(exc) from exc
    return jsonable_encoder(bids)


@app.get("/listing-items/{listing_item_id}/bids/latest", tags=["bids"])
async def latest_bid(
    listing_item_id: int,
    bidder: str = Query(...),
    service: BidService = Depends(get_bid_service),
) -> dict[str, Any]:
    try:
        bid = await service.get_latest_bid(listing_item_id, bidder)
    except MarketplaceError as exc:
        raise http_error(exc) from exc
    if bid is None:
        raise HTTPException(
            status_code=404,
            detail=f"no bids from {bidder} on listing item {listing_item_id}",
        )
    return jsonable_encoder(bid)
