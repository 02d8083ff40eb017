from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response

from cache.lru import QueryCache
from geo.bbox import BBox, bbox_from_params
from geo.filter import filter_by_bbox
from geo.index import GeoIndex, build_geo_index
from redlining.loader import serialize_dataset
from redlining.search import (
    InvalidKeywordError,
    SearchResult,
    normalize_keyword,
    search_features,
)
from redlining.types import GeoDataset

logger = logging.getLogger(__name__)

router = APIRouter()


@dataclass(frozen=True)
class RedliningContext:
    """
    Everything the redlining routes share across requests.

    `dataset` and `index` are read-only after startup; `cache` is the only mutable part
    and does its own locking.
    """

    dataset: GeoDataset | None
    index: GeoIndex | None
    cache: QueryCache


def build_context(dataset: GeoDataset | None, cache: QueryCache) -> RedliningContext:
    index = build_geo_index(dataset) if dataset is not None else None
    return RedliningContext(dataset=dataset, index=index, cache=cache)


def bbox_query_payload(ctx: RedliningContext, aoi: BBox) -> tuple[str, bool]:
    """
    Serialized FeatureCollection for `aoi`, served from the cache when possible.

    Returns (payload, cache_hit).
    """
    key = aoi.cache_key()
    cached = ctx.cache.get(key)
    if cached is not None:
        logger.debug("Cache hit for key %s", key)
        return cached, True

    logger.debug("Cache miss for key %s, filtering data", key)
    filtered = filter_by_bbox(ctx.dataset, aoi, index=ctx.index)  # type: ignore[arg-type]
    payload = serialize_dataset(filtered)
    ctx.cache.put(key, payload)
    return payload, False


def search_response_body(result: SearchResult) -> dict[str, Any]:
    return {
        "result": "success",
        "keyword": result.keyword,
        "matchingFeatures": list(result.matches),
        "totalMatches": result.total,
    }


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"result": "error", "message": message}
    )


def _context(request: Request) -> RedliningContext:
    return request.app.state.redlining


@router.get("/get-redlining-data")
def get_redlining_data(request: Request):
    """
    Features fully contained in the requested box.

    Query params: minLat, minLng, maxLat, maxLng (all optional; missing or bad values
    fall back to the whole world).
    """
    try:
        aoi = bbox_from_params(request.query_params)
        payload, _hit = bbox_query_payload(_context(request), aoi)
        return Response(content=payload, media_type="application/json")
    except Exception as e:
        logger.exception("get-redlining-data failed")
        return error_response(500, str(e))


@router.get("/search-redlining")
def search_redlining(request: Request, keyword: str | None = None):
    try:
        normalize_keyword(keyword)
        ctx = _context(request)
        if ctx.dataset is None:
            return error_response(500, "Failed to get redlining data")
        result = search_features(ctx.dataset, keyword)
    except InvalidKeywordError as e:
        return error_response(400, str(e))
    except Exception as e:
        logger.exception("search-redlining failed")
        return error_response(500, str(e))

    logger.debug("Found %d matches for keyword %r", result.total, result.keyword)
    return search_response_body(result)


@router.get("/cache-stats")
def cache_stats(request: Request):
    return _context(request).cache.stats()
