from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Mapping


@dataclass(frozen=True)
class BBox:
    """
    WGS84 bounding box in lat/lng degrees.

    Convention used throughout this repo (matches the query params):
    - minLat, minLng, maxLat, maxLng

    Inverted boxes (min > max) are accepted as-is; they simply contain nothing.
    """

    min_lat: float
    min_lng: float
    max_lat: float
    max_lng: float

    def is_inverted(self) -> bool:
        return self.min_lat > self.max_lat or self.min_lng > self.max_lng

    def contains_point(self, lng: float, lat: float) -> bool:
        # Inclusive on every edge.
        return (
            self.min_lat <= lat <= self.max_lat and self.min_lng <= lng <= self.max_lng
        )

    def cache_key(self, decimals: int = 6) -> str:
        """
        A stable string key for caching bbox-derived query results.

        Coordinates are formatted to a fixed precision, so boxes that only differ
        below that precision share a key.
        """
        return ":".join(
            f"{v:.{decimals}f}"
            for v in (self.min_lat, self.min_lng, self.max_lat, self.max_lng)
        )


WORLD_BBOX = BBox(min_lat=-90.0, min_lng=-180.0, max_lat=90.0, max_lng=180.0)


def parse_coordinate(raw: str | None, default: float) -> float:
    """
    Parse a single numeric query param, falling back to `default`.

    Absent, empty, unparsable and non-finite values all fall back; this never raises.
    """
    if raw is None:
        return default
    s = raw.strip()
    if not s:
        return default
    try:
        v = float(s)
    except ValueError:
        return default
    if not math.isfinite(v):
        return default
    return v


def bbox_from_params(params: Mapping[str, str | None]) -> BBox:
    return BBox(
        min_lat=parse_coordinate(params.get("minLat"), WORLD_BBOX.min_lat),
        min_lng=parse_coordinate(params.get("minLng"), WORLD_BBOX.min_lng),
        max_lat=parse_coordinate(params.get("maxLat"), WORLD_BBOX.max_lat),
        max_lng=parse_coordinate(params.get("maxLng"), WORLD_BBOX.max_lng),
    )
