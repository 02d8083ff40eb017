from __future__ import annotations

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import IO, Any, Union

from redlining.types import (
    GeoDataset,
    LngLat,
    MultiPolygonRings,
    PolygonRings,
    RedliningFeature,
    Ring,
)

logger = logging.getLogger(__name__)

DatasetSource = Union[str, Path, bytes, IO[bytes]]


def load_dataset(source: DatasetSource) -> GeoDataset:
    """
    Read and parse a redlining GeoJSON FeatureCollection.

    Never raises: any read/decode/shape problem is logged as a warning and an empty
    dataset (flagged `loaded=False`) is returned, so the server keeps running.
    """
    try:
        raw = _read_bytes(source)
        dataset = parse_feature_collection(json.loads(raw))
    except Exception as e:
        logger.warning(
            "Could not load redlining data from %s, serving an empty dataset: %s",
            _describe(source),
            e,
        )
        return GeoDataset.empty(loaded=False)

    logger.info(
        "Loaded redlining data with %d features from %s",
        len(dataset),
        _describe(source),
    )
    return dataset


def serialize_dataset(dataset: GeoDataset) -> str:
    return json.dumps(dataset.to_geojson(), ensure_ascii=False)


def parse_feature_collection(data: Any) -> GeoDataset:
    if not isinstance(data, dict):
        raise ValueError("GeoJSON root must be an object")

    features = data.get("features")
    if features is None:
        features = []
    if not isinstance(features, list):
        raise ValueError("`features` must be a list")

    out = [_parse_feature(f, i) for i, f in enumerate(features)]
    ctype = data.get("type")
    return GeoDataset(
        features=tuple(out),
        type=ctype if isinstance(ctype, str) else "FeatureCollection",
    )


def _parse_feature(feature: Any, i: int) -> RedliningFeature:
    if not isinstance(feature, dict):
        raise ValueError(f"feature {i}: expected an object")

    geometry_type: str | None = None
    rings: MultiPolygonRings | None = None
    geom = feature.get("geometry")
    if geom is not None:
        if not isinstance(geom, dict):
            raise ValueError(f"feature {i}: geometry must be an object")
        geometry_type = _opt_str(geom.get("type"), f"feature {i}: geometry.type")
        coords = geom.get("coordinates")
        if coords is not None:
            if geometry_type == "Polygon":
                rings = (_to_polygon(coords, i),)
            else:
                # MultiPolygon: polygon -> ring -> point
                rings = tuple(_to_polygon(p, i) for p in _as_list(coords, i))

    props = feature.get("properties") or {}
    if not isinstance(props, dict):
        raise ValueError(f"feature {i}: properties must be an object")

    return RedliningFeature(
        geometry_type=geometry_type,
        rings=rings,
        city=_opt_str(props.get("city"), f"feature {i}: city"),
        holc_grade=_opt_str(props.get("holc_grade"), f"feature {i}: holc_grade"),
        description_fields=_to_description_fields(
            props.get("area_description_data"), i
        ),
        feature_type=_opt_str(feature.get("type"), f"feature {i}: type") or "Feature",
    )


def _to_polygon(polygon: Any, i: int) -> PolygonRings:
    return tuple(_to_ring(r, i) for r in _as_list(polygon, i))


def _to_ring(ring: Any, i: int) -> Ring:
    return tuple(_to_point(p, i) for p in _as_list(ring, i))


def _to_point(p: Any, i: int) -> LngLat:
    pt = _as_list(p, i)
    if len(pt) < 2 or not all(_is_number(v) for v in pt[:2]):
        raise ValueError(f"feature {i}: invalid coordinate {p!r}")
    return float(pt[0]), float(pt[1])


def _to_description_fields(data: Any, i: int):
    if data is None:
        return MappingProxyType({})
    if not isinstance(data, dict):
        raise ValueError(f"feature {i}: area_description_data must be an object")
    out: dict[str, str | None] = {}
    for k, v in data.items():
        out[str(k)] = _opt_str(v, f"feature {i}: area_description_data.{k}")
    return MappingProxyType(out)


def _as_list(v: Any, i: int) -> list:
    if not isinstance(v, list):
        raise ValueError(f"feature {i}: malformed coordinates")
    return v


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _opt_str(v: Any, what: str) -> str | None:
    if v is None or isinstance(v, str):
        return v
    raise ValueError(f"{what} must be a string")


def _read_bytes(source: DatasetSource) -> bytes:
    if isinstance(source, bytes):
        return source
    if isinstance(source, (str, Path)):
        return Path(source).read_bytes()
    return source.read()


def _describe(source: DatasetSource) -> str:
    if isinstance(source, (str, Path)):
        return str(source)
    if isinstance(source, bytes):
        return f"<{len(source)} bytes>"
    name = getattr(source, "name", None)
    return str(name) if name else "<stream>"
