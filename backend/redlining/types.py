from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping, TypeAlias


LngLat: TypeAlias = tuple[float, float]  # (lng, lat), GeoJSON order
Ring: TypeAlias = tuple[LngLat, ...]
PolygonRings: TypeAlias = tuple[Ring, ...]  # [outer_ring, *holes]
MultiPolygonRings: TypeAlias = tuple[PolygonRings, ...]


def _empty_mapping() -> Mapping[str, str | None]:
    return MappingProxyType({})


@dataclass(frozen=True)
class RedliningFeature:
    """
    One HOLC area polygon.

    `rings` is always stored as a multipolygon (polygon -> ring -> point), even when the
    source geometry was a plain Polygon; `geometry_type` keeps the tag as read so the
    feature serializes back to the same shape. `rings is None` means the feature had no
    geometry at all.
    """

    geometry_type: str | None
    rings: MultiPolygonRings | None
    city: str | None = None
    holc_grade: str | None = None
    description_fields: Mapping[str, str | None] = field(default_factory=_empty_mapping)
    feature_type: str = "Feature"

    def iter_points(self) -> Iterator[LngLat]:
        """Flat traversal over every point of every ring of every polygon."""
        for polygon in self.rings or ():
            for ring in polygon:
                yield from ring

    def to_geojson(self) -> dict[str, Any]:
        geometry: dict[str, Any] | None = None
        if self.rings is not None:
            coords: Any = [
                [[[lng, lat] for lng, lat in ring] for ring in polygon]
                for polygon in self.rings
            ]
            if self.geometry_type == "Polygon":
                coords = coords[0] if coords else []
            geometry = {"type": self.geometry_type, "coordinates": coords}

        props: dict[str, Any] = {}
        if self.city is not None:
            props["city"] = self.city
        if self.holc_grade is not None:
            props["holc_grade"] = self.holc_grade
        props["area_description_data"] = dict(self.description_fields)

        return {"type": self.feature_type, "geometry": geometry, "properties": props}


@dataclass(frozen=True)
class GeoDataset:
    """
    The whole redlining feature collection, loaded once and shared read-only.

    `loaded` is False only for the empty stand-in produced by a failed load.
    """

    features: tuple[RedliningFeature, ...] = ()
    type: str = "FeatureCollection"
    loaded: bool = True

    @classmethod
    def empty(cls, *, loaded: bool = True) -> "GeoDataset":
        return cls(features=(), loaded=loaded)

    def __len__(self) -> int:
        return len(self.features)

    def __iter__(self) -> Iterator[RedliningFeature]:
        return iter(self.features)

    def subset(self, features: Iterable[RedliningFeature]) -> "GeoDataset":
        return GeoDataset(features=tuple(features), type=self.type, loaded=self.loaded)

    def to_geojson(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "features": [f.to_geojson() for f in self.features],
        }
