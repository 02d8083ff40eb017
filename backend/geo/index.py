from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from shapely.geometry import box as shapely_box
from shapely.strtree import STRtree

from geo.bbox import BBox
from redlining.types import GeoDataset, RedliningFeature


@dataclass
class GeoIndex:
    """
    Envelope index over a `GeoDataset` for fast bbox candidate selection.

    Notes:
    - Input data is EPSG:4326 (lng/lat degrees); no projection is needed for bbox tests.
    - The tree only narrows candidates by envelope intersection. Exact full-containment
      is still decided per point by `geo.filter.feature_within_bbox`.
    - Features with a geometry but no points have no envelope; they are returned as
      candidates for every box and left to the exact check.
    """

    _tree: STRtree | None = field(default=None, repr=False)
    # tree position -> dataset position
    _positions: list[int] = field(default_factory=list, repr=False)
    _pointless: list[int] = field(default_factory=list, repr=False)

    def candidates(self, aoi: BBox) -> list[int]:
        """Dataset positions that may be contained in `aoi`, in dataset order."""
        out = list(self._pointless)
        if self._tree is not None and not aoi.is_inverted():
            query = shapely_box(aoi.min_lng, aoi.min_lat, aoi.max_lng, aoi.max_lat)
            out.extend(self._positions[i] for i in _to_int_list(self._tree.query(query)))
        return sorted(out)


def build_geo_index(dataset: GeoDataset) -> GeoIndex:
    idx = GeoIndex()
    envelopes = []
    for pos, feature in enumerate(dataset.features):
        if feature.rings is None:
            continue
        env = feature_envelope(feature)
        if env is None:
            idx._pointless.append(pos)
            continue
        min_lng, min_lat, max_lng, max_lat = env
        envelopes.append(shapely_box(min_lng, min_lat, max_lng, max_lat))
        idx._positions.append(pos)
    idx._tree = STRtree(envelopes) if envelopes else None
    return idx


def feature_envelope(
    feature: RedliningFeature,
) -> tuple[float, float, float, float] | None:
    """(min_lng, min_lat, max_lng, max_lat), or None when the feature has no points."""
    it = feature.iter_points()
    first = next(it, None)
    if first is None:
        return None
    min_lng = max_lng = first[0]
    min_lat = max_lat = first[1]
    for lng, lat in it:
        min_lng = min(min_lng, lng)
        max_lng = max(max_lng, lng)
        min_lat = min(min_lat, lat)
        max_lat = max(max_lat, lat)
    return min_lng, min_lat, max_lng, max_lat


def _to_int_list(idxs: Any) -> list[int]:
    # Shapely 2 STRtree returns a numpy array of indices.
    if idxs is None:
        return []
    return [int(i) for i in idxs]
