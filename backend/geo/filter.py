from __future__ import annotations

from geo.bbox import BBox
from geo.index import GeoIndex
from redlining.types import GeoDataset, RedliningFeature


def feature_within_bbox(feature: RedliningFeature, aoi: BBox) -> bool:
    """
    Full containment: every point of every ring of every polygon must lie inside `aoi`
    (edges inclusive). A feature straddling the box edge is excluded, not clipped.
    A feature with no geometry is never contained; one whose coordinate list is empty
    has no point outside the box and is.
    """
    if feature.rings is None:
        return False
    for lng, lat in feature.iter_points():
        if not aoi.contains_point(lng, lat):
            return False
    return True


def filter_by_bbox(
    dataset: GeoDataset, aoi: BBox, *, index: GeoIndex | None = None
) -> GeoDataset:
    """
    Subset of `dataset` fully contained in `aoi`, in original feature order.

    With an `index`, only envelope candidates are tested; the result is the same as the
    plain scan.
    """
    features = dataset.features
    if index is not None:
        positions = index.candidates(aoi)
        kept = [features[i] for i in positions if feature_within_bbox(features[i], aoi)]
    else:
        kept = [f for f in features if feature_within_bbox(f, aoi)]
    return dataset.subset(kept)
