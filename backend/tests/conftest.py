import json
import sys
from pathlib import Path

import pytest


# Ensure `backend/` is on sys.path so tests can import local modules
# like `redlining.*`, `geo.*`, and `main`.
BACKEND_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BACKEND_ROOT))


def square_feature(
    min_lng: float,
    min_lat: float,
    max_lng: float,
    max_lat: float,
    *,
    city: str | None = "TestCity",
    grade: str | None = "A",
    fields: dict | None = None,
) -> dict:
    ring = [
        [min_lng, min_lat],
        [max_lng, min_lat],
        [max_lng, max_lat],
        [min_lng, max_lat],
        [min_lng, min_lat],
    ]
    props: dict = {"area_description_data": fields or {}}
    if city is not None:
        props["city"] = city
    if grade is not None:
        props["holc_grade"] = grade
    return {
        "type": "Feature",
        "geometry": {"type": "MultiPolygon", "coordinates": [[ring]]},
        "properties": props,
    }


def feature_collection(*features: dict) -> dict:
    return {"type": "FeatureCollection", "features": list(features)}


@pytest.fixture
def housing_geojson() -> dict:
    # Single HOLC area at rectangle (100,0)-(101,1).
    return feature_collection(
        square_feature(
            100.0,
            0.0,
            101.0,
            1.0,
            fields={"key1": "This is test data about housing conditions"},
        )
    )


@pytest.fixture
def housing_file(tmp_path, housing_geojson) -> Path:
    p = tmp_path / "redlining.json"
    p.write_text(json.dumps(housing_geojson), encoding="utf-8")
    return p
