from __future__ import annotations

from fastapi.testclient import TestClient

from api.redlining import RedliningContext
from cache.lru import QueryCache
from main import create_app
from redlining.types import GeoDataset
from settings.config import Settings


def _client(data_path, *, cache: QueryCache | None = None, **kw) -> TestClient:
    app = create_app(Settings(data_path=data_path), cache=cache, **kw)
    return TestClient(app)


def _box(min_lat, min_lng, max_lat, max_lng) -> dict:
    return {"minLat": min_lat, "minLng": min_lng, "maxLat": max_lat, "maxLng": max_lng}


def test_end_to_end_box_cache_and_keyword_flow(housing_file):
    cache = QueryCache()
    client = _client(housing_file, cache=cache)

    resp = client.get("/get-redlining-data", params=_box(0, 100, 1, 101))
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/json")
    data = resp.json()
    assert data["type"] == "FeatureCollection"
    assert len(data["features"]) == 1
    props = data["features"][0]["properties"]
    assert props["city"] == "TestCity"
    assert props["holc_grade"] == "A"
    assert cache.stats()["misses"] == 1
    assert cache.stats()["hits"] == 0

    again = client.get("/get-redlining-data", params=_box(0, 100, 1, 101))
    assert again.text == resp.text
    assert cache.stats()["misses"] == 1
    assert cache.stats()["hits"] == 1

    inner = client.get("/get-redlining-data", params=_box(0.5, 100.5, 0.8, 100.8))
    assert inner.status_code == 200
    assert inner.json()["features"] == []
    assert cache.stats()["misses"] == 2

    search = client.get("/search-redlining", params={"keyword": "housing"})
    assert search.status_code == 200
    assert search.json() == {
        "result": "success",
        "keyword": "housing",
        "matchingFeatures": ["TestCity-A-0"],
        "totalMatches": 1,
    }
    # Keyword queries never touch the cache.
    assert cache.stats()["misses"] == 2
    assert cache.size() == 2


def test_sub_precision_boxes_share_a_cache_entry(housing_file):
    cache = QueryCache()
    client = _client(housing_file, cache=cache)
    client.get("/get-redlining-data", params=_box(0, 100, 1, 101))
    client.get(
        "/get-redlining-data", params=_box("0.0000001", "100.0000004", "1.0", "101.0")
    )
    assert cache.stats()["hits"] == 1
    assert cache.size() == 1


def test_missing_or_bad_params_default_to_the_whole_world(housing_file):
    cache = QueryCache()
    client = _client(housing_file, cache=cache)

    resp = client.get("/get-redlining-data")
    assert resp.status_code == 200
    assert len(resp.json()["features"]) == 1

    bad = client.get(
        "/get-redlining-data",
        params={"minLat": "south", "minLng": "", "maxLat": "90", "maxLng": "x"},
    )
    assert bad.status_code == 200
    assert cache.stats()["hits"] == 1
    assert cache.keys() == ["-90.000000:-180.000000:90.000000:180.000000"]


def test_inverted_box_returns_empty_collection(housing_file):
    client = _client(housing_file)
    resp = client.get("/get-redlining-data", params=_box(1, 101, 0, 100))
    assert resp.status_code == 200
    assert resp.json()["features"] == []


def test_blank_keyword_is_a_client_error(housing_file):
    client = _client(housing_file)
    for params in ({}, {"keyword": ""}, {"keyword": "   "}):
        resp = client.get("/search-redlining", params=params)
        assert resp.status_code == 400
        assert resp.json() == {
            "result": "error",
            "message": "Search keyword is required",
        }


def test_failed_load_serves_empty_results_not_errors(tmp_path):
    client = _client(tmp_path / "missing.json")

    box = client.get("/get-redlining-data")
    assert box.status_code == 200
    assert box.json() == {"type": "FeatureCollection", "features": []}

    search = client.get("/search-redlining", params={"keyword": "housing"})
    assert search.status_code == 200
    assert search.json()["totalMatches"] == 0


def test_no_dataset_attached_is_a_server_error(housing_file):
    app = create_app(Settings(data_path=housing_file))
    app.state.redlining = RedliningContext(dataset=None, index=None, cache=QueryCache())
    client = TestClient(app)

    search = client.get("/search-redlining", params={"keyword": "housing"})
    assert search.status_code == 500
    assert search.json() == {
        "result": "error",
        "message": "Failed to get redlining data",
    }

    box = client.get("/get-redlining-data")
    assert box.status_code == 500
    assert box.json()["result"] == "error"


def test_injected_dataset_skips_file_load(tmp_path):
    client = _client(tmp_path / "never-read.json", dataset=GeoDataset.empty())
    resp = client.get("/get-redlining-data")
    assert resp.json() == {"type": "FeatureCollection", "features": []}


def test_cache_stats_endpoint(housing_file):
    client = _client(housing_file)
    client.get("/get-redlining-data")
    client.get("/get-redlining-data")
    stats = client.get("/cache-stats").json()
    assert stats == {"hits": 1, "misses": 1, "size": 1, "maxSize": 20}


def test_cors_headers_are_sent(housing_file):
    client = _client(housing_file)
    resp = client.get(
        "/get-redlining-data", headers={"Origin": "http://localhost:5173"}
    )
    assert resp.headers.get("access-control-allow-origin") == "*"
