"""API endpoint tests for the features, bounds and statistics endpoints.

This module covers:
    - 503 responses while the datasets are still loading,
    - Year range query parameters, their defaults and their clamping,
    - The species selector restricting only the active collections,
    - Totals, counts and named top lists from /api/stats.

The filter engine and species directory are built from small in-memory
documents and always injected using dependency overrides.

See Also:
    - backend/treemap/api/features.py for API implementation.
"""

from __future__ import annotations

from typing import Any

import pytest
from fastapi import testclient

from treemap import main
from treemap.api import features
from treemap.data import store as feature_store
from treemap.services import filters, species


def _point(lon: float, **properties: Any) -> dict[str, Any]:
    return {
        "type": "Feature",
        "properties": properties,
        "geometry": {"type": "Point", "coordinates": [lon, 45.5]},
    }


TREES = {
    "type": "FeatureCollection",
    "features": [
        _point(-73.60, sigle="ACSA", essence_fr="Érable", plant_year=1990),
        _point(-73.61, sigle="ACSA", plant_year=1990),
        _point(-73.62, sigle="FRPE", essence_ang="Green ash", plant_year=2001),
        _point(-73.55, sigle="GLTR", plant_year=2005),
    ],
}
REMOVALS = {
    "type": "FeatureCollection",
    "features": [
        _point(-73.58, sp_sigle="FRPE", removal_date="2012-06-01"),
        _point(-73.57, sp_sigle="ACSA", removal_year=2015),
    ],
}


@pytest.fixture
def client() -> testclient.TestClient:
    """Client whose dataset dependencies resolve to a fixed store."""
    store = feature_store.FeatureStore.build(TREES, REMOVALS)
    engine = filters.FilterEngine(store, top_n=10)
    directory = species.SpeciesDirectory(store)
    app = main.create_app()
    app.dependency_overrides[features._get_engine] = lambda: engine
    app.dependency_overrides[features._get_species] = lambda: directory
    return testclient.TestClient(app)


def test_features_unavailable_while_loading() -> None:
    """Every dataset endpoint answers 503 until the store is installed."""
    client = testclient.TestClient(main.create_app())
    for path in ("/api/features", "/api/features/bounds", "/api/stats"):
        response = client.get(path)
        assert response.status_code == 503
        assert response.json()["detail"] == "Datasets are still loading"


def test_features_default_to_full_range(
    client: testclient.TestClient,
) -> None:
    """Without parameters every dated feature is returned."""
    body = client.get("/api/features").json()
    assert body["ranges"] == {"trees": [1990, 2005], "removals": [2012, 2015]}
    assert body["species"] is None
    assert len(body["trees"]["features"]) == 4
    assert len(body["removals"]["features"]) == 2
    assert body["active_trees"] == body["trees"]


def test_features_filtered_by_year(client: testclient.TestClient) -> None:
    response = client.get(
        "/api/features",
        params={
            "plant_min": 1990,
            "plant_max": 2000,
            "fell_min": 2012,
            "fell_max": 2012,
        },
    )
    assert response.status_code == 200
    body = response.json()
    assert len(body["trees"]["features"]) == 2
    assert body["trees"]["type"] == "FeatureCollection"
    (removal,) = body["removals"]["features"]
    assert removal["properties"]["sp_sigle"] == "FRPE"
    assert removal["geometry"] == {
        "type": "Point",
        "coordinates": [-73.58, 45.5],
    }


def test_features_crossed_range_clamped(
    client: testclient.TestClient,
) -> None:
    """A min above max is corrected rather than rejected."""
    body = client.get(
        "/api/features", params={"plant_min": 2005, "plant_max": 1990}
    ).json()
    assert body["ranges"]["trees"] == [1990, 1990]
    assert len(body["trees"]["features"]) == 2


def test_features_species_selector(client: testclient.TestClient) -> None:
    """The species parameter narrows only the active collections."""
    body = client.get("/api/features", params={"species": "FRPE"}).json()
    assert body["species"] == "FRPE"
    assert len(body["trees"]["features"]) == 4
    assert len(body["active_trees"]["features"]) == 1
    assert len(body["active_removals"]["features"]) == 1


def test_features_rejects_non_integer_years(
    client: testclient.TestClient,
) -> None:
    response = client.get("/api/features", params={"plant_min": "soon"})
    assert response.status_code == 422


def test_bounds(client: testclient.TestClient) -> None:
    body = client.get("/api/features/bounds").json()
    assert body == {"bbox": [-73.62, 45.5, -73.55, 45.5]}


def test_bounds_without_trees() -> None:
    engine = filters.FilterEngine(feature_store.FeatureStore.empty())
    app = main.create_app()
    app.dependency_overrides[features._get_engine] = lambda: engine
    client = testclient.TestClient(app)
    assert client.get("/api/features/bounds").json() == {"bbox": None}


def test_stats(client: testclient.TestClient) -> None:
    """Totals and top lists follow the year ranges."""
    body = client.get(
        "/api/stats", params={"plant_min": 1990, "plant_max": 2001}
    ).json()
    assert body["ranges"]["trees"] == [1990, 2001]
    assert body["trees"]["total"] == 3
    assert body["trees"]["counts"] == {"ACSA": 2, "FRPE": 1}
    assert body["trees"]["top"] == [
        {"code": "ACSA", "name": "Érable", "count": 2},
        {"code": "FRPE", "name": "Green ash", "count": 1},
    ]
    assert body["removals"]["total"] == 2


def test_stats_language_and_length(client: testclient.TestClient) -> None:
    body = client.get("/api/stats", params={"lang": "fr", "top": 1}).json()
    assert body["trees"]["top"] == [
        {"code": "ACSA", "name": "Érable", "count": 2}
    ]
    assert len(body["removals"]["top"]) == 1


def test_stats_rejects_unknown_language(
    client: testclient.TestClient,
) -> None:
    assert client.get("/api/stats", params={"lang": "de"}).status_code == 422
    assert client.get("/api/stats", params={"top": -1}).status_code == 422
