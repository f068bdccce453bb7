"""Unit tests for treemap.services.pipeline startup loading."""

from __future__ import annotations

import asyncio

import aiohttp
import fake_http

from treemap.core import config
from treemap.services import pipeline, progress

TREES_URL = "http://data.test/trees.geojson"
FELLINGS_URL = "http://data.test/fellings.geojson"
NBHD_URL = "http://data.test/nbhd.geojson"


def _settings() -> config.Settings:
    return config.Settings(
        trees_url=TREES_URL,
        fellings_url=FELLINGS_URL,
        neighborhoods_url=NBHD_URL,
        chunk_size_bytes=32,
    )


def _points(*entries: dict) -> dict:
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": properties,
                "geometry": {
                    "type": "Point",
                    "coordinates": [-73.6 + i * 0.01, 45.5],
                },
            }
            for i, properties in enumerate(entries)
        ],
    }


def _response(document: dict) -> fake_http.FakeResponse:
    payload = fake_http.encode(document)
    return fake_http.FakeResponse(payload, content_length=len(payload))


def test_load_datasets_builds_store() -> None:
    """All three resources load into the store and the tracker closes."""
    nbhd = {"type": "FeatureCollection", "features": []}
    session = fake_http.FakeSession(
        {
            TREES_URL: _response(
                _points({"plant_year": 1990}, {"plant_year": 2001})
            ),
            FELLINGS_URL: _response(_points({"removal_year": 2015})),
            NBHD_URL: _response(nbhd),
        }
    )
    snapshots = []
    tracker = progress.ProgressTracker(listener=snapshots.append)

    store = asyncio.run(
        pipeline.load_datasets(
            _settings(), tracker, session=session  # type: ignore[arg-type]
        )
    )

    assert sorted(session.requested) == sorted(
        [TREES_URL, FELLINGS_URL, NBHD_URL]
    )
    assert len(store.trees) == 2
    assert len(store.removals) == 1
    assert store.neighborhoods() == nbhd
    assert snapshots[-1].done
    assert snapshots[-1].percent == 100.0


def test_failed_resource_becomes_empty_collection() -> None:
    """A source that cannot be fetched leaves its collection empty."""
    session = fake_http.FakeSession(
        {
            TREES_URL: _response(_points({"plant_year": 1990})),
            FELLINGS_URL: aiohttp.ClientConnectionError("unreachable"),
            NBHD_URL: fake_http.FakeResponse(b"<html>"),
        }
    )
    tracker = progress.ProgressTracker()

    store = asyncio.run(
        pipeline.load_datasets(
            _settings(), tracker, session=session  # type: ignore[arg-type]
        )
    )

    assert len(store.trees) == 1
    assert len(store.removals) == 0
    assert store.neighborhoods() is None
    assert tracker.latest.done


def test_all_resources_failing_yields_empty_store() -> None:
    """Total failure still produces a usable, empty store."""
    session = fake_http.FakeSession(
        {
            url: aiohttp.ClientConnectionError("down")
            for url in (TREES_URL, FELLINGS_URL, NBHD_URL)
        }
    )
    tracker = progress.ProgressTracker()

    store = asyncio.run(
        pipeline.load_datasets(
            _settings(), tracker, session=session  # type: ignore[arg-type]
        )
    )

    assert len(store.trees) == 0
    assert len(store.removals) == 0
    assert tracker.latest.done
    assert tracker.latest.indeterminate
