"""Year-filtered features and species statistics endpoints.

This module exposes the filter engine over HTTP. The map calls
``/api/features`` whenever the year sliders or the selected species
change and feeds the returned collections to its clustered sources; the
sidebar calls ``/api/stats`` for the "Forest Life" totals and top lists.

Year bounds left out of a request default to the full range of years
present in the data. Bounds are clamped into those years, never
rejected.

Example:
    Trees planted in the nineties, emphasizing sugar maples:
        >>> response = client.get(
        ...     "/api/features",
        ...     params={"plant_min": 1990, "plant_max": 1999,
        ...             "species": "ACSA"},
        ... )
        >>> response.json()["trees"]["type"]
        'FeatureCollection'

    Planted and felled totals with French species names:
        >>> response = client.get("/api/stats", params={"lang": "fr"})
        >>> response.json()["trees"]["top"][0]
        {'code': 'ACSA', 'name': 'Érable à sucre', 'count': 1200}
"""

from typing import Any

import fastapi

from treemap.api import dependencies
from treemap.data import models
from treemap.services import filters, species

router = fastapi.APIRouter(prefix="/api", tags=["features"])


def _get_engine(request: fastapi.Request) -> filters.FilterEngine:
    """Resolve the filter engine built from the loaded datasets."""
    return dependencies.require_loaded(request, "engine")


def _get_species(request: fastapi.Request) -> species.SpeciesDirectory:
    """Resolve the species directory built from the loaded datasets."""
    return dependencies.require_loaded(request, "species")


def _selection(
    engine: filters.FilterEngine,
    plant_min: int | None,
    plant_max: int | None,
    fell_min: int | None,
    fell_max: int | None,
) -> models.RangeSelection:
    """Build a clamped selection, filling missing bounds from the data."""
    default = engine.default_selection()
    requested = models.RangeSelection(
        trees=models.FilterRange(
            min=default.trees.min if plant_min is None else plant_min,
            max=default.trees.max if plant_max is None else plant_max,
        ),
        removals=models.FilterRange(
            min=default.removals.min if fell_min is None else fell_min,
            max=default.removals.max if fell_max is None else fell_max,
        ),
    )
    return engine.clamp(requested)


def _ranges(selection: models.RangeSelection) -> dict[str, list[int]]:
    return {
        "trees": [selection.trees.min, selection.trees.max],
        "removals": [selection.removals.min, selection.removals.max],
    }


@router.get("/features")
async def get_features(
    plant_min: int | None = None,
    plant_max: int | None = None,
    fell_min: int | None = None,
    fell_max: int | None = None,
    species_code: str | None = fastapi.Query(None, alias="species"),
    engine: filters.FilterEngine = fastapi.Depends(_get_engine),  # noqa: B008
) -> dict[str, Any]:
    """Return the in-range trees and removals as GeoJSON.

    Args:
        plant_min: Lowest plant year of trees.
        plant_max: Highest plant year of trees.
        fell_min: Lowest removal year of removals.
        fell_max: Highest removal year of removals.
        species_code: Species code to emphasize. Only the ``active_*``
            collections are restricted by it.
        engine: Filter engine (injected via FastAPI Depends).

    Returns:
        Dictionary with the effective ``ranges``, the selected
        ``species``, and the ``trees``, ``removals``, ``active_trees``
        and ``active_removals`` FeatureCollections.

    Raises:
        HTTPException: If the datasets are still loading (503).
    """
    selection = _selection(engine, plant_min, plant_max, fell_min, fell_max)
    view = engine.apply_range(selection, species=species_code)
    return {
        "ranges": _ranges(selection),
        "species": species_code,
        "trees": view.trees.to_geojson(),
        "removals": view.removals.to_geojson(),
        "active_trees": view.active_trees.to_geojson(),
        "active_removals": view.active_removals.to_geojson(),
    }


@router.get("/features/bounds")
async def get_bounds(
    engine: filters.FilterEngine = fastapi.Depends(_get_engine),  # noqa: B008
) -> dict[str, list[float] | None]:
    """Bounding box of all trees, used for the initial map fit.

    Returns:
        Dictionary containing the bbox as [min_lon, min_lat, max_lon,
        max_lat], or None when no tree was loaded.
    """
    bbox = engine.store.trees.bounds()
    return {"bbox": list(bbox) if bbox is not None else None}


@router.get("/stats")
async def get_stats(
    plant_min: int | None = None,
    plant_max: int | None = None,
    fell_min: int | None = None,
    fell_max: int | None = None,
    lang: species.Language = "en",
    top: int | None = fastapi.Query(None, ge=0),
    engine: filters.FilterEngine = fastapi.Depends(_get_engine),  # noqa: B008
    directory: species.SpeciesDirectory = fastapi.Depends(_get_species),  # noqa: B008
) -> dict[str, Any]:
    """Planted and felled totals with their per-species counts.

    The species selector has no influence here; only the year ranges do.

    Args:
        plant_min: Lowest plant year of trees.
        plant_max: Highest plant year of trees.
        fell_min: Lowest removal year of removals.
        fell_max: Highest removal year of removals.
        lang: Language of species names in the top lists.
        top: Length of the top lists (defaults to the configured top_n).
        engine: Filter engine (injected via FastAPI Depends).
        directory: Species directory (injected via FastAPI Depends).

    Returns:
        Dictionary with the effective ``ranges`` and, for ``trees`` and
        ``removals``, the ``total``, the full ``counts`` tally and the
        named ``top`` list.
    """
    selection = _selection(engine, plant_min, plant_max, fell_min, fell_max)
    stats = engine.compute_stats(selection)
    n = engine.top_n if top is None else top
    result: dict[str, Any] = {"ranges": _ranges(selection)}
    for name in filters.COLLECTIONS:
        collection_stats = stats.for_collection(name)
        result[name] = {
            "total": collection_stats.total,
            "counts": collection_stats.category_counts,
            "top": species.as_dicts(
                directory.named_top(collection_stats, lang, n)
            ),
        }
    return result
