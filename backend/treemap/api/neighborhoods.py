"""Neighborhood livability overlay endpoint.

Example:
    Fetch the overlay colored by noise level:
        >>> response = client.get(
        ...     "/api/neighborhoods", params={"metric": "laeq"}
        ... )
        >>> response.json()["features"][0]["properties"]["metric"]
        'laeq'
"""

from typing import Any

import fastapi

from treemap.api import dependencies
from treemap.data import store as feature_store
from treemap.services import neighborhoods

router = fastapi.APIRouter(prefix="/api/neighborhoods", tags=["neighborhoods"])


def _get_store(request: fastapi.Request) -> feature_store.FeatureStore:
    """Resolve the loaded feature store."""
    return dependencies.require_loaded(request, "store")


@router.get("")
async def get_neighborhoods(
    metric: neighborhoods.Metric = "heat",
    store: feature_store.FeatureStore = fastapi.Depends(_get_store),  # noqa: B008
) -> dict[str, Any]:
    """Return the neighborhood polygons tagged for one metric.

    Args:
        metric: One of "heat", "pm25", "laeq" or "la50".
        store: Feature store (injected via FastAPI Depends).

    Returns:
        GeoJSON FeatureCollection; empty when the neighborhood resource
        failed to load.
    """
    return neighborhoods.with_metric(store.neighborhoods(), metric)
