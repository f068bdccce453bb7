"""Geometry normalization of raw GeoJSON feature collections.

Tree inventories arrive with a mix of ``Point`` and ``MultiPoint``
geometries. The map and the filter engine only work with single points,
so every raw document is flattened once, at startup, into a
FeatureCollection of NormalizedFeature objects.

Rules:
    - Point: kept when both coordinates are finite numbers.
    - MultiPoint: one feature per finite position, each with its own deep
      copy of the source attributes.
    - Anything else (no geometry, lines, polygons, bad coordinates) is
      dropped silently. This is data cleaning, not an error.

Example:
    Flatten a document with one MultiPoint:
        >>> from treemap.services.normalize import normalize
        >>> doc = {
        ...     "type": "FeatureCollection",
        ...     "features": [{
        ...         "type": "Feature",
        ...         "properties": {"sigle": "ACSA"},
        ...         "geometry": {
        ...             "type": "MultiPoint",
        ...             "coordinates": [[-73.6, 45.5], [-73.5, 45.6]],
        ...         },
        ...     }],
        ... }
        >>> len(normalize(doc))
        2
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any

from treemap.data import models
from treemap.utils import parsing

if TYPE_CHECKING:
    from collections.abc import Iterator


def normalize(doc: Any) -> models.FeatureCollection:
    """Flatten a raw document into single-point features.

    Args:
        doc: Decoded GeoJSON document. None or any malformed value yields
            an empty collection.

    Returns:
        New immutable collection of normalized point features.
    """
    if not isinstance(doc, dict):
        return models.FeatureCollection()
    raw_features = doc.get("features")
    if not isinstance(raw_features, list):
        return models.FeatureCollection()

    features: list[models.NormalizedFeature] = []
    for raw in raw_features:
        if isinstance(raw, dict):
            features.extend(_points_of(raw))
    return models.FeatureCollection(features=tuple(features))


def _points_of(raw: dict[str, Any]) -> Iterator[models.NormalizedFeature]:
    properties = raw.get("properties")
    if not isinstance(properties, dict):
        properties = {}

    match models.parse_geometry(raw.get("geometry")):
        case models.PointGeometry(coordinates=coordinates):
            positions: tuple[Any, ...] = (coordinates,)
        case models.MultiPointGeometry(positions=multi):
            positions = multi
        case models.UnsupportedGeometry() | None:
            positions = ()

    for position in positions:
        pair = parsing.finite_pair(position)
        if pair is None:
            continue
        yield models.NormalizedFeature(
            lon=pair[0],
            lat=pair[1],
            properties=copy.deepcopy(properties),
        )
