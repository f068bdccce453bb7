"""Data models for normalized features, filters and statistics.

This module defines the core data structures shared by the ingestion
pipeline and the filter engine. Raw documents stay plain dictionaries;
everything derived from them is a small dataclass.

Geometry coming from a raw feature is parsed into a tagged variant
(PointGeometry, MultiPointGeometry or UnsupportedGeometry) so the
normalizer can dispatch on it with ``match``.

Example:
    Build a point feature and a range:
        >>> from treemap.data.models import NormalizedFeature, FilterRange
        >>> tree = NormalizedFeature(
        ...     lon=-73.6,
        ...     lat=45.52,
        ...     properties={"sigle": "ACSA", "plant_year": 1990},
        ... )
        >>> FilterRange(2010, 1990).clamp(FilterRange(1950, 2025))
        FilterRange(min=1990, max=1990)
"""

from __future__ import annotations

import copy
import dataclasses
import math
import types
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

BBox = tuple[float, float, float, float]
RawDocument = dict[str, Any]
CollectionName = Literal["trees", "removals"]

UNKNOWN_CATEGORY = "Unknown"
DEFAULT_TOP_N = 10


@dataclasses.dataclass(frozen=True)
class PointGeometry:
    """GeoJSON ``Point``; coordinates are kept exactly as received."""

    coordinates: Any


@dataclasses.dataclass(frozen=True)
class MultiPointGeometry:
    """GeoJSON ``MultiPoint``; positions are kept exactly as received."""

    positions: tuple[Any, ...]


@dataclasses.dataclass(frozen=True)
class UnsupportedGeometry:
    """Any other geometry kind (lines, polygons, unknown tags)."""

    kind: str | None


Geometry = PointGeometry | MultiPointGeometry | UnsupportedGeometry


def parse_geometry(raw: Any) -> Geometry | None:
    """Parse a raw GeoJSON geometry object into the tagged variant.

    Args:
        raw: The ``geometry`` member of a raw feature.

    Returns:
        The matching variant, or None when the feature has no geometry.
    """
    if not isinstance(raw, dict):
        return None
    kind = raw.get("type")
    coordinates = raw.get("coordinates")
    if kind == "Point":
        return PointGeometry(coordinates=coordinates)
    if kind == "MultiPoint":
        if not isinstance(coordinates, list | tuple):
            return MultiPointGeometry(positions=())
        return MultiPointGeometry(positions=tuple(coordinates))
    return UnsupportedGeometry(kind=kind if isinstance(kind, str) else None)


@dataclasses.dataclass(frozen=True)
class NormalizedFeature:
    """A single point with the attributes copied from its source feature.

    Attributes:
        lon: Longitude, always finite.
        lat: Latitude, always finite.
        properties: Read-only view of this feature's own copy of the
            source attributes. Filtered collections share features with
            the store, so attributes cannot be reassigned through them.
    """

    lon: float
    lat: float
    properties: Mapping[str, Any] = dataclasses.field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.properties, types.MappingProxyType):
            frozen = types.MappingProxyType(dict(self.properties))
            object.__setattr__(self, "properties", frozen)

    def to_geojson(self) -> dict[str, Any]:
        """Render the feature as a GeoJSON Point ``Feature``."""
        return {
            "type": "Feature",
            "properties": copy.deepcopy(dict(self.properties)),
            "geometry": {"type": "Point", "coordinates": [self.lon, self.lat]},
        }


@dataclasses.dataclass(frozen=True)
class FeatureCollection:
    """Immutable, ordered collection of normalized point features."""

    features: tuple[NormalizedFeature, ...] = ()

    def __len__(self) -> int:
        return len(self.features)

    def __iter__(self) -> Iterator[NormalizedFeature]:
        return iter(self.features)

    def to_geojson(self) -> dict[str, Any]:
        """Render the collection as a GeoJSON ``FeatureCollection``."""
        return {
            "type": "FeatureCollection",
            "features": [feature.to_geojson() for feature in self.features],
        }

    def bounds(self) -> BBox | None:
        """Compute ``(min_lon, min_lat, max_lon, max_lat)``.

        Returns:
            The bounding box, or None for an empty collection.
        """
        if not self.features:
            return None
        lons = [feature.lon for feature in self.features]
        lats = [feature.lat for feature in self.features]
        return (min(lons), min(lats), max(lons), max(lats))


@dataclasses.dataclass(frozen=True)
class FilterRange:
    """Inclusive integer year bounds.

    Attributes:
        min: Lowest accepted year.
        max: Highest accepted year.
    """

    min: int
    max: int

    def contains(self, year: int) -> bool:
        return self.min <= year <= self.max

    def clamp(self, domain: FilterRange | None = None) -> FilterRange:
        """Return a valid range, correcting instead of rejecting input.

        Both bounds are first pulled into ``domain`` (when given), then
        ``min`` is lowered to ``max`` if they cross.

        Args:
            domain: Outer bounds the result must lie within.

        Returns:
            A range with ``min <= max``.
        """
        low, high = self.min, self.max
        if domain is not None:
            low = max(domain.min, min(low, domain.max))
            high = max(domain.min, min(high, domain.max))
        low = min(low, high)
        return FilterRange(min=low, max=high)


@dataclasses.dataclass(frozen=True)
class RangeSelection:
    """The current year range of each collection.

    Attributes:
        trees: Plant-year range applied to the trees collection.
        removals: Removal-year range applied to the removals collection.
    """

    trees: FilterRange
    removals: FilterRange

    def for_collection(self, name: CollectionName) -> FilterRange:
        return self.trees if name == "trees" else self.removals


@dataclasses.dataclass(frozen=True)
class FilteredView:
    """Collections derived from one range/species selection.

    ``trees`` and ``removals`` hold every in-range feature. The
    ``active_*`` collections further restrict those to the selected
    species and equal them when no species is selected.
    """

    trees: FeatureCollection
    removals: FeatureCollection
    active_trees: FeatureCollection
    active_removals: FeatureCollection


@dataclasses.dataclass(frozen=True)
class CollectionStats:
    """In-range totals of one collection.

    Attributes:
        total: Number of in-range features.
        category_counts: Full tally of in-range features per species code,
            ordered by first appearance in the collection.
    """

    total: int = 0
    category_counts: dict[str, int] = dataclasses.field(default_factory=dict)

    def top(self, n: int = DEFAULT_TOP_N) -> list[tuple[str, int]]:
        """Return the ``n`` most frequent categories, highest count first.

        The sort is stable, so categories with equal counts keep the order
        in which they were first seen in the collection.

        Args:
            n: Maximum number of entries returned.

        Returns:
            List of ``(category, count)`` pairs.
        """
        ranked = sorted(
            self.category_counts.items(),
            key=lambda item: item[1],
            reverse=True,
        )
        return ranked[: max(n, 0)]


@dataclasses.dataclass(frozen=True)
class AggregateStats:
    """Statistics of both collections for one range selection."""

    trees: CollectionStats
    removals: CollectionStats

    def for_collection(self, name: CollectionName) -> CollectionStats:
        return self.trees if name == "trees" else self.removals


@dataclasses.dataclass(frozen=True)
class ProgressSnapshot:
    """Combined download progress as seen by the progress display.

    Attributes:
        percent: Aggregate percentage in [0, 100], or None while no resource
            has declared its size (indeterminate).
        label: Id of the resource that produced the latest update.
        done: True once all loads have joined; the display hides itself.
    """

    percent: float | None = None
    label: str = ""
    done: bool = False

    @property
    def indeterminate(self) -> bool:
        return self.percent is None

    @property
    def display_percent(self) -> int | None:
        """Percentage rounded half up to a whole number for display."""
        if self.percent is None:
            return None
        return max(0, min(100, math.floor(self.percent + 0.5)))

    def as_dict(self) -> dict[str, Any]:
        return {
            "percent": self.percent,
            "display_percent": self.display_percent,
            "label": self.label,
            "indeterminate": self.indeterminate,
            "done": self.done,
        }
