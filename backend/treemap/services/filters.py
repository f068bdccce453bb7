"""Year-range filtering and species aggregation over the feature store.

Every interaction with the year sliders recomputes, from the immutable
store, the in-range subset of each collection and the per-species counts
of that subset. Collections hold tens of thousands of features, so a full
recomputation is cheap enough that nothing is cached between calls except
the per-feature year and species key, which never change.

How a collection is read is described by data, not branches: each
CollectionSpec lists the attribute extractors tried in order to find a
feature's year, and names the attribute holding its species code.

Example:
    Filter and count trees planted in the nineties:
        >>> from treemap.data import models
        >>> from treemap.services.filters import FilterEngine
        >>> engine = FilterEngine(store)
        >>> selection = models.RangeSelection(
        ...     trees=models.FilterRange(1990, 1999),
        ...     removals=models.FilterRange(2010, 2020),
        ... )
        >>> view = engine.apply_range(selection)
        >>> stats = engine.compute_stats(selection)
        >>> stats.trees.total == len(view.trees)
        True
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from treemap.data import models
from treemap.utils import parsing

if TYPE_CHECKING:
    from treemap.data import store as feature_store

Properties = Mapping[str, Any]
YearExtractor = Callable[[Properties], int | None]


def numeric_attribute(name: str) -> YearExtractor:
    """Extractor reading ``name`` as an integer year."""

    def extract(properties: Properties) -> int | None:
        return parsing.parse_int(properties.get(name))

    return extract


def date_prefix(name: str) -> YearExtractor:
    """Extractor reading the year from the first four characters of ``name``.

    ``"2012-06-01"`` yields 2012; values whose first four characters are
    not all ASCII digits yield None.
    """

    def extract(properties: Properties) -> int | None:
        value = properties.get(name)
        if value is None:
            return None
        prefix = str(value)[:4]
        if len(prefix) != 4 or not (prefix.isascii() and prefix.isdigit()):
            return None
        return int(prefix)

    return extract


def first_result[T](
    extractors: Sequence[Callable[[Properties], T | None]],
    properties: Properties,
) -> T | None:
    """Return the first non-None result of ``extractors`` in order."""
    for extract in extractors:
        result = extract(properties)
        if result is not None:
            return result
    return None


@dataclasses.dataclass(frozen=True)
class CollectionSpec:
    """How to read the year and species of one collection's features.

    Attributes:
        name: Collection name.
        year_extractors: Tried in order; the first year found wins.
        category_attribute: Attribute holding the species code.
    """

    name: models.CollectionName
    year_extractors: tuple[YearExtractor, ...]
    category_attribute: str

    def year_of(self, feature: models.NormalizedFeature) -> int | None:
        return first_result(self.year_extractors, feature.properties)

    def category_code(self, feature: models.NormalizedFeature) -> str | None:
        """Species code of a feature, None when absent or empty."""
        value = feature.properties.get(self.category_attribute)
        if value is None:
            return None
        code = str(value).strip()
        return code or None

    def category_of(self, feature: models.NormalizedFeature) -> str:
        """Species code of a feature, bucketed as Unknown when absent."""
        return self.category_code(feature) or models.UNKNOWN_CATEGORY


TREES = CollectionSpec(
    name="trees",
    year_extractors=(numeric_attribute("plant_year"),),
    category_attribute="sigle",
)
REMOVALS = CollectionSpec(
    name="removals",
    year_extractors=(
        numeric_attribute("removal_year"),
        date_prefix("removal_date"),
    ),
    category_attribute="sp_sigle",
)
COLLECTIONS: dict[models.CollectionName, CollectionSpec] = {
    "trees": TREES,
    "removals": REMOVALS,
}


@dataclasses.dataclass(frozen=True)
class _Entry:
    feature: models.NormalizedFeature
    year: int
    category: str


class FilterEngine:
    """Derives filtered collections and statistics from a FeatureStore.

    The engine never mutates the store; every result is a new collection.
    Features without a usable year are left out of both filtering and
    statistics.
    """

    def __init__(
        self,
        store: feature_store.FeatureStore,
        top_n: int = models.DEFAULT_TOP_N,
    ) -> None:
        """Index the store's features by year and species.

        Args:
            store: The loaded feature store.
            top_n: Default length of top-species lists.
        """
        self._store = store
        self.top_n = top_n
        self._entries: dict[models.CollectionName, tuple[_Entry, ...]] = {
            name: tuple(self._index(spec))
            for name, spec in COLLECTIONS.items()
        }
        self._domains: dict[models.CollectionName, models.FilterRange | None]
        self._domains = {
            name: _domain_of(entries)
            for name, entries in self._entries.items()
        }

    @property
    def store(self) -> feature_store.FeatureStore:
        return self._store

    def year_domain(
        self, name: models.CollectionName
    ) -> models.FilterRange | None:
        """Lowest and highest usable year in a collection, if any."""
        return self._domains[name]

    def default_selection(self) -> models.RangeSelection:
        """Selection covering every year present in the data."""
        return models.RangeSelection(
            trees=self._domains["trees"] or models.FilterRange(0, 0),
            removals=self._domains["removals"] or models.FilterRange(0, 0),
        )

    def clamp(
        self, selection: models.RangeSelection
    ) -> models.RangeSelection:
        """Correct a selection so each range is ordered and within the data.

        Both bounds are pulled into the years present in the data, so a
        range lying entirely past the data collapses onto its first or
        last year.
        """
        return models.RangeSelection(
            trees=selection.trees.clamp(self._domains["trees"]),
            removals=selection.removals.clamp(self._domains["removals"]),
        )

    def apply_range(
        self,
        selection: models.RangeSelection,
        species: str | None = None,
    ) -> models.FilteredView:
        """Filter both collections by year, and optionally by species.

        Args:
            selection: Year range per collection.
            species: Species code to emphasize; affects only the
                ``active_*`` collections of the result.

        Returns:
            New collections of in-range and of active features.
        """
        selection = self.clamp(selection)
        trees = self._in_range("trees", selection.trees)
        removals = self._in_range("removals", selection.removals)
        return models.FilteredView(
            trees=_collection(entry.feature for entry in trees),
            removals=_collection(entry.feature for entry in removals),
            active_trees=_collection(
                entry.feature
                for entry in trees
                if species is None or entry.category == species
            ),
            active_removals=_collection(
                entry.feature
                for entry in removals
                if species is None or entry.category == species
            ),
        )

    def compute_stats(
        self, selection: models.RangeSelection
    ) -> models.AggregateStats:
        """Count in-range features in total and per species.

        Species selection plays no part here; only the year ranges do.
        """
        selection = self.clamp(selection)
        return models.AggregateStats(
            trees=self._tally("trees", selection.trees),
            removals=self._tally("removals", selection.removals),
        )

    def _index(self, spec: CollectionSpec) -> list[_Entry]:
        entries = []
        for feature in self._store.iter_features(spec.name):
            year = spec.year_of(feature)
            if year is None:
                continue
            entries.append(
                _Entry(
                    feature=feature,
                    year=year,
                    category=spec.category_of(feature),
                )
            )
        return entries

    def _in_range(
        self, name: models.CollectionName, year_range: models.FilterRange
    ) -> list[_Entry]:
        return [
            entry
            for entry in self._entries[name]
            if year_range.contains(entry.year)
        ]

    def _tally(
        self, name: models.CollectionName, year_range: models.FilterRange
    ) -> models.CollectionStats:
        counts: dict[str, int] = {}
        total = 0
        for entry in self._in_range(name, year_range):
            total += 1
            counts[entry.category] = counts.get(entry.category, 0) + 1
        return models.CollectionStats(total=total, category_counts=counts)


def _collection(
    features: Iterable[models.NormalizedFeature],
) -> models.FeatureCollection:
    return models.FeatureCollection(features=tuple(features))


def _domain_of(entries: Sequence[_Entry]) -> models.FilterRange | None:
    if not entries:
        return None
    years = [entry.year for entry in entries]
    return models.FilterRange(min=min(years), max=max(years))
