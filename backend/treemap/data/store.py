"""Write-once, in-memory store of the normalized datasets."""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any

from treemap.data import models
from treemap.services import normalize

if TYPE_CHECKING:
    from collections.abc import Iterator


class FeatureStore:
    """Holds the trees and removals collections for the process lifetime.

    The stored collections are immutable tuples; consumers that filter
    always build new collections from them. The neighborhood document is
    kept as decoded and only ever handed out as a deep copy.
    """

    def __init__(
        self,
        trees: models.FeatureCollection,
        removals: models.FeatureCollection,
        neighborhoods: models.RawDocument | None = None,
    ) -> None:
        self._trees = trees
        self._removals = removals
        self._neighborhoods = neighborhoods

    @classmethod
    def build(
        cls,
        trees: Any,
        removals: Any,
        neighborhoods: Any = None,
    ) -> FeatureStore:
        """Normalize raw documents into a new store.

        A missing (None) or malformed document becomes an empty collection.

        Args:
            trees: Raw tree inventory document.
            removals: Raw tree-removal document.
            neighborhoods: Raw neighborhood statistics document.

        Returns:
            The populated store.
        """
        if not isinstance(neighborhoods, dict):
            neighborhoods = None
        return cls(
            trees=normalize.normalize(trees),
            removals=normalize.normalize(removals),
            neighborhoods=neighborhoods,
        )

    @classmethod
    def empty(cls) -> FeatureStore:
        return cls(models.FeatureCollection(), models.FeatureCollection())

    @property
    def trees(self) -> models.FeatureCollection:
        return self._trees

    @property
    def removals(self) -> models.FeatureCollection:
        return self._removals

    def collection(
        self, name: models.CollectionName
    ) -> models.FeatureCollection:
        return self._trees if name == "trees" else self._removals

    def iter_features(
        self, name: models.CollectionName
    ) -> Iterator[models.NormalizedFeature]:
        return iter(self.collection(name))

    def neighborhoods(self) -> models.RawDocument | None:
        """Return a deep copy of the neighborhood document, if loaded."""
        if self._neighborhoods is None:
            return None
        return copy.deepcopy(self._neighborhoods)
