"""Species codes, display names and the species catalog.

Both collections identify a species by a short code (``sigle`` for
trees, ``sp_sigle`` for removals) and carry English and French names
under collection-specific attributes. A code's display name comes from
the first tree carrying that code, then from the first removal, and
falls back to the code itself.

Name lookup is an ordered list of extractors per collection and
language, in the same manner as year extraction in the filters module.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Literal

from treemap.data import models
from treemap.services import filters

if TYPE_CHECKING:
    from treemap.data import store as feature_store

Language = Literal["en", "fr"]
NameExtractor = Callable[[filters.Properties], str | None]


def text_attribute(name: str) -> NameExtractor:
    """Extractor returning ``name`` when it holds non-blank text."""

    def extract(properties: filters.Properties) -> str | None:
        value = properties.get(name)
        if not isinstance(value, str) or not value.strip():
            return None
        return value.strip()

    return extract


NAME_EXTRACTORS: dict[
    models.CollectionName, dict[Language, tuple[NameExtractor, ...]]
] = {
    "trees": {
        "en": (text_attribute("essence_ang"), text_attribute("essence_fr")),
        "fr": (text_attribute("essence_fr"), text_attribute("essence_ang")),
    },
    "removals": {
        "en": (
            text_attribute("sp_essence_ang"),
            text_attribute("sp_essence_fr"),
        ),
        "fr": (
            text_attribute("sp_essence_fr"),
            text_attribute("sp_essence_ang"),
        ),
    },
}

_LOOKUP_ORDER: tuple[models.CollectionName, ...] = ("trees", "removals")


@dataclasses.dataclass(frozen=True)
class SpeciesEntry:
    code: str
    name: str


@dataclasses.dataclass(frozen=True)
class RankedSpecies:
    code: str
    name: str
    count: int


class SpeciesDirectory:
    """Resolves species codes found in a FeatureStore to display names."""

    def __init__(self, store: feature_store.FeatureStore) -> None:
        self._first_seen: dict[
            models.CollectionName, dict[str, filters.Properties]
        ] = {}
        for name in _LOOKUP_ORDER:
            spec = filters.COLLECTIONS[name]
            seen: dict[str, filters.Properties] = {}
            for feature in store.iter_features(name):
                code = spec.category_code(feature)
                if code is not None and code not in seen:
                    seen[code] = feature.properties
            self._first_seen[name] = seen

    def codes(self) -> list[str]:
        """Every distinct species code, trees first, in first-seen order."""
        ordered: dict[str, None] = {}
        for name in _LOOKUP_ORDER:
            ordered.update(dict.fromkeys(self._first_seen[name]))
        return list(ordered)

    def display_name(self, code: str, lang: Language = "en") -> str:
        """Name of a species in ``lang``, or the code if none is known."""
        for name in _LOOKUP_ORDER:
            properties = self._first_seen[name].get(code)
            if properties is None:
                continue
            extractors = NAME_EXTRACTORS[name][lang]
            found = filters.first_result(extractors, properties)
            if found is not None:
                return found
        return code

    def catalog(self, lang: Language = "en") -> list[SpeciesEntry]:
        """All species sorted by display name, case-insensitively."""
        entries = [
            SpeciesEntry(code=code, name=self.display_name(code, lang))
            for code in self.codes()
        ]
        return sorted(
            entries, key=lambda entry: (entry.name.casefold(), entry.code)
        )

    def named_top(
        self,
        stats: models.CollectionStats,
        lang: Language = "en",
        n: int = models.DEFAULT_TOP_N,
    ) -> list[RankedSpecies]:
        """Top ``n`` species of ``stats`` with their display names."""
        return [
            RankedSpecies(
                code=code, name=self.display_name(code, lang), count=count
            )
            for code, count in stats.top(n)
        ]


def as_dicts(entries: list[Any]) -> list[dict[str, Any]]:
    return [dataclasses.asdict(entry) for entry in entries]
