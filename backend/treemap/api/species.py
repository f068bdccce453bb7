"""Species catalog endpoint.

Example:
    List every species with French names:
        >>> response = client.get("/api/species", params={"lang": "fr"})
        >>> response.json()[0]
        {'code': 'ABBA', 'name': 'Sapin baumier'}
"""

from typing import Any

import fastapi

from treemap.api import dependencies
from treemap.services import species

router = fastapi.APIRouter(prefix="/api/species", tags=["species"])


def _get_species(request: fastapi.Request) -> species.SpeciesDirectory:
    """Resolve the species directory built from the loaded datasets."""
    return dependencies.require_loaded(request, "species")


@router.get("")
async def list_species(
    lang: species.Language = "en",
    directory: species.SpeciesDirectory = fastapi.Depends(_get_species),  # noqa: B008
) -> list[dict[str, Any]]:
    """List every species found in either collection.

    Args:
        lang: Language of the display names ("en" or "fr").
        directory: Species directory (injected via FastAPI Depends).

    Returns:
        List of ``{"code", "name"}`` dictionaries sorted by name.
    """
    return species.as_dicts(directory.catalog(lang))
