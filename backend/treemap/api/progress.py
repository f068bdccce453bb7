"""Dataset download progress endpoint.

The loader overlay polls this endpoint during startup. A numeric
``display_percent`` drives the bar; while ``indeterminate`` is true the
overlay pulses instead, and once ``done`` is true it hides.
"""

from typing import Any

import fastapi

from treemap.data import models

router = fastapi.APIRouter(prefix="/api/progress", tags=["progress"])


def _get_snapshot(request: fastapi.Request) -> models.ProgressSnapshot:
    """Latest snapshot published by the pipeline's progress tracker."""
    snapshot = getattr(request.app.state, "progress", None)
    if snapshot is None:
        return models.ProgressSnapshot()
    return snapshot


@router.get("")
async def get_progress(
    snapshot: models.ProgressSnapshot = fastapi.Depends(_get_snapshot),  # noqa: B008
) -> dict[str, Any]:
    """Return the combined download progress.

    Returns:
        Dictionary with ``percent``, ``display_percent``, ``label``,
        ``indeterminate`` and ``done``.
    """
    return snapshot.as_dict()
