"""Shared FastAPI dependencies for the dataset-backed routers.

The datasets load in the background after startup. Until the pipeline
has finished, anything that needs them answers 503.
"""

from typing import Any

import fastapi


def require_loaded(request: fastapi.Request, attribute: str) -> Any:
    """Return a loaded object from application state.

    Args:
        request: Incoming request, used to reach ``app.state``.
        attribute: Name of the state attribute set by the pipeline.

    Returns:
        The state attribute.

    Raises:
        HTTPException: If the datasets are still loading (503 status code).
    """
    value = getattr(request.app.state, attribute, None)
    if value is None:
        raise fastapi.HTTPException(
            status_code=503,
            detail="Datasets are still loading",
        )

    return value
