"""FastAPI application entrypoint and configuration.

This module provides the application factory. It sets up logging and
CORS middleware, includes the API routers, exposes a health check, and
starts the dataset pipeline in the background when the application
starts. Until the pipeline finishes, ``/api/progress`` reports the
combined download progress and dataset endpoints answer 503.

Example:
    The application can be run with uvicorn:
        $ uvicorn treemap.main:app --reload
"""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator

import fastapi
from fastapi.middleware import cors

from treemap.api import features, neighborhoods, progress, species
from treemap.core import config
from treemap.core import logging as logging_setup
from treemap.data import models
from treemap.data import store as feature_store
from treemap.services import filters, pipeline
from treemap.services import progress as progress_tracking
from treemap.services import species as species_directory

logger = logging.getLogger(__name__)


def install_datasets(
    app: fastapi.FastAPI,
    store: feature_store.FeatureStore,
    settings: config.Settings,
) -> None:
    """Publish a loaded store and the objects derived from it.

    Args:
        app: Application whose state receives the datasets.
        store: The populated feature store.
        settings: Application settings (top list length).
    """
    app.state.store = store
    app.state.engine = filters.FilterEngine(store, top_n=settings.top_n)
    app.state.species = species_directory.SpeciesDirectory(store)


async def _load_in_background(
    app: fastapi.FastAPI, settings: config.Settings
) -> None:
    def publish(snapshot: models.ProgressSnapshot) -> None:
        app.state.progress = snapshot
        logger.debug("Progress %s", snapshot)

    tracker = progress_tracking.ProgressTracker(listener=publish)
    store = await pipeline.load_datasets(settings, tracker)
    install_datasets(app, store, settings)


def _log_failure(task: asyncio.Task[None]) -> None:
    if not task.cancelled() and task.exception() is not None:
        logger.error("Dataset pipeline failed", exc_info=task.exception())


@contextlib.asynccontextmanager
async def lifespan(app: fastapi.FastAPI) -> AsyncIterator[None]:
    """Start loading the datasets without blocking startup."""
    settings = config.get_settings()
    task = asyncio.create_task(_load_in_background(app, settings))
    task.add_done_callback(_log_failure)
    app.state.loading = task
    try:
        yield
    finally:
        if not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task


def create_app() -> fastapi.FastAPI:
    """Create and configure the FastAPI application.

    Configures logging, includes the features, species, neighborhoods and
    progress routers, and adds CORS middleware and a health check. CORS
    origins are configured from settings.

    Returns:
        Configured FastAPI application instance ready for ASGI server.
    """
    settings = config.get_settings()
    logging_setup.configure_logging(settings)

    app = fastapi.FastAPI(title="Tree MTL", version="0.1.0", lifespan=lifespan)
    app.state.store = None
    app.state.engine = None
    app.state.species = None
    app.state.progress = None

    app.include_router(features.router)
    app.include_router(species.router)
    app.include_router(neighborhoods.router)
    app.include_router(progress.router)

    app.add_middleware(
        cors.CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health() -> dict[str, str]:  # type: ignore[misc]
        """Health check endpoint for monitoring and load balancers.

        Returns:
            Dictionary with status "ok" and whether the datasets are
            loaded.
        """
        loaded = app.state.engine is not None
        return {"status": "ok", "datasets": "ready" if loaded else "loading"}

    return app


app = create_app()
