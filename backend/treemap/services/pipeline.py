"""Startup pipeline: download every resource, then build the store.

Example:
    Load the configured datasets once:
        >>> import asyncio
        >>> from treemap.core.config import get_settings
        >>> from treemap.services import pipeline, progress

        >>> tracker = progress.ProgressTracker(listener=print)
        >>> store = asyncio.run(
        ...     pipeline.load_datasets(get_settings(), tracker)
        ... )
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import aiohttp

from treemap.data import store as feature_store
from treemap.services import loader as streaming_loader

if TYPE_CHECKING:
    from treemap.core import config
    from treemap.services import progress

logger = logging.getLogger(__name__)


async def load_datasets(
    settings: config.Settings,
    tracker: progress.ProgressTracker,
    session: aiohttp.ClientSession | None = None,
) -> feature_store.FeatureStore:
    """Fetch the trees, fellings and neighborhood documents concurrently.

    A resource that fails to load is treated as an empty dataset. The
    tracker is closed once all loads have joined.

    Args:
        settings: Application settings with resource URLs and timeouts.
        tracker: Progress tracker for this run.
        session: Session to reuse; a new one is created and closed when
            omitted.

    Returns:
        The populated FeatureStore.
    """
    resources = settings.resources()
    if session is None:
        timeout = aiohttp.ClientTimeout(total=settings.request_timeout_seconds)
        async with aiohttp.ClientSession(timeout=timeout) as own_session:
            documents = await _fetch(own_session, tracker, settings, resources)
    else:
        documents = await _fetch(session, tracker, settings, resources)
    tracker.close()

    for resource_id, document in documents.items():
        if document is None:
            logger.warning(
                "Resource %s unavailable, using empty dataset", resource_id
            )

    store = feature_store.FeatureStore.build(
        trees=documents.get("trees"),
        removals=documents.get("fellings"),
        neighborhoods=documents.get("nbhd"),
    )
    logger.info(
        "Feature store ready: %d trees, %d removals",
        len(store.trees),
        len(store.removals),
    )
    return store


async def _fetch(
    session: aiohttp.ClientSession,
    tracker: progress.ProgressTracker,
    settings: config.Settings,
    resources: dict[str, str],
) -> dict[str, dict | None]:
    loader = streaming_loader.StreamingLoader(
        session, tracker, chunk_size=settings.chunk_size_bytes
    )
    return await loader.load_all(resources)
