"""Progressive download of remote GeoJSON documents.

Each resource is fetched with aiohttp and read chunk by chunk; after every
chunk the cumulative byte count goes to the shared ProgressTracker, so a
progress display can show one combined figure while several large files
download at once.

A failed resource never raises: transport errors, bad status codes and
undecodable bodies are logged and turn into None, so the other concurrent
loads carry on and the caller can treat the failed source as empty.

Example:
    Load all configured resources concurrently:
        >>> import aiohttp
        >>> from treemap.services.loader import StreamingLoader
        >>> from treemap.services.progress import ProgressTracker

        >>> async def fetch(resources):
        ...     async with aiohttp.ClientSession() as session:
        ...         loader = StreamingLoader(session, ProgressTracker())
        ...         return await loader.load_all(resources)
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any

import aiohttp

if TYPE_CHECKING:
    from collections.abc import AsyncIterable, Mapping

    from treemap.data import models
    from treemap.services import progress

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


async def consume_chunks(
    resource_id: str,
    chunks: AsyncIterable[bytes],
    tracker: progress.ProgressTracker,
    buffer: bytearray,
) -> bytearray:
    """Append every chunk to ``buffer`` and report cumulative progress.

    This is the transport-independent half of a load: any async iterable
    of bytes can be fed in, which keeps the progress accounting testable
    with synthetic streams.

    Args:
        resource_id: Resource name used for progress reports.
        chunks: Async iterable yielding the body in pieces.
        tracker: Progress tracker receiving cumulative byte counts.
        buffer: Destination buffer; holds the partial body if the stream
            fails midway.

    Returns:
        ``buffer`` holding the complete body.
    """
    async for chunk in chunks:
        buffer.extend(chunk)
        snapshot = tracker.report_received(resource_id, len(buffer))
        if snapshot.indeterminate:
            tracker.indeterminate(resource_id)
    return buffer


def decode_document(payload: bytes) -> models.RawDocument:
    """Decode a response body as a JSON object.

    Raises:
        ValueError: If the body is not valid JSON, is nested too deeply to
            decode, or is not a JSON object.
    """
    try:
        document = json.loads(payload)
    except RecursionError as e:
        raise ValueError("JSON document is nested too deeply") from e
    if not isinstance(document, dict):
        raise ValueError(
            f"Expected a JSON object, got {type(document).__name__}"
        )
    return document


class StreamingLoader:
    """Fetches resources over a shared aiohttp session.

    The loader holds no per-resource state; one instance serves all the
    concurrent loads of a pipeline run.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        tracker: progress.ProgressTracker,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        """Initialize the loader.

        Args:
            session: Open aiohttp session used for all requests.
            tracker: Progress tracker shared by every load of the run.
            chunk_size: Maximum size of one body read.
        """
        self._session = session
        self._tracker = tracker
        self._chunk_size = chunk_size

    async def load(
        self, resource_id: str, url: str
    ) -> models.RawDocument | None:
        """Download and decode one resource.

        Args:
            resource_id: Resource name used in logs and progress reports.
            url: Location of the GeoJSON document.

        Returns:
            The decoded document, or None if the resource could not be
            fetched or decoded.
        """
        buffer = bytearray()
        try:
            async with self._session.get(url) as response:
                response.raise_for_status()
                declared = response.content_length or 0
                if declared > 0:
                    self._tracker.declare_size(resource_id, declared)
                self._tracker.report_received(resource_id, 0)

                content = getattr(response, "content", None)
                if content is None or not hasattr(content, "iter_chunked"):
                    buffer.extend(
                        await self._read_whole(resource_id, response, declared)
                    )
                else:
                    await consume_chunks(
                        resource_id,
                        content.iter_chunked(self._chunk_size),
                        self._tracker,
                        buffer,
                    )
            document = decode_document(bytes(buffer))
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(
                "Failed to load %s from %s after %d bytes: %s",
                resource_id,
                url,
                len(buffer),
                e,
            )
            return None
        finally:
            self._tracker.finish(resource_id, len(buffer))

        logger.info("Loaded %s (%d bytes)", resource_id, len(buffer))
        return document

    async def load_all(
        self, resources: Mapping[str, str]
    ) -> dict[str, models.RawDocument | None]:
        """Load several resources concurrently and wait for all of them.

        Args:
            resources: Mapping of resource name to URL.

        Returns:
            Mapping of resource name to its document, None for each
            resource that failed.
        """
        names = list(resources)
        documents = await asyncio.gather(
            *(self.load(name, resources[name]) for name in names)
        )
        return dict(zip(names, documents, strict=True))

    async def _read_whole(
        self, resource_id: str, response: Any, declared: int
    ) -> bytes:
        # No incremental reader: count half of the declared size before the
        # read and all of it after. An approximation that keeps the bar
        # moving forward, nothing more.
        if declared > 0:
            self._tracker.report_received(resource_id, declared // 2)
        else:
            self._tracker.indeterminate(resource_id)
        payload: bytes = await response.read()
        self._tracker.report_received(resource_id, declared or len(payload))
        return payload
