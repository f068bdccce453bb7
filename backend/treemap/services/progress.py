"""Combined byte-level progress across concurrently loading resources.

The tracker knows nothing about HTTP. Loaders tell it how large each
resource is (when the server says so) and how many bytes of it have
arrived; the tracker turns that into one percentage for the progress
display, or an indeterminate signal while no size is known.

A tracker is created for one pipeline run and handed to the loaders,
then discarded once every load has joined.

Example:
    Two resources of 100 and 300 bytes:
        >>> from treemap.services.progress import ProgressTracker
        >>> tracker = ProgressTracker()
        >>> tracker.declare_size("trees", 100)
        >>> tracker.declare_size("fellings", 300)
        >>> tracker.report_received("trees", 50).percent
        12.5
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable

from treemap.data import models

logger = logging.getLogger(__name__)

ProgressListener = Callable[[models.ProgressSnapshot], None]


@dataclasses.dataclass
class ResourceProgress:
    """Byte counts of one resource.

    Attributes:
        declared: Total size announced by the server, 0 when unknown.
        received: Cumulative bytes received so far.
        finished: True once the loader has finalized the resource.
    """

    declared: int = 0
    received: int = 0
    finished: bool = False


class ProgressTracker:
    """Aggregate byte counter over an arbitrary set of named resources.

    Every state change produces a ProgressSnapshot, which is returned to
    the caller and pushed to the optional listener.
    """

    def __init__(self, listener: ProgressListener | None = None) -> None:
        """Initialize an empty tracker.

        Args:
            listener: Called with every new snapshot, e.g. to update a
                progress display.
        """
        self._resources: dict[str, ResourceProgress] = {}
        self._listener = listener
        self._latest = models.ProgressSnapshot()

    @property
    def latest(self) -> models.ProgressSnapshot:
        return self._latest

    def resource(self, resource_id: str) -> ResourceProgress:
        """Return a copy of the counters of one resource."""
        return dataclasses.replace(self._entry(resource_id))

    def declare_size(self, resource_id: str, size: int) -> None:
        """Register the total size of a resource.

        Only the first positive size counts; declaring again never adds
        the resource to the total a second time.

        Args:
            resource_id: Resource name.
            size: Declared size in bytes; 0 or less means unknown.
        """
        entry = self._entry(resource_id)
        if size <= 0 or entry.declared > 0:
            return
        entry.declared = size

    def report_received(
        self, resource_id: str, received: int
    ) -> models.ProgressSnapshot:
        """Record the cumulative number of bytes received for a resource.

        Counts never go down: a smaller value than previously reported is
        ignored, as are reports after the resource was finished.

        Args:
            resource_id: Resource name.
            received: Bytes received so far for this resource (not a delta).

        Returns:
            The recomputed snapshot, labelled with ``resource_id``.
        """
        entry = self._entry(resource_id)
        if not entry.finished:
            entry.received = max(entry.received, received)
        return self._publish(resource_id)

    def finish(
        self, resource_id: str, total_received: int
    ) -> models.ProgressSnapshot:
        """Finalize the contribution of a resource.

        A resource that ended short of its declared size (a failed read)
        has its declared size lowered to what was counted, so the
        remaining resources can still bring the aggregate to 100%. Bytes
        already reported are kept, which keeps the aggregate from going
        down.

        Args:
            resource_id: Resource name.
            total_received: Bytes received in total for this resource; a
                smaller figure than already reported is ignored.

        Returns:
            The recomputed snapshot.
        """
        entry = self._entry(resource_id)
        if entry.finished:
            logger.debug("Resource %s already finished", resource_id)
            return self._latest
        entry.received = max(entry.received, total_received, 0)
        if entry.declared > entry.received:
            entry.declared = entry.received
        entry.finished = True
        return self._publish(resource_id)

    def indeterminate(self, label: str) -> models.ProgressSnapshot:
        """Signal activity on ``label`` without a percentage."""
        return self._emit(models.ProgressSnapshot(percent=None, label=label))

    def close(self) -> models.ProgressSnapshot:
        """Signal that all loads have joined and the display can hide."""
        return self._emit(
            models.ProgressSnapshot(
                percent=self.percent(),
                label="",
                done=True,
            )
        )

    def percent(self) -> float | None:
        """Current aggregate percentage, or None when no size is known."""
        total = sum(
            entry.declared
            for entry in self._resources.values()
            if entry.declared > 0
        )
        if total <= 0:
            return None
        received = sum(entry.received for entry in self._resources.values())
        return max(0.0, min(100.0, received / total * 100))

    def _entry(self, resource_id: str) -> ResourceProgress:
        return self._resources.setdefault(resource_id, ResourceProgress())

    def _publish(self, label: str) -> models.ProgressSnapshot:
        return self._emit(
            models.ProgressSnapshot(percent=self.percent(), label=label)
        )

    def _emit(
        self, snapshot: models.ProgressSnapshot
    ) -> models.ProgressSnapshot:
        self._latest = snapshot
        if self._listener is not None:
            self._listener(snapshot)
        return snapshot
