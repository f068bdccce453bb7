"""Unit tests for treemap.services.progress byte accounting.

The tracker is tested on its own, without any network code: sizes and
byte counts are fed in directly and the resulting snapshots checked.
"""

from __future__ import annotations

import pytest

from treemap.data import models
from treemap.services import progress


def test_two_resources_partial_progress() -> None:
    """50 of 100 + 0 of 300 bytes is 12.5%, shown as 13%."""
    tracker = progress.ProgressTracker()
    tracker.declare_size("a", 100)
    tracker.declare_size("b", 300)
    tracker.report_received("a", 50)
    snapshot = tracker.report_received("b", 0)
    assert snapshot.percent == 12.5
    assert snapshot.display_percent == 13
    assert snapshot.label == "b"


def test_unknown_sizes_are_indeterminate() -> None:
    """Without any declared size there is no numeric percentage."""
    tracker = progress.ProgressTracker()
    snapshot = tracker.report_received("trees", 4096)
    assert snapshot.percent is None
    assert snapshot.indeterminate
    assert tracker.percent() is None

    signal = tracker.indeterminate("trees")
    assert signal.indeterminate
    assert signal.label == "trees"


def test_redeclaring_does_not_double_count() -> None:
    """Declaring a size again leaves the total unchanged."""
    tracker = progress.ProgressTracker()
    tracker.declare_size("a", 100)
    tracker.declare_size("a", 100)
    tracker.declare_size("a", 500)
    assert tracker.report_received("a", 50).percent == 50.0
    assert tracker.resource("a").declared == 100


def test_non_positive_size_is_unknown() -> None:
    """A zero or negative size does not count as declared."""
    tracker = progress.ProgressTracker()
    tracker.declare_size("a", 0)
    tracker.declare_size("b", -1)
    assert tracker.report_received("a", 10).indeterminate


def test_reports_are_cumulative_not_deltas() -> None:
    """The latest cumulative count replaces the previous one."""
    tracker = progress.ProgressTracker()
    tracker.declare_size("a", 200)
    tracker.report_received("a", 50)
    tracker.report_received("a", 100)
    assert tracker.percent() == 50.0


def test_percent_monotonic_and_clamped() -> None:
    """Progress never decreases and stays within [0, 100]."""
    tracker = progress.ProgressTracker()
    tracker.declare_size("a", 100)
    tracker.declare_size("b", 100)
    reports = [
        ("a", 10),
        ("b", 20),
        ("a", 5),
        ("a", 60),
        ("b", 90),
        ("a", 150),
        ("b", 400),
    ]
    previous = 0.0
    for resource_id, received in reports:
        percent = tracker.report_received(resource_id, received).percent
        assert percent is not None
        assert 0.0 <= percent <= 100.0
        assert percent >= previous
        previous = percent
    assert previous == 100.0


def test_finish_ignores_later_reports() -> None:
    """Reports after finish do not re-attribute the resource's bytes."""
    tracker = progress.ProgressTracker()
    tracker.declare_size("a", 100)
    tracker.declare_size("b", 100)
    tracker.finish("a", 100)
    tracker.report_received("a", 5000)
    assert tracker.report_received("b", 0).percent == 50.0
    assert tracker.resource("a").finished


def test_finish_after_partial_read_releases_total() -> None:
    """A resource failing midway no longer holds the aggregate back."""
    tracker = progress.ProgressTracker()
    tracker.declare_size("a", 100)
    tracker.declare_size("b", 300)
    tracker.report_received("b", 40)
    tracker.finish("b", 40)
    tracker.report_received("a", 60)
    assert tracker.percent() == pytest.approx(100 * 100 / 140)
    assert tracker.finish("a", 100).percent == 100.0


def test_finish_twice_is_harmless() -> None:
    """A second finish leaves counts untouched."""
    tracker = progress.ProgressTracker()
    tracker.declare_size("a", 100)
    tracker.finish("a", 100)
    tracker.finish("a", 10)
    assert tracker.resource("a").received == 100


def test_listener_receives_every_snapshot() -> None:
    """The listener sees each update and the final done signal."""
    received: list[models.ProgressSnapshot] = []
    tracker = progress.ProgressTracker(listener=received.append)
    tracker.declare_size("a", 10)
    tracker.report_received("a", 5)
    tracker.indeterminate("b")
    tracker.finish("a", 10)
    final = tracker.close()

    assert [s.percent for s in received] == [50.0, None, 100.0, 100.0]
    assert received[-1] is final
    assert final.done
    assert tracker.latest is final


def test_resource_returns_copy() -> None:
    """Counters handed out cannot change the tracker's state."""
    tracker = progress.ProgressTracker()
    tracker.declare_size("a", 100)
    entry = tracker.resource("a")
    entry.declared = 1
    assert tracker.resource("a").declared == 100


def test_finish_below_reported_keeps_aggregate() -> None:
    """Finishing with fewer bytes than reported never lowers progress."""
    tracker = progress.ProgressTracker()
    tracker.declare_size("a", 100)
    tracker.declare_size("b", 100)
    tracker.report_received("a", 0)
    before = tracker.report_received("b", 50).percent
    assert before == 25.0

    after = tracker.finish("b", 0).percent
    assert after is not None
    assert after >= before
    assert after == pytest.approx(100 * 50 / 150)
    assert tracker.resource("b").received == 50
    assert tracker.resource("b").declared == 50
