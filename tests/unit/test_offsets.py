from __future__ import annotations

from apipe.patch.hunks import parse_hunk_header
from apipe.patch.offsets import OffsetTracker


def test_tracker_starts_at_zero() -> None:
    tracker = OffsetTracker()

    assert tracker.offset == 0
    assert tracker.translate(7) == 7


def test_record_applies_each_kind() -> None:
    tracker = OffsetTracker()

    assert tracker.record(parse_hunk_header("3a4,6")) == 3
    assert tracker.record(parse_hunk_header("5,8d7")) == -1
    assert tracker.record(parse_hunk_header("10,11c9,13")) == 2
    assert tracker.record(parse_hunk_header("14c16")) == 2
    assert tracker.translate(20) == 22


def test_translate_uses_running_total_only() -> None:
    tracker = OffsetTracker(offset=-2)

    assert tracker.translate(5) == 3
    assert tracker.translate(1) == -1
