"""Translation of original line numbers into current document coordinates."""

from __future__ import annotations

from dataclasses import dataclass

from .hunks import HunkDescriptor


@dataclass(slots=True)
class OffsetTracker:
    """Running net line delta of the hunks applied so far in one run.

    ``diff`` numbers every hunk against the original document and lists hunks
    in increasing, disjoint original ranges, so the sum of earlier deltas is
    exactly the shift seen by the next hunk.
    """

    offset: int = 0

    def translate(self, original_line: int) -> int:
        return original_line + self.offset

    def record(self, hunk: HunkDescriptor) -> int:
        """Account for ``hunk`` having been applied and return the new offset."""
        self.offset += hunk.line_delta
        return self.offset


__all__ = ["OffsetTracker"]
