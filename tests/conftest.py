from __future__ import annotations

import difflib
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence, Tuple

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@dataclass(slots=True)
class RecordingSink:
    """Edit sink that records every address and write in call order."""

    calls: List[Tuple[str, object]] = field(default_factory=list)

    def set_address(self, addr: str) -> None:
        self.calls.append(("addr", addr))

    def write_replacement(self, payload: bytes) -> int:
        self.calls.append(("data", payload))
        return len(payload)

    @property
    def writes(self) -> List[bytes]:
        return [value for kind, value in self.calls if kind == "data"]  # type: ignore[misc]


@pytest.fixture()
def recording_sink() -> RecordingSink:
    return RecordingSink()


def _span(start: int, end: int) -> str:
    return str(start) if start == end else f"{start},{end}"


def normal_diff(old: Sequence[str], new: Sequence[str]) -> List[str]:
    """Render ``diff``-style normal format hunks for two lists of lines.

    Lines must not carry terminators; the output lines do not either.
    """

    out: List[str] = []
    matcher = difflib.SequenceMatcher(a=list(old), b=list(new), autojunk=False)
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            continue
        if tag == "insert":
            out.append(f"{i1}a{_span(j1 + 1, j2)}")
        elif tag == "delete":
            out.append(f"{_span(i1 + 1, i2)}d{j1}")
        else:
            out.append(f"{_span(i1 + 1, i2)}c{_span(j1 + 1, j2)}")
        if tag in ("delete", "replace"):
            out.extend(f"< {line}" for line in old[i1:i2])
        if tag == "replace":
            out.append("---")
        if tag in ("insert", "replace"):
            out.extend(f"> {line}" for line in new[j1:j2])
    return out


@pytest.fixture()
def make_diff():
    """Return a helper that renders normal-format diff lines."""
    return normal_diff
