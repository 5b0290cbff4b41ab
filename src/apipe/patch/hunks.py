"""Parsing of normal-format ``diff`` hunks.

A hunk starts with a header such as ``2,3c2`` followed by the deleted lines
(``< text``), a ``---`` separator for changes, and the added lines
(``> text``). Line numbers in every header refer to the original document.
"""

from __future__ import annotations

import io
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator

from .errors import InvalidHunkHeader, MalformedHunkBody, UnexpectedEndOfStream

DELETED_PREFIX = b"< "
ADDED_PREFIX = b"> "
SEPARATOR = b"---"
NO_NEWLINE_PREFIX = b"\\ "

_HEADER_RE = re.compile(r"([0-9]+)(?:,([0-9]+))?([acd])([0-9]+)(?:,([0-9]+))?")


class HunkKind(str, Enum):
    """Operation encoded by a hunk header."""

    ADD = "a"
    CHANGE = "c"
    DELETE = "d"


@dataclass(frozen=True, slots=True)
class HunkDescriptor:
    """Inclusive, 1-based line ranges of one hunk header."""

    original_start: int
    original_end: int
    kind: HunkKind
    new_start: int
    new_end: int

    @property
    def original_count(self) -> int:
        return self.original_end - self.original_start + 1

    @property
    def new_count(self) -> int:
        return self.new_end - self.new_start + 1

    @property
    def is_single_line(self) -> bool:
        return self.original_start == self.original_end

    @property
    def consumes_original(self) -> bool:
        return self.kind is not HunkKind.ADD

    @property
    def supplies_new(self) -> bool:
        return self.kind is not HunkKind.DELETE

    @property
    def line_delta(self) -> int:
        """Net number of lines this hunk adds to the document."""
        if self.kind is HunkKind.ADD:
            return self.new_count
        if self.kind is HunkKind.DELETE:
            return -self.original_count
        return self.new_count - self.original_count

    @property
    def header(self) -> str:
        return _format_range(self.original_start, self.original_end) + self.kind.value + _format_range(
            self.new_start, self.new_end
        )


def _format_range(start: int, end: int) -> str:
    return str(start) if start == end else f"{start},{end}"


def parse_hunk_header(line: str | bytes, *, line_number: int | None = None) -> HunkDescriptor:
    """Parse ``L1[,L2]OP L3[,L4]`` into a :class:`HunkDescriptor`."""

    if isinstance(line, bytes):
        text = line.decode("utf-8", errors="replace")
    else:
        text = line
    match = _HEADER_RE.fullmatch(text)
    if match is None:
        raise InvalidHunkHeader(text, line_number=line_number)

    original_start = int(match.group(1))
    original_end = int(match.group(2)) if match.group(2) is not None else original_start
    new_start = int(match.group(4))
    new_end = int(match.group(5)) if match.group(5) is not None else new_start

    if original_end < original_start:
        raise InvalidHunkHeader(text, reason="original range is descending", line_number=line_number)
    if new_end < new_start:
        raise InvalidHunkHeader(text, reason="new range is descending", line_number=line_number)

    return HunkDescriptor(
        original_start=original_start,
        original_end=original_end,
        kind=HunkKind(match.group(3)),
        new_start=new_start,
        new_end=new_end,
    )


class DiffLineStream:
    """Iterator over diff lines that tracks the current line number.

    Accepts an iterable of ``bytes`` or ``str`` lines, or a whole diff as a
    single ``str``/``bytes`` value, which is split on ``\\n`` only. A single
    trailing newline is removed from each line and ``str`` lines are encoded
    as UTF-8.
    """

    def __init__(self, lines: Iterable[bytes | str] | str | bytes) -> None:
        if isinstance(lines, str):
            lines = lines.encode("utf-8")
        if isinstance(lines, (bytes, bytearray)):
            lines = io.BytesIO(lines)
        self._lines: Iterator[bytes | str] = iter(lines)
        self._pending: bytes | None = None
        self.line_number = 0

    def __iter__(self) -> "DiffLineStream":
        return self

    def __next__(self) -> bytes:
        if self._pending is not None:
            data, self._pending = self._pending, None
        else:
            data = self._pull()
        self.line_number += 1
        return data

    def peek(self) -> bytes | None:
        """Return the next line without consuming it, or ``None`` at the end."""
        if self._pending is None:
            try:
                self._pending = self._pull()
            except StopIteration:
                return None
        return self._pending

    def _pull(self) -> bytes:
        raw = next(self._lines)
        data = raw.encode("utf-8") if isinstance(raw, str) else bytes(raw)
        if data.endswith(b"\n"):
            data = data[:-1]
        return data

    def next_line(self, expected: str) -> bytes:
        try:
            return next(self)
        except StopIteration:
            raise UnexpectedEndOfStream(expected=expected, line_number=self.line_number) from None


class HunkBodyReader:
    """Consume and validate the body lines that follow a hunk header."""

    def __init__(self, stream: DiffLineStream) -> None:
        self._stream = stream

    def read(self, hunk: HunkDescriptor) -> bytes:
        """Consume the body of ``hunk`` and return its replacement text."""

        if hunk.consumes_original:
            self.skip_deleted(hunk.original_count)
        if hunk.kind is HunkKind.CHANGE:
            self.expect_separator()
        if hunk.supplies_new:
            return self.read_added(hunk.new_count)
        return b""

    def skip_deleted(self, count: int) -> None:
        for _ in range(count):
            self._expect(DELETED_PREFIX)
        self._skip_no_newline_marker()

    def expect_separator(self) -> None:
        self._expect(SEPARATOR)

    def read_added(self, count: int) -> bytes:
        buffer = bytearray()
        for _ in range(count):
            line = self._expect(ADDED_PREFIX)
            buffer += line[len(ADDED_PREFIX):]
            buffer += b"\n"
        if count and self._skip_no_newline_marker():
            # the last added line is unterminated in the new document
            del buffer[-1]
        return bytes(buffer)

    def _skip_no_newline_marker(self) -> bool:
        upcoming = self._stream.peek()
        if upcoming is None or not upcoming.startswith(NO_NEWLINE_PREFIX):
            return False
        next(self._stream)
        return True

    def _expect(self, prefix: bytes) -> bytes:
        expected = prefix.decode("ascii")
        line = self._stream.next_line(expected)
        if not line.startswith(prefix):
            raise MalformedHunkBody(expected=expected, actual=line, line_number=self._stream.line_number)
        return line


__all__ = [
    "ADDED_PREFIX",
    "DELETED_PREFIX",
    "NO_NEWLINE_PREFIX",
    "SEPARATOR",
    "DiffLineStream",
    "HunkBodyReader",
    "HunkDescriptor",
    "HunkKind",
    "parse_hunk_header",
]
