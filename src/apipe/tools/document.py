"""Line-addressable documents that accept edit commands.

Addresses follow the acme conventions used by the patch engine:

* ``N`` selects line ``N`` including its terminator (``0`` is the empty
  point before the first line),
* ``N+#0`` is the empty point right after line ``N``,
* ``N,M`` selects lines ``N`` through ``M``.

A write replaces the selected range and then moves the address to the empty
point after the inserted text, so several chunked writes compose into one
replacement.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

from ..patch.errors import SinkError

_ADDRESS_RE = re.compile(r"([0-9]+)(?:,([0-9]+)|(\+#0))?")


class DocumentError(RuntimeError):
    """Raised when a document cannot be loaded or saved."""


def display_name(path: Path | str, cwd: Path | str | None = None) -> str:
    """Return ``path`` relative to ``cwd`` when it lives below it."""

    candidate = Path(path)
    base = Path(cwd) if cwd is not None else Path.cwd()
    try:
        return candidate.resolve().relative_to(base.resolve()).as_posix()
    except ValueError:
        return candidate.as_posix()


class TextDocument:
    """In-memory UTF-8 document implementing the edit sink interface."""

    def __init__(self, text: str = "", *, name: str = "<document>", max_write: int | None = None) -> None:
        self._text = text
        self.name = name
        self.max_write = max_write
        self._dot = (0, 0)

    @property
    def text(self) -> str:
        return self._text

    @property
    def line_count(self) -> int:
        if not self._text:
            return 0
        return self._text.count("\n") + (0 if self._text.endswith("\n") else 1)

    @property
    def dot(self) -> tuple[int, int]:
        """Character range the next write will replace."""
        return self._dot

    def read(self) -> bytes:
        return self._text.encode("utf-8")

    def ensure_trailing_newline(self) -> bool:
        """Terminate the last line if needed; return whether text was added."""
        if self._text and not self._text.endswith("\n"):
            self._text += "\n"
            return True
        return False

    # ---------------------------------------------------------------- edit sink
    def set_address(self, addr: str) -> None:
        match = _ADDRESS_RE.fullmatch(addr)
        if match is None:
            raise SinkError(f"bad address syntax {addr!r}", address=addr)
        first = int(match.group(1))
        if match.group(2) is not None:
            last = int(match.group(2))
            if last < first:
                raise SinkError(f"address range {addr!r} is descending", address=addr)
            start = self._line_range(first, addr)[0]
            end = self._line_range(last, addr)[1]
            self._dot = (start, end)
            return
        start, end = self._line_range(first, addr)
        if match.group(3):
            self._dot = (end, end)
        else:
            self._dot = (start, end)

    def write_replacement(self, payload: bytes) -> int:
        if self.max_write is not None and len(payload) > self.max_write:
            raise SinkError(
                f"write of {len(payload)} bytes exceeds limit of {self.max_write}",
                payload_size=len(payload),
            )
        try:
            chunk = payload.decode("utf-8")
        except UnicodeDecodeError as error:
            raise SinkError(f"write is not complete UTF-8: {error}", payload_size=len(payload)) from error
        start, end = self._dot
        self._text = self._text[:start] + chunk + self._text[end:]
        cursor = start + len(chunk)
        self._dot = (cursor, cursor)
        return len(payload)

    def _line_range(self, line: int, addr: str) -> tuple[int, int]:
        if line == 0:
            return 0, 0
        position = 0
        for _ in range(line - 1):
            newline = self._text.find("\n", position)
            if newline < 0:
                raise SinkError(f"address {addr!r} is out of range", address=addr)
            position = newline + 1
        newline = self._text.find("\n", position)
        end = len(self._text) if newline < 0 else newline + 1
        return position, end


class FileDocument(TextDocument):
    """A :class:`TextDocument` backed by a file on disk."""

    def __init__(self, path: Path | str, text: str, *, max_write: int | None = None) -> None:
        self.path = Path(path)
        super().__init__(text, name=display_name(self.path), max_write=max_write)
        self._saved = self.read()

    @property
    def modified(self) -> bool:
        """Whether the buffer differs from the bytes last read from or written to disk."""
        return self.read() != self._saved

    @classmethod
    def load(cls, path: Path | str, *, max_write: int | None = None) -> "FileDocument":
        target = Path(path)
        try:
            data = target.read_bytes()
        except OSError as error:
            raise DocumentError(f"cannot read {target}: {error}") from error
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as error:
            raise DocumentError(f"{target} is not valid UTF-8: {error}") from error
        return cls(target, text, max_write=max_write)

    def save(self) -> None:
        tmp_path = self.path.with_name(f".{self.path.name}.apipe-tmp")
        try:
            tmp_path.write_bytes(self.read())
            if self.path.exists():
                os.chmod(tmp_path, self.path.stat().st_mode)
            os.replace(tmp_path, self.path)
            self._saved = self.read()
        except OSError as error:
            tmp_path.unlink(missing_ok=True)
            raise DocumentError(f"cannot write {self.path}: {error}") from error


__all__ = ["DocumentError", "FileDocument", "TextDocument", "display_name"]
