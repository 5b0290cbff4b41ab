"""Chunked payload writes for sinks with a bounded write size."""

from __future__ import annotations

from typing import Callable

from .errors import SinkError

UTF_MAX = 4
DEFAULT_MAX_WRITE = 8000


def _is_rune_start(byte: int) -> bool:
    return byte & 0xC0 != 0x80


def _sequence_length(lead: int) -> int:
    if lead < 0x80:
        return 1
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


def trim_incomplete_rune(data: bytes) -> bytes:
    """Return ``data`` with any trailing incomplete UTF-8 sequence sliced off.

    Only the last :data:`UTF_MAX` bytes are inspected. Bytes that are not
    part of a valid sequence are left alone so that binary payloads still make
    progress.
    """

    length = len(data)
    for index in range(length - 1, max(length - UTF_MAX, 0) - 1, -1):
        lead = data[index]
        if not _is_rune_start(lead):
            continue
        needed = _sequence_length(lead)
        if needed > 1 and index + needed > length:
            return data[:index]
        break
    return data


def write_chunked(write: Callable[[bytes], int | None], payload: bytes, max_write: int | None = DEFAULT_MAX_WRITE) -> int:
    """Write ``payload`` through ``write`` in chunks of at most ``max_write`` bytes.

    ``write`` returns the number of bytes it accepted (``None`` means all of
    them); the next chunk starts right after the accepted bytes. An empty
    payload produces exactly one empty write. Returns the number of writes.
    """

    if max_write is not None and max_write < UTF_MAX:
        raise ValueError(f"max_write must be at least {UTF_MAX} bytes, got {max_write}")
    if not payload:
        write(b"")
        return 1

    writes = 0
    remaining = memoryview(payload)
    while remaining:
        if max_write is not None and len(remaining) > max_write:
            chunk = trim_incomplete_rune(bytes(remaining[:max_write]))
        else:
            chunk = bytes(remaining)
        accepted = write(chunk)
        writes += 1
        if accepted is None:
            accepted = len(chunk)
        if accepted <= 0 or accepted > len(chunk):
            raise SinkError(f"sink accepted {accepted} of {len(chunk)} bytes", payload_size=len(payload))
        remaining = remaining[accepted:]
    return writes


__all__ = ["DEFAULT_MAX_WRITE", "UTF_MAX", "trim_incomplete_rune", "write_chunked"]
