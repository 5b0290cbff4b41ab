"""Apply a normal-format diff to a live document one hunk at a time.

Each hunk becomes one :class:`EditCommand`: an address in current document
coordinates plus the replacement bytes. Commands are handed to a caller
supplied ``edit`` callable as soon as they are built, so the document never
gets replaced wholesale.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Protocol

from ..telemetry import emit_event
from .chunking import DEFAULT_MAX_WRITE, UTF_MAX, write_chunked
from .errors import SinkError, UnsupportedAppendRange
from .hunks import DiffLineStream, HunkBodyReader, HunkDescriptor, HunkKind, parse_hunk_header
from .offsets import OffsetTracker

LOGGER = logging.getLogger(__name__)

EditCallable = Callable[[str, bytes], None]


class EditSink(Protocol):
    """Addressable document target for edit commands."""

    def set_address(self, addr: str) -> None: ...

    def write_replacement(self, payload: bytes) -> int | None: ...


class ApplierState(str, Enum):
    """Progress of a :class:`PatchApplier` run."""

    READING_HEADER = "reading_header"
    CONSUMING_BODY = "consuming_body"
    EMITTING = "emitting"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class EditCommand:
    """Scoped replacement issued for a single hunk."""

    address: str
    payload: bytes


@dataclass(slots=True)
class PatchSummary:
    """Outcome of a completed patch run."""

    hunks_applied: int = 0
    final_offset: int = 0
    addresses: tuple[str, ...] = ()

    @property
    def changed(self) -> bool:
        return self.hunks_applied > 0


def format_address(hunk: HunkDescriptor, tracker: OffsetTracker) -> str:
    """Return the address of ``hunk`` in current document coordinates."""

    if hunk.is_single_line:
        address = str(tracker.translate(hunk.original_start))
        if hunk.kind is HunkKind.ADD:
            address += "+#0"
        return address
    if hunk.kind is HunkKind.ADD:
        raise UnsupportedAppendRange(hunk)
    return f"{tracker.translate(hunk.original_start)},{tracker.translate(hunk.original_end)}"


def sink_editor(sink: EditSink, max_write: int | None = DEFAULT_MAX_WRITE) -> EditCallable:
    """Adapt ``sink`` into an edit callable that writes payloads in safe chunks."""

    if max_write is not None and max_write < UTF_MAX:
        raise ValueError(f"max_write must be at least {UTF_MAX} bytes, got {max_write}")

    def edit(address: str, payload: bytes) -> None:
        try:
            sink.set_address(address)
        except Exception as error:
            raise SinkError(
                f"cannot set address {address!r}: {error}", address=address, payload_size=len(payload)
            ) from error
        try:
            write_chunked(sink.write_replacement, payload, max_write)
        except Exception as error:
            raise SinkError(
                f"cannot write data at {address!r}: {error}", address=address, payload_size=len(payload)
            ) from error

    return edit


@dataclass(slots=True)
class PatchApplier:
    """Drive hunks from a diff stream into an edit callable, in stream order."""

    edit: EditCallable
    tracker: OffsetTracker = field(default_factory=OffsetTracker)
    state: ApplierState = ApplierState.READING_HEADER
    _addresses: list[str] = field(default_factory=list)

    def apply(self, lines: Iterable[bytes | str] | str | bytes) -> PatchSummary:
        """Apply every hunk in ``lines`` and return a summary.

        Stops at the first error; edits issued before it stay applied. Each
        call is a fresh run: the offset starts at zero and the summary only
        reports the hunks of this call.
        """

        self.tracker = OffsetTracker()
        self._addresses = []
        self.state = ApplierState.READING_HEADER
        stream = DiffLineStream(lines)
        reader = HunkBodyReader(stream)
        try:
            for header in stream:
                self.state = ApplierState.READING_HEADER
                hunk = parse_hunk_header(header, line_number=stream.line_number)

                self.state = ApplierState.CONSUMING_BODY
                replacement = reader.read(hunk)

                self.state = ApplierState.EMITTING
                command = EditCommand(address=format_address(hunk, self.tracker), payload=replacement)
                self.edit(command.address, command.payload)
                self._addresses.append(command.address)
                offset = self.tracker.record(hunk)
                LOGGER.debug("Applied %s at %s (offset now %d)", hunk.header, command.address, offset)
                emit_event(
                    "hunk_applied",
                    header=hunk.header,
                    kind=hunk.kind,
                    address=command.address,
                    payload_bytes=len(command.payload),
                    offset=offset,
                )
        except Exception as error:
            self.state = ApplierState.FAILED
            LOGGER.warning("Patch run stopped after %d hunk(s): %s", len(self._addresses), error)
            emit_event(
                "patch_failed",
                error=type(error).__name__,
                message=str(error),
                hunks_applied=len(self._addresses),
                details=getattr(error, "details", None),
            )
            raise

        self.state = ApplierState.DONE
        summary = PatchSummary(
            hunks_applied=len(self._addresses),
            final_offset=self.tracker.offset,
            addresses=tuple(self._addresses),
        )
        emit_event("patch_completed", hunks_applied=summary.hunks_applied, final_offset=summary.final_offset)
        return summary


def apply_diff(lines: Iterable[bytes | str] | str | bytes, edit: EditCallable) -> PatchSummary:
    """Apply the hunks in ``lines`` through ``edit``; see :class:`PatchApplier`."""

    return PatchApplier(edit).apply(lines)


__all__ = [
    "ApplierState",
    "EditCallable",
    "EditCommand",
    "EditSink",
    "PatchApplier",
    "PatchSummary",
    "apply_diff",
    "format_address",
    "sink_editor",
]
