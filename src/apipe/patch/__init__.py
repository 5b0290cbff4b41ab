"""Normal-format diff parsing and scoped hunk application."""

from .applier import (
    ApplierState,
    EditCommand,
    EditSink,
    PatchApplier,
    PatchSummary,
    apply_diff,
    format_address,
    sink_editor,
)
from .chunking import DEFAULT_MAX_WRITE, trim_incomplete_rune, write_chunked
from .errors import (
    InvalidHunkHeader,
    MalformedHunkBody,
    PatchError,
    SinkError,
    UnexpectedEndOfStream,
    UnsupportedAppendRange,
)
from .hunks import HunkBodyReader, HunkDescriptor, HunkKind, parse_hunk_header
from .offsets import OffsetTracker

__all__ = [
    "ApplierState",
    "DEFAULT_MAX_WRITE",
    "EditCommand",
    "EditSink",
    "HunkBodyReader",
    "HunkDescriptor",
    "HunkKind",
    "InvalidHunkHeader",
    "MalformedHunkBody",
    "OffsetTracker",
    "PatchApplier",
    "PatchError",
    "PatchSummary",
    "SinkError",
    "UnexpectedEndOfStream",
    "UnsupportedAppendRange",
    "apply_diff",
    "format_address",
    "parse_hunk_header",
    "sink_editor",
    "trim_incomplete_rune",
    "write_chunked",
]
