"""Error taxonomy for diff parsing and hunk application.

Every error is fatal to the run that raised it: the line offsets used for
later hunks are only meaningful when each earlier hunk was applied in order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping

if TYPE_CHECKING:
    from .hunks import HunkDescriptor


class PatchError(RuntimeError):
    """Raised when a diff stream cannot be parsed or applied."""

    def __init__(self, message: str, *, details: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = dict(details or {})


class InvalidHunkHeader(PatchError):
    """A header line does not match ``L1[,L2]OP L3[,L4]``."""

    def __init__(self, line: str, *, reason: str | None = None, line_number: int | None = None) -> None:
        message = f"{line!r} is not a valid diff operation"
        if reason:
            message = f"{message}: {reason}"
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message, details={"line": line, "reason": reason, "line_number": line_number})
        self.line = line
        self.line_number = line_number


class MalformedHunkBody(PatchError):
    """A body line is missing its marker prefix or the change separator."""

    def __init__(self, *, expected: str, actual: bytes, line_number: int | None = None) -> None:
        message = f"line {actual!r} does not have expected prefix {expected!r}"
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(
            message,
            details={"expected": expected, "actual": actual, "line_number": line_number},
        )
        self.expected = expected
        self.actual = actual
        self.line_number = line_number


class UnexpectedEndOfStream(PatchError):
    """The diff stream ended before a hunk body was complete."""

    def __init__(self, *, expected: str, line_number: int | None = None) -> None:
        message = f"unexpected end of diff stream while reading {expected!r} line"
        if line_number is not None:
            message = f"{message} after line {line_number}"
        super().__init__(message, details={"expected": expected, "line_number": line_number})
        self.expected = expected
        self.line_number = line_number


class UnsupportedAppendRange(PatchError):
    """An append hunk references more than one original line."""

    def __init__(self, hunk: "HunkDescriptor") -> None:
        super().__init__(
            f"append with multiple line source: {hunk.header}",
            details={"header": hunk.header},
        )
        self.hunk = hunk


class SinkError(PatchError):
    """The edit sink rejected an address or a payload write."""

    def __init__(self, message: str, *, address: str | None = None, payload_size: int | None = None) -> None:
        super().__init__(message, details={"address": address, "payload_size": payload_size})
        self.address = address
        self.payload_size = payload_size


__all__ = [
    "InvalidHunkHeader",
    "MalformedHunkBody",
    "PatchError",
    "SinkError",
    "UnexpectedEndOfStream",
    "UnsupportedAppendRange",
]
