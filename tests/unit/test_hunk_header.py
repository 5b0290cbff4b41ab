from __future__ import annotations

import pytest

from apipe.patch.errors import InvalidHunkHeader
from apipe.patch.hunks import HunkDescriptor, HunkKind, parse_hunk_header


def test_parse_single_line_change_defaults_range_ends() -> None:
    hunk = parse_hunk_header("2c2")

    assert hunk == HunkDescriptor(original_start=2, original_end=2, kind=HunkKind.CHANGE, new_start=2, new_end=2)
    assert hunk.is_single_line
    assert hunk.original_count == 1
    assert hunk.new_count == 1


def test_parse_ranges_on_both_sides() -> None:
    hunk = parse_hunk_header("5,7c6,10")

    assert (hunk.original_start, hunk.original_end) == (5, 7)
    assert (hunk.new_start, hunk.new_end) == (6, 10)
    assert hunk.kind is HunkKind.CHANGE
    assert hunk.line_delta == 2


@pytest.mark.parametrize(
    ("header", "kind", "delta"),
    [
        ("3a4", HunkKind.ADD, 1),
        ("0a1,3", HunkKind.ADD, 3),
        ("4,6d3", HunkKind.DELETE, -3),
        ("9d8", HunkKind.DELETE, -1),
        ("2,5c2", HunkKind.CHANGE, -3),
    ],
)
def test_operator_maps_to_kind(header: str, kind: HunkKind, delta: int) -> None:
    hunk = parse_hunk_header(header)

    assert hunk.kind is kind
    assert hunk.line_delta == delta
    assert hunk.header == header


def test_parse_accepts_bytes() -> None:
    hunk = parse_hunk_header(b"12,13d11")

    assert hunk.kind is HunkKind.DELETE
    assert hunk.original_count == 2


@pytest.mark.parametrize(
    "line",
    ["abc", "", "2x2", "2c", "c2", "1,2,3c4", " 2c2", "2c2 ", "2c2\n", "-1d0", "@@ -1 +1 @@"],
)
def test_invalid_header_is_rejected(line: str) -> None:
    with pytest.raises(InvalidHunkHeader) as excinfo:
        parse_hunk_header(line)

    assert repr(line) in str(excinfo.value)
    assert excinfo.value.line == line


def test_descending_range_is_rejected() -> None:
    with pytest.raises(InvalidHunkHeader, match="descending"):
        parse_hunk_header("5,3d2")
    with pytest.raises(InvalidHunkHeader, match="descending"):
        parse_hunk_header("2a4,3")


def test_invalid_header_reports_line_number() -> None:
    with pytest.raises(InvalidHunkHeader) as excinfo:
        parse_hunk_header("oops", line_number=7)

    assert excinfo.value.line_number == 7
    assert str(excinfo.value).startswith("line 7:")
