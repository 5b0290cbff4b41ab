from __future__ import annotations

import shutil
import sys
import textwrap
from pathlib import Path

import pytest

from apipe.tools.process import (
    DiffProcessError,
    TransformProcessError,
    ensure_trailing_newline,
    rewrite_diagnostic,
    run_diff,
    run_transform,
)

requires_diff = pytest.mark.skipif(shutil.which("diff") is None, reason="diff is not installed")


def _python(source: str) -> list[str]:
    return [sys.executable, "-c", textwrap.dedent(source)]


def _original(tmp_path: Path, data: bytes = b"foo\nbar\nbaz\n") -> Path:
    path = tmp_path / "original.txt"
    path.write_bytes(data)
    return path


def test_ensure_trailing_newline() -> None:
    assert ensure_trailing_newline(b"foo") == b"foo\n"
    assert ensure_trailing_newline(b"foo\n") == b"foo\n"
    assert ensure_trailing_newline(b"") == b""


def test_rewrite_diagnostic_replaces_every_placeholder() -> None:
    diagnostic = "<standard input>:3:1: expected 'package'\n<standard input>:9:2: oops\n"

    rewritten = rewrite_diagnostic(diagnostic, "cmd/main.go")

    assert rewritten == "cmd/main.go:3:1: expected 'package'\ncmd/main.go:9:2: oops\n"
    assert rewrite_diagnostic("plain", "x", placeholder="") == "plain"


def test_run_transform_returns_stdout(tmp_path: Path) -> None:
    command = _python(
        """
        import sys
        sys.stdout.buffer.write(sys.stdin.buffer.read().upper())
        """
    )

    output = run_transform(command, _original(tmp_path), document_name="doc.txt")

    assert output == b"FOO\nBAR\nBAZ\n"


def test_run_transform_failure_rewrites_diagnostic(tmp_path: Path) -> None:
    command = _python(
        """
        import sys
        sys.stderr.write("<standard input>:2:1: syntax error\\n")
        sys.exit(2)
        """
    )

    with pytest.raises(TransformProcessError) as excinfo:
        run_transform(command, _original(tmp_path), document_name="pkg/doc.go")

    error = excinfo.value
    assert error.returncode == 2
    assert error.diagnostic == "pkg/doc.go:2:1: syntax error\n"
    assert "exited with status 2" in str(error)


def test_run_transform_missing_executable(tmp_path: Path) -> None:
    with pytest.raises(TransformProcessError, match="cannot start"):
        run_transform(["apipe-no-such-command-xyz"], _original(tmp_path), document_name="doc")


def test_run_transform_timeout(tmp_path: Path) -> None:
    command = _python(
        """
        import time
        time.sleep(5)
        """
    )

    with pytest.raises(TransformProcessError, match="timed out"):
        run_transform(command, _original(tmp_path), document_name="doc", timeout=0.2)


def test_run_transform_rejects_empty_command(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        run_transform([], _original(tmp_path), document_name="doc")


@requires_diff
def test_run_diff_produces_normal_format(tmp_path: Path) -> None:
    output = run_diff(_original(tmp_path), b"foo\nBAR\nbaz\nqux\n")

    assert output == b"2c2\n< bar\n---\n> BAR\n3a4\n> qux\n"


@requires_diff
def test_run_diff_identical_input_is_empty(tmp_path: Path) -> None:
    assert run_diff(_original(tmp_path), b"foo\nbar\nbaz\n") == b""


def test_run_diff_trouble_status_raises(tmp_path: Path) -> None:
    command = _python(
        """
        import sys
        sys.stderr.write("diff: broken\\n")
        sys.exit(2)
        """
    )

    with pytest.raises(DiffProcessError) as excinfo:
        run_diff(_original(tmp_path), b"x\n", command=command)

    assert excinfo.value.returncode == 2
    assert excinfo.value.diagnostic == "diff: broken\n"
