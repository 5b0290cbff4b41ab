"""Subprocess helpers for the transform command and the ``diff`` tool."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Sequence

LOGGER = logging.getLogger(__name__)

STDIN_PLACEHOLDER = "<standard input>"
DEFAULT_DIFF_COMMAND: tuple[str, ...] = ("diff",)


class ProcessError(RuntimeError):
    """Raised when an external collaborator process fails."""

    def __init__(self, message: str, *, command: Sequence[str], returncode: int | None, diagnostic: str) -> None:
        super().__init__(message)
        self.command: tuple[str, ...] = tuple(command)
        self.returncode = returncode
        self.diagnostic = diagnostic


class TransformProcessError(ProcessError):
    """The transform command could not run or exited with a failure status."""


class DiffProcessError(ProcessError):
    """The ``diff`` tool reported trouble instead of a comparison."""


def _decode(data: bytes | None) -> str:
    return data.decode("utf-8", errors="replace") if data else ""


def ensure_trailing_newline(data: bytes) -> bytes:
    """Return ``data`` terminated by a newline so ``diff`` compares whole lines."""
    if data and not data.endswith(b"\n"):
        return data + b"\n"
    return data


def rewrite_diagnostic(diagnostic: str, document_name: str, placeholder: str = STDIN_PLACEHOLDER) -> str:
    """Point diagnostics that mention standard input at the real document."""
    if not placeholder:
        return diagnostic
    return diagnostic.replace(placeholder, document_name)


def run_transform(
    command: Sequence[str],
    original_path: Path,
    *,
    document_name: str,
    timeout: float | None = None,
    stdin_placeholder: str = STDIN_PLACEHOLDER,
) -> bytes:
    """Run ``command`` with ``original_path`` on stdin and return its stdout."""

    if not command:
        raise ValueError("transform command must not be empty")
    args = list(command)
    try:
        with Path(original_path).open("rb") as handle:
            process = subprocess.run(  # noqa: S603 - command supplied by the caller
                args,
                stdin=handle,
                capture_output=True,
                check=False,
                timeout=timeout,
            )
    except FileNotFoundError as error:
        raise TransformProcessError(
            f"cannot start {args[0]!r}: {error}", command=args, returncode=None, diagnostic=""
        ) from error
    except subprocess.TimeoutExpired as error:
        diagnostic = rewrite_diagnostic(_decode(error.stderr), document_name, stdin_placeholder)
        raise TransformProcessError(
            f"{args[0]!r} timed out after {timeout} seconds",
            command=args,
            returncode=None,
            diagnostic=diagnostic,
        ) from error

    if process.returncode != 0:
        diagnostic = rewrite_diagnostic(_decode(process.stderr), document_name, stdin_placeholder)
        LOGGER.warning("Transform %s exited with status %d", args[0], process.returncode)
        raise TransformProcessError(
            f"{args[0]!r} exited with status {process.returncode}",
            command=args,
            returncode=process.returncode,
            diagnostic=diagnostic,
        )
    LOGGER.debug("Transform %s produced %d byte(s)", args[0], len(process.stdout))
    return process.stdout


def run_diff(
    original_path: Path,
    transformed: bytes,
    *,
    command: Sequence[str] = DEFAULT_DIFF_COMMAND,
    timeout: float | None = None,
) -> bytes:
    """Compare ``original_path`` with ``transformed`` and return normal-format hunks.

    ``diff`` exits with 0 when the inputs match and 1 when they differ; any
    other status means the comparison itself failed.
    """

    args = [*command, str(original_path), "-"]
    try:
        process = subprocess.run(  # noqa: S603 - diff command sourced from configuration
            args,
            input=transformed,
            capture_output=True,
            check=False,
            timeout=timeout,
        )
    except FileNotFoundError as error:
        raise DiffProcessError(
            f"cannot start diff: {error}", command=args, returncode=None, diagnostic=""
        ) from error
    except subprocess.TimeoutExpired as error:
        raise DiffProcessError(
            f"diff timed out after {timeout} seconds",
            command=args,
            returncode=None,
            diagnostic=_decode(error.stderr),
        ) from error

    if process.returncode not in (0, 1):
        raise DiffProcessError(
            f"diff exited with status {process.returncode}",
            command=args,
            returncode=process.returncode,
            diagnostic=_decode(process.stderr),
        )
    return process.stdout


__all__ = [
    "DEFAULT_DIFF_COMMAND",
    "DiffProcessError",
    "ProcessError",
    "STDIN_PLACEHOLDER",
    "TransformProcessError",
    "ensure_trailing_newline",
    "rewrite_diagnostic",
    "run_diff",
    "run_transform",
]
