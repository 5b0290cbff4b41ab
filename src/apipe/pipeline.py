"""Pipe a document through a command and patch it to the command's output."""

from __future__ import annotations

import io
import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from .config import Settings
from .patch.applier import PatchSummary, apply_diff, sink_editor
from .telemetry import emit_event
from .tools.document import TextDocument
from .tools.process import TransformProcessError, ensure_trailing_newline, run_diff, run_transform

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class PipeResult:
    """Outcome of piping one document through a transform."""

    document_name: str
    summary: PatchSummary

    @property
    def changed(self) -> bool:
        return self.summary.changed


def apply_diff_to_document(
    document: TextDocument,
    diff_lines: Iterable[bytes | str],
    settings: Settings | None = None,
) -> PatchSummary:
    """Apply an already computed normal-format diff to ``document``."""

    settings = settings or Settings()
    edit = sink_editor(document, max_write=settings.engine.max_write)
    return apply_diff(diff_lines, edit)


def pipe_document(
    document: TextDocument,
    command: Sequence[str],
    settings: Settings | None = None,
) -> PipeResult:
    """Replace ``document`` with ``command``'s output using minimal line edits.

    The document is changed in memory only; callers decide whether to persist
    it. A failing transform raises :class:`TransformProcessError` before any
    edit is attempted.
    """

    settings = settings or Settings()
    if not command:
        raise ValueError("transform command must not be empty")

    original = ensure_trailing_newline(document.read())

    with tempfile.NamedTemporaryFile("wb", prefix="apipe-", delete=False) as handle:
        handle.write(original)
        handle.flush()
        original_path = Path(handle.name)

    try:
        try:
            transformed = run_transform(
                command,
                original_path,
                document_name=document.name,
                timeout=settings.transform.timeout,
                stdin_placeholder=settings.transform.stdin_placeholder,
            )
        except TransformProcessError as error:
            emit_event(
                "transform_failed",
                document=document.name,
                command=list(error.command),
                returncode=error.returncode,
            )
            raise
        diff_output = run_diff(
            original_path,
            transformed,
            command=settings.diff.command,
            timeout=settings.diff.timeout,
        )
    finally:
        original_path.unlink(missing_ok=True)

    # the edits address the same newline-terminated snapshot that was diffed
    if document.ensure_trailing_newline():
        LOGGER.debug("Terminated last line of %s before patching", document.name)
    summary = apply_diff_to_document(document, io.BytesIO(diff_output), settings)
    emit_event(
        "pipe_completed",
        document=document.name,
        command=list(command),
        hunks_applied=summary.hunks_applied,
    )
    return PipeResult(document_name=document.name, summary=summary)


__all__ = ["PipeResult", "apply_diff_to_document", "pipe_document"]
