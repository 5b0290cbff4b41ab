"""Document sinks and external process collaborators."""

from .document import DocumentError, FileDocument, TextDocument, display_name
from .process import (
    DiffProcessError,
    ProcessError,
    TransformProcessError,
    ensure_trailing_newline,
    rewrite_diagnostic,
    run_diff,
    run_transform,
)

__all__ = [
    "DiffProcessError",
    "DocumentError",
    "FileDocument",
    "ProcessError",
    "TextDocument",
    "TransformProcessError",
    "display_name",
    "ensure_trailing_newline",
    "rewrite_diagnostic",
    "run_diff",
    "run_transform",
]
