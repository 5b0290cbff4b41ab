"""apipe: pipe a document through a command and apply only the changed lines."""

from .patch import PatchError, PatchSummary, apply_diff
from .pipeline import PipeResult, apply_diff_to_document, pipe_document

__version__ = "0.1.0"

__all__ = [
    "PatchError",
    "PatchSummary",
    "PipeResult",
    "__version__",
    "apply_diff",
    "apply_diff_to_document",
    "pipe_document",
]
