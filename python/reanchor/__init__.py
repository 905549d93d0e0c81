from importlib.metadata import PackageNotFoundError, version

from reanchor.models import Comment, DropReason, Paragraph, ProposedEdit, RemapReason, ResolvedEdit, RevisionRequest
from reanchor.normalize import build_loose_text
from reanchor.remap import ResolutionContext, remap_unresolved_edit
from reanchor.resolver import resolve_old_text
from reanchor.validation import ValidationResult, resolve_revision, validate_edits

try:
    __version__ = version("reanchor")
except PackageNotFoundError:
    # Running from a source checkout without an install.
    __version__ = "0.0.0-dev"

__all__ = [
    "Comment",
    "DropReason",
    "Paragraph",
    "ProposedEdit",
    "RemapReason",
    "ResolvedEdit",
    "RevisionRequest",
    "ResolutionContext",
    "ValidationResult",
    "build_loose_text",
    "remap_unresolved_edit",
    "resolve_old_text",
    "resolve_revision",
    "validate_edits",
    "__version__",
]
