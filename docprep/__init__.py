"""Archive preparation for documentation generation."""

from .errors import ExtractionError, FetchError, FileReadError, InvalidProjectId, PrepareError
from .models import AcceptedFile, SelectionLimits, SelectionManifest
from .summary import PreparedSummary, has_files_changed

__all__ = [
    "AcceptedFile",
    "ExtractionError",
    "FetchError",
    "FileReadError",
    "InvalidProjectId",
    "PrepareError",
    "PreparedSummary",
    "SelectionLimits",
    "SelectionManifest",
    "has_files_changed",
]
