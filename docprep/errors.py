"""Error taxonomy for archive preparation."""

from __future__ import annotations


class PrepareError(RuntimeError):
    """Base class for preparation failures."""


class FetchError(PrepareError):
    """Raised when the archive cannot be retrieved."""


class ExtractionError(PrepareError):
    """Raised when an archive is malformed or unsafe to extract."""


class InvalidProjectId(ValueError):
    """Raised when a project identifier cannot name an extraction root."""


class FileReadError(PrepareError):
    """Raised when a single candidate file cannot be read."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


__all__ = [
    "ExtractionError",
    "FetchError",
    "FileReadError",
    "InvalidProjectId",
    "PrepareError",
]
