"""Core data models shared across docprep components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

KIB = 1024
MIB = 1024 * KIB

DEFAULT_PER_FILE_MAX_BYTES = 300 * KIB
DEFAULT_TOTAL_MAX_BYTES = 8 * MIB
DEFAULT_MAX_FILES = 150
DEFAULT_SNIPPET_CHARS = 1000


@dataclass(frozen=True)
class SelectionLimits:
    """Ceilings applied to a single walk."""

    per_file_max_bytes: int = DEFAULT_PER_FILE_MAX_BYTES
    total_max_bytes: int = DEFAULT_TOTAL_MAX_BYTES
    max_files: int = DEFAULT_MAX_FILES

    def to_dict(self) -> Dict[str, int]:
        return {
            "perFileMaxBytes": self.per_file_max_bytes,
            "totalMaxBytes": self.total_max_bytes,
            "maxFiles": self.max_files,
        }


@dataclass(frozen=True)
class CandidateFile:
    """A regular file considered during a walk."""

    relative_path: str
    absolute_path: str
    extension: str
    size: int

    @property
    def base_name(self) -> str:
        return self.relative_path.rsplit("/", 1)[-1]


@dataclass(frozen=True)
class AcceptedFile:
    """A candidate that passed classification and budget checks."""

    path: str
    language: str
    size: int
    content: str
    hash: str
    snippet: str

    def to_preview(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "language": self.language,
            "size": self.size,
            "hash": self.hash,
            "snippet": self.snippet,
        }


@dataclass(frozen=True)
class WalkWarning:
    """Non-fatal problem recorded for one file during a walk."""

    path: str
    reason: str

    def to_dict(self) -> Dict[str, str]:
        return {"path": self.path, "reason": self.reason}


@dataclass
class SelectionManifest:
    """Ordered selection of files plus the limits and totals of the walk."""

    project_id: str
    root: str
    files: List[AcceptedFile]
    limits: SelectionLimits
    considered: int = 0
    warnings: List[WalkWarning] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.files)

    @property
    def total_bytes(self) -> int:
        return sum(item.size for item in self.files)

    def paths(self) -> List[str]:
        return [item.path for item in self.files]

    def content_for(self, path: str) -> Optional[str]:
        """Return the full content of an accepted file, keyed by relative path."""
        for item in self.files:
            if item.path == path:
                return item.content
        return None

    def to_preview(self) -> Dict[str, Any]:
        """Project the manifest into the shape consumed by the review UI."""
        return {
            "projectId": self.project_id,
            "extractDir": self.root,
            "limits": self.limits.to_dict(),
            "count": self.count,
            "totalBytes": self.total_bytes,
            "considered": self.considered,
            "warnings": [warning.to_dict() for warning in self.warnings],
            "files": [item.to_preview() for item in self.files],
        }
