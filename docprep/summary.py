"""Persistable summaries of prepared manifests and change detection."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Any, Dict, List

from .models import SelectionManifest


@dataclass(frozen=True)
class PreparedFile:
    """Summary of one accepted file."""

    path: str
    language: str
    size: int
    hash: str


@dataclass
class PreparedSummary:
    """Compact record of a manifest that project storage can keep."""

    files: List[PreparedFile] = field(default_factory=list)
    total_files: int = 0
    total_bytes: int = 0
    extracted_at: str = ""

    @classmethod
    def from_manifest(
        cls, manifest: SelectionManifest, *, extracted_at: datetime | None = None
    ) -> "PreparedSummary":
        timestamp = (extracted_at or datetime.now(UTC)).isoformat()
        return cls(
            files=[
                PreparedFile(path=item.path, language=item.language, size=item.size, hash=item.hash)
                for item in manifest.files
            ],
            total_files=manifest.count,
            total_bytes=manifest.total_bytes,
            extracted_at=timestamp,
        )

    def file_paths(self) -> List[str]:
        return [item.path for item in self.files]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "files": [asdict(item) for item in self.files],
            "totalFiles": self.total_files,
            "totalBytes": self.total_bytes,
            "extractedAt": self.extracted_at,
        }

    def dumps(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)

    @classmethod
    def loads(cls, payload: str) -> "PreparedSummary":
        """Parse a summary produced by :meth:`dumps`."""
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Failed to parse prepared summary: {exc}") from exc
        if not isinstance(data, dict) or not isinstance(data.get("files"), list):
            raise ValueError("Prepared summary must be a mapping with a 'files' list")

        files: List[PreparedFile] = []
        for entry in data["files"]:
            if not isinstance(entry, dict):
                raise ValueError("Prepared summary file entries must be mappings")
            try:
                files.append(
                    PreparedFile(
                        path=str(entry["path"]),
                        language=str(entry["language"]),
                        size=int(entry["size"]),
                        hash=str(entry["hash"]),
                    )
                )
            except (KeyError, TypeError, ValueError) as exc:
                raise ValueError(f"Invalid prepared summary entry: {entry!r}") from exc

        return cls(
            files=files,
            total_files=int(data.get("totalFiles", len(files))),
            total_bytes=int(data.get("totalBytes", sum(item.size for item in files))),
            extracted_at=str(data.get("extractedAt", "")),
        )


def has_files_changed(old: PreparedSummary, new: PreparedSummary) -> bool:
    """Return True when the selected files or their contents differ."""
    if len(old.files) != len(new.files):
        return True
    new_hashes = {item.path: item.hash for item in new.files}
    for item in old.files:
        if new_hashes.get(item.path) != item.hash:
            return True
    return False


__all__ = ["PreparedFile", "PreparedSummary", "has_files_changed"]
