"""Safe extraction of untrusted ZIP archives."""

from __future__ import annotations

import posixpath
import stat
import zipfile
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import List

from .config import ArchiveConfig
from .errors import ExtractionError
from .fetcher import ArchiveHandle
from .logging import get_logger

_CHUNK_SIZE = 1024 * 1024
_MAX_LINK_TARGET_BYTES = 4096


@dataclass(frozen=True)
class _PlannedEntry:
    info: zipfile.ZipInfo
    target: Path
    is_dir: bool


def _normalize_name(name: str) -> str:
    return name.replace("\\", "/")


def _is_symlink(info: zipfile.ZipInfo) -> bool:
    mode = info.external_attr >> 16
    return stat.S_ISLNK(mode)


def _resolve_inside(root: Path, relative: str) -> Path | None:
    """Join ``relative`` to ``root``; None when the result escapes the root."""
    pure = PurePosixPath(relative)
    if pure.is_absolute() or (pure.parts and ":" in pure.parts[0]):
        return None
    candidate = (root / relative).resolve()
    if not candidate.is_relative_to(root):
        return None
    return candidate


class ArchiveExtractor:
    """Unpacks a ZIP archive into a fresh per-project directory."""

    def __init__(self, config: ArchiveConfig | None = None) -> None:
        self.config = config or ArchiveConfig()
        self.logger = get_logger("extractor")

    def extract(self, handle: ArchiveHandle, destination: Path) -> Path:
        """Extract ``handle`` into ``destination`` and delete the archive file.

        Every entry is validated before anything is written, so an unsafe
        archive leaves the destination untouched. On failure the destination
        must still be treated as unusable by the caller.
        """
        try:
            return self._extract(handle.local_path, destination)
        finally:
            handle.discard()

    def _extract(self, archive_path: Path, destination: Path) -> Path:
        if destination.exists():
            if not destination.is_dir() or any(destination.iterdir()):
                raise ExtractionError(f"Extraction root is not empty: {destination}")

        try:
            archive = zipfile.ZipFile(archive_path)
        except (zipfile.BadZipFile, OSError) as exc:
            raise ExtractionError(f"Malformed archive: {exc}") from exc

        with archive:
            destination.mkdir(parents=True, exist_ok=True)
            root = destination.resolve()
            plan = self._plan(archive, root)
            self.logger.info("Extracting %d entries into %s", len(plan), root)
            written = 0
            for entry in plan:
                target = entry.target
                try:
                    if entry.is_dir:
                        target.mkdir(parents=True, exist_ok=True)
                        continue
                    target.parent.mkdir(parents=True, exist_ok=True)
                except OSError as exc:
                    raise ExtractionError(
                        f"Conflicting archive entry {entry.info.filename}: {exc}"
                    ) from exc
                written = self._write_entry(archive, entry.info, target, written)
        return root

    def _plan(self, archive: zipfile.ZipFile, root: Path) -> List[_PlannedEntry]:
        infos = archive.infolist()
        if len(infos) > self.config.max_entries:
            raise ExtractionError(
                f"Archive has {len(infos)} entries; limit is {self.config.max_entries}"
            )

        declared = 0
        plan: List[_PlannedEntry] = []
        for info in infos:
            name = _normalize_name(info.filename)
            target = _resolve_inside(root, name)
            if target is None:
                raise ExtractionError(f"Archive entry escapes extraction root: {info.filename}")

            declared += info.file_size
            if declared > self.config.max_uncompressed_bytes:
                raise ExtractionError(
                    "Archive exceeds uncompressed size ceiling of "
                    f"{self.config.max_uncompressed_bytes} bytes"
                )

            if _is_symlink(info):
                if info.file_size > _MAX_LINK_TARGET_BYTES:
                    raise ExtractionError(
                        f"Symbolic link target too long: {info.filename} ({info.file_size} bytes)"
                    )
                try:
                    raw_target = archive.read(info)
                except (zipfile.BadZipFile, NotImplementedError, OSError, EOFError) as exc:
                    raise ExtractionError(
                        f"Malformed archive entry {info.filename}: {exc}"
                    ) from exc
                link_target = _normalize_name(raw_target.decode("utf-8", errors="replace"))
                link_relative = posixpath.join(posixpath.dirname(name), link_target)
                if posixpath.isabs(link_target) or _resolve_inside(root, link_relative) is None:
                    raise ExtractionError(
                        f"Symbolic link escapes extraction root: {info.filename} -> {link_target}"
                    )
                self.logger.debug("Skipping symbolic link entry %s", info.filename)
                continue

            if target == root:
                continue
            plan.append(_PlannedEntry(info=info, target=target, is_dir=info.is_dir()))
        return plan

    def _write_entry(
        self,
        archive: zipfile.ZipFile,
        info: zipfile.ZipInfo,
        target: Path,
        written: int,
    ) -> int:
        limit = self.config.max_uncompressed_bytes
        try:
            with archive.open(info) as source, target.open("wb") as sink:
                for chunk in iter(lambda: source.read(_CHUNK_SIZE), b""):
                    written += len(chunk)
                    if written > limit:
                        raise ExtractionError(
                            f"Archive exceeds uncompressed size ceiling of {limit} bytes"
                        )
                    sink.write(chunk)
        except (zipfile.BadZipFile, zipfile.LargeZipFile, NotImplementedError) as exc:
            raise ExtractionError(f"Malformed archive entry {info.filename}: {exc}") from exc
        except (OSError, EOFError) as exc:
            raise ExtractionError(f"Failed to extract {info.filename}: {exc}") from exc
        return written


__all__ = ["ArchiveExtractor"]
