"""Directory traversal that selects budgeted, documentation-relevant files."""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from .budget import BudgetEnforcer
from .classifier import classify, is_binary_extension, is_excluded_dir
from .errors import FileReadError
from .logging import get_logger
from .models import (
    DEFAULT_SNIPPET_CHARS,
    AcceptedFile,
    CandidateFile,
    SelectionLimits,
    WalkWarning,
)


@dataclass
class WalkResult:
    """Files accepted by one walk, in walk order."""

    files: List[AcceptedFile] = field(default_factory=list)
    warnings: List[WalkWarning] = field(default_factory=list)
    considered: int = 0

    @property
    def total_bytes(self) -> int:
        return sum(item.size for item in self.files)


def _extension(name: str) -> str:
    return os.path.splitext(name)[1].lower()


def _hash_bytes(raw: bytes) -> str:
    return hashlib.sha256(raw).hexdigest()


def _read_candidate(candidate: CandidateFile) -> bytes:
    try:
        with open(candidate.absolute_path, "rb") as handle:
            return handle.read()
    except OSError as exc:
        raise FileReadError(candidate.relative_path, exc.strerror or str(exc)) from exc


class TreeWalker:
    """Walks an extracted tree depth-first and selects files within budget."""

    def __init__(
        self,
        limits: SelectionLimits | None = None,
        *,
        snippet_chars: int = DEFAULT_SNIPPET_CHARS,
    ) -> None:
        self.limits = limits or SelectionLimits()
        self.snippet_chars = snippet_chars
        self.logger = get_logger("walker")

    def walk(self, root: str | Path) -> WalkResult:
        """Return the accepted files under ``root`` in filesystem listing order."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Extraction root not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Extraction root is not a directory: {root}")

        budget = BudgetEnforcer(self.limits)
        result = WalkResult()
        self._walk_dir(root_path, root_path, budget, result)
        self.logger.info(
            "Accepted %d of %d eligible files (%d bytes) under %s",
            len(result.files),
            result.considered,
            budget.accepted_bytes,
            root_path,
        )
        return result

    def _walk_dir(
        self,
        directory: Path,
        root: Path,
        budget: BudgetEnforcer,
        result: WalkResult,
    ) -> bool:
        """Visit one directory; returns False once the walk must stop."""
        try:
            with os.scandir(directory) as iterator:
                entries = list(iterator)
        except OSError as exc:
            rel_dir = directory.relative_to(root).as_posix() or "."
            self._warn(result, rel_dir, f"unreadable directory: {exc.strerror or exc}")
            return True

        for entry in entries:
            if budget.exhausted:
                return False

            abs_path = Path(entry.path)
            rel_path = abs_path.relative_to(root).as_posix()

            try:
                if entry.is_dir(follow_symlinks=False):
                    if is_excluded_dir(entry.name):
                        self.logger.debug("Pruned excluded directory %s", rel_path)
                        continue
                    if not self._walk_dir(abs_path, root, budget, result):
                        return False
                    continue
                if not entry.is_file(follow_symlinks=False):
                    continue
                size = entry.stat(follow_symlinks=False).st_size
            except OSError as exc:
                self._warn(result, rel_path, exc.strerror or str(exc))
                continue

            candidate = CandidateFile(
                relative_path=rel_path,
                absolute_path=str(abs_path),
                extension=_extension(entry.name),
                size=size,
            )
            accepted = self._consider(candidate, budget, result)
            if accepted is not None:
                result.files.append(accepted)
        return True

    def _consider(
        self,
        candidate: CandidateFile,
        budget: BudgetEnforcer,
        result: WalkResult,
    ) -> AcceptedFile | None:
        if is_binary_extension(candidate.extension):
            return None
        classification = classify(candidate.base_name, candidate.extension)
        if not classification.eligible:
            return None

        result.considered += 1
        if not budget.can_admit(candidate.size):
            self.logger.debug(
                "Budget rejected %s (%d bytes)", candidate.relative_path, candidate.size
            )
            return None

        try:
            raw = _read_candidate(candidate)
        except FileReadError as exc:
            self._warn(result, exc.path, exc.reason)
            return None

        if b"\x00" in raw:
            self.logger.debug("Skipped %s: binary content", candidate.relative_path)
            return None

        if not budget.try_admit(candidate.size):
            return None

        content = raw.decode("utf-8", errors="replace")
        return AcceptedFile(
            path=candidate.relative_path,
            language=classification.language,
            size=candidate.size,
            content=content,
            hash=_hash_bytes(raw),
            snippet=content[: self.snippet_chars],
        )

    def _warn(self, result: WalkResult, path: str, reason: str) -> None:
        self.logger.warning("Skipping unreadable file %s: %s", path, reason)
        result.warnings.append(WalkWarning(path=path, reason=reason))


__all__ = ["TreeWalker", "WalkResult"]
