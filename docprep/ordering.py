"""Presentation ordering for accepted files."""

from __future__ import annotations

import posixpath
from typing import List, Sequence

from .models import AcceptedFile

MANIFEST_FILES = frozenset(
    {
        "package.json",
        "pyproject.toml",
        "setup.py",
        "setup.cfg",
        "requirements.txt",
        "cargo.toml",
        "go.mod",
        "gemfile",
        "composer.json",
        "pom.xml",
        "build.gradle",
        "tsconfig.json",
        "dockerfile",
        "makefile",
    }
)

_DOC_EXTENSIONS = (".md", ".mdx")
_SCHEMA_MARKERS = ("schema", "model", "entity", "entities", ".prisma", ".graphql", ".sql")
_API_MARKERS = ("api/", "route", "controller", "endpoint", "handler")
_CONFIG_MARKERS = ("config", "util", "helper", "lib/", "settings")
_TYPED_EXTENSIONS = (".ts", ".tsx", ".java", ".kt", ".cs", ".go", ".rs", ".swift", ".py")

# Tier weights; only their relative order matters.
_README_SCORE = 100
_MANIFEST_SCORE = 90
_DOC_SCORE = 70
_SCHEMA_SCORE = 60
_API_SCORE = 50
_CONFIG_SCORE = 40
_TYPED_SCORE = 30
_DEFAULT_SCORE = 10


def priority_score(path: str) -> int:
    """Rank a relative path by how useful it is for documentation."""
    lowered = path.lower()
    base = posixpath.basename(lowered)

    if "readme" in base:
        return _README_SCORE
    if base in MANIFEST_FILES:
        return _MANIFEST_SCORE
    if base.endswith(_DOC_EXTENSIONS) or base in {"license", "contributing", "changelog"}:
        return _DOC_SCORE
    if any(marker in lowered for marker in _SCHEMA_MARKERS):
        return _SCHEMA_SCORE
    if any(marker in lowered for marker in _API_MARKERS):
        return _API_SCORE
    if any(marker in lowered for marker in _CONFIG_MARKERS):
        return _CONFIG_SCORE
    if base.endswith(_TYPED_EXTENSIONS):
        return _TYPED_SCORE
    return _DEFAULT_SCORE


def order_files(files: Sequence[AcceptedFile]) -> List[AcceptedFile]:
    """Return ``files`` sorted by descending priority; ties keep walk order."""
    return sorted(files, key=lambda item: -priority_score(item.path))


__all__ = ["MANIFEST_FILES", "order_files", "priority_score"]
