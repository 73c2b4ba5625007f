"""Eligibility and language tagging for candidate files."""

from __future__ import annotations

from dataclasses import dataclass

EXCLUDED_DIRS = frozenset(
    {
        "node_modules",
        ".git",
        ".next",
        "build",
        "dist",
        "out",
        "coverage",
        ".cache",
        ".turbo",
        "vendor",
        ".venv",
        "pycache",
        "__pycache__",
    }
)

INCLUDE_FILES = frozenset(
    {
        "readme",
        "readme.md",
        "readme.mdx",
        "license",
        "contributing",
        "changelog",
        "package.json",
        "tsconfig.json",
        "next.config.ts",
        ".env.example",
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
        "dockerfile",
        "makefile",
    }
)

INCLUDE_EXTENSIONS = frozenset(
    {
        ".md",
        ".mdx",
        ".ts",
        ".tsx",
        ".js",
        ".jsx",
        ".json",
        ".yml",
        ".yaml",
        ".toml",
        ".py",
        ".rs",
        ".go",
        ".rb",
        ".php",
        ".cs",
        ".java",
        ".kt",
        ".swift",
        ".sql",
        ".graphql",
        ".prisma",
        ".sh",
    }
)

BINARY_EXTENSIONS = frozenset(
    {
        ".png",
        ".jpg",
        ".jpeg",
        ".gif",
        ".ico",
        ".svg",
        ".webp",
        ".zip",
        ".tar",
        ".gz",
        ".rar",
        ".7z",
        ".pdf",
        ".mp4",
        ".mp3",
        ".woff",
        ".woff2",
        ".ttf",
    }
)

_LANGUAGE_BY_EXTENSION = {
    ".ts": "ts",
    ".tsx": "tsx",
    ".js": "js",
    ".jsx": "jsx",
    ".md": "md",
    ".mdx": "mdx",
    ".json": "json",
    ".yml": "yaml",
    ".yaml": "yaml",
}

DEFAULT_LANGUAGE = "text"


@dataclass(frozen=True)
class Classification:
    """Outcome of classifying one file by name and extension."""

    eligible: bool
    language: str


def is_excluded_dir(name: str) -> bool:
    return name in EXCLUDED_DIRS


def is_binary_extension(extension: str) -> bool:
    return extension.lower() in BINARY_EXTENSIONS


def language_for(extension: str) -> str:
    """Map an extension to a short language tag, falling back to the bare extension."""
    extension = extension.lower()
    if extension in _LANGUAGE_BY_EXTENSION:
        return _LANGUAGE_BY_EXTENSION[extension]
    return extension.lstrip(".") or DEFAULT_LANGUAGE


def classify(base_name: str, extension: str) -> Classification:
    """Decide whether a file is documentation-relevant and tag its language."""
    extension = extension.lower()
    eligible = base_name.lower() in INCLUDE_FILES or extension in INCLUDE_EXTENSIONS
    return Classification(eligible=eligible, language=language_for(extension))


__all__ = [
    "BINARY_EXTENSIONS",
    "Classification",
    "DEFAULT_LANGUAGE",
    "EXCLUDED_DIRS",
    "INCLUDE_EXTENSIONS",
    "INCLUDE_FILES",
    "classify",
    "is_binary_extension",
    "is_excluded_dir",
    "language_for",
]
