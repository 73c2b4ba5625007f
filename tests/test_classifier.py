"""Tests for docprep.classifier."""

from __future__ import annotations

import pytest

from docprep.classifier import classify, is_binary_extension, is_excluded_dir, language_for


@pytest.mark.parametrize(
    ("extension", "language"),
    [
        (".ts", "ts"),
        (".tsx", "tsx"),
        (".yml", "yaml"),
        (".yaml", "yaml"),
        (".py", "py"),
        (".PRISMA", "prisma"),
        ("", "text"),
    ],
)
def test_language_for_maps_extensions(extension: str, language: str) -> None:
    assert language_for(extension) == language


def test_classify_accepts_known_base_names_without_extension() -> None:
    result = classify("LICENSE", "")
    assert result.eligible is True
    assert result.language == "text"


def test_classify_matches_base_names_case_insensitively() -> None:
    assert classify("readme", "").eligible is True
    assert classify("Dockerfile", "").eligible is True


def test_classify_accepts_env_example_by_name() -> None:
    result = classify(".env.example", ".example")
    assert result.eligible is True
    assert result.language == "example"


def test_classify_rejects_unknown_files() -> None:
    assert classify("notes.log", ".log").eligible is False
    assert classify("data", "").eligible is False


def test_classify_is_total_for_odd_input() -> None:
    result = classify("", "")
    assert result.eligible is False
    assert result.language == "text"


def test_binary_and_excluded_dir_sets() -> None:
    assert is_binary_extension(".PNG") is True
    assert is_binary_extension(".md") is False
    assert is_excluded_dir("node_modules") is True
    assert is_excluded_dir("src") is False
