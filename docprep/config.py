"""Configuration loading for docprep (docprep.yml plus environment overrides)."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .models import (
    DEFAULT_MAX_FILES,
    DEFAULT_PER_FILE_MAX_BYTES,
    DEFAULT_SNIPPET_CHARS,
    DEFAULT_TOTAL_MAX_BYTES,
    MIB,
    SelectionLimits,
)

ENV_PER_FILE_MAX_BYTES = "DOCPREP_PER_FILE_MAX_BYTES"
ENV_TOTAL_MAX_BYTES = "DOCPREP_TOTAL_MAX_BYTES"
ENV_MAX_FILES = "DOCPREP_MAX_FILES"
ENV_SCRATCH_DIR = "DOCPREP_SCRATCH_DIR"
ENV_FETCH_TOKEN = "DOCPREP_FETCH_TOKEN"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass(frozen=True)
class ArchiveConfig:
    """Ceilings applied while unpacking an untrusted archive."""

    max_uncompressed_bytes: int = 256 * MIB
    max_entries: int = 20_000


@dataclass(frozen=True)
class FetchConfig:
    """Settings for retrieving archives from the blob store."""

    timeout_seconds: float = 30.0
    max_download_bytes: int = 100 * MIB
    user_agent: str = "docprep/0.1"
    auth_token: Optional[str] = None
    allow_local: bool = True


@dataclass(frozen=True)
class RateLimitConfig:
    """Fixed-window rate limit applied per caller by the service."""

    limit: int = 5
    window_seconds: float = 60.0


def _default_scratch_dir() -> Path:
    return Path(tempfile.gettempdir()) / "docprep"


@dataclass(frozen=True)
class PrepareConfig:
    """Effective settings for a preparation run."""

    limits: SelectionLimits = field(default_factory=SelectionLimits)
    snippet_chars: int = DEFAULT_SNIPPET_CHARS
    archive: ArchiveConfig = field(default_factory=ArchiveConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    scratch_dir: Path = field(default_factory=_default_scratch_dir)


def load_config(
    config_path: Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> PrepareConfig:
    """Load configuration from disk and apply environment overrides."""
    data: Dict[str, Any] = {}
    if config_path is not None:
        config_file = config_path.expanduser()
        if config_file.is_dir():
            config_file = config_file / "docprep.yml"
        if config_file.exists():
            data = _read_config(config_file)

    env = os.environ if environ is None else environ

    limits_data = _as_dict(data.get("limits"))
    per_file = _lookup_int(limits_data, "per_file_max_bytes", "perFileMaxBytes")
    total = _lookup_int(limits_data, "total_max_bytes", "totalMaxBytes")
    max_files = _lookup_int(limits_data, "max_files", "maxFiles")

    per_file = _env_int(env, ENV_PER_FILE_MAX_BYTES, per_file)
    total = _env_int(env, ENV_TOTAL_MAX_BYTES, total)
    max_files = _env_int(env, ENV_MAX_FILES, max_files)

    limits = SelectionLimits(
        per_file_max_bytes=_positive("per_file_max_bytes", per_file, DEFAULT_PER_FILE_MAX_BYTES),
        total_max_bytes=_positive("total_max_bytes", total, DEFAULT_TOTAL_MAX_BYTES),
        max_files=_positive("max_files", max_files, DEFAULT_MAX_FILES),
    )

    preview_data = _as_dict(data.get("preview"))
    snippet_chars = _positive(
        "snippet_chars", _as_int(preview_data.get("snippet_chars")), DEFAULT_SNIPPET_CHARS
    )

    archive_defaults = ArchiveConfig()
    archive_data = _as_dict(data.get("archive"))
    archive = ArchiveConfig(
        max_uncompressed_bytes=_positive(
            "max_uncompressed_bytes",
            _as_int(archive_data.get("max_uncompressed_bytes")),
            archive_defaults.max_uncompressed_bytes,
        ),
        max_entries=_positive(
            "max_entries",
            _as_int(archive_data.get("max_entries")),
            archive_defaults.max_entries,
        ),
    )

    fetch_defaults = FetchConfig()
    fetch_data = _as_dict(data.get("fetch"))
    timeout = _as_float(fetch_data.get("timeout_seconds"))
    fetch = FetchConfig(
        timeout_seconds=timeout if timeout and timeout > 0 else fetch_defaults.timeout_seconds,
        max_download_bytes=_positive(
            "max_download_bytes",
            _as_int(fetch_data.get("max_download_bytes")),
            fetch_defaults.max_download_bytes,
        ),
        user_agent=_as_str(fetch_data.get("user_agent")) or fetch_defaults.user_agent,
        auth_token=env.get(ENV_FETCH_TOKEN) or _as_str(fetch_data.get("auth_token")),
        allow_local=_as_bool(fetch_data.get("allow_local"), fetch_defaults.allow_local),
    )

    rate_defaults = RateLimitConfig()
    rate_data = _as_dict(data.get("rate_limit"))
    window = _as_float(rate_data.get("window_seconds"))
    rate_limit = RateLimitConfig(
        limit=_positive("rate_limit.limit", _as_int(rate_data.get("limit")), rate_defaults.limit),
        window_seconds=window if window and window > 0 else rate_defaults.window_seconds,
    )

    scratch_value = env.get(ENV_SCRATCH_DIR) or _as_str(data.get("scratch_dir"))
    scratch_dir = Path(scratch_value).expanduser() if scratch_value else _default_scratch_dir()

    return PrepareConfig(
        limits=limits,
        snippet_chars=snippet_chars,
        archive=archive,
        fetch=fetch,
        rate_limit=rate_limit,
        scratch_dir=scratch_dir,
    )


def with_scratch_dir(config: PrepareConfig, scratch_dir: Path) -> PrepareConfig:
    """Return a copy of ``config`` rooted at a different scratch directory."""
    return replace(config, scratch_dir=scratch_dir)


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _lookup_int(data: Mapping[str, Any], *keys: str) -> Optional[int]:
    for key in keys:
        value = _as_int(data.get(key))
        if value is not None:
            return value
    return None


def _env_int(env: Mapping[str, str], name: str, current: Optional[int]) -> Optional[int]:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return current
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


def _positive(name: str, value: Optional[int], default: int) -> int:
    if value is None:
        return default
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return default


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None
