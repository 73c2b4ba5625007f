"""Retrieval of uploaded archives into scratch storage."""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Callable
from urllib.error import HTTPError, URLError
from urllib.parse import urlparse
from urllib.request import Request, urlopen

from .config import FetchConfig
from .errors import FetchError
from .logging import get_logger

_CHUNK_SIZE = 1024 * 1024
_REMOTE_SCHEMES = {"http", "https"}


@dataclass(frozen=True)
class ArchiveHandle:
    """Downloaded archive awaiting extraction."""

    source_url: str
    local_path: Path

    def discard(self) -> None:
        self.local_path.unlink(missing_ok=True)


class ArchiveFetcher:
    """Copies an archive addressed by URL or local path into scratch storage."""

    def __init__(
        self,
        config: FetchConfig | None = None,
        *,
        opener: Callable[..., BinaryIO] | None = None,
    ) -> None:
        self.config = config or FetchConfig()
        self._opener = opener or urlopen
        self.logger = get_logger("fetcher")

    def fetch(self, source: str, destination: Path) -> ArchiveHandle:
        """Retrieve ``source`` into ``destination`` and return a handle to it."""
        destination.parent.mkdir(parents=True, exist_ok=True)
        scheme = urlparse(source).scheme.lower()
        self.logger.info("Fetching archive from %s", source)

        # Single-letter schemes are Windows drive letters.
        is_local_path = not scheme or len(scheme) == 1
        if (scheme == "file" or is_local_path) and not self.config.allow_local:
            raise FetchError(f"Unsupported archive URL scheme: {scheme or 'local path'}")

        if scheme in _REMOTE_SCHEMES or scheme == "file":
            self._download(source, destination)
        elif is_local_path:
            self._copy_local(Path(source).expanduser(), destination)
        else:
            raise FetchError(f"Unsupported archive URL scheme: {scheme}")

        self.logger.debug("Archive stored at %s", destination)
        return ArchiveHandle(source_url=source, local_path=destination)

    def _build_request(self, url: str) -> Request:
        headers = {"User-Agent": self.config.user_agent}
        if self.config.auth_token:
            headers["Authorization"] = f"Bearer {self.config.auth_token}"
        return Request(url, headers=headers)

    def _download(self, url: str, destination: Path) -> None:
        request = self._build_request(url)
        try:
            with self._opener(request, timeout=self.config.timeout_seconds) as response:
                status = getattr(response, "status", None)
                if status is None and hasattr(response, "getcode"):
                    status = response.getcode()
                # file:// responses report no status.
                if status is not None and status != 200:
                    raise FetchError(f"Archive download failed with HTTP {status}: {url}")
                self._write_stream(response, destination, url)
        except HTTPError as exc:
            destination.unlink(missing_ok=True)
            raise FetchError(f"Archive download failed with HTTP {exc.code}: {url}") from exc
        except URLError as exc:
            destination.unlink(missing_ok=True)
            raise FetchError(f"Archive unreachable: {url} ({exc.reason})") from exc
        except OSError as exc:
            destination.unlink(missing_ok=True)
            raise FetchError(f"Archive download failed: {url} ({exc})") from exc
        except FetchError:
            destination.unlink(missing_ok=True)
            raise

    def _write_stream(self, response: BinaryIO, destination: Path, url: str) -> None:
        written = 0
        limit = self.config.max_download_bytes
        with destination.open("wb") as handle:
            for chunk in iter(lambda: response.read(_CHUNK_SIZE), b""):
                written += len(chunk)
                if written > limit:
                    raise FetchError(f"Archive exceeds download ceiling of {limit} bytes: {url}")
                handle.write(chunk)

    def _copy_local(self, path: Path, destination: Path) -> None:
        if not path.is_file():
            raise FetchError(f"Archive not found: {path}")
        size = path.stat().st_size
        if size > self.config.max_download_bytes:
            raise FetchError(
                f"Archive exceeds download ceiling of {self.config.max_download_bytes} bytes: {path}"
            )
        try:
            shutil.copyfile(path, destination)
        except OSError as exc:
            raise FetchError(f"Archive could not be copied: {path} ({exc})") from exc


__all__ = ["ArchiveFetcher", "ArchiveHandle"]
