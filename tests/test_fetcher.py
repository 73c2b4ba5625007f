"""Tests for docprep.fetcher."""

from __future__ import annotations

import io
from pathlib import Path
from urllib.error import HTTPError, URLError
from urllib.request import Request

import pytest

from docprep.config import FetchConfig
from docprep.errors import FetchError
from docprep.fetcher import ArchiveFetcher


class _FakeResponse(io.BytesIO):
    def __init__(self, payload: bytes, status: int = 200) -> None:
        super().__init__(payload)
        self.status = status


class _RecordingOpener:
    def __init__(self, response: _FakeResponse | None = None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.requests: list[Request] = []
        self.timeouts: list[float] = []

    def __call__(self, request: Request, timeout: float) -> _FakeResponse:
        self.requests.append(request)
        self.timeouts.append(timeout)
        if self.error is not None:
            raise self.error
        assert self.response is not None
        return self.response


def test_fetch_downloads_http_archive(tmp_path: Path) -> None:
    opener = _RecordingOpener(_FakeResponse(b"PK-bytes"))
    fetcher = ArchiveFetcher(FetchConfig(timeout_seconds=5, auth_token="secret"), opener=opener)
    destination = tmp_path / "scratch" / "project-1.zip"

    handle = fetcher.fetch("https://files.example.com/f/project.zip", destination)

    assert handle.local_path == destination
    assert handle.source_url == "https://files.example.com/f/project.zip"
    assert destination.read_bytes() == b"PK-bytes"
    request = opener.requests[0]
    assert request.get_header("Authorization") == "Bearer secret"
    assert opener.timeouts == [5]


def test_fetch_raises_on_non_200_status(tmp_path: Path) -> None:
    opener = _RecordingOpener(_FakeResponse(b"", status=204))
    fetcher = ArchiveFetcher(opener=opener)
    destination = tmp_path / "project.zip"

    with pytest.raises(FetchError, match="204"):
        fetcher.fetch("https://files.example.com/project.zip", destination)

    assert not destination.exists()


def test_fetch_wraps_http_errors(tmp_path: Path) -> None:
    error = HTTPError("https://files.example.com/x.zip", 404, "Not Found", hdrs=None, fp=None)
    fetcher = ArchiveFetcher(opener=_RecordingOpener(error=error))

    with pytest.raises(FetchError, match="404"):
        fetcher.fetch("https://files.example.com/x.zip", tmp_path / "x.zip")


def test_fetch_wraps_unreachable_hosts(tmp_path: Path) -> None:
    fetcher = ArchiveFetcher(opener=_RecordingOpener(error=URLError("connection refused")))

    with pytest.raises(FetchError, match="unreachable"):
        fetcher.fetch("http://localhost:1/x.zip", tmp_path / "x.zip")


def test_fetch_enforces_download_ceiling(tmp_path: Path) -> None:
    opener = _RecordingOpener(_FakeResponse(b"x" * 64))
    fetcher = ArchiveFetcher(FetchConfig(max_download_bytes=16), opener=opener)
    destination = tmp_path / "big.zip"

    with pytest.raises(FetchError, match="ceiling"):
        fetcher.fetch("https://files.example.com/big.zip", destination)

    assert not destination.exists()


def test_fetch_copies_local_path(tmp_path: Path) -> None:
    source = tmp_path / "upload.zip"
    source.write_bytes(b"local archive")
    destination = tmp_path / "scratch" / "copy.zip"

    handle = ArchiveFetcher().fetch(str(source), destination)

    assert handle.local_path.read_bytes() == b"local archive"
    assert source.exists()


def test_fetch_reads_file_urls(tmp_path: Path) -> None:
    source = tmp_path / "upload.zip"
    source.write_bytes(b"via file url")
    destination = tmp_path / "scratch" / "copy.zip"

    ArchiveFetcher().fetch(source.as_uri(), destination)

    assert destination.read_bytes() == b"via file url"


def test_fetch_rejects_missing_local_file(tmp_path: Path) -> None:
    with pytest.raises(FetchError, match="not found"):
        ArchiveFetcher().fetch(str(tmp_path / "missing.zip"), tmp_path / "out.zip")


def test_fetch_rejects_unsupported_scheme(tmp_path: Path) -> None:
    with pytest.raises(FetchError, match="scheme"):
        ArchiveFetcher().fetch("ftp://example.com/x.zip", tmp_path / "out.zip")


def test_handle_discard_removes_file(tmp_path: Path) -> None:
    source = tmp_path / "upload.zip"
    source.write_bytes(b"data")

    handle = ArchiveFetcher().fetch(str(source), tmp_path / "copy.zip")
    handle.discard()

    assert not handle.local_path.exists()


def test_fetch_refuses_local_sources_when_disabled(tmp_path: Path) -> None:
    source = tmp_path / "upload.zip"
    source.write_bytes(b"secret")
    opener = _RecordingOpener(_FakeResponse(b"unused"))
    fetcher = ArchiveFetcher(FetchConfig(allow_local=False), opener=opener)

    for address in (str(source), source.as_uri()):
        with pytest.raises(FetchError, match="Unsupported archive URL scheme"):
            fetcher.fetch(address, tmp_path / "scratch" / "copy.zip")

    assert opener.requests == []
    assert not (tmp_path / "scratch" / "copy.zip").exists()


def test_fetch_allows_remote_sources_when_local_disabled(tmp_path: Path) -> None:
    opener = _RecordingOpener(_FakeResponse(b"PK-remote"))
    fetcher = ArchiveFetcher(FetchConfig(allow_local=False), opener=opener)

    handle = fetcher.fetch("https://files.example.com/p.zip", tmp_path / "p.zip")

    assert handle.local_path.read_bytes() == b"PK-remote"
