"""Tests for the FastAPI service mode."""

from __future__ import annotations

from pathlib import Path

import pytest

try:
    from fastapi.testclient import TestClient
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    pytest.skip("fastapi not installed", allow_module_level=True)

from docprep.errors import ExtractionError, FetchError, InvalidProjectId
from docprep.models import AcceptedFile, SelectionLimits, SelectionManifest
from docprep.ratelimit import FixedWindowRateLimiter
from docprep.service import create_app
from tests._fixtures.archive_builder import ArchiveBuilder


class _StubPreparer:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []
        self.error: Exception | None = None

    def prepare(self, project_id: str, archive_url: str) -> SelectionManifest:
        self.calls.append((project_id, archive_url))
        if self.error is not None:
            raise self.error
        return SelectionManifest(
            project_id=project_id,
            root=f"/scratch/project-{project_id}",
            files=[
                AcceptedFile(
                    path="README.md",
                    language="md",
                    size=7,
                    content="# Demo\n",
                    hash="abc",
                    snippet="# Demo\n",
                )
            ],
            limits=SelectionLimits(),
            considered=1,
        )


@pytest.fixture
def preparer() -> _StubPreparer:
    return _StubPreparer()


@pytest.fixture
def client(preparer: _StubPreparer) -> TestClient:
    limiter = FixedWindowRateLimiter(limit=2, window_seconds=60)
    app = create_app(lambda: preparer, rate_limiter=limiter)
    return TestClient(app)


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_prepare_endpoint_returns_preview(client: TestClient, preparer: _StubPreparer) -> None:
    response = client.post(
        "/prepare",
        json={"project_id": "p1", "archive_url": "https://files.example.com/p1.zip"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["projectId"] == "p1"
    assert data["count"] == 1
    assert data["totalBytes"] == 7
    assert data["limits"]["maxFiles"] == 150
    assert data["files"][0]["path"] == "README.md"
    assert "content" not in data["files"][0]
    assert preparer.calls == [("p1", "https://files.example.com/p1.zip")]


@pytest.mark.parametrize(
    ("error", "status"),
    [
        (FetchError("Archive unreachable"), 502),
        (ExtractionError("Archive entry escapes extraction root"), 422),
        (InvalidProjectId("Invalid project identifier: '..'"), 400),
    ],
)
def test_prepare_endpoint_maps_errors(
    client: TestClient, preparer: _StubPreparer, error: Exception, status: int
) -> None:
    preparer.error = error

    response = client.post("/prepare", json={"project_id": "p1", "archive_url": "x"})

    assert response.status_code == status
    assert response.json()["detail"] == str(error)


def test_prepare_endpoint_rate_limits_callers(client: TestClient) -> None:
    body = {"project_id": "p1", "archive_url": "x", "caller_id": "user-1"}

    assert client.post("/prepare", json=body).status_code == 200
    assert client.post("/prepare", json=body).status_code == 200
    limited = client.post("/prepare", json=body)

    assert limited.status_code == 429
    assert limited.json()["remaining"] == 0
    assert client.post("/prepare", json={**body, "caller_id": "user-2"}).status_code == 200


def test_prepare_endpoint_does_not_treat_other_value_errors_as_bad_requests(
    preparer: _StubPreparer,
) -> None:
    preparer.error = ValueError("unexpected internal failure")
    app = create_app(lambda: preparer, rate_limiter=FixedWindowRateLimiter(limit=5))
    client = TestClient(app, raise_server_exceptions=False)

    response = client.post("/prepare", json={"project_id": "p1", "archive_url": "x"})

    assert response.status_code == 500


def test_default_service_refuses_local_archives(
    archive_builder: ArchiveBuilder, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("DOCPREP_SCRATCH_DIR", str(tmp_path / "scratch"))
    archive = archive_builder.zip({"README.md": "# Private\n"})
    client = TestClient(create_app(rate_limiter=FixedWindowRateLimiter(limit=5)))

    for address in (str(archive), archive.as_uri()):
        response = client.post("/prepare", json={"project_id": "p1", "archive_url": address})
        assert response.status_code == 502
        assert "Unsupported archive URL scheme" in response.json()["detail"]

    assert archive.exists()
    assert not (tmp_path / "scratch" / "project-p1").exists()
