"""FastAPI application entrypoint for docprep service mode."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import load_config
from ..logging import configure_logging
from ..errors import ExtractionError, FetchError, InvalidProjectId
from ..models import SelectionManifest
from ..preparer import Preparer
from ..ratelimit import FixedWindowRateLimiter


class PrepareRequest(BaseModel):
    project_id: str
    archive_url: str
    caller_id: Optional[str] = None


class LimitsModel(BaseModel):
    perFileMaxBytes: int
    totalMaxBytes: int
    maxFiles: int


class FilePreviewModel(BaseModel):
    path: str
    language: str
    size: int
    hash: str
    snippet: str


class WarningModel(BaseModel):
    path: str
    reason: str


class PrepareResponse(BaseModel):
    projectId: str
    extractDir: str
    limits: LimitsModel
    count: int
    totalBytes: int
    considered: int
    warnings: List[WarningModel]
    files: List[FilePreviewModel]


class HealthResponse(BaseModel):
    status: str


class RateLimitExceeded(Exception):
    """Raised when a caller has used up its preparation window."""

    def __init__(self, caller_id: str) -> None:
        super().__init__(f"Rate limit exceeded for {caller_id}")
        self.caller_id = caller_id


def _default_preparer() -> Preparer:
    config = load_config()
    # Callers name archives by URL; local paths stay a CLI convenience.
    return Preparer(replace(config, fetch=replace(config.fetch, allow_local=False)))


def _default_rate_limiter() -> FixedWindowRateLimiter:
    settings = load_config().rate_limit
    return FixedWindowRateLimiter(settings.limit, settings.window_seconds)


def create_app(
    preparer_factory: Callable[[], Preparer] = _default_preparer,
    rate_limiter: FixedWindowRateLimiter | None = None,
) -> FastAPI:
    """Create the FastAPI application exposing archive preparation."""
    app = FastAPI(title="DocPrep Service", version="0.1.0")
    limiter = rate_limiter or _default_rate_limiter()

    async def get_preparer() -> Preparer:
        # Lazy-instantiate per request to keep state predictable.
        return preparer_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/prepare", response_model=PrepareResponse)
    async def prepare(
        payload: PrepareRequest,
        preparer: Preparer = Depends(get_preparer),
    ) -> Dict[str, Any]:
        if payload.caller_id is not None and not limiter.check(payload.caller_id):
            raise RateLimitExceeded(payload.caller_id)

        def _run_prepare() -> SelectionManifest:
            return preparer.prepare(payload.project_id, payload.archive_url)

        loop = asyncio.get_running_loop()
        manifest = await loop.run_in_executor(None, _run_prepare)
        return manifest.to_preview()

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(_: Any, exc: RateLimitExceeded) -> JSONResponse:
        info = limiter.info(exc.caller_id)
        return JSONResponse(
            status_code=429,
            content={"detail": str(exc), "remaining": info.remaining},
        )

    @app.exception_handler(FetchError)
    async def fetch_error_handler(_: Any, exc: FetchError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    @app.exception_handler(ExtractionError)
    async def extraction_error_handler(_: Any, exc: ExtractionError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(InvalidProjectId)
    async def project_id_handler(_: Any, exc: InvalidProjectId) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "0.0.0.0", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    configure_logging(service=True)
    app = create_app()
    uvicorn.run(app, host=host, port=port)
