"""Pipeline orchestration for archive preparation."""

from __future__ import annotations

import re
import shutil
from pathlib import Path

from .config import PrepareConfig
from .errors import InvalidProjectId, PrepareError
from .extractor import ArchiveExtractor
from .fetcher import ArchiveFetcher
from .logging import get_logger
from .models import SelectionManifest
from .ordering import order_files
from .walker import TreeWalker

_PROJECT_ID = re.compile(r"^[A-Za-z0-9_-]{1,128}$")


def extraction_root_for(scratch_dir: Path, project_id: str) -> Path:
    """Return the per-project extraction directory under ``scratch_dir``."""
    if not _PROJECT_ID.match(project_id):
        raise InvalidProjectId(f"Invalid project identifier: {project_id!r}")
    return scratch_dir / f"project-{project_id}"


class Preparer:
    """Runs fetch, extract, walk and order for one project at a time."""

    def __init__(
        self,
        config: PrepareConfig | None = None,
        *,
        fetcher: ArchiveFetcher | None = None,
        extractor: ArchiveExtractor | None = None,
        walker: TreeWalker | None = None,
    ) -> None:
        self.config = config or PrepareConfig()
        self.fetcher = fetcher or ArchiveFetcher(self.config.fetch)
        self.extractor = extractor or ArchiveExtractor(self.config.archive)
        self.walker = walker or TreeWalker(
            self.config.limits, snippet_chars=self.config.snippet_chars
        )
        self.logger = get_logger("preparer")

    def prepare(self, project_id: str, archive_url: str) -> SelectionManifest:
        """Fetch and extract the project's archive, then build its manifest."""
        root = extraction_root_for(self.config.scratch_dir, project_id)
        archive_path = self.config.scratch_dir / f"project-{project_id}.zip"
        self.logger.info("Preparing project %s from %s", project_id, archive_url)

        # A previous preparation of the same project leaves its tree behind.
        if root.exists():
            shutil.rmtree(root)

        try:
            handle = self.fetcher.fetch(archive_url, archive_path)
            extracted = self.extractor.extract(handle, root)
        except PrepareError as exc:
            self.logger.error("Preparation of project %s failed: %s", project_id, exc)
            raise

        return self.prepare_extracted(project_id, extracted)

    def prepare_extracted(self, project_id: str, root: str | Path) -> SelectionManifest:
        """Build a manifest from an already extracted tree."""
        result = self.walker.walk(root)
        ordered = order_files(result.files)
        manifest = SelectionManifest(
            project_id=project_id,
            root=str(Path(root).expanduser().resolve()),
            files=ordered,
            limits=self.walker.limits,
            considered=result.considered,
            warnings=list(result.warnings),
        )
        self.logger.info(
            "Prepared %d of %d files (%d bytes) for project %s",
            manifest.count,
            manifest.considered,
            manifest.total_bytes,
            project_id,
        )
        return manifest


__all__ = ["Preparer", "extraction_root_for"]
