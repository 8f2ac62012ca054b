"""The download-and-verify loop that brings the mirror in line with the catalog."""

import stat
import typing as t
from dataclasses import dataclass
from pathlib import Path

import aiofiles.os

from ..domain.catalog import Artifact, Catalog, Release
from ..domain.exceptions import DirectoryConflictError
from ..domain.skip_policy import SkipPolicy
from ..events import (
    ArtifactDownloadedEvent,
    ArtifactDownloadingEvent,
    ArtifactFailedEvent,
    ArtifactSatisfiedEvent,
    ArtifactSkippedEvent,
    BaseEmitter,
    NullEmitter,
    ReleaseSkippedEvent,
)
from ..infrastructure.logging import get_logger
from .fetcher import ArtifactFetcher, FetchOutcome
from .verifier import IntegrityVerifier

if t.TYPE_CHECKING:
    import loguru

RELEASE_DIR_MODE = 0o755


@dataclass
class ReconcileSummary:
    """Counters for a single reconciliation run."""

    releases_skipped: int = 0
    releases_failed: int = 0
    artifacts_skipped: int = 0
    artifacts_satisfied: int = 0
    artifacts_downloaded: int = 0
    artifacts_failed: int = 0

    def __str__(self) -> str:
        return (
            f"{self.artifacts_downloaded} downloaded, "
            f"{self.artifacts_satisfied} already downloaded, "
            f"{self.artifacts_failed} failed, "
            f"{self.artifacts_skipped} artifacts skipped, "
            f"{self.releases_skipped} releases skipped, "
            f"{self.releases_failed} releases failed"
        )


class Reconciler:
    """Walks the catalog and downloads whatever is missing or unverified.

    Releases and artifacts are handled strictly one at a time, in catalog
    order. Each release lives in ``root/<version>``; each artifact at
    ``root/<version>/<filename>`` with its hash sidecar beside it.

    Failures are contained at the level they happen: a directory problem
    skips only that release, a verification or download problem skips only
    that artifact. Nothing here aborts the run.

    Usage:
        async with AiohttpClient() as client:
            reconciler = Reconciler(ArtifactFetcher(client), root=Path("mirror"))
            summary = await reconciler.run(catalog)
    """

    def __init__(
        self,
        fetcher: ArtifactFetcher,
        *,
        root: Path = Path("."),
        policy: SkipPolicy | None = None,
        verifier: IntegrityVerifier | None = None,
        emitter: BaseEmitter | None = None,
        logger: t.Optional["loguru.Logger"] = None,
    ) -> None:
        self._fetcher = fetcher
        self._root = root
        self._policy = policy or SkipPolicy()
        self._logger = logger or get_logger(__name__)
        self._verifier = verifier or IntegrityVerifier(logger=self._logger)
        self._emitter = emitter or NullEmitter()

    @property
    def emitter(self) -> BaseEmitter:
        return self._emitter

    async def run(self, catalog: Catalog) -> ReconcileSummary:
        """Reconcile every release in ``catalog`` and return the tallies."""
        summary = ReconcileSummary()
        for release in catalog:
            await self.reconcile_release(release, summary)
        self._logger.debug(f"reconciliation finished: {summary}")
        return summary

    async def reconcile_release(
        self, release: Release, summary: ReconcileSummary
    ) -> None:
        reason = self._policy.release_skip_reason(release)
        if reason is not None:
            self._logger.info(f"skipping release {release.version}: {reason}")
            summary.releases_skipped += 1
            await self._emitter.emit(
                "release.skipped",
                ReleaseSkippedEvent(version=release.version, reason=reason),
            )
            return

        version_dir = self._root / release.version
        try:
            await self.ensure_directory(version_dir)
        except DirectoryConflictError as exc:
            self._logger.error(f"skipping release {release.version}: {exc}")
            summary.releases_failed += 1
            return
        except OSError as exc:
            self._logger.error(
                f"skipping release {release.version}: "
                f"could not prepare {version_dir}: {exc}"
            )
            summary.releases_failed += 1
            return

        for artifact in release.files:
            try:
                await self.reconcile_artifact(version_dir, release, artifact, summary)
            except Exception as exc:
                # Unexpected errors stay confined to this artifact.
                self._logger.opt(exception=exc).error(
                    f"unexpected error handling {release.version}/{artifact.filename}"
                )
                summary.artifacts_failed += 1

    async def reconcile_artifact(
        self,
        version_dir: Path,
        release: Release,
        artifact: Artifact,
        summary: ReconcileSummary,
    ) -> None:
        target = self._verifier.target_path(version_dir, artifact)
        label = f"{release.version}/{artifact.filename}"
        identity = dict(
            version=release.version, filename=artifact.filename, path=str(target)
        )

        reason = self._policy.artifact_skip_reason(artifact)
        if reason is not None:
            self._logger.info(f"skipping {label}: {reason}")
            summary.artifacts_skipped += 1
            await self._emitter.emit(
                "artifact.skipped", ArtifactSkippedEvent(**identity, reason=reason)
            )
            return

        if await self._verifier.is_satisfied(version_dir, artifact):
            self._logger.debug(f"{label} already downloaded")
            summary.artifacts_satisfied += 1
            await self._emitter.emit(
                "artifact.satisfied", ArtifactSatisfiedEvent(**identity)
            )
            return

        url = self._fetcher.build_url(artifact)
        self._logger.info(f"{label} = {artifact.sha256}")
        await self._emitter.emit(
            "artifact.downloading",
            ArtifactDownloadingEvent(
                **identity, url=url, expected_hash=str(artifact.sha256)
            ),
        )

        result = await self._fetcher.fetch(version_dir, artifact)
        if not result.ok:
            summary.artifacts_failed += 1
            await self._emitter.emit(
                "artifact.failed",
                ArtifactFailedEvent(
                    **identity, error_message=result.error or str(result.outcome)
                ),
            )
            return

        summary.artifacts_downloaded += 1
        if result.outcome is FetchOutcome.DOWNLOADED_WITHOUT_SIDECAR:
            self._logger.warning(f"{label} saved without a hash sidecar")
        await self._emitter.emit(
            "artifact.downloaded",
            ArtifactDownloadedEvent(
                **identity,
                total_bytes=result.total_bytes,
                sidecar_path=str(result.sidecar_path) if result.sidecar_path else None,
            ),
        )

    async def ensure_directory(self, path: Path) -> None:
        """Make sure ``path`` is a directory, creating it when absent.

        Raises:
            DirectoryConflictError: If something other than a directory
                already occupies ``path``. It is left untouched.
            OSError: If the path cannot be inspected or created.
        """
        try:
            info = await aiofiles.os.stat(path)
        except FileNotFoundError:
            try:
                await aiofiles.os.mkdir(path, mode=RELEASE_DIR_MODE)
            except FileExistsError:
                # Lost a race with another process; re-check what is there.
                info = await aiofiles.os.stat(path)
            else:
                self._logger.debug(f"created {path}")
                return

        if not stat.S_ISDIR(info.st_mode):
            raise DirectoryConflictError(path)
