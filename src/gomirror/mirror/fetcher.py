"""Fetch a single artifact and persist it together with its hash sidecar."""

import asyncio
import enum
import typing as t
from pathlib import Path

import aiofiles
import aiofiles.os
import aiohttp
from pydantic import BaseModel, ConfigDict, Field

from ..config.settings import DEFAULT_DOWNLOAD_URL_TEMPLATE
from ..domain.catalog import Artifact
from ..domain.exceptions import BodyTooLargeError, HttpStatusError
from ..domain.hashes import Hash
from ..infrastructure.http import AiohttpClient, iter_limited
from ..infrastructure.logging import get_logger
from .sidecar import write_sidecar
from .verifier import IntegrityVerifier

if t.TYPE_CHECKING:
    import loguru


class FetchOutcome(enum.StrEnum):
    """How a single fetch attempt ended."""

    DOWNLOADED = "downloaded"
    DOWNLOADED_WITHOUT_SIDECAR = "downloaded_without_sidecar"
    HTTP_ERROR = "http_error"
    TRANSPORT_ERROR = "transport_error"
    WRITE_ERROR = "write_error"
    HASH_MISMATCH = "hash_mismatch"


class FetchResult(BaseModel):
    """Outcome of ``ArtifactFetcher.fetch``."""

    model_config = ConfigDict(frozen=True)

    outcome: FetchOutcome
    url: str
    path: Path
    sidecar_path: Path | None = None
    total_bytes: int = Field(default=0, ge=0)
    error: str | None = None

    @property
    def ok(self) -> bool:
        """True when the artifact bytes are on disk."""
        return self.outcome in (
            FetchOutcome.DOWNLOADED,
            FetchOutcome.DOWNLOADED_WITHOUT_SIDECAR,
        )


class ArtifactFetcher:
    """Downloads one artifact into its release directory.

    Failures never propagate: each one is logged, the partial file is
    removed, and the returned FetchResult says what went wrong. No sidecar is
    written unless the artifact bytes were fully saved, so a failed artifact
    is retried on the next run.

    By default the sidecar is written from the catalog's expected hash
    without rehashing the new file. With ``verify_downloads`` the file is
    hashed first and discarded on mismatch.
    """

    def __init__(
        self,
        client: AiohttpClient,
        *,
        url_template: str = DEFAULT_DOWNLOAD_URL_TEMPLATE,
        timeout: float | None = 600.0,
        max_body_size: int = 1 << 29,
        chunk_size: int = 1 << 16,
        verifier: IntegrityVerifier | None = None,
        verify_downloads: bool = False,
        logger: t.Optional["loguru.Logger"] = None,
    ) -> None:
        self._client = client
        self._url_template = url_template
        self._timeout = timeout
        self._max_body_size = max_body_size
        self._chunk_size = chunk_size
        self._logger = logger or get_logger(__name__)
        self._verifier = verifier or IntegrityVerifier(logger=self._logger)
        self._verify_downloads = verify_downloads

    def build_url(self, artifact: Artifact) -> str:
        return self._url_template.format(filename=artifact.filename)

    async def fetch(self, version_dir: Path, artifact: Artifact) -> FetchResult:
        """Download ``artifact`` to ``version_dir`` and record its hash."""
        url = self.build_url(artifact)
        target = self._verifier.target_path(version_dir, artifact)
        self._logger.info(f"getting {url}")

        try:
            total_bytes = await self._download(url, target)
        except HttpStatusError as exc:
            self._logger.error(f"could not get {url}: {exc}")
            return FetchResult(
                outcome=FetchOutcome.HTTP_ERROR, url=url, path=target, error=str(exc)
            )
        except (aiohttp.ClientError, TimeoutError, BodyTooLargeError) as exc:
            await self._cleanup_partial_file(target)
            message = str(exc) or type(exc).__name__
            self._logger.error(f"could not download {url}: {message}")
            return FetchResult(
                outcome=FetchOutcome.TRANSPORT_ERROR, url=url, path=target, error=message
            )
        except OSError as exc:
            await self._cleanup_partial_file(target)
            self._logger.error(f"could not save {target}: {exc}")
            return FetchResult(
                outcome=FetchOutcome.WRITE_ERROR, url=url, path=target, error=str(exc)
            )

        if total_bytes != artifact.size:
            self._logger.warning(
                f"{target} is {total_bytes} bytes, catalog declares {artifact.size}"
            )

        if self._verify_downloads and not await self._verify(target, artifact):
            await self._cleanup_partial_file(target)
            return FetchResult(
                outcome=FetchOutcome.HASH_MISMATCH,
                url=url,
                path=target,
                total_bytes=total_bytes,
                error=f"downloaded content does not hash to {artifact.sha256}",
            )

        hash_file = self._verifier.sidecar_path(target)
        try:
            await write_sidecar(hash_file, artifact.sha256)
        except OSError as exc:
            self._logger.error(f"could not write hash file {hash_file}: {exc}")
            return FetchResult(
                outcome=FetchOutcome.DOWNLOADED_WITHOUT_SIDECAR,
                url=url,
                path=target,
                total_bytes=total_bytes,
                error=str(exc),
            )

        return FetchResult(
            outcome=FetchOutcome.DOWNLOADED,
            url=url,
            path=target,
            sidecar_path=hash_file,
            total_bytes=total_bytes,
        )

    async def _download(self, url: str, target: Path) -> int:
        """Stream ``url`` into ``target`` and return the byte count.

        The status is checked before the target is opened, so a non-200
        answer never touches the filesystem.
        """
        bytes_written = 0
        async with asyncio.timeout(self._timeout):
            async with self._client.get(url) as response:
                self._logger.debug(f"-- response {response.status} for {url}")
                if response.status != 200:
                    raise HttpStatusError(url, response.status)

                async with aiofiles.open(target, "wb") as handle:
                    async for chunk in iter_limited(
                        response,
                        max_body_size=self._max_body_size,
                        chunk_size=self._chunk_size,
                    ):
                        await handle.write(chunk)
                        bytes_written += len(chunk)
        return bytes_written

    async def _verify(self, target: Path, artifact: Artifact) -> bool:
        try:
            digest = await self._verifier.hash_file(target)
        except OSError as exc:
            self._logger.error(f"could not hash {target}: {exc}")
            return False
        if not artifact.sha256.matches(digest):
            self._logger.error(
                f"{target} sha does not match; "
                f"expected {artifact.sha256}, computed {Hash.from_digest(digest)}"
            )
            return False
        return True

    async def _cleanup_partial_file(self, file_path: Path) -> None:
        """Remove a partially written file, logging rather than raising."""
        try:
            if await aiofiles.os.path.exists(file_path):
                await aiofiles.os.remove(file_path)
                self._logger.debug(f"Cleaned up partial file: {file_path}")
        except OSError as cleanup_error:
            self._logger.warning(
                f"Failed to clean up partial file {file_path}: {cleanup_error}"
            )
