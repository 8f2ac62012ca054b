"""Decides whether a local artifact already matches the catalog."""

import asyncio
import hashlib
import typing as t
from pathlib import Path

import aiofiles.os

from ..domain.catalog import Artifact
from ..domain.hashes import Hash
from ..infrastructure.logging import get_logger
from .sidecar import DEFAULT_SIDECAR_SUFFIX, read_sidecar, sidecar_path, write_sidecar

if t.TYPE_CHECKING:
    import loguru


class IntegrityVerifier:
    """Checks size and SHA-256 of a previously downloaded artifact.

    The sidecar next to the artifact acts as a hash cache: when present it is
    trusted as-is, when absent the file is hashed once and the sidecar is
    written so later runs can skip the rehash.

    ``is_satisfied`` never raises. Every ambiguous state (unreadable file,
    malformed sidecar, mismatched hash) is logged and reported as
    not satisfied, which makes the caller download the artifact again.
    """

    def __init__(
        self,
        *,
        sidecar_suffix: str = DEFAULT_SIDECAR_SUFFIX,
        chunk_size: int = 1 << 16,
        logger: t.Optional["loguru.Logger"] = None,
    ) -> None:
        self._sidecar_suffix = sidecar_suffix
        self._chunk_size = chunk_size
        self._logger = logger or get_logger(__name__)

    def target_path(self, directory: Path, artifact: Artifact) -> Path:
        return directory / artifact.filename

    def sidecar_path(self, target: Path) -> Path:
        return sidecar_path(target, self._sidecar_suffix)

    async def is_satisfied(self, directory: Path, artifact: Artifact) -> bool:
        """True when ``directory/artifact.filename`` matches size and hash."""
        target = self.target_path(directory, artifact)
        try:
            stat = await aiofiles.os.stat(target)
        except OSError:
            return False

        if stat.st_size != artifact.size:
            self._logger.warning(
                f"size of {target} is {stat.st_size}, should be {artifact.size}"
            )
            return False

        hash_file = self.sidecar_path(target)
        try:
            recorded = await read_sidecar(hash_file)
        except FileNotFoundError:
            return await self._hash_and_record(target, hash_file, artifact)
        except OSError as exc:
            self._logger.warning(f"could not read {hash_file}: {exc}")
            return False

        try:
            digest = recorded.digest()
        except ValueError as exc:
            self._logger.warning(f"malformed hash file {hash_file}: {exc}")
            return False

        if not artifact.sha256.matches(digest):
            self._logger.warning(
                f"{target} sha does not match; "
                f"expected {artifact.sha256}, got {recorded}"
            )
            return False
        return True

    async def _hash_and_record(
        self, target: Path, hash_file: Path, artifact: Artifact
    ) -> bool:
        try:
            digest = await self.hash_file(target)
        except OSError as exc:
            self._logger.warning(f"could not hash {target}: {exc}")
            return False

        computed = Hash.from_digest(digest)
        try:
            await write_sidecar(hash_file, computed)
        except OSError as exc:
            self._logger.warning(f"could not write hash to {hash_file}: {exc}")

        if not artifact.sha256.matches(digest):
            self._logger.warning(
                f"{target} sha does not match; "
                f"expected {artifact.sha256}, computed {computed}"
            )
            return False
        return True

    async def hash_file(self, path: Path) -> bytes:
        """SHA-256 digest of ``path``, computed off the event loop.

        Raises:
            OSError: If the file cannot be read.
        """
        return await asyncio.to_thread(self._hash_file_sync, path)

    def _hash_file_sync(self, path: Path) -> bytes:
        hasher = hashlib.sha256()
        buffer = bytearray(self._chunk_size)
        view = memoryview(buffer)
        with path.open("rb", buffering=0) as handle:
            while size := handle.readinto(buffer):
                hasher.update(view[:size])
        return hasher.digest()
