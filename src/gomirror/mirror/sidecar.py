"""Reading and writing hash sidecar files."""

from pathlib import Path

import aiofiles

from ..domain.hashes import Hash

DEFAULT_SIDECAR_SUFFIX = ".sha"


def sidecar_path(target: Path, suffix: str = DEFAULT_SIDECAR_SUFFIX) -> Path:
    """Path of the sidecar for ``target``: the same path plus ``suffix``."""
    return target.with_name(target.name + suffix)


async def read_sidecar(path: Path) -> Hash:
    """Return the recorded hash text, surrounding whitespace stripped.

    Non-ASCII content is kept as replacement characters so that decoding the
    returned Hash fails instead of this function raising.

    Raises:
        FileNotFoundError: If no sidecar exists.
        OSError: For any other read failure.
    """
    async with aiofiles.open(path, "rb") as handle:
        raw = await handle.read()
    return Hash(raw.decode("ascii", errors="replace").strip())


async def write_sidecar(path: Path, value: Hash) -> None:
    """Persist ``value`` as lowercase hex with no trailing newline.

    Raises:
        OSError: If the file cannot be written.
    """
    async with aiofiles.open(path, "w", encoding="utf-8") as handle:
        await handle.write(value.lower())
