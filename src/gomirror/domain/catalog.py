"""Release catalog models and the listing parser."""

import typing as t

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    RootModel,
    StrictBool,
    StrictInt,
    ValidationError,
)

from .exceptions import CatalogParseError
from .hashes import Hash


def _reject_path_components(value: str) -> str:
    if value in (".", "..") or any(c in value for c in ("/", "\\", "\x00")):
        raise ValueError(f"{value!r} is not a plain file or directory name")
    return value


# Release versions and filenames become path components on disk.
PlainName = t.Annotated[
    str, Field(min_length=1), AfterValidator(_reject_path_components)
]


class Artifact(BaseModel):
    """A single downloadable file belonging to a release."""

    model_config = ConfigDict(frozen=True)

    filename: PlainName
    os: str = Field(default="", description="Target operating system")
    arch: str = Field(default="", description="Target architecture")
    version: str = Field(default="", description="Release version string")
    sha256: Hash = Field(
        default=Hash(""),
        description="Expected SHA-256 digest in hex, may be empty",
    )
    size: StrictInt = Field(default=0, ge=0, description="Declared size in bytes")
    kind: str = Field(default="", description="archive, installer, source...")


class Release(BaseModel):
    """One version of the distribution and its artifacts."""

    model_config = ConfigDict(frozen=True)

    version: PlainName
    stable: StrictBool = False
    files: tuple[Artifact, ...] = ()


class Catalog(RootModel[tuple[Release, ...]]):
    """Ordered list of releases as published by the catalog source."""

    model_config = ConfigDict(frozen=True)

    def __iter__(self) -> t.Iterator[Release]:  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __getitem__(self, index: int) -> Release:
        return self.root[index]


def parse_catalog(data: bytes) -> Catalog:
    """Decode a raw JSON listing into a Catalog.

    Raises:
        CatalogParseError: If the document is not a valid release listing.
            No partial result is ever returned.
    """
    try:
        return Catalog.model_validate_json(data)
    except ValidationError as exc:
        raise CatalogParseError(
            f"Malformed catalog ({exc.error_count()} errors): {exc}"
        ) from exc
