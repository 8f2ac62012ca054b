"""Domain layer - catalog models, skip rules and exceptions."""

from .catalog import Artifact, Catalog, Release, parse_catalog
from .exceptions import (
    BodyTooLargeError,
    CatalogError,
    CatalogFetchError,
    CatalogParseError,
    ClientNotInitialisedError,
    DirectoryConflictError,
    FetchError,
    HttpStatusError,
    MirrorError,
)
from .hashes import Hash
from .skip_policy import SkipPolicy

__all__ = [
    # Catalog
    "Artifact",
    "Catalog",
    "Hash",
    "Release",
    "parse_catalog",
    # Policy
    "SkipPolicy",
    # Exceptions
    "BodyTooLargeError",
    "CatalogError",
    "CatalogFetchError",
    "CatalogParseError",
    "ClientNotInitialisedError",
    "DirectoryConflictError",
    "FetchError",
    "HttpStatusError",
    "MirrorError",
]
