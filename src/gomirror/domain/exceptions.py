"""Custom exceptions for gomirror."""

from pathlib import Path


class MirrorError(Exception):
    """Base exception for gomirror errors."""

    pass


class ClientNotInitialisedError(MirrorError):
    """Raised when the HTTP client is used before ``open()``."""

    pass


class CatalogError(MirrorError):
    """Base exception for run-level catalog failures."""

    pass


class CatalogFetchError(CatalogError):
    """Raised when the catalog source cannot be reached."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Could not fetch catalog from {url}: {reason}")


class CatalogParseError(CatalogError):
    """Raised when the catalog document is not a valid release listing."""

    pass


class DirectoryConflictError(MirrorError):
    """Raised when a release directory path exists but is not a directory."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"{path} exists and is not a directory")


class FetchError(MirrorError):
    """Base exception for artifact retrieval errors."""

    pass


class HttpStatusError(FetchError):
    """Raised when the server answers with anything other than 200."""

    def __init__(self, url: str, status: int) -> None:
        self.url = url
        self.status = status
        super().__init__(f"HTTP {status} from {url}")


class BodyTooLargeError(FetchError):
    """Raised when a response body exceeds the configured cap."""

    def __init__(self, url: str, limit: int) -> None:
        self.url = url
        self.limit = limit
        super().__init__(f"Response body from {url} exceeds {limit} bytes")
