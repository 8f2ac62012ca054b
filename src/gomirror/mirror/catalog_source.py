"""Retrieves the raw release listing."""

import asyncio
import typing as t

import aiohttp

from ..config.settings import DEFAULT_CATALOG_URL
from ..domain.catalog import Catalog, parse_catalog
from ..domain.exceptions import BodyTooLargeError, CatalogFetchError
from ..infrastructure.http import AiohttpClient, read_limited
from ..infrastructure.logging import get_logger

if t.TYPE_CHECKING:
    import loguru


class CatalogSource:
    """Fetches the catalog document with a single GET."""

    def __init__(
        self,
        client: AiohttpClient,
        *,
        url: str = DEFAULT_CATALOG_URL,
        timeout: float | None = 30.0,
        max_body_size: int = 1 << 29,
        logger: t.Optional["loguru.Logger"] = None,
    ) -> None:
        self._client = client
        self.url = url
        self._timeout = timeout
        self._max_body_size = max_body_size
        self._logger = logger or get_logger(__name__)

    async def fetch(self) -> bytes:
        """Return the raw listing bytes.

        Raises:
            CatalogFetchError: On transport errors, timeouts, oversized
                bodies or any status other than 200.
        """
        self._logger.debug(f"fetching catalog {self.url}")
        try:
            async with asyncio.timeout(self._timeout):
                async with self._client.get(self.url) as response:
                    if response.status != 200:
                        raise CatalogFetchError(self.url, f"HTTP {response.status}")
                    return await read_limited(
                        response, max_body_size=self._max_body_size
                    )
        except (aiohttp.ClientError, BodyTooLargeError) as exc:
            raise CatalogFetchError(self.url, str(exc) or type(exc).__name__) from exc
        except TimeoutError as exc:
            raise CatalogFetchError(
                self.url, f"timed out after {self._timeout}s"
            ) from exc

    async def load(self) -> Catalog:
        """Fetch and parse the catalog.

        Raises:
            CatalogFetchError: If the listing cannot be retrieved.
            CatalogParseError: If the listing is malformed.
        """
        catalog = parse_catalog(await self.fetch())
        self._logger.debug(f"catalog lists {len(catalog)} releases")
        return catalog
