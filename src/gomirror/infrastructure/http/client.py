"""Session-owning wrapper around aiohttp used for every HTTP request."""

import typing as t

import aiohttp

from ...domain.exceptions import BodyTooLargeError, ClientNotInitialisedError
from .factories import create_secure_connector


class AiohttpClient:
    """Lifecycle wrapper around an ``aiohttp.ClientSession``.

    A session handed in by the caller is used as-is and never closed here;
    otherwise one is created on ``open()`` and closed on ``close()``.

    Usage:
        async with AiohttpClient(user_agent="gomirror/0.1.0") as client:
            async with client.get(url, timeout=30.0) as response:
                body = await read_limited(response, max_body_size=1 << 20)
    """

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        *,
        user_agent: str | None = None,
    ) -> None:
        self._session = session
        self._owns_session = session is None
        self._user_agent = user_agent

    @property
    def closed(self) -> bool:
        return self._session is None or self._session.closed

    async def open(self) -> None:
        """Create the underlying session. Safe to call more than once."""
        if self._session is not None:
            return
        headers = {"User-Agent": self._user_agent} if self._user_agent else None
        self._session = aiohttp.ClientSession(
            connector=create_secure_connector(),
            headers=headers,
        )

    async def close(self) -> None:
        if self._session is None or not self._owns_session:
            return
        await self._session.close()
        self._session = None

    async def __aenter__(self) -> "AiohttpClient":
        await self.open()
        return self

    async def __aexit__(self, *exc_info: t.Any) -> None:
        await self.close()

    def get(
        self, url: str, *, timeout: float | None = None, **kwargs: t.Any
    ) -> t.Any:
        """Start a GET request; use the result as an async context manager.

        Args:
            url: Absolute URL to fetch.
            timeout: Total deadline for the request in seconds, None for none.

        Raises:
            ClientNotInitialisedError: If called before ``open()``.
        """
        if self._session is None:
            raise ClientNotInitialisedError(
                "HTTP client not initialised; call open() or use 'async with'"
            )
        return self._session.get(
            url, timeout=aiohttp.ClientTimeout(total=timeout), **kwargs
        )


async def iter_limited(
    response: aiohttp.ClientResponse,
    *,
    max_body_size: int,
    chunk_size: int = 1 << 16,
) -> t.AsyncIterator[bytes]:
    """Yield the response body in chunks, refusing to exceed ``max_body_size``.

    Raises:
        BodyTooLargeError: As soon as the declared or received size passes
            the limit.
    """
    url = str(response.url)
    declared = response.content_length
    if declared is not None and declared > max_body_size:
        raise BodyTooLargeError(url, max_body_size)

    received = 0
    async for chunk in response.content.iter_chunked(chunk_size):
        received += len(chunk)
        if received > max_body_size:
            raise BodyTooLargeError(url, max_body_size)
        yield chunk


async def read_limited(
    response: aiohttp.ClientResponse,
    *,
    max_body_size: int,
    chunk_size: int = 1 << 16,
) -> bytes:
    """Read the whole body into memory, bounded by ``max_body_size``."""
    chunks = [
        chunk
        async for chunk in iter_limited(
            response, max_body_size=max_body_size, chunk_size=chunk_size
        )
    ]
    return b"".join(chunks)
