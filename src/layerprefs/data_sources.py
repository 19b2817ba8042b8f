"""
Data sources for loaders.

A ``DataSource`` wraps an async reader that produces the raw bytes a mapper
turns into settings. Readers raise on failure; the loader pipeline lets the
error propagate so the whole load aborts.
"""

import asyncio
import logging
from importlib import resources
from pathlib import Path
from typing import Awaitable, Callable, Optional, Union

import httpx

from layerprefs.config import get_active_config
from layerprefs.errors import (
    FileDoesNotExistError,
    FileReadError,
    HTTPStatusError,
    InvalidURLError,
    RequestFailedError,
)

logger = logging.getLogger(__name__)

DataReader = Callable[[], Awaitable[bytes]]


class DataSource:
    """
    Asynchronous source of settings data.

    Example:
        source = DataSource.url("https://example.com/settings.json")
        data = await source.read()
    """

    def __init__(self, reader: DataReader, description: str = "custom"):
        """
        Args:
            reader: Coroutine function returning the bytes, raising on failure
            description: Shown in logs and ``repr``
        """
        self._reader = reader
        self.description = description

    async def read(self) -> bytes:
        """Run the reader once and return its bytes."""
        return await self._reader()

    def __repr__(self) -> str:
        return f"DataSource({self.description})"

    # ------------------------------------------------------------------
    # Pre-built sources
    # ------------------------------------------------------------------

    @classmethod
    def from_bytes(cls, data: bytes) -> 'DataSource':
        """Source returning an already available payload."""
        async def reader() -> bytes:
            return data
        return cls(reader, f"{len(data)} bytes")

    @classmethod
    def url(
        cls,
        url: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ) -> 'DataSource':
        """
        Source reading the body of an HTTP GET.

        Args:
            url: Absolute http(s) URL
            client: Client to send through; a short lived one is created per read otherwise
            timeout: Seconds, used only when no client is given

        Returns:
            Data source for the URL
        """
        async def reader() -> bytes:
            request = httpx.Request("GET", _validate_url(url))
            return await _send(request, client, timeout)
        return cls(reader, url)

    @classmethod
    def request(
        cls,
        request: httpx.Request,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ) -> 'DataSource':
        """Source sending a prepared request. See :meth:`url`."""
        async def reader() -> bytes:
            return await _send(request, client, timeout)
        return cls(reader, str(request.url))

    @classmethod
    def file(cls, path: Union[str, Path]) -> 'DataSource':
        """Source reading a local file off the event loop."""
        path = Path(path)

        async def reader() -> bytes:
            logger.debug(f"🧩 Loading settings from file: {path}")
            if not path.is_file():
                raise FileDoesNotExistError(str(path))
            try:
                return await asyncio.to_thread(path.read_bytes)
            except OSError as e:
                raise FileReadError(str(path), str(e)) from e
        return cls(reader, str(path))

    @classmethod
    def package_file(cls, package: str, name: str) -> 'DataSource':
        """Source reading a data file shipped inside a Python package."""
        async def reader() -> bytes:
            logger.debug(f"🧩 Loading settings from package file: {package}/{name}")
            try:
                resource = resources.files(package).joinpath(name)
            except ModuleNotFoundError as e:
                raise FileDoesNotExistError(f"{package}/{name}") from e
            if not resource.is_file():
                raise FileDoesNotExistError(f"{package}/{name}")
            try:
                return await asyncio.to_thread(resource.read_bytes)
            except OSError as e:
                raise FileReadError(f"{package}/{name}", str(e)) from e
        return cls(reader, f"{package}/{name}")


def _validate_url(url: str) -> httpx.URL:
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as e:
        raise InvalidURLError(url) from e
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise InvalidURLError(url)
    return parsed


async def _send(request: httpx.Request, client: Optional[httpx.AsyncClient], timeout: Optional[float]) -> bytes:
    url = str(request.url)
    logger.debug(f"🧩 Loading settings from url: {url}")
    try:
        if client is not None:
            response = await client.send(request)
        else:
            if timeout is None:
                timeout = get_active_config().http_timeout
            async with httpx.AsyncClient(timeout=timeout) as own_client:
                response = await own_client.send(request)
    except httpx.HTTPError as e:
        raise RequestFailedError(url, str(e)) from e

    if response.status_code != 200:
        raise HTTPStatusError(url, response.status_code)
    return response.content
