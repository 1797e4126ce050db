"""
Remote downloads for extract snapshots and state files.

Small documents are read into memory with ``fetch``; snapshots, which can
be several GB, are streamed to disk with ``download_to``. A failed download
is logged and reported as empty instead of raising; callers must check
``ok`` before using the result.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import unquote, urlparse

import httpx

from config import FETCH_CONNECT_TIMEOUT, get_fetch_timeout

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024

_FILENAME_RE = re.compile(r'(?:^|;)\s*filename\s*=\s*("[^"]*"|[^;]*)', re.IGNORECASE)
_FILENAME_STAR_RE = re.compile(r"(?:^|;)\s*filename\*\s*=\s*([^;]*)", re.IGNORECASE)


@dataclass(frozen=True)
class FetchResult:
    """Suggested filename plus the downloaded bytes (empty on failure)."""

    file_name: str
    content: bytes = b""

    @property
    def ok(self) -> bool:
        return bool(self.content)


@dataclass(frozen=True)
class DownloadResult:
    """Suggested filename plus the number of bytes streamed to disk."""

    file_name: str
    size: int = 0

    @property
    def ok(self) -> bool:
        return self.size > 0


def _disposition_file_name(disposition: str | None) -> str | None:
    if not disposition:
        return None

    match = _FILENAME_RE.search(disposition)
    if match:
        name = match.group(1).strip().strip('"')
        if name:
            return name

    match = _FILENAME_STAR_RE.search(disposition)
    if match:
        value = match.group(1).strip().strip('"')
        # RFC 5987: charset'language'percent-encoded-name
        if "'" in value:
            charset, _, rest = value.partition("'")
            _, _, encoded = rest.partition("'")
            try:
                name = unquote(encoded, encoding=charset or "utf-8", errors="replace")
            except LookupError:
                name = unquote(encoded)
        else:
            name = unquote(value)
        if name:
            return name.strip('"')

    return None


def url_file_name(url: str) -> str:
    """Last path segment of ``url``, ignoring any query string."""
    path = urlparse(url).path
    return unquote(path.rsplit("/", 1)[-1])


def suggested_file_name(url: str, headers: httpx.Headers | None = None) -> str:
    """Content-Disposition filename, then filename*, then the URL's last segment."""
    disposition = headers.get("content-disposition") if headers else None
    return _disposition_file_name(disposition) or url_file_name(url)


class RemoteFetcher:
    """Downloads whole files over HTTP with a single shared client."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        if client is None:
            total = timeout_seconds or get_fetch_timeout()
            client = httpx.AsyncClient(
                timeout=httpx.Timeout(total, connect=FETCH_CONNECT_TIMEOUT),
                follow_redirects=True,
            )
        self._client = client

    async def fetch(self, url: str) -> FetchResult:
        """Retrieve ``url``; returns empty content on any failure."""
        logger.info("Fetching %s", url)
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as exc:
            logger.error("Unable to retrieve file from: %s, error: %s", url, exc)
            return FetchResult(file_name=url_file_name(url))

        file_name = suggested_file_name(url, response.headers)
        if not response.is_success:
            logger.error(
                "Unable to retrieve file from: %s, Status code: %s",
                url,
                response.status_code,
            )
            return FetchResult(file_name=file_name)

        logger.info(
            "Fetched %s as %s (%.1f MB)",
            url,
            file_name,
            len(response.content) / (1024 * 1024),
        )
        return FetchResult(file_name=file_name, content=response.content)

    async def download_to(self, url: str, destination: Path) -> DownloadResult:
        """
        Stream ``url`` into ``destination`` chunk by chunk.

        On failure nothing is left at ``destination`` and the result has a
        size of zero. Local write errors propagate.
        """
        logger.info("Starting stream download: %s -> %s", url, destination)
        file_name = url_file_name(url)
        downloaded = 0
        try:
            async with self._client.stream("GET", url) as response:
                file_name = suggested_file_name(url, response.headers)
                if not response.is_success:
                    logger.error(
                        "Unable to retrieve file from: %s, Status code: %s",
                        url,
                        response.status_code,
                    )
                    return DownloadResult(file_name=file_name)

                with open(destination, "wb") as f:
                    async for chunk in response.aiter_bytes(chunk_size=CHUNK_SIZE):
                        f.write(chunk)
                        downloaded += len(chunk)
        except httpx.HTTPError as exc:
            logger.error("Unable to retrieve file from: %s, error: %s", url, exc)
            destination.unlink(missing_ok=True)
            return DownloadResult(file_name=file_name)
        except BaseException:
            destination.unlink(missing_ok=True)
            raise

        if not downloaded:
            logger.error("Empty response from: %s", url)
            destination.unlink(missing_ok=True)
            return DownloadResult(file_name=file_name)

        logger.info(
            "Download complete: %s as %s (%.1f MB)",
            url,
            file_name,
            downloaded / (1024 * 1024),
        )
        return DownloadResult(file_name=file_name, size=downloaded)

    async def aclose(self) -> None:
        await self._client.aclose()
