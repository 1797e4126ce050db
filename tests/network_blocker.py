from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import urlparse

if TYPE_CHECKING:
    import pytest

# Public OSM mirrors; tests must never download real extracts.
FORBIDDEN_HOSTS = {
    "download.openstreetmap.fr",
    "download.geofabrik.de",
    "planet.openstreetmap.org",
    "planet.osm.org",
    "osm-internal.download.geofabrik.de",
}


def _is_blocked_url(url: str) -> bool:
    host = (urlparse(url).hostname or "").lower()
    if not host:
        return False
    if host in FORBIDDEN_HOSTS:
        return True
    return any(host.endswith(f".{item}") for item in FORBIDDEN_HOSTS)


def install_network_blocker(monkeypatch: pytest.MonkeyPatch) -> None:
    import httpx

    async def _httpx_block(
        self,
        method: str,
        url: str,
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        if _is_blocked_url(str(url)):
            msg = f"Blocked external host: {url}"
            raise RuntimeError(msg)
        return await _orig_httpx_request(self, method, url, *args, **kwargs)

    async def _httpx_send_block(
        self,
        request: Any,
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        if _is_blocked_url(str(request.url)):
            msg = f"Blocked external host: {request.url}"
            raise RuntimeError(msg)
        return await _orig_httpx_send(self, request, *args, **kwargs)

    _orig_httpx_request = httpx.AsyncClient.request
    _orig_httpx_send = httpx.AsyncClient.send
    monkeypatch.setattr(httpx.AsyncClient, "request", _httpx_block, raising=True)
    # client.stream() bypasses request() and goes straight to send()
    monkeypatch.setattr(httpx.AsyncClient, "send", _httpx_send_block, raising=True)
