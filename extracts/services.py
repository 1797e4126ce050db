"""
Process-wide service wiring.

Builds the manager with the filesystem store and a shared HTTP client the
first time it is needed, and tears the client down at shutdown.
"""

from __future__ import annotations

import logging

from extracts.artifacts import ArtifactServer
from extracts.fetch import RemoteFetcher
from extracts.manager import ExtractManager
from extracts.store import FilesystemExtractStore

logger = logging.getLogger(__name__)


class ServiceState:
    """State container for the shared services to avoid global variables."""

    manager: ExtractManager | None = None
    fetcher: RemoteFetcher | None = None


def get_extract_manager() -> ExtractManager:
    if ServiceState.manager is None:
        store = FilesystemExtractStore()
        ServiceState.fetcher = RemoteFetcher()
        ServiceState.manager = ExtractManager(store, ServiceState.fetcher)
        logger.info("Extract manager using containers at %s", store.root.resolve())
    return ServiceState.manager


def get_artifact_server() -> ArtifactServer:
    return ArtifactServer(get_extract_manager())


async def shutdown_services() -> None:
    """Close the shared HTTP client."""
    if ServiceState.fetcher is not None:
        try:
            await ServiceState.fetcher.aclose()
        except Exception as e:
            logger.warning("Error closing HTTP client: %s", e)
    ServiceState.fetcher = None
    ServiceState.manager = None
