"""
Extract lifecycle orchestration.

State of one extract:

    ABSENT --create--> CREATED --download--> POPULATED --update--> POPULATED
    CREATED/POPULATED --delete--> ABSENT

Every mutating operation runs under the extract's lock, so two requests for
the same id never interleave their downloads, conversions or deletions.
Requests for different ids run concurrently.
"""

from __future__ import annotations

import asyncio
import logging
import os
import uuid
from typing import TYPE_CHECKING

from pydantic import ValidationError

from core.exceptions import (
    ArtifactMissingError,
    ExtractAlreadyExistsError,
    ExtractNotFoundError,
    InvalidConfigurationError,
    UpstreamFetchError,
)
from extracts.fetch import url_file_name
from extracts.locks import ExtractLocks
from extracts.models import ExtractConfig, validate_path_component
from extracts.timestamp import parse_state_timestamp
from extracts.tools import run_osm_convert, run_osm_update

if TYPE_CHECKING:
    from pathlib import Path

    from extracts.fetch import RemoteFetcher
    from extracts.models import CreateExtractRequest, UpdateExtractRequest
    from extracts.store import ExtractStore

logger = logging.getLogger(__name__)

SOURCE_FILE_PREFIX = "source-"
DOWNLOADING_SUFFIX = ".downloading"


def _safe_snapshot_name(file_name: str, url: str, fallback: str) -> str:
    for candidate in (file_name, url_file_name(url), fallback):
        try:
            return validate_path_component(candidate, "snapshot file name")
        except InvalidConfigurationError:
            logger.warning("Ignoring unsafe snapshot file name %r", candidate)
    return fallback


class ExtractManager:
    """Creates, downloads, updates and deletes extracts held by a store."""

    def __init__(
        self,
        store: ExtractStore,
        fetcher: RemoteFetcher,
        locks: ExtractLocks | None = None,
    ) -> None:
        self._store = store
        self._fetcher = fetcher
        self._locks = locks or ExtractLocks()

    @property
    def store(self) -> ExtractStore:
        return self._store

    def list_ids(self) -> list[str]:
        return self._store.list_ids()

    def read_config(self, extract_id: str) -> ExtractConfig:
        """
        Config of an existing extract.

        Raises:
            ExtractNotFoundError: If the extract directory is missing or empty
        """
        if not self._store.exists(extract_id):
            msg = f"Extract {extract_id} does not exist"
            raise ExtractNotFoundError(msg, {"id": extract_id})
        return self._store.read_config(extract_id)

    def path_for(self, extract_id: str) -> Path:
        return self._store.path_for(extract_id)

    async def create(self, request: CreateExtractRequest) -> str:
        """
        Create an extract and download its first snapshot.

        Creating an id that already exists is a no-op returning the id, so
        retried client requests are harmless. If the initial download fails
        the extract stays created and the error propagates.
        """
        extract_id = request.id.strip() or str(uuid.uuid4())
        validate_path_component(extract_id, "id")
        try:
            config = ExtractConfig.model_validate(
                {**request.model_dump(), "id": extract_id},
            )
        except ValidationError as exc:
            msg = f"Invalid configuration for extract {extract_id}"
            raise InvalidConfigurationError(msg, {"errors": exc.errors()}) from exc

        async with self._locks.hold(extract_id):
            if self._store.exists(extract_id):
                logger.info(
                    "Directory already exists for id: %s, nothing to do",
                    extract_id,
                )
                return extract_id
            try:
                self._store.create(extract_id)
            except ExtractAlreadyExistsError:
                logger.info("Extract %s appeared concurrently, nothing to do", extract_id)
                return extract_id

            self._store.write_config(extract_id, config)
            await self._download(extract_id, config)

        logger.info("Finished creating directory %s", extract_id)
        return extract_id

    async def download(self, extract_id: str) -> None:
        """Re-fetch the base snapshot of an existing extract."""
        async with self._locks.hold(extract_id):
            config = self.read_config(extract_id)
            await self._download(extract_id, config)

    async def update_to_latest(self, extract_id: str) -> None:
        """Apply replication diffs to the extract's artifact."""
        async with self._locks.hold(extract_id):
            await self._update_to_latest(extract_id)

    async def get_updates(self, extract_id: str) -> Path:
        """
        Run a full update cycle, then return the change file path.

        Raises:
            ArtifactMissingError: If the updater produced no change file
        """
        async with self._locks.hold(extract_id):
            config = await self._update_to_latest(extract_id)
            if not config.update_file_name:
                msg = f"Extract {extract_id} has no updateFileName configured"
                raise ArtifactMissingError(msg, {"id": extract_id})
            change_file = self._store.path_for(extract_id) / config.update_file_name
            if not change_file.is_file():
                msg = f"Change file {config.update_file_name} was not produced"
                raise ArtifactMissingError(msg, {"id": extract_id})
            return change_file

    async def update(self, extract_id: str, request: UpdateExtractRequest) -> None:
        """Download and/or update, in that order, as the request selects."""
        async with self._locks.hold(extract_id):
            config = self.read_config(extract_id)
            if request.download_file:
                await self._download(extract_id, config)
            if request.update_file:
                await self._update_to_latest(extract_id)
        logger.info("Finished OSM file manipulation for %s.", extract_id)

    async def delete(self, extract_id: str) -> None:
        async with self._locks.hold(extract_id):
            if not self._store.exists(extract_id):
                msg = f"Extract {extract_id} does not exist"
                raise ExtractNotFoundError(msg, {"id": extract_id})
            await asyncio.to_thread(self._store.delete, extract_id)
        logger.info("Deleted extract %s", extract_id)

    async def _download(self, extract_id: str, config: ExtractConfig) -> None:
        logger.info("Starting downloading OSM file for %s.", extract_id)
        directory = self._store.path_for(extract_id)

        temp_path = directory / f"{config.file_name}{DOWNLOADING_SUFFIX}"
        snapshot = await self._fetcher.download_to(
            config.osm_download_address,
            temp_path,
        )
        if not snapshot.ok:
            msg = f"Unable to download snapshot from {config.osm_download_address}"
            raise UpstreamFetchError(msg, {"url": config.osm_download_address})

        restamp = bool(config.osm_time_stamp_address.strip())
        source_name = _safe_snapshot_name(
            snapshot.file_name,
            config.osm_download_address,
            config.file_name,
        )
        if restamp and source_name == config.file_name:
            # the canonical artifact may only change through the convert rename
            source_name = f"{SOURCE_FILE_PREFIX}{config.file_name}"

        source_path = directory / source_name
        logger.info("Saving OSM file to: %s", source_path)
        os.replace(temp_path, source_path)

        if not restamp:
            if source_name != config.file_name:
                logger.warning(
                    "Snapshot saved as %s but artifact is %s and no timestamp "
                    "address is configured; artifact left unchanged",
                    source_name,
                    config.file_name,
                )
            return

        marker = await self._fetcher.fetch(config.osm_time_stamp_address)
        if not marker.ok:
            msg = f"Unable to download timestamp from {config.osm_time_stamp_address}"
            raise UpstreamFetchError(msg, {"url": config.osm_time_stamp_address})

        timestamp = parse_state_timestamp(marker.content)
        if not timestamp:
            msg = f"No timestamp found in {config.osm_time_stamp_address}"
            raise UpstreamFetchError(msg, {"url": config.osm_time_stamp_address})

        await run_osm_convert(directory, timestamp, source_name, config.file_name)

    async def _update_to_latest(self, extract_id: str) -> ExtractConfig:
        logger.info("Starting updating to latest OSM file for %s.", extract_id)
        config = self.read_config(extract_id)

        cadence = config.update_mode.cadence
        if cadence is None:
            msg = f"Extract {extract_id} has no update mode; updates are manual"
            raise InvalidConfigurationError(msg, {"updateMode": config.update_mode})

        directory = self._store.path_for(extract_id)
        if not (directory / config.file_name).is_file():
            msg = f"Artifact {config.file_name} has not been downloaded yet"
            raise ArtifactMissingError(msg, {"id": extract_id})

        await run_osm_update(
            directory,
            config.base_update_address,
            cadence,
            config.file_name,
        )
        logger.info("Finished updating to latest OSM file for %s.", extract_id)
        return config
