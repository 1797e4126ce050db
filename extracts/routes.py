"""
Extract API endpoints.

Provides endpoints for:
- Listing extracts
- Creating an extract from a remote snapshot
- Downloading the current artifact
- Re-downloading and/or updating an extract
- Updating an extract and fetching its change file
- Deleting an extract
"""

import logging
from typing import Any

from fastapi import APIRouter
from fastapi.responses import FileResponse, PlainTextResponse

from core.api import api_route
from extracts.models import CreateExtractRequest, UpdateExtractRequest
from extracts.services import get_artifact_server, get_extract_manager

logger = logging.getLogger(__name__)
router = APIRouter(tags=["extracts"])


@router.get("/")
@api_route(logger)
async def list_extracts() -> list[str]:
    """Get all the currently available OSM extracts."""
    return get_artifact_server().list_extracts()


@router.get("/{extract_id}")
@api_route(logger)
async def get_extract_file(extract_id: str) -> FileResponse:
    """Get the extract's PBF file as of its latest update."""
    artifact = get_artifact_server().get_artifact(extract_id)
    return FileResponse(
        artifact.path,
        media_type=artifact.media_type,
        filename=artifact.file_name,
    )


@router.post("/", response_class=PlainTextResponse)
@api_route(logger)
async def create_extract(request: CreateExtractRequest) -> str:
    """
    Create an OSM extract and download its first snapshot.

    Example body:

        {
            "id": "an-id-to-use-for-future-communication",
            "fileName": "israel-and-palestine-latest.osm.pbf",
            "updateFileName": "israel-and-palestine-updates.osc",
            "osmDownloadAddress": "http://download.openstreetmap.fr/extracts/asia/israel_and_palestine-latest.osm.pbf",
            "osmTimeStampAddress": "http://download.openstreetmap.fr/extracts/asia/israel_and_palestine.state.txt",
            "baseUpdateAddress": "http://download.openstreetmap.fr/replication/asia/israel_and_palestine",
            "updateMode": "Minute"
        }

    ``id`` is optional; one is generated when it is missing. Returns the
    extract id.
    """
    return await get_extract_manager().create(request)


@router.put("/{extract_id}")
@api_route(logger)
async def update_extract(
    extract_id: str,
    request: UpdateExtractRequest,
) -> dict[str, Any]:
    """Re-download the base snapshot and/or apply the latest replication diffs."""
    await get_extract_manager().update(extract_id, request)
    return {"success": True, "id": extract_id}


@router.put("/{extract_id}/updates")
@api_route(logger)
async def get_extract_updates(extract_id: str) -> FileResponse:
    """Update the extract and return its OSM change file."""
    change_file = await get_artifact_server().get_change_file(extract_id)
    return FileResponse(change_file.path, media_type=change_file.media_type)


@router.delete("/{extract_id}")
@api_route(logger)
async def delete_extract(extract_id: str) -> dict[str, Any]:
    """Delete an extract and all of its files."""
    await get_extract_manager().delete(extract_id)
    return {"success": True, "id": extract_id}
