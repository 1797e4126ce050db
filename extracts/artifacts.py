"""
Resolution of the files served to callers.

The artifact server is read-only apart from ``get_change_file``, which runs
an update cycle before resolving the change file.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from core.exceptions import ArtifactMissingError

if TYPE_CHECKING:
    from pathlib import Path

    from extracts.manager import ExtractManager

PBF_MEDIA_TYPE = "application/pbf"
CHANGE_FILE_MEDIA_TYPE = "application/xml"


@dataclass(frozen=True)
class ArtifactFile:
    path: Path
    file_name: str
    media_type: str


class ArtifactServer:
    def __init__(self, manager: ExtractManager) -> None:
        self._manager = manager

    def list_extracts(self) -> list[str]:
        return self._manager.list_ids()

    def get_artifact(self, extract_id: str) -> ArtifactFile:
        """
        Current binary artifact of an extract.

        Raises:
            ExtractNotFoundError: If the extract was never created
            ArtifactMissingError: If no snapshot has been stored yet
        """
        config = self._manager.read_config(extract_id)
        path = self._manager.path_for(extract_id) / config.file_name
        if not path.is_file():
            msg = f"Artifact {config.file_name} is not available yet"
            raise ArtifactMissingError(msg, {"id": extract_id})
        return ArtifactFile(path=path, file_name=config.file_name, media_type=PBF_MEDIA_TYPE)

    async def get_change_file(self, extract_id: str) -> ArtifactFile:
        """Update the extract to the latest replication state and return its change file."""
        path = await self._manager.get_updates(extract_id)
        return ArtifactFile(
            path=path,
            file_name=path.name,
            media_type=CHANGE_FILE_MEDIA_TYPE,
        )
