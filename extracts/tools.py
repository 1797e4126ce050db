"""
Command lines for the external OSM tools.

- osmconvert re-stamps a snapshot with the server's replication timestamp
- pyosmium-up-to-date applies replication diffs to an artifact in place
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from config import get_osm_convert_command, get_osm_update_command, get_tool_timeout
from core.exceptions import ExternalToolError
from core.process import run_process

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

TEMP_FILE_PREFIX = "temp-"


def convert_args(timestamp: str, source_file: str, output_file: str) -> list[str]:
    return [f"--timestamp={timestamp}", source_file, f"-o={output_file}"]


def update_args(base_update_address: str, cadence: str, artifact_file: str) -> list[str]:
    server = f"{base_update_address.rstrip('/')}/{cadence}/"
    return ["--server", server, artifact_file]


async def run_osm_convert(
    work_dir: Path,
    timestamp: str,
    source_file: str,
    output_file: str,
) -> None:
    """
    Stamp ``source_file`` with ``timestamp`` into ``output_file``.

    ``output_file`` is written via ``temp-<output_file>`` and renamed over
    the target only after osmconvert succeeds.

    Raises:
        ExternalToolError: If osmconvert fails or times out
    """
    temp_name = f"{TEMP_FILE_PREFIX}{output_file}"
    temp_path = work_dir / temp_name
    ok = await run_process(
        get_osm_convert_command(),
        convert_args(timestamp, source_file, temp_name),
        work_dir,
        get_tool_timeout(),
    )
    if not ok or not temp_path.is_file():
        temp_path.unlink(missing_ok=True)
        msg = f"Failed to convert {source_file} to {output_file}"
        raise ExternalToolError(msg, {"tool": get_osm_convert_command()})

    temp_path.replace(work_dir / output_file)
    logger.info("Stamped %s with timestamp %s", output_file, timestamp)


async def run_osm_update(
    work_dir: Path,
    base_update_address: str,
    cadence: str,
    artifact_file: str,
) -> None:
    """
    Bring ``artifact_file`` up to date from ``<base>/<cadence>/``.

    Raises:
        ExternalToolError: If pyosmium-up-to-date fails or times out
    """
    ok = await run_process(
        get_osm_update_command(),
        update_args(base_update_address, cadence, artifact_file),
        work_dir,
        get_tool_timeout(),
    )
    if not ok:
        msg = "Failed to update to latest OSM file."
        raise ExternalToolError(msg, {"tool": get_osm_update_command()})
