"""
Subprocess helpers for the external OSM tools.

Commands are always passed as a discrete argument list to
``asyncio.create_subprocess_exec``; nothing goes through a shell.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import shlex
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

logger = logging.getLogger(__name__)

TIMEOUT_RETURN_CODE = 124
NOT_FOUND_RETURN_CODE = 127
_STDERR_TAIL_CHARS = 2000


async def run_command(
    cmd: Sequence[str],
    *,
    cwd: str | Path | None = None,
    timeout_seconds: float = 10.0,
) -> tuple[int, str, str]:
    """
    Run a command and capture its output.

    Returns (returncode, stdout, stderr). A timed-out process is killed and
    reaped, and reported with return code 124; a missing executable with 127.
    """
    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=str(cwd) if cwd is not None else None,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as exc:
        return NOT_FOUND_RETURN_CODE, "", str(exc)

    try:
        async with asyncio.timeout(timeout_seconds):
            stdout, stderr = await process.communicate()
    except TimeoutError:
        with contextlib.suppress(ProcessLookupError):
            process.kill()
        with contextlib.suppress(Exception):
            await process.communicate()
        return TIMEOUT_RETURN_CODE, "", "timeout"
    return (
        process.returncode,
        stdout.decode(errors="replace").strip(),
        stderr.decode(errors="replace").strip(),
    )


async def run_process(
    executable: str,
    args: Sequence[str],
    work_dir: str | Path,
    timeout_seconds: float,
) -> bool:
    """
    Run an external tool inside ``work_dir`` and report whether it succeeded.

    Returns False when the tool exits non-zero, does not finish within
    ``timeout_seconds`` or cannot be started at all.
    """
    cmd = [executable, *args]
    printable = shlex.join(cmd)
    logger.info("Starting process: %s at %s", printable, work_dir)

    returncode, _stdout, stderr = await run_command(
        cmd,
        cwd=work_dir,
        timeout_seconds=timeout_seconds,
    )

    if returncode != 0:
        if returncode == TIMEOUT_RETURN_CODE and stderr == "timeout":
            logger.error(
                "Process %s did not finish within %ss and was killed",
                printable,
                timeout_seconds,
            )
        else:
            logger.error(
                "Finished process %s without success (exit %s): %s",
                printable,
                returncode,
                stderr[-_STDERR_TAIL_CHARS:] or "no error output",
            )
        return False

    logger.info("Finished process %s successfully", printable)
    return True
