from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from core.exceptions import ExternalToolError
from extracts.tools import convert_args, run_osm_convert, run_osm_update, update_args


def test_convert_args() -> None:
    assert convert_args("2023-01-01T00:00:00Z", "israel.pbf", "temp-a.pbf") == [
        "--timestamp=2023-01-01T00:00:00Z",
        "israel.pbf",
        "-o=temp-a.pbf",
    ]


@pytest.mark.parametrize(
    "base",
    ["http://download.test/replication/asia", "http://download.test/replication/asia/"],
)
def test_update_args(base: str) -> None:
    assert update_args(base, "minute", "a.pbf") == [
        "--server",
        "http://download.test/replication/asia/minute/",
        "a.pbf",
    ]


@pytest.mark.asyncio
async def test_convert_renames_temp_over_target(tmp_path: Path) -> None:
    (tmp_path / "a.pbf").write_bytes(b"old")

    async def fake_run(executable, args, work_dir, timeout_seconds):
        (work_dir / "temp-a.pbf").write_bytes(b"new")
        return True

    with patch("extracts.tools.run_process", side_effect=fake_run) as run_mock:
        await run_osm_convert(tmp_path, "2023-01-01T00:00:00Z", "src.pbf", "a.pbf")

    assert (tmp_path / "a.pbf").read_bytes() == b"new"
    assert not (tmp_path / "temp-a.pbf").exists()
    executable, args, work_dir, timeout = run_mock.call_args.args
    assert executable == "osmconvert"
    assert args == ["--timestamp=2023-01-01T00:00:00Z", "src.pbf", "-o=temp-a.pbf"]
    assert work_dir == tmp_path
    assert timeout == 3600


@pytest.mark.asyncio
async def test_convert_failure_keeps_target_and_removes_temp(tmp_path: Path) -> None:
    (tmp_path / "a.pbf").write_bytes(b"old")

    async def fake_run(executable, args, work_dir, timeout_seconds):
        (work_dir / "temp-a.pbf").write_bytes(b"half-written")
        return False

    with (
        patch("extracts.tools.run_process", side_effect=fake_run),
        pytest.raises(ExternalToolError),
    ):
        await run_osm_convert(tmp_path, "2023-01-01T00:00:00Z", "src.pbf", "a.pbf")

    assert (tmp_path / "a.pbf").read_bytes() == b"old"
    assert not (tmp_path / "temp-a.pbf").exists()


@pytest.mark.asyncio
async def test_convert_without_output_is_a_failure(tmp_path: Path) -> None:
    with (
        patch("extracts.tools.run_process", AsyncMock(return_value=True)),
        pytest.raises(ExternalToolError),
    ):
        await run_osm_convert(tmp_path, "2023-01-01T00:00:00Z", "src.pbf", "a.pbf")


@pytest.mark.asyncio
async def test_update_uses_configured_command(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("OSM_UPDATE_COMMAND", "/usr/local/bin/pyosmium-up-to-date")
    monkeypatch.setenv("EXTRACT_TOOL_TIMEOUT", "900")
    run_mock = AsyncMock(return_value=True)

    with patch("extracts.tools.run_process", run_mock):
        await run_osm_update(tmp_path, "http://download.test/replication", "day", "a.pbf")

    run_mock.assert_awaited_once_with(
        "/usr/local/bin/pyosmium-up-to-date",
        ["--server", "http://download.test/replication/day/", "a.pbf"],
        tmp_path,
        900,
    )


@pytest.mark.asyncio
async def test_update_failure_raises(tmp_path: Path) -> None:
    with (
        patch("extracts.tools.run_process", AsyncMock(return_value=False)),
        pytest.raises(ExternalToolError, match="Failed to update"),
    ):
        await run_osm_update(tmp_path, "http://download.test/replication", "hour", "a.pbf")
