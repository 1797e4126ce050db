import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
TESTS_DIR = Path(__file__).resolve().parent

for path in (ROOT, TESTS_DIR):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

import pytest  # noqa: E402
from network_blocker import install_network_blocker  # noqa: E402

from extracts.services import ServiceState  # noqa: E402


@pytest.fixture(autouse=True)
def _default_test_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("EXTRACTS_CONTAINERS_PATH", str(tmp_path / "containers"))
    monkeypatch.delenv("OSM_CONVERT_COMMAND", raising=False)
    monkeypatch.delenv("OSM_UPDATE_COMMAND", raising=False)
    monkeypatch.delenv("EXTRACT_TOOL_TIMEOUT", raising=False)
    monkeypatch.delenv("EXTRACT_FETCH_TIMEOUT", raising=False)
    install_network_blocker(monkeypatch)


@pytest.fixture(autouse=True)
def _reset_services(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(ServiceState, "manager", None)
    monkeypatch.setattr(ServiceState, "fetcher", None)
