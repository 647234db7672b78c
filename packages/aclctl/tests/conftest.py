from __future__ import annotations

import socket
import tempfile
from pathlib import Path

import pytest
from hypothesis import settings
from hypothesis.database import DirectoryBasedExampleDatabase

from tests.helpers import write_repo

_ALLOWED_MARKERS = {"unit", "integration", "slow"}

_HYPOTHESIS_DB = Path(tempfile.gettempdir()) / "aclctl-hypothesis/examples"
_HYPOTHESIS_DB.parent.mkdir(parents=True, exist_ok=True)
settings.register_profile("aclctl", database=DirectoryBasedExampleDatabase(_HYPOTHESIS_DB))
settings.load_profile("aclctl")


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        names = {mark.name for mark in item.iter_markers()}
        if not names.intersection(_ALLOWED_MARKERS):
            item.add_marker("unit")


@pytest.fixture(autouse=True)
def no_network_for_unit(request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch) -> None:
    if request.node.get_closest_marker("integration") or request.node.get_closest_marker("slow"):
        return

    def _blocked(*_args: object, **_kwargs: object) -> socket.socket:
        raise RuntimeError("network disabled in unit tests")

    def _blocked_connect(*_args: object, **_kwargs: object) -> None:
        raise RuntimeError("network disabled in unit tests")

    monkeypatch.setattr(socket, "create_connection", _blocked)
    monkeypatch.setattr(socket.socket, "connect", _blocked_connect)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "ACLCTL_REGISTRY",
        "ACLCTL_MAPPINGS_DIR",
        "ACLCTL_FEATURES_DIR",
        "ACLCTL_DIST_DIR",
        "ACLCTL_FETCH_TIMEOUT",
        "ACLCTL_PROBE_TIMEOUT",
        "RUN_ID",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def acl_repo(tmp_path: Path) -> Path:
    return write_repo(tmp_path / "repo")
