from __future__ import annotations

import json
from pathlib import Path

import pytest

from aclctl.core.config import AclConfig
from aclctl.core.context import RunContext
from aclctl.core.logging import log_event


def _ctx(**overrides: object) -> RunContext:
    base = {
        "run_id": "r1",
        "repo_root": Path("."),
        "config": AclConfig(),
        "output_format": "text",
        "network_mode": "forbid",
        "verbose": False,
        "quiet": False,
        "log_json": False,
    }
    base.update(overrides)
    return RunContext(**base)  # type: ignore[arg-type]


def test_text_events_are_key_value(capsys: pytest.CaptureFixture[str]) -> None:
    log_event(_ctx(), "info", "check", "start", files=3)
    err = capsys.readouterr().err
    assert "level=info run_id=r1 component=check action=start files=3" in err


def test_json_events(capsys: pytest.CaptureFixture[str]) -> None:
    log_event(_ctx(log_json=True), "warn", "check", "missing", path="x")
    row = json.loads(capsys.readouterr().err)
    assert row["level"] == "warn"
    assert row["path"] == "x"


def test_verbosity_gates(capsys: pytest.CaptureFixture[str]) -> None:
    log_event(_ctx(), "debug", "c", "a")
    log_event(_ctx(quiet=True), "info", "c", "a")
    assert capsys.readouterr().err == ""
    log_event(_ctx(verbose=True), "debug", "c", "a")
    log_event(_ctx(quiet=True), "error", "c", "a")
    assert len(capsys.readouterr().err.splitlines()) == 2
