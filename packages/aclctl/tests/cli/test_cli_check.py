from __future__ import annotations

import json
from pathlib import Path

import pytest

from aclctl.contracts import REPORT_SCHEMA, validate
from aclctl.exit_codes import ERR_CONFIG, ERR_IO, ERR_REGISTRY, ERR_USAGE, ERR_VALIDATION
from tests.helpers import metadata, run_aclctl, write

pytestmark = pytest.mark.integration


def test_check_local_passes(acl_repo: Path) -> None:
    proc = run_aclctl("check", "local", cwd=acl_repo)
    assert proc.returncode == 0, proc.stderr
    assert "all checks passed" in proc.stdout
    assert "component=check action=local-finished" in proc.stderr


def test_check_local_json_report_matches_schema(acl_repo: Path) -> None:
    write(acl_repo / "features/bad.contract.acl", metadata(version="1.0"))
    proc = run_aclctl("--json", "check", "local", cwd=acl_repo)
    assert proc.returncode == ERR_VALIDATION
    payload = json.loads(proc.stdout)
    validate(REPORT_SCHEMA, payload)
    assert payload["run_id"] == "pytest-run"
    assert payload["stats"] == {"files_checked": 3, "mappings_loaded": 1, "contracts_checked": 1}
    assert [row["message"] for row in payload["problems"]] == ["VERSION must be SemVer (x.y.z)"]


def test_subcommand_json_flag_is_honoured(acl_repo: Path) -> None:
    proc = run_aclctl("check", "local", "--json", cwd=acl_repo)
    assert json.loads(proc.stdout)["status"] == "ok"


def test_conflicting_output_flags(acl_repo: Path) -> None:
    proc = run_aclctl("--format", "text", "--json", "check", "local", cwd=acl_repo)
    assert proc.returncode == ERR_USAGE


def test_check_local_reports_grouped_problems(acl_repo: Path) -> None:
    write(acl_repo / "acl/mappings/broken.map.acl", metadata(context="Mapping") + "MAPPING Broken {\n}\n")
    proc = run_aclctl("--quiet", "check", "local", cwd=acl_repo)
    assert proc.returncode == ERR_VALIDATION
    assert "  acl/mappings/broken.map.acl" in proc.stdout
    assert "    [Broken]" in proc.stdout
    assert 'mapping "Broken" is missing CAPABILITY declaration' in proc.stdout
    assert proc.stderr == ""


def test_directory_overrides_come_from_flags(acl_repo: Path) -> None:
    proc = run_aclctl("check", "local", "--mappings", "nowhere", cwd=acl_repo)
    assert proc.returncode == ERR_VALIDATION
    assert "missing capability mapping for acme.payments.Gateway@^1.0 AS Payments" in proc.stdout
    assert "action=mappings-dir-missing" in proc.stderr


def test_check_file(acl_repo: Path) -> None:
    proc = run_aclctl("check", "file", "features/billing/billing.contract.acl", cwd=acl_repo)
    assert proc.returncode == 0, proc.stdout + proc.stderr
    missing = run_aclctl("check", "file", "nope.acl", cwd=acl_repo)
    assert missing.returncode == ERR_IO
    assert missing.stderr.strip().splitlines()[-1].startswith("aclctl: error: file not found")


def test_check_registry(acl_repo: Path) -> None:
    proc = run_aclctl("check", "registry", cwd=acl_repo)
    assert proc.returncode == 0, proc.stdout
    assert "registry.yaml (1 feature(s)): all checks passed" in proc.stdout
    write(acl_repo / "registry.yaml", "features: [")
    broken = run_aclctl("--json", "check", "registry", cwd=acl_repo)
    assert broken.returncode == ERR_REGISTRY
    error = json.loads(broken.stderr.strip().splitlines()[-1])
    assert error["errors"][0]["kind"] == "registry_parse"


def test_network_commands_refuse_when_forbidden(acl_repo: Path) -> None:
    for command in ("remote", "urls", "all"):
        proc = run_aclctl("--network", "forbid", "check", command, cwd=acl_repo)
        assert proc.returncode == ERR_CONFIG, command


def test_check_all_local_only(acl_repo: Path) -> None:
    proc = run_aclctl("--network", "forbid", "check", "all", "--local-only", cwd=acl_repo)
    assert proc.returncode == 0, proc.stdout
    assert proc.stdout.startswith("Skipping registry URL validation (--local-only).")


def test_check_all_local_only_does_not_need_the_registry(acl_repo: Path) -> None:
    (acl_repo / "registry.yaml").unlink()
    proc = run_aclctl("check", "all", "--local-only", cwd=acl_repo)
    assert proc.returncode == 0, proc.stderr
    assert "ACL checks: all checks passed" in proc.stdout
    write(acl_repo / "registry.yaml", "features: [")
    assert run_aclctl("check", "all", "--local-only", cwd=acl_repo).returncode == 0


def test_check_file_logs_rejected_mappings(acl_repo: Path) -> None:
    write(acl_repo / "acl/mappings/payments.map.acl", metadata(context="Mapping") + "MAPPING Broken {\n}\n")
    proc = run_aclctl("check", "file", "features/billing/billing.contract.acl", cwd=acl_repo)
    assert proc.returncode == ERR_VALIDATION
    assert "missing capability mapping for acme.payments.Gateway@^1.0 AS Payments" in proc.stdout
    assert "level=warn" in proc.stderr
    assert "action=mapping-rejected" in proc.stderr
    assert "subject=Broken" in proc.stderr


def test_config_file_is_read(acl_repo: Path) -> None:
    write(acl_repo / "aclctl.toml", '[aclctl]\nmappings_dir = "missing-dir"\n')
    proc = run_aclctl("check", "local", cwd=acl_repo)
    assert proc.returncode == ERR_VALIDATION
    bad = run_aclctl("check", "local", cwd=acl_repo, env={"ACLCTL_FETCH_TIMEOUT": "never"})
    assert bad.returncode == ERR_CONFIG
