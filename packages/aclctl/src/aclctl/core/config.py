"""Run configuration: defaults < aclctl.toml < ACLCTL_* environment < CLI flags."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

from ..errors import ScriptError
from ..exit_codes import ERR_CONFIG
from .env import getenv

CONFIG_FILE = "aclctl.toml"
CONFIG_TABLE = "aclctl"

_ENV_KEYS = {
    "registry_file": "ACLCTL_REGISTRY",
    "mappings_dir": "ACLCTL_MAPPINGS_DIR",
    "features_dir": "ACLCTL_FEATURES_DIR",
    "dist_dir": "ACLCTL_DIST_DIR",
    "fetch_timeout_seconds": "ACLCTL_FETCH_TIMEOUT",
    "probe_timeout_seconds": "ACLCTL_PROBE_TIMEOUT",
}


@dataclass(frozen=True)
class AclConfig:
    registry_file: str = "registry.yaml"
    mappings_dir: str = "acl/mappings"
    features_dir: str = "features"
    dist_dir: str = "dist"
    fetch_timeout_seconds: float = 10.0
    probe_timeout_seconds: float = 8.0

    def with_overrides(self, overrides: Mapping[str, Any], origin: str) -> "AclConfig":
        known = {f.name: f for f in fields(self)}
        changes: dict[str, Any] = {}
        for key, raw in overrides.items():
            if raw is None:
                continue
            if key not in known:
                raise ScriptError(f"{origin}: unknown config key `{key}`", ERR_CONFIG, kind="config_error")
            changes[key] = _coerce(key, raw, known[key].type, origin)
        return replace(self, **changes)


def _coerce(key: str, raw: Any, annotation: object, origin: str) -> Any:
    if annotation in (float, "float"):
        try:
            value = float(raw)
        except (TypeError, ValueError) as exc:
            raise ScriptError(f"{origin}: `{key}` must be a number, got {raw!r}", ERR_CONFIG, kind="config_error") from exc
        if value <= 0:
            raise ScriptError(f"{origin}: `{key}` must be positive", ERR_CONFIG, kind="config_error")
        return value
    if not isinstance(raw, str) or not raw.strip():
        raise ScriptError(f"{origin}: `{key}` must be a non-empty string", ERR_CONFIG, kind="config_error")
    return raw.strip()


def read_config_file(repo_root: Path) -> dict[str, Any]:
    path = repo_root / CONFIG_FILE
    if not path.is_file():
        return {}
    try:
        payload = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ScriptError(f"{CONFIG_FILE}: unable to parse: {exc}", ERR_CONFIG, kind="config_error") from exc
    table = payload.get(CONFIG_TABLE, {})
    if not isinstance(table, dict):
        raise ScriptError(f"{CONFIG_FILE}: [{CONFIG_TABLE}] must be a table", ERR_CONFIG, kind="config_error")
    return table


def env_overrides() -> dict[str, str | None]:
    return {key: getenv(name) for key, name in _ENV_KEYS.items()}


def load_config(repo_root: Path, cli_overrides: Mapping[str, Any] | None = None) -> AclConfig:
    cfg = AclConfig()
    cfg = cfg.with_overrides(read_config_file(repo_root), CONFIG_FILE)
    cfg = cfg.with_overrides(env_overrides(), "environment")
    if cli_overrides:
        cfg = cfg.with_overrides(cli_overrides, "command line")
    return cfg
