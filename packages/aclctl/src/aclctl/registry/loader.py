"""registry.yaml loading."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

import yaml

from ..core.fs import read_text
from ..errors import ScriptError
from ..exit_codes import ERR_REGISTRY


@dataclass(frozen=True)
class Registry:
    path: Path
    features: tuple[dict[str, Any], ...] = ()
    raw: dict[str, Any] = field(default_factory=dict)


def _normalize(value: Any) -> Any:
    # YAML turns unquoted YYYY-MM-DD into date objects; records and exports want text
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: _normalize(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_normalize(item) for item in value]
    return value


def parse_registry(text: str, path: Path) -> Registry:
    try:
        payload = _normalize(yaml.safe_load(text))
    except yaml.YAMLError as exc:
        raise ScriptError(f"failed to parse {path.name}: {exc}", ERR_REGISTRY, kind="registry_parse") from exc
    if not isinstance(payload, dict):
        raise ScriptError(f"{path.name}: root must be a mapping", ERR_REGISTRY, kind="registry_parse")
    features = payload.get("features")
    if not isinstance(features, list):
        raise ScriptError(f'{path.name} must contain a top-level "features" array', ERR_REGISTRY, kind="registry_parse")
    rows = tuple(row if isinstance(row, dict) else {"name": str(row)} for row in features)
    return Registry(path=path, features=rows, raw=payload)


def load_registry(path: Path) -> Registry:
    if not path.is_file():
        raise ScriptError(f"registry file not found: {path}", ERR_REGISTRY, kind="registry_missing")
    return parse_registry(read_text(path), path)


def feature_label(feature: dict[str, Any]) -> str:
    return str(feature.get("name") or "(unnamed)")
