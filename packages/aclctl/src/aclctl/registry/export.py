"""registry.yaml -> dist/registry.json export for programmatic consumers."""

from __future__ import annotations

import shutil
from pathlib import Path

from ..core.serialize import dumps_json
from .loader import Registry

EXPORT_JSON = "registry.json"
EXPORT_YAML = "registry.yaml"


def export_payload(registry: Registry, generated_at: str) -> dict[str, object]:
    payload = dict(registry.raw)
    payload["generated"] = generated_at
    payload["count"] = len(registry.features)
    return payload


def export_registry(registry: Registry, out_dir: Path, generated_at: str) -> Path:
    out_dir.mkdir(parents=True, exist_ok=True)
    target = out_dir / EXPORT_JSON
    target.write_text(dumps_json(export_payload(registry, generated_at), pretty=True) + "\n", encoding="utf-8")
    shutil.copyfile(registry.path, out_dir / EXPORT_YAML)
    return target
