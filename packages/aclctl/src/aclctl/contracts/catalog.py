from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from ..errors import ScriptError
from ..exit_codes import ERR_INTERNAL
from .schemas import schemas_root


@dataclass(frozen=True)
class CatalogEntry:
    name: str
    version: int
    file: str


def catalog_path() -> Path:
    return schemas_root() / "catalog.json"


def load_catalog() -> dict[str, CatalogEntry]:
    raw = json.loads(catalog_path().read_text(encoding="utf-8"))
    entries: dict[str, CatalogEntry] = {}
    for row in raw.get("schemas", []):
        entry = CatalogEntry(name=row["name"], version=int(row["version"]), file=row["file"])
        entries[entry.name] = entry
    return entries


def schema_path_for(schema_name: str) -> Path:
    entry = load_catalog().get(schema_name)
    if entry is None:
        raise ScriptError(f"unknown schema: {schema_name}", ERR_INTERNAL, kind="unknown_schema")
    return schemas_root() / entry.file


def load_schema(schema_name: str) -> dict[str, object]:
    return json.loads(schema_path_for(schema_name).read_text(encoding="utf-8"))
