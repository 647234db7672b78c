from __future__ import annotations

import ast
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
PKG_ROOT = ROOT / "src" / "aclctl"

_LAYERS = {
    "core": ("aclctl.acl", "aclctl.registry", "aclctl.commands", "aclctl.cli"),
    "acl": ("aclctl.registry", "aclctl.commands", "aclctl.cli"),
    "registry": ("aclctl.commands", "aclctl.cli"),
}


def _absolute(path: Path, node: ast.ImportFrom) -> str:
    if node.level == 0:
        return node.module or ""
    package = list(path.relative_to(ROOT / "src").with_suffix("").parts[:-1])
    base = package[: len(package) - (node.level - 1)]
    return ".".join(base + ([node.module] if node.module else []))


def _violations(layer: str) -> list[str]:
    forbidden = _LAYERS[layer]
    out: list[str] = []
    for path in sorted((PKG_ROOT / layer).rglob("*.py")):
        tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                names = [alias.name for alias in node.names]
            elif isinstance(node, ast.ImportFrom):
                names = [_absolute(path, node)]
            else:
                continue
            for name in names:
                if name.startswith(forbidden):
                    out.append(f"{path.relative_to(ROOT)}: forbidden import {name}")
    return out


def test_core_is_the_bottom_layer() -> None:
    errors = _violations("core")
    assert not errors, "\n".join(errors)


def test_acl_does_not_import_registry_or_cli() -> None:
    errors = _violations("acl")
    assert not errors, "\n".join(errors)


def test_registry_does_not_import_cli() -> None:
    errors = _violations("registry")
    assert not errors, "\n".join(errors)
