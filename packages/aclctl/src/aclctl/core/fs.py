from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterator

from ..errors import ScriptError
from ..exit_codes import ERR_IO


def read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ScriptError(f"unable to read {path}: {exc}", ERR_IO, kind="unreadable_input") from exc


def iter_files(root: Path) -> Iterator[Path]:
    """Yield files under `root` depth-first in sorted order.

    Uses an explicit stack and skips directories whose resolved path was already
    visited, so symlink cycles and very deep trees cannot recurse unboundedly.
    """
    if not root.is_dir():
        return
    visited: set[Path] = set()
    stack: list[Path] = [root]
    while stack:
        current = stack.pop()
        real = current.resolve()
        if real in visited:
            continue
        visited.add(real)
        entries = sorted(current.iterdir(), key=lambda p: p.name)
        dirs = [entry for entry in entries if entry.is_dir()]
        for entry in entries:
            if entry.is_file():
                yield entry
        stack.extend(reversed(dirs))


def collect_files(root: Path, predicate: Callable[[Path], bool]) -> list[Path]:
    return sorted((path for path in iter_files(root) if predicate(path)), key=lambda p: p.as_posix())


def display_path(path: Path, base: Path) -> str:
    try:
        return path.relative_to(base).as_posix()
    except ValueError:
        return path.as_posix()
