"""Mapping-file parsing and the capability mapping registry."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from ..core.fs import collect_files, display_path, read_text
from .declarations import (
    Rejection,
    is_alias,
    is_capability_path,
    parse_capability,
    parse_operation,
    parse_target,
)
from .document import validate_document
from .model import (
    CapabilityBinding,
    Context,
    FeatureTarget,
    MappingDeclaration,
    OperationEntry,
    RequireDeclaration,
    Target,
)
from .problems import Parsed, Problem, ProblemKind
from .ranges import is_valid_range, ranges_compatible

MAPPING_SUFFIX = ".map.acl"
_OPEN = re.compile(r"\bMAPPING\s+([A-Za-z][A-Za-z0-9_]*)\s*\{(.*)$")
_HEADER = re.compile(r"\bMAPPING\s+([A-Za-z][A-Za-z0-9_]*)\s*$")


@dataclass(frozen=True)
class RawBlock:
    name: str
    line: int
    lines: tuple[str, ...] = ()


@dataclass(frozen=True)
class BlockState:
    """Lexer state: the block currently open, or a header still waiting for its `{`."""

    open_block: RawBlock | None = None
    pending: RawBlock | None = None


def _close(block: RawBlock, tail: str) -> RawBlock:
    return RawBlock(block.name, block.line, block.lines + ((tail,) if tail.strip() else ()))


def _start(block: RawBlock, rest: str, blocks: list[RawBlock]) -> BlockState:
    if "}" in rest:
        blocks.append(_close(block, rest.split("}", 1)[0]))
        return BlockState()
    return BlockState(_close(block, rest))


def lex_blocks(text: str) -> tuple[tuple[RawBlock, ...], tuple[str, ...]]:
    """Split text into raw `MAPPING <name> { ... }` blocks.

    The opening brace may sit on the header line or on the next non-empty
    line. Returns the closed blocks and the names of blocks left unterminated.
    """
    blocks: list[RawBlock] = []
    unterminated: list[str] = []
    state = BlockState()
    for lineno, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if state.pending is not None and line:
            if line.startswith("{"):
                state = _start(state.pending, line[1:], blocks)
                continue
            state = BlockState()
        opened = _OPEN.search(line)
        header = None if opened else _HEADER.search(line)
        if opened or header:
            if state.open_block is not None:
                unterminated.append(state.open_block.name)
            if opened:
                state = _start(RawBlock(opened.group(1), lineno), opened.group(2), blocks)
            elif header is not None:
                state = BlockState(pending=RawBlock(header.group(1), lineno))
            continue
        if state.open_block is None:
            continue
        if "}" in line:
            blocks.append(_close(state.open_block, line.split("}", 1)[0]))
            state = BlockState()
        else:
            state = BlockState(_close(state.open_block, line))
    if state.open_block is not None:
        unterminated.append(state.open_block.name)
    return tuple(blocks), tuple(unterminated)


def _body_lines(block: RawBlock) -> list[str]:
    out: list[str] = []
    for line in block.lines:
        text = line.strip()
        if text.startswith("- "):
            text = text[2:].strip()
        if text:
            out.append(text)
    return out


def build_mapping(block: RawBlock, source: str) -> Parsed[MappingDeclaration | None]:
    name = block.name
    problems: list[Problem] = []

    def add(kind: ProblemKind, message: str) -> None:
        problems.append(Problem(kind, message, source, name))

    capabilities: list[CapabilityBinding] = []
    targets: list[Target] = []
    operations: dict[str, OperationEntry] = {}

    for line in _body_lines(block):
        if line.startswith("CAPABILITY "):
            cap = parse_capability(line)
            if isinstance(cap, Rejection):
                add(ProblemKind.SYNTAX, f'invalid CAPABILITY declaration in mapping "{name}"')
                continue
            if not is_capability_path(cap.path):
                add(ProblemKind.SEMANTIC, f'invalid CAPABILITY path "{cap.path}" in mapping "{name}"')
            if not is_valid_range(cap.range):
                add(ProblemKind.SEMANTIC, f'invalid CAPABILITY version range "{cap.range}" in mapping "{name}"')
            if not is_alias(cap.alias):
                add(ProblemKind.SEMANTIC, f'CAPABILITY alias must be PascalCase: "{cap.alias}" in mapping "{name}"')
            capabilities.append(cap)
            continue

        if line.startswith(("TO FEATURE ", "TO ADAPTER ")):
            target = parse_target(line)
            if isinstance(target, Rejection):
                kind = "TO FEATURE" if line.startswith("TO FEATURE") else "TO ADAPTER"
                add(ProblemKind.SYNTAX, f'invalid {kind} target in mapping "{name}"')
                continue
            if isinstance(target, FeatureTarget):
                if not is_capability_path(target.path):
                    add(ProblemKind.SEMANTIC, f'invalid TO FEATURE path "{target.path}" in mapping "{name}"')
                if not is_valid_range(target.range):
                    add(ProblemKind.SEMANTIC, f'invalid TO FEATURE version range "{target.range}" in mapping "{name}"')
            targets.append(target)
            continue

        if "->" not in line:
            continue
        op = parse_operation(line)
        if isinstance(op, Rejection):
            add(ProblemKind.SYNTAX, f'invalid operation mapping "{line}" in mapping "{name}"')
            continue
        if op.operation in operations:
            add(ProblemKind.STRUCTURAL, f'mapping "{name}" defines operation "{op.operation}" more than once')
        operations[op.operation] = op

    if not capabilities:
        add(ProblemKind.STRUCTURAL, f'mapping "{name}" is missing CAPABILITY declaration')
    elif len(capabilities) > 1:
        add(ProblemKind.STRUCTURAL, f'mapping "{name}" declares more than one CAPABILITY')
    if not targets:
        add(ProblemKind.STRUCTURAL, f'mapping "{name}" is missing TO FEATURE/TO ADAPTER binding')
    elif len(targets) > 1:
        add(ProblemKind.STRUCTURAL, f'mapping "{name}" declares more than one TO FEATURE/TO ADAPTER binding')
    if not operations:
        add(ProblemKind.STRUCTURAL, f'mapping "{name}" is missing OPERATION MAP entries')
    if len(capabilities) == 1:
        alias = capabilities[0].alias
        for op in operations.values():
            if op.source_alias != alias:
                add(ProblemKind.STRUCTURAL, f'mapping "{name}" operation "{op.operation}" must use alias "{alias}"')

    if problems:
        return Parsed(None, tuple(problems))
    return Parsed(
        MappingDeclaration(
            name=name,
            capability=capabilities[0],
            target=targets[0],
            operations=dict(operations),
            source=source,
        )
    )


def parse_mapping_blocks(text: str, source: str) -> Parsed[tuple[MappingDeclaration, ...]]:
    blocks, unterminated = lex_blocks(text)
    problems: list[Problem] = [
        Problem(ProblemKind.SYNTAX, f'mapping "{name}" is missing closing brace', source, name) for name in unterminated
    ]
    if not blocks and not unterminated:
        problems.append(Problem(ProblemKind.SYNTAX, "missing MAPPING block", source))
    mappings: list[MappingDeclaration] = []
    for block in blocks:
        result = build_mapping(block, source)
        problems.extend(result.problems)
        if result.value is not None:
            mappings.append(result.value)
    return Parsed(tuple(mappings), tuple(problems))


@dataclass(frozen=True)
class MappingRegistry:
    """Sealed set of valid mappings for one validation run."""

    mappings: tuple[MappingDeclaration, ...] = ()
    files: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.mappings)

    def candidates(self, requirement: RequireDeclaration) -> tuple[MappingDeclaration, ...]:
        return tuple(
            mapping
            for mapping in self.mappings
            if mapping.capability.path == requirement.capability
            and ranges_compatible(requirement.range, mapping.capability.range)
        )


def load_mapping_text(text: str, source: str) -> Parsed[tuple[MappingDeclaration, ...]]:
    doc = validate_document(text, source, allow_mapping=True)
    if doc.problems or doc.metadata is None:
        return Parsed((), doc.problems)
    if doc.metadata.context is not Context.MAPPING:
        return Parsed((), (Problem(ProblemKind.SEMANTIC, 'mapping files must set CONTEXT to "Mapping"', source),))
    return parse_mapping_blocks(text[doc.body_offset:], source)


def build_registry(sources: Iterable[tuple[str, str]]) -> Parsed[MappingRegistry]:
    """Build a registry from already-loaded `(source, text)` pairs."""
    mappings: list[MappingDeclaration] = []
    problems: list[Problem] = []
    files: list[str] = []
    for source, text in sources:
        result = load_mapping_text(text, source)
        files.append(source)
        mappings.extend(result.value)
        problems.extend(result.problems)
    return Parsed(MappingRegistry(tuple(mappings), tuple(files)), tuple(problems))


def mapping_files(root: Path) -> list[Path]:
    return collect_files(root, lambda path: path.name.endswith(MAPPING_SUFFIX))


def load_mapping_registry(root: Path, display_root: Path | None = None) -> Parsed[MappingRegistry]:
    base = display_root or root
    return build_registry((display_path(path, base), read_text(path)) for path in mapping_files(root))
