"""Contract cross-validation against the sealed mapping registry."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from ..core.fs import collect_files, display_path, read_text
from .document import DocumentResult, validate_document
from .mappings import MAPPING_SUFFIX, MappingRegistry, load_mapping_registry, load_mapping_text
from .model import ACL, CallSite, Context, MetadataBlock, dialect_for
from .problems import Problem, ProblemKind

_CALL = re.compile(r"\bCALL\s+([A-Z][A-Za-z0-9]*)\.([A-Za-z][A-Za-z0-9_]*)")


def extract_call_sites(body: str, first_line: int = 1) -> tuple[CallSite, ...]:
    """Find `CALL <Alias>.<operation>` sites; `first_line` is the file line the body starts on."""
    sites: list[CallSite] = []
    for lineno, line in enumerate(body.splitlines(), start=first_line):
        for match in _CALL.finditer(line):
            sites.append(CallSite(alias=match.group(1), operation=match.group(2), line=lineno))
    return tuple(sites)


def calls_by_alias(sites: tuple[CallSite, ...]) -> dict[str, tuple[CallSite, ...]]:
    """First site of each operation, grouped by alias in first-seen order."""
    grouped: dict[str, dict[str, CallSite]] = {}
    for site in sites:
        grouped.setdefault(site.alias, {}).setdefault(site.operation, site)
    return {alias: tuple(ops.values()) for alias, ops in grouped.items()}


def cross_validate(
    metadata: MetadataBlock,
    body: str,
    source: str,
    registry: MappingRegistry,
    first_line: int = 1,
) -> tuple[Problem, ...]:
    problems: list[Problem] = []
    calls = calls_by_alias(extract_call_sites(body, first_line))
    for requirement in metadata.requires:
        subject = str(requirement)
        candidates = registry.candidates(requirement)
        if not candidates:
            problems.append(
                Problem(ProblemKind.RESOLUTION, f"missing capability mapping for {requirement}", source, subject)
            )
            continue
        if len(candidates) > 1:
            names = ", ".join(sorted(m.name for m in candidates))
            problems.append(
                Problem(
                    ProblemKind.RESOLUTION,
                    f"ambiguous capability mapping for {requirement} (candidates: {names})",
                    source,
                    subject,
                )
            )
            continue
        selected = candidates[0]
        for site in calls.get(requirement.alias, ()):
            if not selected.defines(site.operation):
                problems.append(
                    Problem(
                        ProblemKind.CONSISTENCY,
                        f'mapping "{selected.name}" does not define operation {requirement.alias}.{site.operation} (line {site.line})',
                        source,
                        selected.name,
                    )
                )
    return tuple(problems)


def validate_contract_text(text: str, source: str, registry: MappingRegistry) -> tuple[Problem, ...]:
    doc = validate_document(text, source)
    return doc.problems + cross_validate_document(doc, text, source, registry)


def cross_validate_document(
    doc: DocumentResult,
    text: str,
    source: str,
    registry: MappingRegistry,
) -> tuple[Problem, ...]:
    if not doc.ok or doc.metadata is None:
        return ()
    if doc.metadata.context is not Context.CONTRACT or not doc.metadata.requires:
        return ()
    first_line = text.count("\n", 0, doc.body_offset) + 1
    return cross_validate(doc.metadata, text[doc.body_offset:], source, registry, first_line)


@dataclass(frozen=True)
class ValidationReport:
    problems: tuple[Problem, ...] = ()
    files_checked: int = 0
    mappings_loaded: int = 0
    contracts_checked: int = 0

    @property
    def ok(self) -> bool:
        return not self.problems


def feature_files(root: Path) -> list[Path]:
    return collect_files(root, lambda path: path.suffix == ACL.extension and not path.name.endswith(MAPPING_SUFFIX))


def validate_tree(repo_root: Path, mappings_dir: Path, features_dir: Path) -> ValidationReport:
    """Run the local pass: seal the registry first, then check every feature file."""
    loaded = load_mapping_registry(mappings_dir, display_root=repo_root)
    registry = loaded.value
    problems: list[Problem] = list(loaded.problems)
    files = feature_files(features_dir)
    contracts = 0
    for path in files:
        source = display_path(path, repo_root)
        text = read_text(path)
        doc = validate_document(text, source)
        problems.extend(doc.problems)
        if doc.ok and doc.metadata is not None and doc.metadata.context is Context.CONTRACT:
            contracts += 1
        problems.extend(cross_validate_document(doc, text, source, registry))
    return ValidationReport(
        problems=tuple(problems),
        files_checked=len(files) + len(registry.files),
        mappings_loaded=len(registry),
        contracts_checked=contracts,
    )


def validate_paths(repo_root: Path, paths: list[Path], registry: MappingRegistry) -> ValidationReport:
    """Check individual files; mapping files are parsed in full, contracts are cross-validated."""
    problems: list[Problem] = []
    contracts = 0
    mappings = 0
    for path in paths:
        source = display_path(path, repo_root)
        text = read_text(path)
        if path.name.endswith(MAPPING_SUFFIX):
            parsed = load_mapping_text(text, source)
            problems.extend(parsed.problems)
            mappings += len(parsed.value)
            continue
        doc = validate_document(text, source, dialect=dialect_for(source))
        problems.extend(doc.problems)
        if doc.ok and doc.metadata is not None and doc.metadata.context is Context.CONTRACT:
            contracts += 1
        problems.extend(cross_validate_document(doc, text, source, registry))
    return ValidationReport(
        problems=tuple(problems),
        files_checked=len(paths),
        mappings_loaded=mappings,
        contracts_checked=contracts,
    )
