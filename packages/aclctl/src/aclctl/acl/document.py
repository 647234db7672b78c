"""Semantic validation of a single ACL/ACS document's metadata block."""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import urlparse

from .declarations import (
    CONTRACT_SUFFIX,
    Rejection,
    is_alias,
    is_capability_path,
    parse_import,
    parse_requires,
)
from .metadata import parse_metadata_block
from .model import (
    ACL,
    FEATURE_CONTEXTS,
    Context,
    Dialect,
    ImportDeclaration,
    MetadataBlock,
    RawMetadata,
    RequireDeclaration,
)
from .problems import Problem, ProblemKind
from .ranges import is_valid_range

REQUIRED_FIELDS = ("DOMAIN", "CONTEXT", "VERSION")
DOMAIN_PATTERN = re.compile(r"^[a-z][a-z0-9]*\.[a-z][a-z0-9]*$")
VERSION_PATTERN = re.compile(r"^\d+\.\d+\.\d+$")
_FILE_CONTEXT = re.compile(r"\.(schema|flow|contract|persona|map)\.(acl|acs)$", re.IGNORECASE)


@dataclass(frozen=True)
class DocumentResult:
    metadata: MetadataBlock | None
    problems: tuple[Problem, ...] = ()
    body_offset: int = 0

    @property
    def ok(self) -> bool:
        return self.metadata is not None and not self.problems


def source_filename(source: str) -> str:
    path = urlparse(source).path if source.startswith(("http://", "https://")) else source
    return path.replace("\\", "/").rsplit("/", 1)[-1]


def context_from_filename(source: str) -> Context | None:
    match = _FILE_CONTEXT.search(source_filename(source))
    if match is None:
        return None
    return Context.from_file_marker(match.group(1))


class _Sink:
    """Per-document problem accumulator; never shared across documents."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.items: list[Problem] = []

    def add(self, kind: ProblemKind, message: str, subject: str = "") -> None:
        self.items.append(Problem(kind, message, self.source, subject))


def _check_fields(raw: RawMetadata, allowed: tuple[Context, ...], sink: _Sink) -> Context | None:
    for key in REQUIRED_FIELDS:
        if not raw.scalar(key):
            sink.add(ProblemKind.SEMANTIC, f'missing metadata field: "{key}"')
    domain = raw.scalar("DOMAIN")
    if domain and not DOMAIN_PATTERN.match(domain):
        sink.add(ProblemKind.SEMANTIC, "DOMAIN must match company.subsystem (lowercase alphanumeric, dot separator)")
    context = Context.parse(raw.scalar("CONTEXT"))
    if raw.scalar("CONTEXT") and context not in allowed:
        sink.add(ProblemKind.SEMANTIC, f"CONTEXT must be one of: {', '.join(c.value for c in allowed)}")
        context = None
    version = raw.scalar("VERSION")
    if version and not VERSION_PATTERN.match(version):
        sink.add(ProblemKind.SEMANTIC, "VERSION must be SemVer (x.y.z)")
    return context


def _check_filename(raw_context: str, source: str, sink: _Sink) -> None:
    expected = context_from_filename(source)
    if expected is not None and raw_context != expected.value:
        sink.add(ProblemKind.SEMANTIC, f'CONTEXT "{raw_context}" does not match filename context "{expected.value}"')


def _claim_alias(alias: str, kind: str, aliases: set[str], sink: _Sink) -> None:
    if not is_alias(alias):
        sink.add(ProblemKind.SEMANTIC, f'{kind} alias must be PascalCase: "{alias}"', alias)
    if alias in aliases:
        sink.add(ProblemKind.SEMANTIC, f'duplicate dependency alias: "{alias}"', alias)
    aliases.add(alias)


def _check_imports(entries: tuple[str, ...], aliases: set[str], sink: _Sink) -> list[ImportDeclaration]:
    parsed: list[ImportDeclaration] = []
    for entry in entries:
        decl = parse_import(entry)
        if isinstance(decl, Rejection):
            sink.add(ProblemKind.SYNTAX, f'invalid IMPORT entry: "{entry}"')
            continue
        if not is_capability_path(decl.source):
            sink.add(ProblemKind.SEMANTIC, f'IMPORT source path is invalid: "{decl.source}"')
        elif not decl.source.endswith(CONTRACT_SUFFIX):
            sink.add(ProblemKind.SEMANTIC, f'IMPORT must target a feature Contract: "{entry}"')
        _claim_alias(decl.alias, "IMPORT", aliases, sink)
        parsed.append(decl)
    return parsed


def _check_requires(entries: tuple[str, ...], aliases: set[str], sink: _Sink) -> list[RequireDeclaration]:
    parsed: list[RequireDeclaration] = []
    for entry in entries:
        decl = parse_requires(entry)
        if isinstance(decl, Rejection):
            sink.add(ProblemKind.SYNTAX, f'invalid REQUIRES entry: "{entry}"')
            continue
        if not is_capability_path(decl.capability):
            sink.add(ProblemKind.SEMANTIC, f'REQUIRES capability path is invalid: "{decl.capability}"', str(decl))
        if not is_valid_range(decl.range):
            sink.add(ProblemKind.SEMANTIC, f'REQUIRES version range is invalid: "{decl.range}"', str(decl))
        _claim_alias(decl.alias, "REQUIRES", aliases, sink)
        parsed.append(decl)
    return parsed


def validate_document(
    text: str,
    source: str,
    *,
    dialect: Dialect = ACL,
    allow_mapping: bool = False,
    require_extension: bool = True,
) -> DocumentResult:
    sink = _Sink(source)
    raw = parse_metadata_block(text, dialect)
    if raw is None:
        sink.add(ProblemKind.SYNTAX, f"missing {dialect.open_marker} block")
        return DocumentResult(metadata=None, problems=tuple(sink.items))

    allowed = tuple(Context) if allow_mapping else FEATURE_CONTEXTS
    context = _check_fields(raw, allowed, sink)
    if require_extension and not source.endswith(dialect.extension):
        sink.add(ProblemKind.SEMANTIC, f"source must point to a {dialect.extension} file")
    if raw.scalar("CONTEXT"):
        _check_filename(raw.scalar("CONTEXT"), source, sink)

    aliases: set[str] = set()
    imports = _check_imports(raw.entries("IMPORT"), aliases, sink)
    requires = _check_requires(raw.entries("REQUIRES"), aliases, sink)

    block = MetadataBlock(
        domain=raw.scalar("DOMAIN"),
        context=context,
        version=raw.scalar("VERSION"),
        imports=tuple(imports),
        requires=tuple(requires),
    )
    return DocumentResult(metadata=block, problems=tuple(sink.items), body_offset=raw.body_offset)
