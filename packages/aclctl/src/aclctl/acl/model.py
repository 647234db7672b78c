"""Typed records produced by the ACL parsers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Union


class Context(str, Enum):
    SCHEMA = "Schema"
    FLOW = "Flow"
    CONTRACT = "Contract"
    PERSONA = "Persona"
    MAPPING = "Mapping"

    @property
    def is_feature(self) -> bool:
        return self is not Context.MAPPING

    @property
    def file_marker(self) -> str:
        return "map" if self is Context.MAPPING else self.value.lower()

    @classmethod
    def parse(cls, raw: str) -> "Context | None":
        for ctx in cls:
            if ctx.value == raw:
                return ctx
        return None

    @classmethod
    def from_file_marker(cls, marker: str) -> "Context | None":
        lowered = marker.lower()
        for ctx in cls:
            if ctx.file_marker == lowered:
                return ctx
        return None


FEATURE_CONTEXTS: tuple[Context, ...] = tuple(ctx for ctx in Context if ctx.is_feature)


@dataclass(frozen=True)
class Dialect:
    name: str
    marker: str
    extension: str
    list_keys: tuple[str, ...]

    @property
    def open_marker(self) -> str:
        return f":::{self.marker}"


ACL = Dialect(name="acl", marker="ACL_METADATA", extension=".acl", list_keys=("IMPORT", "REQUIRES"))
ACS = Dialect(name="acs", marker="ACS_METADATA", extension=".acs", list_keys=("IMPORT",))
DIALECTS: tuple[Dialect, ...] = (ACL, ACS)


def dialect_for(source: str) -> Dialect:
    for dialect in DIALECTS:
        if source.endswith(dialect.extension):
            return dialect
    return ACL


@dataclass(frozen=True)
class RawMetadata:
    fields: Mapping[str, str]
    lists: Mapping[str, tuple[str, ...]]
    body_offset: int = 0

    def scalar(self, key: str) -> str:
        return self.fields.get(key, "")

    def entries(self, key: str) -> tuple[str, ...]:
        return self.lists.get(key, ())


@dataclass(frozen=True)
class ImportDeclaration:
    source: str
    alias: str

    def __str__(self) -> str:
        return f"{self.source} AS {self.alias}"


@dataclass(frozen=True)
class RequireDeclaration:
    capability: str
    range: str
    alias: str

    def __str__(self) -> str:
        return f"{self.capability}@{self.range} AS {self.alias}"


@dataclass(frozen=True)
class MetadataBlock:
    domain: str
    context: Context | None
    version: str
    imports: tuple[ImportDeclaration, ...] = ()
    requires: tuple[RequireDeclaration, ...] = ()


@dataclass(frozen=True)
class CapabilityBinding:
    path: str
    range: str
    alias: str


@dataclass(frozen=True)
class FeatureTarget:
    path: str
    range: str

    def __str__(self) -> str:
        return f"FEATURE {self.path}@{self.range}"


@dataclass(frozen=True)
class AdapterTarget:
    identifier: str

    def __str__(self) -> str:
        return f"ADAPTER {self.identifier}"


Target = Union[FeatureTarget, AdapterTarget]


@dataclass(frozen=True)
class OperationEntry:
    operation: str
    source_alias: str
    target: str


@dataclass(frozen=True)
class MappingDeclaration:
    name: str
    capability: CapabilityBinding
    target: Target
    operations: Mapping[str, OperationEntry] = field(default_factory=dict)
    source: str = ""

    def defines(self, operation: str) -> bool:
        return operation in self.operations


@dataclass(frozen=True)
class CallSite:
    alias: str
    operation: str
    line: int = 0
