"""Single-line declaration parsers.

Each parser returns a declaration record or a `Rejection`; none of them raise.
The shape grammar is loose: a lowercase alias or a malformed
capability path still parses and the caller reports the precise pattern
violation instead of a generic rejection.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

from .model import (
    AdapterTarget,
    CapabilityBinding,
    FeatureTarget,
    ImportDeclaration,
    OperationEntry,
    RequireDeclaration,
    Target,
)

CAPABILITY_PATTERN = re.compile(r"^[a-z][a-z0-9]*(?:\.[A-Za-z][A-Za-z0-9]*)+$")
ALIAS_PATTERN = re.compile(r"^[A-Z][A-Za-z0-9]*$")
CONTRACT_SUFFIX = ".Contract"

_IMPORT = re.compile(r"^(\S+)\s+AS\s+(\S+)$")
_REQUIRES = re.compile(r"^([^\s@]+)@(\S+)\s+AS\s+(\S+)$")
_CAPABILITY = re.compile(r"^CAPABILITY\s+([^\s@]+)@(\S+)\s+AS\s+(\S+)$")
_TO_FEATURE = re.compile(r"^TO FEATURE\s+([^\s@]+)@(\S+)$")
_TO_ADAPTER = re.compile(r"^TO ADAPTER\s+([A-Za-z0-9._/-]+)$")
_OPERATION = re.compile(r"^([A-Z][A-Za-z0-9]*)\.([A-Za-z][A-Za-z0-9_]*)\s*->\s*(.+)$")


@dataclass(frozen=True)
class Rejection:
    entry: str
    reason: str


def _rejected(entry: str, reason: str) -> Rejection:
    return Rejection(entry=entry, reason=reason)


def parse_import(entry: str) -> Union[ImportDeclaration, Rejection]:
    match = _IMPORT.match(entry.strip())
    if match is None:
        return _rejected(entry, "expected `<path>.Contract AS <Alias>`")
    return ImportDeclaration(source=match.group(1), alias=match.group(2))


def parse_requires(entry: str) -> Union[RequireDeclaration, Rejection]:
    match = _REQUIRES.match(entry.strip())
    if match is None:
        return _rejected(entry, "expected `<path>@<range> AS <Alias>`")
    return RequireDeclaration(capability=match.group(1), range=match.group(2), alias=match.group(3))


def parse_capability(line: str) -> Union[CapabilityBinding, Rejection]:
    match = _CAPABILITY.match(line.strip())
    if match is None:
        return _rejected(line, "expected `CAPABILITY <path>@<range> AS <Alias>`")
    return CapabilityBinding(path=match.group(1), range=match.group(2), alias=match.group(3))


def parse_target(line: str) -> Union[Target, Rejection]:
    text = line.strip()
    if text.startswith("TO FEATURE"):
        match = _TO_FEATURE.match(text)
        if match is None:
            return _rejected(line, "expected `TO FEATURE <path>@<range>`")
        return FeatureTarget(path=match.group(1), range=match.group(2))
    if text.startswith("TO ADAPTER"):
        match = _TO_ADAPTER.match(text)
        if match is None:
            return _rejected(line, "expected `TO ADAPTER <identifier>`")
        return AdapterTarget(identifier=match.group(1))
    return _rejected(line, "expected `TO FEATURE` or `TO ADAPTER`")


def parse_operation(line: str) -> Union[OperationEntry, Rejection]:
    match = _OPERATION.match(line.strip())
    if match is None:
        return _rejected(line, "expected `<Alias>.<operation> -> <target>`")
    return OperationEntry(operation=match.group(2), source_alias=match.group(1), target=match.group(3).strip())


def is_capability_path(path: str) -> bool:
    return CAPABILITY_PATTERN.match(path) is not None


def is_alias(alias: str) -> bool:
    return ALIAS_PATTERN.match(alias) is not None
