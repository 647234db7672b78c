"""Lexical extraction of the fenced metadata block.

The parser only recovers structure: `KEY: value` pairs and `- entry` lines for
the dialect's list keys. It never judges values; that is the document
validator's job.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

from .model import ACL, Dialect, RawMetadata

CLOSE_MARKER = ":::"
_KEY_LINE = re.compile(r"^([A-Z]+):\s*(.*)$")


@dataclass(frozen=True)
class LexState:
    current_key: str | None = None


@dataclass(frozen=True)
class KeyToken:
    key: str
    value: str


@dataclass(frozen=True)
class EntryToken:
    key: str
    entry: str


Token = Union[KeyToken, EntryToken]


def lex_line(state: LexState, line: str, list_keys: tuple[str, ...]) -> tuple[LexState, Token | None]:
    text = line.strip()
    if not text:
        return state, None
    match = _KEY_LINE.match(text)
    if match:
        key = match.group(1)
        return LexState(current_key=key), KeyToken(key, match.group(2).strip())
    if state.current_key in list_keys and text.startswith("- "):
        return state, EntryToken(state.current_key, text[2:].strip())
    return state, None


def locate_block(text: str, dialect: Dialect = ACL) -> tuple[int, int, int] | None:
    """Return (body_start, body_end, after_close) offsets of the fenced region."""
    start = text.find(dialect.open_marker)
    if start < 0:
        return None
    body_start = start + len(dialect.open_marker)
    body_end = text.find(CLOSE_MARKER, body_start)
    if body_end < 0:
        return None
    return body_start, body_end, body_end + len(CLOSE_MARKER)


def parse_metadata_block(text: str, dialect: Dialect = ACL) -> RawMetadata | None:
    located = locate_block(text, dialect)
    if located is None:
        return None
    body_start, body_end, after_close = located
    fields: dict[str, str] = {}
    lists: dict[str, list[str]] = {}
    state = LexState()
    for line in text[body_start:body_end].splitlines():
        state, token = lex_line(state, line, dialect.list_keys)
        if isinstance(token, KeyToken):
            fields[token.key] = token.value
        elif isinstance(token, EntryToken):
            lists.setdefault(token.key, []).append(token.entry)
    return RawMetadata(
        fields=fields,
        lists={key: tuple(values) for key, values in lists.items()},
        body_offset=after_close,
    )
