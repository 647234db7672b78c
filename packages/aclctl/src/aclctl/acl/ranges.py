"""Restricted version-range grammar and the compatibility rule used for mapping selection.

Grammar: alternatives separated by `||`; each alternative is `*` or an optional
operator (`^`, `~`, `>=`, `<=`, `>`, `<`) followed by `major.minor[.patch]`.

Compatibility only looks at the first alternative of each side (the range
anchor). Later alternatives are validated but never compared; the rule
is a conservative subset, not semver intersection. A bare `*` matches
anything; a `*` anchor inside a compound expression carries no version and
matches nothing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

WILDCARD = "*"
_ALTERNATIVE = re.compile(r"^(\^|~|>=|<=|>|<)?(\d+)\.(\d+)(?:\.(\d+))?$")


@dataclass(frozen=True)
class RangeAnchor:
    op: str
    major: int = 0
    minor: int = 0
    patch: int = 0

    @property
    def is_wildcard(self) -> bool:
        return self.op == WILDCARD


def alternatives(expression: str) -> list[str]:
    return [token.strip() for token in expression.split("||") if token.strip()]


def is_valid_alternative(token: str) -> bool:
    return token == WILDCARD or _ALTERNATIVE.match(token) is not None


def is_valid_range(expression: str) -> bool:
    tokens = alternatives(expression)
    return bool(tokens) and all(is_valid_alternative(token) for token in tokens)


def parse_anchor(expression: str) -> RangeAnchor | None:
    tokens = alternatives(expression)
    if not tokens:
        return None
    if tokens[0] == WILDCARD:
        return RangeAnchor(op=WILDCARD)
    match = _ALTERNATIVE.match(tokens[0])
    if match is None:
        return None
    op, major, minor, patch = match.groups()
    return RangeAnchor(op=op or "", major=int(major), minor=int(minor), patch=int(patch or 0))


def ranges_compatible(required: str, provided: str) -> bool:
    if required.strip() == WILDCARD or provided.strip() == WILDCARD:
        return True
    req = parse_anchor(required)
    prov = parse_anchor(provided)
    if req is None or prov is None:
        return False
    if req.is_wildcard or prov.is_wildcard:
        return False
    if req.major != prov.major:
        return False
    # tilde on either side pins the minor track; caret never does
    if "~" in (req.op, prov.op) and req.minor != prov.minor:
        return False
    return True
