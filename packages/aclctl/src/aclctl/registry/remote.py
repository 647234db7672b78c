"""Validation of feature documents published at registry URLs.

The fetcher is injected so the document checks never depend on network timing;
`aclctl.core.network.fetch_text` is the production implementation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from ..acl.document import validate_document
from ..acl.model import dialect_for
from ..acl.problems import Problem, ProblemKind
from ..core.network import FetchText
from .loader import feature_label

STATUS_OK = "ok"
STATUS_FAIL = "fail"
STATUS_SKIP = "skip"


@dataclass(frozen=True)
class RemoteOutcome:
    name: str
    url: str
    status: str
    detail: str = ""
    problems: tuple[Problem, ...] = ()


def should_skip(feature: dict[str, Any]) -> bool:
    return not feature.get("url") or feature.get("maturity") == "deprecated"


def check_remote_feature(feature: dict[str, Any], fetch: FetchText) -> RemoteOutcome:
    name = feature_label(feature)
    url = str(feature.get("url") or "")
    if should_skip(feature):
        return RemoteOutcome(name, url, STATUS_SKIP)
    response = fetch(url)
    if response.error is not None:
        problem = Problem(ProblemKind.FETCH, response.error, url, name)
        return RemoteOutcome(name, url, STATUS_FAIL, response.error, (problem,))
    if response.status != 200:
        detail = f"HTTP {response.status}"
        return RemoteOutcome(name, url, STATUS_FAIL, detail, (Problem(ProblemKind.FETCH, detail, url, name),))
    doc = validate_document(response.body, url, dialect=dialect_for(url))
    if doc.problems:
        problems = tuple(Problem(p.kind, p.message, p.source, name) for p in doc.problems)
        return RemoteOutcome(name, url, STATUS_FAIL, f"{len(problems)} problem(s)", problems)
    meta = doc.metadata
    detail = f"feature: {meta.domain} context: {meta.context.value} ({dialect_for(url).name} {meta.version})" if meta and meta.context else ""
    return RemoteOutcome(name, url, STATUS_OK, detail)


def validate_remote(features: Iterable[dict[str, Any]], fetch: FetchText) -> tuple[RemoteOutcome, ...]:
    return tuple(check_remote_feature(feature, fetch) for feature in features)
