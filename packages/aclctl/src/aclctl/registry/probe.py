"""URL reachability probing for registry records."""

from __future__ import annotations

from typing import Any, Iterable

from ..acl.problems import Problem, ProblemKind
from ..core.network import HeadStatus
from .loader import feature_label
from .remote import STATUS_FAIL, STATUS_OK, STATUS_SKIP, RemoteOutcome


def probe_feature(feature: dict[str, Any], head: HeadStatus) -> RemoteOutcome:
    name = feature_label(feature)
    url = str(feature.get("url") or "")
    if not url:
        return RemoteOutcome(name, url, STATUS_SKIP, "no URL")
    result = head(url)
    status = result.error if result.error is not None else str(result.status)
    if result.error is None and result.status is not None and 200 <= result.status < 400:
        return RemoteOutcome(name, url, STATUS_OK, status)
    return RemoteOutcome(name, url, STATUS_FAIL, status, (Problem(ProblemKind.FETCH, f"unreachable ({status})", url, name),))


def probe_urls(features: Iterable[dict[str, Any]], head: HeadStatus) -> tuple[RemoteOutcome, ...]:
    return tuple(probe_feature(feature, head) for feature in features)
