"""Field-level checks for registry feature records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable
from urllib.parse import urlparse

import jsonschema

from ..acl.model import DIALECTS
from ..acl.problems import Problem, ProblemKind
from ..contracts import REGISTRY_RECORD_SCHEMA
from ..contracts.catalog import load_schema
from ..contracts.validate import iter_errors
from .loader import Registry, feature_label

GITHUB_MIRRORS = {"specdir.com": "raw.githubusercontent.com"}

_FIELD_MESSAGES: dict[tuple[str, str], Callable[[Any], str]] = {
    ("name", "pattern"): lambda v: f'name must match company.subsystem (lowercase alphanumeric, dot separator), got "{v}"',
    ("description", "maxLength"): lambda v: f"description exceeds 120 chars ({len(v)})",
    ("maturity", "enum"): lambda v: "maturity must be one of: draft, beta, stable, deprecated",
    ("tags", "minItems"): lambda v: "tags must be a non-empty array",
    ("tags", "type"): lambda v: "tags must be a non-empty array",
    ("submitted", "pattern"): lambda v: "submitted must be YYYY-MM-DD",
}


@dataclass(frozen=True)
class RecordReport:
    problems: tuple[Problem, ...] = ()
    warnings: tuple[Problem, ...] = ()
    count: int = 0


def _message(error: jsonschema.ValidationError) -> str:
    field = str(error.absolute_path[0]) if error.absolute_path else ""
    formatter = _FIELD_MESSAGES.get((field, str(error.validator)))
    if formatter is not None:
        return formatter(error.instance)
    return f"{field}: {error.message}" if field else error.message


def _host(url: str) -> str | None:
    parsed = urlparse(url)
    if parsed.scheme not in {"http", "https"} or not parsed.hostname:
        return None
    return parsed.hostname


def _strip_www(host: str) -> str:
    return host[4:] if host.startswith("www.") else host


def domain_matches(declared: str, url_host: str) -> bool:
    declared = _strip_www(declared)
    host = _strip_www(url_host)
    if GITHUB_MIRRORS.get(declared) == host:
        return True
    return host.endswith(declared) or declared.endswith(host)


def check_record(feature: dict[str, Any], required: list[str]) -> list[str]:
    errors = [f'missing required field: "{key}"' for key in required if not feature.get(key)]
    missing = {key for key in required if not feature.get(key)}
    for error in iter_errors(REGISTRY_RECORD_SCHEMA, feature):
        if error.validator == "required":
            continue
        if error.absolute_path and str(error.absolute_path[0]) in missing:
            continue
        errors.append(_message(error))
    url = feature.get("url")
    if isinstance(url, str) and url:
        if not url.endswith(tuple(d.extension for d in DIALECTS)):
            errors.append(f"url must point to a {' or '.join(d.extension for d in DIALECTS)} file")
        host = _host(url)
        domain = feature.get("domain")
        if host is None:
            errors.append(f'invalid URL: "{url}"')
        elif isinstance(domain, str) and domain and not domain_matches(domain, host):
            errors.append(f'domain "{domain}" does not match URL hostname "{_strip_www(host)}"')
    return errors


def validate_records(registry: Registry) -> RecordReport:
    source = registry.path.name
    schema = load_schema(REGISTRY_RECORD_SCHEMA)
    required = [str(key) for key in schema.get("required", [])]
    problems: list[Problem] = []
    warnings: list[Problem] = []
    names: set[str] = set()
    urls: set[str] = set()
    for feature in registry.features:
        label = feature_label(feature)
        for message in check_record(feature, required):
            problems.append(Problem(ProblemKind.RECORD, message, source, label))
        name = feature.get("name")
        if isinstance(name, str) and name:
            if name in names:
                problems.append(Problem(ProblemKind.RECORD, "duplicate name", source, label))
            names.add(name)
        url = feature.get("url")
        if isinstance(url, str) and url:
            if url in urls:
                problems.append(Problem(ProblemKind.RECORD, "duplicate url", source, label))
            urls.add(url)
        if feature.get("maturity") == "deprecated" and not feature.get("replacement"):
            warnings.append(Problem(ProblemKind.RECORD, "deprecated feature should include a replacement URL", source, label))
    return RecordReport(problems=tuple(problems), warnings=tuple(warnings), count=len(registry.features))
