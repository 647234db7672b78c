"""Human and machine renderings of a validation run."""

from __future__ import annotations

from collections import OrderedDict
from typing import Any, Iterable

from .problems import Problem

PASS_MESSAGE = "all checks passed"


def group_problems(problems: Iterable[Problem]) -> "OrderedDict[str, OrderedDict[str, list[Problem]]]":
    grouped: OrderedDict[str, OrderedDict[str, list[Problem]]] = OrderedDict()
    for problem in problems:
        by_subject = grouped.setdefault(problem.source or "<run>", OrderedDict())
        by_subject.setdefault(problem.subject, []).append(problem)
    return grouped


def render_text(problems: tuple[Problem, ...], *, title: str = "validation", warnings: tuple[Problem, ...] = ()) -> str:
    lines: list[str] = []
    if warnings:
        lines.append("Warnings:")
        lines.extend(f"  ! {w}" for w in warnings)
    if not problems:
        lines.append(f"{title}: {PASS_MESSAGE}")
        return "\n".join(lines)
    lines.append(f"{title}: FAIL")
    for source, by_subject in group_problems(problems).items():
        lines.append(f"  {source}")
        for subject, rows in by_subject.items():
            indent = "    "
            if subject:
                lines.append(f"    [{subject}]")
                indent = "      "
            lines.extend(f"{indent}- {row.message}" for row in rows)
    lines.append(f"{len(problems)} problem(s) found")
    return "\n".join(lines)


def report_payload(
    problems: tuple[Problem, ...],
    *,
    run_id: str,
    command: str,
    stats: dict[str, int] | None = None,
    warnings: tuple[Problem, ...] = (),
) -> dict[str, Any]:
    return {
        "schema_name": "aclctl.report.v1",
        "schema_version": 1,
        "tool": "aclctl",
        "run_id": run_id,
        "command": command,
        "status": "ok" if not problems else "fail",
        "problem_count": len(problems),
        "stats": dict(stats or {}),
        "problems": [p.as_row() for p in problems],
        "warnings": [w.as_row() for w in warnings],
    }
