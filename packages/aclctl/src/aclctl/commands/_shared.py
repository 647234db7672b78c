from __future__ import annotations

import argparse
from functools import partial

from ..acl.problems import Problem
from ..acl.report import render_text, report_payload
from ..core.context import RunContext
from ..core.network import FetchText, HeadStatus, fetch_text, head_status
from ..core.serialize import dumps_json
from ..errors import ScriptError
from ..exit_codes import ERR_CONFIG, ERR_VALIDATION, OK
from ..registry.remote import STATUS_FAIL, STATUS_OK, STATUS_SKIP, RemoteOutcome


def add_output_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--json", action="store_true", help="emit JSON output")


def require_network(ctx: RunContext, command: str) -> None:
    if ctx.no_network:
        raise ScriptError(f"`{command}` needs network access; rerun with --network=allow", ERR_CONFIG, kind="network_forbidden")


def fetcher(ctx: RunContext) -> FetchText:
    return partial(fetch_text, timeout_seconds=ctx.config.fetch_timeout_seconds)


def prober(ctx: RunContext) -> HeadStatus:
    return partial(head_status, timeout_seconds=ctx.config.probe_timeout_seconds)


def outcome_lines(outcomes: tuple[RemoteOutcome, ...]) -> list[str]:
    labels = {STATUS_OK: "OK  ", STATUS_FAIL: "FAIL", STATUS_SKIP: "SKIP"}
    lines: list[str] = []
    for row in outcomes:
        detail = f" {row.detail}" if row.detail else ""
        lines.append(f"  {labels[row.status]} [{row.name}] {row.url}{detail}".rstrip())
        if len(row.problems) > 1:
            lines.extend(f"       - {p.message}" for p in row.problems)
    return lines


def outcome_stats(outcomes: tuple[RemoteOutcome, ...]) -> dict[str, int]:
    return {
        "checked": sum(1 for row in outcomes if row.status != STATUS_SKIP),
        "failed": sum(1 for row in outcomes if row.status == STATUS_FAIL),
        "skipped": sum(1 for row in outcomes if row.status == STATUS_SKIP),
    }


def finish(
    ctx: RunContext,
    command: str,
    problems: tuple[Problem, ...],
    *,
    stats: dict[str, int] | None = None,
    warnings: tuple[Problem, ...] = (),
    preamble: list[str] | None = None,
    title: str | None = None,
) -> int:
    if ctx.output_format == "json":
        payload = report_payload(problems, run_id=ctx.run_id, command=command, stats=stats, warnings=warnings)
        print(dumps_json(payload))
    else:
        for line in preamble or []:
            print(line)
        print(render_text(problems, title=title or command, warnings=warnings))
    return OK if not problems else ERR_VALIDATION
