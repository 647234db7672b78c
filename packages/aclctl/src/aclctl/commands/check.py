from __future__ import annotations

import argparse
from pathlib import Path

from ..acl.crossval import ValidationReport, validate_paths, validate_tree
from ..acl.mappings import MappingRegistry, load_mapping_registry
from ..acl.problems import Problem
from ..core.context import RunContext
from ..core.logging import log_event
from ..errors import ScriptError
from ..exit_codes import ERR_IO, ERR_USAGE
from ..registry.loader import Registry, load_registry
from ..registry.probe import probe_urls
from ..registry.records import validate_records
from ..registry.remote import validate_remote
from ._shared import add_output_flag, fetcher, finish, outcome_lines, outcome_stats, prober, require_network


def configure_check_parser(sub: argparse._SubParsersAction) -> None:
    p = sub.add_parser("check", help="run validation checks")
    check_sub = p.add_subparsers(dest="check_cmd", required=True)

    local = check_sub.add_parser("local", help="validate local mappings and feature files, then cross-validate contracts")
    local.add_argument("--mappings", help="mappings directory (default from config: acl/mappings)")
    local.add_argument("--features", help="features directory (default from config: features)")
    add_output_flag(local)

    files = check_sub.add_parser("file", help="validate individual ACL/ACS files")
    files.add_argument("paths", nargs="+")
    files.add_argument("--mappings", help="mappings directory used to cross-validate contracts")
    add_output_flag(files)

    for name, help_text in (
        ("registry", "validate registry.yaml feature records"),
        ("remote", "fetch registry feature URLs and validate each document"),
        ("urls", "check that every registry URL is reachable"),
    ):
        cmd = check_sub.add_parser(name, help=help_text)
        cmd.add_argument("--registry", help="registry file (default from config: registry.yaml)")
        add_output_flag(cmd)

    everything = check_sub.add_parser("all", help="remote feature validation followed by the local pass")
    everything.add_argument("--registry", help="registry file (default from config: registry.yaml)")
    everything.add_argument("--mappings", help="mappings directory")
    everything.add_argument("--features", help="features directory")
    everything.add_argument("--local-only", action="store_true", help="skip registry URL validation")
    add_output_flag(everything)


def _registry_for_files(ctx: RunContext) -> MappingRegistry:
    mappings_dir = ctx.path(ctx.config.mappings_dir)
    loaded = load_mapping_registry(mappings_dir, display_root=ctx.repo_root)
    for problem in loaded.problems:
        log_event(ctx, "warn", "check", "mapping-rejected", source=problem.source, subject=problem.subject, message=problem.message)
    log_event(ctx, "debug", "check", "registry-loaded", mappings=len(loaded.value), problems=len(loaded.problems))
    return loaded.value


def _run_local(ctx: RunContext) -> ValidationReport:
    mappings_dir = ctx.path(ctx.config.mappings_dir)
    features_dir = ctx.path(ctx.config.features_dir)
    if not mappings_dir.is_dir():
        log_event(ctx, "warn", "check", "mappings-dir-missing", path=str(mappings_dir))
    if not features_dir.is_dir():
        log_event(ctx, "warn", "check", "features-dir-missing", path=str(features_dir))
    report = validate_tree(ctx.repo_root, mappings_dir, features_dir)
    log_event(
        ctx,
        "info",
        "check",
        "local-finished",
        files=report.files_checked,
        mappings=report.mappings_loaded,
        contracts=report.contracts_checked,
        problems=len(report.problems),
    )
    return report


def _local_stats(report: ValidationReport) -> dict[str, int]:
    return {
        "files_checked": report.files_checked,
        "mappings_loaded": report.mappings_loaded,
        "contracts_checked": report.contracts_checked,
    }


def _registry(ctx: RunContext) -> Registry:
    return load_registry(ctx.path(ctx.config.registry_file))


def run_check_command(ctx: RunContext, ns: argparse.Namespace) -> int:
    cmd = ns.check_cmd
    if cmd == "local":
        report = _run_local(ctx)
        return finish(ctx, "check local", report.problems, stats=_local_stats(report), title="local ACL validation")

    if cmd == "file":
        paths = [Path(p) if Path(p).is_absolute() else Path.cwd() / p for p in ns.paths]
        missing = [str(p) for p in paths if not p.is_file()]
        if missing:
            raise ScriptError(f"file not found: {', '.join(missing)}", ERR_IO, kind="unreadable_input")
        report = validate_paths(ctx.repo_root, paths, _registry_for_files(ctx))
        return finish(ctx, "check file", report.problems, stats=_local_stats(report), title="file validation")

    if cmd == "registry":
        registry = _registry(ctx)
        records = validate_records(registry)
        log_event(ctx, "info", "check", "records-finished", features=records.count, problems=len(records.problems))
        return finish(
            ctx,
            "check registry",
            records.problems,
            stats={"features": records.count},
            warnings=records.warnings,
            title=f"{registry.path.name} ({records.count} feature(s))",
        )

    if cmd == "remote":
        require_network(ctx, "check remote")
        registry = _registry(ctx)
        outcomes = validate_remote(registry.features, fetcher(ctx))
        problems = tuple(p for row in outcomes for p in row.problems)
        return finish(ctx, "check remote", problems, stats=outcome_stats(outcomes), preamble=outcome_lines(outcomes), title="remote feature validation")

    if cmd == "urls":
        require_network(ctx, "check urls")
        registry = _registry(ctx)
        outcomes = probe_urls(registry.features, prober(ctx))
        problems = tuple(p for row in outcomes for p in row.problems)
        return finish(ctx, "check urls", problems, stats=outcome_stats(outcomes), preamble=outcome_lines(outcomes), title="url reachability")

    if cmd == "all":
        preamble: list[str] = []
        problems: tuple[Problem, ...] = ()
        stats: dict[str, int] = {}
        if ns.local_only:
            preamble.append("Skipping registry URL validation (--local-only).")
        else:
            require_network(ctx, "check all")
            registry = _registry(ctx)
            outcomes = validate_remote(registry.features, fetcher(ctx))
            preamble.extend(outcome_lines(outcomes))
            problems = tuple(p for row in outcomes for p in row.problems)
            stats.update({f"remote_{key}": value for key, value in outcome_stats(outcomes).items()})
        report = _run_local(ctx)
        stats.update(_local_stats(report))
        return finish(ctx, "check all", problems + report.problems, stats=stats, preamble=preamble, title="ACL checks")

    raise ScriptError(f"unknown check command `{cmd}`", ERR_USAGE, kind="usage")
