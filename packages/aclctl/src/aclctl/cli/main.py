from __future__ import annotations

import argparse
import os
import sys

from .. import __version__
from ..commands.check import configure_check_parser, run_check_command
from ..commands.registry import configure_registry_parser, run_registry_command
from ..core.context import RunContext
from ..core.logging import log_event
from ..errors import ScriptError
from ..exit_codes import ERR_CONFIG, ERR_INTERNAL, ERR_USAGE
from .output import emit, render_error, resolve_output_format

_OVERRIDE_FLAGS = {
    "registry": "registry_file",
    "mappings": "mappings_dir",
    "features": "features_dir",
    "out_dir": "dist_dir",
}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="aclctl", description="validate ACL context files, mappings and the feature registry")
    p.add_argument("--version", action="version", version=f"aclctl {__version__}")
    p.add_argument("--json", action="store_true", help="emit JSON output")
    p.add_argument("--format", choices=["text", "json"], default=None, help="output format")
    p.add_argument("--cwd", help="run command from an explicit repository root")
    p.add_argument("--run-id", help="run identifier recorded in logs and reports")
    p.add_argument("--network", choices=["allow", "forbid"], default="allow", help="network access mode")
    p.add_argument("--log-json", action="store_true", help="emit log events as JSON lines on stderr")
    vg = p.add_mutually_exclusive_group()
    vg.add_argument("--verbose", action="store_true", help="enable debug log events")
    vg.add_argument("--quiet", action="store_true", help="only log warnings and errors")
    sub = p.add_subparsers(dest="cmd", required=True)

    version_p = sub.add_parser("version", help="print version and resolved configuration")
    version_p.add_argument("--json", action="store_true", help="emit JSON output")
    configure_check_parser(sub)
    configure_registry_parser(sub)
    return p


def _overrides(ns: argparse.Namespace) -> dict[str, str]:
    out: dict[str, str] = {}
    for flag, key in _OVERRIDE_FLAGS.items():
        value = getattr(ns, flag, None)
        if value:
            out[key] = value
    return out


def main(argv: list[str] | None = None) -> int:
    raw_argv = argv if argv is not None else sys.argv[1:]
    p = build_parser()
    ns = p.parse_args(raw_argv)
    cli_json = "--json" in raw_argv
    if ns.format and cli_json and ns.format != "json":
        print(render_error(as_json=False, message="conflicting output flags: use either --format json or --json", code=ERR_USAGE), file=sys.stderr)
        return ERR_USAGE
    fmt = resolve_output_format(cli_json=cli_json, cli_format=ns.format)
    as_json = fmt == "json"
    try:
        if ns.cwd:
            try:
                os.chdir(ns.cwd)
            except OSError as exc:
                raise ScriptError(f"cannot change directory to {ns.cwd}: {exc}", ERR_CONFIG, kind="config_error") from exc
        ctx = RunContext.from_args(
            ns.run_id,
            output_format=fmt,
            network_mode=ns.network,
            verbose=ns.verbose,
            quiet=ns.quiet,
            log_json=ns.log_json,
            overrides=_overrides(ns),
        )
        log_event(ctx, "info", "cli", "start", cmd=ns.cmd, fmt=ctx.output_format, network=ctx.network_mode)
        if ns.cmd == "version":
            emit(
                {
                    "schema_version": 1,
                    "tool": "aclctl",
                    "status": "ok",
                    "run_id": ctx.run_id,
                    "aclctl_version": __version__,
                    "repo_root": str(ctx.repo_root),
                    "config": {
                        "registry_file": ctx.config.registry_file,
                        "mappings_dir": ctx.config.mappings_dir,
                        "features_dir": ctx.config.features_dir,
                        "dist_dir": ctx.config.dist_dir,
                    },
                },
                as_json,
            )
            return 0
        if ns.cmd == "check":
            return run_check_command(ctx, ns)
        if ns.cmd == "registry":
            return run_registry_command(ctx, ns)
        return ERR_USAGE
    except ScriptError as exc:
        print(render_error(as_json=as_json, message=str(exc), code=exc.code, kind=exc.kind), file=sys.stderr)
        return exc.code
    except Exception as exc:  # pragma: no cover
        print(render_error(as_json=as_json, message=f"internal error: {exc}", code=ERR_INTERNAL), file=sys.stderr)
        return ERR_INTERNAL


if __name__ == "__main__":
    raise SystemExit(main())
