from __future__ import annotations

import argparse

from ..core.clock import utc_now_iso
from ..core.context import RunContext
from ..core.logging import log_event
from ..core.serialize import dumps_json
from ..errors import ScriptError
from ..exit_codes import ERR_USAGE
from ..registry.export import export_registry
from ..registry.loader import load_registry
from ._shared import add_output_flag


def configure_registry_parser(sub: argparse._SubParsersAction) -> None:
    p = sub.add_parser("registry", help="registry.yaml utilities")
    reg_sub = p.add_subparsers(dest="registry_cmd", required=True)
    export = reg_sub.add_parser("export", help="write registry.json and a copy of registry.yaml to the dist directory")
    export.add_argument("--registry", help="registry file (default from config: registry.yaml)")
    export.add_argument("--out-dir", help="output directory (default from config: dist)")
    add_output_flag(export)


def run_registry_command(ctx: RunContext, ns: argparse.Namespace) -> int:
    if ns.registry_cmd != "export":
        raise ScriptError(f"unknown registry command `{ns.registry_cmd}`", ERR_USAGE, kind="usage")
    registry = load_registry(ctx.path(ctx.config.registry_file))
    target = export_registry(registry, ctx.path(ctx.config.dist_dir), utc_now_iso())
    log_event(ctx, "info", "registry", "exported", path=str(target), count=len(registry.features))
    if ctx.output_format == "json":
        print(dumps_json({"schema_version": 1, "tool": "aclctl", "status": "ok", "path": str(target), "count": len(registry.features)}))
    else:
        print(f"Generated {target.name} with {len(registry.features)} feature(s)")
    return 0
