from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Literal, Mapping

from .config import AclConfig, load_config
from .env import getenv
from .repo_root import cwd, try_find_repo_root

OutputFormat = Literal["text", "json"]
NetworkMode = Literal["allow", "forbid"]


@dataclass(frozen=True)
class RunContext:
    run_id: str
    repo_root: Path
    config: AclConfig
    output_format: OutputFormat
    network_mode: NetworkMode
    verbose: bool
    quiet: bool
    log_json: bool

    @property
    def no_network(self) -> bool:
        return self.network_mode == "forbid"

    def path(self, rel: str) -> Path:
        candidate = Path(rel)
        return candidate if candidate.is_absolute() else self.repo_root / candidate

    @classmethod
    def from_args(
        cls,
        run_id: str | None,
        output_format: OutputFormat = "text",
        network_mode: NetworkMode = "allow",
        verbose: bool = False,
        quiet: bool = False,
        log_json: bool = False,
        overrides: Mapping[str, Any] | None = None,
    ) -> "RunContext":
        repo_root = try_find_repo_root() or cwd()
        default_run = f"aclctl-{datetime.now(timezone.utc).strftime('%Y%m%d-%H%M%S')}"
        return cls(
            run_id=run_id or getenv("RUN_ID") or default_run,
            repo_root=repo_root,
            config=load_config(repo_root, overrides),
            output_format=output_format,
            network_mode=network_mode,
            verbose=verbose,
            quiet=quiet,
            log_json=log_json,
        )
