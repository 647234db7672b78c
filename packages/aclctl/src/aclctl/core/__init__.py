"""aclctl core package."""
from .clock import utc_now_iso
from .context import RunContext
from .logging import log_event
from .repo_root import find_repo_root, try_find_repo_root
from .serialize import dumps_json

__all__ = [
    "RunContext",
    "utc_now_iso",
    "find_repo_root",
    "try_find_repo_root",
    "dumps_json",
    "log_event",
]
