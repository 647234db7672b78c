"""registry.yaml collaborators: record checks, remote validation, probing, export."""

from .export import export_registry
from .loader import Registry, load_registry, parse_registry
from .probe import probe_urls
from .records import RecordReport, validate_records
from .remote import RemoteOutcome, validate_remote

__all__ = [
    "RecordReport",
    "Registry",
    "RemoteOutcome",
    "export_registry",
    "load_registry",
    "parse_registry",
    "probe_urls",
    "validate_records",
    "validate_remote",
]
