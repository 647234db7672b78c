"""Output and record schemas."""

from .catalog import CatalogEntry, load_catalog, schema_path_for
from .validate import iter_errors, schema_errors, validate

REPORT_SCHEMA = "aclctl.report.v1"
REGISTRY_RECORD_SCHEMA = "aclctl.registry-record.v1"

__all__ = [
    "CatalogEntry",
    "REGISTRY_RECORD_SCHEMA",
    "REPORT_SCHEMA",
    "iter_errors",
    "load_catalog",
    "schema_errors",
    "schema_path_for",
    "validate",
]
