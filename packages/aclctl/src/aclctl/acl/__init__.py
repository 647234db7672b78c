"""ACL context-file parsing, mapping registry and contract cross-validation."""

from .crossval import ValidationReport, cross_validate, extract_call_sites, validate_paths, validate_tree
from .document import DocumentResult, validate_document
from .mappings import MappingRegistry, build_registry, load_mapping_registry, parse_mapping_blocks
from .metadata import parse_metadata_block
from .model import ACL, ACS, Context, Dialect, MappingDeclaration, MetadataBlock
from .problems import Parsed, Problem, ProblemKind
from .ranges import is_valid_range, ranges_compatible

__all__ = [
    "ACL",
    "ACS",
    "Context",
    "Dialect",
    "DocumentResult",
    "MappingDeclaration",
    "MappingRegistry",
    "MetadataBlock",
    "Parsed",
    "Problem",
    "ProblemKind",
    "ValidationReport",
    "build_registry",
    "cross_validate",
    "extract_call_sites",
    "is_valid_range",
    "load_mapping_registry",
    "parse_mapping_blocks",
    "parse_metadata_block",
    "ranges_compatible",
    "validate_document",
    "validate_paths",
    "validate_tree",
]
