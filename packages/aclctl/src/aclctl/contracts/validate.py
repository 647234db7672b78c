from __future__ import annotations

from typing import Any

import jsonschema

from ..errors import ScriptError
from ..exit_codes import ERR_INTERNAL
from .catalog import load_schema


def pointer(error: jsonschema.ValidationError) -> str:
    return "/".join(str(p) for p in error.absolute_path) or "<root>"


def iter_errors(schema_name: str, payload: Any) -> list[jsonschema.ValidationError]:
    """Every violation of `schema_name`, ordered by location."""
    schema = load_schema(schema_name)
    validator = jsonschema.validators.validator_for(schema)(schema)
    return sorted(validator.iter_errors(payload), key=lambda e: (pointer(e), e.message))


def schema_errors(schema_name: str, payload: Any) -> list[str]:
    return [f"{pointer(e)}: {e.message}" for e in iter_errors(schema_name, payload)]


def validate(schema_name: str, payload: Any) -> None:
    schema = load_schema(schema_name)
    try:
        jsonschema.validate(payload, schema)
    except jsonschema.ValidationError as exc:
        raise ScriptError(
            f"schema validation failed for {schema_name} at {pointer(exc)}: {exc.message}",
            ERR_INTERNAL,
            kind="schema_violation",
        ) from exc
