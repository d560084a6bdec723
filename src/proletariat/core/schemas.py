"""JSON Schema validation for persisted documents.

Schemas are stored as YAML files (JSON Schema expressed in YAML) under
``proletariat/data/schemas`` and loaded in one consistent way.
"""
from __future__ import annotations

from typing import Any, Dict, List

import jsonschema
from jsonschema import Draft202012Validator

from proletariat.core.exceptions import ConfigCorruptError
from proletariat.data import read_yaml


def load_schema(schema_name: str) -> Dict[str, Any]:
    """Load a bundled schema by name (``.schema.yaml`` suffix optional)."""
    if not schema_name.endswith((".yaml", ".yml")):
        schema_name = f"{schema_name}.schema.yaml"
    schema = read_yaml("schemas", schema_name)
    if not isinstance(schema, dict):
        raise ValueError(f"Schema must be a YAML mapping, got {type(schema).__name__}")
    return schema


def schema_errors(payload: Any, schema_name: str) -> List[str]:
    """Return readable validation errors (empty when valid)."""
    validator = Draft202012Validator(load_schema(schema_name))
    errors: List[str] = []
    for error in sorted(validator.iter_errors(payload), key=lambda e: str(e.path)):
        if error.path:
            path_str = ".".join(str(p) for p in error.path)
            errors.append(f"{path_str}: {error.message}")
        else:
            errors.append(error.message)
    return errors


def validate_payload(payload: Any, schema_name: str, *, source: str = "") -> None:
    """Validate ``payload`` against a bundled schema.

    Raises:
        ConfigCorruptError: If validation fails.
    """
    try:
        jsonschema.validate(instance=payload, schema=load_schema(schema_name))
    except jsonschema.ValidationError:
        errors = schema_errors(payload, schema_name)
        where = f" ({source})" if source else ""
        raise ConfigCorruptError(
            f"Validation failed against schema '{schema_name}'{where}: " + "; ".join(errors),
            context={"schema": schema_name, "source": source, "errors": errors},
        ) from None


__all__ = ["load_schema", "schema_errors", "validate_payload"]
