"""
Structural Validation (Gate 1) for ELI Gate.

A small recursive validator for the subset of JSON Schema used by ELI
payload contracts. It confirms types, required fields, enums and ranges
before Gate 2 looks at the meaning of the claims.

Supported keywords:
    type, required, properties, additionalProperties (false only),
    pattern, const, enum, minItems, items, minimum, maximum

Errors are returned as a flat list of readable strings. An empty list
means the payload passed.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any


class SchemaLoadError(Exception):
    """Raised when a schema or payload file cannot be read."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


# =============================================================================
# BUILT-IN CONTRACTS
# =============================================================================

_STRING_LIST = {"type": "array", "items": {"type": "string"}}

CLAIM_SCHEMA: dict = {
    "type": "object",
    "required": ["id"],
    "properties": {
        "id": {"type": "string", "pattern": r"\S"},
        "type": {"type": "string", "enum": ["FACT", "INFERENCE"]},
        "falsifiable": {"type": "boolean"},
        "depends_on": _STRING_LIST,
        "assumptions": _STRING_LIST,
        # Unknown source types are a Gate 2 warning, not a shape error
        "source_type": {"type": "string"},
        "confidence_score": {"type": "number", "minimum": 0, "maximum": 1},
        "evidence": {"type": "array"},
        "support": {"type": "array"},
        "statement": {"type": "string"},
    },
}

CLAIMS_SCHEMA: dict = {
    "type": "array",
    "items": CLAIM_SCHEMA,
}

ELI_PAYLOAD_SCHEMA: dict = {
    "type": "object",
    "required": ["claims"],
    "properties": {
        "schema_version": {"type": "string"},
        "claims": CLAIMS_SCHEMA,
    },
}


# =============================================================================
# VALIDATOR
# =============================================================================

def json_type(value: Any) -> str:
    """Name the JSON type of a decoded value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


# Type names enforced by the type keyword; any other value is not checked
CHECKED_TYPES = ("object", "string", "number", "array", "boolean")


def strict_equal(left: Any, right: Any) -> bool:
    """Compare decoded values without cross-type matches such as True == 1."""
    return json_type(left) == json_type(right) and left == right


def _render(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value)


def validate_schema(data: Any, schema: dict) -> list[str]:
    """
    Validate decoded JSON against a schema.

    A type mismatch stops validation of that node; all other keywords are
    checked independently and every failure is reported. Type names
    outside CHECKED_TYPES (such as "integer" or a list of types) are
    accepted without a type check.

    Returns:
        List of error messages, empty if the data conforms
    """
    errors: list[str] = []
    _validate(data, schema, "", errors)
    return errors


def _validate(data: Any, schema: dict, path: str, errors: list[str]) -> None:
    expected = schema.get("type")
    actual = json_type(data)

    if expected in CHECKED_TYPES and expected != actual:
        errors.append(f"Field {path} must be {_article(expected)} {expected}, got {actual}")
        return

    if isinstance(schema.get("required"), list) and isinstance(data, dict):
        for name in schema["required"]:
            if name not in data:
                errors.append(f"Missing required field: {path}.{name}")

    if expected == "object" and "properties" in schema:
        properties = schema["properties"]
        for key, value in data.items():
            if key in properties:
                _validate(value, properties[key], f"{path}.{key}", errors)
            elif schema.get("additionalProperties") is False:
                errors.append(f"Unexpected field: {path}.{key}")

    if expected == "string" and "pattern" in schema:
        if not re.search(schema["pattern"], data):
            errors.append(f"Field {path} does not match pattern {schema['pattern']}: {data}")

    if "const" in schema and not strict_equal(data, schema["const"]):
        errors.append(f"Field {path} must be {_render(schema['const'])}, got {_render(data)}")

    if "enum" in schema and not any(strict_equal(data, option) for option in schema["enum"]):
        allowed = ", ".join(_render(option) for option in schema["enum"])
        errors.append(f"Field {path} must be one of {allowed}, got {_render(data)}")

    if expected == "array":
        min_items = schema.get("minItems")
        if min_items and len(data) < min_items:
            errors.append(f"Array {path} must have at least {min_items} items")
        if "items" in schema:
            for index, item in enumerate(data):
                _validate(item, schema["items"], f"{path}[{index}]", errors)

    if expected == "number":
        if "minimum" in schema and data < schema["minimum"]:
            errors.append(f"Field {path} must be >= {schema['minimum']}, got {data}")
        if "maximum" in schema and data > schema["maximum"]:
            errors.append(f"Field {path} must be <= {schema['maximum']}, got {data}")


def _article(type_name: str) -> str:
    return "an" if type_name[0] in "aeiou" else "a"


# =============================================================================
# FILE LOADING
# =============================================================================

def load_json(path: Path) -> Any:
    """
    Read and decode a JSON file.

    Raises:
        SchemaLoadError: If the file is missing or not valid JSON
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise SchemaLoadError(Path(path), f"cannot read file ({e.strerror or e})") from e

    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise SchemaLoadError(Path(path), f"invalid JSON at line {e.lineno}: {e.msg}") from e


def load_schema(path: Path) -> dict:
    """Load a schema file; the root must be a JSON object."""
    schema = load_json(path)
    if not isinstance(schema, dict):
        raise SchemaLoadError(Path(path), "schema root must be an object")
    return schema
