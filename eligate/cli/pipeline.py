"""
Gate Pipeline for ELI Gate.

Runs both validation gates over one decoded payload.

Pipeline stages:
    1. Payload extraction — a claim list, or an ELI document with "claims"
    2. Gate 1 — structural schema validation
    3. Claim contract — the built-in claim shape, when a custom schema
       was used for Gate 1
    4. Gate 2 — semantic claim validation (skipped if Gate 1 fails)

The pipeline holds no state between runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from ..domain import MODE_FAIL, ValidationResult
from ..schema import CLAIMS_SCHEMA, ELI_PAYLOAD_SCHEMA, validate_schema
from ..validation import validate_claims


class PayloadError(Exception):
    """Raised when a payload holds no claim list at all."""
    pass


# =============================================================================
# GATE REPORT
# =============================================================================

@dataclass
class GateReport:
    """
    Combined result of Gate 1 and Gate 2.

    ``semantic`` is None when Gate 1 rejected the payload, since Gate 2
    only runs on shape-valid input.
    """
    schema_errors: list[str] = field(default_factory=list)
    semantic: Optional[ValidationResult] = None
    claim_count: int = 0
    mode: str = MODE_FAIL

    @property
    def schema_ok(self) -> bool:
        return not self.schema_errors

    @property
    def ok(self) -> bool:
        return self.schema_ok and self.semantic is not None and self.semantic.ok

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "mode": self.mode,
            "claim_count": self.claim_count,
            "gate1": {"ok": self.schema_ok, "errors": list(self.schema_errors)},
            "gate2": self.semantic.to_dict() if self.semantic is not None else None,
        }


# =============================================================================
# PIPELINE EXECUTION
# =============================================================================

def default_schema_for(payload: Any) -> dict:
    """Pick the built-in contract matching the payload's outer shape."""
    if isinstance(payload, dict):
        return ELI_PAYLOAD_SCHEMA
    return CLAIMS_SCHEMA


def extract_claims(payload: Any) -> list:
    """
    Return the claim list of a payload.

    Raises:
        PayloadError: If the payload is neither a list nor an object
            with a "claims" list
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("claims"), list):
        return payload["claims"]
    raise PayloadError("payload must be a claim list or an object with a 'claims' list")


def run_gates(
    payload: Any,
    schema: Optional[dict] = None,
    mode: str = MODE_FAIL,
) -> GateReport:
    """
    Execute Gate 1 and, if it passes, Gate 2.

    Args:
        payload: Decoded JSON payload
        schema: Gate 1 contract (a built-in contract is chosen if None).
            A custom contract is followed by the built-in claim contract,
            since Gate 2 relies on it.
        mode: Gate 2 validation mode

    Returns:
        GateReport with schema errors and the semantic result
    """
    custom_schema = schema is not None
    if schema is None:
        schema = default_schema_for(payload)

    schema_errors = validate_schema(payload, schema)
    if schema_errors:
        return GateReport(schema_errors=schema_errors, mode=mode)

    claims = extract_claims(payload)

    if custom_schema:
        claim_errors = validate_schema(claims, CLAIMS_SCHEMA)
        if claim_errors:
            return GateReport(schema_errors=claim_errors, mode=mode)

    return GateReport(
        semantic=validate_claims(claims, mode=mode),
        claim_count=len(claims),
        mode=mode,
    )
