"""
Claim Model — The evidentiary assertions checked by Gate 2.

A Claim is one node of the evidence graph. Its outgoing edges are the
identifiers listed in ``depends_on``.

Claim Types:
    FACT       — Direct, falsifiable, evidenced; may not cite other claims
    INFERENCE  — Derived conclusion; must cite dependencies or assumptions

Source Types (each with a confidence ceiling):
    DIRECT   — 1.0
    PARTIAL  — 0.7
    CONTEXT  — 0.5

Claims are read as given. Values are never coerced: a claim whose
``falsifiable`` is the string "true" is not falsifiable, and an unknown
``source_type`` is kept so that it can be reported.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ClaimType(Enum):
    """Claim types with type-specific structural rules."""
    FACT = "FACT"
    INFERENCE = "INFERENCE"


class SourceType(Enum):
    """How directly a claim is backed by its source material."""
    DIRECT = "DIRECT"
    PARTIAL = "PARTIAL"
    CONTEXT = "CONTEXT"


# Maximum declared confidence_score per source type
CONFIDENCE_CEILINGS = {
    SourceType.DIRECT: 1.0,
    SourceType.PARTIAL: 0.7,
    SourceType.CONTEXT: 0.5,
}


class ClaimFormatError(Exception):
    """Raised when a record cannot be read as a claim."""

    def __init__(self, reason: str, index: Optional[int] = None):
        self.reason = reason
        self.index = index
        location = f"claims[{index}]: " if index is not None else ""
        super().__init__(f"{location}{reason}")


def _as_tuple(value: Any) -> Optional[tuple]:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return (value,)


def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


@dataclass(frozen=True)
class Claim:
    """
    One evidentiary assertion.

    Optional fields are ``None`` when absent from the input. Sequence
    fields are stored as tuples so a claim can be shared between
    validation calls without being mutated.
    """
    id: str
    type: Optional[str] = None
    falsifiable: Optional[bool] = None
    depends_on: Optional[tuple[str, ...]] = None
    assumptions: Optional[tuple[str, ...]] = None
    source_type: Optional[str] = None
    confidence_score: Optional[float] = None
    evidence: Optional[tuple] = None
    support: Optional[tuple] = None

    def __post_init__(self):
        # Enum members are accepted and stored by value
        object.__setattr__(self, "type", _enum_value(self.type))
        object.__setattr__(self, "source_type", _enum_value(self.source_type))
        for name in ("depends_on", "assumptions", "evidence", "support"):
            object.__setattr__(self, name, _as_tuple(getattr(self, name)))

    @property
    def claim_type(self) -> Optional[ClaimType]:
        """The recognised claim type, or None."""
        try:
            return ClaimType(self.type)
        except ValueError:
            return None

    def supporting_evidence(self) -> tuple:
        """
        Return the supporting references of this claim.

        ``evidence`` is checked first; ``support`` is only consulted when
        ``evidence`` is absent altogether.
        """
        if self.evidence is not None:
            return self.evidence
        if self.support is not None:
            return self.support
        return ()

    def dependencies(self) -> tuple[str, ...]:
        return self.depends_on or ()

    @classmethod
    def from_dict(cls, record: Mapping, index: Optional[int] = None) -> Claim:
        """
        Build a Claim from a decoded JSON object.

        Unknown keys are ignored.

        Raises:
            ClaimFormatError: If the record is not a mapping
        """
        if not isinstance(record, Mapping):
            raise ClaimFormatError(
                f"claim must be an object, got {type(record).__name__}",
                index,
            )
        return cls(
            id=record.get("id"),
            type=record.get("type"),
            falsifiable=record.get("falsifiable"),
            depends_on=record.get("depends_on"),
            assumptions=record.get("assumptions"),
            source_type=record.get("source_type"),
            confidence_score=record.get("confidence_score"),
            evidence=record.get("evidence"),
            support=record.get("support"),
        )


def resolve_source_type(value: Any) -> Optional[SourceType]:
    """Map a raw source_type value to a SourceType, or None if unknown."""
    try:
        return SourceType(value)
    except ValueError:
        return None


def confidence_ceiling(source_type: SourceType) -> float:
    """Return the confidence ceiling for a source type."""
    return CONFIDENCE_CEILINGS[source_type]
