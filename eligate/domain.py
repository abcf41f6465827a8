"""
Issue Domain Objects for ELI Gate.

Gate 2 never raises on a bad claim. Every problem it finds becomes an
Issue, and the only pass/fail signal is ``ValidationResult.ok``.

Domain Objects:
    Severity          — ERROR or WARN
    IssueCode         — The fixed issue taxonomy
    Issue             — One finding, attributed to a claim
    ValidationResult  — The outcome of one validation call
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


# =============================================================================
# VALIDATION MODES
# =============================================================================

# Only this mode lets ERROR issues fail the result
MODE_FAIL = "fail"

# Advisory run: issues are reported, ok is always True
MODE_WARN = "warn"


# =============================================================================
# ISSUE TAXONOMY
# =============================================================================

class Severity(Enum):
    """Issue severities. WARN never affects the verdict."""
    ERROR = "ERROR"
    WARN = "WARN"


class IssueCode(Enum):
    """
    Semantic issue codes.

    Builder:
        DUPLICATE_CLAIM_ID
    Per-claim rules:
        FACT_NOT_FALSIFIABLE, FACT_NO_EVIDENCE, FACT_HAS_DEPENDS_ON,
        FACT_HAS_ASSUMPTIONS, INFERENCE_NO_BASIS, INVALID_SOURCE_TYPE,
        CONFIDENCE_EXCEEDS_CEILING
    Graph:
        UNKNOWN_DEPENDENCY, DEPENDENCY_CYCLE
    """
    DUPLICATE_CLAIM_ID = "DUPLICATE_CLAIM_ID"
    FACT_NOT_FALSIFIABLE = "FACT_NOT_FALSIFIABLE"
    FACT_NO_EVIDENCE = "FACT_NO_EVIDENCE"
    FACT_HAS_DEPENDS_ON = "FACT_HAS_DEPENDS_ON"
    FACT_HAS_ASSUMPTIONS = "FACT_HAS_ASSUMPTIONS"
    INFERENCE_NO_BASIS = "INFERENCE_NO_BASIS"
    INVALID_SOURCE_TYPE = "INVALID_SOURCE_TYPE"
    CONFIDENCE_EXCEEDS_CEILING = "CONFIDENCE_EXCEEDS_CEILING"
    UNKNOWN_DEPENDENCY = "UNKNOWN_DEPENDENCY"
    DEPENDENCY_CYCLE = "DEPENDENCY_CYCLE"

    @property
    def severity(self) -> Severity:
        return ISSUE_SEVERITY[self]


ISSUE_SEVERITY = {
    IssueCode.DUPLICATE_CLAIM_ID: Severity.ERROR,
    IssueCode.FACT_NOT_FALSIFIABLE: Severity.ERROR,
    IssueCode.FACT_NO_EVIDENCE: Severity.ERROR,
    IssueCode.FACT_HAS_DEPENDS_ON: Severity.ERROR,
    IssueCode.FACT_HAS_ASSUMPTIONS: Severity.ERROR,
    IssueCode.INFERENCE_NO_BASIS: Severity.ERROR,
    IssueCode.INVALID_SOURCE_TYPE: Severity.WARN,
    IssueCode.CONFIDENCE_EXCEEDS_CEILING: Severity.ERROR,
    IssueCode.UNKNOWN_DEPENDENCY: Severity.ERROR,
    IssueCode.DEPENDENCY_CYCLE: Severity.ERROR,
}

# One-line triggers, as shown by `eligate codes`
ISSUE_TRIGGERS = {
    IssueCode.DUPLICATE_CLAIM_ID: "repeated claim identifier",
    IssueCode.FACT_NOT_FALSIFIABLE: "FACT with falsifiable != true",
    IssueCode.FACT_NO_EVIDENCE: "FACT with empty support",
    IssueCode.FACT_HAS_DEPENDS_ON: "FACT citing dependencies",
    IssueCode.FACT_HAS_ASSUMPTIONS: "FACT citing assumptions",
    IssueCode.INFERENCE_NO_BASIS: "INFERENCE with no deps/assumptions",
    IssueCode.INVALID_SOURCE_TYPE: "unrecognized source_type value",
    IssueCode.CONFIDENCE_EXCEEDS_CEILING: "score above source_type ceiling",
    IssueCode.UNKNOWN_DEPENDENCY: "depends_on references missing claim",
    IssueCode.DEPENDENCY_CYCLE: "cycle found in depends_on relation",
}


# =============================================================================
# ISSUE
# =============================================================================

@dataclass(frozen=True)
class Issue:
    """A single semantic finding about one claim."""
    code: IssueCode
    severity: Severity
    claim_id: Optional[str]
    message: str

    @classmethod
    def create(cls, code: IssueCode, claim_id: Optional[str], message: str) -> Issue:
        """Create an Issue with the default severity of its code."""
        return cls(
            code=code,
            severity=code.severity,
            claim_id=claim_id,
            message=message,
        )

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def to_dict(self) -> dict:
        return {
            "code": self.code.value,
            "severity": self.severity.value,
            "claim_id": self.claim_id,
            "message": self.message,
        }

    def __str__(self) -> str:
        return f"[{self.severity.value}] {self.code.value} ({self.claim_id}): {self.message}"


# =============================================================================
# VALIDATION RESULT
# =============================================================================

def compute_ok(issues: list[Issue], mode: str = MODE_FAIL) -> bool:
    """
    Compute the verdict for a list of issues.

    Only ``MODE_FAIL`` can produce a failing verdict, and only
    ERROR-severity issues count.
    """
    if mode != MODE_FAIL:
        return True
    return not any(issue.is_error for issue in issues)


@dataclass
class ValidationResult:
    """
    Result of one Gate 2 run.

    Issues keep their emission order: graph builder, then per-claim rules
    in input order, then the cycle detector.
    """
    ok: bool
    issues: list[Issue] = field(default_factory=list)

    @property
    def errors(self) -> list[Issue]:
        return [issue for issue in self.issues if issue.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[Issue]:
        return [issue for issue in self.issues if issue.severity == Severity.WARN]

    def codes(self) -> list[IssueCode]:
        """Issue codes in emission order."""
        return [issue.code for issue in self.issues]

    def issues_for(self, claim_id: str) -> list[Issue]:
        """All issues attributed to one claim."""
        return [issue for issue in self.issues if issue.claim_id == claim_id]

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "issues": [issue.to_dict() for issue in self.issues],
        }
