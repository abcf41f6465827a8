# ELI Gate
# Gate 2: Semantic Claim Validation

"""
Core invariant: A claim set passes only if every FACT is falsifiable and
evidenced, every INFERENCE cites a basis, no confidence exceeds its source
ceiling, and the dependency graph is closed and acyclic.

Problems are reported as data. Validation itself never raises.
"""

from .domain import (
    MODE_FAIL,
    MODE_WARN,
    Issue,
    IssueCode,
    Severity,
    ValidationResult,
)
from .evidence import Claim, ClaimFormatError, ClaimType, SourceType
from .schema import validate_schema
from .validation import validate_claims
