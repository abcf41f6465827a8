"""
Tests for Gate 2: Graph Builder and Per-Claim Rules.

These tests verify:
1. Duplicate identifiers are reported once per repeat, first occurrence wins
2. FACT, INFERENCE and confidence ceiling rules
3. Every rule is evaluated independently on every list entry
4. The verdict and mode handling of validate_claims
"""

import pytest

from eligate import validate_claims
from eligate.domain import MODE_WARN, IssueCode, Severity
from eligate.evidence import Claim, ClaimFormatError
from eligate.validation import build_claim_graph, check_claim, coerce_claims


def codes_for(claim: dict) -> list[IssueCode]:
    """Issue codes produced by the per-claim rules for one record."""
    return [issue.code for issue in check_claim(Claim.from_dict(claim))]


# =============================================================================
# CLEAN INPUT
# =============================================================================

VALID_CLAIMS = [
    {
        "id": "f1",
        "type": "FACT",
        "falsifiable": True,
        "evidence": ["ehr:obs/123"],
        "source_type": "DIRECT",
        "confidence_score": 1.0,
    },
    {
        "id": "f2",
        "type": "FACT",
        "falsifiable": True,
        "support": ["lab:cbc/9"],
        "depends_on": [],
        "assumptions": [],
    },
    {
        "id": "i1",
        "type": "INFERENCE",
        "depends_on": ["f1", "f2"],
        "source_type": "PARTIAL",
        "confidence_score": 0.7,
    },
    {
        "id": "i2",
        "type": "INFERENCE",
        "assumptions": ["patient history is complete"],
        "source_type": "CONTEXT",
        "confidence_score": 0.5,
    },
    {
        "id": "i3",
        "type": "INFERENCE",
        "depends_on": ["i1", "i2"],
    },
    {"id": "note"},
]


class TestCleanInput:
    """A consistent claim set produces no issues."""

    def test_valid_claims_pass(self):
        """A consistent claim set has no issues and passes."""
        result = validate_claims(VALID_CLAIMS)

        assert result.ok is True
        assert result.issues == []

    def test_empty_claim_list_passes(self):
        """Nothing to check means nothing to report."""
        result = validate_claims([])

        assert result.ok is True
        assert result.issues == []

    def test_non_mapping_entry_raises(self):
        """Entries that are neither Claims nor objects are refused."""
        with pytest.raises(ClaimFormatError, match=r"claims\[1\]"):
            validate_claims([{"id": "a"}, "b"])

    def test_claim_objects_accepted(self):
        """Claims can be passed directly instead of records."""
        claims = [Claim.from_dict(record) for record in VALID_CLAIMS]
        assert validate_claims(claims).ok is True


# =============================================================================
# GRAPH BUILDER
# =============================================================================

class TestGraphBuilder:
    """Test identifier map construction."""

    def test_duplicate_reported_once(self):
        """Two entries with the same id give exactly one issue."""
        result = validate_claims([{"id": "a"}, {"id": "a"}])

        duplicates = [i for i in result.issues if i.code == IssueCode.DUPLICATE_CLAIM_ID]
        assert len(duplicates) == 1
        assert duplicates[0].claim_id == "a"
        assert duplicates[0].severity == Severity.ERROR
        assert result.ok is False

    def test_duplicate_reported_per_repeat(self):
        """Three copies of an id give two duplicate issues."""
        result = validate_claims([{"id": "a"}, {"id": "a"}, {"id": "a"}])
        assert result.codes() == [IssueCode.DUPLICATE_CLAIM_ID] * 2

    def test_first_occurrence_wins(self):
        """The graph keeps the first entry for a repeated id."""
        claims = coerce_claims([
            {"id": "a", "depends_on": ["b"]},
            {"id": "b"},
            {"id": "a", "depends_on": ["ghost"]},
        ])
        graph = build_claim_graph(claims)

        assert list(graph.nodes) == ["a", "b"]
        assert graph.nodes["a"].depends_on == ("b",)
        assert len(graph.claims) == 3

    def test_duplicate_edges_not_in_graph(self):
        """Only the first occurrence's edges are traversed."""
        result = validate_claims([
            {"id": "a"},
            {"id": "a", "depends_on": ["ghost"]},
        ])
        assert IssueCode.UNKNOWN_DEPENDENCY not in result.codes()

    def test_duplicates_still_rule_checked(self):
        """Every list entry is checked, including repeats."""
        result = validate_claims([
            {"id": "i", "type": "INFERENCE", "assumptions": ["x"]},
            {"id": "i", "type": "INFERENCE"},
        ])

        assert result.codes() == [
            IssueCode.DUPLICATE_CLAIM_ID,
            IssueCode.INFERENCE_NO_BASIS,
        ]


# =============================================================================
# FACT RULES
# =============================================================================

class TestFactRules:
    """Test FACT structural rules."""

    def test_not_falsifiable(self):
        """A FACT with falsifiable=false is reported."""
        codes = codes_for({"id": "f1", "type": "FACT", "falsifiable": False, "support": ["x"]})
        assert codes == [IssueCode.FACT_NOT_FALSIFIABLE]

    @pytest.mark.parametrize("value", [None, "true", 1])
    def test_falsifiable_must_be_exactly_true(self, value):
        """Missing or truthy non-boolean values do not count as falsifiable."""
        claim = {"id": "f1", "type": "FACT", "evidence": ["x"]}
        if value is not None:
            claim["falsifiable"] = value
        assert codes_for(claim) == [IssueCode.FACT_NOT_FALSIFIABLE]

    def test_no_evidence(self):
        """A FACT needs supporting evidence."""
        codes = codes_for({"id": "f1", "type": "FACT", "falsifiable": True})
        assert codes == [IssueCode.FACT_NO_EVIDENCE]

    def test_empty_evidence_shadows_support(self):
        """An empty evidence list is not replaced by support."""
        codes = codes_for({
            "id": "f1", "type": "FACT", "falsifiable": True,
            "evidence": [], "support": ["x"],
        })
        assert codes == [IssueCode.FACT_NO_EVIDENCE]

    def test_fact_with_dependencies(self):
        """A FACT may not cite other claims."""
        codes = codes_for({
            "id": "f1", "type": "FACT", "falsifiable": True,
            "evidence": ["x"], "depends_on": ["f0"],
        })
        assert codes == [IssueCode.FACT_HAS_DEPENDS_ON]

    def test_fact_with_assumptions(self):
        """A FACT may not carry assumptions."""
        codes = codes_for({
            "id": "f1", "type": "FACT", "falsifiable": True,
            "evidence": ["x"], "assumptions": ["a"],
        })
        assert codes == [IssueCode.FACT_HAS_ASSUMPTIONS]

    def test_all_fact_rules_evaluated(self):
        """One bad FACT reports every violated rule in order."""
        codes = codes_for({
            "id": "f1", "type": "FACT",
            "depends_on": ["f0"], "assumptions": ["a"],
        })
        assert codes == [
            IssueCode.FACT_NOT_FALSIFIABLE,
            IssueCode.FACT_NO_EVIDENCE,
            IssueCode.FACT_HAS_DEPENDS_ON,
            IssueCode.FACT_HAS_ASSUMPTIONS,
        ]


# =============================================================================
# INFERENCE RULES
# =============================================================================

class TestInferenceRules:
    """Test INFERENCE basis rule."""

    def test_no_basis(self):
        """An INFERENCE with no basis fails the result."""
        result = validate_claims([{"id": "i1", "type": "INFERENCE"}])

        assert result.codes() == [IssueCode.INFERENCE_NO_BASIS]
        assert result.issues[0].claim_id == "i1"
        assert result.ok is False

    def test_empty_basis(self):
        """Empty lists are no basis either."""
        codes = codes_for({"id": "i1", "type": "INFERENCE", "depends_on": [], "assumptions": []})
        assert codes == [IssueCode.INFERENCE_NO_BASIS]

    def test_assumptions_are_enough(self):
        """Assumptions alone are a sufficient basis."""
        assert codes_for({"id": "i1", "type": "INFERENCE", "assumptions": ["a"]}) == []

    def test_inference_needs_no_evidence(self):
        """FACT rules do not apply to inferences."""
        assert codes_for({"id": "i1", "type": "INFERENCE", "depends_on": ["f"]}) == []


# =============================================================================
# CONFIDENCE CEILING RULES
# =============================================================================

class TestConfidenceCeiling:
    """Test source_type ceilings."""

    def test_context_ceiling_exceeded(self):
        """The message states both the score and the ceiling."""
        result = validate_claims([
            {"id": "c1", "source_type": "CONTEXT", "confidence_score": 0.8},
        ])

        assert result.codes() == [IssueCode.CONFIDENCE_EXCEEDS_CEILING]
        issue = result.issues[0]
        assert issue.severity == Severity.ERROR
        assert "0.8" in issue.message
        assert "0.5" in issue.message

    @pytest.mark.parametrize("source_type,score", [
        ("DIRECT", 1.0),
        ("PARTIAL", 0.7),
        ("CONTEXT", 0.5),
        ("CONTEXT", 0),
    ])
    def test_score_at_ceiling_passes(self, source_type, score):
        """A score equal to the ceiling is allowed."""
        assert codes_for({"id": "c", "source_type": source_type, "confidence_score": score}) == []

    @pytest.mark.parametrize("source_type,score", [
        ("PARTIAL", 0.71),
        ("CONTEXT", 0.51),
    ])
    def test_score_above_ceiling_fails(self, source_type, score):
        """Any score above the ceiling is reported."""
        codes = codes_for({"id": "c", "source_type": source_type, "confidence_score": score})
        assert codes == [IssueCode.CONFIDENCE_EXCEEDS_CEILING]

    def test_missing_score_passes(self):
        """A source type without a score has nothing to check."""
        assert codes_for({"id": "c", "source_type": "CONTEXT"}) == []

    def test_score_without_source_type_passes(self):
        """No ceiling applies without a source_type."""
        assert codes_for({"id": "c", "confidence_score": 0.99}) == []

    def test_invalid_source_type_warns(self):
        """An unknown source type warns and skips the ceiling."""
        result = validate_claims([
            {"id": "c1", "source_type": "HEARSAY", "confidence_score": 0.99},
        ])

        assert result.codes() == [IssueCode.INVALID_SOURCE_TYPE]
        assert result.issues[0].severity == Severity.WARN
        assert result.ok is True

    def test_fact_and_ceiling_rules_combine(self):
        """Ceilings apply to FACT claims too."""
        codes = codes_for({
            "id": "f1", "type": "FACT", "falsifiable": True, "evidence": ["x"],
            "source_type": "PARTIAL", "confidence_score": 0.9,
        })
        assert codes == [IssueCode.CONFIDENCE_EXCEEDS_CEILING]


# =============================================================================
# VERDICT AND MODES
# =============================================================================

class TestModes:
    """Test fail and advisory modes."""

    BAD_CLAIMS = [
        {"id": "i1", "type": "INFERENCE"},
        {"id": "c1", "source_type": "HEARSAY"},
    ]

    def test_fail_mode_is_default(self):
        """ERROR issues fail the result unless a mode is given."""
        assert validate_claims(self.BAD_CLAIMS).ok is False

    def test_warn_mode_reports_but_passes(self):
        """Advisory mode keeps every issue but passes."""
        result = validate_claims(self.BAD_CLAIMS, mode=MODE_WARN)

        assert result.ok is True
        assert result.codes() == [
            IssueCode.INFERENCE_NO_BASIS,
            IssueCode.INVALID_SOURCE_TYPE,
        ]

    def test_untyped_claims_pass(self):
        """Claims with no type and no source type have no rules."""
        assert validate_claims([{"id": "a"}, {"id": "b"}]).issues == []
