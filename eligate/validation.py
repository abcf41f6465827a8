"""
Semantic Validation (Gate 2) for ELI Gate.

This module checks a list of claims for internal epistemic consistency.
It runs after Gate 1 has accepted the payload shape and never repeats
Gate 1's structural checks.

Stages (data flows one way):
1. Graph builder   — identifier map, first occurrence wins
2. Rule checker    — per-claim FACT / INFERENCE / confidence ceiling rules
3. Cycle detector  — dangling references and dependency cycles
4. Aggregator      — issues in emission order plus the verdict

Problems are reported as Issues, never raised. Every structure used
during a run is local to that run.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from .domain import (
    MODE_FAIL,
    Issue,
    IssueCode,
    ValidationResult,
    compute_ok,
)
from .evidence import (
    Claim,
    ClaimType,
    confidence_ceiling,
    resolve_source_type,
)

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

# Separator used when rendering a cycle path
CYCLE_PATH_SEPARATOR = " -> "

ClaimInput = Union[Claim, Mapping]


def coerce_claims(claims: Iterable[ClaimInput]) -> list[Claim]:
    """Convert decoded JSON records to Claims, keeping Claims as they are."""
    return [
        claim if isinstance(claim, Claim) else Claim.from_dict(claim, index)
        for index, claim in enumerate(claims)
    ]


# =============================================================================
# CLAIM GRAPH BUILDER
# =============================================================================

@dataclass
class ClaimGraph:
    """
    Identifier-keyed view of one claim list.

    ``nodes`` holds the first occurrence of every identifier in input
    order. ``claims`` is the full input list, duplicates included, since
    every entry is rule-checked.
    """
    nodes: dict[str, Claim]
    claims: list[Claim]
    issues: list[Issue] = field(default_factory=list)

    def __contains__(self, claim_id: str) -> bool:
        return claim_id in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def edges(self, claim_id: str) -> tuple[str, ...]:
        """Outgoing depends_on edges of a node."""
        return self.nodes[claim_id].dependencies()


def build_claim_graph(claims: list[Claim]) -> ClaimGraph:
    """
    Build the identifier map for a claim list.

    A repeated identifier emits DUPLICATE_CLAIM_ID and leaves the first
    entry in place. The walk never stops early.
    """
    seen: set[str] = set()
    nodes: dict[str, Claim] = {}
    issues: list[Issue] = []

    for claim in claims:
        if claim.id in seen:
            issues.append(Issue.create(
                IssueCode.DUPLICATE_CLAIM_ID,
                claim.id,
                f"Duplicate claim id '{claim.id}'; the first occurrence is used for the graph",
            ))
            continue
        seen.add(claim.id)
        nodes[claim.id] = claim

    return ClaimGraph(nodes=nodes, claims=list(claims), issues=issues)


# =============================================================================
# PER-CLAIM RULES
# =============================================================================

def _check_fact(claim: Claim) -> list[Issue]:
    """
    FACT rules. Each rule is evaluated on its own, so one claim can
    produce up to four issues.
    """
    issues = []

    if claim.falsifiable is not True:
        issues.append(Issue.create(
            IssueCode.FACT_NOT_FALSIFIABLE,
            claim.id,
            f"FACT '{claim.id}' must be falsifiable (falsifiable={claim.falsifiable!r})",
        ))

    if not claim.supporting_evidence():
        issues.append(Issue.create(
            IssueCode.FACT_NO_EVIDENCE,
            claim.id,
            f"FACT '{claim.id}' has no supporting evidence",
        ))

    if claim.depends_on:
        issues.append(Issue.create(
            IssueCode.FACT_HAS_DEPENDS_ON,
            claim.id,
            f"FACT '{claim.id}' must not depend on other claims: {list(claim.depends_on)}",
        ))

    if claim.assumptions:
        issues.append(Issue.create(
            IssueCode.FACT_HAS_ASSUMPTIONS,
            claim.id,
            f"FACT '{claim.id}' must not carry assumptions ({len(claim.assumptions)} given)",
        ))

    return issues


def _check_inference(claim: Claim) -> list[Issue]:
    if claim.depends_on or claim.assumptions:
        return []
    return [Issue.create(
        IssueCode.INFERENCE_NO_BASIS,
        claim.id,
        f"INFERENCE '{claim.id}' must cite at least one dependency or assumption",
    )]


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_confidence(claim: Claim) -> list[Issue]:
    """
    Confidence ceiling rule.

    An unrecognised source_type is a warning and skips the ceiling check.
    """
    if claim.source_type is None:
        return []

    source_type = resolve_source_type(claim.source_type)
    if source_type is None:
        return [Issue.create(
            IssueCode.INVALID_SOURCE_TYPE,
            claim.id,
            f"Unrecognized source_type {claim.source_type!r}; expected DIRECT, PARTIAL or CONTEXT",
        )]

    ceiling = confidence_ceiling(source_type)
    score = claim.confidence_score
    if _is_number(score) and score > ceiling:
        return [Issue.create(
            IssueCode.CONFIDENCE_EXCEEDS_CEILING,
            claim.id,
            f"confidence_score {score} exceeds the {source_type.value} ceiling of {ceiling}",
        )]
    return []


def check_claim(claim: Claim) -> list[Issue]:
    """
    Apply every per-claim rule to one claim.

    Claims with no recognised type and no source_type produce no issues.
    """
    issues = []

    claim_type = claim.claim_type
    if claim_type == ClaimType.FACT:
        issues.extend(_check_fact(claim))
    elif claim_type == ClaimType.INFERENCE:
        issues.extend(_check_inference(claim))

    issues.extend(_check_confidence(claim))
    return issues


# =============================================================================
# CYCLE DETECTION
# =============================================================================

class VisitState(Enum):
    """Depth-first marking of a graph node."""
    UNVISITED = 0
    IN_PROGRESS = 1
    DONE = 2


def format_cycle(path: list[str]) -> str:
    return CYCLE_PATH_SEPARATOR.join(str(node) for node in path)


def detect_cycles(graph: ClaimGraph) -> list[Issue]:
    """
    Report dangling references and cycles in the depends_on relation.

    Nodes are swept in insertion order, edges in depends_on order. The
    traversal keeps an explicit stack of (node, edge iterator) frames, so
    it visits nodes in the same order a recursive depth-first search would
    without being limited by the interpreter's recursion depth.

    Edge rules, for an edge from A to T:
        - T unknown      -> UNKNOWN_DEPENDENCY on A, edge not followed
        - T in progress  -> DEPENDENCY_CYCLE on A, edge not followed
        - T done         -> nothing
        - T unvisited    -> descend into T

    Returns:
        Issues in discovery order
    """
    issues: list[Issue] = []
    state = {claim_id: VisitState.UNVISITED for claim_id in graph.nodes}

    for root in graph.nodes:
        if state[root] is not VisitState.UNVISITED:
            continue

        state[root] = VisitState.IN_PROGRESS
        path: list[str] = [root]
        frames: list[tuple[str, Iterator[str]]] = [(root, iter(graph.edges(root)))]

        while frames:
            node, edges = frames[-1]
            descended = False

            for target in edges:
                if target not in graph:
                    issues.append(Issue.create(
                        IssueCode.UNKNOWN_DEPENDENCY,
                        node,
                        f"Claim '{node}' depends on unknown claim '{target}'",
                    ))
                    continue

                target_state = state[target]
                if target_state is VisitState.IN_PROGRESS:
                    cycle = path[path.index(target):] + [target]
                    issues.append(Issue.create(
                        IssueCode.DEPENDENCY_CYCLE,
                        node,
                        f"Dependency cycle: {format_cycle(cycle)}",
                    ))
                    continue

                if target_state is VisitState.UNVISITED:
                    state[target] = VisitState.IN_PROGRESS
                    path.append(target)
                    frames.append((target, iter(graph.edges(target))))
                    descended = True
                    break

            if not descended:
                state[node] = VisitState.DONE
                path.pop()
                frames.pop()

    return issues


# =============================================================================
# FULL SEMANTIC GATE
# =============================================================================

def validate_claims(
    claims: Iterable[ClaimInput],
    mode: str = MODE_FAIL,
) -> ValidationResult:
    """
    Run Gate 2 over a claim list.

    Args:
        claims: Claims, or decoded JSON claim objects accepted by Gate 1
        mode: MODE_FAIL (default) lets ERROR issues fail the result; any
            other value reports issues but always returns ok=True

    Returns:
        ValidationResult with issues in emission order

    Raises:
        ClaimFormatError: If an entry is neither a Claim nor a mapping.
            Gate 1 rejects such payloads, so this only happens when
            Gate 2 is called on unchecked input.
    """
    claim_list = coerce_claims(claims)

    graph = build_claim_graph(claim_list)
    issues = list(graph.issues)

    for claim in graph.claims:
        issues.extend(check_claim(claim))

    issues.extend(detect_cycles(graph))

    result = ValidationResult(ok=compute_ok(issues, mode), issues=issues)
    logger.debug(
        "Gate 2 checked %d claims (%d graph nodes): %d issues, ok=%s",
        len(claim_list), len(graph), len(issues), result.ok,
    )
    return result
