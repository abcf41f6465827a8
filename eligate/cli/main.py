"""
ELI Gate CLI — Reporting Interface for Claim Validation.

Commands:
    eligate validate <payload>   — Run Gate 1 and Gate 2 on a JSON payload
    eligate codes                — Show the issue taxonomy

Exit status:
    0 — both gates passed
    1 — Gate 1 or Gate 2 failed
    2 — the payload or schema could not be read

The CLI only reads files and prints reports. It cannot change the rules,
the ceilings or the issue severities.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from ..domain import ISSUE_TRIGGERS, MODE_FAIL, MODE_WARN, Issue, IssueCode
from ..evidence import ClaimFormatError
from ..schema import SchemaLoadError, load_json, load_schema
from .pipeline import GateReport, PayloadError, run_gates

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_UNREADABLE = 2


# =============================================================================
# OUTPUT FORMATTING
# =============================================================================

def format_issue_row(issue: Issue) -> str:
    """Format a single issue for display."""
    return f"  - [{issue.severity.value:<5}] {issue.code.value} ({issue.claim_id}): {issue.message}"


def format_report(report: GateReport) -> str:
    """Format the full human-readable report."""
    lines = []

    if not report.schema_ok:
        lines.append("✗ Gate 1 (schema) FAILED")
        lines.append("")
        lines.append("Errors found:")
        for error in report.schema_errors:
            lines.append(f"  - {error}")
        return "\n".join(lines)

    lines.append("✓ Gate 1 (schema) PASSED")

    semantic = report.semantic
    verdict = "PASSED" if semantic.ok else "FAILED"
    mark = "✓" if semantic.ok else "✗"
    lines.append(f"{mark} Gate 2 (semantic) {verdict}")
    lines.append("")
    lines.append(f"  Claims checked: {report.claim_count}")
    lines.append(f"  Mode:           {report.mode}")
    lines.append(f"  Errors:         {len(semantic.errors)}")
    lines.append(f"  Warnings:       {len(semantic.warnings)}")

    if semantic.issues:
        lines.append("")
        lines.append("Issues:")
        for issue in semantic.issues:
            lines.append(format_issue_row(issue))

    return "\n".join(lines)


def format_codes_table() -> str:
    """Format the issue taxonomy as a table."""
    lines = [f"{'CODE':<28} {'SEVERITY':<8} TRIGGER"]
    for code in IssueCode:
        lines.append(f"{code.value:<28} {code.severity.value:<8} {ISSUE_TRIGGERS[code]}")
    return "\n".join(lines)


# =============================================================================
# CLI COMMANDS
# =============================================================================

def cmd_validate(args: argparse.Namespace) -> int:
    """Validate a payload file."""
    try:
        payload = load_json(args.payload)
        schema = load_schema(args.schema) if args.schema else None
        report = run_gates(payload, schema=schema, mode=args.mode)
    except (SchemaLoadError, PayloadError, ClaimFormatError) as e:
        print("ERROR: Validation could not run")
        print(f"Reason: {e}")
        return EXIT_UNREADABLE

    logger.debug("Validated %s: ok=%s", args.payload, report.ok)

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print("ELI Claim Validator")
        print("=" * 50)
        print(f"Payload: {args.payload}")
        print()
        print(format_report(report))

    return EXIT_OK if report.ok else EXIT_FAILED


def cmd_codes(args: argparse.Namespace) -> int:
    """Show the issue taxonomy."""
    print(format_codes_table())
    return EXIT_OK


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="eligate",
        description="ELI Gate — structural and semantic claim validation",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
    )

    # Validate command
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate a JSON claim payload",
    )
    validate_parser.add_argument(
        "payload",
        type=Path,
        help="JSON file with a claim list or an object with a 'claims' list",
    )
    validate_parser.add_argument(
        "--mode",
        choices=[MODE_FAIL, MODE_WARN],
        default=MODE_FAIL,
        help="'fail' fails on ERROR issues, 'warn' only reports them",
    )
    validate_parser.add_argument(
        "--schema",
        type=Path,
        default=None,
        help="Gate 1 JSON schema file (defaults to the built-in contract)",
    )
    validate_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the report as JSON",
    )
    validate_parser.set_defaults(func=cmd_validate)

    # Codes command
    codes_parser = subparsers.add_parser(
        "codes",
        help="Show the issue taxonomy",
    )
    codes_parser.set_defaults(func=cmd_codes)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return EXIT_OK

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
