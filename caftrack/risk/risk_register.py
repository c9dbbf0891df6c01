#!/usr/bin/env python3
# CUI // SP-CTI
"""Risk Register Builder and CSV Export.

Classifies a project's risks against its appetite and produces the three
register outputs: the tolerance-split register, the document sections used
by the register report, and the CSV consumed by the service-management
import (column order is fixed).

Input file format (--input):
    {
      "project_id": "proj-123",
      "appetite": {"Financial": "Cautious", "Human": "Minimal"},
      "risks": [{"id": "risk-001", "impact_type": "Financial",
                 "statement": "It is Possible that ...",
                 "base_likelihood": "Possible", "base_impact": "Major"}]
    }

Usage:
    python -m caftrack.risk.risk_register --input risks.json --json
    python -m caftrack.risk.risk_register --input risks.json --csv out/risks.csv
"""

import argparse
import csv
import io
import json
import logging
import sys
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

from caftrack.config import configure_logging, load_config
from caftrack.resilience.correlation import generate_correlation_id, set_correlation_id
from caftrack.resilience.errors import CafTrackError
from caftrack.risk.risk_rating import calculate_risk_rating
from caftrack.risk.risk_tolerance import (
    ToleranceSplit,
    classify_risks,
    is_appetite_complete,
    validate_appetite,
)
from caftrack.schemas.risk import RiskClassification, RiskRecord

logger = logging.getLogger("caftrack.risk.risk_register")

CSV_COLUMNS = (
    "Status",
    "Impact Type",
    "Likelihood",
    "Impact",
    "Risk Rating",
    "Risk Statement",
    "Modified Likelihood",
    "Modified Impact",
    "Modified Risk Rating",
    "Likelihood Justification",
    "Impact Justification",
    "Remediation Plan",
)


def parse_risks(items: Iterable[Dict]) -> List[RiskRecord]:
    """Build RiskRecords from raw dicts, rejecting entries without id/statement."""
    risks = []
    for item in items or []:
        if not isinstance(item, dict):
            raise ValueError(f"Risk entry must be an object, got {type(item).__name__}")
        if not item.get("id"):
            raise ValueError(f"Risk entry is missing 'id': {item!r}")
        if "statement" not in item and "risk_statement" not in item:
            raise ValueError(f"Risk '{item['id']}' is missing 'statement'")
        item = dict(item)
        item.setdefault("impact_type", "")
        risks.append(RiskRecord.from_dict(item))
    return risks


def _csv_row(classification: RiskClassification) -> List[str]:
    risk = classification.risk
    base_rating = (
        calculate_risk_rating(risk.base_likelihood, risk.base_impact)
        if risk.base_likelihood and risk.base_impact else ""
    )
    modified_rating = (
        classification.rating
        if risk.modified_likelihood and risk.modified_impact else ""
    )
    return [
        classification.status_label,
        risk.impact_type or "",
        risk.base_likelihood or "",
        risk.base_impact or "",
        base_rating,
        risk.statement or "",
        risk.modified_likelihood or "",
        risk.modified_impact or "",
        modified_rating,
        risk.likelihood_justification or "",
        risk.impact_justification or "",
        risk.remediation_plan or "",
    ]


def export_risks_csv(risks: Iterable[RiskRecord], appetite: Mapping[str, Optional[str]]) -> str:
    """Render the register CSV. Rows keep the input order of the risks."""
    split = classify_risks(risks, appetite)
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for classification in split.classifications:
        writer.writerow(_csv_row(classification))
    return buf.getvalue()


def write_risks_csv(
    risks: Iterable[RiskRecord],
    appetite: Mapping[str, Optional[str]],
    out_file: Path,
) -> str:
    """Write the register CSV to out_file. Returns the path written."""
    out_file = Path(out_file)
    out_file.parent.mkdir(parents=True, exist_ok=True)
    with open(out_file, "w", newline="", encoding="utf-8") as f:
        f.write(export_risks_csv(risks, appetite))
    logger.info("Wrote risk register CSV to %s", out_file)
    return str(out_file)


def register_document_sections(split: ToleranceSplit) -> List[Dict]:
    """Sections for the risk register document, out-of-tolerance first."""
    sections = [{
        "heading": "Risk Register",
        "level": 1,
        "content": "This document contains the risk register for the project.",
    }]
    for heading, items in (
        ("Out of Tolerance Risks", split.out_of_tolerance),
        ("In Tolerance Risks", split.in_tolerance),
    ):
        if not items:
            continue
        sections.append({
            "heading": heading,
            "level": 2,
            "content": [
                f"{idx}. {c.risk.impact_type} - {c.rating}\n   {c.risk.statement}"
                for idx, c in enumerate(items, start=1)
            ],
        })
    return sections


def build_risk_register(
    risks: Iterable[RiskRecord],
    appetite: Mapping[str, Optional[str]],
    categories: Optional[Iterable[str]] = None,
    project_id: str = "",
) -> Dict:
    """Full register payload: tolerance split, appetite status, sections."""
    appetite = validate_appetite(appetite)
    split = classify_risks(risks, appetite)
    register = {"project_id": project_id, "appetite": appetite}
    if categories is not None:
        register["appetite_complete"] = is_appetite_complete(appetite, categories)
    register.update(split.to_dict())
    register["sections"] = register_document_sections(split)
    return register


def _print_human(register: Dict) -> None:
    print(f"{'=' * 65}")
    print("  Risk Register")
    if register.get("project_id"):
        print(f"  Project: {register['project_id']}")
    print(f"{'=' * 65}")
    print(f"  Total risks: {register['total']}")
    print(f"  Out of tolerance: {register['out_of_tolerance_count']}")
    print(f"  In tolerance: {register['in_tolerance_count']}")
    if register.get("appetite_complete") is False:
        print("  WARNING: risk appetite is not set for every category")
    for key, title in (("out_of_tolerance", "Out of Tolerance"), ("in_tolerance", "In Tolerance")):
        if register[key]:
            print(f"  {title}:")
            for item in register[key]:
                risk = item["risk"]
                print(f"    - [{item['rating']}] {risk['id']} ({risk['impact_type'] or 'no impact type'})")
    print(f"{'=' * 65}")


def main():
    parser = argparse.ArgumentParser(description="Risk register and tolerance report")
    parser.add_argument("--input", type=Path, required=True,
                        help="Risks JSON (risks + appetite)")
    parser.add_argument("--csv", type=Path, help="Write register CSV to this path")
    parser.add_argument("--config", type=Path, help="Config YAML override")
    parser.add_argument("--json", action="store_true", help="JSON output")
    parser.add_argument("--human", action="store_true", help="Human-readable output")
    args = parser.parse_args()

    try:
        config = load_config(args.config)
        configure_logging(config)
        set_correlation_id(generate_correlation_id())
        if not args.input.exists():
            raise FileNotFoundError(f"Risk file not found: {args.input}")
        with open(args.input, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("Risk file must contain a JSON object")
        risks = parse_risks(data.get("risks"))
        appetite = data.get("appetite") or {}
        register = build_risk_register(
            risks, appetite,
            categories=config["risk"]["categories"],
            project_id=data.get("project_id", ""),
        )
        if args.csv:
            register["csv_file"] = write_risks_csv(risks, appetite, args.csv)
        if args.json or not args.human:
            print(json.dumps(register, indent=2))
        else:
            _print_human(register)
            if args.csv:
                print(f"CSV written: {register['csv_file']}")
    except json.JSONDecodeError as e:
        print(f"ERROR: Invalid JSON in {args.input}: {e}", file=sys.stderr)
        sys.exit(1)
    except (FileNotFoundError, ValueError, CafTrackError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
