#!/usr/bin/env python3
# CUI // SP-CTI
"""CAF Compliance Report Builder.

Builds the nested compliance report (overall -> objectives -> principles ->
outcomes) for one project assessment. Scores come from the scoring engine
only; this module adds the presentation concerns every consumer shares:
RAG banding, the "not complete" label, and hiding not-applicable entries.

Input file format (--input):
    {
      "project_id": "proj-123",
      "profile": "Enhanced",
      "questions": [{"id": "q1", "outcome_id": "A1.a", "section": "achieved", "text": "..."}],
      "responses": {"q1": true, "q2": null}
    }
"responses" may also be a list of {"question_id": ..., "value": ...}.

Usage:
    python -m caftrack.compliance.compliance_report --input assessment.json --json
    python -m caftrack.compliance.compliance_report --input assessment.json --profile Baseline --human
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from caftrack.compliance.aggregation import ComplianceAggregator
from caftrack.compliance.caf_framework import CafFramework, load_framework
from caftrack.config import DEFAULTS, configure_logging, load_config, resolve_catalog_path
from caftrack.resilience.correlation import generate_correlation_id, set_correlation_id
from caftrack.resilience.errors import CafTrackError
from caftrack.schemas.compliance import (
    AggregateResult,
    AssuranceProfile,
    OutcomeResult,
    Question,
    Response,
    ScoreStatus,
)

logger = logging.getLogger("caftrack.compliance.compliance_report")

NOT_COMPLETE_LABEL = "Not complete"


def compliance_band(percentage: Optional[int], bands: Optional[Dict] = None) -> Optional[str]:
    """RAG band for a scored percentage: green, amber or red. None if unscored."""
    if percentage is None:
        return None
    bands = bands or DEFAULTS["compliance"]["bands"]
    if percentage >= float(bands["green"]):
        return "green"
    if percentage >= float(bands["amber"]):
        return "amber"
    return "red"


def _present(result, bands: Dict) -> Dict:
    data = result.to_dict()
    data["band"] = compliance_band(result.display_percentage, bands)
    data["label"] = (
        NOT_COMPLETE_LABEL if result.status == ScoreStatus.NOT_COMPLETE
        else f"{result.percentage}%" if result.status == ScoreStatus.SCORED
        else None
    )
    return data


def parse_assessment(data: Dict) -> Tuple[List[Question], Dict[str, Optional[bool]]]:
    """Turn raw assessment JSON into Question records and a response map."""
    if not isinstance(data, dict):
        raise ValueError("Assessment payload must be a JSON object")
    raw_questions = data.get("questions") or []
    if not isinstance(raw_questions, list):
        raise ValueError("'questions' must be a list")
    questions = [Question.from_dict(q) for q in raw_questions]
    raw_responses = data.get("responses") or {}
    if isinstance(raw_responses, dict):
        responses = {qid: Response(qid, value).value for qid, value in raw_responses.items()}
    elif isinstance(raw_responses, list):
        responses = {}
        for item in raw_responses:
            response = Response.from_dict(item)
            responses[response.question_id] = response.value
    else:
        raise ValueError("'responses' must be an object or a list")
    return questions, responses


def build_compliance_report(
    framework: CafFramework,
    profile,
    questions,
    responses,
    bands: Optional[Dict] = None,
    project_id: str = "",
) -> Dict:
    """Build the full nested report for one assessment.

    Objectives, principles and outcomes that are NOT_APPLICABLE under the
    profile are omitted, matching how they are excluded from the scores.
    """
    profile = AssuranceProfile.parse(profile)
    bands = bands or DEFAULTS["compliance"]["bands"]
    aggregator = ComplianceAggregator(framework, profile, questions, responses)

    objectives = []
    for objective in framework.objectives:
        obj_result = aggregator.objective(objective.id)
        if not obj_result.is_applicable:
            continue
        principles = []
        for principle in objective.principles:
            pr_result = aggregator.principle(principle.id)
            if not pr_result.is_applicable:
                continue
            outcomes = []
            for outcome in principle.outcomes:
                oc_result: OutcomeResult = aggregator.outcome(outcome.id)
                if not oc_result.is_applicable:
                    continue
                entry = _present(oc_result, bands)
                entry.update({"name": outcome.name, "description": outcome.description})
                outcomes.append(entry)
            entry = _present(pr_result, bands)
            entry.update({
                "name": principle.name,
                "description": principle.description,
                "outcomes": outcomes,
            })
            principles.append(entry)
        entry = _present(obj_result, bands)
        entry.update({"title": objective.title, "principles": principles})
        objectives.append(entry)

    overall: AggregateResult = aggregator.overall()
    return {
        "framework_id": framework.framework_id,
        "framework_name": framework.framework_name,
        "project_id": project_id,
        "profile": profile.value,
        "overall": _present(overall, bands),
        "objectives": objectives,
    }


def _print_human(report: Dict) -> None:
    overall = report["overall"]
    print(f"{'=' * 65}")
    print(f"  {report['framework_name']} ({report['profile']} Profile)")
    if report.get("project_id"):
        print(f"  Project: {report['project_id']}")
    print(f"{'=' * 65}")
    print(f"  Overall: {overall['label'] or 'n/a'} "
          f"({overall['compliant']} of {overall['total']} requirements met, "
          f"{overall['answered']} answered)")
    for obj in report["objectives"]:
        failed = "  [FAILED - negative indicator]" if obj["has_failed"] else ""
        print(f"  Objective {obj['scope_id']}: {obj['title']}  {obj['label']}{failed}")
        for pr in obj["principles"]:
            print(f"    {pr['scope_id']}: {pr['name']}  {pr['label']}")
            for oc in pr["outcomes"]:
                marker = " FAILED" if oc["has_failed"] else ""
                print(f"      {oc['outcome_id']} {oc['name']}: {oc['label']} "
                      f"(required {oc['required_level']}, "
                      f"{oc['compliant']}/{oc['total']}){marker}")
    print(f"{'=' * 65}")


def main():
    parser = argparse.ArgumentParser(description="CAF compliance report")
    parser.add_argument("--input", type=Path, required=True,
                        help="Assessment JSON (questions + responses)")
    parser.add_argument("--profile", help="Assurance profile override (Baseline | Enhanced)")
    parser.add_argument("--catalog", type=Path, help="Catalog JSON override")
    parser.add_argument("--config", type=Path, help="Config YAML override")
    parser.add_argument("--json", action="store_true", help="JSON output")
    parser.add_argument("--human", action="store_true", help="Human-readable output")
    args = parser.parse_args()

    try:
        config = load_config(args.config)
        configure_logging(config)
        set_correlation_id(generate_correlation_id())
        framework = load_framework(args.catalog or resolve_catalog_path(config))
        if not args.input.exists():
            raise FileNotFoundError(f"Assessment file not found: {args.input}")
        with open(args.input, "r", encoding="utf-8") as f:
            data = json.load(f)
        questions, responses = parse_assessment(data)
        profile = (
            args.profile or data.get("profile")
            or config["compliance"]["default_profile"]
        )
        report = build_compliance_report(
            framework, profile, questions, responses,
            bands=config["compliance"]["bands"],
            project_id=data.get("project_id", ""),
        )
        if args.json or not args.human:
            print(json.dumps(report, indent=2))
        else:
            _print_human(report)
    except json.JSONDecodeError as e:
        print(f"ERROR: Invalid JSON in {args.input}: {e}", file=sys.stderr)
        sys.exit(1)
    except (FileNotFoundError, ValueError, CafTrackError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
