# CUI // SP-CTI
"""
Flask Blueprint for the compliance scoring API.
Stateless: questions and responses arrive in the request body, the CAF
catalog is the one injected into the app by create_app().
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from caftrack.compliance.aggregation import ComplianceAggregator
from caftrack.compliance.caf_framework import summarize_framework
from caftrack.compliance.compliance_report import build_compliance_report, parse_assessment
from caftrack.compliance.narrative_context import build_narrative_context
from caftrack.resilience.errors import CafTrackError

logger = logging.getLogger("caftrack.dashboard.api.compliance")

compliance_api = Blueprint("compliance_api", __name__, url_prefix="/api/compliance")


def _payload():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object")
    return data


def _profile(data):
    return data.get("profile") or current_app.config["CAFTRACK"]["compliance"]["default_profile"]


@compliance_api.errorhandler(ValueError)
@compliance_api.errorhandler(CafTrackError)
def _bad_request(error):
    logger.info("Rejected compliance request: %s", error)
    return jsonify({"error": str(error)}), 400


@compliance_api.route("/framework", methods=["GET"])
def framework_summary():
    """CAF catalog with Baseline/Enhanced levels per outcome."""
    return jsonify(summarize_framework(current_app.config["CAF_FRAMEWORK"]))


@compliance_api.route("/report", methods=["POST"])
def compliance_report():
    """Full nested compliance report for one assessment."""
    data = _payload()
    questions, responses = parse_assessment(data)
    report = build_compliance_report(
        current_app.config["CAF_FRAMEWORK"],
        _profile(data),
        questions,
        responses,
        bands=current_app.config["CAFTRACK"]["compliance"]["bands"],
        project_id=data.get("project_id", ""),
    )
    return jsonify(report)


@compliance_api.route("/outcomes/<outcome_id>", methods=["POST"])
def outcome_result(outcome_id):
    """Score a single outcome and return its narrative context."""
    data = _payload()
    framework = current_app.config["CAF_FRAMEWORK"]
    outcome = framework.get_outcome(outcome_id)
    questions, responses = parse_assessment(data)
    aggregator = ComplianceAggregator(framework, _profile(data), questions, responses)
    result = aggregator.outcome(outcome.id)
    return jsonify({
        "result": result.to_dict(),
        "narrative_context": build_narrative_context(
            outcome, questions, responses, evidence=data.get("evidence") or {},
        ),
    })
