# CUI // SP-CTI
"""
Flask Blueprint for the risk rating and tolerance API.
Stateless: risks and appetite arrive in the request body.
"""

import logging

from flask import Blueprint, Response, current_app, jsonify, request

from caftrack.resilience.errors import CafTrackError
from caftrack.risk.risk_rating import calculate_risk_rating, rating_matrix, risk_rating_value
from caftrack.risk.risk_register import build_risk_register, export_risks_csv, parse_risks
from caftrack.risk.risk_tolerance import validate_appetite

logger = logging.getLogger("caftrack.dashboard.api.risk")

risk_api = Blueprint("risk_api", __name__, url_prefix="/api/risk")


def _payload():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object")
    return data


@risk_api.errorhandler(ValueError)
@risk_api.errorhandler(CafTrackError)
def _bad_request(error):
    logger.info("Rejected risk request: %s", error)
    return jsonify({"error": str(error)}), 400


@risk_api.route("/matrix", methods=["GET"])
def matrix():
    """Likelihood/impact scales and the rating matrix."""
    return jsonify(rating_matrix())


@risk_api.route("/rating", methods=["POST"])
def rating():
    """Rate a single likelihood/impact pair."""
    data = _payload()
    result = calculate_risk_rating(data.get("likelihood"), data.get("impact"))
    return jsonify({
        "likelihood": data.get("likelihood"),
        "impact": data.get("impact"),
        "rating": result,
        "rating_value": risk_rating_value(result),
    })


@risk_api.route("/classify", methods=["POST"])
def classify():
    """Tolerance-split risk register."""
    data = _payload()
    register = build_risk_register(
        parse_risks(data.get("risks")),
        data.get("appetite") or {},
        categories=current_app.config["CAFTRACK"]["risk"]["categories"],
        project_id=data.get("project_id", ""),
    )
    return jsonify(register)


@risk_api.route("/export", methods=["POST"])
def export_csv():
    """Risk register CSV download."""
    data = _payload()
    appetite = validate_appetite(data.get("appetite") or {})
    body = export_risks_csv(parse_risks(data.get("risks")), appetite)
    filename = f"{data.get('project_id') or 'project'}_risks.csv"
    return Response(
        body,
        mimetype="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
