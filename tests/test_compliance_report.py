# [TEMPLATE: CUI // SP-CTI]
"""Tests for caftrack.compliance.compliance_report: nested report, banding, input parsing."""

import json
import re
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

from caftrack.compliance.compliance_report import (
    NOT_COMPLETE_LABEL,
    build_compliance_report,
    compliance_band,
    parse_assessment,
)
from caftrack.resilience.correlation import _thread_local, get_correlation_id

RESPONSES = {"A1.a-n1": False, "A1.a-y1": True, "A1.a-y2": True, "A1.b-y1": True}


@pytest.fixture
def report(mini_framework, mini_questions):
    return build_compliance_report(
        mini_framework, "Baseline", mini_questions, RESPONSES, project_id="proj-123",
    )


# ---------------------------------------------------------------------------
# Banding
# ---------------------------------------------------------------------------

class TestComplianceBand:
    """RAG banding of scored percentages."""

    @pytest.mark.parametrize("percentage,band", [
        (100, "green"), (80, "green"), (79, "amber"), (60, "amber"), (59, "red"), (0, "red"),
    ])
    def test_default_bands(self, percentage, band):
        assert compliance_band(percentage) == band

    def test_unscored_has_no_band(self):
        assert compliance_band(None) is None

    def test_custom_bands(self):
        bands = {"green": 90, "amber": 70}
        assert compliance_band(85, bands) == "amber"
        assert compliance_band(90, bands) == "green"


# ---------------------------------------------------------------------------
# Report structure
# ---------------------------------------------------------------------------

class TestBuildComplianceReport:
    """Nested report for one assessment."""

    def test_header(self, report):
        assert report["framework_id"] == "mini_caf"
        assert report["project_id"] == "proj-123"
        assert report["profile"] == "Baseline"

    def test_overall(self, report):
        """4 compliant of 15 questions = 27%."""
        overall = report["overall"]
        assert overall["total"] == 15
        assert overall["compliant"] == 4
        assert overall["percentage"] == 27
        assert overall["label"] == "27%"
        assert overall["band"] == "red"

    def test_not_applicable_objective_omitted(self, report):
        assert [o["scope_id"] for o in report["objectives"]] == ["A"]

    def test_not_applicable_outcome_omitted(self, report):
        principles = report["objectives"][0]["principles"]
        a2 = [p for p in principles if p["scope_id"] == "A2"][0]
        assert [o["outcome_id"] for o in a2["outcomes"]] == ["A2.a"]

    def test_outcome_entries(self, report):
        a1 = report["objectives"][0]["principles"][0]
        by_id = {o["outcome_id"]: o for o in a1["outcomes"]}
        assert by_id["A1.a"]["percentage"] == 100
        assert by_id["A1.a"]["band"] == "green"
        assert by_id["A1.a"]["name"] == "Board Direction"
        assert by_id["A1.b"]["percentage"] == 11
        assert by_id["A1.b"]["label"] == "11%"

    def test_not_complete_label(self, report):
        a2 = report["objectives"][0]["principles"][1]
        outcome = a2["outcomes"][0]
        assert outcome["status"] == "not_complete"
        assert outcome["label"] == NOT_COMPLETE_LABEL
        assert outcome["display_percentage"] is None
        assert outcome["band"] is None
        assert a2["label"] == NOT_COMPLETE_LABEL

    def test_principle_uses_sums(self, report):
        """A1: (3 + 1) / (3 + 9) = 33%."""
        a1 = report["objectives"][0]["principles"][0]
        assert a1["percentage"] == 33
        assert a1["name"] == "Governance"

    def test_report_is_json_serializable(self, report):
        assert json.loads(json.dumps(report))["overall"]["status"] == "scored"

    def test_custom_bands(self, mini_framework, mini_questions):
        report = build_compliance_report(
            mini_framework, "Baseline", mini_questions, RESPONSES,
            bands={"green": 20, "amber": 10},
        )
        assert report["overall"]["band"] == "green"

    def test_unknown_profile(self, mini_framework, mini_questions):
        with pytest.raises(ValueError, match="Unknown assurance profile"):
            build_compliance_report(mini_framework, "Platinum", mini_questions, {})


# ---------------------------------------------------------------------------
# Input parsing
# ---------------------------------------------------------------------------

class TestParseAssessment:

    def test_dict_responses(self):
        questions, responses = parse_assessment({
            "questions": [{"id": "q1", "outcome_id": "A1.a", "section": "achieved"}],
            "responses": {"q1": True},
        })
        assert questions[0].id == "q1"
        assert questions[0].is_negative is False
        assert responses == {"q1": True}

    def test_list_responses(self):
        _, responses = parse_assessment({
            "questions": [],
            "responses": [
                {"question_id": "q1", "value": False},
                {"question_id": "q2", "response": None},
            ],
        })
        assert responses == {"q1": False, "q2": None}

    def test_negative_section_flags_question(self):
        questions, _ = parse_assessment({
            "questions": [{"id": "q1", "outcome_id": "A1.a", "section": "negative"}],
        })
        assert questions[0].is_negative is True

    def test_bad_section(self):
        with pytest.raises(ValueError):
            parse_assessment({"questions": [{"id": "q1", "outcome_id": "A1.a", "section": "maybe"}]})

    def test_question_missing_fields(self):
        with pytest.raises(ValueError, match="missing"):
            parse_assessment({"questions": [{"id": "q1"}]})

    def test_bad_responses_type(self):
        with pytest.raises(ValueError, match="responses"):
            parse_assessment({"responses": "yes"})

    def test_bad_response_value(self):
        with pytest.raises(ValueError):
            parse_assessment({"responses": {"q1": "yes"}})

    def test_not_an_object(self):
        with pytest.raises(ValueError):
            parse_assessment([])

    def test_question_entry_not_an_object(self):
        with pytest.raises(ValueError, match="Question entry must be an object"):
            parse_assessment({"questions": [5], "responses": {}})

    def test_response_entry_not_an_object(self):
        with pytest.raises(ValueError, match="Response entry must be an object"):
            parse_assessment({"questions": [], "responses": [5]})

    def test_questions_not_a_list(self):
        with pytest.raises(ValueError, match="questions"):
            parse_assessment({"questions": {"id": "q1"}})


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

class TestComplianceReportCli:

    @pytest.fixture
    def run_cli(self, tmp_path, monkeypatch):
        from caftrack.compliance.compliance_report import main

        def _run(assessment):
            path = tmp_path / "assessment.json"
            path.write_text(json.dumps(assessment))
            monkeypatch.setattr(sys, "argv", [
                "compliance_report", "--input", str(path),
                "--config", str(tmp_path / "absent.yaml"), "--json",
            ])
            main()

        monkeypatch.delenv("CAFTRACK_CONFIG", raising=False)
        yield _run
        _thread_local.correlation_id = None

    def test_json_report_with_run_correlation_id(self, run_cli, capsys):
        run_cli({"project_id": "proj-7", "questions": [], "responses": {}})
        report = json.loads(capsys.readouterr().out)
        assert report["project_id"] == "proj-7"
        assert report["profile"] == "Baseline"
        assert re.fullmatch(r"[0-9a-f]{12}", get_correlation_id())

    def test_bad_question_entry_exits_with_error(self, run_cli, capsys):
        with pytest.raises(SystemExit) as exc_info:
            run_cli({"questions": [5], "responses": {}})
        assert exc_info.value.code == 1
        assert "ERROR: Question entry must be an object" in capsys.readouterr().err
