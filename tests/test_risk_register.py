# [TEMPLATE: CUI // SP-CTI]
"""Tests for caftrack.risk.risk_register: register payload, document sections and CSV export."""

import csv
import io
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

from caftrack.risk.risk_register import (
    CSV_COLUMNS,
    build_risk_register,
    export_risks_csv,
    parse_risks,
    register_document_sections,
    write_risks_csv,
)
from caftrack.risk.risk_statement import tune_risk
from caftrack.risk.risk_tolerance import classify_risks
from caftrack.schemas.risk import RiskRecord

APPETITE = {"Financial": "Cautious", "Human": "Averse"}


def _rows(text):
    return list(csv.reader(io.StringIO(text)))


# ---------------------------------------------------------------------------
# CSV export
# ---------------------------------------------------------------------------

class TestExportRisksCsv:
    """Service-management import CSV."""

    def test_header(self, sample_risk):
        text = export_risks_csv([sample_risk], APPETITE)
        first_line = text.split("\n")[0]
        assert first_line == ",".join(f'"{c}"' for c in CSV_COLUMNS)
        assert CSV_COLUMNS[0] == "Status"
        assert CSV_COLUMNS[-1] == "Remediation Plan"
        assert len(CSV_COLUMNS) == 12

    def test_base_row(self, sample_risk):
        rows = _rows(export_risks_csv([sample_risk], APPETITE))
        assert rows[1] == [
            "In Tolerance", "Financial", "Possible", "Major", "Medium Risk",
            sample_risk.statement, "", "", "", "", "", "",
        ]

    def test_every_field_quoted(self, sample_risk):
        row_line = export_risks_csv([sample_risk], APPETITE).split("\n")[1]
        assert row_line.startswith('"In Tolerance","Financial",')
        assert row_line.endswith(',"","","","","",""')

    def test_quotes_and_commas_escaped(self):
        risk = RiskRecord(
            id="r1", impact_type="Human", statement='Staff say "it is fine", mostly',
            base_likelihood="Remote", base_impact="Minor",
        )
        text = export_risks_csv([risk], APPETITE)
        assert '"Staff say ""it is fine"", mostly"' in text
        assert _rows(text)[1][5] == 'Staff say "it is fine", mostly'

    def test_modified_row(self, sample_risk):
        tuned = tune_risk(
            sample_risk, "Likely", "Critical",
            likelihood_justification="Campaign observed", impact_justification="Larger payroll",
        )
        row = _rows(export_risks_csv([tuned], APPETITE))[1]
        assert row[0] == "Out of Tolerance"
        assert row[4] == "Medium Risk"
        assert row[6:11] == [
            "Likely", "Critical", "Very High Risk", "Campaign observed", "Larger payroll",
        ]

    def test_rows_keep_input_order(self, sample_risk):
        low = RiskRecord(
            id="low", impact_type="Human", statement="It is Remote that y",
            base_likelihood="Remote", base_impact="Minor",
        )
        rows = _rows(export_risks_csv([low, sample_risk], APPETITE))
        assert [r[1] for r in rows[1:]] == ["Human", "Financial"]

    def test_line_terminator(self, sample_risk):
        text = export_risks_csv([sample_risk], APPETITE)
        assert "\r" not in text
        assert text.endswith("\n")

    def test_no_risks(self):
        assert _rows(export_risks_csv([], APPETITE)) == [list(CSV_COLUMNS)]

    def test_write_file(self, sample_risk, tmp_path):
        out_file = tmp_path / "out" / "risks.csv"
        written = write_risks_csv([sample_risk], APPETITE, out_file)
        assert written == str(out_file)
        assert out_file.read_text(encoding="utf-8") == export_risks_csv([sample_risk], APPETITE)


# ---------------------------------------------------------------------------
# Register payload
# ---------------------------------------------------------------------------

class TestBuildRiskRegister:

    def test_register(self, sample_risk):
        register = build_risk_register(
            [sample_risk], APPETITE, categories=["Financial", "Human"], project_id="proj-1",
        )
        assert register["project_id"] == "proj-1"
        assert register["appetite_complete"] is True
        assert register["in_tolerance_count"] == 1
        assert register["in_tolerance"][0]["status"] == "In Tolerance"

    def test_incomplete_appetite_flag(self, sample_risk):
        register = build_risk_register([sample_risk], APPETITE, categories=["Delivery"])
        assert register["appetite_complete"] is False

    def test_invalid_appetite(self, sample_risk):
        with pytest.raises(ValueError):
            build_risk_register([sample_risk], {"Financial": "Bold"})


class TestDocumentSections:

    def test_sections(self, sample_risk):
        high = RiskRecord(
            id="r2", impact_type="Human", statement="It is Likely that z",
            base_likelihood="Likely", base_impact="Major",
        )
        sections = register_document_sections(classify_risks([sample_risk, high], APPETITE))
        assert [s["heading"] for s in sections] == [
            "Risk Register", "Out of Tolerance Risks", "In Tolerance Risks",
        ]
        assert sections[0]["level"] == 1
        assert sections[1]["content"] == ["1. Human - Medium Risk\n   It is Likely that z"]
        assert sections[2]["content"][0].startswith("1. Financial - Medium Risk\n   It is Possible")

    def test_empty_side_omitted(self, sample_risk):
        sections = register_document_sections(classify_risks([sample_risk], APPETITE))
        assert [s["heading"] for s in sections] == ["Risk Register", "In Tolerance Risks"]


# ---------------------------------------------------------------------------
# Input parsing
# ---------------------------------------------------------------------------

class TestParseRisks:

    def test_parse(self):
        risks = parse_risks([{
            "id": "r1", "risk_statement": "It is Likely that x",
            "base_likelihood": "Likely", "base_impact": "Minor",
            "remediation_plan": None, "unknown_field": 1,
        }])
        assert risks[0].statement == "It is Likely that x"
        assert risks[0].impact_type == ""
        assert risks[0].remediation_plan == ""

    def test_missing_id(self):
        with pytest.raises(ValueError, match="id"):
            parse_risks([{"statement": "x"}])

    def test_missing_statement(self):
        with pytest.raises(ValueError, match="statement"):
            parse_risks([{"id": "r1"}])

    def test_not_an_object(self):
        with pytest.raises(ValueError):
            parse_risks(["r1"])

    def test_none(self):
        assert parse_risks(None) == []
