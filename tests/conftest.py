#!/usr/bin/env python3
# CUI // SP-CTI
"""Shared pytest fixtures for the CAFTRACK test suite.

Centralizes the CAF catalog, a small hand-built framework with known
question counts, and the Flask test client.
"""

import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path
BASE_DIR = Path(__file__).resolve().parent.parent
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from caftrack.compliance.caf_framework import framework_from_dict, load_framework  # noqa: E402
from caftrack.config import DEFAULTS  # noqa: E402
from caftrack.schemas.compliance import Question  # noqa: E402
from caftrack.schemas.risk import RiskRecord  # noqa: E402

CATALOG_PATH = BASE_DIR / "context" / "compliance" / "ncsc_caf_framework.json"


# ---------------------------------------------------------------------------
# Small framework: two objectives, three principles, six outcomes
# ---------------------------------------------------------------------------
MINI_CATALOG = {
    "framework_id": "mini_caf",
    "framework_name": "Mini CAF",
    "objectives": [
        {
            "id": "A",
            "title": "Managing Security Risk",
            "principles": [
                {
                    "id": "A1",
                    "name": "Governance",
                    "outcomes": [
                        {"id": "A1.a", "name": "Board Direction"},
                        {"id": "A1.b", "name": "Roles and Responsibilities"},
                    ],
                },
                {
                    "id": "A2",
                    "name": "Risk Management",
                    "outcomes": [
                        {"id": "A2.a", "name": "Risk Management Process"},
                        {"id": "A2.c", "name": "Risk Treatment"},
                    ],
                },
            ],
        },
        {
            "id": "C",
            "title": "Detecting Cyber Security Events",
            "principles": [
                {
                    "id": "C2",
                    "name": "Proactive Security Event Discovery",
                    "outcomes": [
                        {"id": "C2.a", "name": "Threat Intelligence"},
                        {"id": "C2.b", "name": "Security Testing"},
                    ],
                },
            ],
        },
    ],
    "profile_requirements": [
        {"outcome_id": "A1.a", "baseline_level": "Achieved", "enhanced_level": "Achieved"},
        {"outcome_id": "A1.b", "baseline_level": "Achieved", "enhanced_level": "Achieved"},
        {"outcome_id": "A2.a", "baseline_level": "Partially Achieved",
         "enhanced_level": "Achieved"},
        {"outcome_id": "C2.a", "baseline_level": "Not Achieved",
         "enhanced_level": "Not Achieved"},
        {"outcome_id": "C2.b", "baseline_level": "Not Achieved",
         "enhanced_level": "Not Achieved"},
    ],
}


def make_questions():
    """Question pool for MINI_CATALOG.

    A1.a: 1 negative + 2 achieved
    A1.b: 9 achieved
    A2.a: 1 negative + 2 partial + 3 achieved
    A2.c: no profile entry, 1 achieved
    C2.a: Not Achieved, 1 achieved
    """
    questions = [
        Question("A1.a-n1", "A1.a", "negative", "Board has no security direction"),
        Question("A1.a-y1", "A1.a", "achieved", "Board owns cyber risk"),
        Question("A1.a-y2", "A1.a", "achieved", "Security policy is board approved"),
    ]
    questions += [
        Question(f"A1.b-y{i}", "A1.b", "achieved", f"Role question {i}") for i in range(1, 10)
    ]
    questions += [
        Question("A2.a-n1", "A2.a", "negative", "Risk register is not maintained"),
        Question("A2.a-p1", "A2.a", "partial", "Risks are recorded"),
        Question("A2.a-p2", "A2.a", "partial", "Risks are reviewed"),
        Question("A2.a-y1", "A2.a", "achieved", "Risks are reviewed quarterly"),
        Question("A2.a-y2", "A2.a", "achieved", "Risk owners are assigned"),
        Question("A2.a-y3", "A2.a", "achieved", "Risk appetite is documented"),
        Question("A2.c-y1", "A2.c", "achieved", "Treatments are tracked"),
        Question("C2.a-y1", "C2.a", "achieved", "Threat feeds are consumed"),
    ]
    return questions


@pytest.fixture
def mini_framework():
    return framework_from_dict(MINI_CATALOG, source="mini")


@pytest.fixture
def mini_questions():
    return make_questions()


@pytest.fixture(scope="session")
def caf_framework():
    """Full NCSC CAF catalog shipped with the repo."""
    return load_framework(CATALOG_PATH)


@pytest.fixture
def test_config():
    config = {k: dict(v) for k, v in DEFAULTS.items()}
    config["catalog"] = {"path": str(CATALOG_PATH)}
    return config


@pytest.fixture
def app(test_config, mini_framework):
    from caftrack.dashboard.app import create_app
    application = create_app(config=test_config, framework=mini_framework)
    application.config["TESTING"] = True
    return application


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def sample_risk():
    return RiskRecord(
        id="risk-001",
        impact_type="Financial",
        statement=(
            "It is Possible that a phishing campaign harvests credentials "
            "impacting the Confidentiality of Payroll, resulting in a system "
            "impact of data loss, and a Major Financial impact of fraud losses"
        ),
        base_likelihood="Possible",
        base_impact="Major",
    )
