#!/usr/bin/env python3
# CUI // SP-CTI
"""Shared schema models for CAFTRACK inputs and results.

Stdlib dataclass models shared by the scoring engine, report builders,
CLI tools and the dashboard API. Results serialize via to_dict().
"""

from caftrack.schemas.compliance import (
    AchievementLevel,
    AggregateResult,
    AssuranceProfile,
    OutcomeResult,
    Question,
    Response,
    ScoreStatus,
    Section,
)
from caftrack.schemas.risk import RiskClassification, RiskRecord

__all__ = [
    "AchievementLevel",
    "AggregateResult",
    "AssuranceProfile",
    "OutcomeResult",
    "Question",
    "Response",
    "ScoreStatus",
    "Section",
    "RiskClassification",
    "RiskRecord",
]
