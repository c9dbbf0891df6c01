#!/usr/bin/env python3
# CUI // SP-CTI
"""Risk rating matrix.

Likelihood x impact lookup against the authored 5x5 table. The table is not
derived from a formula (Remote x Critical is Medium, not High), so it is kept
verbatim. Pairs outside the table rate as "Unknown"; lookups never raise.
"""

import copy
from typing import Dict, Optional

LIKELIHOOD_LEVELS = ("Remote", "Unlikely", "Possible", "Likely", "Very Likely")
IMPACT_LEVELS = ("Minor", "Moderate", "Major", "Significant", "Critical")
RISK_RATINGS = ("Very Low Risk", "Low Risk", "Medium Risk", "High Risk", "Very High Risk")
APPETITE_LEVELS = ("Averse", "Minimal", "Cautious", "Open", "Eager")

UNKNOWN_RATING = "Unknown"

LIKELIHOOD_ORDER = {level: i + 1 for i, level in enumerate(LIKELIHOOD_LEVELS)}
IMPACT_ORDER = {level: i + 1 for i, level in enumerate(IMPACT_LEVELS)}
RATING_ORDER = {rating: i + 1 for i, rating in enumerate(RISK_RATINGS)}
APPETITE_ORDER = {level: i + 1 for i, level in enumerate(APPETITE_LEVELS)}

RISK_MATRIX: Dict[str, Dict[str, str]] = {
    "Remote": {
        "Minor": "Very Low Risk",
        "Moderate": "Very Low Risk",
        "Major": "Low Risk",
        "Significant": "Low Risk",
        "Critical": "Medium Risk",
    },
    "Unlikely": {
        "Minor": "Very Low Risk",
        "Moderate": "Low Risk",
        "Major": "Low Risk",
        "Significant": "Medium Risk",
        "Critical": "Medium Risk",
    },
    "Possible": {
        "Minor": "Low Risk",
        "Moderate": "Low Risk",
        "Major": "Medium Risk",
        "Significant": "Medium Risk",
        "Critical": "High Risk",
    },
    "Likely": {
        "Minor": "Low Risk",
        "Moderate": "Medium Risk",
        "Major": "Medium Risk",
        "Significant": "High Risk",
        "Critical": "Very High Risk",
    },
    "Very Likely": {
        "Minor": "Low Risk",
        "Moderate": "Medium Risk",
        "Major": "High Risk",
        "Significant": "Very High Risk",
        "Critical": "Very High Risk",
    },
}


def calculate_risk_rating(likelihood: Optional[str], impact: Optional[str]) -> str:
    """Rating for a likelihood/impact pair, or "Unknown" off the table."""
    row = RISK_MATRIX.get(likelihood) if isinstance(likelihood, str) else None
    if row is None or not isinstance(impact, str):
        return UNKNOWN_RATING
    return row.get(impact, UNKNOWN_RATING)


def risk_rating_value(rating: Optional[str]) -> int:
    """Very Low Risk..Very High Risk -> 1..5; anything else 0."""
    return RATING_ORDER.get(rating, 0) if isinstance(rating, str) else 0


def appetite_value(level: Optional[str]) -> int:
    """Averse..Eager -> 1..5; anything else 0."""
    return APPETITE_ORDER.get(level, 0) if isinstance(level, str) else 0


def is_valid_likelihood(value: Optional[str]) -> bool:
    return isinstance(value, str) and value in LIKELIHOOD_ORDER


def is_valid_impact(value: Optional[str]) -> bool:
    return isinstance(value, str) and value in IMPACT_ORDER


def rating_matrix() -> Dict:
    """Scales and matrix for heat-map rendering (a copy; callers may mutate it)."""
    return {
        "likelihood_levels": list(LIKELIHOOD_LEVELS),
        "impact_levels": list(IMPACT_LEVELS),
        "risk_ratings": list(RISK_RATINGS),
        "appetite_levels": list(APPETITE_LEVELS),
        "matrix": copy.deepcopy(RISK_MATRIX),
    }
