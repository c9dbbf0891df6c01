#!/usr/bin/env python3
# CUI // SP-CTI
"""Risk tolerance evaluation against the project risk appetite.

A risk is in tolerance when the rating of its effective likelihood/impact
(modified value where tuned, else base) is no higher than the appetite set
for its impact type, with Very Low..Very High and Averse..Eager both mapped
to 1..5. The boundary is inclusive.

Anything that prevents a comparison (no impact type, no appetite for the
category, missing or off-scale likelihood/impact, off-scale appetite level)
classifies the risk as out of tolerance.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional

from caftrack.risk.risk_rating import (
    APPETITE_LEVELS,
    UNKNOWN_RATING,
    appetite_value,
    calculate_risk_rating,
    risk_rating_value,
)
from caftrack.schemas.risk import RiskClassification, RiskRecord

logger = logging.getLogger("caftrack.risk.risk_tolerance")

DEFAULT_CATEGORIES = ("Human", "Financial", "Reputational", "Delivery", "Compliance")


def effective_rating(risk: RiskRecord) -> str:
    return calculate_risk_rating(risk.effective_likelihood, risk.effective_impact)


def evaluate_tolerance(risk: RiskRecord, appetite: Mapping[str, Optional[str]]) -> RiskClassification:
    """Classify one risk against the appetite map {impact_type: level}."""
    likelihood = risk.effective_likelihood
    impact = risk.effective_impact
    rating = calculate_risk_rating(likelihood, impact)
    rating_val = risk_rating_value(rating)

    def _out(reason: str, level: Optional[str] = None) -> RiskClassification:
        logger.debug("Risk %s out of tolerance: %s", risk.id, reason)
        return RiskClassification(
            risk=risk, rating=rating, in_tolerance=False,
            effective_likelihood=likelihood, effective_impact=impact,
            rating_value=rating_val, appetite_level=level, reason=reason,
        )

    if not risk.impact_type:
        return _out("no impact type")
    level = (appetite or {}).get(risk.impact_type)
    if not level:
        return _out(f"no appetite set for {risk.impact_type}")
    if not likelihood or not impact:
        return _out("missing likelihood or impact", level)
    if rating == UNKNOWN_RATING:
        return _out(f"unrated likelihood/impact ({likelihood}, {impact})", level)
    level_val = appetite_value(level)
    if level_val == 0:
        logger.warning(
            "Unknown appetite level '%s' for %s (expected one of %s)",
            level, risk.impact_type, ", ".join(APPETITE_LEVELS),
        )
        return _out(f"unknown appetite level {level}", level)

    in_tolerance = rating_val <= level_val
    return RiskClassification(
        risk=risk,
        rating=rating,
        in_tolerance=in_tolerance,
        effective_likelihood=likelihood,
        effective_impact=impact,
        rating_value=rating_val,
        appetite_level=level,
        reason=(
            f"{rating} ({rating_val}) {'within' if in_tolerance else 'exceeds'} "
            f"{level} appetite ({level_val})"
        ),
    )


@dataclass
class ToleranceSplit:
    """Risks split by tolerance, each side ordered highest rating first."""

    classifications: List[RiskClassification] = field(default_factory=list)
    out_of_tolerance: List[RiskClassification] = field(default_factory=list)
    in_tolerance: List[RiskClassification] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "total": len(self.classifications),
            "out_of_tolerance_count": len(self.out_of_tolerance),
            "in_tolerance_count": len(self.in_tolerance),
            "out_of_tolerance": [c.to_dict() for c in self.out_of_tolerance],
            "in_tolerance": [c.to_dict() for c in self.in_tolerance],
        }


def classify_risks(risks: Iterable[RiskRecord], appetite: Mapping[str, Optional[str]]) -> ToleranceSplit:
    """Classify every risk and split by tolerance."""
    classifications = [evaluate_tolerance(r, appetite) for r in risks]

    def _by_rating(items):
        return sorted(items, key=lambda c: c.rating_value, reverse=True)

    split = ToleranceSplit(
        classifications=classifications,
        out_of_tolerance=_by_rating(c for c in classifications if not c.in_tolerance),
        in_tolerance=_by_rating(c for c in classifications if c.in_tolerance),
    )
    logger.info(
        "Classified %d risks: %d out of tolerance, %d in tolerance",
        len(classifications), len(split.out_of_tolerance), len(split.in_tolerance),
    )
    return split


def validate_appetite(appetite: Mapping[str, Optional[str]]) -> Dict[str, Optional[str]]:
    """Reject appetite levels that are not on the Averse..Eager scale."""
    if not isinstance(appetite, Mapping):
        raise ValueError("Risk appetite must be an object of {impact_type: level}")
    for category, level in appetite.items():
        if level is not None and level not in APPETITE_LEVELS:
            raise ValueError(
                f"Invalid appetite level '{level}' for {category}. "
                f"Expected one of: {', '.join(APPETITE_LEVELS)}"
            )
    return dict(appetite)


def is_appetite_complete(
    appetite: Mapping[str, Optional[str]],
    categories: Iterable[str] = DEFAULT_CATEGORIES,
) -> bool:
    """True when every expected category has an appetite level."""
    return all(appetite.get(category) for category in categories)
