#!/usr/bin/env python3
# CUI // SP-CTI
"""Risk register schema models.

RiskRecord keeps base and modified assessments side by side; the effective
value on each axis is the modified one when present.
"""

from dataclasses import dataclass, asdict
from typing import Optional


@dataclass(frozen=True)
class RiskRecord:
    """Single risk register entry."""

    id: str
    impact_type: str
    statement: str
    base_likelihood: Optional[str] = None
    base_impact: Optional[str] = None
    modified_likelihood: Optional[str] = None
    modified_impact: Optional[str] = None
    likelihood_justification: str = ""
    impact_justification: str = ""
    remediation_plan: str = ""

    @property
    def effective_likelihood(self) -> Optional[str]:
        return self.modified_likelihood or self.base_likelihood or None

    @property
    def effective_impact(self) -> Optional[str]:
        return self.modified_impact or self.base_impact or None

    @property
    def is_modified(self) -> bool:
        return bool(self.modified_likelihood or self.modified_impact)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "RiskRecord":
        known = {f.name for f in cls.__dataclass_fields__.values()}
        values = {k: v for k, v in data.items() if k in known}
        if "statement" not in values and "risk_statement" in data:
            values["statement"] = data["risk_statement"]
        for text_field in ("likelihood_justification", "impact_justification",
                           "remediation_plan"):
            if values.get(text_field) is None:
                values.pop(text_field, None)
        return cls(**values)


@dataclass(frozen=True)
class RiskClassification:
    """Tolerance verdict for one risk against the project appetite."""

    risk: RiskRecord
    rating: str
    in_tolerance: bool
    effective_likelihood: Optional[str] = None
    effective_impact: Optional[str] = None
    rating_value: int = 0
    appetite_level: Optional[str] = None
    reason: str = ""

    @property
    def status_label(self) -> str:
        return "In Tolerance" if self.in_tolerance else "Out of Tolerance"

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status_label
        return data
