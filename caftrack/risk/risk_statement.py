#!/usr/bin/env python3
# CUI // SP-CTI
"""Risk statements and the risk record lifecycle.

New statements are rendered from a RiskStatementTemplate, so likelihood and
impact live on the record as data and the prose is derived from them.

Records are immutable. Every lifecycle operation returns a new record:

    create_risk           base likelihood/impact only
    tune_risk             adds modified likelihood/impact, base untouched
    edit_base_assessment  new base values, statement phrases swapped in place
    remove_risk           collection without the record

edit_base_assessment only touches the "It is <likelihood> that" and
"and a <impact> <type> impact of" phrases for the record's *current* base
values; every other character of the statement is preserved. If either
phrase cannot be found the edit raises StatementEditError and the caller
keeps the original record.
"""

import logging
import re
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional

from caftrack.resilience.errors import RiskValidationError, StatementEditError
from caftrack.risk.risk_rating import (
    IMPACT_LEVELS,
    LIKELIHOOD_LEVELS,
    is_valid_impact,
    is_valid_likelihood,
)
from caftrack.schemas.risk import RiskRecord

logger = logging.getLogger("caftrack.risk.risk_statement")

RISK_KINDS = ("Threat Based", "Compliance Based", "Other")

# Threat statements carry their own CIANA clause; the risk statement supplies it.
_THREAT_CIANA_CLAUSE = re.compile(r"\s+impacting\s+\w+\s+in order to")


def _check_likelihood(value: Optional[str], field_name: str) -> None:
    if not is_valid_likelihood(value):
        raise RiskValidationError(
            f"Invalid {field_name} '{value}'. Expected one of: {', '.join(LIKELIHOOD_LEVELS)}",
            field=field_name,
        )


def _check_impact(value: Optional[str], field_name: str) -> None:
    if not is_valid_impact(value):
        raise RiskValidationError(
            f"Invalid {field_name} '{value}'. Expected one of: {', '.join(IMPACT_LEVELS)}",
            field=field_name,
        )


@dataclass(frozen=True)
class RiskStatementTemplate:
    """Structured risk statement; render() produces the prose."""

    kind: str
    likelihood: str
    impact: str
    impact_type: str
    system: str
    system_impact: str
    business_impact: str
    event: str = ""
    ciana: str = ""
    obligation: str = ""

    def _required(self) -> List[str]:
        names = ["likelihood", "impact", "impact_type", "system", "system_impact",
                 "business_impact"]
        if self.kind == "Threat Based":
            names += ["event", "ciana"]
        elif self.kind == "Compliance Based":
            names += ["obligation"]
        else:
            names += ["event"]
        return names

    def validate(self) -> None:
        if self.kind not in RISK_KINDS:
            raise RiskValidationError(
                f"Unknown risk kind '{self.kind}'. Expected one of: {', '.join(RISK_KINDS)}",
                field="kind",
            )
        missing = [n for n in self._required() if not str(getattr(self, n) or "").strip()]
        if missing:
            raise RiskValidationError(
                f"Complete all fields to generate a risk statement (missing: {', '.join(missing)})",
                field=missing[0],
            )
        _check_likelihood(self.likelihood, "likelihood")
        _check_impact(self.impact, "impact")

    def render(self) -> str:
        self.validate()
        tail = (
            f"resulting in a system impact {self.system_impact.strip()}, "
            f"and a {self.impact} {self.impact_type} impact of {self.business_impact}"
        )
        if self.kind == "Threat Based":
            threat = _THREAT_CIANA_CLAUSE.sub(" in order to", self.event)
            return (
                f"It is {self.likelihood} that {threat} impacting the {self.ciana} "
                f"of {self.system}, {tail}"
            )
        if self.kind == "Compliance Based":
            return (
                f"It is {self.likelihood} that non-compliance with {self.obligation} "
                f"occurs for {self.system}, {tail}"
            )
        return f"It is {self.likelihood} that {self.event} of {self.system}, {tail}"


def create_risk(
    risk_id: str,
    impact_type: str,
    base_likelihood: str,
    base_impact: str,
    statement: Optional[str] = None,
    template: Optional[RiskStatementTemplate] = None,
    remediation_plan: str = "",
) -> RiskRecord:
    """Create a risk with base values only.

    Either pass statement text or a template; a template's likelihood, impact
    and impact type must agree with the base values.
    """
    _check_likelihood(base_likelihood, "base_likelihood")
    _check_impact(base_impact, "base_impact")
    if template is not None:
        if (template.likelihood, template.impact, template.impact_type) != (
            base_likelihood, base_impact, impact_type
        ):
            raise RiskValidationError(
                "Template likelihood/impact/impact type must match the base assessment",
                field="template",
            )
        statement = template.render()
    if not statement or not statement.strip():
        raise RiskValidationError("Risk statement is required", field="statement")
    return RiskRecord(
        id=risk_id,
        impact_type=impact_type,
        statement=statement.strip(),
        base_likelihood=base_likelihood,
        base_impact=base_impact,
        remediation_plan=remediation_plan,
    )


def tune_risk(
    risk: RiskRecord,
    likelihood: str,
    impact: str,
    likelihood_justification: str = "",
    impact_justification: str = "",
) -> RiskRecord:
    """Record a modified (post-control) assessment; base values are kept.

    A justification is required for each axis whose value changes from the
    risk's current effective value.
    """
    _check_likelihood(likelihood, "modified_likelihood")
    _check_impact(impact, "modified_impact")
    likelihood_justification = (likelihood_justification or "").strip()
    impact_justification = (impact_justification or "").strip()

    if likelihood != risk.effective_likelihood and not likelihood_justification:
        raise RiskValidationError(
            "Likelihood justification is required when changing the likelihood value",
            field="likelihood_justification",
        )
    if impact != risk.effective_impact and not impact_justification:
        raise RiskValidationError(
            "Impact justification is required when changing the impact value",
            field="impact_justification",
        )

    logger.debug(
        "Tuned risk %s: %s/%s -> %s/%s", risk.id,
        risk.effective_likelihood, risk.effective_impact, likelihood, impact,
    )
    return replace(
        risk,
        modified_likelihood=likelihood,
        modified_impact=impact,
        likelihood_justification=likelihood_justification or risk.likelihood_justification,
        impact_justification=impact_justification or risk.impact_justification,
    )


def substitute_assessment_phrases(
    statement: str,
    old_likelihood: str,
    old_impact: str,
    new_likelihood: str,
    new_impact: str,
    risk_id: str = "",
    impact_type: str = "",
) -> str:
    """Swap the likelihood and impact phrases in statement text.

    Only the first "It is <old_likelihood> that" and the last
    "and a <old_impact> <impact_type> impact of" are rewritten. Without an
    impact type the phrase must have exactly one word between the impact
    level and "impact of".
    """
    type_pattern = re.escape(impact_type) if impact_type else r"\S+"
    likelihood_re = re.compile(r"\b(It is )" + re.escape(old_likelihood) + r"(?=\s+that\b)",
                               re.IGNORECASE)
    impact_re = re.compile(
        r"\b(and a )" + re.escape(old_impact) + r"(?=\s+" + type_pattern + r"\s+impact of\b)",
        re.IGNORECASE,
    )

    match = likelihood_re.search(statement)
    if match is None:
        raise StatementEditError(
            f"Statement does not contain 'It is {old_likelihood} that'", risk_id=risk_id
        )
    updated = statement[:match.start()] + match.group(1) + new_likelihood + statement[match.end():]

    matches = list(impact_re.finditer(updated))
    match = matches[-1] if matches else None
    if match is None:
        raise StatementEditError(
            f"Statement does not contain 'and a {old_impact} ... impact of'", risk_id=risk_id
        )
    return updated[:match.start()] + match.group(1) + new_impact + updated[match.end():]


def edit_base_assessment(risk: RiskRecord, likelihood: str, impact: str) -> RiskRecord:
    """Change base likelihood/impact and regenerate the statement phrases.

    Modified values and justifications are carried over unchanged.
    """
    if not risk.base_likelihood or not risk.base_impact:
        raise RiskValidationError(
            f"Risk {risk.id} has no base assessment to edit", field="base_likelihood"
        )
    _check_likelihood(likelihood, "base_likelihood")
    _check_impact(impact, "base_impact")

    statement = substitute_assessment_phrases(
        risk.statement, risk.base_likelihood, risk.base_impact,
        likelihood, impact, risk_id=risk.id, impact_type=risk.impact_type,
    )
    logger.debug(
        "Edited base assessment of %s: %s/%s -> %s/%s", risk.id,
        risk.base_likelihood, risk.base_impact, likelihood, impact,
    )
    return replace(risk, base_likelihood=likelihood, base_impact=impact, statement=statement)


def remove_risk(risks: Iterable[RiskRecord], risk_id: str) -> List[RiskRecord]:
    """Return the collection without risk_id. KeyError if it is not present."""
    risks = list(risks)
    remaining = [r for r in risks if r.id != risk_id]
    if len(remaining) == len(risks):
        raise KeyError(risk_id)
    return remaining
