#!/usr/bin/env python3
# CUI // SP-CTI
"""Roll CAF outcome results up to principle, objective and overall level.

The same rule applies at every level: drop NOT_APPLICABLE outcomes, sum
total/answered/compliant, OR the failure flags, and compute the percentage
from the sums. Child percentages are never averaged, so an outcome with nine
questions weighs nine times as much as an outcome with one.
"""

import logging
from typing import Dict, Iterable, List, Optional

from caftrack.compliance.caf_framework import CafFramework, ProfileRequirementResolver
from caftrack.compliance.outcome_scorer import (
    QuestionBank,
    index_responses,
    round_half_up,
    score_outcome,
)
from caftrack.schemas.compliance import AggregateResult, OutcomeResult, ScoreStatus

logger = logging.getLogger("caftrack.compliance.aggregation")


def aggregate_results(
    results: Iterable[OutcomeResult],
    scope: str = "custom",
    scope_id: str = "",
) -> AggregateResult:
    """Combine already-scored outcome results into one aggregate."""
    applicable = [r for r in results if r.is_applicable]
    outcome_ids = [r.outcome_id for r in applicable]

    if not applicable:
        return AggregateResult(
            scope=scope, scope_id=scope_id, status=ScoreStatus.NOT_APPLICABLE,
        )

    total = sum(r.total for r in applicable)
    answered = sum(r.answered for r in applicable)
    compliant = sum(r.compliant for r in applicable)
    has_failed = any(r.has_failed for r in applicable)
    percentage = round_half_up(compliant / total * 100) if total > 0 else 0

    return AggregateResult(
        scope=scope,
        scope_id=scope_id,
        status=ScoreStatus.NOT_COMPLETE if answered == 0 else ScoreStatus.SCORED,
        total=total,
        answered=answered,
        compliant=compliant,
        percentage=percentage,
        has_failed=has_failed,
        outcome_ids=outcome_ids,
    )


def aggregate_outcomes(
    outcome_ids: Iterable[str],
    profile,
    questions,
    responses,
    resolver: ProfileRequirementResolver,
    scope: str = "custom",
    scope_id: str = "",
) -> AggregateResult:
    """Score the given outcomes and aggregate them in one call."""
    bank = questions if isinstance(questions, QuestionBank) else QuestionBank(questions)
    answers = index_responses(responses)
    return aggregate_results(
        (score_outcome(oid, profile, bank, answers, resolver) for oid in outcome_ids),
        scope=scope,
        scope_id=scope_id,
    )


class ComplianceAggregator:
    """Scores outcomes for one assessment and rolls them up the CAF hierarchy.

    Holds the inputs of a single assessment (framework, profile, questions,
    responses); outcome results are computed on construction so every level
    reads the same numbers.
    """

    def __init__(
        self,
        framework: CafFramework,
        profile,
        questions,
        responses,
        resolver: Optional[ProfileRequirementResolver] = None,
    ):
        self.framework = framework
        self.profile = profile
        self.resolver = resolver or framework.resolver()
        bank = questions if isinstance(questions, QuestionBank) else QuestionBank(questions)
        answers = index_responses(responses)
        self._outcomes: Dict[str, OutcomeResult] = {
            outcome_id: score_outcome(outcome_id, profile, bank, answers, self.resolver)
            for outcome_id in framework.outcome_ids
        }

    def outcome(self, outcome_id: str) -> OutcomeResult:
        if outcome_id not in self._outcomes:
            raise ValueError(
                f"Outcome '{outcome_id}' not found in {self.framework.framework_name}"
            )
        return self._outcomes[outcome_id]

    def outcomes(self, outcome_ids: Iterable[str]) -> List[OutcomeResult]:
        return [self.outcome(oid) for oid in outcome_ids]

    def aggregate(self, outcome_ids: Iterable[str], scope: str = "custom",
                  scope_id: str = "") -> AggregateResult:
        return aggregate_results(self.outcomes(outcome_ids), scope=scope, scope_id=scope_id)

    def principle(self, principle_id: str) -> AggregateResult:
        principle = self.framework.get_principle(principle_id)
        return self.aggregate(principle.outcome_ids, scope="principle", scope_id=principle_id)

    def objective(self, objective_id: str) -> AggregateResult:
        objective = self.framework.get_objective(objective_id)
        return self.aggregate(objective.outcome_ids, scope="objective", scope_id=objective_id)

    def overall(self) -> AggregateResult:
        result = self.aggregate(
            self.framework.outcome_ids, scope="overall",
            scope_id=self.framework.framework_id,
        )
        logger.info(
            "Overall %s: %s %d/%d compliant (%d answered)",
            self.framework.framework_id, result.status.value,
            result.compliant, result.total, result.answered,
        )
        return result
