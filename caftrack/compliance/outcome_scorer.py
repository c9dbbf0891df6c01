#!/usr/bin/env python3
# CUI // SP-CTI
"""CAF outcome compliance scorer.

Scores one CAF outcome from yes/no/unanswered indicator responses:

1. The GovAssure profile picks the required level. Outcomes the profile marks
   "Not Achieved", or that have no profile entry, are NOT_APPLICABLE.
2. Required "Achieved" scores the achieved indicators, anything else the
   partially-achieved indicators. Negative indicators (is_negative) are
   always included, whatever section they were filed under.
3. A single negative indicator answered Yes fails the outcome: compliant and
   percentage are forced to 0 regardless of the other answers.
4. Otherwise percentage = compliant / total questions, where a negative
   indicator is compliant when answered No and a primary indicator when
   answered Yes. Unanswered questions count towards total only.

An outcome with nothing answered is NOT_COMPLETE, never 0%.
"""

import logging
import math
from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from caftrack.compliance.caf_framework import ProfileRequirementResolver
from caftrack.schemas.compliance import (
    AchievementLevel,
    OutcomeResult,
    Question,
    Response,
    ScoreStatus,
    Section,
)

logger = logging.getLogger("caftrack.compliance.outcome_scorer")

ResponseInput = Union[Mapping[str, Optional[bool]], Iterable[Response]]


def round_half_up(value: float) -> int:
    """Round a non-negative value with .5 going up (12.5 -> 13)."""
    return int(math.floor(value + 0.5))


def index_responses(responses: ResponseInput) -> Dict[str, Optional[bool]]:
    """Normalize responses to {question_id: True | False | None}."""
    if isinstance(responses, Mapping):
        indexed = {}
        for question_id, value in responses.items():
            indexed[question_id] = Response(question_id, value).value
        return indexed
    return {r.question_id: r.value for r in responses}


class QuestionBank:
    """Questions grouped by outcome and section for fast lookup."""

    def __init__(self, questions: Iterable[Question]):
        grouped: Dict[Tuple[str, Section], List[Question]] = defaultdict(list)
        for question in questions:
            grouped[(question.outcome_id, question.section)].append(question)
        self._grouped = dict(grouped)

    def for_outcome(self, outcome_id: str, section: Section) -> List[Question]:
        return list(self._grouped.get((outcome_id, section), []))

    def outcome_questions(self, outcome_id: str) -> List[Question]:
        questions = []
        for section in Section:
            questions.extend(self.for_outcome(outcome_id, section))
        return questions


def _as_bank(questions) -> QuestionBank:
    return questions if isinstance(questions, QuestionBank) else QuestionBank(questions)


def primary_section(required_level: str) -> Section:
    if required_level == AchievementLevel.ACHIEVED.value:
        return Section.ACHIEVED
    return Section.PARTIAL


def score_outcome(
    outcome_id: str,
    profile,
    questions,
    responses: ResponseInput,
    resolver: ProfileRequirementResolver,
) -> OutcomeResult:
    """Score one outcome.

    Args:
        outcome_id: CAF outcome id (e.g. "B2.a").
        profile: "Baseline" / "Enhanced" (or AssuranceProfile).
        questions: Iterable of Question or a prepared QuestionBank.
        responses: {question_id: bool | None} or iterable of Response.
        resolver: Profile requirement table.

    Returns:
        OutcomeResult tagged NOT_APPLICABLE, NOT_COMPLETE or SCORED.
    """
    required_level = resolver.required_level(outcome_id, profile)
    if required_level is None or required_level == AchievementLevel.NOT_ACHIEVED.value:
        logger.debug(
            "Outcome %s not applicable (required level: %s)", outcome_id, required_level
        )
        return OutcomeResult(
            outcome_id=outcome_id,
            status=ScoreStatus.NOT_APPLICABLE,
            required_level=required_level,
        )

    bank = _as_bank(questions)
    answers = index_responses(responses)

    negative_questions = [q for q in bank.outcome_questions(outcome_id) if q.is_negative]
    primary_questions = [
        q for q in bank.for_outcome(outcome_id, primary_section(required_level))
        if not q.is_negative
    ]
    all_questions = negative_questions + primary_questions

    has_failed = any(answers.get(q.id) is True for q in negative_questions)

    answered = 0
    compliant = 0
    for question in all_questions:
        value = answers.get(question.id)
        if value is None:
            continue
        answered += 1
        if question.is_negative:
            compliant += 1 if value is False else 0
        else:
            compliant += 1 if value is True else 0

    total = len(all_questions)
    if has_failed:
        compliant = 0
        percentage = 0
    else:
        percentage = round_half_up(compliant / total * 100) if total > 0 else 0

    status = ScoreStatus.NOT_COMPLETE if answered == 0 else ScoreStatus.SCORED
    if has_failed:
        logger.debug("Outcome %s failed on a negative indicator", outcome_id)

    return OutcomeResult(
        outcome_id=outcome_id,
        status=status,
        total=total,
        answered=answered,
        compliant=compliant,
        percentage=percentage,
        required_level=required_level,
        has_failed=has_failed,
    )
