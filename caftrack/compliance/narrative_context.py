#!/usr/bin/env python3
# CUI // SP-CTI
"""Compliance narrative context for a CAF outcome.

Prepares the deterministic material a narrative writer (human or LLM) needs
for one outcome: which negative indicators failed and a line-per-question
summary of answers, compliance and supporting evidence. Failed negative
indicators are reported on their own so a narrative can lead with them.
"""

import logging
from typing import Dict, List, Mapping, Optional

from caftrack.compliance.caf_framework import Outcome
from caftrack.compliance.outcome_scorer import QuestionBank, index_responses
from caftrack.schemas.compliance import Question

logger = logging.getLogger("caftrack.compliance.narrative_context")

NO_EVIDENCE = "No supporting evidence"


def _answer_label(value: Optional[bool]) -> str:
    if value is None:
        return "Not answered"
    return "Yes" if value else "No"


def _compliance_note(question: Question, value: Optional[bool]) -> str:
    if value is None:
        return ""
    if question.is_negative:
        if value:
            return "FAILED - Non-compliant - issue present"
        return "Compliant - issue not present"
    if value:
        return "Compliant - requirement met"
    return "Non-compliant - requirement not met"


def build_narrative_context(
    outcome: Outcome,
    questions,
    responses,
    evidence: Optional[Mapping[str, List[str]]] = None,
) -> Dict:
    """Collect narrative material for one outcome.

    Args:
        outcome: The CAF outcome.
        questions: Iterable of Question or a QuestionBank.
        responses: {question_id: bool | None} or iterable of Response.
        evidence: Optional {question_id: [evidence document names]}.

    Returns:
        Dict with outcome fields, has_failed, failed_negative_indicators and
        a list of per-question entries with a rendered summary line.
    """
    bank = questions if isinstance(questions, QuestionBank) else QuestionBank(questions)
    answers = index_responses(responses)
    evidence = evidence or {}

    entries = []
    failed = []
    for question in bank.outcome_questions(outcome.id):
        value = answers.get(question.id)
        is_negative = question.is_negative
        if is_negative and value is True:
            failed.append(question.text)
        docs = list(evidence.get(question.id, []))
        note = _compliance_note(question, value)
        marker = "[NEGATIVE INDICATOR]" if is_negative else "[POSITIVE INDICATOR]"
        summary = (
            f"{marker} Question: {question.text}\n"
            f"Answer: {_answer_label(value)}{f' ({note})' if note else ''}\n"
            f"Supporting Evidence: {', '.join(docs) if docs else NO_EVIDENCE}"
        )
        entries.append({
            "question_id": question.id,
            "section": question.section.value,
            "is_negative_indicator": is_negative,
            "answer": _answer_label(value),
            "compliance": note,
            "evidence": docs,
            "summary": summary,
        })

    if failed:
        logger.debug("Outcome %s has %d failed negative indicators", outcome.id, len(failed))

    return {
        "outcome_id": outcome.id,
        "outcome_name": outcome.name,
        "outcome_description": outcome.description,
        "has_failed": bool(failed),
        "failed_negative_indicators": failed,
        "questions": entries,
        "assessment_summary": "\n\n".join(e["summary"] for e in entries),
    }
