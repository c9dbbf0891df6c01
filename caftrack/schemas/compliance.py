#!/usr/bin/env python3
# CUI // SP-CTI
"""Compliance questionnaire and scoring schema models.

Question/Response are the records supplied by the assessment collaborator.
OutcomeResult/AggregateResult are what the scoring engine hands back; both
carry an explicit ScoreStatus so that "no data" never reads as 0%.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import List, Optional


class Section(str, Enum):
    """Question pool a CAF indicator belongs to."""

    ACHIEVED = "achieved"
    PARTIAL = "partial"
    NEGATIVE = "negative"


class AchievementLevel(str, Enum):
    """Required achievement level for an outcome under a profile."""

    ACHIEVED = "Achieved"
    PARTIALLY_ACHIEVED = "Partially Achieved"
    NOT_ACHIEVED = "Not Achieved"


class AssuranceProfile(str, Enum):
    """GovAssure profile selecting the required level per outcome."""

    BASELINE = "Baseline"
    ENHANCED = "Enhanced"

    @classmethod
    def parse(cls, value: Optional[str]) -> "AssuranceProfile":
        """Resolve a profile name. None or empty means Baseline."""
        if value is None or value == "":
            return cls.BASELINE
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value.lower() == str(value).strip().lower():
                return member
        raise ValueError(
            f"Unknown assurance profile '{value}'. "
            f"Expected one of: {', '.join(m.value for m in cls)}"
        )


class ScoreStatus(str, Enum):
    """Tagged state of a compliance result."""

    NOT_APPLICABLE = "not_applicable"  # excluded from all aggregation
    NOT_COMPLETE = "not_complete"      # applicable, nothing answered yet
    SCORED = "scored"


@dataclass(frozen=True)
class Question:
    """Single CAF indicator question.

    is_negative decides how an answer scores (Yes fails the outcome) and
    defaults to section == negative. section only picks the achieved or
    partial pool a positive indicator belongs to.
    """

    id: str
    outcome_id: str
    section: Section
    text: str = ""
    is_negative: Optional[bool] = None

    def __post_init__(self):
        object.__setattr__(self, "section", Section(self.section))
        if self.is_negative is None:
            object.__setattr__(
                self, "is_negative", self.section == Section.NEGATIVE
            )

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Question":
        if not isinstance(data, dict):
            raise ValueError(f"Question entry must be an object, got {type(data).__name__}")
        missing = [k for k in ("id", "outcome_id", "section") if k not in data]
        if missing:
            raise ValueError(f"Question is missing {', '.join(missing)}: {data!r}")
        known = {f.name for f in cls.__dataclass_fields__.values()}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass(frozen=True)
class Response:
    """Yes/No/unanswered response to a question. value None = unanswered."""

    question_id: str
    value: Optional[bool] = None

    def __post_init__(self):
        if self.value is not None and not isinstance(self.value, bool):
            raise ValueError(
                f"Response to '{self.question_id}' must be true, false or null, "
                f"got {self.value!r}"
            )

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Response":
        if not isinstance(data, dict):
            raise ValueError(f"Response entry must be an object, got {type(data).__name__}")
        if "question_id" not in data:
            raise ValueError(f"Response is missing 'question_id': {data!r}")
        value = data.get("value", data.get("response"))
        return cls(question_id=data["question_id"], value=value)


@dataclass(frozen=True)
class OutcomeResult:
    """Compliance result for one CAF outcome."""

    outcome_id: str
    status: ScoreStatus
    total: int = 0
    answered: int = 0
    compliant: int = 0
    percentage: int = 0
    required_level: Optional[str] = None
    has_failed: bool = False

    @property
    def is_applicable(self) -> bool:
        return self.status != ScoreStatus.NOT_APPLICABLE

    @property
    def display_percentage(self) -> Optional[int]:
        """Percentage for display, None unless the outcome was actually scored."""
        return self.percentage if self.status == ScoreStatus.SCORED else None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["display_percentage"] = self.display_percentage
        return data


@dataclass(frozen=True)
class AggregateResult:
    """Rolled-up compliance for a principle, objective or the whole framework."""

    scope: str  # principle, objective, overall
    scope_id: str
    status: ScoreStatus
    total: int = 0
    answered: int = 0
    compliant: int = 0
    percentage: int = 0
    has_failed: bool = False
    outcome_ids: List[str] = field(default_factory=list)

    @property
    def is_applicable(self) -> bool:
        return self.status != ScoreStatus.NOT_APPLICABLE

    @property
    def display_percentage(self) -> Optional[int]:
        return self.percentage if self.status == ScoreStatus.SCORED else None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["display_percentage"] = self.display_percentage
        return data
