"""
Data Models
===========
Pydantic models for structured question import output.
All models serialize to plain JSON; ``model_dump(by_alias=True)`` yields the
camelCase shape consumed by the import service.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    computed_field,
    model_validator,
)
from pydantic.alias_generators import to_camel

OPTION_LETTERS = ("A", "B", "C", "D", "E", "F")

MIN_STEM_LENGTH = 10
MAX_EXPLANATION_LENGTH = 1000


# ─── Enums ────────────────────────────────────────────────────────────────────


class Category(str, Enum):
    """Canonical client-needs categories."""
    MANAGEMENT_OF_CARE = "management_of_care"
    SAFETY_INFECTION_CONTROL = "safety_infection_control"
    HEALTH_PROMOTION = "health_promotion"
    PSYCHOSOCIAL_INTEGRITY = "psychosocial_integrity"
    BASIC_CARE_COMFORT = "basic_care_comfort"
    PHARMACOLOGICAL_THERAPIES = "pharmacological_therapies"
    RISK_REDUCTION = "risk_reduction"
    PHYSIOLOGICAL_ADAPTATION = "physiological_adaptation"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class QuestionType(str, Enum):
    """Supported question formats."""
    MULTIPLE_CHOICE = "multiple_choice"
    SELECT_ALL = "select_all"
    ORDERED_RESPONSE = "ordered_response"
    HOT_SPOT = "hot_spot"
    CLOZE_DROPDOWN = "cloze_dropdown"
    MATRIX = "matrix"
    HIGHLIGHT = "highlight"
    BOW_TIE = "bow_tie"
    CASE_STUDY = "case_study"


# ─── Question Models ─────────────────────────────────────────────────────────


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class QuestionOption(_WireModel):
    """A single lettered answer option."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(pattern=r"^[A-F]$")
    text: str = Field(min_length=1)


class ParsedQuestion(_WireModel):
    """
    A structurally valid multiple-choice question.
    Frozen: the orchestrator attaches ``source`` with ``model_copy``.
    """
    model_config = ConfigDict(frozen=True)

    text: str
    options: list[QuestionOption]
    correct_answers: list[str]
    explanation: str = ""
    category: Category = Category.MANAGEMENT_OF_CARE
    difficulty: Difficulty = Difficulty.MEDIUM
    question_type: QuestionType = QuestionType.MULTIPLE_CHOICE
    source: Optional[str] = None

    @model_validator(mode="after")
    def _check_structure(self) -> "ParsedQuestion":
        if len(self.options) < 2:
            raise ValueError("Question needs at least 2 options")

        ids = [opt.id for opt in self.options]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Duplicate option ids: {', '.join(ids)}")

        if not self.correct_answers:
            raise ValueError("Question needs at least 1 correct answer")

        unknown = [a for a in self.correct_answers if a not in ids]
        if unknown:
            raise ValueError(
                f"Correct answer {', '.join(unknown)} does not match any option"
            )

        if len(set(self.correct_answers)) != len(self.correct_answers):
            raise ValueError("Correct answers contain repeats")

        return self


# ─── Parse Result ────────────────────────────────────────────────────────────


class ParseResult(_WireModel):
    """
    Complete output of one pipeline invocation.
    This is the top-level JSON structure handed to the import service.
    """
    questions: list[ParsedQuestion] = Field(default_factory=list)
    duplicates_removed: int = Field(default=0, ge=0)
    errors: list[str] = Field(default_factory=list)

    @computed_field(alias="totalFound")
    @property
    def total_found(self) -> int:
        return len(self.questions)


def describe_validation_error(exc: ValidationError) -> str:
    """First human-readable message of a pydantic ValidationError."""
    errors = exc.errors()
    if not errors:
        return str(exc)
    message = errors[0].get("msg", str(exc))
    # pydantic prefixes messages raised from validators
    return message.removeprefix("Value error, ")
