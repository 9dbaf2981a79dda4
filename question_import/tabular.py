"""
Tabular Row Parser
==================
Maps spreadsheet / CSV rows to questions.

Column roles are inferred from the header row (case-insensitive substring
match). Supported option layouts:
    - one column per option ("Option A", "Option B", ... or "A", "B", ...)
    - a single "options" column holding "A: foo | B: bar | C: baz"
Where a column is missing, the text field extractors are run on the
question cell instead.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Optional, Sequence

from pydantic import ValidationError

from .errors import QuestionParseError
from .extractors import (
    clean_question_text,
    extract_correct_answers,
    extract_explanation,
    extract_options,
    split_stem_and_options,
)
from .models import (
    MAX_EXPLANATION_LENGTH,
    MIN_STEM_LENGTH,
    OPTION_LETTERS,
    ParsedQuestion,
    QuestionOption,
    describe_validation_error,
)
from .normalize import (
    detect_question_type,
    normalize_category,
    normalize_difficulty,
)

logger = logging.getLogger(__name__)

# "A: text", "b) text", "C. text" at the start of a pipe-separated part
_OPTION_PREFIX = re.compile(r"^[A-Fa-f]\s*[:).]\s*")
_ANSWER_SEPARATORS = re.compile(r"[,;\s]+")
# "question_id", "Question No.", "question #"
_IDENTIFIER_HEADER = re.compile(r"(?:\bid|_id|\bno\.?|number|#)$")


@dataclass
class ColumnMap:
    """Column index for each role; None when the header has no such column."""
    question: Optional[int] = None
    options: list[int] = field(default_factory=list)
    options_list: Optional[int] = None
    answer: Optional[int] = None
    explanation: Optional[int] = None
    category: Optional[int] = None
    difficulty: Optional[int] = None

    @classmethod
    def from_headers(cls, headers: Sequence[str]) -> "ColumnMap":
        names = [str(h).strip().lower() for h in headers]

        option_columns = [
            idx for idx, name in enumerate(names)
            if "option" in name or name in ("a", "b", "c", "d", "e", "f")
        ]

        def first(*tokens: str) -> Optional[int]:
            for idx, name in enumerate(names):
                if idx in option_columns:
                    continue
                if any(token in name for token in tokens):
                    return idx
            return None

        columns = cls(
            question=_question_column(names),
            answer=first("answer", "correct"),
            explanation=first("explanation", "rationale"),
            category=first("category"),
            difficulty=first("difficulty"),
        )

        if len(option_columns) >= 2:
            columns.options = option_columns[:len(OPTION_LETTERS)]
        elif option_columns:
            columns.options_list = option_columns[0]

        logger.debug(f"Inferred column roles: {columns}")
        return columns


def _question_column(names: Sequence[str]) -> Optional[int]:
    """An exact "question" header wins over "Question Text" or "question_id"."""
    if "question" in names:
        return names.index("question")
    for idx, name in enumerate(names):
        if "question" in name and not _IDENTIFIER_HEADER.search(name):
            return idx
    if "text" in names:
        return names.index("text")
    return None


def is_blank_row(row: Sequence[str]) -> bool:
    return not any(str(cell or "").strip() for cell in row)


class TabularRowParser:
    """Turns one data row into a ParsedQuestion or raises QuestionParseError."""

    def __init__(
        self,
        columns: ColumnMap,
        max_explanation_length: int = MAX_EXPLANATION_LENGTH,
        min_stem_length: int = MIN_STEM_LENGTH,
    ):
        self.columns = columns
        self.min_stem_length = min_stem_length
        self.max_explanation_length = max_explanation_length

    @classmethod
    def from_header(cls, header: Sequence[str], **kwargs) -> "TabularRowParser":
        return cls(ColumnMap.from_headers(header), **kwargs)

    def parse_row(self, row: Sequence[str]) -> ParsedQuestion:
        raw_stem = self._cell(row, self.columns.question)
        if not raw_stem:
            raise QuestionParseError("Could not locate question text")

        stem_source = raw_stem
        options = self._options_from_columns(row)

        if len(options) < 2:
            # Options may be embedded in the question cell itself
            parts = split_stem_and_options(raw_stem)
            if parts:
                embedded = extract_options(parts[1])
                if len(embedded) >= 2:
                    options = embedded
                    stem_source = parts[0]

        if len(options) < 2:
            raise QuestionParseError("Could not find at least 2 options")

        option_ids = [opt.id for opt in options]
        correct_answers = self._answers_from_column(row, options)
        if not correct_answers:
            correct_answers = [
                a for a in extract_correct_answers(raw_stem) if a in option_ids
            ]
        if not correct_answers:
            raise QuestionParseError("Could not determine correct answer")

        stem = clean_question_text(stem_source)
        if not stem:
            raise QuestionParseError("Could not locate question text")
        if len(stem) < self.min_stem_length:
            raise QuestionParseError(
                f"Question text too short ({len(stem)} characters)"
            )

        explanation = (
            self._cell(row, self.columns.explanation)
            or extract_explanation(raw_stem, self.max_explanation_length)
        )

        try:
            return ParsedQuestion(
                text=stem,
                options=options,
                correct_answers=correct_answers,
                explanation=explanation[:self.max_explanation_length],
                category=normalize_category(
                    self._cell(row, self.columns.category)
                ),
                difficulty=normalize_difficulty(
                    self._cell(row, self.columns.difficulty)
                ),
                question_type=detect_question_type(stem, correct_answers),
            )
        except ValidationError as e:
            raise QuestionParseError(describe_validation_error(e)) from e

    # ─── Helpers ──────────────────────────────────────────────────────────

    @staticmethod
    def _cell(row: Sequence[str], idx: Optional[int]) -> str:
        if idx is None or idx >= len(row):
            return ""
        value = row[idx]
        return str(value).strip() if value is not None else ""

    def _options_from_columns(self, row: Sequence[str]) -> list[QuestionOption]:
        options: list[QuestionOption] = []

        if self.columns.options:
            for letter, idx in zip(OPTION_LETTERS, self.columns.options):
                text = self._cell(row, idx)
                if text:
                    options.append(QuestionOption(id=letter, text=text))
            return options

        if self.columns.options_list is not None:
            raw = self._cell(row, self.columns.options_list)
            parts = [p.strip() for p in raw.split("|") if p.strip()]
            for letter, part in zip(OPTION_LETTERS, parts):
                text = _OPTION_PREFIX.sub("", part).strip() or part
                options.append(QuestionOption(id=letter, text=text))

        return options

    def _answers_from_column(
        self, row: Sequence[str], options: list[QuestionOption]
    ) -> list[str]:
        """Accepts "B", "A,C", "2" (second option) and similar forms."""
        value = self._cell(row, self.columns.answer).upper()
        option_ids = [opt.id for opt in options]

        answers: list[str] = []
        for part in _ANSWER_SEPARATORS.split(value):
            if not part:
                continue
            if part in option_ids:
                answer = part
            elif part.isdigit() and 1 <= int(part) <= len(options):
                answer = options[int(part) - 1].id
            else:
                continue
            if answer not in answers:
                answers.append(answer)
        return answers
