"""
Block Parser
============
Applies the field extractors to one free-text question block.
"""

from __future__ import annotations

import logging

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
    ParsedQuestion,
    describe_validation_error,
)
from .normalize import detect_question_type

logger = logging.getLogger(__name__)


class QuestionBlockParser:
    """
    Turns a block into a ParsedQuestion or raises QuestionParseError.

    When no answer marker is found the first option is used as the correct
    answer, unless ``default_to_first_option`` is disabled.
    """

    def __init__(
        self,
        min_stem_length: int = MIN_STEM_LENGTH,
        max_explanation_length: int = MAX_EXPLANATION_LENGTH,
        default_to_first_option: bool = True,
    ):
        self.min_stem_length = min_stem_length
        self.max_explanation_length = max_explanation_length
        self.default_to_first_option = default_to_first_option

    def parse(self, block: str) -> ParsedQuestion:
        block = block.strip()

        parts = split_stem_and_options(block)
        if parts is None:
            raise QuestionParseError("Could not locate answer options")
        stem_text, options_text = parts

        stem = clean_question_text(stem_text)
        if len(stem) < self.min_stem_length:
            raise QuestionParseError(
                f"Question text too short ({len(stem)} characters)"
            )

        options = extract_options(options_text or block)
        if len(options) < 2:
            raise QuestionParseError("Found fewer than 2 options")

        correct_answers = extract_correct_answers(block)
        if not correct_answers:
            if not self.default_to_first_option:
                raise QuestionParseError("Could not determine correct answer")
            logger.debug(
                f"No answer marker in block, defaulting to {options[0].id}: "
                f"{stem[:60]!r}"
            )
            correct_answers = [options[0].id]

        try:
            return ParsedQuestion(
                text=stem,
                options=options,
                correct_answers=correct_answers,
                explanation=extract_explanation(
                    block, self.max_explanation_length
                ),
                question_type=detect_question_type(stem, correct_answers),
            )
        except ValidationError as e:
            raise QuestionParseError(describe_validation_error(e)) from e
