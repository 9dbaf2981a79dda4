"""
Field Extractors
================
Independent extraction rules applied to a question block (or to a stem cell
of a spreadsheet row). Each extractor is an ordered list of rules; a rule
either produces a value or returns None, and the first usable value wins.

    split_stem_and_options   block -> (stem, options region)
    extract_options          options region -> [QuestionOption]
    extract_correct_answers  block -> ["B", ...]
    extract_explanation      block -> explanation text
    clean_question_text      raw stem -> cleaned stem
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from .models import MAX_EXPLANATION_LENGTH, QuestionOption

logger = logging.getLogger(__name__)


# ─── Rule Base ────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ExtractionRule:
    """A named pattern with try-and-maybe-produce semantics."""
    name: str
    pattern: re.Pattern

    def try_extract(self, text: str) -> Optional[Any]:
        raise NotImplementedError


def run_rules(rules: Sequence[ExtractionRule], text: str) -> Optional[Any]:
    """Return the value of the first rule that produces one."""
    for rule in rules:
        value = rule.try_extract(text)
        if value:
            logger.debug(f"Rule '{rule.name}' matched")
            return value
    return None


# ─── Stem / Options Boundary ──────────────────────────────────────────────────

# First line starting with "A.", "b)", "C:" or a lone "1." marker ("1.5 mg" is not one)
OPTIONS_BOUNDARY_PATTERN = re.compile(r"\n\s*(?:[A-Da-d][.):]|1[.):](?=\s))")

# "Which one? A. foo B. bar" with no line break before the options
INLINE_OPTIONS_PATTERN = re.compile(r"(.+?)\s*\b([A-Da-d][.):].+)", re.DOTALL)


def split_stem_and_options(block: str) -> Optional[tuple[str, str]]:
    """Split a block into its stem and its options region."""
    match = OPTIONS_BOUNDARY_PATTERN.search(block)
    if match and match.start() > 0:
        return block[:match.start()].strip(), block[match.start():].strip()

    inline = INLINE_OPTIONS_PATTERN.match(block)
    if inline:
        return inline.group(1).strip(), inline.group(2).strip()

    return None


# ─── Options ──────────────────────────────────────────────────────────────────


class OptionRule(ExtractionRule):
    """Collects lettered options; needs at least two to count as a match."""

    def try_extract(self, text: str) -> Optional[list[QuestionOption]]:
        found: dict[str, str] = {}
        for match in self.pattern.finditer(text):
            key = match.group(1).upper()
            option_text = " ".join(match.group(2).split())
            if option_text and key not in found:
                found[key] = option_text

        if len(found) < 2:
            return None

        return [
            QuestionOption(id=key, text=found[key])
            for key in sorted(found)
        ]


OPTION_RULES: list[OptionRule] = [
    # One option per line, text may wrap onto following lines
    OptionRule(
        "line_options",
        re.compile(
            r"(?:^|\n)[ \t]*([A-Fa-f])[.):][ \t]*(.+?)"
            r"(?=\n[ \t]*[A-Fa-f][.):]"
            r"|\n\s*(?i:correct\s+answer|answer|ans|explanation|rationale|why|correct)\b"
            r"|\s*\Z)",
            re.DOTALL,
        ),
    ),
    # Options run together on one line: "A. foo B. bar C. baz"
    OptionRule(
        "inline_options",
        re.compile(
            r"\b([A-Fa-f])[.):]\s*([^\n]+?)"
            r"(?=\s*\b[A-Fa-f][.):]"
            r"|\s*(?:Answer|Explanation|Correct)\b"
            r"|[ \t]*(?:\n|\Z))"
        ),
    ),
]


def extract_options(text: str) -> list[QuestionOption]:
    """Extract options deduplicated by letter and sorted A to F."""
    return run_rules(OPTION_RULES, text) or []


# ─── Correct Answer ───────────────────────────────────────────────────────────


class AnswerRule(ExtractionRule):
    """Captures one or more comma-separated answer letters."""

    def try_extract(self, text: str) -> Optional[list[str]]:
        match = self.pattern.search(text)
        if not match:
            return None

        answers: list[str] = []
        for part in re.split(r"[,\s]+", match.group(1).upper()):
            if re.fullmatch(r"[A-F]", part) and part not in answers:
                answers.append(part)
        return answers or None


def _keyword_answer_pattern(keyword: str) -> re.Pattern:
    # "Answer: B" anywhere, or "Answer B" at the start of a line
    return re.compile(
        rf"(?:\b{keyword}\s*[:\-]|^[ \t]*{keyword}\b)\s*"
        r"([A-F](?:\s*,\s*[A-F])*)\b",
        re.IGNORECASE | re.MULTILINE,
    )


ANSWER_RULES: list[AnswerRule] = [
    AnswerRule("answer", _keyword_answer_pattern(r"Ans(?:wer)?")),
    AnswerRule("correct", _keyword_answer_pattern(r"Correct")),
    AnswerRule("correct_answer", _keyword_answer_pattern(r"Correct\s+Answer")),
    AnswerRule("bold_letter", re.compile(r"\*\*?([A-Fa-f])\*\*?")),
    AnswerRule("parenthesized_letter", re.compile(r"\(([A-Fa-f])\)")),
]


def extract_correct_answers(text: str) -> list[str]:
    """Answer letters from the first answer rule that matches, else []."""
    return run_rules(ANSWER_RULES, text) or []


# ─── Explanation ──────────────────────────────────────────────────────────────

# Stop at the next numbered item, a "Question" line, or end of block
_SECTION_END = r"(?=\n\s*\d+\.|\n\s*Question\b|\s*\Z)"


class ExplanationRule(ExtractionRule):

    def try_extract(self, text: str) -> Optional[str]:
        match = self.pattern.search(text)
        if not match:
            return None
        return match.group(1).strip() or None


def _section_pattern(keyword: str, require_colon: bool = False) -> re.Pattern:
    anchor = rf"\b{keyword}\s*:"
    if not require_colon:
        anchor = rf"(?:\b{keyword}\s*[:\-]|^[ \t]*{keyword}\b)"
    return re.compile(
        anchor + r"\s*(.+?)" + _SECTION_END,
        re.IGNORECASE | re.DOTALL | re.MULTILINE,
    )


EXPLANATION_RULES: list[ExplanationRule] = [
    ExplanationRule("explanation", _section_pattern("Explanation")),
    ExplanationRule("rationale", _section_pattern("Rationale")),
    ExplanationRule("why", _section_pattern("Why", require_colon=True)),
]


def extract_explanation(
    text: str, max_length: int = MAX_EXPLANATION_LENGTH
) -> str:
    """Explanation section text, capped at ``max_length`` characters."""
    explanation = run_rules(EXPLANATION_RULES, text) or ""
    return explanation[:max_length]


# ─── Stem Cleaning ────────────────────────────────────────────────────────────

STEM_PREFIX_PATTERNS = [
    re.compile(r"^\d+[.):]\s*"),                       # "1. "
    re.compile(r"^\[\d+\]\s*"),                        # "[1] "
    re.compile(r"^Question\s*\d+\s*[.):]?\s*", re.IGNORECASE),
    re.compile(r"^Q\d+\s*[.):]?\s*", re.IGNORECASE),
]


def clean_question_text(text: str) -> str:
    """Strip enumeration prefixes and collapse whitespace."""
    text = text.strip()
    for pattern in STEM_PREFIX_PATTERNS:
        text = pattern.sub("", text, count=1)
    return " ".join(text.split())
