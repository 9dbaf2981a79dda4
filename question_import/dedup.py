"""
Deduplicator
============
Two-tier duplicate removal over one batch of parsed questions:

    1. exact fingerprint match (normalized stem + first two options)
    2. Jaccard similarity of normalized stem word sets against every
       question accepted so far

The second tier is O(n^2) over the batch. The orchestrator caps the batch
size before calling in, which keeps this bounded; corpora much larger than
a few thousand questions would need an indexed similarity search instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from .models import ParsedQuestion
from .normalize import normalize_text

logger = logging.getLogger(__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.85


def question_fingerprint(question: ParsedQuestion) -> str:
    """Deterministic key used for exact duplicate lookup."""
    options_text = "|".join(
        normalize_text(opt.text) for opt in question.options[:2]
    )
    return f"{normalize_text(question.text)}::{options_text}"


def word_set(text: str) -> set[str]:
    return set(normalize_text(text).split())


def jaccard_similarity(text1: str, text2: str) -> float:
    """|A ∩ B| / |A ∪ B| over normalized words; 0.0 when both are empty."""
    return _jaccard(word_set(text1), word_set(text2))


def _jaccard(words1: set[str], words2: set[str]) -> float:
    union = words1 | words2
    if not union:
        return 0.0
    return len(words1 & words2) / len(union)


@dataclass
class DedupResult:
    unique: list[ParsedQuestion] = field(default_factory=list)
    duplicates_removed: int = 0


class Deduplicator:
    """Removes exact and near-duplicate questions, keeping first occurrences."""

    def __init__(self, threshold: float = DEFAULT_SIMILARITY_THRESHOLD):
        self.threshold = threshold

    def deduplicate(self, questions: Sequence[ParsedQuestion]) -> DedupResult:
        result = DedupResult()
        seen: set[str] = set()
        accepted_words: list[set[str]] = []

        for question in questions:
            fingerprint = question_fingerprint(question)
            if fingerprint in seen:
                result.duplicates_removed += 1
                continue

            words = word_set(question.text)
            if any(
                _jaccard(words, other) > self.threshold
                for other in accepted_words
            ):
                logger.debug(f"Near-duplicate removed: {question.text[:60]!r}")
                result.duplicates_removed += 1
                continue

            seen.add(fingerprint)
            accepted_words.append(words)
            result.unique.append(question)

        return result
