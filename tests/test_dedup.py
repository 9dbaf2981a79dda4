"""
Tests for exact and near-duplicate question removal.
"""

from __future__ import annotations

import pytest

from question_import.dedup import (
    Deduplicator,
    jaccard_similarity,
    question_fingerprint,
)
from question_import.models import ParsedQuestion, QuestionOption


def make_question(text: str, *options: str) -> ParsedQuestion:
    options = options or ("yes", "no")
    return ParsedQuestion(
        text=text,
        options=[
            QuestionOption(id=letter, text=opt)
            for letter, opt in zip("ABCDEF", options)
        ],
        correct_answers=["A"],
    )


class TestFingerprint:

    def test_stem_and_first_two_options(self):
        q = make_question("What is 2+2?", "3", "4", "5")
        assert question_fingerprint(q) == "what is 22::3|4"

    def test_ignores_case_and_punctuation(self):
        q1 = make_question("What is 2+2?", "Three", "Four")
        q2 = make_question("what is 22", "three.", "FOUR")
        assert question_fingerprint(q1) == question_fingerprint(q2)


class TestJaccardSimilarity:

    def test_identical(self):
        assert jaccard_similarity("a b c", "c b a") == 1.0

    def test_partial(self):
        assert jaccard_similarity("a b", "b c") == pytest.approx(1 / 3)

    def test_both_empty(self):
        assert jaccard_similarity("", "") == 0.0
        assert jaccard_similarity("?!", "...") == 0.0


class TestDeduplicator:

    def test_exact_duplicate_removed(self):
        q = make_question("What is 2+2?", "3", "4", "5")
        result = Deduplicator().deduplicate([q, q])
        assert result.unique == [q]
        assert result.duplicates_removed == 1

    def test_near_duplicate_removed(self):
        q1 = make_question(
            "Which medication should the nurse administer first to a client "
            "experiencing an acute asthma attack today?",
            "Albuterol", "Prednisone",
        )
        q2 = make_question(
            "Which medication should the nurse give first to a client "
            "experiencing an acute asthma attack, today",
            "Salmeterol", "Montelukast",
        )
        assert jaccard_similarity(q1.text, q2.text) > 0.85

        result = Deduplicator().deduplicate([q1, q2])
        assert result.unique == [q1]
        assert result.duplicates_removed == 1

    def test_distinct_questions_kept(self):
        q1 = make_question("What is the capital of France?")
        q2 = make_question("What is the capital of Spain?")
        result = Deduplicator().deduplicate([q1, q2])
        assert result.unique == [q1, q2]
        assert result.duplicates_removed == 0

    def test_first_occurrence_order_preserved(self):
        q1 = make_question("What is the capital of France?")
        q2 = make_question("Which river flows through Cairo?")
        q3 = make_question("How many chambers does the heart have?")
        result = Deduplicator().deduplicate([q1, q2, q1, q3, q2])
        assert result.unique == [q1, q2, q3]
        assert result.duplicates_removed == 2
        assert len(result.unique) + result.duplicates_removed == 5

    def test_same_stem_different_options(self):
        q1 = make_question("What is the capital of France?", "Paris", "Lyon")
        q2 = make_question("What is the capital of France?", "Nice", "Lille")

        assert Deduplicator().deduplicate([q1, q2]).duplicates_removed == 1

        # Similarity must strictly exceed the threshold
        strict = Deduplicator(threshold=1.0).deduplicate([q1, q2])
        assert strict.unique == [q1, q2]

    def test_empty_input(self):
        result = Deduplicator().deduplicate([])
        assert result.unique == []
        assert result.duplicates_removed == 0
