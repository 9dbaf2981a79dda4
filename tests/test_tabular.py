"""
Tests for tabular column inference and row parsing.
"""

from __future__ import annotations

import pytest

from question_import.errors import QuestionParseError
from question_import.models import Category, Difficulty, QuestionType
from question_import.tabular import ColumnMap, TabularRowParser, is_blank_row


# ═══════════════════════════════════════════════════════════════════════════════
# COLUMN INFERENCE
# ═══════════════════════════════════════════════════════════════════════════════


class TestColumnMap:

    def test_options_list_layout(self):
        columns = ColumnMap.from_headers(
            ["question", "options", "correct_answers", "explanation"]
        )
        assert columns.question == 0
        assert columns.options == []
        assert columns.options_list == 1
        assert columns.answer == 2
        assert columns.explanation == 3
        assert columns.category is None

    def test_one_column_per_option(self):
        columns = ColumnMap.from_headers([
            "Question Text", "Option A", "Option B", "Option C",
            "Answer", "Category", "Difficulty",
        ])
        assert columns.question == 0
        assert columns.options == [1, 2, 3]
        assert columns.options_list is None
        assert columns.answer == 4
        assert columns.category == 5
        assert columns.difficulty == 6

    def test_letter_headers_and_text_column(self):
        columns = ColumnMap.from_headers(["Text", "A", "B", "C", "D", "Correct"])
        assert columns.question == 0
        assert columns.options == [1, 2, 3, 4]
        assert columns.answer == 5

    def test_rationale_header(self):
        columns = ColumnMap.from_headers(["Question", "Rationale"])
        assert columns.explanation == 1

    def test_options_header_not_reused_as_answer(self):
        columns = ColumnMap.from_headers(
            ["Question", "Answer Options", "Correct Answer"]
        )
        assert columns.options_list == 1
        assert columns.answer == 2

    @pytest.mark.parametrize("headers, expected", [
        (["question_id", "question", "options"], 1),
        (["Question No.", "Question Text", "options"], 1),
        (["Question #", "Question Stem", "options"], 1),
        (["Question Text", "options"], 0),
    ])
    def test_identifier_columns_skipped_for_question(self, headers, expected):
        assert ColumnMap.from_headers(headers).question == expected

    def test_missing_question_column(self):
        assert ColumnMap.from_headers(["foo", "bar"]).question is None


class TestIsBlankRow:

    def test_blank(self):
        assert is_blank_row(["", "  ", None])
        assert is_blank_row([])

    def test_not_blank(self):
        assert not is_blank_row(["", "x"])


# ═══════════════════════════════════════════════════════════════════════════════
# ROW PARSING
# ═══════════════════════════════════════════════════════════════════════════════


OPTION_COLUMNS = ["Question", "Option A", "Option B", "Option C", "Answer"]


class TestTabularRowParser:

    def test_pipe_options_row(self):
        parser = TabularRowParser.from_header(
            ["question", "options", "correct_answers", "explanation"]
        )
        q = parser.parse_row(
            ["What is 2+2?", "A:3|B:4|C:5", "B", "Basic arithmetic."]
        )

        assert q.text == "What is 2+2?"
        assert [(o.id, o.text) for o in q.options] == [
            ("A", "3"), ("B", "4"), ("C", "5"),
        ]
        assert q.correct_answers == ["B"]
        assert q.explanation == "Basic arithmetic."
        assert q.question_type == QuestionType.MULTIPLE_CHOICE

    def test_pipe_options_without_prefixes(self):
        parser = TabularRowParser.from_header(["question", "options", "answer"])
        q = parser.parse_row(["Which is warmer?", "Ice | Steam", "B"])
        assert [o.text for o in q.options] == ["Ice", "Steam"]

    def test_numeric_answer_maps_to_letter(self):
        parser = TabularRowParser.from_header(OPTION_COLUMNS)
        q = parser.parse_row([
            "Which gas do plants absorb?", "Oxygen", "Carbon dioxide",
            "Nitrogen", "2",
        ])
        assert q.correct_answers == ["B"]

    def test_multiple_answers_is_select_all(self):
        parser = TabularRowParser.from_header(OPTION_COLUMNS)
        q = parser.parse_row(["Which numbers are prime?", "2", "4", "5", "A, C"])
        assert q.correct_answers == ["A", "C"]
        assert q.question_type == QuestionType.SELECT_ALL

    def test_empty_option_cells_skipped(self):
        parser = TabularRowParser.from_header(OPTION_COLUMNS)
        q = parser.parse_row(["Is the sky blue today?", "Yes", "No", "", "A"])
        assert [o.id for o in q.options] == ["A", "B"]

    def test_category_and_difficulty_normalized(self):
        parser = TabularRowParser.from_header(
            OPTION_COLUMNS + ["Category", "Difficulty"]
        )
        q = parser.parse_row([
            "Which drug class ends in -pril?", "ACE inhibitors", "Statins",
            "Beta blockers", "A", "Pharmacology", "hard",
        ])
        assert q.category == Category.PHARMACOLOGICAL_THERAPIES
        assert q.difficulty == Difficulty.HARD

    def test_options_embedded_in_question_cell(self):
        parser = TabularRowParser.from_header(["question", "answer"])
        q = parser.parse_row(["Which is a mammal?\nA. Shark\nB. Whale", "B"])
        assert q.text == "Which is a mammal?"
        assert [o.text for o in q.options] == ["Shark", "Whale"]
        assert q.correct_answers == ["B"]

    def test_answer_found_in_question_cell(self):
        parser = TabularRowParser.from_header(["question", "options"])
        q = parser.parse_row(["Which is a mammal? Answer: B", "A:Shark|B:Whale"])
        assert q.correct_answers == ["B"]

    def test_one_option_rejected(self):
        parser = TabularRowParser.from_header(
            ["question", "options", "correct_answers"]
        )
        with pytest.raises(QuestionParseError) as exc:
            parser.parse_row(["What is the capital of France?", "A:Paris", "A"])
        assert exc.value.reason == "Could not find at least 2 options"

    def test_unknown_answer_rejected(self):
        parser = TabularRowParser.from_header(OPTION_COLUMNS)
        with pytest.raises(QuestionParseError) as exc:
            parser.parse_row(["Which numbers are prime?", "2", "4", "5", "Z"])
        assert exc.value.reason == "Could not determine correct answer"

    def test_out_of_range_numeric_answer_rejected(self):
        parser = TabularRowParser.from_header(OPTION_COLUMNS)
        with pytest.raises(QuestionParseError):
            parser.parse_row(["Which numbers are prime?", "2", "4", "5", "7"])

    def test_missing_question_text(self):
        parser = TabularRowParser.from_header(OPTION_COLUMNS)
        with pytest.raises(QuestionParseError, match="question text"):
            parser.parse_row(["", "2", "4", "5", "A"])

    def test_short_row(self):
        parser = TabularRowParser.from_header(OPTION_COLUMNS)
        with pytest.raises(QuestionParseError):
            parser.parse_row(["Which numbers are prime?"])

    def test_answer_options_layout(self):
        parser = TabularRowParser.from_header(
            ["Question", "Answer Options", "Correct Answer"]
        )
        q = parser.parse_row(["Which is warmer, ice or steam?", "A:Ice|B:Steam", "B"])
        assert [o.text for o in q.options] == ["Ice", "Steam"]
        assert q.correct_answers == ["B"]

    def test_question_id_column_ignored(self):
        parser = TabularRowParser.from_header(
            ["question_id", "question", "options", "answer"]
        )
        q = parser.parse_row(["17", "Which is warmer?", "Ice|Steam", "B"])
        assert q.text == "Which is warmer?"

    def test_short_stem_rejected(self):
        parser = TabularRowParser.from_header(["question", "options", "answer"])
        with pytest.raises(QuestionParseError, match="too short"):
            parser.parse_row(["Why?", "Ice|Steam", "B"])

        lenient = TabularRowParser.from_header(
            ["question", "options", "answer"], min_stem_length=3
        )
        assert lenient.parse_row(["Why?", "Ice|Steam", "B"]).text == "Why?"

    def test_explanation_capped(self):
        parser = TabularRowParser.from_header(
            ["question", "options", "answer", "explanation"],
            max_explanation_length=20,
        )
        q = parser.parse_row(["Which is warmer?", "Ice|Steam", "B", "x" * 100])
        assert len(q.explanation) == 20
