"""
Tests for the click command-line interface.
"""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from question_import.cli import cli


CSV_BANK = (
    "question,options,correct_answers,explanation\n"
    '"What is 2+2?","A:3|B:4|C:5","B","Basic arithmetic."\n'
    '"What is the capital of France?","A:Paris","A",""\n'
)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def bank_csv(tmp_path):
    path = tmp_path / "bank.csv"
    path.write_text(CSV_BANK, encoding="utf-8")
    return path


class TestParseCommand:

    def test_json_output(self, runner, bank_csv):
        result = runner.invoke(cli, ["parse", str(bank_csv), "--json-output"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["totalFound"] == 1
        assert data["questions"][0]["correctAnswers"] == ["B"]
        assert data["errors"] == ["Row 3: Could not find at least 2 options"]

    def test_saves_output(self, runner, bank_csv, tmp_path):
        out_dir = tmp_path / "out"
        result = runner.invoke(cli, [
            "parse", str(bank_csv), "-o", str(out_dir), "--log-level", "ERROR",
        ])

        assert result.exit_code == 0
        saved = json.loads(
            (out_dir / "bank_questions.json").read_text(encoding="utf-8")
        )
        assert saved["totalFound"] == 1
        assert "Import Summary" in result.output

    def test_unsupported_file(self, runner, tmp_path):
        path = tmp_path / "slides.pptx"
        path.write_bytes(b"not supported")

        result = runner.invoke(cli, ["parse", str(path), "--log-level", "ERROR"])
        assert result.exit_code == 1
        assert "Unsupported file type: pptx" in result.output

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(cli, ["parse", str(tmp_path / "missing.pdf")])
        assert result.exit_code != 0


class TestBatchCommand:

    def test_batch(self, runner, bank_csv, tmp_path):
        (tmp_path / "notes.pptx").write_bytes(b"skipped")
        out_dir = tmp_path / "out"

        result = runner.invoke(cli, [
            "batch", str(tmp_path), "-o", str(out_dir), "--log-level", "ERROR",
        ])

        assert result.exit_code == 0
        assert (out_dir / "bank_questions.json").exists()
        assert not (out_dir / "notes_questions.json").exists()

    def test_empty_directory(self, runner, tmp_path):
        result = runner.invoke(cli, ["batch", str(tmp_path)])
        assert result.exit_code == 0
        assert "No supported documents" in result.output


class TestValidateCommand:

    def test_valid_result(self, runner, bank_csv, tmp_path):
        out_dir = tmp_path / "out"
        runner.invoke(cli, [
            "parse", str(bank_csv), "-o", str(out_dir), "--json-output",
        ])

        result = runner.invoke(
            cli, ["validate", str(out_dir / "bank_questions.json")]
        )
        assert result.exit_code == 0
        assert "structurally valid" in result.output

    def test_invalid_result(self, runner, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({
            "questions": [{
                "text": "What is 2+2?",
                "options": [{"id": "A", "text": "4"}],
                "correctAnswers": ["A"],
            }],
            "duplicatesRemoved": 0,
            "errors": [],
        }), encoding="utf-8")

        result = runner.invoke(cli, ["validate", str(path)])
        assert result.exit_code == 1
        assert "Invalid parse result" in result.output


class TestFormatsCommand:

    def test_lists_extensions(self, runner):
        result = runner.invoke(cli, ["formats"])
        assert result.exit_code == 0
        for ext in (".pdf", ".docx", ".doc", ".xlsx", ".xls", ".csv", ".txt"):
            assert ext in result.output
