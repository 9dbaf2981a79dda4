"""
Question Import Engine
======================
Main orchestrator that combines format dispatch, text/tabular extraction,
field extraction, normalization and de-duplication into one pipeline.

Usage:
    engine = ParserEngine(ParserConfig(max_questions=500))
    result = engine.parse_document(data, "exam.pdf", "application/pdf")
    # result is a ParseResult; result.model_dump(by_alias=True) is the JSON

Architecture:
    bytes → FormatDispatcher → text | rows →
    BlockSegmenter + QuestionBlockParser | TabularRowParser →
    candidates (capped) → Deduplicator → ParseResult
"""

from __future__ import annotations

import json
import logging
import mimetypes
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .block_parser import QuestionBlockParser
from .dedup import DEFAULT_SIMILARITY_THRESHOLD, Deduplicator
from .dispatcher import FormatDispatcher
from .errors import QuestionParseError
from .models import (
    MAX_EXPLANATION_LENGTH,
    MIN_STEM_LENGTH,
    ParsedQuestion,
    ParseResult,
)
from .segmenter import BlockSegmenter
from .tabular import TabularRowParser, is_blank_row
from .text_extraction import ExtractedContent

logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(asctime)s] %(levelname)-8s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

EMPTY_DOCUMENT_ERROR = "Document contains no extractable text"
EMPTY_CSV_ERROR = "CSV file is empty or has no data rows"
EMPTY_SHEET_ERROR = "Spreadsheet is empty or has no data rows"
NO_BLOCKS_ERROR = "No question blocks found in document text"


@dataclass
class ParserConfig:
    """Configuration for the question import engine."""

    # Upper bound on candidates collected per call, enforced before dedup
    max_questions: int = 1000

    # Near-duplicate detection
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD

    # Field extraction
    min_stem_length: int = MIN_STEM_LENGTH
    max_explanation_length: int = MAX_EXPLANATION_LENGTH
    default_to_first_option: bool = True

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None


class ParserEngine:
    """
    Main question import engine.

    Orchestrates the full pipeline:
        1. Format dispatch and extraction
        2. Segmentation (text) or column inference (tabular)
        3. Per-item field extraction, capturing one error per failed item
        4. Item cap
        5. De-duplication

    Holds no per-call state, so one engine can serve concurrent calls.
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        dispatcher: Optional[FormatDispatcher] = None,
        segmenter: Optional[BlockSegmenter] = None,
    ):
        self.config = config or ParserConfig()
        self.dispatcher = dispatcher or FormatDispatcher()
        self.segmenter = segmenter or BlockSegmenter()
        self.block_parser = QuestionBlockParser(
            min_stem_length=self.config.min_stem_length,
            max_explanation_length=self.config.max_explanation_length,
            default_to_first_option=self.config.default_to_first_option,
        )
        self.deduplicator = Deduplicator(self.config.similarity_threshold)
        self._setup_logging()

    def _setup_logging(self):
        """Configure logging based on config."""
        log_level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        package_logger = logging.getLogger("question_import")
        package_logger.setLevel(log_level)

        # Console handler
        if not package_logger.handlers:
            console = logging.StreamHandler()
            console.setLevel(log_level)
            console.setFormatter(
                logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
            )
            package_logger.addHandler(console)

        # File handler
        if self.config.log_file:
            log_path = Path(self.config.log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            already_attached = any(
                isinstance(h, logging.FileHandler)
                and Path(h.baseFilename) == log_path.resolve()
                for h in package_logger.handlers
            )
            if not already_attached:
                file_handler = logging.FileHandler(log_path, encoding="utf-8")
                file_handler.setLevel(log_level)
                file_handler.setFormatter(
                    logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
                )
                package_logger.addHandler(file_handler)

    # ─── Public API ───────────────────────────────────────────────────────

    def parse_document(
        self,
        data: bytes,
        filename: str,
        mime_type: str = "",
    ) -> ParseResult:
        """
        Parse an uploaded document into de-duplicated questions.

        Args:
            data: Raw file bytes.
            filename: Original filename; its extension selects the format.
            mime_type: Declared content type, logged only.

        Returns:
            ParseResult with questions, duplicate count and per-item errors.

        Raises:
            UnsupportedFormatError: No extractor for the file extension.
            ExtractionError: The file could not be read by its library.
        """
        start_time = time.time()
        logger.info(f"Parsing document: {filename} ({mime_type or 'unknown type'})")

        # ── Step 1: Dispatch + extract ────────────────────────────────
        content = self.dispatcher.dispatch(data, filename)

        # ── Step 2: Segment / row-parse with per-item errors ──────────
        if content.is_tabular:
            candidates, errors = self._parse_rows(content)
        else:
            candidates, errors = self._parse_text(content.text or "")

        logger.info(
            f"Parsed {len(candidates)} candidate questions from {filename} "
            f"({len(errors)} items rejected)"
        )

        # ── Step 3: Attach source ─────────────────────────────────────
        candidates = [
            q.model_copy(update={"source": filename}) for q in candidates
        ]

        # ── Step 4: De-duplicate ──────────────────────────────────────
        dedup = self.deduplicator.deduplicate(candidates)
        if dedup.duplicates_removed:
            logger.info(
                f"Removed {dedup.duplicates_removed} duplicate questions "
                f"from {filename}"
            )

        result = ParseResult(
            questions=dedup.unique,
            duplicates_removed=dedup.duplicates_removed,
            errors=errors,
        )

        elapsed = time.time() - start_time
        logger.info(
            f"Parse complete in {elapsed:.2f}s — "
            f"{result.total_found} questions extracted"
        )
        return result

    def parse_file(self, path: str) -> ParseResult:
        """Read a file from disk and parse it."""
        file_path = Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        mime_type, _ = mimetypes.guess_type(file_path.name)
        return self.parse_document(
            file_path.read_bytes(), file_path.name, mime_type or ""
        )

    # ─── Pipeline Steps ───────────────────────────────────────────────────

    def _parse_text(self, text: str) -> tuple[list[ParsedQuestion], list[str]]:
        if not text.strip():
            return [], [EMPTY_DOCUMENT_ERROR]

        blocks = self.segmenter.segment(text)
        if not blocks:
            return [], [NO_BLOCKS_ERROR]

        questions: list[ParsedQuestion] = []
        errors: list[str] = []

        for index, block in enumerate(blocks, start=1):
            if len(questions) >= self.config.max_questions:
                self._warn_cap(len(blocks) - index + 1, "blocks")
                break
            try:
                questions.append(self.block_parser.parse(block))
            except QuestionParseError as e:
                logger.debug(f"Block {index} rejected: {e.reason}")
                errors.append(f"Block {index}: {e.reason}")

        return questions, errors

    def _parse_rows(
        self, content: ExtractedContent
    ) -> tuple[list[ParsedQuestion], list[str]]:
        rows = content.rows or []
        non_blank = [row for row in rows if not is_blank_row(row)]
        if len(non_blank) < 2:
            message = EMPTY_CSV_ERROR if content.fmt == "csv" else EMPTY_SHEET_ERROR
            return [], [message]

        # First non-blank row is the header; row numbers stay 1-based sheet rows
        header_index = next(i for i, row in enumerate(rows) if not is_blank_row(row))
        row_parser = TabularRowParser.from_header(
            rows[header_index],
            max_explanation_length=self.config.max_explanation_length,
            min_stem_length=self.config.min_stem_length,
        )

        questions: list[ParsedQuestion] = []
        errors: list[str] = []

        for index in range(header_index + 1, len(rows)):
            row = rows[index]
            if is_blank_row(row):
                continue
            if len(questions) >= self.config.max_questions:
                self._warn_cap(len(rows) - index, "rows")
                break
            try:
                questions.append(row_parser.parse_row(row))
            except QuestionParseError as e:
                logger.debug(f"Row {index + 1} rejected: {e.reason}")
                errors.append(f"Row {index + 1}: {e.reason}")

        return questions, errors

    def _warn_cap(self, remaining: int, unit: str):
        logger.warning(
            f"Reached max_questions={self.config.max_questions}; "
            f"skipping up to {remaining} remaining {unit}"
        )


# ─── Output ───────────────────────────────────────────────────────────────────


def result_to_dict(result: ParseResult) -> dict:
    """Plain JSON-able dict with camelCase keys."""
    return result.model_dump(mode="json", by_alias=True)


def save_result(result: ParseResult, filepath: Path):
    """Save ParseResult to a JSON file."""
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(result_to_dict(result), f, indent=2, ensure_ascii=False)
    logger.info(f"Saved JSON output: {filepath}")
