"""
Text Extraction
===============
One TextExtractor per upload format. Document formats produce a single
plain-text body; spreadsheet formats produce a grid of string cells.

    pdf    PyMuPDF (fitz)
    docx   python-docx
    doc    mammoth
    txt    utf-8 decode
    xlsx   openpyxl
    xls    xlrd
    csv    csv module

Extractors let library exceptions propagate; the dispatcher wraps them.
"""

from __future__ import annotations

import csv
import io
import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

import docx
import fitz  # PyMuPDF
import mammoth
import openpyxl
import xlrd

logger = logging.getLogger(__name__)


@dataclass
class ExtractedContent:
    """Output of an extractor: ``text`` for documents, ``rows`` for grids."""
    fmt: str
    text: Optional[str] = None
    rows: Optional[list[list[str]]] = None

    @property
    def is_tabular(self) -> bool:
        return self.rows is not None


class TextExtractor:
    """Base class for all format extractors."""

    fmt = ""

    def extract(self, data: bytes) -> ExtractedContent:
        raise NotImplementedError


class DocumentTextExtractor(TextExtractor):
    """Extractor producing one plain-text body."""

    def extract(self, data: bytes) -> ExtractedContent:
        return ExtractedContent(fmt=self.fmt, text=self.extract_text(data))

    def extract_text(self, data: bytes) -> str:
        raise NotImplementedError


class GridExtractor(TextExtractor):
    """Extractor producing rows of string cells, header row first."""

    def extract(self, data: bytes) -> ExtractedContent:
        return ExtractedContent(fmt=self.fmt, rows=self.extract_rows(data))

    def extract_rows(self, data: bytes) -> list[list[str]]:
        raise NotImplementedError


def cell_to_str(value: Any) -> str:
    """Render a spreadsheet cell value as text ("2.0" becomes "2")."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


# ─── Document Formats ─────────────────────────────────────────────────────────

# Page counters left behind by PDF text extraction: "8/528", "Page 8 of 528"
PAGE_NOISE_PATTERNS = [
    re.compile(r"^\s*(Page\s*)?\d+\s*(/|of)\s*\d+\s*$", re.IGNORECASE),
    re.compile(r"^\s*Page\s+\d+\s*$", re.IGNORECASE),
]


def strip_page_noise(text: str) -> str:
    return "\n".join(
        line for line in text.split("\n")
        if not any(p.match(line) for p in PAGE_NOISE_PATTERNS)
    )


class PdfTextExtractor(DocumentTextExtractor):
    """Plain text of every page, in page order."""

    fmt = "pdf"

    def extract_text(self, data: bytes) -> str:
        pages = []
        with fitz.open(stream=data, filetype="pdf") as doc:
            logger.debug(f"PDF has {doc.page_count} pages")
            for page in doc:
                pages.append(strip_page_noise(page.get_text("text")))
        return "\n".join(pages)


class DocxTextExtractor(DocumentTextExtractor):
    """Paragraph text followed by table cell text."""

    fmt = "docx"

    def extract_text(self, data: bytes) -> str:
        document = docx.Document(io.BytesIO(data))
        lines = [p.text for p in document.paragraphs]

        for table in document.tables:
            for row in table.rows:
                seen: list[str] = []
                for cell in row.cells:
                    # Merged cells repeat across the row
                    text = cell.text.strip()
                    if text and text not in seen:
                        seen.append(text)
                if seen:
                    lines.extend(seen)
                    lines.append("")

        return "\n".join(lines)


class DocTextExtractor(DocumentTextExtractor):
    """Legacy word-processor uploads via mammoth raw text extraction."""

    fmt = "doc"

    def extract_text(self, data: bytes) -> str:
        result = mammoth.extract_raw_text(io.BytesIO(data))
        for message in result.messages:
            logger.debug(f"mammoth: {message}")
        # mammoth ends every paragraph with "\n\n"; one line per paragraph
        # leaves empty paragraphs as the only blank lines, as python-docx does
        return result.value.replace("\n\n", "\n")


class PlainTextExtractor(DocumentTextExtractor):

    fmt = "txt"

    def extract_text(self, data: bytes) -> str:
        return data.decode("utf-8-sig", errors="replace")


# ─── Tabular Formats ──────────────────────────────────────────────────────────


class XlsxGridExtractor(GridExtractor):
    """First worksheet of an Office Open XML workbook."""

    fmt = "xlsx"

    def extract_rows(self, data: bytes) -> list[list[str]]:
        workbook = openpyxl.load_workbook(
            io.BytesIO(data), read_only=True, data_only=True
        )
        try:
            sheet = workbook.worksheets[0]
            return [
                [cell_to_str(value) for value in row]
                for row in sheet.iter_rows(values_only=True)
            ]
        finally:
            workbook.close()


class XlsGridExtractor(GridExtractor):
    """First sheet of a legacy BIFF workbook."""

    fmt = "xls"

    def extract_rows(self, data: bytes) -> list[list[str]]:
        book = xlrd.open_workbook(file_contents=data)
        try:
            sheet = book.sheet_by_index(0)
            return [
                [cell_to_str(value) for value in sheet.row_values(idx)]
                for idx in range(sheet.nrows)
            ]
        finally:
            book.release_resources()


class CsvGridExtractor(GridExtractor):
    """Comma-delimited text; quoted fields may contain commas and newlines."""

    fmt = "csv"

    def extract_rows(self, data: bytes) -> list[list[str]]:
        text = data.decode("utf-8-sig", errors="replace")
        reader = csv.reader(io.StringIO(text, newline=""))
        return [[cell.strip() for cell in row] for row in reader]
