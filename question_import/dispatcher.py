"""
Format Dispatcher
=================
Selects the extractor for an upload by its lower-cased file extension.
This registry is the only place upload formats are wired in.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional

from .errors import ExtractionError, UnsupportedFormatError
from .text_extraction import (
    CsvGridExtractor,
    DocTextExtractor,
    DocxTextExtractor,
    ExtractedContent,
    PdfTextExtractor,
    PlainTextExtractor,
    TextExtractor,
    XlsGridExtractor,
    XlsxGridExtractor,
)

logger = logging.getLogger(__name__)


def file_extension(filename: str) -> str:
    """Lower-cased text after the last dot of the base name ("" if none)."""
    name = filename.replace("\\", "/").rsplit("/", 1)[-1]
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1].lower()


def default_extractors() -> dict[str, TextExtractor]:
    return {
        "pdf": PdfTextExtractor(),
        "docx": DocxTextExtractor(),
        "doc": DocTextExtractor(),
        "xlsx": XlsxGridExtractor(),
        "xls": XlsGridExtractor(),
        "csv": CsvGridExtractor(),
        "txt": PlainTextExtractor(),
    }


class FormatDispatcher:
    """Extension -> TextExtractor registry."""

    def __init__(self, extractors: Optional[Mapping[str, TextExtractor]] = None):
        if extractors is None:
            extractors = default_extractors()
        self._extractors: dict[str, TextExtractor] = {
            ext.lower(): extractor for ext, extractor in extractors.items()
        }

    def register(self, extensions: Iterable[str], extractor: TextExtractor):
        for ext in extensions:
            self._extractors[ext.lower().lstrip(".")] = extractor

    def supported_extensions(self) -> list[str]:
        return sorted(self._extractors)

    def extractors(self) -> dict[str, TextExtractor]:
        return dict(self._extractors)

    def resolve(self, filename: str) -> TextExtractor:
        extension = file_extension(filename)
        extractor = self._extractors.get(extension)
        if extractor is None:
            raise UnsupportedFormatError(extension)
        return extractor

    def dispatch(self, data: bytes, filename: str) -> ExtractedContent:
        """Resolve the extractor and run it on the raw bytes."""
        extractor = self.resolve(filename)
        fmt = extractor.fmt or file_extension(filename)
        logger.info(f"Extracting {filename} with {type(extractor).__name__}")

        try:
            return extractor.extract(data)
        except Exception as e:
            logger.error(f"Failed to read {fmt} file {filename}: {e}")
            raise ExtractionError(filename, fmt, e) from e
