"""
Exceptions
==========
Fatal errors abort the whole call; QuestionParseError only rejects one
block or row and is turned into an entry of ParseResult.errors.
"""

from __future__ import annotations

from typing import Optional


class QuestionImportError(Exception):
    """Base class for all pipeline errors."""


class UnsupportedFormatError(QuestionImportError):
    """No extractor is registered for the file extension."""

    def __init__(self, extension: str):
        self.extension = extension
        shown = extension or "(none)"
        super().__init__(f"Unsupported file type: {shown}")


class ExtractionError(QuestionImportError):
    """An extraction library could not read the uploaded file."""

    def __init__(
        self,
        filename: str,
        fmt: str,
        cause: Optional[BaseException] = None,
    ):
        self.filename = filename
        self.fmt = fmt
        self.cause = cause
        message = f"Could not read {fmt} file {filename!r}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class QuestionParseError(QuestionImportError):
    """A single block or row does not contain a usable question."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)
