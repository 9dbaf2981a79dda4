"""
Block Segmenter
===============
Splits a free-text body into candidate question blocks.

Marker strategies are tried in order and the first accepted split wins:
    1. "1." numbered list items at line starts
    2. "Question 1:" headings
    3. "Q1:" headings
    4. "[1]" bracketed numbers
If none is accepted the body is split on blank lines instead.
"""

from __future__ import annotations

import logging
import re
from typing import Optional, Sequence

logger = logging.getLogger(__name__)


class SplitStrategy:
    """Base class: ``split`` returns blocks, or None to defer to the next."""

    name = "split"

    def split(self, text: str) -> Optional[list[str]]:
        raise NotImplementedError


class MarkerSplitStrategy(SplitStrategy):
    """
    Split on a question marker pattern.

    The split is accepted when the pattern matches at least ``min_markers``
    times and leaves at least ``min_blocks`` fragments longer than
    ``min_length`` characters; shorter fragments are dropped from the result.
    """

    def __init__(
        self,
        name: str,
        pattern: re.Pattern,
        min_blocks: int = 2,
        min_length: int = 20,
        min_markers: int = 2,
    ):
        self.name = name
        self.pattern = pattern
        self.min_markers = min_markers
        self.min_blocks = min_blocks
        self.min_length = min_length

    def split(self, text: str) -> Optional[list[str]]:
        if len(self.pattern.findall(text)) < self.min_markers:
            return None
        fragments = (f.strip() for f in self.pattern.split(text))
        blocks = [f for f in fragments if len(f) > self.min_length]
        if len(blocks) < self.min_blocks:
            return None
        return blocks


class ParagraphSplitStrategy(SplitStrategy):
    """Blank-line separated paragraphs longer than ``min_length``."""

    name = "paragraphs"

    def __init__(self, min_length: int = 50):
        self.min_length = min_length

    def split(self, text: str) -> Optional[list[str]]:
        paragraphs = (p.strip() for p in re.split(r"\n\s*\n", text))
        return [p for p in paragraphs if len(p) > self.min_length]


# ─── Marker Patterns ──────────────────────────────────────────────────────────

NUMBERED_MARKER = re.compile(r"(?:^|\n)\s*\d+\.\s+")
QUESTION_MARKER = re.compile(r"(?:^|\n)\s*Question\s*\d+[:.]?\s*", re.IGNORECASE)
Q_MARKER = re.compile(r"(?:^|\n)\s*Q\d+[:.]?\s*", re.IGNORECASE)
BRACKET_MARKER = re.compile(r"(?:^|\n)\s*\[\d+\]\s*")


def default_strategies() -> list[SplitStrategy]:
    return [
        MarkerSplitStrategy("numbered", NUMBERED_MARKER),
        MarkerSplitStrategy("question_heading", QUESTION_MARKER),
        MarkerSplitStrategy("q_heading", Q_MARKER),
        MarkerSplitStrategy("bracketed", BRACKET_MARKER),
    ]


class BlockSegmenter:
    """Runs the marker strategies, then the paragraph fallback."""

    def __init__(
        self,
        strategies: Optional[Sequence[SplitStrategy]] = None,
        fallback: Optional[SplitStrategy] = None,
    ):
        self.strategies = list(
            strategies if strategies is not None else default_strategies()
        )
        self.fallback = fallback or ParagraphSplitStrategy()

    def segment(self, text: str) -> list[str]:
        for strategy in self.strategies:
            blocks = strategy.split(text)
            if blocks:
                logger.info(
                    f"Segmented text into {len(blocks)} blocks "
                    f"using '{strategy.name}' markers"
                )
                return blocks

        blocks = self.fallback.split(text) or []
        logger.info(
            f"No question markers found, {len(blocks)} "
            f"{self.fallback.name} blocks"
        )
        return blocks
