from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class Token:
    """A positioned text fragment from a page's text layer (y grows upward)."""

    text: str
    x: float
    y: float
    w: float
    h: float


@dataclass
class Row:
    """One visual row of tokens, reconstructed by vertical clustering."""

    y: float
    tokens: list[Token]
    text: str = ""


@dataclass(frozen=True)
class Matcher:
    """A keyword and the case-insensitive pattern that identifies its rows."""

    key: str
    pattern: re.Pattern


class Source(str, Enum):
    """Which extraction pass produced a matched line."""

    PDF_XY = "PDF_XY"
    PDF_TEXT = "PDF_TEXT"
    HTML_FALLBACK = "HTML_FALLBACK"


@dataclass
class MatchedLine:
    """A row or line that matched a keyword, with its reconstructed values."""

    key: str
    line: str
    line_index: int
    values: list[str]
    source: Source

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "line": self.line,
            "lineIndex": self.line_index,
            "values": list(self.values),
            "source": self.source.value,
        }


@dataclass
class LineFact:
    """A statement line mapped onto the document's year columns."""

    label: str
    raw_line: str
    data: list[tuple[int, int]]

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "rawLine": self.raw_line,
            "data": [{"year": year, "value": value} for year, value in self.data],
        }


@dataclass
class ScanOptions:
    """Quotas and layout hints shared by both extraction pipelines."""

    max_lines_per_key: int = 10
    max_total_lines: int = 60
    preferred_count: int = 2
    max_pages: int = 12


@dataclass
class Segmentation:
    """Best partial partition of a token run: total cost and (start, end) ranges."""

    cost: float
    parts: list[tuple[int, int]] = field(default_factory=list)
