from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from pdf_extract import collapse_duplicated_label, line_without_numbers, resolve_columns
from pdf_models import MatchedLine, Matcher, Row, ScanOptions, Source
from pdf_numbers import normalize_dashes, normalize_number_text, normalize_text
from pdf_segment import extract_numbers_from_text

log = logging.getLogger(__name__)

# Lenders and credit terms worth flagging when they show up in statement notes.
DEFAULT_LENDER_KEYWORDS: list[str] = [
    "Kreditinstitut",
    "Qred",
    "Froda",
    "CapitalBox",
    "Capital Box",
    "Svea",
    "OPR",
    "Capcito",
]

_NUMBER_RUN_RE = re.compile(r"[+-]?\d[\d ]*")
_TRAILING_PUNCT_RE = re.compile(r"[,:;\-]+$")


def build_keyword_matchers(keywords: Iterable[str] | None) -> list[Matcher]:
    """One literal, case-insensitive matcher per non-blank keyword."""
    matchers: list[Matcher] = []
    for k in keywords or []:
        key = str(k or "").strip()
        if key:
            matchers.append(Matcher(key=key, pattern=re.compile(re.escape(key), re.IGNORECASE)))
    return matchers


def build_loan_matchers() -> list[Matcher]:
    """Short- and long-term liabilities and credit-institution debt rows."""
    return [
        Matcher("Kortfristiga", re.compile(r"\bkortfristiga\b|\bkortfristig\b", re.IGNORECASE)),
        Matcher(
            "Långfristiga",
            re.compile(
                r"\blångfristiga\b|\blångfristig\b|\blangfristiga\b|\blangfristig\b",
                re.IGNORECASE,
            ),
        ),
        Matcher("Kreditinstitut", re.compile(r"\bkreditinstitut\b", re.IGNORECASE)),
    ]


class MatchQuota:
    """Per-key and total line limits plus (key, label, values) deduplication."""

    def __init__(self, max_lines_per_key: int, max_total_lines: int) -> None:
        self.max_lines_per_key = max_lines_per_key
        self.max_total_lines = max_total_lines
        self.counts: dict[str, int] = {}
        self.seen: set[tuple[str, str, str]] = set()
        self.total = 0

    @property
    def full(self) -> bool:
        return self.total >= self.max_total_lines

    def has_room(self, key: str) -> bool:
        return self.counts.get(key, 0) < self.max_lines_per_key

    def exhausted(self, keys: list[str]) -> bool:
        """True once nothing more can be admitted for any of *keys*."""
        return self.full or all(not self.has_room(k) for k in keys)

    def admit(self, key: str, label: str, values: list[str]) -> bool:
        """Record a line unless it repeats an earlier one or a quota is spent."""
        if self.full or not self.has_room(key):
            return False
        dedupe_key = (key, label, "|".join(values))
        if dedupe_key in self.seen:
            return False
        self.seen.add(dedupe_key)
        self.counts[key] = self.counts.get(key, 0) + 1
        self.total += 1
        return True


def strip_numbers_from_line(line: str | None) -> str:
    """Label of a plain-text line: numeric runs and trailing punctuation removed."""
    if not line:
        return ""
    s = normalize_dashes(normalize_number_text(line))
    s = normalize_text(_NUMBER_RUN_RE.sub(" ", s))
    s = _TRAILING_PUNCT_RE.sub("", s).strip()
    return collapse_duplicated_label(s)


def match_rows(
    rows: Iterable[Row],
    matchers: list[Matcher],
    options: ScanOptions | None = None,
) -> list[MatchedLine]:
    """Layout pipeline: match clustered rows and read their values by x position.

    *rows* may be a lazy iterable spanning several pages; line_index counts
    every row consumed, and iteration stops as soon as the quotas are spent.
    """
    options = options or ScanOptions()
    if not matchers:
        return []
    quota = MatchQuota(options.max_lines_per_key, options.max_total_lines)
    keys = [m.key for m in matchers if m.key]
    out: list[MatchedLine] = []
    if quota.exhausted(keys):
        return out

    for line_index, row in enumerate(rows, 1):
        row_text = row.text
        if not row_text:
            continue
        values: list[str] | None = None
        label = ""
        for m in matchers:
            if not m.key or not m.pattern.search(row_text):
                continue
            if not quota.has_room(m.key):
                continue
            if values is None:
                values = resolve_columns(row.tokens, options.preferred_count)
                label = line_without_numbers(row.tokens) or row_text
            if not quota.admit(m.key, label, values):
                continue
            out.append(MatchedLine(m.key, label, line_index, list(values), Source.PDF_XY))
            if quota.exhausted(keys):
                log.debug("line quota reached at row %d", line_index)
                return out
    return out


def iter_text_lines(text: str | None) -> Iterable[str]:
    """Non-blank lines of extracted text with whitespace collapsed."""
    normalized = (text or "").replace("\x00", " ").replace("\r\n", "\n").replace("\r", "\n")
    for raw in normalized.split("\n"):
        line = normalize_text(raw)
        if line:
            yield line


def match_text(
    text: str | None,
    matchers: list[Matcher],
    options: ScanOptions | None = None,
    source: Source = Source.PDF_TEXT,
) -> list[MatchedLine]:
    """Text pipeline: match lines of linearized text and segment their digit runs."""
    options = options or ScanOptions()
    if not matchers:
        return []
    quota = MatchQuota(options.max_lines_per_key, options.max_total_lines)
    keys = [m.key for m in matchers if m.key]
    out: list[MatchedLine] = []
    if quota.exhausted(keys):
        return out

    for line_index, line in enumerate(iter_text_lines(text), 1):
        values: list[str] | None = None
        label = ""
        for m in matchers:
            if not m.key or not m.pattern.search(line):
                continue
            if not quota.has_room(m.key):
                continue
            if values is None:
                values = extract_numbers_from_text(line, options.preferred_count)
                label = strip_numbers_from_line(line) or line
            if not quota.admit(m.key, label, values):
                continue
            out.append(MatchedLine(m.key, label, line_index, list(values), source))
            if quota.exhausted(keys):
                return out
    return out


def scan_keywords(text: str | None, matchers: list[Matcher]) -> set[str]:
    """Keys whose pattern occurs anywhere in *text*."""
    if not text:
        return set()
    return {m.key for m in matchers if m.key and m.pattern.search(text)}


def normalize_table_values(values: list[str] | None, expected_count: int) -> list[str]:
    """Re-split values that arrived merged into fewer cells than expected."""
    arr = [normalize_text(v) for v in values or []]
    if not arr:
        return []
    if not expected_count or len(arr) >= expected_count:
        return arr

    flattened: list[str] = []
    for item in arr:
        split = extract_numbers_from_text(item, expected_count)
        if len(split) > 1:
            flattened.extend(split)
        else:
            flattened.append(item)

    if len(flattened) == expected_count:
        return flattened
    return arr
