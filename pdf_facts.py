from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from pdf_match import iter_text_lines, normalize_table_values
from pdf_models import LineFact, MatchedLine
from pdf_numbers import extract_years_from_header, normalize_text, parse_money_to_int
from pdf_segment import extract_numbers_from_text

log = logging.getLogger(__name__)

# Line prefix -> canonical label of the statement total it reports.
LABEL_MAP: list[tuple[re.Pattern, str]] = [
    (re.compile(r"^kortfristiga skulder", re.IGNORECASE), "Summa Kortfristiga Skulder"),
    (re.compile(r"^långfristiga skulder", re.IGNORECASE), "Summa Långfristiga Skulder"),
]

_EXCLUDED_LINE_RE = re.compile(r"avskrivningar|resultat före skatt", re.IGNORECASE)


def normalize_label(raw_label: str | None) -> str | None:
    """Canonical label for a statement line, or None if it is not a mapped total."""
    s = normalize_text(raw_label).lower()
    for pattern, label in LABEL_MAP:
        if pattern.search(s):
            return label
    return None


def find_year_context(text: str | None) -> list[int] | None:
    """Years of the first line that names at least two, e.g. a column header."""
    for line in iter_text_lines(text):
        years = extract_years_from_header(line)
        if years:
            return years
    return None


def map_values_to_years(
    raw_line: str, values: list[str], years: list[int] | None
) -> LineFact | None:
    """Pair a line's money values with the year columns, newest column first.

    Surplus leading values (note numbers and the like) are dropped; a line
    with fewer parsable values than years yields None.
    """
    raw = normalize_text(raw_line)
    label = normalize_label(raw)
    if not label or _EXCLUDED_LINE_RE.search(raw):
        return None
    if not years or len(years) < 2:
        return None

    cells = normalize_table_values(values, len(years))
    amounts = [v for v in (parse_money_to_int(c) for c in cells) if v is not None]
    if len(amounts) > len(years):
        amounts = amounts[-len(years):]
    if len(amounts) != len(years):
        log.debug("%r: %d value(s) for %d year(s)", raw, len(amounts), len(years))
        return None
    return LineFact(label=label, raw_line=raw, data=list(zip(years, amounts)))


def parse_line_from_text(line: str | None, years: list[int] | None) -> LineFact | None:
    raw = normalize_text(line)
    if not raw or not years:
        return None
    return map_values_to_years(raw, extract_numbers_from_text(raw, len(years)), years)


def facts_from_lines(lines: Iterable[MatchedLine], years: list[int] | None) -> list[LineFact]:
    """Year-mapped facts for the matched lines that carry a mapped label."""
    if not years:
        return []
    facts: list[LineFact] = []
    for ml in lines:
        fact = map_values_to_years(ml.line, ml.values, years)
        if fact is not None:
            facts.append(fact)
    return facts
