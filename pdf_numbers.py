from __future__ import annotations

import re

SANITY_LIMIT = 5_000_000_000

_WS_RE = re.compile(r"\s+")
_NUMERIC_TOKEN_RE = re.compile(r"^[+\-]?\d[\d .,:-]*$")
_DIGIT_RE = re.compile(r"\d")
# A '.' or ',' is a thousands separator only when a full 3-digit group follows it;
# "12,5" keeps its decimal comma.
_THOUSANDS_SEP_RE = re.compile(r"[.,](?=\d{3}(?:\D|$))")
_DASHES_RE = re.compile(r"[−–—]")
_MONEY_JUNK_RE = re.compile(r"[^\d\s-]")
_LEADING_INT_RE = re.compile(r"^-?\d+")
_YEAR_RE = re.compile(r"\b(20[0-3]\d)\b")


def normalize_text(s: str | None) -> str:
    """Replace non-breaking spaces, collapse whitespace runs and strip."""
    if not s:
        return ""
    return _WS_RE.sub(" ", str(s).replace("\u00a0", " ")).strip()


def normalize_dashes(s: str) -> str:
    return _DASHES_RE.sub("-", s)


def is_numeric_token(text: str | None) -> bool:
    t = normalize_text(text)
    if not t or not _DIGIT_RE.search(t):
        return False
    return _NUMERIC_TOKEN_RE.match(t) is not None


def normalize_number_text(text: str | None) -> str:
    """Turn '.'/',' thousand separators into spaces: "1.234.567" -> "1 234 567"."""
    s = _THOUSANDS_SEP_RE.sub(" ", normalize_text(text))
    return re.sub(r" +", " ", s).strip()


def parse_money_to_int(raw: str | None, sanity_limit: int = SANITY_LIMIT) -> int | None:
    """Parse a grouped money string such as "22 875 000" into an int.

    Returns None for empty or non-numeric input and for magnitudes above
    *sanity_limit*, which in practice are two values glued together.
    """
    if not raw:
        return None
    s = _MONEY_JUNK_RE.sub("", normalize_text(raw))
    if not s.strip():
        return None
    compact = _WS_RE.sub("", s)
    m = _LEADING_INT_RE.match(compact)
    if m is None:
        return None
    value = int(m.group())
    if abs(value) > sanity_limit:
        return None
    return value


def extract_years_from_header(text: str | None) -> list[int] | None:
    """Distinct years (2000-2039) in order of appearance; None if fewer than two."""
    years: list[int] = []
    for m in _YEAR_RE.finditer(normalize_text(text)):
        year = int(m.group(1))
        if year not in years:
            years.append(year)
    return years if len(years) >= 2 else None
