"""Split runs of space-grouped digits into individual values.

Scandinavian statements group thousands with spaces, so a run such as
"22 875 000 20 000 000" is two values, while "4 990 429 295 000" is also
two values but grouped 3+2. The digits alone do not say where one value
ends; split_grouped_number_run picks the cheapest partition under a few
soft priors (values are mostly 2-3 groups, continuation groups have exactly
three digits, leading-zero groups are suspicious, the column count is known).
"""

from __future__ import annotations

import logging
import re
from typing import Callable

from pdf_models import Segmentation
from pdf_numbers import normalize_dashes, normalize_number_text, normalize_text

log = logging.getLogger(__name__)

_SIGNED_INT_RE = re.compile(r"^[+-]?\d+$")
_DIGITS_RE = re.compile(r"^\d+$")
_NUMBER_RUN_RE = re.compile(r"[+-]?\d[\d ]*")
_YEAR_RE = re.compile(r"^20\d{2}$")
_LEAD_GROUP_RE = re.compile(r"^\d{1,3}$")
_GROUP_RE = re.compile(r"^\d{3}$")
_LEADING_ZERO_RE = re.compile(r"^0\d+$")

_SEGMENT_LENGTHS = (2, 3, 1, 4)
_PART_COUNT_PENALTY = 0.15


def _unsigned(token: str) -> str:
    return token[1:] if token[:1] in ("+", "-") else token


def _expand_merged_digits(token: str) -> list[str]:
    sign = token[0] if token[:1] in ("+", "-") else ""
    digits = _unsigned(token)
    if not _DIGITS_RE.match(digits) or len(digits) <= 3:
        return [token]
    if len(digits) == 4:
        if _YEAR_RE.match(digits):
            return [token]
        return [f"{sign}{digits[:3]}", digits[3:]]
    if len(digits) == 5:
        return [f"{sign}{digits[:2]}", digits[2:]]
    if len(digits) == 6:
        return [f"{sign}{digits[:3]}", digits[3:]]
    return [token]


def _merged_pair(tokens: list[str]) -> list[str] | None:
    """"9 1330" -> ["9133", "0"]: the space landed one group too early."""
    if len(tokens) != 2:
        return None
    a, b = _unsigned(tokens[0]), _unsigned(tokens[1])
    if not (_LEAD_GROUP_RE.match(a) and re.match(r"^\d{4,6}$", b)):
        return None
    left, right = f"{a}{b[:3]}", b[3:]
    if left and right:
        return [left, right]
    return None


# Footnote repairs. Each takes the expanded all-digit tokens of a two-column
# run and returns the repaired values, or None when its pattern does not apply.

def repeated_note_digit(t: list[str]) -> list[str] | None:
    """"4 4 990 429" -> ["4 990 429"]."""
    lens = [len(_unsigned(x)) for x in t]
    if (
        len(t) == 4
        and lens[0] == 1
        and lens[1] == 1
        and _unsigned(t[0]) == _unsigned(t[1])
        and lens[2] == 3
        and lens[3] == 3
    ):
        return [f"{t[1]} {t[2]} {t[3]}"]
    return None


def leading_zero_merged(t: list[str]) -> list[str] | None:
    """"04 965 842" -> ["0", "4 965 842"]."""
    if len(t) == 3 and re.match(r"^0\d$", _unsigned(t[0])) and _is_group_pair(t[1:]):
        return ["0", f"{_unsigned(t[0])[1:]} {t[1]} {t[2]}"]
    return None


def note_digit_before_zero(t: list[str]) -> list[str] | None:
    """"404 965 842" -> ["0", "4 965 842"]: note 4, value 0, value 4 965 842."""
    if len(t) == 3 and re.match(r"^[1-9]0\d$", _unsigned(t[0])) and _is_group_pair(t[1:]):
        return ["0", f"{_unsigned(t[0])[2:]} {t[1]} {t[2]}"]
    return None


def doubled_leading_digit(t: list[str]) -> list[str] | None:
    """"44 990 429" -> ["4 990 429"]."""
    if len(t) != 3 or not _is_group_pair(t[1:]):
        return None
    g0 = _unsigned(t[0])
    if len(g0) == 2 and g0[0] == g0[1]:
        return [f"{g0[0]} {t[1]} {t[2]}"]
    return None


def three_plus_two(t: list[str]) -> list[str] | None:
    """"4 990 429 295 000" -> ["4 990 429", "295 000"], never 2+3."""
    if len(t) == 5 and _LEAD_GROUP_RE.match(_unsigned(t[0])) and all(
        _GROUP_RE.match(_unsigned(x)) for x in t[1:]
    ):
        return [" ".join(t[:3]), " ".join(t[3:])]
    return None


def note_then_zero(t: list[str]) -> list[str] | None:
    """"4 0 4 965 842" -> ["0", "4 965 842"]."""
    if len(t) < 4:
        return None
    last3 = t[-3:]
    if not (_LEAD_GROUP_RE.match(_unsigned(last3[0])) and _is_group_pair(last3[1:])):
        return None
    if not any(x in ("0", "+0", "-0") for x in t):
        return None
    return ["0", " ".join(last3)]


def _is_group_pair(pair: list[str]) -> bool:
    return all(_GROUP_RE.match(_unsigned(x)) for x in pair)


FOOTNOTE_REPAIRS: tuple[Callable[[list[str]], list[str] | None], ...] = (
    repeated_note_digit,
    leading_zero_merged,
    note_digit_before_zero,
    doubled_leading_digit,
    three_plus_two,
    note_then_zero,
)


def segment_cost(tokens: list[str], start: int, length: int) -> float:
    """Cost of treating tokens[start:start+length] as one grouped value."""
    if length == 1:
        cost = 1.2
    elif length == 2:
        cost = 0.0
    elif length == 3:
        cost = 0.1
    elif length == 4:
        cost = 0.6
    else:
        cost = 2 + (length - 4) * 1.5

    first = _unsigned(tokens[start])
    if not _LEAD_GROUP_RE.match(first):
        cost += 4
    if _LEADING_ZERO_RE.match(first) or first == "000":
        cost += 2

    for i in range(1, length):
        if not _GROUP_RE.match(_unsigned(tokens[start + i])):
            cost += 4
    return cost


def _best_partition(tokens: list[str], preferred_count: int) -> Segmentation | None:
    n = len(tokens)
    dp: list[Segmentation | None] = [None] * (n + 1)
    dp[0] = Segmentation(cost=0.0)

    for i in range(n):
        cell = dp[i]
        if cell is None:
            continue
        for length in _SEGMENT_LENGTHS:
            j = i + length
            if j > n:
                continue
            cost = cell.cost + segment_cost(tokens, i, length)
            if preferred_count > 0:
                cost += abs(len(cell.parts) + 1 - preferred_count) * _PART_COUNT_PENALTY
            if dp[j] is None or cost < dp[j].cost:
                dp[j] = Segmentation(cost=cost, parts=[*cell.parts, (i, j)])

    return dp[n]


def split_grouped_number_run(run: str | None, preferred_count: int = 0) -> list[str]:
    """Split a digit/space run into the most plausible list of values.

    preferred_count is the expected number of values (2 for a two-year
    statement); 0 disables the column-count prior and the digit expansion.
    Never returns an empty list for a non-empty run.
    """
    cleaned = normalize_text(run)
    if not cleaned:
        return []
    tokens = cleaned.split(" ")
    if len(tokens) == 1:
        return [cleaned]

    if preferred_count == 2:
        pair = _merged_pair(tokens)
        if pair is not None:
            return pair

    working: list[str] = []
    for token in tokens:
        pieces = _expand_merged_digits(token) if preferred_count > 0 else [token]
        working.extend(p for p in pieces if p)

    if any(not _SIGNED_INT_RE.match(t) for t in working):
        return [cleaned]
    if all(len(_unsigned(t)) > 3 for t in working):
        return working

    if preferred_count == 2:
        for repair in FOOTNOTE_REPAIRS:
            repaired = repair(working)
            if repaired is not None:
                log.debug("%s repaired %r -> %r", repair.__name__, cleaned, repaired)
                return repaired

    best = _best_partition(working, preferred_count)
    if best is None or not best.parts:
        return [cleaned]
    return [" ".join(working[a:b]) for a, b in best.parts]


def extract_numbers_from_text(text: str | None, preferred_count: int = 0) -> list[str]:
    """Find every numeric run in *text* and segment it into values."""
    s = normalize_dashes(normalize_number_text(text))
    out: list[str] = []
    for m in _NUMBER_RUN_RE.finditer(s):
        run = normalize_text(m.group())
        if not run:
            continue
        for part in split_grouped_number_run(run, preferred_count):
            value = normalize_text(part)
            if value:
                out.append(value)
    return out
