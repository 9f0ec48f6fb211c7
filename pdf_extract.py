from __future__ import annotations

import logging
import math
import re
from collections import defaultdict
from typing import Callable

from pdf_models import Row, Token
from pdf_numbers import is_numeric_token, normalize_text
from pdf_segment import extract_numbers_from_text

log = logging.getLogger(__name__)

COLUMN_TOLERANCE = 28.0
_DEFAULT_HEIGHT = 8.0
_MIN_SPLIT_GAP = 8.0
_DIGIT_GROUP_GAP = 0.3
_DUPLICATED_LABEL_RE = re.compile(r"^(.{4,}?)\1$")


def chars_to_tokens(chars: list[dict], page_height: float) -> list[Token]:
    """Group pdfplumber page.chars into positioned text runs.

    Characters on the same rounded 'top' are joined left to right. A run is
    broken on an x gap wider than 1.5 average char widths, and on a space
    unless digits sit on both sides of it, so "22 875 000" stays one run
    while "Kreditinstitut 22 875 000" becomes a label run and a number run.
    Digit groups separated only by a visible gap (over 0.3 char widths) get a
    space, so typeset "22 875 000" without space glyphs reads the same.
    y is flipped to PDF user space so larger y means higher on the page.
    """
    by_y: dict[int, list[dict]] = defaultdict(list)
    for c in chars:
        by_y[round(c["top"])].append(c)

    tokens: list[Token] = []
    for y_key in sorted(by_y.keys()):
        row = sorted(by_y[y_key], key=lambda c: c["x0"])
        run: list[dict] = []

        def flush() -> None:
            text = normalize_text("".join(c["text"] for c in run))
            if text:
                solid = [c for c in run if c["text"].strip()]
                x0 = min(c["x0"] for c in solid)
                x1 = max(c["x1"] for c in solid)
                top = min(c["top"] for c in solid)
                bottom = max(c["bottom"] for c in solid)
                tokens.append(
                    Token(
                        text=text,
                        x=float(x0),
                        y=float(page_height - bottom),
                        w=float(x1 - x0),
                        h=float(bottom - top),
                    )
                )
            run.clear()

        for i, c in enumerate(row):
            ch = c["text"]
            solid = [r for r in run if r["text"].strip()]
            if solid:
                width = solid[-1]["x1"] - solid[0]["x0"]
                avg_char_width = width / len(solid) if width > 0 else 5.0
                gap = c["x0"] - solid[-1]["x1"]
                if ch.strip() and gap > max(avg_char_width * 1.5, 4.0):
                    flush()
                elif (
                    ch.isdigit()
                    and run[-1]["text"].isdigit()
                    and gap > avg_char_width * _DIGIT_GROUP_GAP
                ):
                    # thousand groups set apart by spacing, no space glyph
                    run.append({"text": " "})
            if not ch.strip():
                prev_ch = run[-1]["text"] if run else ""
                next_ch = row[i + 1]["text"] if i + 1 < len(row) else ""
                if not (prev_ch.isdigit() and next_ch.isdigit()):
                    flush()
                    continue
                if not run:
                    continue
            run.append(c)
        flush()

    return tokens


def _height(token: Token) -> float:
    return token.h if math.isfinite(token.h) else 0.0


def _upper_median(values: list[float]) -> float:
    ordered = sorted(values)
    return ordered[len(ordered) // 2]


def cluster_rows(tokens: list[Token]) -> list[Row]:
    """Group a page's tokens into visual rows, top of page first.

    Single pass: each token joins the nearest row whose mean y is within
    tolerance, otherwise it opens a new row.
    """
    if not tokens:
        return []
    ordered = sorted(tokens, key=lambda t: -t.y)

    heights = [_height(t) for t in ordered if _height(t) > 0]
    median_h = _upper_median(heights) if heights else _DEFAULT_HEIGHT
    y_tol = max(2.5, min(10.0, median_h * 0.6))

    rows: list[Row] = []
    for t in ordered:
        best: Row | None = None
        best_dy = math.inf
        for r in rows:
            dy = abs(r.y - t.y)
            if dy <= y_tol and dy < best_dy:
                best = r
                best_dy = dy
        if best is None:
            rows.append(Row(y=t.y, tokens=[t]))
        else:
            best.tokens.append(t)
            n = len(best.tokens)
            best.y = (best.y * (n - 1) + t.y) / n

    for r in rows:
        r.tokens.sort(key=lambda t: t.x)
        r.text = normalize_text(" ".join(t.text for t in r.tokens))
    rows.sort(key=lambda r: -r.y)
    log.debug("clustered %d tokens into %d rows (y_tol=%.2f)", len(tokens), len(rows), y_tol)
    return rows


def _joined_text(tokens: list[Token]) -> str:
    return normalize_text(" ".join(t.text for t in sorted(tokens, key=lambda t: t.x)))


def _first_value(tokens: list[Token]) -> str:
    values = extract_numbers_from_text(_joined_text(tokens), 1)
    return values[0] if values else ""


# Column strategies, tried in order by resolve_columns. Each receives the
# row's numeric tokens (x-ascending, at least two) and returns exactly
# preferred_count values, or None to defer to the next strategy.

def direct_pair(nums: list[Token], preferred_count: int) -> list[str] | None:
    """A single token already holds every column, e.g. "1 200 000 950 000"."""
    if preferred_count <= 0:
        return None
    candidates = [extract_numbers_from_text(t.text, preferred_count) for t in nums]
    candidates = [c for c in candidates if len(c) == preferred_count]
    if not candidates:
        return None
    return max(candidates, key=lambda c: len("".join(c)))


def column_anchors(nums: list[Token], preferred_count: int) -> list[str] | None:
    """Assign tokens to the right-most x bands and read one value per band."""
    if preferred_count <= 0:
        return None
    centers = sorted(t.x + (t.w or 0) / 2 for t in nums)

    bands: list[list[float]] = []  # [mean, count]
    for cx in centers:
        if not bands or abs(cx - bands[-1][0]) > COLUMN_TOLERANCE:
            bands.append([cx, 1])
        else:
            mean, count = bands[-1]
            bands[-1] = [(mean * count + cx) / (count + 1), count + 1]

    anchor_count = max(1, preferred_count)
    anchors = sorted(sorted(b[0] for b in bands)[-anchor_count:])

    buckets: list[list[Token]] = [[] for _ in anchors]
    for t in nums:
        cx = t.x + (t.w or 0) / 2
        best_idx = min(range(len(anchors)), key=lambda i: abs(cx - anchors[i]))
        buckets[best_idx].append(t)

    values = [_first_value(b) for b in buckets if b]
    values = [v for v in values if v]
    if len(values) == preferred_count:
        return values
    return None


def _gap_groups(nums: list[Token]) -> list[str]:
    gaps = [
        nums[i + 1].x - (nums[i].x + (nums[i].w or 0))
        for i in range(len(nums) - 1)
    ]
    gaps = [g for g in gaps if math.isfinite(g)]
    median_gap = _upper_median(gaps) if gaps else 0.0
    split_gap = max(_MIN_SPLIT_GAP, median_gap * 1.8)

    groups: list[list[Token]] = [[nums[0]]]
    for prev, nxt in zip(nums, nums[1:]):
        if nxt.x - (prev.x + (prev.w or 0)) > split_gap:
            groups.append([nxt])
        else:
            groups[-1].append(nxt)

    values = [_first_value(g) for g in groups]
    return [v for v in values if v]


def gap_resplit(nums: list[Token], preferred_count: int) -> list[str] | None:
    """Everything formed one gap group; try splitting its value into columns."""
    if preferred_count <= 0:
        return None
    values = _gap_groups(nums)
    if len(values) != 1:
        return None
    repaired = extract_numbers_from_text(values[0], preferred_count)
    if len(repaired) == preferred_count:
        return repaired
    return None


def full_row_text(nums: list[Token], preferred_count: int) -> list[str] | None:
    """Segment every numeric token of the row as one run."""
    if preferred_count <= 0:
        return None
    values = extract_numbers_from_text(_joined_text(nums), preferred_count)
    if len(values) >= preferred_count:
        return values[:preferred_count]
    return None


COLUMN_STRATEGIES: tuple[Callable[[list[Token], int], list[str] | None], ...] = (
    direct_pair,
    column_anchors,
    gap_resplit,
    full_row_text,
)


def resolve_columns(tokens: list[Token], preferred_count: int = 2) -> list[str]:
    """Read a row's numeric columns, aiming for preferred_count values.

    Falls back to a best-effort list of another length when no strategy
    produces exactly preferred_count values.
    """
    nums = sorted((t for t in tokens if is_numeric_token(t.text)), key=lambda t: t.x)
    if not nums:
        return []
    if len(nums) == 1:
        return extract_numbers_from_text(nums[0].text, preferred_count)

    for strategy in COLUMN_STRATEGIES:
        values = strategy(nums, preferred_count)
        if values is not None:
            log.debug("%s resolved %r -> %r", strategy.__name__, _joined_text(nums), values)
            return values

    values = _gap_groups(nums)
    if values:
        return values
    return extract_numbers_from_text(_joined_text(nums), preferred_count)


def collapse_duplicated_label(label: str) -> str:
    """"Kortfristiga fordringarKortfristiga fordringar" -> "Kortfristiga fordringar"."""
    m = _DUPLICATED_LABEL_RE.match(label)
    if m and m.group(1):
        return m.group(1).strip()
    return label


def line_without_numbers(tokens: list[Token]) -> str:
    """Row label: the non-numeric tokens joined, OCR doubling collapsed."""
    parts = [t.text for t in tokens if not is_numeric_token(t.text)]
    return collapse_duplicated_label(normalize_text(" ".join(parts)))
