from __future__ import annotations

from pdf_models import MatchedLine

_SCORE_CAP = 2


def _by_key(lines: list[MatchedLine]) -> dict[str, list[tuple[int, MatchedLine]]]:
    grouped: dict[str, list[tuple[int, MatchedLine]]] = {}
    for pos, ml in enumerate(lines):
        grouped.setdefault(ml.key, []).append((pos, ml))
    return grouped


def _score(ml: MatchedLine) -> int:
    return min(len(ml.values), _SCORE_CAP)


def blend_matched_lines(
    xy_lines: list[MatchedLine] | None,
    text_lines: list[MatchedLine] | None,
) -> list[MatchedLine]:
    """Merge layout and text pipeline results for one document.

    Lines are paired per key by position. The side with more values wins
    (counted up to two), the layout line on a tie; unpaired lines are kept.
    Each kept line is placed by its position in the list it came from, layout
    lines first on equal positions. line_index is not used for ordering since
    the two pipelines count lines differently.
    """
    xy = list(xy_lines or [])
    tx = list(text_lines or [])
    if not xy:
        return tx
    if not tx:
        return xy

    xy_map = _by_key(xy)
    tx_map = _by_key(tx)
    keys = list(xy_map) + [k for k in tx_map if k not in xy_map]

    chosen: list[tuple[int, int, MatchedLine]] = []  # (position, side, line)
    for key in keys:
        xa = xy_map.get(key, [])
        ta = tx_map.get(key, [])
        for i in range(max(len(xa), len(ta))):
            xv = xa[i] if i < len(xa) else None
            tv = ta[i] if i < len(ta) else None
            if xv is not None and (tv is None or _score(xv[1]) >= _score(tv[1])):
                chosen.append((xv[0], 0, xv[1]))
            else:
                chosen.append((tv[0], 1, tv[1]))

    chosen.sort(key=lambda c: (c[0], c[1]))
    return [ml for _, _, ml in chosen]
