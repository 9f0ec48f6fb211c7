import unittest

from pdf_blend import blend_matched_lines
from pdf_models import MatchedLine, Source


def _xy(key: str, idx: int, *values: str) -> MatchedLine:
    return MatchedLine(key, f"{key} row", idx, list(values), Source.PDF_XY)


def _tx(key: str, idx: int, *values: str) -> MatchedLine:
    return MatchedLine(key, f"{key} line", idx, list(values), Source.PDF_TEXT)


class TestBlendMatchedLines(unittest.TestCase):
    def test_blending_with_itself_is_identity(self) -> None:
        lines = [
            _xy("Kortfristiga", 3, "1 000", "2 000"),
            _xy("Kreditinstitut", 5, "500 000"),
            _xy("Kortfristiga", 5),
            _xy("Kreditinstitut", 9, "1 200 000", "950 000"),
        ]
        self.assertEqual(blend_matched_lines(lines, lines), lines)

    def test_blending_with_itself_keeps_list_order(self) -> None:
        lines = [
            _xy("Kreditinstitut", 5, "500 000"),
            _xy("Kortfristiga", 3, "1 000", "2 000"),
            _xy("Kreditinstitut", 2, "1 200 000", "950 000"),
        ]
        self.assertEqual(blend_matched_lines(lines, lines), lines)

    def test_layout_line_first_on_equal_position(self) -> None:
        xy = [_xy("Kreditinstitut", 8, "1 000", "2 000")]
        tx = [_tx("Qred", 1, "4 000")]
        self.assertEqual(blend_matched_lines(xy, tx), [xy[0], tx[0]])

    def test_one_side_empty(self) -> None:
        xy = [_xy("Kreditinstitut", 1, "1 000")]
        tx = [_tx("Kreditinstitut", 1, "1 000")]
        self.assertEqual(blend_matched_lines(xy, []), xy)
        self.assertEqual(blend_matched_lines([], tx), tx)
        self.assertEqual(blend_matched_lines(None, None), [])

    def test_richer_side_wins_per_position(self) -> None:
        xy = [_xy("Kreditinstitut", 4, "2 500 000")]
        tx = [_tx("Kreditinstitut", 3, "2 500 000", "1 200 000")]
        self.assertEqual(blend_matched_lines(xy, tx), tx)

    def test_layout_wins_ties(self) -> None:
        xy = [_xy("Kreditinstitut", 4, "2 500 000", "1 200 000")]
        tx = [_tx("Kreditinstitut", 3, "2 500 000", "1 200 000", "3")]
        self.assertEqual(blend_matched_lines(xy, tx), xy)

    def test_unpaired_lines_are_kept(self) -> None:
        xy = [_xy("Kreditinstitut", 4, "1 000", "2 000")]
        tx = [
            _tx("Kreditinstitut", 3, "1 000"),
            _tx("Kreditinstitut", 7, "3 000"),
            _tx("Qred", 9, "4 000"),
        ]
        blended = blend_matched_lines(xy, tx)
        self.assertEqual(blended, [xy[0], tx[1], tx[2]])


if __name__ == "__main__":
    unittest.main()
