import unittest

from pdf_numbers import (
    extract_years_from_header,
    is_numeric_token,
    normalize_number_text,
    normalize_text,
    parse_money_to_int,
)


class TestNumericLexer(unittest.TestCase):
    def test_normalize_text_collapses_nbsp_and_whitespace(self) -> None:
        self.assertEqual(normalize_text("  22\u00a0875 \t 000 "), "22 875 000")
        self.assertEqual(normalize_text(None), "")

    def test_grouped_numbers_are_numeric(self) -> None:
        self.assertTrue(is_numeric_token("22 875 000"))
        self.assertTrue(is_numeric_token("22\u00a0875\u00a0000"))
        self.assertTrue(is_numeric_token("-1 200"))
        self.assertTrue(is_numeric_token("12,5"))
        self.assertTrue(is_numeric_token("2023-12-31"))

    def test_labels_are_not_numeric(self) -> None:
        self.assertFalse(is_numeric_token("Kreditinstitut"))
        self.assertFalse(is_numeric_token("Not 3"))
        self.assertFalse(is_numeric_token("..."))
        self.assertFalse(is_numeric_token(""))
        self.assertFalse(is_numeric_token(None))

    def test_thousand_separators_become_spaces(self) -> None:
        self.assertEqual(normalize_number_text("1.234.567"), "1 234 567")
        self.assertEqual(normalize_number_text("1,234"), "1 234")

    def test_decimal_separators_are_kept(self) -> None:
        self.assertEqual(normalize_number_text("12,5"), "12,5")
        self.assertEqual(normalize_number_text("1.2345"), "1.2345")


class TestMoneyNormalizer(unittest.TestCase):
    def test_parses_grouped_value(self) -> None:
        self.assertEqual(parse_money_to_int("22 875 000"), 22875000)
        self.assertEqual(parse_money_to_int("-1 200"), -1200)
        self.assertEqual(parse_money_to_int("1 234 kr"), 1234)

    def test_rejects_empty_and_non_numeric(self) -> None:
        self.assertIsNone(parse_money_to_int(None))
        self.assertIsNone(parse_money_to_int(""))
        self.assertIsNone(parse_money_to_int("saknas"))

    def test_rejects_magnitudes_above_sanity_limit(self) -> None:
        self.assertEqual(parse_money_to_int("5 000 000 000"), 5_000_000_000)
        self.assertIsNone(parse_money_to_int("6 000 000 000"))
        self.assertIsNone(parse_money_to_int("-6 000 000 000"))
        self.assertIsNone(parse_money_to_int("1 500", sanity_limit=1000))


class TestYearHeader(unittest.TestCase):
    def test_distinct_years_in_order(self) -> None:
        self.assertEqual(extract_years_from_header("Not 2024-12-31 2023-12-31"), [2024, 2023])

    def test_needs_two_distinct_years(self) -> None:
        self.assertIsNone(extract_years_from_header("2024 2024"))
        self.assertIsNone(extract_years_from_header("Balansräkning"))


if __name__ == "__main__":
    unittest.main()
