import unittest

from pdf_facts import (
    facts_from_lines,
    find_year_context,
    map_values_to_years,
    normalize_label,
    parse_line_from_text,
)
from pdf_models import LineFact, MatchedLine, Source

YEARS = [2024, 2023]

STATEMENT_TEXT = """Balansräkning
Not 2024-12-31 2023-12-31
Skulder till kreditinstitut 2 500 000 1 200 000
Kortfristiga skulder 22 875 000 20 000 000
"""


class TestLabelsAndYears(unittest.TestCase):
    def test_normalize_label(self) -> None:
        self.assertEqual(normalize_label("Kortfristiga skulder"), "Summa Kortfristiga Skulder")
        self.assertEqual(
            normalize_label("LÅNGFRISTIGA SKULDER till kreditinstitut"), "Summa Långfristiga Skulder"
        )
        self.assertIsNone(normalize_label("Skulder till kreditinstitut"))
        self.assertIsNone(normalize_label(None))

    def test_year_context_from_header_line(self) -> None:
        self.assertEqual(find_year_context(STATEMENT_TEXT), [2024, 2023])
        self.assertIsNone(find_year_context("Räkenskapsår 2024\nKortfristiga skulder 1 000"))
        self.assertIsNone(find_year_context(None))


class TestMapValuesToYears(unittest.TestCase):
    def test_parse_line_from_text(self) -> None:
        fact = parse_line_from_text("Kortfristiga skulder 22 875 000 20 000 000", YEARS)
        self.assertEqual(fact.label, "Summa Kortfristiga Skulder")
        self.assertEqual(fact.data, [(2024, 22875000), (2023, 20000000)])
        self.assertEqual(
            fact.to_dict(),
            {
                "label": "Summa Kortfristiga Skulder",
                "rawLine": "Kortfristiga skulder 22 875 000 20 000 000",
                "data": [{"year": 2024, "value": 22875000}, {"year": 2023, "value": 20000000}],
            },
        )

    def test_leading_note_value_is_dropped(self) -> None:
        fact = map_values_to_years("Kortfristiga skulder", ["7", "22 875 000", "20 000 000"], YEARS)
        self.assertEqual(fact.data, [(2024, 22875000), (2023, 20000000)])

    def test_merged_cell_is_resplit(self) -> None:
        fact = map_values_to_years("Långfristiga skulder", ["2 500 000 1 200 000"], YEARS)
        self.assertEqual(fact.data, [(2024, 2500000), (2023, 1200000)])

    def test_unusable_lines(self) -> None:
        self.assertIsNone(map_values_to_years("Skulder till kreditinstitut", ["1 000", "2 000"], YEARS))
        self.assertIsNone(map_values_to_years("Kortfristiga skulder avskrivningar", ["1 000", "2 000"], YEARS))
        self.assertIsNone(map_values_to_years("Kortfristiga skulder", ["n/a"], YEARS))
        self.assertIsNone(map_values_to_years("Kortfristiga skulder", ["1 000", "2 000"], [2024]))
        self.assertIsNone(parse_line_from_text("Kortfristiga skulder 1 000 2 000", None))


class TestFactsFromLines(unittest.TestCase):
    def test_only_mapped_labels_become_facts(self) -> None:
        lines = [
            MatchedLine("Kreditinstitut", "Skulder till kreditinstitut", 3, ["2 500 000", "1 200 000"], Source.PDF_XY),
            MatchedLine("Kortfristiga", "Kortfristiga skulder", 4, ["22 875 000", "20 000 000"], Source.PDF_TEXT),
        ]
        self.assertEqual(
            facts_from_lines(lines, YEARS),
            [
                LineFact(
                    label="Summa Kortfristiga Skulder",
                    raw_line="Kortfristiga skulder",
                    data=[(2024, 22875000), (2023, 20000000)],
                )
            ],
        )
        self.assertEqual(facts_from_lines(lines, None), [])


if __name__ == "__main__":
    unittest.main()
