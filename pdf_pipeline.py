from __future__ import annotations

import logging
import warnings
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

import pdfplumber
from pdfminer.pdfparser import PDFSyntaxError
from pdfplumber.utils.exceptions import PdfminerException

from pdf_blend import blend_matched_lines
from pdf_extract import chars_to_tokens, cluster_rows
from pdf_facts import facts_from_lines, find_year_context
from pdf_match import match_rows, match_text, scan_keywords
from pdf_models import LineFact, MatchedLine, Matcher, Row, ScanOptions, Source

logging.getLogger("pdfminer").setLevel(logging.ERROR)
warnings.filterwarnings("ignore", module="pdfminer")

log = logging.getLogger(__name__)


@dataclass
class DocumentScan:
    """Keyword hits and matched lines for one document."""

    path: str | None
    keywords: list[str] = field(default_factory=list)
    lines: list[MatchedLine] = field(default_factory=list)
    source: Source = Source.PDF_TEXT
    years: list[int] | None = None
    facts: list[LineFact] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "keywords": list(self.keywords),
            "keywordLines": [ml.to_dict() for ml in self.lines],
            "source": self.source.value,
            "years": list(self.years or []),
            "facts": [f.to_dict() for f in self.facts],
        }


def iter_page_rows(pdf: pdfplumber.PDF, max_pages: int) -> Iterator[Row]:
    """Rows of the first *max_pages* pages, top to bottom, page by page."""
    for page in pdf.pages[: max(1, max_pages)]:
        tokens = chars_to_tokens(page.chars, float(page.height))
        yield from cluster_rows(tokens)


def document_text(pdf: pdfplumber.PDF) -> str:
    return "\n".join(page.extract_text() or "" for page in pdf.pages)


def extract_lines_xy(
    pdf: pdfplumber.PDF, matchers: list[Matcher], options: ScanOptions
) -> list[MatchedLine]:
    return match_rows(iter_page_rows(pdf, options.max_pages), matchers, options)


def scan_pdf(
    pdf_path: str | Path,
    matchers: list[Matcher],
    options: ScanOptions | None = None,
    use_xy: bool = True,
) -> DocumentScan:
    """Run the text pipeline and, unless disabled, the layout pipeline on a PDF.

    Matched lines with a known statement label are also mapped onto the
    years of the first header line naming two or more years.

    A layout failure keeps the text result; only failing to open or read the
    document at all propagates.
    """
    options = options or ScanOptions()
    path = Path(pdf_path)
    result = DocumentScan(path=str(path))
    if not matchers:
        return result

    with pdfplumber.open(path) as pdf:
        text = document_text(pdf)
        result.keywords = sorted(scan_keywords(text, matchers))
        text_lines = match_text(text, matchers, options, Source.PDF_TEXT)
        result.lines = text_lines

        if use_xy:
            try:
                xy_lines = extract_lines_xy(pdf, matchers, options)
            except (PdfminerException, PDFSyntaxError, ValueError) as exc:
                log.warning("layout extraction failed for %s: %s", path, exc)
                xy_lines = []
            if xy_lines:
                result.lines = blend_matched_lines(xy_lines, text_lines)
                result.source = Source.PDF_XY

    result.years = find_year_context(text)
    result.facts = facts_from_lines(result.lines, result.years)

    log.info(
        "%s: %d keyword(s), %d line(s) via %s",
        path.name, len(result.keywords), len(result.lines), result.source.value,
    )
    return result


def scan_text(
    text: str | None,
    matchers: list[Matcher],
    options: ScanOptions | None = None,
) -> DocumentScan:
    """Plain-text fallback, e.g. the visible text of a web page."""
    options = options or ScanOptions()
    lines = match_text(text, matchers, options, Source.HTML_FALLBACK)
    years = find_year_context(text)
    return DocumentScan(
        path=None,
        keywords=sorted(scan_keywords(text, matchers)),
        lines=lines,
        source=Source.HTML_FALLBACK,
        years=years,
        facts=facts_from_lines(lines, years),
    )
