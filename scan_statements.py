"""Scan financial-statement PDFs for keyword rows and their year-column values.

For every PDF, two extraction passes run over the same document:
  1. text pipeline   – linearized page text, split into lines; digit runs on a
                       matching line are segmented into grouped numbers
  2. layout pipeline – positioned text runs clustered into rows by y, values
                       read per column by x (skipped with --no-xy)
The passes are blended per keyword and printed as one JSON object per file.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from pdfminer.pdfparser import PDFSyntaxError
from pdfplumber.utils.exceptions import PdfminerException

from pdf_match import DEFAULT_LENDER_KEYWORDS, build_keyword_matchers, build_loan_matchers
from pdf_models import ScanOptions
from pdf_pipeline import scan_pdf

log = logging.getLogger("scan_statements")


def run(
    pdf_paths: list[str],
    keywords: list[str] | None,
    options: ScanOptions,
    use_xy: bool = True,
) -> int:
    matchers = build_keyword_matchers(keywords) if keywords else build_loan_matchers()
    status = 0
    for pdf_path in pdf_paths:
        path = Path(pdf_path)
        if not path.exists():
            print(f"Error: file not found: {path}", file=sys.stderr)
            status = 1
            continue
        try:
            scan = scan_pdf(path, matchers, options, use_xy=use_xy)
        except (PdfminerException, PDFSyntaxError, OSError) as exc:
            log.error("could not read %s: %s", path, exc)
            status = 1
            continue
        print(json.dumps(scan.to_dict(), ensure_ascii=False))
    return status


def _build_parser() -> argparse.ArgumentParser:
    defaults = ScanOptions()
    parser = argparse.ArgumentParser(
        description="Extract keyword rows and their values from financial-statement PDFs.",
    )
    parser.add_argument("pdfs", nargs="+", help="Path(s) to PDF files")
    parser.add_argument(
        "-k", "--keyword",
        action="append", dest="keywords", metavar="WORD",
        help="Literal keyword to match (repeatable; default: loan/liability terms)",
    )
    parser.add_argument(
        "--lenders",
        action="store_true",
        help="Add the built-in lender names (Qred, Froda, Svea, ...) to the keywords",
    )
    parser.add_argument(
        "--max-lines-per-key",
        type=int, default=defaults.max_lines_per_key, metavar="N",
        help=f"Lines kept per keyword (default: {defaults.max_lines_per_key})",
    )
    parser.add_argument(
        "--max-total-lines",
        type=int, default=defaults.max_total_lines, metavar="N",
        help=f"Lines kept per document (default: {defaults.max_total_lines})",
    )
    parser.add_argument(
        "--preferred-count",
        type=int, default=defaults.preferred_count, metavar="N",
        help=f"Expected value columns per row (default: {defaults.preferred_count})",
    )
    parser.add_argument(
        "--max-pages",
        type=int, default=defaults.max_pages, metavar="N",
        help=f"Pages read by the layout pass (default: {defaults.max_pages})",
    )
    parser.add_argument(
        "--no-xy",
        action="store_true",
        help="Skip the layout pass and use linearized text only",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log segmentation and column decisions",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    options = ScanOptions(
        max_lines_per_key=args.max_lines_per_key,
        max_total_lines=args.max_total_lines,
        preferred_count=args.preferred_count,
        max_pages=args.max_pages,
    )
    keywords = list(args.keywords or [])
    if args.lenders:
        keywords.extend(DEFAULT_LENDER_KEYWORDS)
    return run(args.pdfs, keywords, options, use_xy=not args.no_xy)


if __name__ == "__main__":
    sys.exit(main())
