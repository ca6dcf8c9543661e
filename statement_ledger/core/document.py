"""
Document-level assembly: multi-page reconstruction, the exported page-marker
text form, and summary statistics across pages.
"""
import re
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Sequence
import logging

from .layout import LayoutReconstructor
from .loader import PageRuns
from .normalize import normalize_date, normalize_money
from ..models.schema import (
    DocumentAmountRange,
    DocumentDateRange,
    DocumentSummary,
    ParsedDocument,
    ParsedPage,
    TextStats,
)

logger = logging.getLogger(__name__)

PAGE_MARKER = re.compile(r'^--- Page (\d+)( \(Error\))? ---[ \t]*$', re.MULTILINE)
ERROR_PLACEHOLDER = "[Could not extract text from this page]"


def _unique(values: Iterable[str], casefold: bool = False) -> List[str]:
    seen = set()
    result = []
    for value in values:
        key = value.lower() if casefold else value
        if key not in seen:
            seen.add(key)
            result.append(value)
    return result


def summarize_dates(dates: Sequence[str]) -> Optional[DocumentDateRange]:
    """Earliest and latest date strings, compared as calendar dates."""
    parsed = [(normalize_date(value), value) for value in dates]
    comparable = [(d, value) for d, value in parsed if d is not None]
    if not comparable:
        return None

    earliest = min(comparable, key=lambda item: item[0])
    latest = max(comparable, key=lambda item: item[0])
    return DocumentDateRange(earliest=earliest[1], latest=latest[1])


def summarize_amounts(amounts: Sequence[str]) -> Optional[DocumentAmountRange]:
    """Smallest, largest and total of the amount strings."""
    parsed = [(normalize_money(value), value) for value in amounts]
    numeric = [(amount, value) for amount, value in parsed if amount is not None]
    if not numeric:
        return None

    smallest = min(numeric, key=lambda item: item[0])
    largest = max(numeric, key=lambda item: item[0])
    total = sum((amount for amount, _ in numeric), Decimal('0'))
    return DocumentAmountRange(min=smallest[1], max=largest[1], total=f"{total:.2f}")


def summarize(pages: Sequence[ParsedPage]) -> DocumentSummary:
    """Compute document statistics from parsed pages."""
    all_dates = [d for page in pages for d in page.identified_data.dates]
    all_amounts = [a for page in pages for a in page.identified_data.amounts]

    return DocumentSummary(
        total_pages=len(pages),
        page_numbers=[page.page_number for page in pages],
        has_content=any(page.has_content for page in pages),
        total_transactions=sum(len(page.transactions) for page in pages),
        date_range=summarize_dates(all_dates),
        amount_range=summarize_amounts(all_amounts),
        locations=_unique(loc for page in pages for loc in page.identified_data.locations),
        categories=_unique(
            (cat for page in pages for cat in page.identified_data.categories),
            casefold=True,
        ),
    )


def parse_document(pages: Sequence[ParsedPage]) -> ParsedDocument:
    return ParsedDocument(pages=list(pages), summary=summarize(pages))


def reconstruct_document(pages_runs: Iterable[Any],
                         reconstructor: Optional[LayoutReconstructor] = None) -> ParsedDocument:
    """
    Reconstruct every page of a document.

    Args:
        pages_runs: PageRuns objects, or plain run sequences numbered from 1
        reconstructor: Reconstructor to use; default thresholds when omitted

    Returns:
        ParsedDocument. A page that fails is kept as an error page.
    """
    reconstructor = reconstructor or LayoutReconstructor()
    pages = []

    for index, item in enumerate(pages_runs, 1):
        if isinstance(item, PageRuns):
            page_number, runs = item.page_num, item.runs
        else:
            page_number, runs = index, item

        try:
            pages.append(reconstructor.reconstruct(runs, page_number))
        except Exception as e:
            logger.warning(f"Error processing page {page_number}: {e}")
            pages.append(ParsedPage(page_number=page_number, error=str(e)))

    return parse_document(pages)


def render_document_text(pages: Sequence[ParsedPage]) -> str:
    """Render pages into the exported text form with ``--- Page N ---`` markers."""
    sections = []
    for page in pages:
        if page.error is not None:
            sections.append(f"--- Page {page.page_number} (Error) ---\n\n{ERROR_PLACEHOLDER}")
        elif page.text:
            sections.append(f"--- Page {page.page_number} ---\n\n{page.text}")
    return '\n\n'.join(sections)


def parse_document_text(text: str,
                        reconstructor: Optional[LayoutReconstructor] = None) -> ParsedDocument:
    """
    Parse exported document text back into pages.

    Text without page markers is treated as a single page.
    """
    reconstructor = reconstructor or LayoutReconstructor()

    parts = PAGE_MARKER.split(text)
    sections = []
    if parts[0].strip():
        sections.append((None, False, parts[0]))
    for i in range(1, len(parts), 3):
        sections.append((int(parts[i]), bool(parts[i + 1]), parts[i + 2]))

    pages = []
    for index, (number, failed, body) in enumerate(sections, 1):
        page_number = number or index
        if failed:
            pages.append(ParsedPage(page_number=page_number, error=body.strip() or ERROR_PLACEHOLDER))
        else:
            pages.append(reconstructor.build_page(body, page_number))

    logger.info(f"Parsed {len(pages)} pages from document text")
    return parse_document(pages)


def text_stats(text: str) -> TextStats:
    return TextStats(
        words=len(text.split()),
        lines=len(text.split('\n')),
        characters=len(text),
        characters_no_spaces=len(re.sub(r'\s', '', text)),
    )
