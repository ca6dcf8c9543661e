"""
PDF loading and text-run extraction using pdfplumber.
"""
import re
import pdfplumber
from pathlib import Path
from typing import Any, List, Mapping, Optional
import logging

logger = logging.getLogger(__name__)

LIGATURES = {
    'ﬁ': 'fi',
    'ﬂ': 'fl',
    'ﬀ': 'ff',
    'ﬃ': 'ffi',
    'ﬄ': 'ffl',
    'ﬆ': 'st',
    'ﬅ': 'st'
}


class TextRun:
    """A run of text positioned at (x, y) in page space, y increasing upward."""
    def __init__(self, text: str, x: Optional[float] = None, y: Optional[float] = None):
        self.text = text
        self.x = x
        self.y = y

    @property
    def has_position(self) -> bool:
        return self.x is not None and self.y is not None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TextRun":
        """
        Build a run from a ``{text, x, y}`` mapping.

        Viewer-style items (``{str, transform}`` with the origin in
        ``transform[4:6]``) are accepted too. Missing coordinates become None.
        """
        x = data.get('x')
        y = data.get('y')
        transform = data.get('transform')
        if x is None and y is None and transform and len(transform) >= 6:
            x, y = transform[4], transform[5]
        return cls(
            text=data.get('text') or data.get('str') or '',
            x=float(x) if x is not None else None,
            y=float(y) if y is not None else None,
        )

    def __eq__(self, other):
        if not isinstance(other, TextRun):
            return NotImplemented
        return (self.text, self.x, self.y) == (other.text, other.x, other.y)

    def __repr__(self):
        return f"TextRun({self.text!r}, x={self.x}, y={self.y})"


class PageRuns:
    """All text runs of one page."""
    def __init__(self, page_num: int, width: float, height: float, runs: List[TextRun]):
        self.page_num = page_num
        self.width = width
        self.height = height
        self.runs = runs

    def __repr__(self):
        return f"PageRuns(page_num={self.page_num}, runs={len(self.runs)})"


def normalize_run_text(text: str) -> str:
    """Replace ligatures and collapse whitespace."""
    for ligature, replacement in LIGATURES.items():
        text = text.replace(ligature, replacement)
    return re.sub(r'\s+', ' ', text).strip()


class PDFLoader:
    """Opens a PDF and converts each page's words into text runs."""

    def __init__(self, pdf_path: Path):
        self.pdf_path = pdf_path
        self._pdf = None
        self._pages: List[PageRuns] = []

    def load(self) -> List[PageRuns]:
        """Load the PDF and extract runs from all pages."""
        if self._pages:
            return self._pages

        try:
            self._pdf = pdfplumber.open(self.pdf_path)
            logger.info(f"Loaded PDF with {len(self._pdf.pages)} pages")

            for i, page in enumerate(self._pdf.pages, 1):
                words_data = page.extract_words(
                    x_tolerance=1,
                    y_tolerance=2,
                    keep_blank_chars=False,
                    use_text_flow=True
                )
                height = float(page.height)

                runs = []
                for word_data in words_data:
                    text = normalize_run_text(word_data.get('text', ''))
                    if not text:
                        continue
                    # pdfplumber measures from the top; runs use a bottom-up y axis
                    runs.append(TextRun(
                        text=text,
                        x=float(word_data.get('x0', 0)),
                        y=height - float(word_data.get('bottom', 0)),
                    ))

                self._pages.append(PageRuns(
                    page_num=i,
                    width=float(page.width),
                    height=height,
                    runs=runs
                ))
                logger.debug(f"Page {i}: {len(runs)} runs extracted")

            return self._pages

        except Exception as e:
            logger.error(f"Error loading PDF: {e}")
            raise

    def get_page(self, page_num: int) -> Optional[PageRuns]:
        """Get a specific page by number (1-indexed)."""
        if not self._pages:
            self.load()

        if 1 <= page_num <= len(self._pages):
            return self._pages[page_num - 1]
        return None

    def close(self):
        """Close the PDF file."""
        if self._pdf:
            self._pdf.close()
            self._pdf = None
