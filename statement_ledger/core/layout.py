"""
Page layout reconstruction: positioned text runs to lines and paragraphs.

Runs are grouped into logical lines by y (within ``LINE_TOLERANCE``), ordered
top to bottom and left to right, joined with synthetic spaces where the
horizontal gap calls for one, and split into paragraphs wherever the vertical
gap between lines exceeds ``PARAGRAPH_BREAK_FACTOR`` times the estimated
line height.
"""
import re
from typing import Any, Iterable, List, Optional, Sequence
import logging

from .extractors import FieldExtractor, find_amounts, find_dates, find_locations
from .loader import TextRun
from .normalize import normalize_text
from ..models.schema import IdentifiedData, ParsedPage

logger = logging.getLogger(__name__)

LINE_TOLERANCE = 5.0
SPACE_GAP = 5.0
LINE_HEIGHT_NOISE = 5.0
LINE_HEIGHT_SAMPLE_SIZE = 20
DEFAULT_LINE_HEIGHT = 12.0
PARAGRAPH_BREAK_FACTOR = 1.5


class LogicalLine:
    """Runs that share an inferred row, ordered left to right."""
    def __init__(self, y: float, runs: List[TextRun]):
        self.y = y
        self.runs = runs
        self.text = ""

    def __repr__(self):
        return f"LogicalLine(y={self.y}, text={self.text!r})"


def coerce_runs(items: Iterable[Any]) -> List[TextRun]:
    """Accept TextRun objects, mappings, or objects exposing ``text``/``x``/``y``."""
    runs = []
    for item in items:
        if isinstance(item, TextRun):
            runs.append(item)
        elif isinstance(item, dict) or hasattr(item, 'get'):
            runs.append(TextRun.from_mapping(item))
        else:
            runs.append(TextRun(
                text=getattr(item, 'text', '') or '',
                x=getattr(item, 'x', None),
                y=getattr(item, 'y', None),
            ))
    return runs


def joins_without_space(left: str, right: str) -> bool:
    """True when two runs continue a hyphenated word or a decimal number."""
    if not left or not right:
        return False
    return (
        (left.endswith('-') and right[0].islower())
        or (left[-1].isalpha() and right.startswith('-'))
        or (left.endswith('.') and right[0].isdigit())
        or (left[-1].isdigit() and right.startswith('.'))
    )


class LayoutReconstructor:
    """Rebuilds the reading order of a page from positioned runs."""

    def __init__(self,
                 line_tolerance: float = LINE_TOLERANCE,
                 space_gap: float = SPACE_GAP,
                 line_height_noise: float = LINE_HEIGHT_NOISE,
                 line_height_sample_size: int = LINE_HEIGHT_SAMPLE_SIZE,
                 default_line_height: float = DEFAULT_LINE_HEIGHT,
                 paragraph_break_factor: float = PARAGRAPH_BREAK_FACTOR,
                 extractor: Optional[FieldExtractor] = None):
        self.line_tolerance = line_tolerance
        self.space_gap = space_gap
        self.line_height_noise = line_height_noise
        self.line_height_sample_size = line_height_sample_size
        self.default_line_height = default_line_height
        self.paragraph_break_factor = paragraph_break_factor
        self.extractor = extractor or FieldExtractor()

    @classmethod
    def from_settings(cls, settings) -> "LayoutReconstructor":
        layout = settings.layout
        return cls(
            line_tolerance=layout.line_tolerance,
            space_gap=layout.space_gap,
            line_height_noise=layout.line_height_noise,
            line_height_sample_size=layout.line_height_sample_size,
            default_line_height=layout.default_line_height,
            paragraph_break_factor=layout.paragraph_break_factor,
            extractor=FieldExtractor.from_settings(settings),
        )

    def estimate_line_height(self, runs: Sequence[TextRun]) -> float:
        """Average the significant vertical steps among the first sampled runs."""
        steps = []
        last_y = None
        for run in runs[:self.line_height_sample_size]:
            if not run.has_position:
                continue
            y = round(run.y)
            if last_y is not None:
                diff = abs(y - last_y)
                if diff > self.line_height_noise:
                    steps.append(diff)
            last_y = y

        if not steps:
            return self.default_line_height
        return sum(steps) / len(steps)

    def group_lines(self, runs: Sequence[TextRun]) -> List[LogicalLine]:
        """Group positioned runs into lines, top to bottom."""
        positioned = []
        for run in runs:
            if not run.has_position:
                logger.warning(f"Skipping run without position: {run.text!r}")
                continue
            if not run.text:
                continue
            positioned.append(run)

        ordered = sorted(positioned, key=lambda r: (-r.y, r.x))

        lines: List[LogicalLine] = []
        for run in ordered:
            if lines and abs(run.y - lines[-1].y) <= self.line_tolerance:
                lines[-1].runs.append(run)
            else:
                lines.append(LogicalLine(y=run.y, runs=[run]))

        for line in lines:
            line.runs.sort(key=lambda r: r.x)
            line.text = self.join_runs(line.runs)

        return [line for line in lines if line.text]

    def join_runs(self, runs: Sequence[TextRun]) -> str:
        """Concatenate a line's runs, inserting spaces across real gaps."""
        pieces = []
        previous = None
        for run in runs:
            if previous is not None:
                gap = run.x - previous.x
                if gap > self.space_gap and not joins_without_space(previous.text, run.text):
                    pieces.append(' ')
            pieces.append(run.text)
            previous = run
        return normalize_text(''.join(pieces))

    def paragraph_breaks(self, lines: Sequence[LogicalLine], line_height: float) -> List[int]:
        """Indexes of lines that start a new paragraph."""
        threshold = line_height * self.paragraph_break_factor
        return [
            i for i in range(1, len(lines))
            if abs(lines[i - 1].y - lines[i].y) > threshold
        ]

    def page_text(self, runs: Sequence[TextRun]) -> str:
        """Reconstruct the full text of a page."""
        line_height = self.estimate_line_height(runs)
        lines = self.group_lines(runs)
        breaks = set(self.paragraph_breaks(lines, line_height))
        logger.debug(f"{len(lines)} lines, line height {line_height:.1f}, {len(breaks)} paragraph breaks")

        text = '\n'.join(
            f"\n\n{line.text}" if i in breaks else line.text
            for i, line in enumerate(lines)
        )
        return re.sub(r'\n{3,}', '\n\n', text).strip()

    def identify(self, text: str) -> IdentifiedData:
        return IdentifiedData(
            dates=find_dates(text),
            amounts=find_amounts(text),
            locations=find_locations(text),
            categories=self.extractor.find_categories(text),
        )

    def build_page(self, text: str, page_number: int) -> ParsedPage:
        """Build a ParsedPage from already reconstructed text."""
        text = text.strip()
        if not text:
            return ParsedPage(page_number=page_number)

        return ParsedPage(
            page_number=page_number,
            text=text,
            paragraphs=split_paragraphs(text),
            transactions=self.extractor.extract_lines(text),
            identified_data=self.identify(text),
        )

    def reconstruct(self, runs: Iterable[Any], page_number: int = 1) -> ParsedPage:
        """
        Reconstruct one page.

        Args:
            runs: Text runs in any order (TextRun objects or mappings)
            page_number: 1-based page number

        Returns:
            ParsedPage; empty text and paragraphs when nothing is extractable
        """
        text = self.page_text(coerce_runs(runs))
        page = self.build_page(text, page_number)
        logger.info(f"Page {page_number}: {len(page.paragraphs)} paragraphs, "
                    f"{len(page.transactions)} lines")
        return page


def split_paragraphs(text: str) -> List[str]:
    return [p.strip() for p in re.split(r'\n\n+', text) if p.strip()]


def reconstruct_page(runs: Iterable[Any], page_number: int = 1) -> ParsedPage:
    """Reconstruct a page with the default thresholds."""
    return LayoutReconstructor().reconstruct(runs, page_number)
