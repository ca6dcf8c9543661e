"""
Regex pattern families for dates, amounts, locations and categories.

Each family is an ordered list of patterns. ``find_*`` returns every distinct
match, patterns in order and matches in text order, so the first element is
the family's best guess for a single line.
"""
import re
from typing import Dict, List, Mapping, Optional, Pattern, Sequence
import logging

from .normalize import clean_description
from ..models.schema import ParsedTransaction

logger = logging.getLogger(__name__)

MONTH_NAMES = r'(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*'

DATE_PATTERNS = [
    re.compile(r'\b\d{1,2}/\d{1,2}/\d{2,4}\b'),                 # MM/DD/YYYY, MM/DD/YY
    re.compile(r'\b\d{1,2}-\d{1,2}-\d{2,4}\b'),                 # MM-DD-YYYY, MM-DD-YY
    re.compile(rf'\b{MONTH_NAMES} \d{{1,2}},? \d{{4}}\b'),      # Month DD, YYYY
    re.compile(r'\b\d{4}-\d{2}-\d{2}\b'),                       # YYYY-MM-DD
    re.compile(r'\b\d{1,2}\.\d{1,2}\.\d{2,4}\b'),               # MM.DD.YYYY, MM.DD.YY
    re.compile(r'\b\d{1,2}\s+\d{1,2}\s+\d{2,4}\b'),             # MM DD YYYY, MM DD YY
]

_NUMBER = r'(?:\d{1,3}(?:,\d{3})+|\d+)'
CURRENCY_CODES = r'(?:USD|EUR|GBP|CAD|AUD)'

AMOUNT_PATTERNS = [
    # $45, $1,234.56 or 45.99; never a piece of a date or a longer number
    re.compile(rf'(?<![\w$.,/])(?:\$\s?{_NUMBER}(?:\.\d{{2}})?|{_NUMBER}\.\d{{2}})(?![\w,/]|\.\d)'),
    re.compile(rf'\b\d+(?:\.\d{{2}})?\s*{CURRENCY_CODES}\b', re.IGNORECASE),
    re.compile(rf'\b{CURRENCY_CODES}\s*\d+(?:\.\d{{2}})?\b', re.IGNORECASE),
    re.compile(r'\b\d+(?:\.\d{2})?\s*(?:dollars?|euros?|pounds?)\b', re.IGNORECASE),
]

_PHRASE = r'([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)'

LOCATION_PATTERNS = [
    re.compile(rf'\b(?:at|in|from|to|near|by)\s+{_PHRASE}\b'),
    re.compile(rf'\b{_PHRASE}\s+(?:Store|Shop|Market|Restaurant|Hotel|Bank|Office|Center|Mall|Location|Branch)\b'),
    re.compile(rf'\b{_PHRASE}\s+(?:LLC|Inc|Corp|Company|Co|Ltd)\b'),
    re.compile(rf'\b{_PHRASE}\s+(?:Street|St|Avenue|Ave|Road|Rd|Boulevard|Blvd|Drive|Dr|Lane|Ln|Place|Pl|Court|Ct)\b'),
]

DEFAULT_CATEGORY_KEYWORDS: Dict[str, List[str]] = {
    "Food/Dining": ["Food", "Dining", "Restaurant", "Grocery", "Market"],
    "Transport": ["Transport", "Travel", "Gas", "Fuel", "Parking", "Uber", "Lyft", "Taxi"],
    "Shopping": ["Shopping", "Retail", "Store", "Mall", "Online"],
    "Entertainment": ["Entertainment", "Movie", "Theater", "Concert", "Event"],
    "Utility/Bill": ["Utility", "Bill", "Payment", "Service", "Subscription"],
    "Health/Medical": ["Health", "Medical", "Dental", "Pharmacy", "Insurance"],
    "Home/Housing": ["Home", "Housing", "Rent", "Mortgage", "Maintenance"],
}


def compile_category_patterns(keywords: Mapping[str, Sequence[str]]) -> List[Pattern]:
    """Compile one case-insensitive alternation per bucket, preserving bucket order."""
    patterns = []
    for bucket, words in keywords.items():
        if not words:
            logger.warning(f"Category bucket '{bucket}' has no keywords")
            continue
        alternation = '|'.join(re.escape(word) for word in words)
        patterns.append(re.compile(rf'\b(?:{alternation})\b', re.IGNORECASE))
    return patterns


def _distinct_matches(patterns: Sequence[Pattern], text: str, group: int = 0,
                      casefold: bool = False) -> List[str]:
    found = []
    seen = set()
    for pattern in patterns:
        for match in pattern.finditer(text):
            value = match.group(group)
            key = value.lower() if casefold else value
            if key not in seen:
                seen.add(key)
                found.append(value)
    return found


def find_dates(text: str) -> List[str]:
    return _distinct_matches(DATE_PATTERNS, text)


def find_amounts(text: str) -> List[str]:
    return _distinct_matches(AMOUNT_PATTERNS, text)


def find_locations(text: str) -> List[str]:
    return _distinct_matches(LOCATION_PATTERNS, text, group=1)


class FieldExtractor:
    """Runs the four pattern families over lines and page text."""

    def __init__(self, category_keywords: Optional[Mapping[str, Sequence[str]]] = None):
        self.category_keywords = DEFAULT_CATEGORY_KEYWORDS if category_keywords is None else category_keywords
        self.category_patterns = compile_category_patterns(self.category_keywords)

    @classmethod
    def from_settings(cls, settings) -> "FieldExtractor":
        return cls(category_keywords=settings.categories)

    def find_categories(self, text: str) -> List[str]:
        """Distinct category keywords, de-duplicated case-insensitively."""
        return _distinct_matches(self.category_patterns, text, casefold=True)

    def extract_line(self, line: str, line_number: int) -> ParsedTransaction:
        """
        Extract a provisional transaction from one logical line.

        Args:
            line: Reconstructed line text
            line_number: 1-based position of the line on its page

        Returns:
            ParsedTransaction; a blank line gives a placeholder with
            ``is_new_line`` set and nothing else
        """
        text = line.strip()
        if not text:
            return ParsedTransaction(line_number=line_number, is_new_line=True)

        dates = find_dates(text)
        amounts = find_amounts(text)
        locations = find_locations(text)
        categories = self.find_categories(text)

        date = dates[0] if dates else None
        amount = amounts[0] if amounts else None

        record = ParsedTransaction(
            date=date,
            amount=amount,
            location=locations[0] if locations else None,
            category=categories[0] if categories else None,
            description=clean_description(text, [v for v in (date, amount) if v]),
            raw_text=text,
            line_number=line_number,
        )
        logger.debug(f"Line {line_number}: date={record.date} amount={record.amount} "
                     f"location={record.location} category={record.category}")
        return record

    def extract_lines(self, text: str) -> List[ParsedTransaction]:
        """Extract one record per line of ``text``, blank lines included."""
        if not text.strip():
            return []
        return [
            self.extract_line(line, number)
            for number, line in enumerate(text.strip().split('\n'), 1)
        ]
