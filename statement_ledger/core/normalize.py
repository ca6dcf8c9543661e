"""
Data normalization and cleaning functions.
"""
import re
from datetime import datetime, date
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional
import logging

logger = logging.getLogger(__name__)

# Month/day order is US style, matching the extractor's date patterns.
DATE_FORMATS = [
    "%m/%d/%Y", "%m/%d/%y",
    "%m-%d-%Y", "%m-%d-%y",
    "%b %d, %Y", "%B %d, %Y", "%b %d %Y", "%B %d %Y",
    "%Y-%m-%d",
    "%m.%d.%Y", "%m.%d.%y",
    "%m %d %Y", "%m %d %y",
]

_SEPARATORS = re.compile(r'\s+[-|–—]\s+|\s{2,}')


def normalize_money(value: str) -> Optional[Decimal]:
    """
    Normalize an amount string by dropping currency symbols, codes, words and
    thousands separators.

    Args:
        value: Raw amount string such as ``$1,234.56`` or ``USD 45``

    Returns:
        Decimal value, or None if no number is present
    """
    if not value or not value.strip():
        return None

    cleaned = re.sub(r'[$,\s]', '', value.strip())

    match = re.search(r'\d+(?:\.\d+)?', cleaned)
    if not match:
        logger.warning(f"Could not extract numeric value from: {value}")
        return None

    try:
        return Decimal(match.group())
    except InvalidOperation:
        logger.warning(f"Could not parse amount: {value}")
        return None


def normalize_date(value: str) -> Optional[date]:
    """
    Normalize a date string in any of the extractor's formats.

    Args:
        value: Raw date string

    Returns:
        Date object or None if parsing fails
    """
    if not value or not value.strip():
        return None

    cleaned = re.sub(r'\s+', ' ', value.strip())

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue

    logger.warning(f"Could not parse date: {value}")
    return None


def normalize_text(value: str) -> str:
    """Trim and collapse whitespace."""
    if not value:
        return ""
    return re.sub(r'\s+', ' ', value.strip())


def clean_description(line: str, remove: Iterable[str] = ()) -> str:
    """
    Build a description by removing already-extracted values from a line.

    Args:
        line: Raw line text
        remove: Substrings to drop (first occurrence each), e.g. date and amount

    Returns:
        The remaining text fragments joined with `` - ``; the normalized line
        itself when nothing is left
    """
    remaining = line
    for value in remove:
        remaining = remaining.replace(value, '  ', 1)

    parts = [
        part.strip(' -|–—')
        for part in _SEPARATORS.split(f' {remaining} ')
    ]
    description = ' - '.join(part for part in parts if part)
    return normalize_text(description) or normalize_text(line)
