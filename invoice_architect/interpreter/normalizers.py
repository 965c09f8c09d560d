"""
Value Normalizers Module.

This module provides normalization functions for:
    - Date tokens (re-emitted as ISO YYYY-MM-DD)
    - Amount tokens ("1,234.50" -> 1234.5)
    - Free-text fragments (whitespace collapsing)

Author: ML Engineering Team
"""

import re
from typing import Optional

from dateutil import parser as date_parser

from invoice_architect.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


class DateNormalizer:
    """
    Normalizes date tokens to ISO format (YYYY-MM-DD).

    Year-first and day-first numeric tokens are rearranged positionally
    (zero-padded, no calendar check), so a month/day/year token is NOT
    reinterpreted. Dotted and two-digit-year numeric tokens are read
    day-first by dateutil; anything else is tried month-first.

    Example:
        >>> normalizer = DateNormalizer()
        >>> normalizer.normalize("15/03/2024")
        "2024-03-15"
        >>> normalizer.normalize("2024/3/5")
        "2024-03-05"
        >>> normalizer.normalize("March 15, 2024")
        "2024-03-15"
    """

    # YYYY-MM-DD or YYYY/MM/DD
    YEAR_FIRST = re.compile(r'^(\d{4})[/\-](\d{1,2})[/\-](\d{1,2})$')
    # DD-MM-YYYY or DD/MM/YYYY
    DAY_FIRST = re.compile(r'^(\d{1,2})[/\-](\d{1,2})[/\-](\d{4})$')
    # DD.MM.YYYY, DD/MM/YY and other numeric day-first shapes left to dateutil
    NUMERIC_DAY_FIRST = re.compile(r'^\d{1,2}[./\-]\d{1,2}[./\-]\d{2}(?:\d{2})?$')

    OUTPUT_FORMAT = "%Y-%m-%d"

    def normalize(self, date_str: str) -> Optional[str]:
        """
        Normalize a date token.

        Args:
            date_str: Date token as found in the text.

        Returns:
            ISO date string, or None if the token cannot be parsed.
        """
        if not date_str:
            return None

        date_str = self._clean_date_string(date_str)

        match = self.YEAR_FIRST.match(date_str)
        if match:
            year, month, day = match.groups()
            return f"{year}-{month.zfill(2)}-{day.zfill(2)}"

        match = self.DAY_FIRST.match(date_str)
        if match:
            day, month, year = match.groups()
            return f"{year}-{month.zfill(2)}-{day.zfill(2)}"

        return self._try_dateutil_parser(date_str, day_first=bool(self.NUMERIC_DAY_FIRST.match(date_str)))

    def _clean_date_string(self, date_str: str) -> str:
        # Remove extra whitespace and ordinal suffixes (1st, 2nd, 3rd, 4th)
        date_str = ' '.join(date_str.split())
        date_str = re.sub(r'(\d+)(st|nd|rd|th)\b', r'\1', date_str, flags=re.IGNORECASE)
        return date_str.strip(' ,.')

    def _try_dateutil_parser(self, date_str: str, day_first: bool = False) -> Optional[str]:
        """
        Parse with dateutil, month-first then day-first, or the other way
        round when day_first is set.

        Returns:
            ISO date string or None.
        """
        for dayfirst in ((True, False) if day_first else (False, True)):
            try:
                return date_parser.parse(date_str, dayfirst=dayfirst).strftime(self.OUTPUT_FORMAT)
            except (ValueError, OverflowError):
                continue
        logger.debug(f"Could not parse date: {date_str}")
        return None


class AmountNormalizer:
    """
    Converts numeric tokens with thousands separators to floats.

    Example:
        >>> AmountNormalizer().to_float("1,234.50")
        1234.5
    """

    def to_float(self, amount_str: str) -> Optional[float]:
        """
        Convert an amount token to float.

        Args:
            amount_str: Token such as "25", "25.00" or "1,234.50".

        Returns:
            Float value, or None if the token is not a number.
        """
        if not amount_str:
            return None
        cleaned = re.sub(r'[^\d.\-]', '', amount_str.replace(',', ''))
        try:
            return float(cleaned)
        except ValueError:
            logger.debug(f"Could not parse amount: {amount_str}")
            return None


def clean_text(text: str) -> str:
    """Collapse horizontal whitespace and strip a single-line fragment."""
    return re.sub(r'[ \t]+', ' ', text).strip()
