"""
Cell parsing for spreadsheet imports.

Spreadsheets reach us from two worlds: the bank export writes Indonesian
numbers ("1.234.567,00") while files edited by hand often use the US style
("1,234,567.00"). Dates come as DD/MM/YYYY, YYYY-MM-DD or DD-MM-YYYY.

Example:
    >>> parse_number("1.234.567,00")
    Decimal('1234567.00')

    >>> parse_number("1,234,567.00")
    Decimal('1234567.00')

    >>> parse_date("25/04/2022")
    datetime.date(2022, 4, 25)
"""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from components.credit.models import (
    COLLECTIBILITY_CODES,
    STATUS_CURRENT,
    STATUS_DOUBTFUL,
    STATUS_LOSS,
    STATUS_PAID_OFF,
    STATUS_SPECIAL_MENTION,
    STATUS_SUBSTANDARD,
)

EMPTY_MARKERS = ("", "-", "N/A")

DECIMAL_COMMA = re.compile(r",\d{1,2}$")
NOT_NUMERIC = re.compile(r"[^\d.,-]")

DATE_PATTERNS = (
    (re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$"), ("day", "month", "year")),
    (re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$"), ("year", "month", "day")),
    (re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$"), ("day", "month", "year")),
)


def is_blank(value: Any) -> bool:
    """True for None and for cells that hold nothing but whitespace."""
    return value is None or (isinstance(value, str) and not value.strip())


def parse_number(value: Any) -> Optional[Decimal]:
    """
    Parse a number in either decimal-comma or decimal-point style.

    A comma followed by one or two trailing digits marks a decimal comma,
    every dot is then a thousands separator. Otherwise every comma is a
    thousands separator, and a value with more than one dot is dot-grouped.

    Returns:
        Decimal or None for empty cells, "-" and "N/A"

    Raises:
        ValueError: If the cell holds something that is not a number
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"Cannot parse number '{value}'")
    if isinstance(value, (int, Decimal)):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))

    text = str(value).strip()
    if text.upper() in EMPTY_MARKERS:
        return None

    # Drop currency symbols and spaces ("Rp 1.000,00")
    text = NOT_NUMERIC.sub("", text)

    if DECIMAL_COMMA.search(text):
        text = text.replace(".", "").replace(",", ".")
    else:
        text = text.replace(",", "")
        if text.count(".") > 1:
            text = text.replace(".", "")

    try:
        return Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"Cannot parse number '{value}'") from e


def parse_date(value: Any) -> Optional[date]:
    """
    Parse a date cell.

    Accepts DD/MM/YYYY, YYYY-MM-DD and DD-MM-YYYY strings, date objects,
    and timestamps such as "2024-01-31 00:00:00" that pandas writes for
    real date cells.

    Returns:
        date, or None when the cell is empty or not a valid date
    """
    if is_blank(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    # "2024-01-31 00:00:00" / "2024-01-31T00:00:00"
    text = re.split(r"[ T]", text, maxsplit=1)[0]

    for pattern, order in DATE_PATTERNS:
        match = pattern.match(text)
        if match:
            parts = dict(zip(order, (int(group) for group in match.groups())))
            try:
                return date(parts["year"], parts["month"], parts["day"])
            except ValueError:
                return None
    return None


def parse_status(value: Any) -> Optional[str]:
    """Map free-text status ("dpk", "kurang lancar", ...) to a credit status."""
    if is_blank(value):
        return None
    text = str(value).lower()
    if "lunas" in text:
        return STATUS_PAID_OFF
    if "macet" in text:
        return STATUS_LOSS
    if "diragukan" in text:
        return STATUS_DOUBTFUL
    if "kurang" in text:
        return STATUS_SUBSTANDARD
    if "dalam" in text or "dpk" in text or "perhatian" in text:
        return STATUS_SPECIAL_MENTION
    if "lancar" in text:
        return STATUS_CURRENT
    return None


def parse_collectibility(value: Any) -> Optional[str]:
    """Map a collectibility cell ("1".."5" or a status name) to its code."""
    if is_blank(value):
        return None
    text = str(value).strip()
    # Numeric cells read from Excel may come back as "2.0"
    if text.endswith(".0"):
        text = text[:-2]
    if text in COLLECTIBILITY_CODES:
        return text

    lower = text.lower()
    if "kurang" in lower:
        return "3"
    if "dalam perhatian" in lower or "dpk" in lower:
        return "2"
    if "diragukan" in lower:
        return "4"
    if "macet" in lower:
        return "5"
    if "lancar" in lower:
        return "1"
    return None


def parse_int(value: Any) -> Optional[int]:
    """Parse a whole number cell such as a tenor in months."""
    number = parse_number(value)
    if number is None:
        return None
    return int(number)
