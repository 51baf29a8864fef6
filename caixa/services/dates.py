"""
Date normalization to the canonical DD/MM/YYYY representation
"""

import re
from datetime import date, datetime
from typing import Optional

_BR_DATE = re.compile(r'^\d{2}/\d{2}/\d{4}$')
_ISO_DATE = re.compile(r'^\d{4}-\d{2}-\d{2}$')
_GENERIC_DATE = re.compile(r'(\d{1,2})\D(\d{1,2})\D(\d{4})')

_EPOCH = datetime(1970, 1, 1)


def normalize_date(raw: Optional[str]) -> Optional[str]:
    """
    Normalize a date string to DD/MM/YYYY.

    Returns None when no known pattern matches or when the result is not
    a real calendar date.

    Examples:
        "15/03/2024" → "15/03/2024"
        "2024-03-15" → "15/03/2024"
        "5.3.2024"   → "05/03/2024"
        "31/02/2024" → None
    """
    if not raw:
        return None

    s = str(raw).strip()

    if _BR_DATE.match(s):
        result = s
    elif _ISO_DATE.match(s):
        y, m, d = s.split('-')
        result = f"{d}/{m}/{y}"
    else:
        match = _GENERIC_DATE.search(s)
        if not match:
            return None
        day, month, year = match.groups()
        result = f"{day.zfill(2)}/{month.zfill(2)}/{year}"

    if to_date(result) is None:
        return None
    return result


def to_date(ddmmyyyy: str) -> Optional[date]:
    """Parse a canonical DD/MM/YYYY string into a date, or None."""
    parts = str(ddmmyyyy).split('/')
    if len(parts) != 3:
        return None
    try:
        d, m, y = (int(p) for p in parts)
        return date(y, m, d)
    except ValueError:
        return None


def to_timestamp(ddmmyyyy: str) -> float:
    """
    Seconds since the epoch for a DD/MM/YYYY date (naive, timezone independent).

    Returns 0 for malformed input. Callers sorting by this value must treat
    0 as "unsortable", not as 01/01/1970.
    """
    parsed = to_date(ddmmyyyy)
    if parsed is None:
        return 0
    return (datetime(parsed.year, parsed.month, parsed.day) - _EPOCH).total_seconds()


def to_datetime(ddmmyyyy: str) -> Optional[datetime]:
    """Midnight datetime for a DD/MM/YYYY date, or None."""
    parsed = to_date(ddmmyyyy)
    if parsed is None:
        return None
    return datetime(parsed.year, parsed.month, parsed.day)


def format_date(value: date) -> str:
    return value.strftime('%d/%m/%Y')


def today_br(now: Optional[datetime] = None) -> str:
    """Today's date as DD/MM/YYYY."""
    return format_date(now or datetime.now())
