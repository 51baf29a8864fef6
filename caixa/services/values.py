"""
Amount parsing for bank statement exports
Handles Brazilian (1.234,56) and plain (1234.56) numbers
"""

import math
import re
from typing import Optional, Union

_CURRENCY_PREFIX = re.compile(r'^(R\$|\$)')
_BR_GROUPED = re.compile(r'\d+\.\d{3}(?:\.\d{3})*,\d{1,2}$')
_BR_DECIMAL = re.compile(r'^\d+,\d{1,2}$')
_US_GROUPED = re.compile(r'\d{1,3}(?:,\d{3})+\.\d+')


def parse_amount(raw: Union[str, int, float, None]) -> Optional[float]:
    """
    Parse a locale-ambiguous amount into a signed float.

    Returns None when the value cannot be read as a finite number.

    Examples:
        "R$ 1.234,56" → 1234.56
        "-89,90"      → -89.9
        "45-"         → -45.0
    """
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, (int, float)):
        value = float(raw)
        return value if math.isfinite(value) else None

    s = str(raw).strip()
    if not s:
        return None

    s = re.sub(r'\s', '', s)
    s = _CURRENCY_PREFIX.sub('', s)
    s = s.replace('−', '-')

    negative = s.startswith('-') or s.endswith('-')
    s = re.sub(r'^-|-$|\+', '', s)

    if _BR_GROUPED.search(s) or ('.' in s and ',' in s):
        s = s.replace('.', '').replace(',', '.', 1)
    elif _BR_DECIMAL.match(s):
        s = s.replace(',', '.')
    elif _US_GROUPED.search(s):
        s = s.replace(',', '')

    if '_' in s:
        return None

    try:
        value = float(s)
    except ValueError:
        return None

    if not math.isfinite(value):
        return None

    return -abs(value) if negative else value


def format_brl_number(value: float) -> str:
    """
    Format a number the pt-BR way, without currency symbol.

    Examples:
        1234.56  → "1.234,56"
        -89.9    → "-89,90"
    """
    grouped = f"{abs(value):,.2f}"
    # swap separators: 1,234.56 → 1.234,56
    grouped = grouped.replace(',', '_').replace('.', ',').replace('_', '.')
    return f"-{grouped}" if value < 0 else grouped


def format_brl(value: float) -> str:
    """Format as Brazilian Real currency, e.g. "R$ 1.234,56" / "-R$ 10,00"."""
    text = f"R$ {format_brl_number(abs(value))}"
    return f"-{text}" if value < 0 else text
