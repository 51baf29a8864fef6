"""
FilterEngine - composable period / year / category / type / search filters
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable, List, Optional, Union

from dateutil.relativedelta import relativedelta

from caixa.errors import InvalidFilterError
from caixa.models.transaction import Transaction, sort_newest_first
from caixa.services.dates import to_datetime

ALL = 'todos'
_ALL_VALUES = (ALL, 'all', '', None)


class Period(str, Enum):
    ALL = 'todos'
    LAST_7D = '7d'
    LAST_15D = '15d'
    LAST_30D = '30d'
    LAST_90D = '90d'
    THIS_MONTH = 'mensal'
    THIS_YEAR = 'anual'

    @classmethod
    def parse(cls, value: Union['Period', str, None]) -> 'Period':
        if isinstance(value, cls):
            return value
        key = (value or ALL).strip().lower()
        key = _PERIOD_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise InvalidFilterError(f"Unknown period: {value!r}") from None


_PERIOD_ALIASES = {
    'all': 'todos',
    'last-7d': '7d',
    'last-15d': '15d',
    'last-30d': '30d',
    'last-90d': '90d',
    'this-month': 'mensal',
    'this-year': 'anual',
}

_PERIOD_DAYS = {
    Period.LAST_7D: 7,
    Period.LAST_15D: 15,
    Period.LAST_30D: 30,
    Period.LAST_90D: 90,
}


class TransactionType(str, Enum):
    ALL = 'todos'
    INFLOW = 'entradas'
    OUTFLOW = 'saidas'

    @classmethod
    def parse(cls, value: Union['TransactionType', str, None]) -> 'TransactionType':
        if isinstance(value, cls):
            return value
        key = (value or ALL).strip().lower()
        key = {'all': 'todos', 'inflow': 'entradas', 'outflow': 'saidas'}.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise InvalidFilterError(f"Unknown transaction type: {value!r}") from None


@dataclass(frozen=True)
class FilterOptions:
    """Filter configuration. Every field defaults to its no-op value."""

    period: Period = Period.ALL
    year: str = ALL
    category: str = ALL
    type: TransactionType = TransactionType.ALL
    search_term: str = ''

    @classmethod
    def build(cls, period=None, year=None, category=None, type=None, search_term=None) -> 'FilterOptions':
        """Create options from loose values (strings from a form, None for "todos")."""
        return cls(
            period=Period.parse(period),
            year=str(year) if year not in _ALL_VALUES else ALL,
            category=category if category not in _ALL_VALUES else ALL,
            type=TransactionType.parse(type),
            search_term=search_term or '',
        )


def period_start(period: Period, now: datetime) -> Optional[datetime]:
    """
    Start of the window for a period, or None for "todos".

    Day-count periods are wall-clock (now minus N days); mensal and anual
    anchor at midnight of the 1st of the month / year.
    """
    period = Period.parse(period)
    if period is Period.ALL:
        return None
    if period in _PERIOD_DAYS:
        return now - timedelta(days=_PERIOD_DAYS[period])

    midnight = relativedelta(hour=0, minute=0, second=0, microsecond=0)
    if period is Period.THIS_MONTH:
        return now + relativedelta(day=1) + midnight
    return now + relativedelta(month=1, day=1) + midnight


def filter_transactions(
    records: Iterable[Transaction],
    options: Optional[FilterOptions] = None,
    now: Optional[datetime] = None,
) -> List[Transaction]:
    """
    Apply all filters (AND) and return matches newest first.

    Args:
        records: any iterable of transactions (a store snapshot)
        options: FilterOptions; defaults match everything
        now: evaluation time for period windows, defaults to datetime.now()
    """
    options = options or FilterOptions()
    now = now or datetime.now()

    start = period_start(options.period, now)
    category = options.category if options.category not in _ALL_VALUES else ALL
    year = str(options.year) if options.year not in _ALL_VALUES else ALL
    tx_type = TransactionType.parse(options.type)
    term = (options.search_term or '').strip().lower()

    def keep(t: Transaction) -> bool:
        if start is not None:
            when = to_datetime(t.date)
            if when is None or when < start or when > now:
                return False
        if year != ALL and t.year != year:
            return False
        if category != ALL and t.category != category:
            return False
        if tx_type is TransactionType.INFLOW and not t.amount > 0:
            return False
        if tx_type is TransactionType.OUTFLOW and not t.amount < 0:
            return False
        if term and not _matches(t, term):
            return False
        return True

    return sort_newest_first(t for t in records if keep(t))


def _matches(t: Transaction, term: str) -> bool:
    fields = (t.description, t.category, t.counterparty, t.payment_method)
    return any(term in (value or '').lower() for value in fields)


def available_years(records: Iterable[Transaction]) -> List[str]:
    """['todos', newest year, ..., oldest year] for the year selector."""
    years = {t.year for t in records if t.year}
    return [ALL] + sorted(years, key=int, reverse=True)


def year_options(now: Optional[datetime] = None) -> List[str]:
    """Current year and the five before it, plus 'todos'."""
    current = (now or datetime.now()).year
    return [str(y) for y in range(current, current - 6, -1)] + [ALL]
