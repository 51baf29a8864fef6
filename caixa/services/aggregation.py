"""
AggregationEngine - dashboard figures computed over a set of transactions

Every function takes a plain sequence of Transaction records (a filtered view
or a store snapshot) and builds a DataFrame internally.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

import pandas as pd

from caixa.config.settings import TOP_COUNTERPARTIES_LIMIT
from caixa.models.transaction import Transaction
from caixa.services.filters import Period

COLUMNS = ['date', 'amount', 'identifier', 'description', 'category', 'counterparty', 'timestamp']

INFLOW = 'entrada'
OUTFLOW = 'saida'


@dataclass(frozen=True)
class Totals:
    inflow: float
    outflow: float
    balance: float


@dataclass(frozen=True)
class CategoryShare:
    label: str
    total: float
    percent: float


@dataclass(frozen=True)
class BalancePoint:
    period_key: str
    balance: float


@dataclass(frozen=True)
class CounterpartySummary:
    name: str
    count: int
    total: float
    direction: str


@dataclass(frozen=True)
class SpendingSummary:
    total_spent: float
    expense_count: int
    average_expense: float
    largest_expense: float
    first_date: Optional[str]
    last_date: Optional[str]


@dataclass(frozen=True)
class DailyTotal:
    date: str
    total: float


def to_frame(records: Iterable[Transaction]) -> pd.DataFrame:
    """One row per record, input order preserved."""
    rows = [
        {
            'date': t.date,
            'amount': float(t.amount),
            'identifier': t.identifier,
            'description': t.description,
            'category': t.category or '',
            'counterparty': t.counterparty,
            'timestamp': t.timestamp,
        }
        for t in records
    ]
    df = pd.DataFrame(rows, columns=COLUMNS)
    df['amount'] = df['amount'].astype(float)
    return df


def totals(records: Iterable[Transaction]) -> Totals:
    """
    inflow  = sum of positive amounts
    outflow = sum of |negative amounts|
    balance = inflow - outflow
    """
    df = to_frame(records)
    inflow = float(df.loc[df['amount'] > 0, 'amount'].sum())
    outflow = float(df.loc[df['amount'] < 0, 'amount'].abs().sum())
    return Totals(inflow=inflow, outflow=outflow, balance=inflow - outflow)


def category_breakdown(records: Iterable[Transaction], sort_by_total: bool = True) -> List[CategoryShare]:
    """
    Sum of |amount| per category and its share of the grand total.

    Percentages are rounded to 2 decimals. Sorted by total, descending, unless
    sort_by_total=False (first-seen order).
    """
    df = to_frame(records)
    if df.empty:
        return []

    df['absolute'] = df['amount'].abs()
    grouped = df.groupby('category', sort=False, dropna=False)['absolute'].sum()
    if sort_by_total:
        grouped = grouped.sort_values(ascending=False, kind='stable')

    grand_total = grouped.sum()
    shares = []
    for label, total in grouped.items():
        percent = round(total / grand_total * 100, 2) if grand_total > 0 else 0.0
        shares.append(CategoryShare(label=label, total=float(total), percent=float(percent)))
    return shares


def running_balance(records: Iterable[Transaction]) -> List[BalancePoint]:
    """
    Cumulative balance over ALL given records, one point per MM/YYYY.

    Records are swept oldest first; each point holds the running total after
    the last record of its month. Points appear in the order their month key
    is first met during the sweep.
    """
    df = to_frame(records)
    if df.empty:
        return []

    df = df.sort_values('timestamp', kind='stable')
    df['balance'] = df['amount'].cumsum()
    df['period_key'] = df['date'].str.slice(3)

    last = df.groupby('period_key', sort=False)['balance'].last()
    return [BalancePoint(period_key=key, balance=round(float(value), 2)) for key, value in last.items()]


def top_counterparties(records: Iterable[Transaction], limit: int = TOP_COUNTERPARTIES_LIMIT) -> List[CounterpartySummary]:
    """
    Most frequent counterparties.

    The group key is the counterparty field, or the description when there is
    none, cut to 40 characters. Direction comes from the first record seen
    for the group. Sorted by count, descending.

    Example:
        Fulano: -10, -20, +5 → name="Fulano", count=3, total=35, direction="saida"
    """
    df = to_frame(records)
    if df.empty:
        return []

    key = df['counterparty'].where(df['counterparty'].notna() & (df['counterparty'] != ''), df['description'])
    df['name'] = key.astype(str).str.slice(0, 40)
    df['absolute'] = df['amount'].abs()

    grouped = df.groupby('name', sort=False).agg(
        count=('amount', 'size'),
        total=('absolute', 'sum'),
        first_amount=('amount', 'first'),
    )
    grouped = grouped.sort_values('count', ascending=False, kind='stable').head(limit)

    return [
        CounterpartySummary(
            name=name,
            count=int(row['count']),
            total=float(row['total']),
            direction=INFLOW if row['first_amount'] > 0 else OUTFLOW,
        )
        for name, row in grouped.iterrows()
    ]


def elapsed_days_in_year(now: Optional[datetime] = None) -> int:
    """Whole days since Jan 1 of the current year, at least 1."""
    now = now or datetime.now()
    start = datetime(now.year, 1, 1)
    return max(1, (now - start).days)


def yearly_projection(period, inflow: float, outflow: float, now: Optional[datetime] = None) -> Totals:
    """
    Extrapolate year-to-date totals to 365 days for the anual period.

    Every other period returns the given totals unscaled.
    """
    if Period.parse(period) is not Period.THIS_YEAR:
        return Totals(inflow=inflow, outflow=outflow, balance=inflow - outflow)

    days = elapsed_days_in_year(now)
    daily_in = inflow / days
    daily_out = outflow / days
    return Totals(
        inflow=daily_in * 365,
        outflow=daily_out * 365,
        balance=(daily_in - daily_out) * 365,
    )


def spending_summary(records: Iterable[Transaction]) -> SpendingSummary:
    """Totals over expenses only, plus the date range covered by all records."""
    df = to_frame(records)
    if df.empty:
        return SpendingSummary(0.0, 0, 0.0, 0.0, None, None)

    expenses = df.loc[df['amount'] < 0, 'amount'].abs()
    count = int(expenses.size)
    total = round(float(expenses.sum()), 2)

    dated = df[df['timestamp'] != 0].sort_values('timestamp', kind='stable')
    first_date = dated['date'].iloc[0] if not dated.empty else None
    last_date = dated['date'].iloc[-1] if not dated.empty else None

    return SpendingSummary(
        total_spent=total,
        expense_count=count,
        average_expense=round(total / count, 2) if count else 0.0,
        largest_expense=round(float(expenses.max()), 2) if count else 0.0,
        first_date=first_date,
        last_date=last_date,
    )


def daily_outflows(records: Iterable[Transaction]) -> List[DailyTotal]:
    """Sum of |amount| of expenses per day, oldest day first."""
    df = to_frame(records)
    df = df[df['amount'] < 0]
    if df.empty:
        return []

    df = df.assign(absolute=df['amount'].abs()).sort_values('timestamp', kind='stable')
    per_day = df.groupby('date', sort=False)['absolute'].sum()
    return [DailyTotal(date=day, total=round(float(value), 2)) for day, value in per_day.items()]
