"""
RowShapeDetector - infers which fields a statement row carries from its column count
"""

import csv
import re
from dataclasses import dataclass
from typing import List, Optional

from caixa.services.categorizer import normalize_text

HEADER_TOKENS = ('DATA', 'VALOR', 'DESCRICAO')

_DATE_LIKE = re.compile(r'^(\d{4}-\d{2}-\d{2}|\d{2}/\d{2}/\d{4})$')
_INTEGER_PART = re.compile(r'^(R\$)?\s*[-+−]?\d+$')
_CENTS_PART = re.compile(r'^\d{1,2}-?$')


@dataclass
class RowFields:
    """Raw field strings picked out of one row, before typing."""

    amount: str
    date: str = ''
    description: str = ''
    identifier: str = ''
    category: str = ''
    payment_method: str = ''
    counterparty: str = ''
    installments: str = ''
    date_defaulted: bool = False


def detect_delimiter(line: str) -> str:
    """Prefer ';' when present, otherwise ','."""
    return ';' if ';' in line else ','


def has_header(first_line: str) -> bool:
    """
    A first line mentioning data/valor/descricao is a header.

    Examples:
        "Data,Valor,Identificador,Descrição" → True
        "15/03/2024,-45,90,id1,PADARIA"      → False
    """
    line = normalize_text(first_line)
    return any(token in line for token in HEADER_TOKENS)


def split_row(line: str, delimiter: str) -> List[str]:
    """
    Split a row into trimmed columns, dropping empty trailing fields.

    Double-quoted fields may contain the delimiter ("LOJA; CENTRO") and
    doubled quotes, as written by export_csv.

    For comma files, a Brazilian amount broken by the delimiter
    ("15/03/2024,-45,90,...") is glued back into one column ("-45,90").

    Raises:
        csv.Error: the row cannot be tokenized
    """
    fields = next(csv.reader([line], delimiter=delimiter, quotechar='"', skipinitialspace=True), [])
    columns = [c.strip() for c in fields]
    while columns and columns[-1] == '':
        columns.pop()

    if delimiter == ',' and _is_split_decimal(columns):
        columns = [columns[0], f"{columns[1]},{columns[2]}"] + columns[3:]

    return columns


def _is_split_decimal(columns: List[str]) -> bool:
    return (
        len(columns) >= 4
        and bool(_DATE_LIKE.match(columns[0]))
        and bool(_INTEGER_PART.match(columns[1]))
        and bool(_CENTS_PART.match(columns[2]))
    )


def looks_like_date(value: str) -> bool:
    return bool(_DATE_LIKE.match(value))


def detect_shape(columns: List[str], delimiter: str = ',') -> Optional[RowFields]:
    """
    Map a split row to semantic fields by column count.

        8+ → date, amount, description, identifier, category, payment, counterparty, installments
        7  → date, amount, identifier, description (rest of the row)
        6  → date, amount, description, identifier, category, payment
        5  → date, amount, description, category, payment
        4  → date, amount, identifier, description
        3  → date, amount, description   (column 0 is a date)
             description, amount, identifier   (otherwise)
        2  → description, amount (date defaults to today)

    Returns None for any other count.
    """
    n = len(columns)

    if n >= 8:
        date, amount, description, identifier, category, payment, counterparty, installments = columns[:8]
        return RowFields(
            date=date, amount=amount, description=description, identifier=identifier,
            category=category, payment_method=payment, counterparty=counterparty,
            installments=installments,
        )
    if n == 7:
        date, amount, identifier = columns[:3]
        description = delimiter.join(columns[3:])
        return RowFields(date=date, amount=amount, identifier=identifier, description=description)
    if n == 6:
        date, amount, description, identifier, category, payment = columns
        return RowFields(
            date=date, amount=amount, description=description, identifier=identifier,
            category=category, payment_method=payment,
        )
    if n == 5:
        date, amount, description, category, payment = columns
        return RowFields(
            date=date, amount=amount, description=description,
            category=category, payment_method=payment,
        )
    if n == 4:
        date, amount, identifier, description = columns
        return RowFields(date=date, amount=amount, identifier=identifier, description=description)
    if n == 3:
        if looks_like_date(columns[0]):
            date, amount, description = columns
            return RowFields(date=date, amount=amount, description=description)
        description, amount, identifier = columns
        return RowFields(description=description, amount=amount, identifier=identifier)
    if n == 2:
        description, amount = columns
        return RowFields(description=description, amount=amount, date_defaulted=True)

    return None
