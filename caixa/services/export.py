"""
CSV export of transaction lists
"""

import csv
from datetime import date
from typing import Iterable, Optional

import pandas as pd

from caixa.models.transaction import Transaction

DETAILED_HEADER = ['Data', 'Valor', 'Descrição', 'Categoria', 'FormaPagamento', 'Destinatário', 'Parcelas', 'Origem', 'ID']
BASIC_HEADER = ['Data', 'Valor', 'Identificador', 'Descrição']
REPORT_HEADER = ['Data', 'Descrição', 'Categoria', 'Valor', 'Tipo']


def export_csv(records: Iterable[Transaction], detailed: bool = True) -> str:
    """
    Export transactions as a comma-separated file. The header line is plain,
    every data value is quoted.

    Amounts use '.' as decimal separator and two decimals ("-45.90").
    Embedded quotes are doubled.
    """
    if detailed:
        rows = [
            [
                t.date,
                f"{t.amount:.2f}",
                t.description,
                t.category,
                t.payment_method or '',
                t.counterparty or '',
                t.installment_info or '',
                t.source_file or '',
                t.identifier,
            ]
            for t in records
        ]
        header = DETAILED_HEADER
    else:
        rows = [[t.date, f"{t.amount:.2f}", t.identifier, t.description] for t in records]
        header = BASIC_HEADER

    df = pd.DataFrame(rows, columns=header, dtype=str)
    body = df.to_csv(index=False, header=False, quoting=csv.QUOTE_ALL, lineterminator='\n')
    return ','.join(header) + '\n' + body


def export_report(records: Iterable[Transaction]) -> str:
    """
    Semicolon report with absolute amounts in comma decimal and the
    direction spelled out (Entrada / Saída). Values are written as-is and
    only quoted when they contain ';' or a quote.

    Example row:
        15/03/2024;PADARIA CENTRAL;Alimentação;45,90;Saída
    """
    rows = [
        [
            t.date,
            t.description,
            t.category,
            f"{abs(t.amount):.2f}".replace('.', ','),
            'Entrada' if t.amount > 0 else 'Saída',
        ]
        for t in records
    ]
    df = pd.DataFrame(rows, columns=REPORT_HEADER, dtype=str)
    return df.to_csv(sep=';', index=False, quoting=csv.QUOTE_MINIMAL, lineterminator='\n')


def export_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"transacoes_filtradas_{today.strftime('%Y-%m-%d')}.csv"


def report_filename(period, year) -> str:
    period = getattr(period, 'value', period)
    return f"relatorio-financeiro-{period}-{year}.csv"
