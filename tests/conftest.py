"""
Shared fixtures: a fixed clock and a small, hand-checked set of transactions
"""

from datetime import datetime

import pytest

from caixa.models import Transaction
from caixa.services.persistence import MemoryStorage

NOW = datetime(2024, 3, 20, 12, 0)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def sample_records():
    """
    Five records, newest first.

    inflow 3000, outflow 450 (50 + 120 + 80 + 200)
    """
    return [
        Transaction(
            date='19/03/2024', amount=-50.0, identifier='a',
            description='PADARIA CENTRAL', category='Alimentação',
        ),
        Transaction(
            date='10/03/2024', amount=3000.0, identifier='b',
            description='SALARIO EMPRESA X', category='Salário', counterparty='Empresa X',
        ),
        Transaction(
            date='01/03/2024', amount=-120.0, identifier='c',
            description='POSTO SHELL', category='Transporte', payment_method='Cartão',
        ),
        Transaction(
            date='15/02/2024', amount=-80.0, identifier='d',
            description='MERCADO BOM', category='Alimentação',
        ),
        Transaction(
            date='20/12/2023', amount=-200.0, identifier='e',
            description='CINEMA', category='Lazer',
        ),
    ]


@pytest.fixture
def storage():
    return MemoryStorage()
