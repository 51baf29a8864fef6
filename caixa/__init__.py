"""
caixa - personal cash-flow ingestion and analysis for Brazilian bank statement exports
"""

from caixa.errors import CaixaError, InvalidAmountError, InvalidFilterError
from caixa.models import CategorySet, DEFAULT_CATEGORIES, Transaction
from caixa.services.categorizer import Categorizer, extract_counterparty
from caixa.services.filters import FilterOptions, Period, TransactionType, filter_transactions
from caixa.services.ingestor import CsvIngestor, ImportResult
from caixa.services.persistence import JsonFileStorage, MemoryStorage
from caixa.services.store import TransactionStore

__version__ = '0.1.0'

__all__ = [
    'CaixaError',
    'InvalidAmountError',
    'InvalidFilterError',
    'Transaction',
    'CategorySet',
    'DEFAULT_CATEGORIES',
    'Categorizer',
    'extract_counterparty',
    'CsvIngestor',
    'ImportResult',
    'FilterOptions',
    'Period',
    'TransactionType',
    'filter_transactions',
    'JsonFileStorage',
    'MemoryStorage',
    'TransactionStore',
]
