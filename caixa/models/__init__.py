"""
Models package for caixa
"""

from caixa.models.transaction import Transaction, sort_newest_first, sort_oldest_first
from caixa.models.category import CategorySet, DEFAULT_CATEGORIES

__all__ = [
    'Transaction',
    'CategorySet',
    'DEFAULT_CATEGORIES',
    'sort_newest_first',
    'sort_oldest_first',
]
