"""
Config package for caixa
"""

from caixa.config import settings
from caixa.config.settings import configure_logging

__all__ = [
    'settings',
    'configure_logging',
]
