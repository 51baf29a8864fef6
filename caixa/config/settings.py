"""
Configuration for caixa
Uses environment variables with fallback defaults
"""

import logging
import os
import sys
from typing import Optional

# Persistence
STORAGE_PATH = os.getenv(
    'CAIXA_STORAGE_PATH',
    os.path.join(os.path.expanduser('~'), '.caixa', 'transacoes.json'),
)
STORAGE_KEY = os.getenv('CAIXA_STORAGE_KEY', 'uli_transacoes_v4_improved')

# Folder scanned for statement exports
DATA_DIR = os.getenv(
    'CAIXA_DATA_DIR',
    os.path.join(os.path.expanduser('~'), 'Downloads', 'risoflora-finance'),
)

LOG_LEVEL = os.getenv('CAIXA_LOG_LEVEL', 'INFO')
TOP_COUNTERPARTIES_LIMIT = int(os.getenv('CAIXA_TOP_LIMIT', '5'))

# Record defaults
DEFAULT_DESCRIPTION = 'Sem descrição'
DEFAULT_CATEGORY = 'Outros'
MANUAL_SOURCE = 'Manual'

_LOGGER_NAME = 'caixa'
_configured = False


def configure_logging(level: Optional[str] = None, stream=None) -> None:
    """
    Attach a single stream handler to the package logger.

    Safe to call more than once; only the first call has an effect.
    Library modules only call logging.getLogger(__name__).
    """
    global _configured
    if _configured:
        return

    level_name = (level or LOG_LEVEL).upper()
    numeric = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter('%(asctime)s %(name)s %(levelname)s %(message)s'))

    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(numeric)
    logger.addHandler(handler)
    logger.propagate = False

    _configured = True
