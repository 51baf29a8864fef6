"""
Test logging setup
"""

import io
import logging

from caixa.config import settings
from caixa.config.settings import configure_logging


def test_configure_logging_once(monkeypatch):
    logger = logging.getLogger('caixa')
    monkeypatch.setattr(settings, '_configured', False)
    monkeypatch.setattr(logger, 'handlers', [])
    monkeypatch.setattr(logger, 'level', logger.level)
    monkeypatch.setattr(logger, 'propagate', logger.propagate)

    stream = io.StringIO()
    configure_logging('debug', stream=stream)
    configure_logging('error')

    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG

    logging.getLogger('caixa.services.ingestor').info('[OK] Loaded a.csv: 1 rows')
    assert '[OK] Loaded a.csv' in stream.getvalue()
