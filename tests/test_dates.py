"""
Test date normalization and timestamps
"""

from datetime import datetime

import pytest

from caixa.services.dates import normalize_date, to_datetime, to_timestamp, today_br


@pytest.mark.parametrize('raw, expected', [
    ('15/03/2024', '15/03/2024'),
    ('2024-03-15', '15/03/2024'),
    ('5.3.2024', '05/03/2024'),
    ('5-3-2024', '05/03/2024'),
    (' 01/12/2023 ', '01/12/2023'),
])
def test_normalize_date(raw, expected):
    assert normalize_date(raw) == expected


@pytest.mark.parametrize('raw', ['', None, 'ontem', '31/02/2024', '2024-13-01', '15/03/24'])
def test_normalize_date_rejects(raw):
    assert normalize_date(raw) is None


@pytest.mark.parametrize('day, month, year', [(1, 1, 2000), (29, 2, 2024), (31, 12, 1999), (15, 3, 2024)])
def test_iso_and_brazilian_forms_agree(day, month, year):
    iso = f"{year:04d}-{month:02d}-{day:02d}"
    br = f"{day:02d}/{month:02d}/{year:04d}"
    assert normalize_date(iso) == normalize_date(br) == br


def test_to_timestamp():
    assert to_timestamp('01/01/1970') == 0
    assert to_timestamp('02/01/1970') == 86400
    assert to_timestamp('16/03/2024') - to_timestamp('15/03/2024') == 86400


def test_to_timestamp_malformed_is_zero():
    assert to_timestamp('not a date') == 0
    assert to_timestamp('') == 0


def test_to_datetime_and_today():
    assert to_datetime('15/03/2024') == datetime(2024, 3, 15)
    assert to_datetime('15-03-2024') is None
    assert today_br(datetime(2024, 3, 5, 23, 59)) == '05/03/2024'
