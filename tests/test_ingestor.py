"""
Test CSV ingestion: row parsing, batch merge, dedup and file loading
"""

import asyncio
from datetime import datetime, timedelta

import pytest

from caixa.models import Transaction
from caixa.services.export import export_csv
from caixa.services.ingestor import CsvIngestor, read_statement


@pytest.fixture
def ingestor(clock):
    return CsvIngestor(clock=clock)


def test_comma_file_with_split_brazilian_amount(ingestor):
    result = ingestor.ingest([('extrato.csv', '15/03/2024,-45,90,id1,PADARIA CENTRAL\n')])

    assert result.imported_count == 1
    record = result.records[0]
    assert record.date == '15/03/2024'
    assert record.amount == pytest.approx(-45.90)
    assert record.identifier == 'id1'
    assert record.description == 'PADARIA CENTRAL'
    assert record.category == 'Alimentação'
    assert record.source_file == 'extrato.csv'


def test_same_identifier_across_files_is_kept_once(ingestor):
    first = ('a.csv', '15/03/2024;-10,00;abc123;PRIMEIRO')
    second = ('b.csv', '16/03/2024;-20,00;abc123;SEGUNDO')

    result = ingestor.ingest([first, second])

    assert [r.identifier for r in result.records] == ['abc123']
    assert result.duplicate_count == 1
    assert result.records[0].description == 'PRIMEIRO'


def test_ingesting_a_file_twice_only_adds_duplicates(ingestor):
    text = (
        'Data;Valor;Identificador;Descrição\n'
        '15/03/2024;-10,00;x1;UBER\n'
        '16/03/2024;-20,00;x2;PADARIA\n'
        '17/03/2024;1.500,00;x3;PIX RECEBIDO\n'
    )
    once = ingestor.ingest([('extrato.csv', text)])
    twice = ingestor.ingest([('extrato.csv', text), ('extrato.csv', text)])

    assert twice.imported_count == once.imported_count == 3
    assert twice.duplicate_count == 3
    assert [r.identifier for r in twice.records] == [r.identifier for r in once.records]


def test_header_is_skipped(ingestor):
    result = ingestor.ingest([('a.csv', 'Data,Valor,Identificador,Descrição\n15/03/2024,-45.90,id1,PADARIA\n')])
    assert result.total_rows_seen == 1
    assert result.records[0].amount == pytest.approx(-45.9)


def test_results_are_sorted_newest_first(ingestor):
    result = ingestor.ingest([
        ('a.csv', '01/01/2024;-1,00;a1;A\n10/02/2024;-1,00;a2;B'),
        ('b.csv', '2024-03-05;-1,00;b1;C'),
    ])
    assert [r.date for r in result.records] == ['05/03/2024', '10/02/2024', '01/01/2024']


def test_rejected_rows_are_counted(ingestor):
    text = '\n'.join([
        '15/03/2024;-10,00;ok1;UBER',
        '15/03/2024;abc;bad1;VALOR RUIM',
        '31/02/2024;-1,00;bad2;DATA RUIM',
        'apenas uma coluna',
        '15/03/2024;-10,00;ok1;DUPLICADO',
    ])
    result = ingestor.ingest([('a.csv', text)])

    assert result.imported_count == 1
    assert result.duplicate_count == 1
    assert len(result.rejected) == 3
    assert result.imported_count + result.duplicate_count + len(result.rejected) == result.total_rows_seen

    reasons = [r.reason for r in result.rejected]
    assert any('amount' in reason for reason in reasons)
    assert any('date' in reason for reason in reasons)
    assert any('column count' in reason for reason in reasons)
    assert result.rejected[0].line_number == 2


def test_two_column_row_gets_today_and_a_generated_identifier(ingestor):
    result = ingestor.ingest([('a.csv', 'UBER TRIP;-25,00')])

    record = result.records[0]
    assert record.date == '20/03/2024'
    assert record.category == 'Transporte'
    assert record.identifier.startswith('csv-a.csv-0-')


def test_generated_identifiers_are_unique_per_row(ingestor):
    result = ingestor.ingest([('a.csv', 'A;-1,00\nB;-2,00\nC;-3,00')])
    assert len({r.identifier for r in result.records}) == 3


def test_generated_identifiers_do_not_depend_on_timing():
    """The clock is read once per batch, so a repeated file still dedups"""
    ticks = (datetime(2024, 3, 20, 12, 0) + timedelta(milliseconds=5 * n) for n in range(100))
    ingestor = CsvIngestor(clock=lambda: next(ticks))
    text = 'UBER;-1,00\nTAXI;-2,00'

    result = ingestor.ingest([('a.csv', text), ('a.csv', text)])

    assert result.imported_count == 2
    assert result.duplicate_count == 2


def test_quoted_field_may_contain_the_delimiter(ingestor):
    result = ingestor.ingest([('a.csv', '15/03/2024;-10,00;x1;"LOJA; CENTRO"')])

    assert result.total_rows_seen == 1
    record = result.records[0]
    assert record.identifier == 'x1'
    assert record.description == 'LOJA; CENTRO'
    assert record.category == 'Compras'


def test_exported_file_reads_back(ingestor):
    records = [
        Transaction('15/03/2024', -45.9, 'id1', 'PADARIA, CENTRAL', 'Alimentação'),
        Transaction('10/03/2024', 1234.5, 'id2', 'Pão "francês"', 'Outros'),
    ]

    result = ingestor.ingest([('export.csv', export_csv(records, detailed=False))])

    assert result.rejected == []
    assert [(r.date, r.amount, r.identifier, r.description) for r in result.records] == [
        ('15/03/2024', -45.9, 'id1', 'PADARIA, CENTRAL'),
        ('10/03/2024', 1234.5, 'id2', 'Pão "francês"'),
    ]
    assert result.records[0].category == 'Alimentação'


def test_category_column_wins_over_keywords(ingestor):
    result = ingestor.ingest([('a.csv', '15/03/2024;-10,00;UBER;Lazer;Pix')])
    record = result.records[0]
    assert record.category == 'Lazer'
    assert record.payment_method == 'Pix'


def test_missing_description_gets_default(ingestor):
    result = ingestor.ingest([('a.csv', '15/03/2024;-10,00;id1;')])
    # trailing empty column dropped: three columns, date first
    assert result.records[0].description == 'id1'

    result = ingestor.ingest([('a.csv', '15/03/2024;-10,00;;Lazer;Pix')])
    assert result.records[0].description == 'Sem descrição'


def test_empty_text(ingestor):
    assert ingestor.parse_text('', 'a.csv') == ([], [], 0)
    assert ingestor.ingest([('a.csv', '\n\n')]).total_rows_seen == 0


def test_result_categories_in_first_seen_order(ingestor):
    result = ingestor.ingest([('a.csv', '15/03/2024;-1,00;u1;UBER\n14/03/2024;-1,00;p1;PADARIA\n13/03/2024;-1,00;u2;TAXI')])
    assert result.categories == ['Transporte', 'Alimentação']


def test_load_directory(ingestor, tmp_path):
    (tmp_path / 'b.csv').write_text('16/03/2024;-2,00;b1;B', encoding='utf-8')
    (tmp_path / 'a.csv').write_text('15/03/2024;-1,00;a1;A', encoding='utf-8')
    (tmp_path / '.oculto.csv').write_text('15/03/2024;-1,00;h1;H', encoding='utf-8')
    (tmp_path / 'notas.txt').write_text('15/03/2024;-1,00;t1;T', encoding='utf-8')

    result = ingestor.load_directory(tmp_path)

    assert result.files == ['a.csv', 'b.csv']
    assert {r.identifier for r in result.records} == {'a1', 'b1'}


def test_load_directory_missing_folder(ingestor, tmp_path):
    result = ingestor.load_directory(tmp_path / 'nao-existe')
    assert result.records == []
    assert result.files == []


def test_async_ingest_merges_in_input_order(ingestor, tmp_path):
    first = tmp_path / 'z.csv'
    second = tmp_path / 'a.csv'
    first.write_text('15/03/2024;-1,00;same;PRIMEIRO', encoding='utf-8')
    second.write_text('15/03/2024;-1,00;same;SEGUNDO', encoding='utf-8')

    result = asyncio.run(ingestor.ingest_paths_async([first, second]))

    assert result.files == ['z.csv', 'a.csv']
    assert result.duplicate_count == 1
    assert result.records[0].description == 'PRIMEIRO'


def test_read_statement_falls_back_to_latin1(tmp_path):
    path = tmp_path / 'latin.csv'
    path.write_bytes('15/03/2024;-1,00;l1;AÇOUGUE SÃO JOSÉ'.encode('latin1'))
    assert read_statement(path) == '15/03/2024;-1,00;l1;AÇOUGUE SÃO JOSÉ'


def test_read_statement_missing_file(tmp_path):
    assert read_statement(tmp_path / 'nada.csv') is None
