"""
CsvIngestor - turns bank statement CSV exports into canonical transactions

Pipeline per file:
    text → lines → header skip → RowShapeDetector → DateNormalizer / ValueParser
         → Categorizer fallback → Transaction

All files of a batch are merged in input order, deduplicated by identifier
(first occurrence wins) and sorted newest first.
"""

import asyncio
import csv
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from caixa.config.settings import DEFAULT_DESCRIPTION
from caixa.models.transaction import Transaction, sort_newest_first
from caixa.services.categorizer import Categorizer
from caixa.services.dates import normalize_date, today_br
from caixa.services.row_shape import detect_delimiter, detect_shape, has_header, split_row
from caixa.services.values import parse_amount

logger = logging.getLogger(__name__)

ENCODINGS = ('utf-8-sig', 'latin1')


@dataclass
class RejectedRow:
    """A data row that did not become a transaction."""

    source: str
    line_number: int
    reason: str
    raw: str


@dataclass
class ImportResult:
    records: List[Transaction] = field(default_factory=list)
    imported_count: int = 0
    duplicate_count: int = 0
    total_rows_seen: int = 0
    rejected: List[RejectedRow] = field(default_factory=list)
    files: List[str] = field(default_factory=list)

    @property
    def categories(self) -> List[str]:
        """Category labels in first-seen order."""
        seen = []
        for record in self.records:
            if record.category and record.category not in seen:
                seen.append(record.category)
        return seen


class CsvIngestor:
    """
    Parses one or many CSV exports.

    Args:
        categorizer: used when a row has no category column
        clock: returns "now"; drives default dates and synthesized identifiers
    """

    def __init__(self, categorizer: Optional[Categorizer] = None, clock: Callable[[], datetime] = datetime.now):
        self.categorizer = categorizer or Categorizer()
        self.clock = clock

    def parse_text(
        self,
        text: str,
        source: str = 'arquivo',
        now: Optional[datetime] = None,
    ) -> Tuple[List[Transaction], List[RejectedRow], int]:
        """
        Parse one file's contents.

        Args:
            now: ingestion time for default dates and generated identifiers;
                 read from the clock when omitted. ingest() passes one value
                 for the whole batch.

        Returns:
            (records, rejected_rows, data_rows_seen)
        """
        lines = [line.strip() for line in (text or '').splitlines()]
        lines = [line for line in lines if line]
        if not lines:
            return [], [], 0

        delimiter = detect_delimiter(lines[0])
        start = 1 if has_header(lines[0]) else 0

        now = now or self.clock()
        stamp = int(now.timestamp() * 1000)

        records = []
        rejected = []
        for index in range(start, len(lines)):
            row = lines[index]
            record, reason = self._parse_row(row, delimiter, source, index, now, stamp)
            if record is None:
                rejected.append(RejectedRow(source=source, line_number=index + 1, reason=reason, raw=row))
                logger.debug(f"[Pulando] {source}:{index + 1} {reason}: {row!r}")
                continue
            records.append(record)

        return records, rejected, len(lines) - start

    def _parse_row(self, row, delimiter, source, index, now, stamp):
        try:
            columns = split_row(row, delimiter)
        except csv.Error as e:
            return None, f"malformed row ({e})"
        fields = detect_shape(columns, delimiter)
        if fields is None:
            return None, f"unsupported column count ({len(columns)})"

        if fields.date_defaulted:
            date = today_br(now)
        else:
            date = normalize_date(fields.date)
            if date is None:
                return None, f"invalid date {fields.date!r}"

        amount = parse_amount(fields.amount)
        if amount is None:
            return None, f"invalid amount {fields.amount!r}"

        description = fields.description or DEFAULT_DESCRIPTION
        category = fields.category or self.categorizer.categorize(fields.description)
        identifier = fields.identifier or f"csv-{source}-{index}-{stamp}"

        record = Transaction(
            date=date,
            amount=amount,
            identifier=identifier,
            description=description,
            category=category,
            payment_method=fields.payment_method or None,
            counterparty=fields.counterparty or None,
            installment_info=fields.installments or None,
            source_file=source,
        )
        return record, None

    def ingest(self, files: Sequence[Tuple[str, str]]) -> ImportResult:
        """
        Parse and merge (name, text) pairs in the given order.

        Duplicate identifiers across the whole batch are dropped (first one
        wins) and counted.
        """
        result = ImportResult()
        merged = []
        now = self.clock()

        for name, text in files:
            records, rejected, rows_seen = self.parse_text(text, name, now)
            merged.extend(records)
            result.rejected.extend(rejected)
            result.total_rows_seen += rows_seen
            result.files.append(name)
            logger.info(f"[OK] Loaded {name}: {len(records)} rows ({len(rejected)} skipped)")

        unique = {}
        for record in merged:
            if record.identifier in unique:
                result.duplicate_count += 1
                continue
            unique[record.identifier] = record

        result.records = sort_newest_first(unique.values())
        result.imported_count = len(result.records)

        logger.info(
            f"[Import] {result.imported_count} imported, {result.duplicate_count} duplicates, "
            f"{len(result.rejected)} skipped of {result.total_rows_seen} rows"
        )
        return result

    def ingest_paths(self, paths: Iterable) -> ImportResult:
        """Read files from disk and ingest them. Unreadable files are logged and skipped."""
        contents = []
        for path in paths:
            text = read_statement(path)
            if text is not None:
                contents.append((os.path.basename(str(path)), text))
        return self.ingest(contents)

    async def ingest_paths_async(self, paths: Iterable) -> ImportResult:
        """
        Read files concurrently, then merge them strictly in input order.

        asyncio.gather keeps result order equal to argument order, so
        duplicate resolution never depends on which read finished first.
        """
        paths = list(paths)
        texts = await asyncio.gather(*(asyncio.to_thread(read_statement, p) for p in paths))
        contents = [
            (os.path.basename(str(path)), text)
            for path, text in zip(paths, texts)
            if text is not None
        ]
        return self.ingest(contents)

    def load_directory(self, data_dir) -> ImportResult:
        """Ingest every non-hidden .csv file of a folder, in name order."""
        folder = Path(data_dir)
        if not folder.is_dir():
            logger.error(f"[Erro] Folder not found: {folder}")
            return ImportResult()

        files = sorted(
            p for p in folder.iterdir()
            if p.is_file() and not p.name.startswith('.') and p.suffix.lower() == '.csv'
        )
        logger.info(f"[Arquivos] Found {len(files)} files to load in {folder}")
        return self.ingest_paths(files)


def read_statement(path) -> Optional[str]:
    """
    Read a statement file as text, trying UTF-8 first, then latin-1.

    Returns None (and logs) when the file cannot be read.
    """
    for encoding in ENCODINGS:
        try:
            with open(path, 'r', encoding=encoding) as f:
                return f.read()
        except UnicodeDecodeError:
            continue
        except OSError as e:
            logger.error(f"[Erro] Failed to load {path}: {e}")
            return None

    return None
