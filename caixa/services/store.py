"""
TransactionStore - the authoritative in-memory collection of transactions

Writers are serialized by a lock and swap in a new tuple of records; readers
take that tuple as an immutable snapshot, so aggregates computed from it are
never affected by a concurrent import or edit.
"""

import logging
import threading
import uuid
from dataclasses import replace
from typing import Iterable, List, Optional, Tuple

from caixa.config.settings import DEFAULT_CATEGORY, DEFAULT_DESCRIPTION, MANUAL_SOURCE
from caixa.errors import InvalidAmountError
from caixa.models.category import DEFAULT_CATEGORIES, CategorySet
from caixa.models.transaction import Transaction, sort_newest_first
from caixa.services.categorizer import Categorizer, extract_counterparty
from caixa.services.dates import normalize_date, today_br
from caixa.services.ingestor import ImportResult
from caixa.services.persistence import Storage
from caixa.services.values import parse_amount

logger = logging.getLogger(__name__)

OVERWRITE = 'overwrite'
APPEND = 'append'


class TransactionStore:
    """
    Holds transactions and the set of known category labels.

    Every mutation persists the full list through the storage port when
    one is given; a failing save is logged and the in-memory state kept.
    On load, stored records without a category are categorized and records
    without a valid date are skipped.
    """

    def __init__(
        self,
        storage: Optional[Storage] = None,
        seed_categories: Iterable[str] = DEFAULT_CATEGORIES,
        categorizer: Optional[Categorizer] = None,
    ):
        self._lock = threading.RLock()
        self._storage = storage
        self._categorizer = categorizer or Categorizer()
        self._records: Tuple[Transaction, ...] = ()
        self._categories = CategorySet(seed_categories)
        self._load()

    # ---------- reads ----------

    @property
    def records(self) -> Tuple[Transaction, ...]:
        return self._records

    def snapshot(self) -> Tuple[Transaction, ...]:
        """Current records, newest first. Safe to aggregate over."""
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(self._records)

    def get(self, identifier: str) -> Optional[Transaction]:
        for record in self._records:
            if record.identifier == identifier:
                return record
        return None

    def categories(self) -> List[str]:
        with self._lock:
            return self._categories.to_list()

    def years(self) -> List[str]:
        """Years present in the records, newest first."""
        years = {r.year for r in self._records if r.year}
        return sorted(years, key=int, reverse=True)

    # ---------- writes ----------

    def replace_all(self, records: Iterable[Transaction]):
        """Overwrite the whole record set (default import policy)."""
        records = sort_newest_first(records)
        with self._lock:
            self._records = tuple(records)
            self._categories.extend(r.category for r in records)
            self._save()

    def import_result(self, result: ImportResult, policy: str = OVERWRITE) -> int:
        """
        Apply an ingestion result.

        overwrite: the imported records replace everything.
        append: imported records join the existing ones; identifiers already
        in the store win and the newcomers count as duplicates.

        Returns the number of records added.
        """
        if policy == OVERWRITE:
            self.replace_all(result.records)
            return len(result.records)

        if policy != APPEND:
            raise ValueError(f"Unknown import policy: {policy}")

        with self._lock:
            existing = {r.identifier for r in self._records}
            fresh = [r for r in result.records if r.identifier not in existing]
            duplicates = len(result.records) - len(fresh)
            result.duplicate_count += duplicates
            result.imported_count -= duplicates

            self._records = tuple(sort_newest_first(list(self._records) + fresh))
            self._categories.extend(r.category for r in fresh)
            self._save()

        logger.info(f"[Import] Appended {len(fresh)} records ({duplicates} already stored)")
        return len(fresh)

    def add_one(self, record: Transaction):
        """Prepend a record and keep the list sorted newest first."""
        with self._lock:
            if any(r.identifier == record.identifier for r in self._records):
                raise ValueError(f"Duplicate identifier: {record.identifier}")
            self._records = tuple(sort_newest_first((record,) + self._records))
            self._categories.prepend(record.category)
            self._save()

    def add_manual(
        self,
        amount,
        date: Optional[str] = None,
        description: str = '',
        category: str = '',
        payment_method: str = '',
        counterparty: str = '',
        installment_info: str = '',
    ) -> Transaction:
        """
        Create a transaction from form-entry values.

        Raises:
            InvalidAmountError: the amount does not parse; nothing is created.
        """
        value = parse_amount(amount)
        if value is None:
            raise InvalidAmountError(amount)

        record = Transaction(
            date=normalize_date(date) or today_br(),
            amount=value,
            identifier=f"manual-{uuid.uuid4().hex[:12]}",
            description=description or DEFAULT_DESCRIPTION,
            category=category or DEFAULT_CATEGORY,
            payment_method=payment_method or None,
            counterparty=counterparty or None,
            installment_info=installment_info or None,
            source_file=MANUAL_SOURCE,
        )
        self.add_one(record)
        return record

    def reassign_category(self, identifier: str, category: str) -> bool:
        """Change one record's category. No-op (False) if the identifier is unknown."""
        category = (category or '').strip()
        if not category:
            return False

        with self._lock:
            found = False
            updated = []
            for record in self._records:
                if record.identifier == identifier:
                    record = record.with_category(category)
                    found = True
                updated.append(record)

            if not found:
                return False

            self._records = tuple(updated)
            self._categories.prepend(category)
            self._save()
            return True

    def add_category(self, label: str) -> bool:
        with self._lock:
            return self._categories.prepend(label)

    def backfill_categories(self, categorizer: Optional[Categorizer] = None, overwrite: bool = False) -> int:
        """
        Categorize records that have no category (or all records when
        overwrite=True). Returns how many records changed.
        """
        categorizer = categorizer or self._categorizer
        with self._lock:
            changed = 0
            updated = []
            for record in self._records:
                if overwrite or not record.category:
                    category = categorizer.categorize(record.description)
                    if category != record.category:
                        record = record.with_category(category)
                        changed += 1
                updated.append(record)

            if changed:
                self._records = tuple(updated)
                self._categories.extend(r.category for r in updated)
                self._save()
            return changed

    def backfill_counterparties(self) -> int:
        """Fill empty counterparty fields from description patterns."""
        with self._lock:
            changed = 0
            updated = []
            for record in self._records:
                if not record.counterparty:
                    name = extract_counterparty(record.description)
                    if name:
                        record = replace(record, counterparty=name)
                        changed += 1
                updated.append(record)

            if changed:
                self._records = tuple(updated)
                self._save()
            return changed

    def clear(self):
        with self._lock:
            self._records = ()
            self._save()

    # ---------- persistence ----------

    def _load(self):
        if self._storage is None:
            return

        raw = self._storage.load()
        if not raw:
            return

        records = []
        for item in raw:
            try:
                record = Transaction.from_dict(item)
            except (TypeError, ValueError) as e:
                logger.warning(f"[Aviso] Skipping stored record {item!r}: {e}")
                continue

            date = normalize_date(record.date)
            if date is None:
                logger.warning(f"[Aviso] Skipping stored record with invalid date {record.date!r}")
                continue

            if date != record.date or not record.category or not record.description:
                record = replace(
                    record,
                    date=date,
                    description=record.description or DEFAULT_DESCRIPTION,
                    category=record.category or self._categorizer.categorize(record.description),
                )
            records.append(record)

        self._records = tuple(sort_newest_first(records))
        self._categories.extend(r.category for r in self._records)
        logger.info(f"[OK] Loaded {len(self._records)} stored transactions")

    def _save(self):
        if self._storage is None:
            return
        try:
            self._storage.save([r.to_dict() for r in self._records])
        except Exception as e:
            logger.error(f"[Erro] Could not persist transactions: {e}")
