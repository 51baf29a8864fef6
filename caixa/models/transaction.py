"""
Transaction model for caixa
"""

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Iterable, List, Optional

from caixa.services.dates import to_timestamp

# Persisted JSON keys, kept compatible with the dashboard's stored format
_FIELD_TO_KEY = {
    'date': 'data',
    'amount': 'valor',
    'identifier': 'identificador',
    'description': 'descricao',
    'category': 'categoria',
    'payment_method': 'formaPagamento',
    'counterparty': 'destinatario',
    'installment_info': 'parcelas',
    'source_file': 'origemArquivo',
}
_KEY_TO_FIELD = {v: k for k, v in _FIELD_TO_KEY.items()}


@dataclass(frozen=True)
class Transaction:
    """
    Canonical transaction record

    amount > 0 is an inflow, amount < 0 an outflow. date is always DD/MM/YYYY.
    """

    date: str
    amount: float
    identifier: str
    description: str
    category: str
    payment_method: Optional[str] = None
    counterparty: Optional[str] = None
    installment_info: Optional[str] = None
    source_file: Optional[str] = None

    @property
    def timestamp(self) -> float:
        return to_timestamp(self.date)

    @property
    def year(self) -> str:
        parts = self.date.split('/')
        return parts[2] if len(parts) == 3 else ''

    @property
    def month_key(self) -> str:
        """MM/YYYY key used by the balance timeline."""
        parts = self.date.split('/')
        return f"{parts[1]}/{parts[2]}" if len(parts) == 3 else ''

    @property
    def is_inflow(self) -> bool:
        return self.amount > 0

    @property
    def is_outflow(self) -> bool:
        return self.amount < 0

    def with_category(self, category: str) -> 'Transaction':
        return replace(self, category=category)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the persisted (Portuguese) keys, omitting empty optionals."""
        data = {}
        for field_name, value in asdict(self).items():
            if value is None:
                continue
            data[_FIELD_TO_KEY[field_name]] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Transaction':
        """
        Build a Transaction from persisted keys or attribute names.

        A missing description or category comes back empty; date and
        identifier are required.
        """
        values = {}
        for key, value in data.items():
            field_name = _KEY_TO_FIELD.get(key, key)
            if field_name in _FIELD_TO_KEY:
                values[field_name] = value
        values['amount'] = float(values.get('amount', 0.0))
        values.setdefault('description', '')
        values.setdefault('category', '')
        return cls(**values)


def sort_newest_first(records: Iterable[Transaction]) -> List[Transaction]:
    """Stable sort, descending by date."""
    return sorted(records, key=lambda t: t.timestamp, reverse=True)


def sort_oldest_first(records: Iterable[Transaction]) -> List[Transaction]:
    """Stable sort, ascending by date."""
    return sorted(records, key=lambda t: t.timestamp)
