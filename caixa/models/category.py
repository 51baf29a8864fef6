"""
Category set for caixa
"""

from typing import Iterable, Iterator, List

DEFAULT_CATEGORIES = [
    'Alimentação',
    'Transporte',
    'Saúde',
    'Educação',
    'Moradia',
    'Compras',
    'Lazer',
    'Viagem',
    'Dívidas',
    'Investimentos',
    'Impostos',
    'Serviços',
    'Assinaturas',
    'Pets',
    'Outros',
]


class CategorySet:
    """
    Ordered set of category labels.

    Seeded with a starter list and extended whenever a record brings a
    label that is not known yet. Blank labels are ignored.
    """

    def __init__(self, seed: Iterable[str] = DEFAULT_CATEGORIES):
        self._labels: List[str] = []
        self.extend(seed)

    def __contains__(self, label) -> bool:
        return label in self._labels

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._labels))

    def __len__(self) -> int:
        return len(self._labels)

    def prepend(self, label: str) -> bool:
        """Register a single new label at the front (most recent first)."""
        label = (label or '').strip()
        if not label or label in self._labels:
            return False
        self._labels.insert(0, label)
        return True

    def extend(self, labels: Iterable[str]) -> int:
        """Append unseen labels in encounter order. Returns how many were added."""
        added = 0
        for label in labels:
            label = (label or '').strip()
            if label and label not in self._labels:
                self._labels.append(label)
                added += 1
        return added

    def to_list(self) -> List[str]:
        return list(self._labels)
