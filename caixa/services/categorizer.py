"""
Keyword categorization engine for caixa
Maps a free-text description to a single category label
"""

from typing import Iterable, List, Optional, Tuple

from caixa.config.settings import DEFAULT_CATEGORY


# Evaluated top to bottom, first match wins. SUPERMERCADO/MERCADO appear
# twice; the Alimentação entries always match first.
KEYWORD_RULES: List[Tuple[str, str]] = [
    ('TABACARIA', 'Tabaco'),
    ('PANIFICADORA', 'Alimentação'),
    ('PADARIA', 'Alimentação'),
    ('RESTAURANTE', 'Alimentação'),
    ('LANCHONETE', 'Alimentação'),
    ('MERCADO', 'Alimentação'),
    ('SUPERMERCADO', 'Alimentação'),
    ('HORTIFRUTI', 'Alimentação'),
    ('ACOUGUE', 'Alimentação'),
    ('UBER', 'Transporte'),
    ('TAXI', 'Transporte'),
    ('POSTO', 'Transporte'),
    ('COMBUSTIVEL', 'Transporte'),
    ('ESTACIONAMENTO', 'Transporte'),
    ('FARMACIA', 'Saúde'),
    ('DROGARIA', 'Saúde'),
    ('HOSPITAL', 'Saúde'),
    ('CLINICA', 'Saúde'),
    ('DENTISTA', 'Saúde'),
    ('CINEMA', 'Entretenimento'),
    ('SHOPPING', 'Entretenimento'),
    ('LOJA', 'Compras'),
    ('SUPERMERCADO', 'Compras'),
    ('MERCADO', 'Compras'),
    ('PIX', 'Transferência'),
    ('TED', 'Transferência'),
    ('DOC', 'Transferência'),
    ('TRANSFERENCIA', 'Transferência'),
    ('SAUDE', 'Saúde'),
    ('EDUCACAO', 'Educação'),
    ('ESCOLA', 'Educação'),
    ('FACULDADE', 'Educação'),
    ('INTERNET', 'Utilidades'),
    ('AGUA', 'Utilidades'),
    ('LUZ', 'Utilidades'),
    ('TELEFONE', 'Utilidades'),
]

TRANSFER_FALLBACK = ('PIX', 'TED', 'DOC', 'TRANSF')
PURCHASE_FALLBACK = ('LOJA', 'SUPER', 'MERCAD')

_ACCENTS = {
    'Á': 'A', 'À': 'A', 'Ã': 'A', 'Â': 'A',
    'É': 'E', 'Ê': 'E',
    'Í': 'I',
    'Ó': 'O', 'Ô': 'O', 'Õ': 'O',
    'Ú': 'U', 'Ü': 'U',
    'Ç': 'C'
}


def normalize_text(text: Optional[str]) -> str:
    """Normalize text for matching (uppercase, remove accents, strip)"""
    if not text:
        return ""

    text = str(text).upper()
    for accented, plain in _ACCENTS.items():
        text = text.replace(accented, plain)

    return text.strip()


class Categorizer:
    """
    Ordered keyword matcher.

    1. First (keyword, category) pair whose keyword is a substring of the
       description wins
    2. Transfer terms fall back to Transferência
    3. Store/market terms fall back to Compras
    4. Everything else is Outros
    """

    def __init__(self, rules: Optional[Iterable[Tuple[str, str]]] = None):
        source = KEYWORD_RULES if rules is None else rules
        self._rules: List[Tuple[str, str]] = [
            (normalize_text(keyword), category) for keyword, category in source
        ]

    @property
    def rules(self) -> List[Tuple[str, str]]:
        return list(self._rules)

    def add_rule(self, keyword: str, category: str, first: bool = False):
        """
        Add a keyword rule. By default it goes last (lowest priority);
        first=True makes it win over every existing rule.
        """
        rule = (normalize_text(keyword), category)
        if not rule[0]:
            return
        if first:
            self._rules.insert(0, rule)
        else:
            self._rules.append(rule)

    def remove_rule(self, keyword: str) -> bool:
        """Removes every rule for a keyword. Returns False if none existed."""
        if not keyword:
            return False
        key = normalize_text(keyword)
        before = len(self._rules)
        self._rules = [rule for rule in self._rules if rule[0] != key]
        return len(self._rules) < before

    def categorize(self, description: Optional[str]) -> str:
        desc = normalize_text(description)
        if not desc:
            return DEFAULT_CATEGORY

        for keyword, category in self._rules:
            if keyword in desc:
                return category

        if any(term in desc for term in TRANSFER_FALLBACK):
            return 'Transferência'

        if any(term in desc for term in PURCHASE_FALLBACK):
            return 'Compras'

        return DEFAULT_CATEGORY


def extract_counterparty(description: Optional[str]) -> Optional[str]:
    """
    Guess the other party of a transaction from its description.

    Common patterns in Brazilian statements:
        "PIX ENVIADO - Maria Silva (CPF 123)"  → "Maria Silva"
        "Transferência para João"              → "João"
        "PAGO POR EMPRESA X"                   → "EMPRESA X"

    Names longer than 25 characters are cut and suffixed with "...".
    Returns None when no pattern applies.
    """
    if not description:
        return None

    desc = str(description)
    name = None

    if ' - ' in desc:
        parts = desc.split(' - ')
        name = parts[1].split(' (')[0].split(' CNPJ:')[0]
    elif 'para ' in desc:
        name = desc.split('para ', 1)[1].split(' - ')[0]
    elif 'POR ' in desc:
        name = desc.split('POR ', 1)[1].split(' - ')[0]

    if name is None:
        return None

    name = name.strip()
    if not name:
        return None
    if len(name) > 25:
        name = name[:25] + '...'
    return name
