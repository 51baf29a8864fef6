"""
Exceptions raised by caixa
"""


class CaixaError(Exception):
    """Base error for the package."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class InvalidAmountError(CaixaError, ValueError):
    """Manual entry amount could not be parsed."""

    def __init__(self, raw, detail: str = 'Valor inválido'):
        self.raw = raw
        super().__init__(detail)


class InvalidFilterError(CaixaError, ValueError):
    """Unknown period or transaction type value."""
