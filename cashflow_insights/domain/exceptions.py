"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class CashflowAPIError(DomainException):
    """Cashflow API returned an error or is unavailable"""

    pass
