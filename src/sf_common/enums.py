"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class LoanStatus(str, Enum):
    ACTIVE = "ACTIVE"
    SETTLED = "SETTLED"


class SettlementType(str, Enum):
    """How a settlement record came about."""
    AUTO = "AUTO"
    AUTO_PARTIAL = "AUTO_PARTIAL"
    MANUAL = "MANUAL"


class ExpenseType(str, Enum):
    """Which expense collection a record belongs to."""
    MATERIAL = "MATERIAL"
    LABOUR = "LABOUR"
    EXPENSE = "EXPENSE"


class LoanRole(str, Enum):
    """Side of a loan a project is on when listing loans."""
    LENDER = "LENDER"
    BORROWER = "BORROWER"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    BANK_TRANSFER = "BANK_TRANSFER"
    CHEQUE = "CHEQUE"
    UPI = "UPI"
    OTHER = "OTHER"


# Marker project id stored on client payments split across several projects
MULTI_PROJECT = "MULTI_PROJECT"
