"""Domain models for sf_wallet — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, fields
from datetime import datetime


@dataclass
class ProjectWallet:
    id: str
    project_id: str
    virtual_balance: int         # paise, signed
    advance_received: int        # paise, cumulative client-payment credits
    pending_dues: int            # paise, reserved (always 0 today)
    total_loans_given: int       # paise, outstanding lent to other projects
    total_loans_received: int    # paise, outstanding borrowed from other projects
    version: int
    created_at: datetime | None = None
    last_updated: datetime | None = None

    @property
    def net_balance(self) -> int:
        return self.virtual_balance - self.total_loans_received + self.total_loans_given


@dataclass(frozen=True)
class WalletDelta:
    """Signed increments applied to a wallet's counters in one UPDATE."""

    virtual_balance: int = 0
    advance_received: int = 0
    total_loans_given: int = 0
    total_loans_received: int = 0

    def __add__(self, other: "WalletDelta") -> "WalletDelta":
        return WalletDelta(
            virtual_balance=self.virtual_balance + other.virtual_balance,
            advance_received=self.advance_received + other.advance_received,
            total_loans_given=self.total_loans_given + other.total_loans_given,
            total_loans_received=self.total_loans_received + other.total_loans_received,
        )

    def __neg__(self) -> "WalletDelta":
        return WalletDelta(
            virtual_balance=-self.virtual_balance,
            advance_received=-self.advance_received,
            total_loans_given=-self.total_loans_given,
            total_loans_received=-self.total_loans_received,
        )

    @property
    def is_zero(self) -> bool:
        return all(getattr(self, f.name) == 0 for f in fields(self))


def credit_advance(amount: int) -> WalletDelta:
    """Client payment allocated to a project."""
    return WalletDelta(virtual_balance=amount, advance_received=amount)


def lend(amount: int) -> WalletDelta:
    """Lender side of a new cross-project loan."""
    return WalletDelta(virtual_balance=-amount, total_loans_given=amount)


def borrow(amount: int) -> WalletDelta:
    """Borrower side of a new cross-project loan."""
    return WalletDelta(total_loans_received=amount)


def repay_lender(amount: int) -> WalletDelta:
    """Lender side of a (partial) loan settlement."""
    return WalletDelta(virtual_balance=amount, total_loans_given=-amount)


def repay_borrower(amount: int) -> WalletDelta:
    """Borrower side of a (partial) loan settlement."""
    return WalletDelta(total_loans_received=-amount)
