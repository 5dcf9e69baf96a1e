"""Integer arithmetic utilities for paise-based fund ledger.

All amounts and balances use int (paise, 1 rupee = 100 paise). No float, no Decimal.
"""

from src.sf_common.errors import AllocationMismatchError, ValidationError

# Largest single amount the API accepts: 10 lakh crore rupees.
MAX_AMOUNT_PAISE = 10**15


def validate_amount(amount: int) -> None:
    """Validate that a ledger amount is a strictly positive number of paise."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValueError(f"Amount must be an integer number of paise, got {amount!r}")
    if amount <= 0:
        raise ValueError(f"Amount must be positive, got {amount}")


def _group_indian(rupees: int) -> str:
    # 12345678 -> '1,23,45,678': last three digits, then pairs
    digits = str(rupees)
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs) + "," + tail


def paise_to_display(paise: int) -> str:
    """Convert paise to display string: 2000000 -> '₹20,000.00', -150 -> '-₹1.50'."""
    sign = "-" if paise < 0 else ""
    abs_paise = -paise if paise < 0 else paise
    return f"{sign}₹{_group_indian(abs_paise // 100)}.{abs_paise % 100:02d}"


def rupees(amount: int) -> int:
    """Whole rupees -> paise: rupees(20000) == 2000000."""
    return amount * 100


def require_exact_total(label: str, amounts: list[int], expected: int) -> None:
    """Raise AllocationMismatchError unless the breakdown sums to `expected` exactly.

    Paise are integral, so there is no rounding tolerance to apply.
    """
    if not amounts:
        raise ValidationError(f"At least one {label} line is required")
    for amount in amounts:
        try:
            validate_amount(amount)
        except ValueError as exc:
            raise ValidationError(f"Invalid {label} line: {exc}") from exc
    total = sum(amounts)
    if total != expected:
        raise AllocationMismatchError(label, total, expected)
