"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Project
  2xxx: Wallet
  3xxx: Payment / allocation
  4xxx: Loan / settlement
  5xxx: Validation
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


class NotFoundError(AppError):
    """A referenced project, wallet, payment or loan does not exist."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 404)


class ValidationError(AppError):
    """Caller-supplied amounts are inconsistent. Raised before any write."""

    def __init__(self, message: str, code: int = 5001) -> None:
        super().__init__(code, message, 422)


# --- 1xxx: Project ---

class ProjectNotFoundError(NotFoundError):
    def __init__(self, project_id: str) -> None:
        super().__init__(1001, f"Project not found: {project_id}")


class ProjectExistsError(AppError):
    def __init__(self, project_id: str) -> None:
        super().__init__(1002, f"Project already exists: {project_id}", 409)


# --- 2xxx: Wallet ---

class WalletNotFoundError(NotFoundError):
    def __init__(self, project_id: str) -> None:
        super().__init__(2001, f"Wallet not found for project {project_id}")


# --- 3xxx: Payment ---

class PaymentNotFoundError(NotFoundError):
    def __init__(self, payment_id: str) -> None:
        super().__init__(3001, f"Client payment not found: {payment_id}")


class PaymentAlreadyAllocatedError(AppError):
    def __init__(self, payment_id: str) -> None:
        super().__init__(3002, f"Client payment already allocated: {payment_id}", 409)


# --- 4xxx: Loan ---

class LoanNotFoundError(NotFoundError):
    def __init__(self, transaction_id: str) -> None:
        super().__init__(4001, f"Cross-project transaction not found: {transaction_id}")


class SettlementExceedsOutstandingError(ValidationError):
    def __init__(self, requested: int, outstanding: int) -> None:
        super().__init__(
            f"Settlement amount {requested} paise exceeds outstanding balance "
            f"{outstanding} paise",
            code=4002,
        )


class SelfLoanError(ValidationError):
    def __init__(self, project_id: str) -> None:
        super().__init__(f"Project {project_id} cannot lend to itself", code=4003)


# --- 5xxx: Validation ---

class AllocationMismatchError(ValidationError):
    def __init__(self, label: str, allocated: int, expected: int) -> None:
        super().__init__(
            f"Total {label} ({allocated} paise) doesn't match expected amount "
            f"({expected} paise)",
            code=5002,
        )


# --- 9xxx: System ---

class StoreError(AppError):
    """The record store is unreachable or rejected a write."""

    def __init__(self, detail: str = "Record store unavailable") -> None:
        super().__init__(9001, detail, 503)


class ConcurrentModificationError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(9002, f"Concurrent modification: {detail}", 409)


class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9003, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9004, detail, 500)
