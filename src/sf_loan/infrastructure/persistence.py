"""LoanRepository — expenses, cross-project transactions, settlement records.

Loan settlement is a guarded `UPDATE ... WHERE version = :version AND
settled_amount + :amount <= amount RETURNING`. A result of 0 rows means the
loan moved underneath us (or would overflow) and the caller must retry.

Transaction ownership: the CALLER (application service) starts and commits
the transaction via `run_in_transaction`.
"""

import json

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sf_common.enums import LoanRole
from src.sf_common.errors import InternalError
from src.sf_loan.domain.models import ExpenseRecord, Loan, PaymentSource, SettlementRecord

_EXPENSE_COLUMNS = """
    id, project_id, expense_type, description, category, amount, expense_date,
    paid_via_cross_project, payment_sources, created_at
"""

_LOAN_COLUMNS = """
    id, lender_project_id, borrower_project_id, amount, settled_amount,
    expense_id, expense_type, description, txn_date, status, version,
    last_settlement_at, settled_at, created_at
"""

_SETTLEMENT_COLUMNS = """
    id, transaction_id, lender_project_id, borrower_project_id,
    settlement_amount, settlement_type, reference, notes, settled_at
"""

_INSERT_EXPENSE_SQL = text(f"""
    INSERT INTO expenses
        (id, project_id, expense_type, description, category, amount, expense_date,
         paid_via_cross_project, payment_sources)
    VALUES
        (:id, :project_id, :expense_type, :description, :category, :amount, :expense_date,
         :paid_via_cross_project, CAST(:payment_sources AS JSONB))
    RETURNING {_EXPENSE_COLUMNS}
""")

_INSERT_LOAN_SQL = text(f"""
    INSERT INTO cross_project_transactions
        (id, lender_project_id, borrower_project_id, amount, settled_amount,
         expense_id, expense_type, description, txn_date, status)
    VALUES
        (:id, :lender_project_id, :borrower_project_id, :amount, 0,
         :expense_id, :expense_type, :description, :txn_date, 'ACTIVE')
    RETURNING {_LOAN_COLUMNS}
""")

_GET_LOAN_SQL = text(f"""
    SELECT {_LOAN_COLUMNS} FROM cross_project_transactions WHERE id = :id
""")

_GET_LOAN_FOR_UPDATE_SQL = text(f"""
    SELECT {_LOAN_COLUMNS} FROM cross_project_transactions WHERE id = :id FOR UPDATE
""")

_LOCK_ACTIVE_FOR_BORROWER_SQL = text(f"""
    SELECT {_LOAN_COLUMNS}
    FROM cross_project_transactions
    WHERE borrower_project_id = :borrower_project_id
      AND status = 'ACTIVE'
    ORDER BY txn_date ASC, id ASC
    FOR UPDATE
""")

_APPLY_SETTLEMENT_SQL = text(f"""
    UPDATE cross_project_transactions
    SET settled_amount = settled_amount + :amount,
        status = CASE WHEN settled_amount + :amount = amount
                      THEN 'SETTLED' ELSE status END,
        settled_at = CASE WHEN settled_amount + :amount = amount
                          THEN NOW() ELSE settled_at END,
        last_settlement_at = NOW(),
        version = version + 1
    WHERE id = :id
      AND version = :expected_version
      AND status = 'ACTIVE'
      AND settled_amount + :amount <= amount
    RETURNING {_LOAN_COLUMNS}
""")

_INSERT_SETTLEMENT_SQL = text(f"""
    INSERT INTO settlement_records
        (transaction_id, lender_project_id, borrower_project_id,
         settlement_amount, settlement_type, reference, notes)
    VALUES
        (:transaction_id, :lender_project_id, :borrower_project_id,
         :settlement_amount, :settlement_type, :reference, :notes)
    RETURNING {_SETTLEMENT_COLUMNS}
""")

_LIST_LOANS_SQL = text(f"""
    SELECT {_LOAN_COLUMNS}
    FROM cross_project_transactions
    WHERE (CAST(:lender AS VARCHAR) IS NULL OR lender_project_id = CAST(:lender AS VARCHAR))
      AND (CAST(:borrower AS VARCHAR) IS NULL
           OR borrower_project_id = CAST(:borrower AS VARCHAR))
      AND (CAST(:either AS VARCHAR) IS NULL
           OR lender_project_id = CAST(:either AS VARCHAR)
           OR borrower_project_id = CAST(:either AS VARCHAR))
      AND (CAST(:status AS VARCHAR) IS NULL OR status = CAST(:status AS VARCHAR))
    ORDER BY txn_date ASC, id ASC
""")

_LIST_SETTLEMENTS_SQL = text(f"""
    SELECT {_SETTLEMENT_COLUMNS}
    FROM settlement_records
    WHERE transaction_id = :transaction_id
    ORDER BY id ASC
""")


def _sources_from_json(raw: object) -> list[PaymentSource]:
    items = json.loads(raw) if isinstance(raw, str) else (raw or [])
    return [PaymentSource(project_id=i["project_id"], amount=int(i["amount"])) for i in items]


def _row_to_expense(row: object) -> ExpenseRecord:
    return ExpenseRecord(
        id=row.id,  # type: ignore[attr-defined]
        project_id=row.project_id,  # type: ignore[attr-defined]
        expense_type=row.expense_type,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        category=row.category,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        expense_date=row.expense_date,  # type: ignore[attr-defined]
        paid_via_cross_project=row.paid_via_cross_project,  # type: ignore[attr-defined]
        payment_sources=_sources_from_json(row.payment_sources),  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _row_to_loan(row: object) -> Loan:
    return Loan(
        id=row.id,  # type: ignore[attr-defined]
        lender_project_id=row.lender_project_id,  # type: ignore[attr-defined]
        borrower_project_id=row.borrower_project_id,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        settled_amount=row.settled_amount,  # type: ignore[attr-defined]
        expense_id=row.expense_id,  # type: ignore[attr-defined]
        expense_type=row.expense_type,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        txn_date=row.txn_date,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        version=row.version,  # type: ignore[attr-defined]
        last_settlement_at=row.last_settlement_at,  # type: ignore[attr-defined]
        settled_at=row.settled_at,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _row_to_settlement(row: object) -> SettlementRecord:
    return SettlementRecord(
        id=row.id,  # type: ignore[attr-defined]
        transaction_id=row.transaction_id,  # type: ignore[attr-defined]
        lender_project_id=row.lender_project_id,  # type: ignore[attr-defined]
        borrower_project_id=row.borrower_project_id,  # type: ignore[attr-defined]
        settlement_amount=row.settlement_amount,  # type: ignore[attr-defined]
        settlement_type=row.settlement_type,  # type: ignore[attr-defined]
        reference=row.reference,  # type: ignore[attr-defined]
        notes=row.notes,  # type: ignore[attr-defined]
        settled_at=row.settled_at,  # type: ignore[attr-defined]
    )


class LoanRepository:
    async def insert_expense(
        self, db: AsyncSession, expense: ExpenseRecord
    ) -> ExpenseRecord:
        sources = [{"project_id": s.project_id, "amount": s.amount} for s in expense.payment_sources]
        result = await db.execute(
            _INSERT_EXPENSE_SQL,
            {
                "id": expense.id,
                "project_id": expense.project_id,
                "expense_type": expense.expense_type,
                "description": expense.description,
                "category": expense.category,
                "amount": expense.amount,
                "expense_date": expense.expense_date,
                "paid_via_cross_project": expense.paid_via_cross_project,
                "payment_sources": json.dumps(sources),
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Expense insert returned no rows — this should never happen")
        return _row_to_expense(row)

    async def insert_loan(self, db: AsyncSession, loan: Loan) -> Loan:
        result = await db.execute(
            _INSERT_LOAN_SQL,
            {
                "id": loan.id,
                "lender_project_id": loan.lender_project_id,
                "borrower_project_id": loan.borrower_project_id,
                "amount": loan.amount,
                "expense_id": loan.expense_id,
                "expense_type": loan.expense_type,
                "description": loan.description,
                "txn_date": loan.txn_date,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Loan insert returned no rows — this should never happen")
        return _row_to_loan(row)

    async def get_loan(
        self, db: AsyncSession, loan_id: str, for_update: bool = False
    ) -> Loan | None:
        sql = _GET_LOAN_FOR_UPDATE_SQL if for_update else _GET_LOAN_SQL
        result = await db.execute(sql, {"id": loan_id})
        row = result.fetchone()
        return _row_to_loan(row) if row else None

    async def lock_active_loans_for_borrower(
        self, db: AsyncSession, borrower_project_id: str
    ) -> list[Loan]:
        result = await db.execute(
            _LOCK_ACTIVE_FOR_BORROWER_SQL, {"borrower_project_id": borrower_project_id}
        )
        return [_row_to_loan(row) for row in result.fetchall()]

    async def apply_settlement(
        self, db: AsyncSession, loan_id: str, amount: int, expected_version: int
    ) -> Loan | None:
        result = await db.execute(
            _APPLY_SETTLEMENT_SQL,
            {"id": loan_id, "amount": amount, "expected_version": expected_version},
        )
        row = result.fetchone()
        return _row_to_loan(row) if row else None

    async def insert_settlement(
        self, db: AsyncSession, record: SettlementRecord
    ) -> SettlementRecord:
        result = await db.execute(
            _INSERT_SETTLEMENT_SQL,
            {
                "transaction_id": record.transaction_id,
                "lender_project_id": record.lender_project_id,
                "borrower_project_id": record.borrower_project_id,
                "settlement_amount": record.settlement_amount,
                "settlement_type": record.settlement_type,
                "reference": record.reference,
                "notes": record.notes,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Settlement insert returned no rows — this should never happen")
        return _row_to_settlement(row)

    async def list_loans(
        self,
        db: AsyncSession,
        project_id: str | None = None,
        role: str | None = None,
        status: str | None = None,
    ) -> list[Loan]:
        params: dict[str, str | None] = {
            "lender": None,
            "borrower": None,
            "either": None,
            "status": status,
        }
        if project_id is not None:
            if role == LoanRole.LENDER:
                params["lender"] = project_id
            elif role == LoanRole.BORROWER:
                params["borrower"] = project_id
            else:
                params["either"] = project_id
        result = await db.execute(_LIST_LOANS_SQL, params)
        return [_row_to_loan(row) for row in result.fetchall()]

    async def list_settlements(
        self, db: AsyncSession, transaction_id: str
    ) -> list[SettlementRecord]:
        result = await db.execute(_LIST_SETTLEMENTS_SQL, {"transaction_id": transaction_id})
        return [_row_to_settlement(row) for row in result.fetchall()]
