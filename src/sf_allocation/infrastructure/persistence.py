"""AllocationRepository — client payments and payment allocations.

Transaction ownership: the CALLER (application service) starts and commits
the transaction via `run_in_transaction`.
"""

from datetime import date

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sf_allocation.domain.models import ClientPayment, PaymentAllocation
from src.sf_common.errors import InternalError, PaymentNotFoundError

_PAYMENT_COLUMNS = """
    id, project_id, amount, payment_date, received_by, payer, method, notes,
    is_multi_project, is_allocated, allocation_date, allocation_notes, created_at
"""

_ALLOCATION_COLUMNS = """
    id, payment_id, project_id, amount, description, allocation_date, created_at
"""

_INSERT_PAYMENT_SQL = text(f"""
    INSERT INTO client_payments
        (id, project_id, amount, payment_date, received_by, payer, method, notes,
         is_multi_project, is_allocated, allocation_date, allocation_notes)
    VALUES
        (:id, :project_id, :amount, :payment_date, :received_by, :payer, :method, :notes,
         :is_multi_project, :is_allocated, :allocation_date, :allocation_notes)
    RETURNING {_PAYMENT_COLUMNS}
""")

_GET_PAYMENT_SQL = text(f"""
    SELECT {_PAYMENT_COLUMNS} FROM client_payments WHERE id = :id
""")

_GET_PAYMENT_FOR_UPDATE_SQL = text(f"""
    SELECT {_PAYMENT_COLUMNS} FROM client_payments WHERE id = :id FOR UPDATE
""")

_MARK_ALLOCATED_SQL = text(f"""
    UPDATE client_payments
    SET is_allocated = TRUE,
        allocation_date = :allocation_date,
        allocation_notes = :allocation_notes
    WHERE id = :id
    RETURNING {_PAYMENT_COLUMNS}
""")

_DELETE_PAYMENT_SQL = text("DELETE FROM client_payments WHERE id = :id")

_INSERT_ALLOCATION_SQL = text(f"""
    INSERT INTO payment_allocations
        (id, payment_id, project_id, amount, description, allocation_date)
    VALUES
        (:id, :payment_id, :project_id, :amount, :description, :allocation_date)
    RETURNING {_ALLOCATION_COLUMNS}
""")

_LIST_BY_PAYMENT_SQL = text(f"""
    SELECT {_ALLOCATION_COLUMNS}
    FROM payment_allocations
    WHERE payment_id = :payment_id
    ORDER BY id
""")

_LIST_BY_PROJECT_SQL = text(f"""
    SELECT {_ALLOCATION_COLUMNS}
    FROM payment_allocations
    WHERE project_id = :project_id
    ORDER BY allocation_date DESC, id DESC
""")

_DELETE_ALLOCATIONS_SQL = text(
    "DELETE FROM payment_allocations WHERE payment_id = :payment_id"
)


def _row_to_payment(row: object) -> ClientPayment:
    return ClientPayment(
        id=row.id,  # type: ignore[attr-defined]
        project_id=row.project_id,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        payment_date=row.payment_date,  # type: ignore[attr-defined]
        received_by=row.received_by,  # type: ignore[attr-defined]
        payer=row.payer,  # type: ignore[attr-defined]
        method=row.method,  # type: ignore[attr-defined]
        notes=row.notes,  # type: ignore[attr-defined]
        is_multi_project=row.is_multi_project,  # type: ignore[attr-defined]
        is_allocated=row.is_allocated,  # type: ignore[attr-defined]
        allocation_date=row.allocation_date,  # type: ignore[attr-defined]
        allocation_notes=row.allocation_notes,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _row_to_allocation(row: object) -> PaymentAllocation:
    return PaymentAllocation(
        id=row.id,  # type: ignore[attr-defined]
        payment_id=row.payment_id,  # type: ignore[attr-defined]
        project_id=row.project_id,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        allocation_date=row.allocation_date,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class AllocationRepository:
    async def insert_payment(
        self, db: AsyncSession, payment: ClientPayment
    ) -> ClientPayment:
        result = await db.execute(
            _INSERT_PAYMENT_SQL,
            {
                "id": payment.id,
                "project_id": payment.project_id,
                "amount": payment.amount,
                "payment_date": payment.payment_date,
                "received_by": payment.received_by,
                "payer": payment.payer,
                "method": payment.method,
                "notes": payment.notes,
                "is_multi_project": payment.is_multi_project,
                "is_allocated": payment.is_allocated,
                "allocation_date": payment.allocation_date,
                "allocation_notes": payment.allocation_notes,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Payment insert returned no rows — this should never happen")
        return _row_to_payment(row)

    async def get_payment(
        self, db: AsyncSession, payment_id: str, for_update: bool = False
    ) -> ClientPayment | None:
        sql = _GET_PAYMENT_FOR_UPDATE_SQL if for_update else _GET_PAYMENT_SQL
        result = await db.execute(sql, {"id": payment_id})
        row = result.fetchone()
        return _row_to_payment(row) if row else None

    async def mark_allocated(
        self, db: AsyncSession, payment_id: str, allocation_date: date, notes: str | None
    ) -> ClientPayment:
        result = await db.execute(
            _MARK_ALLOCATED_SQL,
            {"id": payment_id, "allocation_date": allocation_date, "allocation_notes": notes},
        )
        row = result.fetchone()
        if row is None:
            raise PaymentNotFoundError(payment_id)
        return _row_to_payment(row)

    async def delete_payment(self, db: AsyncSession, payment_id: str) -> None:
        await db.execute(_DELETE_PAYMENT_SQL, {"id": payment_id})

    async def insert_allocation(
        self, db: AsyncSession, allocation: PaymentAllocation
    ) -> PaymentAllocation:
        result = await db.execute(
            _INSERT_ALLOCATION_SQL,
            {
                "id": allocation.id,
                "payment_id": allocation.payment_id,
                "project_id": allocation.project_id,
                "amount": allocation.amount,
                "description": allocation.description,
                "allocation_date": allocation.allocation_date,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Allocation insert returned no rows — this should never happen")
        return _row_to_allocation(row)

    async def list_allocations_by_payment(
        self, db: AsyncSession, payment_id: str
    ) -> list[PaymentAllocation]:
        result = await db.execute(_LIST_BY_PAYMENT_SQL, {"payment_id": payment_id})
        return [_row_to_allocation(row) for row in result.fetchall()]

    async def list_allocations_by_project(
        self, db: AsyncSession, project_id: str
    ) -> list[PaymentAllocation]:
        result = await db.execute(_LIST_BY_PROJECT_SQL, {"project_id": project_id})
        return [_row_to_allocation(row) for row in result.fetchall()]

    async def delete_allocations(self, db: AsyncSession, payment_id: str) -> int:
        result = await db.execute(_DELETE_ALLOCATIONS_SQL, {"payment_id": payment_id})
        return int(result.rowcount or 0)
