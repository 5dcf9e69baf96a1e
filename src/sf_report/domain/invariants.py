# src/sf_report/domain/invariants.py
"""Fund-ledger consistency checks run against the live tables."""
import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

_WALLET_CONSERVATION_SQL = text("""
    SELECT COALESCE(SUM(total_loans_given), 0) AS given,
           COALESCE(SUM(total_loans_received), 0) AS received
    FROM project_wallets
""")

_WALLET_VS_LOANS_SQL = text("""
    WITH lent AS (
        SELECT lender_project_id AS project_id, SUM(amount - settled_amount) AS outstanding
        FROM cross_project_transactions
        WHERE status = 'ACTIVE'
        GROUP BY lender_project_id
    ), borrowed AS (
        SELECT borrower_project_id AS project_id, SUM(amount - settled_amount) AS outstanding
        FROM cross_project_transactions
        WHERE status = 'ACTIVE'
        GROUP BY borrower_project_id
    )
    SELECT w.project_id,
           w.total_loans_given,
           COALESCE(l.outstanding, 0) AS lent_outstanding,
           w.total_loans_received,
           COALESCE(b.outstanding, 0) AS borrowed_outstanding
    FROM project_wallets w
    LEFT JOIN lent l ON l.project_id = w.project_id
    LEFT JOIN borrowed b ON b.project_id = w.project_id
    WHERE w.total_loans_given <> COALESCE(l.outstanding, 0)
       OR w.total_loans_received <> COALESCE(b.outstanding, 0)
    ORDER BY w.project_id
""")

_LOAN_STATE_SQL = text("""
    SELECT id, amount, settled_amount, status
    FROM cross_project_transactions
    WHERE settled_amount < 0
       OR settled_amount > amount
       OR (status = 'SETTLED' AND settled_amount <> amount)
       OR (status = 'ACTIVE' AND settled_amount = amount)
    ORDER BY id
""")

_SETTLEMENT_HISTORY_SQL = text("""
    SELECT t.id, t.settled_amount, COALESCE(SUM(s.settlement_amount), 0) AS recorded
    FROM cross_project_transactions t
    LEFT JOIN settlement_records s ON s.transaction_id = t.id
    GROUP BY t.id, t.settled_amount
    HAVING t.settled_amount <> COALESCE(SUM(s.settlement_amount), 0)
    ORDER BY t.id
""")


async def verify_fund_invariants(db: AsyncSession) -> list[str]:
    """Check loan conservation and wallet/loan agreement. Returns violation strings."""
    violations: list[str] = []

    totals = (await db.execute(_WALLET_CONSERVATION_SQL)).one()
    if totals.given != totals.received:
        violations.append(
            f"wallet conservation violated: sum(total_loans_given)={totals.given} "
            f"!= sum(total_loans_received)={totals.received}"
        )

    for row in (await db.execute(_WALLET_VS_LOANS_SQL)).fetchall():
        violations.append(
            f"wallet {row.project_id} out of step with loans: "
            f"given={row.total_loans_given} vs outstanding lent={row.lent_outstanding}, "
            f"received={row.total_loans_received} vs outstanding borrowed="
            f"{row.borrowed_outstanding}"
        )

    for row in (await db.execute(_LOAN_STATE_SQL)).fetchall():
        violations.append(
            f"loan {row.id} inconsistent: amount={row.amount} "
            f"settled={row.settled_amount} status={row.status}"
        )

    for row in (await db.execute(_SETTLEMENT_HISTORY_SQL)).fetchall():
        violations.append(
            f"loan {row.id} settled_amount={row.settled_amount} "
            f"!= sum of settlement records={row.recorded}"
        )

    for msg in violations:
        logger.error(msg)
    return violations
