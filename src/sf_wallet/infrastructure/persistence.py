"""WalletRepository — concrete implementation of WalletRepositoryProtocol.

Counters are only ever changed by `UPDATE ... SET x = x + :delta RETURNING`,
never overwritten with a value computed in Python.

Transaction ownership: the CALLER (application service) starts and commits
the transaction via `run_in_transaction`.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sf_common.errors import WalletNotFoundError
from src.sf_wallet.domain.models import ProjectWallet, WalletDelta

_WALLET_COLUMNS = """
    id, project_id, virtual_balance, advance_received, pending_dues,
    total_loans_given, total_loans_received, version, created_at, last_updated
"""

# Unknown project → no row inserted → the follow-up SELECT returns nothing.
_ENSURE_WALLET_SQL = text("""
    INSERT INTO project_wallets (project_id)
    SELECT p.id FROM projects p WHERE p.id = :project_id
    ON CONFLICT (project_id) DO NOTHING
""")

_GET_WALLET_SQL = text(f"""
    SELECT {_WALLET_COLUMNS}
    FROM project_wallets
    WHERE project_id = :project_id
""")

_LOCK_WALLETS_SQL = text(f"""
    SELECT {_WALLET_COLUMNS}
    FROM project_wallets
    WHERE project_id = ANY(:project_ids)
    ORDER BY project_id
    FOR UPDATE
""")

_APPLY_DELTA_SQL = text(f"""
    UPDATE project_wallets
    SET virtual_balance      = virtual_balance      + :virtual_balance,
        advance_received     = advance_received     + :advance_received,
        total_loans_given    = total_loans_given    + :total_loans_given,
        total_loans_received = total_loans_received + :total_loans_received,
        version = version + 1,
        last_updated = NOW()
    WHERE project_id = :project_id
    RETURNING {_WALLET_COLUMNS}
""")

_LIST_WALLETS_SQL = text(f"""
    SELECT {_WALLET_COLUMNS}
    FROM project_wallets
    ORDER BY project_id
""")


def _row_to_wallet(row: object) -> ProjectWallet:
    return ProjectWallet(
        id=str(row.id),  # type: ignore[attr-defined]
        project_id=row.project_id,  # type: ignore[attr-defined]
        virtual_balance=row.virtual_balance,  # type: ignore[attr-defined]
        advance_received=row.advance_received,  # type: ignore[attr-defined]
        pending_dues=row.pending_dues,  # type: ignore[attr-defined]
        total_loans_given=row.total_loans_given,  # type: ignore[attr-defined]
        total_loans_received=row.total_loans_received,  # type: ignore[attr-defined]
        version=row.version,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        last_updated=row.last_updated,  # type: ignore[attr-defined]
    )


class WalletRepository:
    """Concrete repository — all mutations atomic at the SQL level."""

    async def ensure_wallet(
        self, db: AsyncSession, project_id: str
    ) -> ProjectWallet | None:
        await db.execute(_ENSURE_WALLET_SQL, {"project_id": project_id})
        return await self.get_wallet(db, project_id)

    async def get_wallet(
        self, db: AsyncSession, project_id: str
    ) -> ProjectWallet | None:
        result = await db.execute(_GET_WALLET_SQL, {"project_id": project_id})
        row = result.fetchone()
        return _row_to_wallet(row) if row else None

    async def lock_wallets(
        self, db: AsyncSession, project_ids: list[str]
    ) -> dict[str, ProjectWallet]:
        result = await db.execute(_LOCK_WALLETS_SQL, {"project_ids": list(project_ids)})
        wallets = {w.project_id: w for w in (_row_to_wallet(r) for r in result.fetchall())}
        for project_id in project_ids:
            if project_id not in wallets:
                raise WalletNotFoundError(project_id)
        return wallets

    async def apply_delta(
        self, db: AsyncSession, project_id: str, delta: WalletDelta
    ) -> ProjectWallet:
        result = await db.execute(
            _APPLY_DELTA_SQL,
            {
                "project_id": project_id,
                "virtual_balance": delta.virtual_balance,
                "advance_received": delta.advance_received,
                "total_loans_given": delta.total_loans_given,
                "total_loans_received": delta.total_loans_received,
            },
        )
        row = result.fetchone()
        if row is None:
            raise WalletNotFoundError(project_id)
        return _row_to_wallet(row)

    async def list_wallets(self, db: AsyncSession) -> list[ProjectWallet]:
        result = await db.execute(_LIST_WALLETS_SQL)
        return [_row_to_wallet(row) for row in result.fetchall()]
