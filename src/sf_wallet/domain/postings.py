"""Apply a set of wallet deltas as one locked unit.

Used by every context that moves money between wallets. Must run inside the
caller's transaction (see src.sf_common.transaction.run_in_transaction).
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.sf_common.errors import ProjectNotFoundError
from src.sf_wallet.domain.models import ProjectWallet, WalletDelta
from src.sf_wallet.domain.repository import WalletRepositoryProtocol

logger = logging.getLogger(__name__)


def merge_deltas(postings: list[tuple[str, WalletDelta]]) -> dict[str, WalletDelta]:
    """Collapse (project_id, delta) pairs into one delta per project."""
    merged: dict[str, WalletDelta] = {}
    for project_id, delta in postings:
        merged[project_id] = merged.get(project_id, WalletDelta()) + delta
    return merged


async def ensure_wallets(
    repo: WalletRepositoryProtocol, db: AsyncSession, project_ids: list[str]
) -> None:
    """Create any missing wallet. Raises ProjectNotFoundError for unknown projects."""
    for project_id in sorted(set(project_ids)):
        if await repo.ensure_wallet(db, project_id) is None:
            raise ProjectNotFoundError(project_id)


async def post_deltas(
    repo: WalletRepositoryProtocol,
    db: AsyncSession,
    postings: list[tuple[str, WalletDelta]],
) -> dict[str, ProjectWallet]:
    """Lock every affected wallet (ascending project id), then apply deltas.

    Lock order is global, so two operations touching the same pair of
    wallets queue behind each other instead of deadlocking.
    """
    merged = merge_deltas(postings)
    project_ids = sorted(merged)
    await ensure_wallets(repo, db, project_ids)
    wallets = await repo.lock_wallets(db, project_ids)
    for project_id in project_ids:
        delta = merged[project_id]
        if delta.is_zero:
            continue
        wallets[project_id] = await repo.apply_delta(db, project_id, delta)
        logger.debug("wallet %s += %s", project_id, delta)
    return wallets
