"""WalletApplicationService — the Wallet Store.

initialize_wallet and get_balance both get-or-create the wallet, so they run
in a transaction; apply_delta is the in-process mutation primitive for
collaborators that need a one-off adjustment outside the ledger flows.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.sf_common.errors import ProjectNotFoundError
from src.sf_common.transaction import run_in_transaction
from src.sf_wallet.application.schemas import BalanceResponse, WalletResponse
from src.sf_wallet.domain.models import ProjectWallet, WalletDelta
from src.sf_wallet.domain.postings import post_deltas
from src.sf_wallet.domain.repository import WalletRepositoryProtocol
from src.sf_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)


class WalletApplicationService:
    def __init__(self, repo: WalletRepositoryProtocol | None = None) -> None:
        self._repo: WalletRepositoryProtocol = repo or WalletRepository()

    async def _ensure(self, db: AsyncSession, project_id: str) -> ProjectWallet:
        wallet = await self._repo.ensure_wallet(db, project_id)
        if wallet is None:
            raise ProjectNotFoundError(project_id)
        return wallet

    async def initialize_wallet(self, db: AsyncSession, project_id: str) -> WalletResponse:
        async def _work() -> ProjectWallet:
            return await self._ensure(db, project_id)

        wallet = await run_in_transaction(db, _work, label="initialize_wallet")
        return WalletResponse.from_wallet(wallet)

    async def get_balance(self, db: AsyncSession, project_id: str) -> BalanceResponse:
        async def _work() -> ProjectWallet:
            return await self._ensure(db, project_id)

        wallet = await run_in_transaction(db, _work, label="get_balance")
        return BalanceResponse.from_wallet(wallet)

    async def apply_delta(
        self, db: AsyncSession, project_id: str, delta: WalletDelta
    ) -> WalletResponse:
        async def _work() -> ProjectWallet:
            wallets = await post_deltas(self._repo, db, [(project_id, delta)])
            return wallets[project_id]

        wallet = await run_in_transaction(db, _work, label="apply_delta")
        logger.info("Wallet %s adjusted by %s", project_id, delta)
        return WalletResponse.from_wallet(wallet)
