"""Repository Protocol — dependency inversion for testability.

Unit tests inject an in-memory implementation conforming to this Protocol.
Infrastructure layer provides the PostgreSQL implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sf_wallet.domain.models import ProjectWallet, WalletDelta


class WalletRepositoryProtocol(Protocol):
    async def ensure_wallet(
        self, db: AsyncSession, project_id: str
    ) -> ProjectWallet | None:
        """Get-or-create. None means the project itself does not exist."""
        ...

    async def get_wallet(
        self, db: AsyncSession, project_id: str
    ) -> ProjectWallet | None: ...

    async def lock_wallets(
        self, db: AsyncSession, project_ids: list[str]
    ) -> dict[str, ProjectWallet]: ...

    async def apply_delta(
        self, db: AsyncSession, project_id: str, delta: WalletDelta
    ) -> ProjectWallet: ...

    async def list_wallets(self, db: AsyncSession) -> list[ProjectWallet]: ...
