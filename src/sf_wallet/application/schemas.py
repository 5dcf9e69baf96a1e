"""Pydantic schemas for the wallet API."""

from pydantic import BaseModel

from src.sf_common.money import paise_to_display
from src.sf_wallet.domain.models import ProjectWallet


class BalanceResponse(BaseModel):
    project_id: str
    virtual_balance_paise: int
    virtual_balance_display: str
    advance_received_paise: int
    pending_dues_paise: int
    total_loans_given_paise: int
    total_loans_received_paise: int
    net_balance_paise: int
    net_balance_display: str

    @classmethod
    def from_wallet(cls, wallet: ProjectWallet) -> "BalanceResponse":
        return cls(
            project_id=wallet.project_id,
            virtual_balance_paise=wallet.virtual_balance,
            virtual_balance_display=paise_to_display(wallet.virtual_balance),
            advance_received_paise=wallet.advance_received,
            pending_dues_paise=wallet.pending_dues,
            total_loans_given_paise=wallet.total_loans_given,
            total_loans_received_paise=wallet.total_loans_received,
            net_balance_paise=wallet.net_balance,
            net_balance_display=paise_to_display(wallet.net_balance),
        )


class WalletResponse(BalanceResponse):
    wallet_id: str
    version: int
    last_updated: str  # ISO8601 string

    @classmethod
    def from_wallet(cls, wallet: ProjectWallet) -> "WalletResponse":
        balance = BalanceResponse.from_wallet(wallet)
        return cls(
            **balance.model_dump(),
            wallet_id=wallet.id,
            version=wallet.version,
            last_updated=wallet.last_updated.isoformat() if wallet.last_updated else "",
        )
